"""modelrelay.config.loader

Chargement de la configuration TOML.

Note d'architecture:
- Le package `config/` est consommé par `providers/` et par la gateway.
- Il ne doit pas dépendre de `providers/*` afin d'éviter les imports circulaires.
"""
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.exceptions import ConfigurationMissing

CONFIG_ENV_VAR = "MODELRELAY_CONFIG"

# Cache global de configuration
_config_cache: Optional[Dict[str, Any]] = None


def _expand_env_vars(obj: Any) -> Any:
    """
    Récursivement étend les variables d'environnement ${VAR} dans la config.

    Les variables inconnues sont laissées telles quelles.
    """
    if isinstance(obj, str):
        def replace_env_var(match):
            var_name = match.group(1)
            return os.environ.get(var_name, match.group(0))
        return re.sub(r'\$\{([^}]+)\}', replace_env_var, obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def _clear_config_cache():
    """Vide le cache de configuration."""
    global _config_cache
    _config_cache = None


def _default_config_path() -> str:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return env_path
    # Structure: project/src/modelrelay/config/loader.py
    current_file = os.path.abspath(__file__)
    project_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(current_file))))
    return os.path.join(project_dir, "config.toml")


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Charge la configuration depuis config.toml.

    Args:
        config_path: Chemin vers le fichier config (optionnel, sinon
            $MODELRELAY_CONFIG puis config.toml à la racine du projet)

    Returns:
        Dictionnaire de configuration

    Raises:
        ConfigurationMissing: Si le fichier n'existe pas
    """
    global _config_cache

    if _config_cache is not None:
        return _config_cache

    if config_path is None:
        config_path = _default_config_path()

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationMissing(
            message=f"Fichier de configuration non trouvé: {config_path}",
            config_key="config_path"
        )

    try:
        import tomllib
    except ImportError:
        import tomli as tomllib

    with open(path, "rb") as f:
        raw_config = tomllib.load(f)
    _config_cache = _expand_env_vars(raw_config)
    return _config_cache


def reload_config(config_path: str = None) -> Dict[str, Any]:
    """Recharge la configuration depuis le fichier."""
    _clear_config_cache()
    return load_config(config_path)


def get_config() -> Dict[str, Any]:
    """Retourne la configuration en cache (chargée au premier appel)."""
    if _config_cache is None:
        return load_config()
    return _config_cache
