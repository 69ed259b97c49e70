"""
Dataclasses pour la configuration.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.constants import DEFAULT_TIMEOUT


@dataclass
class ProviderSettings:
    """Table [providers.<nom>] du fichier de configuration."""
    name: str
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    chat_endpoint: Optional[str] = None
    image_endpoint: Optional[str] = None
    default_model: Optional[str] = None
    default_image_model: Optional[str] = None
    referrer: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    model_aliases: Dict[str, Any] = field(default_factory=dict)
    proxies: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "ProviderSettings":
        """Crée une instance depuis un dictionnaire."""
        return cls(
            name=name,
            base_url=data.get("base_url") or None,
            api_key=data.get("api_key") or None,
            chat_endpoint=data.get("chat_endpoint") or None,
            image_endpoint=data.get("image_endpoint") or None,
            default_model=data.get("default_model") or None,
            default_image_model=data.get("default_image_model") or None,
            referrer=data.get("referrer") or None,
            headers=dict(data.get("headers", {})),
            model_aliases=dict(data.get("model_aliases", {})),
            proxies=list(data.get("proxies", [])),
        )

    def to_options(self) -> Dict[str, Any]:
        """Options d'adapter (seules les valeurs renseignées sont transmises)."""
        options = {
            "base_url": self.base_url,
            "api_key": self.api_key,
            "chat_endpoint": self.chat_endpoint,
            "image_endpoint": self.image_endpoint,
            "default_model": self.default_model,
            "default_image_model": self.default_image_model,
            "referrer": self.referrer,
            "extra_headers": self.headers or None,
            "model_aliases": self.model_aliases or None,
            "proxies": self.proxies or None,
        }
        return {k: v for k, v in options.items() if v is not None}


@dataclass
class Settings:
    """Configuration globale de l'application."""
    default_provider: str = "pollinations"
    timeout: float = DEFAULT_TIMEOUT
    providers: Dict[str, ProviderSettings] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Settings":
        """Crée une instance depuis la configuration chargée."""
        providers = {
            key.lower(): ProviderSettings.from_dict(key.lower(), data)
            for key, data in config.get("providers", {}).items()
        }
        return cls(
            default_provider=config.get("default_provider", "pollinations"),
            timeout=float(config.get("timeout", DEFAULT_TIMEOUT)),
            providers=providers,
        )

    def get_provider(self, key: str) -> Optional[ProviderSettings]:
        """Récupère un provider par sa clé."""
        return self.providers.get(key.lower())
