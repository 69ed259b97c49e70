"""modelrelay.config.credentials

Résolution des identifiants (clé API, base URL) par provider.

Les adapters ne lisent jamais l'environnement eux-mêmes: un resolver leur est
injecté à la construction. Champs supportés: "api_key", "base_url".
"""
from __future__ import annotations

import logging
import os
import re
from typing import Mapping, Optional, Protocol

from .settings import Settings

logger = logging.getLogger(__name__)

API_KEY = "api_key"
BASE_URL = "base_url"

_ENV_SUFFIXES = {
    API_KEY: "API_KEY",
    BASE_URL: "API_BASE",
}


class CredentialResolver(Protocol):
    """Collaborateur fournissant une valeur d'identifiant pour un provider."""

    def get(self, provider: str, field: str) -> Optional[str]:
        """Retourne la valeur ou None si inconnue."""


class EnvCredentialResolver:
    """Lit <PROVIDER>_API_KEY / <PROVIDER>_API_BASE dans l'environnement."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    @staticmethod
    def variable_name(provider: str, field: str) -> str:
        prefix = re.sub(r"[^A-Za-z0-9]+", "_", provider).upper()
        return f"{prefix}_{_ENV_SUFFIXES.get(field, field.upper())}"

    def get(self, provider: str, field: str) -> Optional[str]:
        value = (self._environ.get(self.variable_name(provider, field)) or "").strip()
        return value or None


class StaticCredentialResolver:
    """Resolver en mémoire: {provider: {field: value}}."""

    def __init__(self, values: Mapping[str, Mapping[str, str]]):
        self._values = {k.lower(): dict(v) for k, v in values.items()}

    def get(self, provider: str, field: str) -> Optional[str]:
        return self._values.get(provider.lower(), {}).get(field) or None


class SettingsCredentialResolver:
    """Resolver adossé aux tables [providers.*] du config.toml."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def get(self, provider: str, field: str) -> Optional[str]:
        provider_settings = self._settings.get_provider(provider)
        if provider_settings is None:
            return None
        return getattr(provider_settings, field, None) or None


class ChainedCredentialResolver:
    """Interroge plusieurs resolvers dans l'ordre, premier résultat gagnant."""

    def __init__(self, *resolvers: CredentialResolver):
        self._resolvers = resolvers

    def get(self, provider: str, field: str) -> Optional[str]:
        for resolver in self._resolvers:
            value = resolver.get(provider, field)
            if value:
                logger.debug(f"Identifiant {provider}.{field} résolu par {type(resolver).__name__}")
                return value
        return None


class NullCredentialResolver:
    """Resolver vide (aucun identifiant disponible)."""

    def get(self, provider: str, field: str) -> Optional[str]:
        return None
