"""
Configuration de modelrelay.
"""

from .loader import load_config, reload_config, get_config
from .settings import Settings, ProviderSettings
from .credentials import (
    CredentialResolver,
    EnvCredentialResolver,
    StaticCredentialResolver,
    SettingsCredentialResolver,
    ChainedCredentialResolver,
    NullCredentialResolver,
)

__all__ = [
    "load_config",
    "reload_config",
    "get_config",
    "Settings",
    "ProviderSettings",
    "CredentialResolver",
    "EnvCredentialResolver",
    "StaticCredentialResolver",
    "SettingsCredentialResolver",
    "ChainedCredentialResolver",
    "NullCredentialResolver",
]
