"""Registre nom -> fabrique d'adapter."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, Optional

from ..config.credentials import CredentialResolver
from ..config.settings import Settings
from ..core.exceptions import ConfigurationMissing
from .base import ModelClient
from .huggingface import HuggingFaceClient
from .openai import OpenAICompatibleClient, create_custom_client, create_deepinfra_client
from .pollinations import PollinationsClient
from .puter import PuterClient
from .together import TogetherClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., ModelClient]


def _create_puter(credentials: Optional[CredentialResolver] = None, **options: Any) -> PuterClient:
    return PuterClient(**_supported_options(PuterClient, options))


PROVIDERS: Dict[str, ClientFactory] = {
    "pollinations": PollinationsClient,
    "deepinfra": create_deepinfra_client,
    "huggingface": HuggingFaceClient,
    "together": TogetherClient,
    "puter": _create_puter,
    "azure": OpenAICompatibleClient,
    "custom": create_custom_client,
}


def available_providers() -> list[str]:
    return sorted(PROVIDERS)


def _supported_options(factory: ClientFactory, options: Dict[str, Any]) -> Dict[str, Any]:
    """Filtre les options de configuration non acceptées par la fabrique."""
    parameters = inspect.signature(factory).parameters
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in parameters.values()):
        return options
    ignored = sorted(set(options) - set(parameters))
    if ignored:
        logger.debug(f"Options ignorées pour {getattr(factory, '__name__', factory)}: {ignored}")
    return {k: v for k, v in options.items() if k in parameters}


def create_client(
    name: str,
    *,
    credentials: Optional[CredentialResolver] = None,
    settings: Optional[Settings] = None,
    **options: Any,
) -> ModelClient:
    """
    Instancie l'adapter `name`.

    Les options de la table [providers.<name>] (si `settings` est fourni)
    servent de base; les options explicites gagnent.

    Raises:
        ConfigurationMissing: provider inconnu ou configuration insuffisante
    """
    factory = PROVIDERS.get(name.lower())
    if factory is None:
        raise ConfigurationMissing(
            f"Provider inconnu: {name}. Disponibles: {', '.join(available_providers())}",
            config_key="provider",
        )

    merged: Dict[str, Any] = {}
    if settings is not None:
        provider_settings = settings.get_provider(name)
        if provider_settings is not None:
            merged.update(provider_settings.to_options())
        merged.setdefault("timeout", settings.timeout)
        merged = _supported_options(factory, merged)
    merged.update(options)
    return factory(credentials=credentials, **merged)
