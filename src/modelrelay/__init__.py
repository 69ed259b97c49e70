"""
modelrelay - Client multi-providers OpenAI-compatible.

Usage:
    from modelrelay import create_client

    async with create_client("pollinations") as client:
        response = await client.chat.completions.create({"messages": [...]})
"""

__version__ = "1.0.0"

from .core.exceptions import (
    ModelRelayError,
    ConfigurationMissing,
    CredentialRequired,
    UpstreamStatus,
    UnexpectedContentType,
    ProxyExhausted,
    StreamUnsupported,
    ModelResolutionFailed,
)
from .core.models import ClientConfig, ModelConfig, ModelDescriptor
from .config import (
    Settings,
    ProviderSettings,
    load_config,
    EnvCredentialResolver,
    StaticCredentialResolver,
    SettingsCredentialResolver,
    ChainedCredentialResolver,
)
from .providers import (
    OpenAICompatibleClient,
    PollinationsClient,
    TogetherClient,
    HuggingFaceClient,
    PuterClient,
    create_client,
    create_custom_client,
    create_deepinfra_client,
    available_providers,
)

__all__ = [
    "__version__",
    "ModelRelayError",
    "ConfigurationMissing",
    "CredentialRequired",
    "UpstreamStatus",
    "UnexpectedContentType",
    "ProxyExhausted",
    "StreamUnsupported",
    "ModelResolutionFailed",
    "ClientConfig",
    "ModelConfig",
    "ModelDescriptor",
    "Settings",
    "ProviderSettings",
    "load_config",
    "EnvCredentialResolver",
    "StaticCredentialResolver",
    "SettingsCredentialResolver",
    "ChainedCredentialResolver",
    "OpenAICompatibleClient",
    "PollinationsClient",
    "TogetherClient",
    "HuggingFaceClient",
    "PuterClient",
    "create_client",
    "create_custom_client",
    "create_deepinfra_client",
    "available_providers",
]
