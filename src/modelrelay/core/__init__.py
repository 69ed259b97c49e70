"""
Cœur métier de modelrelay.
Modules indépendants sans dépendances externes au package.
"""

from .exceptions import (
    ModelRelayError,
    ConfigurationMissing,
    CredentialRequired,
    UpstreamStatus,
    UnexpectedContentType,
    ProxyExhausted,
    StreamUnsupported,
    ModelResolutionFailed,
)
from .constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_CORS_PROXIES,
    POLLINATIONS_FALLBACK_MODELS,
)
from .models import ClientConfig, ModelDescriptor, ModelConfig

__all__ = [
    # Exceptions
    "ModelRelayError",
    "ConfigurationMissing",
    "CredentialRequired",
    "UpstreamStatus",
    "UnexpectedContentType",
    "ProxyExhausted",
    "StreamUnsupported",
    "ModelResolutionFailed",
    # Constants
    "DEFAULT_TIMEOUT",
    "DEFAULT_IMAGE_MODEL",
    "DEFAULT_CORS_PROXIES",
    "POLLINATIONS_FALLBACK_MODELS",
    # Models
    "ClientConfig",
    "ModelDescriptor",
    "ModelConfig",
]
