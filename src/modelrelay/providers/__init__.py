"""
Adapters providers exposant le contrat chat / models / images.
"""

from .base import ModelClient, bind_capabilities, build_transport
from .openai import OpenAICompatibleClient, create_custom_client, create_deepinfra_client
from .pollinations import PollinationsClient
from .together import TogetherClient
from .huggingface import HuggingFaceClient
from .puter import PuterClient, BridgeStream
from .registry import PROVIDERS, available_providers, create_client

__all__ = [
    "ModelClient",
    "bind_capabilities",
    "build_transport",
    "OpenAICompatibleClient",
    "create_custom_client",
    "create_deepinfra_client",
    "PollinationsClient",
    "TogetherClient",
    "HuggingFaceClient",
    "PuterClient",
    "BridgeStream",
    "PROVIDERS",
    "available_providers",
    "create_client",
]
