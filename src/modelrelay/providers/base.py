"""Contrat commun des adapters providers.

Chaque adapter implémente trois coroutines (`create_chat_completion`,
`list_models`, `generate_image`) et expose la surface OpenAI-like
`chat.completions.create`, `models.list`, `images.generate` via
`bind_capabilities`.
"""

from __future__ import annotations

import random
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, Union

import httpx

from ..core.models import ClientConfig
from ..transport.aliases import AliasTable
from ..transport.client import Transport
from ..transport.proxy import ProxyRotator
from ..transport.stream import ChatStream

ChatParams = Dict[str, Any]
ChatResponse = Union[Dict[str, Any], ChatStream, "AsyncChatIterator"]


class AsyncChatIterator(Protocol):
    """Flux de deltas piloté par le consommateur, libérable via aclose()."""

    def __aiter__(self) -> "AsyncChatIterator": ...

    async def __anext__(self) -> Dict[str, Any]: ...

    async def aclose(self) -> None: ...


class ModelClient(Protocol):
    """Protocole implémenté par tous les adapters."""

    name: str

    async def create_chat_completion(self, params: ChatParams) -> ChatResponse:
        """Complétion de chat (dict ou flux selon params["stream"])."""

    async def list_models(self) -> List[Dict[str, Any]]:
        """Catalogue de modèles du provider."""

    async def generate_image(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Génération d'image: {"data": [{"url": ...}]} ou JSON provider."""

    async def aclose(self) -> None:
        """Libère les ressources HTTP possédées par l'adapter."""


class Completions:
    def __init__(self, create: Callable[[ChatParams], Awaitable[ChatResponse]]):
        self.create = create


class ChatNamespace:
    def __init__(self, create: Callable[[ChatParams], Awaitable[ChatResponse]]):
        self.completions = Completions(create)


class ModelsNamespace:
    def __init__(self, list_models: Callable[[], Awaitable[List[Dict[str, Any]]]]):
        self.list = list_models


class ImagesNamespace:
    def __init__(self, generate: Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]):
        self.generate = generate


def bind_capabilities(adapter: ModelClient) -> None:
    """Attache les namespaces `chat`, `models`, `images` à un adapter."""
    adapter.chat = ChatNamespace(adapter.create_chat_completion)
    adapter.models = ModelsNamespace(adapter.list_models)
    adapter.images = ImagesNamespace(adapter.generate_image)


def build_transport(
    config: ClientConfig,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    rng: Optional[random.Random] = None,
    proxies: Optional[Iterable[str]] = None,
) -> Transport:
    """Construit le Transport d'un adapter (alias, rotation de proxies optionnelle)."""
    return Transport(
        config,
        http_client=http_client,
        aliases=AliasTable(config.model_aliases, rng=rng),
        proxy_rotator=ProxyRotator(proxies) if proxies is not None else None,
    )


class ClientLifecycle:
    """Mixin `async with` pour les adapters possédant un Transport."""

    transport: Any

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
