"""
Adapter Puter: pont vers un runtime tiers injecté.

Le runtime (objet exposant `chat(messages, options)`) n'est chargé qu'au
premier appel, puis mémorisé. Ses deux formes de réponse natives sont
ramenées au format commun:
- message complet `{"message": {...}}` -> `choices: [{"message": ...}]`
- flux natif d'items `{"text": "..."}` -> `choices: [{"delta": {"content": ...}}]`
"""
import inspect
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Protocol, Union

import httpx

from ..core.constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT, PUTER_BLOCKLIST, PUTER_MODELS_URL
from ..core.exceptions import ConfigurationMissing
from ..core.models import ModelDescriptor
from ..transport.client import parse_json_response
from .base import ChatParams, ChatResponse, bind_capabilities

logger = logging.getLogger(__name__)


class RuntimeBridge(Protocol):
    """Runtime tiers: `chat` retourne un dict, ou un itérable async si stream."""

    async def chat(self, messages: List[Dict[str, Any]], options: Dict[str, Any]) -> Any: ...


BridgeSource = Union[RuntimeBridge, Awaitable[RuntimeBridge], Callable[[], Any]]


def normalize_message_response(response: Dict[str, Any]) -> Dict[str, Any]:
    if response.get("choices") is None and response.get("message") is not None:
        return {**response, "choices": [{"message": response["message"]}]}
    return response


def normalize_stream_item(item: Dict[str, Any]) -> Dict[str, Any]:
    if item.get("choices") is None and item.get("text") is not None:
        return {**item, "choices": [{"delta": {"content": item["text"]}}]}
    return item


class BridgeStream:
    """Flux pull-based au-dessus de l'itérable natif du runtime."""

    def __init__(self, native: Any):
        self._iterator: AsyncIterator[Any] = native.__aiter__()
        self._closed = False

    def __aiter__(self) -> "BridgeStream":
        return self

    async def __anext__(self) -> Dict[str, Any]:
        if self._closed:
            raise StopAsyncIteration
        try:
            item = await self._iterator.__anext__()
        except BaseException:
            await self.aclose()
            raise
        return normalize_stream_item(item) if isinstance(item, dict) else item

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._iterator, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "BridgeStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


def _missing_bridge() -> RuntimeBridge:
    raise ConfigurationMissing(
        "Puter ne peut être utilisé que depuis un environnement interactif exposant un runtime bridge",
        config_key="bridge",
    )


class PuterClient:
    """
    Client Puter.

    Args:
        bridge: runtime déjà chargé, awaitable, ou fabrique sans argument
            (synchrone ou async) appelée au premier usage
    """

    name = "puter"

    def __init__(
        self,
        *,
        bridge: Optional[BridgeSource] = None,
        default_model: str = "gpt-4.1",
        models_url: str = PUTER_MODELS_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.default_model = default_model
        self.timeout = timeout
        self.models_url = models_url
        self._bridge_source: BridgeSource = bridge if bridge is not None else _missing_bridge
        self._bridge: Optional[RuntimeBridge] = None
        self._http_client = http_client
        self._owns_client = http_client is None
        bind_capabilities(self)

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=DEFAULT_CONNECT_TIMEOUT))
        return self._http_client

    async def load_bridge(self) -> RuntimeBridge:
        """Charge le runtime une seule fois."""
        if self._bridge is not None:
            return self._bridge
        source = self._bridge_source
        if callable(source) and not hasattr(source, "chat"):
            source = source()
        if inspect.isawaitable(source):
            source = await source
        self._bridge = source
        logger.debug(f"Runtime bridge Puter chargé: {type(source).__name__}")
        return self._bridge

    async def create_chat_completion(self, params: ChatParams) -> ChatResponse:
        options = dict(params)
        messages = options.pop("messages", [])
        if not options.get("model") and self.default_model:
            options["model"] = self.default_model

        bridge = await self.load_bridge()
        response = await bridge.chat(messages, options)
        if options.get("stream"):
            return BridgeStream(response)
        if isinstance(response, dict):
            return normalize_message_response(response)
        return response

    async def list_models(self) -> List[Dict[str, Any]]:
        response = await self.http_client.get(self.models_url)
        body = parse_json_response(response, "Échec de récupération des modèles Puter")
        names = body.get("models", []) if isinstance(body, dict) else body
        return [
            ModelDescriptor(id=name, type="chat").to_dict()
            for name in names
            if isinstance(name, str) and "/" not in name and name not in PUTER_BLOCKLIST
        ]

    async def generate_image(self, params: Dict[str, Any]) -> Dict[str, Any]:
        raise ConfigurationMissing("Puter ne supporte pas la génération d'images via ce client", config_key="images")

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
