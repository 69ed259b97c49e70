"""
Adapter Pollinations: agrégateur texte + image.

La découverte des modèles interroge deux catalogues indépendants en
parallèle, via la rotation de proxies CORS. Chaque moitié tolère son propre
échec; si les deux échouent, un catalogue statique minimal est retourné.
"""
import asyncio
import logging
import random
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..config.credentials import API_KEY, CredentialResolver
from ..core.constants import (
    DEFAULT_IMAGE_MODEL,
    DEFAULT_TIMEOUT,
    POLLINATIONS_BASE_URL,
    POLLINATIONS_CHAT_ENDPOINT,
    POLLINATIONS_FALLBACK_MODELS,
    POLLINATIONS_IMAGE_ENDPOINT,
    POLLINATIONS_IMAGE_MODELS_URL,
    POLLINATIONS_REFERRER,
    POLLINATIONS_TEXT_MODELS_URL,
)
from ..core.exceptions import ProxyExhausted
from ..core.models import AliasTarget, ClientConfig, ModelDescriptor
from ..transport.client import unwrap_data
from ..transport.proxy import ProxyRotator
from .base import ChatParams, ChatResponse, ClientLifecycle, bind_capabilities, build_transport

logger = logging.getLogger(__name__)

POLLINATIONS_ALIASES: Dict[str, AliasTarget] = {
    "gpt-oss-120b": "gpt-oss",
    "gpt-4o-mini": "openai",
    "gpt-4.1-nano": "openai-fast",
    "gpt-4.1": "openai-large",
    "o4-mini": "openai-reasoning",
    "command-r-plus": "command-r",
    "gemini-2.5-flash": "gemini",
    "gemini-2.0-flash-thinking": "gemini-thinking",
    "qwen-2.5-coder-32b": "qwen-coder",
    "llama-3.3-70b": "llama",
    "llama-4-scout": "llamascout",
    "mistral-small-3.1-24b": "mistral",
    "deepseek-r1": "deepseek-reasoning",
    "phi-4": "phi",
    "deepseek-v3": "deepseek",
    "grok-3-mini-high": "grok",
    "gpt-4o-audio": "openai-audio",
    "sdxl-turbo": "turbo",
    "gpt-image": "gptimage",
    "flux-kontext": "kontext",
}


class PollinationsClient(ClientLifecycle):
    """Client Pollinations (texte OpenAI-compatible + images par template)."""

    name = "pollinations"

    def __init__(
        self,
        *,
        base_url: str = POLLINATIONS_BASE_URL,
        chat_endpoint: str = POLLINATIONS_CHAT_ENDPOINT,
        image_endpoint: str = POLLINATIONS_IMAGE_ENDPOINT,
        text_models_url: str = POLLINATIONS_TEXT_MODELS_URL,
        image_models_url: str = POLLINATIONS_IMAGE_MODELS_URL,
        api_key: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        default_model: str = "gpt-oss",
        default_image_model: str = DEFAULT_IMAGE_MODEL,
        model_aliases: Optional[Dict[str, AliasTarget]] = None,
        referrer: Optional[str] = POLLINATIONS_REFERRER,
        timeout: float = DEFAULT_TIMEOUT,
        proxies: Optional[Iterable[str]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
        credentials: Optional[CredentialResolver] = None,
    ):
        if api_key is None and credentials is not None:
            api_key = credentials.get(self.name, API_KEY)
        config = ClientConfig(
            base_url=base_url,
            chat_endpoint=chat_endpoint,
            image_endpoint=image_endpoint,
            api_key=api_key,
            extra_headers=dict(extra_headers or {}),
            default_chat_model=default_model,
            default_image_model=default_image_model,
            model_aliases={**POLLINATIONS_ALIASES, **(model_aliases or {})},
            referrer=referrer,
            timeout=timeout,
        )
        self.transport = build_transport(config, http_client=http_client, rng=rng)
        self.transport.proxy_rotator = ProxyRotator(proxies)
        self.text_models_url = text_models_url
        self.image_models_url = image_models_url
        self._models: List[Dict[str, Any]] = []
        bind_capabilities(self)

    @property
    def config(self) -> ClientConfig:
        return self.transport.config

    async def create_chat_completion(self, params: ChatParams) -> ChatResponse:
        return await self.transport.create_chat_completion(params)

    async def generate_image(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self.transport.generate_image(params)

    async def _fetch_catalog(self, url: str, kind: str) -> Optional[List[Any]]:
        """Liste du catalogue via proxies, ou None si la récupération a échoué."""
        try:
            body = await self.transport.fetch_json_via_proxy(url)
        except (ProxyExhausted, ValueError) as e:
            logger.error(f"Échec de récupération des modèles {kind} via tous les proxies: {e}")
            return None
        models = unwrap_data(body)
        if not isinstance(models, list):
            logger.error(f"Catalogue {kind} inattendu (liste attendue): {str(body)[:200]}")
            return None
        return models

    async def list_models(self) -> List[Dict[str, Any]]:
        """
        Catalogue combiné texte + image.

        Returns:
            Liste de {id, type, ...}; catalogue statique si les deux
            récupérations échouent (jamais d'exception)
        """
        if self._models:
            return self._models

        try:
            text_models, image_models = await asyncio.gather(
                self._fetch_catalog(self.text_models_url, "texte"),
                self._fetch_catalog(self.image_models_url, "image"),
            )
            if text_models is None and image_models is None:
                logger.error("Catalogue Pollinations indisponible, utilisation du catalogue de secours")
                return fallback_models()

            models = [self._normalize_text_model(m) for m in (text_models or [])]
            models += [self._normalize_image_model(m) for m in (image_models or [])]
        except Exception as e:
            logger.error(f"Catalogue de secours Pollinations après erreur inattendue: {e}")
            return fallback_models()

        if text_models is not None and image_models is not None:
            self._models = models
        return models

    def _normalize_text_model(self, model: Any) -> Dict[str, Any]:
        if isinstance(model, str):
            model = {"name": model}
        aliases = self.transport.aliases
        model_id = model.get("id") or aliases.swap.get(model.get("name")) or model.get("name")
        extra = {k: v for k, v in model.items() if k not in ("id", "type")}
        return ModelDescriptor(id=model_id, type=model.get("type") or "chat", extra=extra).to_dict()

    def _normalize_image_model(self, model: Any) -> Dict[str, Any]:
        if isinstance(model, dict):
            model = model.get("id") or model.get("name")
        return ModelDescriptor(id=self.transport.aliases.display_name(model), type="image").to_dict()


def fallback_models() -> List[Dict[str, Any]]:
    """Copie du catalogue statique de secours."""
    return [dict(model) for model in POLLINATIONS_FALLBACK_MODELS]
