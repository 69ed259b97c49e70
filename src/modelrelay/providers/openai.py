"""
Adapter générique pour les endpoints OpenAI-compatibles.

Sert aussi de base de configuration pour les presets Azure (défaut),
Custom (base URL + clé fournies par le resolver) et DeepInfra.
"""
import logging
import random
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..config.credentials import API_KEY, BASE_URL, CredentialResolver, NullCredentialResolver
from ..core.constants import AZURE_BASE_URL, DEEPINFRA_BASE_URL, DEFAULT_IMAGE_MODEL, DEFAULT_TIMEOUT
from ..core.exceptions import ConfigurationMissing
from ..core.models import AliasTarget, ClientConfig
from ..transport.client import unwrap_data
from .base import ChatParams, ChatResponse, ClientLifecycle, bind_capabilities, build_transport

logger = logging.getLogger(__name__)


class OpenAICompatibleClient(ClientLifecycle):
    """
    Client OpenAI-like générique.

    Si ni base_url, ni chat_endpoint, ni api_key ne sont fournis, la clé est
    demandée au resolver d'identifiants sous le nom du provider.

    Raises:
        ConfigurationMissing: si aucune de ces valeurs n'est résolvable
    """

    name = "azure"
    default_base_url = AZURE_BASE_URL

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        chat_endpoint: Optional[str] = None,
        image_endpoint: Optional[str] = None,
        models_endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        default_model: Optional[str] = None,
        default_image_model: Optional[str] = None,
        model_aliases: Optional[Dict[str, AliasTarget]] = None,
        referrer: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        proxies: Optional[Iterable[str]] = None,
        credentials: Optional[CredentialResolver] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
        name: Optional[str] = None,
    ):
        if name:
            self.name = name
        credentials = credentials or NullCredentialResolver()
        if not (base_url or chat_endpoint or api_key):
            api_key = credentials.get(self.name, API_KEY)
            if not api_key:
                raise ConfigurationMissing(
                    "Le client requiert au moins base_url, chat_endpoint ou api_key",
                    config_key="base_url"
                )

        config = ClientConfig(
            base_url=base_url or self.default_base_url,
            chat_endpoint=chat_endpoint,
            image_endpoint=image_endpoint,
            models_endpoint=models_endpoint,
            api_key=api_key,
            extra_headers=dict(extra_headers or {}),
            default_chat_model=default_model,
            default_image_model=default_image_model or DEFAULT_IMAGE_MODEL,
            model_aliases=dict(model_aliases or {}),
            referrer=referrer,
            timeout=timeout,
        )
        self.transport = build_transport(config, http_client=http_client, rng=rng, proxies=proxies)
        self._models: List[Dict[str, Any]] = []
        bind_capabilities(self)

    @property
    def config(self) -> ClientConfig:
        return self.transport.config

    async def create_chat_completion(self, params: ChatParams) -> ChatResponse:
        return await self.transport.create_chat_completion(params)

    async def list_models(self) -> List[Dict[str, Any]]:
        if self._models:
            logger.debug(f"Catalogue {self.name} servi depuis le cache ({len(self._models)} modèles)")
            return self._models
        if self.transport.proxy_rotator is not None:
            models = unwrap_data(await self.transport.fetch_json_via_proxy(self.config.models_endpoint))
        else:
            models = await self.transport.fetch_models()
        self._models = list(models or [])
        return self._models

    async def generate_image(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self.transport.generate_image(params)


def create_custom_client(credentials: Optional[CredentialResolver] = None, **options) -> OpenAICompatibleClient:
    """Endpoint personnalisé: base URL et clé lues via le resolver (`custom`)."""
    credentials = credentials or NullCredentialResolver()
    options.setdefault("base_url", credentials.get("custom", BASE_URL))
    options.setdefault("api_key", credentials.get("custom", API_KEY))
    return OpenAICompatibleClient(name="custom", credentials=credentials, **options)


def create_deepinfra_client(credentials: Optional[CredentialResolver] = None, **options) -> OpenAICompatibleClient:
    """Preset DeepInfra (endpoint OpenAI-compatible public)."""
    options.setdefault("base_url", DEEPINFRA_BASE_URL)
    options.setdefault("default_model", "deepseek-ai/DeepSeek-V3-0324")
    if credentials is not None:
        options.setdefault("api_key", credentials.get("deepinfra", API_KEY))
    return OpenAICompatibleClient(name="deepinfra", credentials=credentials, **options)
