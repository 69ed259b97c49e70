"""
Adapter Together: catalogue authentifié + métadonnées par modèle.

Le catalogue (/models) fournit pour chaque modèle ses séquences d'arrêt et
son template de chat; `stop` est injecté automatiquement dans les requêtes
chat quand l'appelant n'en fournit pas. Les alias peuvent désigner des
ensembles de modèles équivalents (tirage aléatoire à chaque appel).
"""
import logging
import random
from typing import Any, Dict, List, Optional

import httpx

from ..config.credentials import API_KEY, CredentialResolver, NullCredentialResolver
from ..core.constants import DEFAULT_TIMEOUT, TOGETHER_BASE_URL
from ..core.exceptions import CredentialRequired, ModelRelayError
from ..core.models import AliasTarget, ClientConfig, ModelConfig
from .base import ChatParams, ChatResponse, ClientLifecycle, bind_capabilities, build_transport

logger = logging.getLogger(__name__)

TOGETHER_ALIASES: Dict[str, AliasTarget] = {
    # Chat - meta-llama
    "llama-3.2-3b": "meta-llama/Llama-3.2-3B-Instruct-Turbo",
    "llama-2-70b": ["meta-llama/Llama-2-70b-hf", "meta-llama/Llama-2-70b-hf"],
    "llama-3-70b": ["meta-llama/Meta-Llama-3-70B-Instruct-Turbo", "meta-llama/Llama-3-70b-chat-hf"],
    "llama-3.2-90b": "meta-llama/Llama-3.2-90B-Vision-Instruct-Turbo",
    "llama-3.3-70b": ["meta-llama/Llama-3.3-70B-Instruct-Turbo", "meta-llama/Llama-3.3-70B-Instruct-Turbo-Free"],
    "llama-4-scout": "meta-llama/Llama-4-Scout-17B-16E-Instruct",
    "llama-3.1-8b": ["meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo", "blackbox/meta-llama-3-1-8b"],
    "llama-3.2-11b": "meta-llama/Llama-3.2-11B-Vision-Instruct-Turbo",
    "llama-3-8b": ["meta-llama/Llama-3-8b-chat-hf", "meta-llama/Meta-Llama-3-8B-Instruct-Lite"],
    "llama-3.1-70b": ["meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo"],
    "llama-3.1-405b": "meta-llama/Meta-Llama-3.1-405B-Instruct-Turbo",
    "llama-4-maverick": "meta-llama/Llama-4-Maverick-17B-128E-Instruct-FP8",
    # Chat - deepseek-ai
    "deepseek-r1": "deepseek-ai/DeepSeek-R1",
    "deepseek-v3": ["deepseek-ai/DeepSeek-V3", "deepseek-ai/DeepSeek-V3-p-dp"],
    "deepseek-r1-distill-llama-70b": [
        "deepseek-ai/DeepSeek-R1-Distill-Llama-70B",
        "deepseek-ai/DeepSeek-R1-Distill-Llama-70B-free",
    ],
    "deepseek-r1-distill-qwen-1.5b": "deepseek-ai/DeepSeek-R1-Distill-Qwen-1.5B",
    "deepseek-r1-distill-qwen-14b": "deepseek-ai/DeepSeek-R1-Distill-Qwen-14B",
    # Chat - Qwen
    "qwen-2.5-vl-72b": "Qwen/Qwen2.5-VL-72B-Instruct",
    "qwen-2.5-coder-32b": "Qwen/Qwen2.5-Coder-32B-Instruct",
    "qwen-2.5-7b": "Qwen/Qwen2.5-7B-Instruct-Turbo",
    "qwen-2-vl-72b": "Qwen/Qwen2-VL-72B-Instruct",
    "qwq-32b": "Qwen/QwQ-32B",
    "qwen-2.5-72b": "Qwen/Qwen2.5-72B-Instruct-Turbo",
    "qwen-3-235b": ["Qwen/Qwen3-235B-A22B-fp8", "Qwen/Qwen3-235B-A22B-fp8-tput"],
    "qwen-2-72b": "Qwen/Qwen2-72B-Instruct",
    # Chat - mistralai
    "mixtral-8x7b": "mistralai/Mixtral-8x7B-Instruct-v0.1",
    "mistral-small-24b": "mistralai/Mistral-Small-24B-Instruct-2501",
    "mistral-7b": [
        "mistralai/Mistral-7B-Instruct-v0.1",
        "mistralai/Mistral-7B-Instruct-v0.2",
        "mistralai/Mistral-7B-Instruct-v0.3",
    ],
    # Chat - autres
    "gemma-2-27b": "google/gemma-2-27b-it",
    "nemotron-70b": "nvidia/Llama-3.1-Nemotron-70B-Instruct-HF",
    "hermes-2-dpo": "NousResearch/Nous-Hermes-2-Mixtral-8x7B-DPO",
    "r1-1776": "perplexity-ai/r1-1776",
    # Images - black-forest-labs
    "flux": [
        "black-forest-labs/FLUX.1-schnell-Free",
        "black-forest-labs/FLUX.1-schnell",
        "black-forest-labs/FLUX.1.1-pro",
        "black-forest-labs/FLUX.1-pro",
        "black-forest-labs/FLUX.1-dev",
    ],
    "flux-schnell": ["black-forest-labs/FLUX.1-schnell-Free", "black-forest-labs/FLUX.1-schnell"],
    "flux-pro": ["black-forest-labs/FLUX.1.1-pro", "black-forest-labs/FLUX.1-pro"],
    "flux-redux": "black-forest-labs/FLUX.1-redux",
    "flux-depth": "black-forest-labs/FLUX.1-depth",
    "flux-canny": "black-forest-labs/FLUX.1-canny",
    "flux-kontext-max": "black-forest-labs/FLUX.1-kontext-max",
    "flux-dev-lora": "black-forest-labs/FLUX.1-dev-lora",
    "flux-dev": ["black-forest-labs/FLUX.1-dev", "black-forest-labs/FLUX.1-dev-lora"],
    "flux-kontext-pro": "black-forest-labs/FLUX.1-kontext-pro",
}


class TogetherClient(ClientLifecycle):
    """
    Client Together.

    Raises:
        CredentialRequired: si aucune clé n'est fournie ni résolvable (et
            qu'aucun endpoint explicite n'est configuré)
    """

    name = "together"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        chat_endpoint: Optional[str] = None,
        image_endpoint: Optional[str] = None,
        models_endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        default_model: str = "meta-llama/Llama-4-Maverick-17B-128E-Instruct-FP8",
        default_image_model: str = "black-forest-labs/FLUX.1.1-pro",
        model_aliases: Optional[Dict[str, AliasTarget]] = None,
        referrer: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        credentials: Optional[CredentialResolver] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self._credentials = credentials or NullCredentialResolver()
        if not (base_url or chat_endpoint or api_key):
            api_key = self._credentials.get(self.name, API_KEY)
            if not api_key:
                raise CredentialRequired('Together requiert une "api_key"', provider=self.name)

        config = ClientConfig(
            base_url=base_url or TOGETHER_BASE_URL,
            chat_endpoint=chat_endpoint,
            image_endpoint=image_endpoint,
            models_endpoint=models_endpoint,
            api_key=api_key,
            extra_headers=dict(extra_headers or {}),
            default_chat_model=default_model,
            default_image_model=default_image_model,
            model_aliases={**TOGETHER_ALIASES, **(model_aliases or {})},
            referrer=referrer,
            timeout=timeout,
        )
        self.transport = build_transport(config, http_client=http_client, rng=rng)
        self.api_key = api_key
        self.model_configs: Dict[str, ModelConfig] = {}
        self._cached_models: List[Dict[str, Any]] = []
        bind_capabilities(self)

    @property
    def config(self) -> ClientConfig:
        return self.transport.config

    def _auth_headers(self) -> Dict[str, str]:
        """Headers avec Bearer (clé re-résolue si absente à la construction)."""
        if not self.api_key:
            self.api_key = self._credentials.get(self.name, API_KEY)
        if not self.api_key:
            return self.transport.headers()
        return self.transport.headers({"Authorization": f"Bearer {self.api_key}"})

    def get_model_config(self, model: str) -> ModelConfig:
        return self.model_configs.get(model) or ModelConfig()

    async def load_models(self) -> List[Dict[str, Any]]:
        """
        Charge le catalogue (une fois non vide, il reste en cache).

        Les configurations par modèle sont reconstruites à chaque
        rechargement complet.
        """
        if self._cached_models:
            return self._cached_models

        body = await self.transport.get_json(self.config.models_endpoint, headers=self._auth_headers())
        models = body.get("data", []) if isinstance(body, dict) else list(body or [])

        self.model_configs = {}
        for model in models:
            if not isinstance(model, dict) or not model.get("id"):
                continue
            self.model_configs[model["id"]] = ModelConfig.from_catalog_entry(model)
        self._cached_models = models
        logger.debug(f"Catalogue Together chargé: {len(models)} modèles")
        return self._cached_models

    async def _ensure_models(self) -> None:
        if self._cached_models:
            return
        try:
            await self.load_models()
        except (ModelRelayError, httpx.HTTPError) as e:
            # L'injection de `stop` est best-effort: la requête part quand même
            logger.warning(f"Échec de chargement des modèles Together: {e}")

    async def list_models(self) -> List[Dict[str, Any]]:
        return await self.load_models()

    async def create_chat_completion(self, params: ChatParams) -> ChatResponse:
        await self._ensure_models()

        payload = self.transport.prepare_chat_params(params)

        model_config = self.get_model_config(payload["model"])
        if not payload.get("stop") and model_config.stop:
            payload["stop"] = list(model_config.stop)

        return await self.transport.send_chat(payload, headers=self._auth_headers())

    async def generate_image(self, params: Dict[str, Any]) -> Dict[str, Any]:
        await self._ensure_models()
        payload = self.transport.prepare_image_params(params)
        if payload.get("image"):
            payload["image_url"] = payload.pop("image")
        return await self.transport.generate_image_from_json(payload, headers=self._auth_headers())
