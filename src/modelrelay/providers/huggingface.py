"""
Adapter HuggingFace: routage dynamique vers les providers d'inférence.

Pour chaque requête chat, le mapping de routage du modèle (Hub API,
`inferenceProviderMapping`) est récupéré puis mis en cache indéfiniment.
Seule la première entrée du mapping est utilisée; il n'est pas établi que
l'ordre renvoyé par le Hub reflète une préférence.
"""
import logging
import random
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config.credentials import API_KEY, CredentialResolver, NullCredentialResolver
from ..core.constants import (
    CONVERSATIONAL_TASK,
    DEFAULT_TIMEOUT,
    HUGGINGFACE_BASE_URL,
    HUGGINGFACE_HUB_API,
    HUGGINGFACE_ROUTER_URL,
    HUGGINGFACE_WARM_MODELS_URL,
)
from ..core.exceptions import CredentialRequired, ModelResolutionFailed
from ..core.models import AliasTarget, ClientConfig
from .base import ChatParams, ChatResponse, ClientLifecycle, bind_capabilities, build_transport

logger = logging.getLogger(__name__)

ProviderMapping = Dict[str, Dict[str, Any]]

HUGGINGFACE_ALIASES: Dict[str, AliasTarget] = {
    # Chat
    "llama-3": "meta-llama/Llama-3.3-70B-Instruct",
    "llama-3.3-70b": "meta-llama/Llama-3.3-70B-Instruct",
    "command-r-plus": "CohereForAI/c4ai-command-r-plus-08-2024",
    "deepseek-r1": "deepseek-ai/DeepSeek-R1",
    "deepseek-v3": "deepseek-ai/DeepSeek-V3",
    "qwq-32b": "Qwen/QwQ-32B",
    "nemotron-70b": "nvidia/Llama-3.1-Nemotron-70B-Instruct-HF",
    "qwen-2.5-coder-32b": "Qwen/Qwen2.5-Coder-32B-Instruct",
    "llama-3.2-11b": "meta-llama/Llama-3.2-11B-Vision-Instruct",
    "mistral-nemo": "mistralai/Mistral-Nemo-Instruct-2407",
    "phi-3.5-mini": "microsoft/Phi-3.5-mini-instruct",
    "gemma-3-27b": "google/gemma-3-27b-it",
    # Images
    "flux": "black-forest-labs/FLUX.1-dev",
    "flux-dev": "black-forest-labs/FLUX.1-dev",
    "flux-schnell": "black-forest-labs/FLUX.1-schnell",
    "stable-diffusion-3.5-large": "stabilityai/stable-diffusion-3.5-large",
    "sdxl-1.0": "stabilityai/stable-diffusion-xl-base-1.0",
    "sdxl-turbo": "stabilityai/sdxl-turbo",
    "sd-3.5-large": "stabilityai/stable-diffusion-3.5-large",
}

STATIC_PROVIDER_MAPPING: Dict[str, ProviderMapping] = {
    "google/gemma-3-27b-it": {
        "hf-inference/models/google/gemma-3-27b-it": {
            "task": CONVERSATIONAL_TASK,
            "providerId": "google/gemma-3-27b-it",
        }
    }
}


def normalize_mapping(raw: Any) -> ProviderMapping:
    """
    Normalise `inferenceProviderMapping` en {provider: {task, providerId, ...}}.

    Le Hub renvoie un dict pour un modèle unique et une liste
    `[{provider, task, providerId, status}]` dans les listings.
    """
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, list):
        return {entry["provider"]: entry for entry in raw if isinstance(entry, dict) and entry.get("provider")}
    return {}


def provider_api_path(provider_key: str, model: str) -> str:
    if provider_key == "novita":
        return "novita/v3/openai"
    if provider_key == "hf-inference":
        return f"{provider_key}/models/{model}/v1"
    return f"{provider_key}/v1"


class HuggingFaceClient(ClientLifecycle):
    """
    Client HuggingFace (router d'inférence).

    Raises:
        CredentialRequired: si aucune clé n'est fournie ni résolvable
            (resolver `huggingface`, ex: HUGGINGFACE_API_KEY)
    """

    name = "huggingface"

    def __init__(
        self,
        *,
        base_url: str = HUGGINGFACE_BASE_URL,
        image_endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        default_model: str = "meta-llama/Meta-Llama-3-8B-Instruct",
        default_image_model: Optional[str] = None,
        model_aliases: Optional[Dict[str, AliasTarget]] = None,
        provider_mapping: Optional[Dict[str, ProviderMapping]] = None,
        router_url: str = HUGGINGFACE_ROUTER_URL,
        hub_api_url: str = HUGGINGFACE_HUB_API,
        catalog_url: str = HUGGINGFACE_WARM_MODELS_URL,
        timeout: float = DEFAULT_TIMEOUT,
        credentials: Optional[CredentialResolver] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
    ):
        credentials = credentials or NullCredentialResolver()
        if not api_key:
            api_key = credentials.get(self.name, API_KEY)
            if not api_key:
                raise CredentialRequired(
                    "Clé API HuggingFace requise (options ou variable HUGGINGFACE_API_KEY)",
                    provider=self.name,
                )

        config_options = {"default_image_model": default_image_model} if default_image_model else {}
        config = ClientConfig(
            base_url=base_url,
            image_endpoint=image_endpoint,
            api_key=api_key,
            extra_headers=dict(extra_headers or {}),
            default_chat_model=default_model,
            model_aliases={**HUGGINGFACE_ALIASES, **(model_aliases or {})},
            timeout=timeout,
            **config_options,
        )
        self.transport = build_transport(config, http_client=http_client, rng=rng)
        self.router_url = router_url.rstrip("/")
        self.hub_api_url = hub_api_url.rstrip("/")
        self.catalog_url = catalog_url
        self.provider_mapping: Dict[str, ProviderMapping] = {
            model: dict(mapping) for model, mapping in {**STATIC_PROVIDER_MAPPING, **(provider_mapping or {})}.items()
        }
        bind_capabilities(self)

    @property
    def config(self) -> ClientConfig:
        return self.transport.config

    async def get_mapping(self, model: str) -> ProviderMapping:
        """
        Mapping de routage du modèle (cache indéfini par identifiant).

        Raises:
            ModelResolutionFailed: si le Hub ne renvoie aucun mapping
        """
        if model in self.provider_mapping:
            return self.provider_mapping[model]

        body = await self.transport.get_json(f"{self.hub_api_url}/{model}?expand[]=inferenceProviderMapping")
        mapping = normalize_mapping(body.get("inferenceProviderMapping") if isinstance(body, dict) else None)
        if not mapping:
            raise ModelResolutionFailed(f"Modèle non supporté: {model}", model=model)
        self.provider_mapping[model] = mapping
        return mapping

    def resolve_route(self, model: str, mapping: ProviderMapping) -> Tuple[str, str]:
        """
        Endpoint et identifiant provider pour la première entrée du mapping.

        Raises:
            ModelResolutionFailed: si la tâche n'est pas conversationnelle
        """
        for provider_key, entry in mapping.items():
            task = entry.get("task")
            if task != CONVERSATIONAL_TASK:
                raise ModelResolutionFailed(f"Modèle non supporté: {model} task: {task}", model=model, task=task)
            api_base = f"{self.router_url}/{provider_api_path(provider_key, model)}"
            logger.debug(f"Routage HuggingFace: {model} -> {provider_key} ({api_base})")
            return api_base, entry.get("providerId") or model
        raise ModelResolutionFailed(f"Modèle non supporté: {model}", model=model)

    async def create_chat_completion(self, params: ChatParams) -> ChatResponse:
        options = dict(params)
        model = self.transport.aliases.resolve(options.pop("model", None), self.config.default_chat_model)

        mapping = await self.get_mapping(model)
        api_base, provider_model = self.resolve_route(model, mapping)

        payload = {"model": provider_model, **options}
        return await self.transport.send_chat(payload, url=f"{api_base}/chat/completions")

    async def list_models(self) -> List[Dict[str, Any]]:
        """Modèles "warm" exposant un routage conversationnel live + mappings statiques."""
        body = await self.transport.get_json(self.catalog_url, headers={})
        models = []
        for entry in body or []:
            routes = normalize_mapping(entry.get("inferenceProviderMapping")).values()
            if any(r.get("status") == "live" and r.get("task") == CONVERSATIONAL_TASK for r in routes):
                models.append({**entry, "id": entry.get("id"), "type": "chat"})
        models.extend({"id": model, "type": "chat"} for model in self.provider_mapping)
        return models

    async def generate_image(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self.transport.generate_image(params)
