"""
Transport HTTPX partagé par les adapters providers.

Regroupe la logique commune aux adapters (composition, pas d'héritage):
- composition des headers
- résolution d'alias et injection du referrer
- dispatch streaming / non-streaming
- génération d'images (chemin template `{prompt}` ou chemin JSON)
- requêtes via rotation de proxies CORS
"""
import logging
from typing import Any, Dict, Optional, Union
from urllib.parse import urlencode

import httpx

from ..core.constants import DEFAULT_CONNECT_TIMEOUT
from ..core.exceptions import UpstreamStatus
from ..core.models import ClientConfig
from .aliases import AliasTable
from .proxy import ProxyRotator, encode_uri_component
from .stream import ChatStream, open_chat_stream, response_url

logger = logging.getLogger(__name__)

ChatResult = Union[Dict[str, Any], ChatStream]


def parse_json_response(response: httpx.Response, failure_message: str) -> Any:
    """
    Retourne le corps JSON d'une réponse lue.

    Raises:
        UpstreamStatus: si le statut n'est pas 2xx (aperçu du corps inclus)
    """
    if not response.is_success:
        raise UpstreamStatus(
            f"{failure_message} avec le statut {response.status_code}",
            status_code=response.status_code,
            url=response_url(response),
            response_preview=response.text[:800],
        )
    return response.json()


def unwrap_data(body: Any) -> Any:
    """`body["data"]` si présent, sinon le corps entier."""
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


def _query_value(value: Any) -> str:
    # Rendu identique à URLSearchParams pour les booléens
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Transport:
    """
    Client HTTP d'un adapter.

    Le client httpx est créé à la demande et fermé par `aclose()` sauf s'il a
    été injecté (il appartient alors à l'appelant).
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        aliases: Optional[AliasTable] = None,
        proxy_rotator: Optional[ProxyRotator] = None,
    ):
        self.config = config
        self.aliases = aliases or AliasTable(config.model_aliases)
        self.proxy_rotator = proxy_rotator
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout, connect=DEFAULT_CONNECT_TIMEOUT),
                limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def headers(self, overrides: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = dict(self.config.headers)
        if overrides:
            headers.update(overrides)
        return headers

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    def prepare_chat_params(self, params: Dict[str, Any], default_model: Optional[str] = None) -> Dict[str, Any]:
        """Copie des paramètres avec modèle résolu et referrer injecté."""
        payload = dict(params)
        payload["model"] = self.aliases.resolve(
            payload.get("model"), default_model or self.config.default_chat_model
        )
        if self.config.referrer:
            payload["referrer"] = self.config.referrer
        return payload

    async def send_chat(
        self,
        payload: Dict[str, Any],
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ChatResult:
        """
        POST JSON vers l'endpoint chat.

        Returns:
            ChatStream si payload["stream"] est vrai, sinon le JSON de réponse
        """
        request = self.http_client.build_request(
            "POST",
            url or self.config.chat_endpoint,
            headers=headers or self.headers(),
            json=payload,
        )
        if payload.get("stream"):
            response = await self.http_client.send(request, stream=True)
            return await open_chat_stream(response)

        response = await self.http_client.send(request)
        return parse_json_response(response, "Requête API échouée")

    async def create_chat_completion(self, params: Dict[str, Any]) -> ChatResult:
        return await self.send_chat(self.prepare_chat_params(params))

    # ------------------------------------------------------------------
    # Modèles
    # ------------------------------------------------------------------

    async def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        response = await self.http_client.get(url, headers=headers if headers is not None else self.headers())
        return parse_json_response(response, "Échec de récupération")

    async def fetch_models(self, url: Optional[str] = None) -> Any:
        body = await self.get_json(url or self.config.models_endpoint)
        return unwrap_data(body)

    async def fetch_json_via_proxy(self, target_url: str) -> Any:
        """GET via rotation de proxies (ProxyRotator requis)."""
        if self.proxy_rotator is None:
            self.proxy_rotator = ProxyRotator()
        response = await self.proxy_rotator.fetch_with_failover(self.http_client, target_url)
        return response.json()

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def prepare_image_params(self, params: Dict[str, Any], default_model: Optional[str] = None) -> Dict[str, Any]:
        payload = dict(params)
        payload["model"] = self.aliases.resolve(
            payload.get("model"), default_model or self.config.default_image_model
        )
        return payload

    async def generate_image(self, params: Dict[str, Any]) -> Dict[str, Any]:
        payload = self.prepare_image_params(params)
        if self.config.uses_image_template:
            return await self.generate_image_from_template(payload)
        return await self.generate_image_from_json(payload)

    def build_image_url(self, params: Dict[str, Any]) -> str:
        """
        URL GET pour un endpoint template `{prompt}`.

        Le prompt est encodé (espaces en `+`) dans le chemin; les autres
        paramètres passent en query string, `size` "WxH" devenant
        `width`/`height`.
        """
        query = dict(params)
        prompt = query.pop("prompt", None) or ""
        encoded_prompt = encode_uri_component(prompt).replace("%20", "+")
        if query.get("nologo") is None:
            query["nologo"] = True
        if self.config.referrer:
            query["referrer"] = self.config.referrer
        size = query.pop("size", None)
        if size:
            width, _, height = str(size).partition("x")
            query["width"] = width
            query["height"] = height

        encoded_query = urlencode({k: _query_value(v) for k, v in query.items() if v is not None})
        return f"{self.config.image_endpoint.replace('{prompt}', encoded_prompt)}?{encoded_query}"

    async def generate_image_from_template(self, params: Dict[str, Any]) -> Dict[str, Any]:
        request = self.http_client.build_request("GET", self.build_image_url(params), headers=self.headers())
        # Seule l'URL finale est utile: le corps (image) n'est pas téléchargé
        response = await self.http_client.send(request, stream=True, follow_redirects=True)
        try:
            if not response.is_success:
                raise UpstreamStatus(
                    f"Génération d'image échouée avec le statut {response.status_code}",
                    status_code=response.status_code,
                    url=str(response.url),
                )
            return {"data": [{"url": str(response.url)}]}
        finally:
            await response.aclose()

    async def generate_image_from_json(
        self,
        params: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        response = await self.http_client.post(
            self.config.image_endpoint,
            headers=headers or self.headers(),
            json=params,
        )
        if not response.is_success:
            logger.error(f"Génération d'image échouée. Réponse serveur: {response.text[:800]}")
        return parse_json_response(response, "Génération d'image échouée")
