"""
Rotation de proxies CORS avec failover horizontal.

Chaque requête logique essaie au plus une fois chaque proxy de la liste,
sans backoff. Le curseur est partagé entre les appels: un échec laisse le
curseur avancé pour les requêtes suivantes.
"""
import logging
from typing import Iterable, Optional
from urllib.parse import quote

import httpx

from ..core.constants import DEFAULT_CORS_PROXIES
from ..core.exceptions import (
    ConfigurationMissing,
    ProxyExhausted,
    UnexpectedContentType,
    UpstreamStatus,
)

logger = logging.getLogger(__name__)

# Caractères laissés intacts par encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    """Encodage pourcent équivalent à encodeURIComponent."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


class ProxyRotator:
    """
    Liste ordonnée de templates de proxy + curseur courant.

    Usage:
        rotator = ProxyRotator(["https://p1/?", "https://p2/?"])
        response = await rotator.fetch_with_failover(http_client, "https://api/models")
    """

    def __init__(self, proxies: Optional[Iterable[str]] = None):
        proxies = list(DEFAULT_CORS_PROXIES if proxies is None else proxies)
        if not proxies:
            raise ConfigurationMissing(
                "ProxyRotator requiert une liste non vide de proxies",
                config_key="proxies"
            )
        self.proxies = proxies
        self.current_index = 0

    @property
    def current_proxy(self) -> str:
        return self.proxies[self.current_index]

    def wrap(self, target_url: str) -> str:
        """Retourne l'URL proxifiée pour le proxy courant (sans effet de bord)."""
        return self.current_proxy + encode_uri_component(target_url)

    def rotate(self) -> None:
        """Passe au proxy suivant (modulo la taille de la liste)."""
        self.current_index = (self.current_index + 1) % len(self.proxies)
        logger.warning(f"Rotation vers le proxy CORS suivant: {self.current_proxy}")

    async def fetch_with_failover(
        self,
        http_client: httpx.AsyncClient,
        target_url: str,
        method: str = "GET",
        **request_options,
    ) -> httpx.Response:
        """
        Envoie la requête via le proxy courant, en tournant sur échec.

        Une tentative échoue si le statut n'est pas 2xx, si un Content-Type
        est présent sans `application/json`, ou sur erreur transport.

        Returns:
            Réponse httpx entièrement lue

        Raises:
            ProxyExhausted: après len(proxies) échecs consécutifs
        """
        max_attempts = len(self.proxies)
        last_error: Optional[Exception] = None

        for attempt in range(max_attempts):
            proxied_url = self.wrap(target_url)
            try:
                response = await http_client.request(method, proxied_url, **request_options)
                _check_proxied_response(response, proxied_url)
                return response
            except (UpstreamStatus, UnexpectedContentType, httpx.HTTPError) as e:
                last_error = e
                logger.warning(
                    f"Tentative proxy CORS {attempt + 1}/{max_attempts} échouée pour {target_url}: {e}"
                )
                self.rotate()

        raise ProxyExhausted(
            f"Toutes les tentatives via proxy CORS ont échoué pour {target_url}",
            target_url=target_url,
            attempts=max_attempts,
            last_error=str(last_error) if last_error else None,
        )


def _check_proxied_response(response: httpx.Response, url: str) -> None:
    if not response.is_success:
        raise UpstreamStatus(
            f"Échec du proxy avec le statut {response.status_code}",
            status_code=response.status_code,
            url=url,
        )
    content_type = response.headers.get("Content-Type")
    if content_type and "application/json" not in content_type:
        raise UnexpectedContentType(
            f"Réponse JSON attendue, reçu {content_type}",
            content_type=content_type,
            url=url,
        )
