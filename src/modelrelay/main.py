"""
modelrelay - Application FastAPI Factory.
Gateway OpenAI-compatible au-dessus d'un adapter provider.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.router import api_router
from .config.credentials import ChainedCredentialResolver, EnvCredentialResolver, SettingsCredentialResolver
from .config.settings import Settings
from .core.exceptions import (
    ConfigurationMissing,
    ModelRelayError,
    ModelResolutionFailed,
    StreamUnsupported,
)
from .providers.base import ModelClient
from .providers.registry import create_client

logger = logging.getLogger(__name__)


def error_status(error: ModelRelayError) -> int:
    """Statut HTTP renvoyé par la gateway pour une erreur du client."""
    if isinstance(error, ConfigurationMissing):
        return 400
    if isinstance(error, ModelResolutionFailed):
        return 404
    if isinstance(error, StreamUnsupported):
        return 501
    return 502


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[str] = None,
    client: Optional[ModelClient] = None,
) -> FastAPI:
    """
    Factory pour créer l'application FastAPI.

    Args:
        settings: configuration globale (défaut: Settings())
        provider: nom du provider servi (défaut: settings.default_provider)
        client: adapter déjà construit (prioritaire, non fermé à l'arrêt)

    Returns:
        Instance configurée de FastAPI
    """
    settings = settings or Settings()
    provider = provider or settings.default_provider

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Gestion du cycle de vie de l'application."""
        owned = client is None
        if owned:
            credentials = ChainedCredentialResolver(
                SettingsCredentialResolver(settings),
                EnvCredentialResolver(),
            )
            app.state.client = create_client(provider, credentials=credentials, settings=settings)
        else:
            app.state.client = client
        app.state.provider = provider
        logger.info(f"Gateway prête pour le provider '{provider}'")
        yield
        if owned:
            await app.state.client.aclose()

    app = FastAPI(
        title="modelrelay",
        description="Gateway OpenAI-compatible multi-providers",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ModelRelayError)
    async def relay_error_handler(request: Request, exc: ModelRelayError):
        logger.warning(f"Erreur provider sur {request.url.path}: {exc}")
        return JSONResponse(
            status_code=error_status(exc),
            content={"error": {"code": exc.code, "message": exc.message, "details": exc.details}},
        )

    @app.exception_handler(httpx.HTTPError)
    async def transport_error_handler(request: Request, exc: httpx.HTTPError):
        logger.error(f"Erreur réseau sur {request.url.path}: {exc}")
        return JSONResponse(
            status_code=502,
            content={"error": {"code": "upstream_unreachable", "message": str(exc), "details": {}}},
        )

    app.include_router(api_router)
    return app
