"""
Router principal de la gateway.
"""
from fastapi import APIRouter

from .routes import chat, health, images, models

# Router principal
api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["health"])
api_router.include_router(chat.router, prefix="/v1", tags=["chat"])
api_router.include_router(models.router, prefix="/v1", tags=["models"])
api_router.include_router(images.router, prefix="/v1", tags=["images"])
