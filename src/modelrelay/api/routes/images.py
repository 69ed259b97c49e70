"""Route de génération d'images."""
from typing import Any, Dict

from fastapi import APIRouter, Body, Request

router = APIRouter()


@router.post("/images/generations")
async def generate_images(request: Request, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Délègue à `images.generate` et renvoie `{"data": [{"url": ...}]}`."""
    return await request.app.state.client.images.generate(payload)
