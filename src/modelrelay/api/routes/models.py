"""Route OpenAI-compatible pour la liste des modèles du provider."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Request

router = APIRouter()


def _build_openai_models_list(models: List[Dict[str, Any]], owner: str) -> List[Dict[str, Any]]:
    models_list: List[Dict[str, Any]] = []
    for model in models:
        models_list.append(
            {
                **model,
                "id": model.get("id") or model.get("name"),
                "object": "model",
                "owned_by": owner,
            }
        )
    return models_list


@router.get("/models")
async def openai_models(request: Request) -> Dict[str, Any]:
    """Endpoint OpenAI-compatible: GET /v1/models."""
    client = request.app.state.client
    models = await client.models.list()
    return {
        "object": "list",
        "data": _build_openai_models_list(models, client.name),
    }
