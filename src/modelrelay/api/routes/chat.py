"""
Route chat completions.

En mode `stream`, les chunks normalisés par l'adapter sont ré-encodés en
SSE (`data: <json>\n\n`) et le flux se termine par `data: [DONE]`.
"""
import json
import logging
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Body, Request
from fastapi.responses import StreamingResponse

from ...core.constants import SSE_DATA_PREFIX, SSE_DONE_SENTINEL

logger = logging.getLogger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def encode_sse_event(data: Any) -> str:
    if not isinstance(data, str):
        data = json.dumps(data, ensure_ascii=False)
    return f"{SSE_DATA_PREFIX}{data}\n\n"


async def stream_generator(stream) -> AsyncIterator[str]:
    """Ré-encode un flux de chunks; le flux amont est fermé sur toute sortie."""
    try:
        async for chunk in stream:
            yield encode_sse_event(chunk)
        yield encode_sse_event(SSE_DONE_SENTINEL)
    except Exception as e:
        logger.error(f"Flux interrompu: {e}")
        raise
    finally:
        await stream.aclose()


@router.post("/chat/completions")
async def chat_completions(request: Request, payload: Dict[str, Any] = Body(...)):
    """Proxy chat completions vers l'adapter du provider."""
    client = request.app.state.client
    result = await client.chat.completions.create(payload)
    if not payload.get("stream"):
        return result
    return StreamingResponse(
        stream_generator(result),
        headers=SSE_HEADERS,
        media_type="text/event-stream",
    )
