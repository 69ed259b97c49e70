"""
Décodage des réponses streaming (server-sent events) en deltas de chat.

Format attendu: lignes `data: <json>` séparées par `\\n`, terminées par
`data: [DONE]`. Le décodage est paresseux et piloté par le consommateur:
aucun octet n'est lu tant que l'événement précédent n'a pas été consommé.
"""
import codecs
import json
import logging
from collections import deque
from typing import Any, AsyncIterator, Deque, Dict, List, Optional

import httpx

from ..core.constants import SSE_DATA_PREFIX, SSE_DONE_SENTINEL
from ..core.exceptions import StreamUnsupported, UpstreamStatus

logger = logging.getLogger(__name__)

ChatDelta = Dict[str, Any]


def parse_sse_line(line: str) -> Optional[ChatDelta]:
    """
    Parse une ligne SSE complète.

    Returns:
        Objet JSON, ou None pour une ligne vide, la sentinelle [DONE],
        une ligne sans préfixe `data: ` ou un JSON malformé
    """
    line = line.rstrip("\r")
    if not line.strip() or line == SSE_DATA_PREFIX + SSE_DONE_SENTINEL:
        return None
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    try:
        data = json.loads(line[len(SSE_DATA_PREFIX):])
    except json.JSONDecodeError as e:
        # Une ligne malformée n'interrompt jamais le flux
        logger.warning(f"Chunk SSE ignoré (JSON invalide): {line[:200]!r} ({e})")
        return None
    if isinstance(data, dict):
        copy_reasoning(data)
    return data


def copy_reasoning(event: ChatDelta) -> ChatDelta:
    """Expose `delta.reasoning` aussi sous `delta.reasoning_content`."""
    choices = event.get("choices")
    if not choices or not isinstance(choices, list) or not isinstance(choices[0], dict):
        return event
    delta = choices[0].get("delta")
    if isinstance(delta, dict) and delta.get("reasoning"):
        delta["reasoning_content"] = delta["reasoning"]
    return event


class SSELineDecoder:
    """
    Découpeur incrémental octets -> événements.

    Le fragment final (ligne incomplète) est conservé d'un chunk à l'autre;
    un caractère UTF-8 coupé entre deux chunks est recomposé.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.buffer = ""

    def feed(self, chunk: bytes) -> List[ChatDelta]:
        self.buffer += self._decoder.decode(chunk)
        *lines, self.buffer = self.buffer.split("\n")
        events = []
        for line in lines:
            event = parse_sse_line(line)
            if event is not None:
                events.append(event)
        return events


class ChatStream:
    """
    Séquence paresseuse, à passage unique, de deltas de chat.

    `__anext__` retourne l'événement suivant ou lève StopAsyncIteration.
    La réponse HTTP sous-jacente est fermée en fin de flux, sur erreur de
    lecture, et sur `aclose()` (appelé aussi en sortie de `async with`).
    Un simple `break` dans `async for` ne libère pas la réponse: hors
    `async with`, l'appelant doit appeler `aclose()` lui-même.

    Usage:
        async with await client.chat.completions.create(..., stream=True) as stream:
            async for chunk in stream:
                ...
    """

    def __init__(self, response: httpx.Response):
        self._response = response
        self._chunks: AsyncIterator[bytes] = response.aiter_bytes()
        self._decoder = SSELineDecoder()
        self._pending: Deque[ChatDelta] = deque()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "ChatStream":
        return self

    async def __anext__(self) -> ChatDelta:
        while not self._pending:
            if self._closed:
                raise StopAsyncIteration
            try:
                chunk = await self._chunks.__anext__()
            except StopAsyncIteration:
                # Le fragment partiel restant est abandonné
                if self._decoder.buffer.strip():
                    logger.debug(f"Fragment SSE incomplet abandonné: {self._decoder.buffer[:200]!r}")
                await self.aclose()
                raise
            except BaseException:
                await self.aclose()
                raise
            self._pending.extend(self._decoder.feed(chunk))
        return self._pending.popleft()

    async def aclose(self) -> None:
        """Libère la réponse sous-jacente (idempotent)."""
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        await self._response.aclose()

    async def __aenter__(self) -> "ChatStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


def has_readable_body(response: httpx.Response) -> bool:
    """False si le flux a déjà été consommé sans que le contenu soit conservé."""
    if not response.is_stream_consumed:
        return True
    try:
        response.content
    except httpx.ResponseNotRead:
        return False
    return True


def response_url(response: httpx.Response) -> Optional[str]:
    try:
        return str(response.request.url)
    except RuntimeError:
        return None


async def open_chat_stream(response: httpx.Response) -> ChatStream:
    """
    Vérifie les préconditions puis enveloppe la réponse dans un ChatStream.

    Raises:
        StreamUnsupported: si la réponse n'expose pas de flux lisible
        UpstreamStatus: si le statut HTTP n'est pas 2xx (réponse fermée)
    """
    if not has_readable_body(response):
        await response.aclose()
        raise StreamUnsupported()
    if not response.is_success:
        try:
            await response.aread()
            preview = response.text[:800]
        finally:
            await response.aclose()
        raise UpstreamStatus(
            f"Requête API échouée avec le statut {response.status_code}",
            status_code=response.status_code,
            url=response_url(response),
            response_preview=preview,
        )
    return ChatStream(response)
