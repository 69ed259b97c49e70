"""
Couche transport: proxies CORS, décodage SSE, alias, client HTTP partagé.
"""

from .proxy import ProxyRotator, encode_uri_component
from .stream import ChatStream, SSELineDecoder, open_chat_stream, parse_sse_line
from .aliases import AliasTable
from .client import Transport, parse_json_response, unwrap_data

__all__ = [
    "ProxyRotator",
    "encode_uri_component",
    "ChatStream",
    "SSELineDecoder",
    "open_chat_stream",
    "parse_sse_line",
    "AliasTable",
    "Transport",
    "parse_json_response",
    "unwrap_data",
]
