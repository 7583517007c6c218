"""Transport layer for the hub client.

This package contains all IO and websocket handling.

Components:
- ws: WebSocket connection management
- ws_client: WebSocket frame normalization
- exchange: MessageExchange port and its websocket implementation
"""

from .exchange import MessageExchange, MessageHandler, WebSocketMessageExchange
from .ws import connect_websocket
from .ws_client import HAWsClient, HAWsMessage, HAWsMessageType

__all__ = [
    "HAWsClient",
    "HAWsMessage",
    "HAWsMessageType",
    "MessageExchange",
    "MessageHandler",
    "WebSocketMessageExchange",
    "connect_websocket",
]
