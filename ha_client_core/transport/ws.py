"""WebSocket helpers for hub transport."""

from __future__ import annotations

import asyncio

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from ..errors import (
    HAConnectionError,
    HAHandshakeError,
    RequestTimeout,
)


async def connect_websocket(
    url: str,
    *,
    ping_interval: int | None = 20,
    timeout: float = 15.0,
) -> ClientConnection:
    """Connect to the hub WebSocket endpoint.

    Args:
        url: Full ws:// or wss:// URL
        ping_interval: Interval for protocol-level ping frames
        timeout: Connection timeout
    """
    try:
        return await asyncio.wait_for(
            websockets.connect(
                url,
                ping_interval=ping_interval,
                close_timeout=5,
                max_size=None,
            ),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise RequestTimeout("WebSocket connection timed out") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise HAHandshakeError("WebSocket handshake failed") from err
    except (OSError, WebSocketException) as err:
        raise HAConnectionError("WebSocket connection failed") from err
