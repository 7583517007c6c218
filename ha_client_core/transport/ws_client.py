"""WebSocket client wrapper normalizing inbound frames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from aiohttp import WSMsgType
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed

from ..errors import HAConnectionError
from .ws import connect_websocket

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class HAWsMessageType(Enum):
    """Normalized WebSocket message types."""

    TEXT = "text"
    CLOSED = "closed"
    ERROR = "error"


@dataclass(frozen=True)
class HAWsMessage:
    """Normalized WebSocket message payload."""

    type: HAWsMessageType
    data: str | None = None


class HAWsClient:
    """Wrapper around a websocket connection to the hub.

    Connections are opened with the websockets library; an already open
    aiohttp websocket can be attached instead.
    """

    def __init__(self) -> None:
        self._ws: Any = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def connect(
        self,
        url: str,
        *,
        ping_interval: int = 20,
        timeout: float = 15.0,
    ) -> None:
        """Connect to the hub websocket."""
        self._ws = await connect_websocket(
            url,
            ping_interval=ping_interval,
            timeout=timeout,
        )

    def attach(self, connection: ClientConnection | Any) -> None:
        """Use an already open connection (websockets or aiohttp)."""
        self._ws = connection

    async def close(self) -> None:
        """Close the websocket connection."""
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()

    async def send_text(self, text: str) -> None:
        """Send a text frame."""
        if self._ws is None:
            raise HAConnectionError("WebSocket is not connected")
        send_str = getattr(self._ws, "send_str", None)
        try:
            if send_str is not None:
                await send_str(text)
            else:
                await self._ws.send(text)
        except ConnectionClosed as err:
            raise HAConnectionError("WebSocket closed while sending") from err

    def __aiter__(self) -> AsyncIterator[HAWsMessage]:
        if self._ws is None:
            raise HAConnectionError("WebSocket is not connected")
        return self._iter_messages()

    async def _iter_messages(self) -> AsyncIterator[HAWsMessage]:
        if self._ws is None:
            raise HAConnectionError("WebSocket is not connected")

        try:
            async for msg in self._ws:
                normalized = self._normalize_message(msg)
                if normalized is None:
                    continue
                yield normalized
                if normalized.type is not HAWsMessageType.TEXT:
                    return
        except ConnectionClosed:
            yield HAWsMessage(type=HAWsMessageType.CLOSED)
        except Exception:
            yield HAWsMessage(type=HAWsMessageType.ERROR)
        else:
            # Iteration ends when the peer closed gracefully.
            yield HAWsMessage(type=HAWsMessageType.CLOSED)

    @staticmethod
    def _normalize_message(msg: Any) -> HAWsMessage | None:
        """Normalize backend-specific frames into HAWsMessage."""
        if isinstance(msg, bytes):
            return None
        if isinstance(msg, str):
            return HAWsMessage(HAWsMessageType.TEXT, msg)

        msg_type = getattr(msg, "type", None)
        if isinstance(msg_type, WSMsgType):
            normalized_type = HAWsClient._map_aiohttp_type(msg_type)
            if normalized_type is None:
                return None
            data = msg.data if normalized_type is HAWsMessageType.TEXT else None
            return HAWsMessage(normalized_type, data)

        return None

    @staticmethod
    def _map_aiohttp_type(msg_type: WSMsgType) -> HAWsMessageType | None:
        """Map aiohttp WSMsgType enums to internal message types."""
        if msg_type is WSMsgType.TEXT:
            return HAWsMessageType.TEXT

        if msg_type in {WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED}:
            return HAWsMessageType.CLOSED

        if msg_type is WSMsgType.ERROR:
            return HAWsMessageType.ERROR

        return None
