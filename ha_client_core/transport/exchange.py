"""Duplex message exchange over a single hub websocket.

``MessageExchange`` is the port the client consumes: it registers one
inbound handler, sends text, and can be torn down. The websocket-backed
implementation runs one listener task that awaits the handler for each
TEXT frame in arrival order, so inbound frames are never handled
concurrently with each other.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from ..errors import HAClientError, HAConnectionError
from .ws_client import HAWsClient, HAWsMessageType

_LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[str], Awaitable[None]]


class MessageExchange(Protocol):
    """Transport port consumed by the client."""

    def set_message_handler(self, handler: MessageHandler) -> None: ...

    async def send_message(self, message: str) -> None: ...

    def disconnect(self) -> None: ...


class WebSocketMessageExchange:
    """MessageExchange backed by a hub websocket.

    Usage:
        exchange = WebSocketMessageExchange("ws://hub.local:8123/api/websocket")
        await exchange.connect()
        client = HAClient(exchange)
        await client.authenticate(token)
        ...
        await exchange.close()
    """

    def __init__(
        self,
        url: str,
        *,
        ping_interval: int = 20,
        connect_timeout: float = 15.0,
        ws_client: HAWsClient | None = None,
    ) -> None:
        self.url = url
        self._ping_interval = ping_interval
        self._connect_timeout = connect_timeout
        self._ws = ws_client or HAWsClient()
        self._handler: MessageHandler | None = None
        self._listen_task: asyncio.Task[None] | None = None
        self._close_task: asyncio.Task[None] | None = None

    @property
    def is_connected(self) -> bool:
        return self._ws.connected

    def set_message_handler(self, handler: MessageHandler) -> None:
        """Register the inbound handler. Only one may ever be registered."""
        if self._handler is not None:
            raise HAClientError("A message handler is already registered")
        self._handler = handler

    async def connect(self) -> None:
        """Open the websocket and start delivering inbound frames."""
        if self._listen_task is not None and not self._listen_task.done():
            _LOGGER.debug("Already connected to %s", self.url)
            return

        if not self._ws.connected:
            _LOGGER.info("Connecting to %s", self.url)
            await self._ws.connect(
                self.url,
                ping_interval=self._ping_interval,
                timeout=self._connect_timeout,
            )
        self._listen_task = asyncio.create_task(self._listen())

    async def send_message(self, message: str) -> None:
        """Send one text frame."""
        if not self._ws.connected:
            raise HAConnectionError("WebSocket is not connected")
        await self._ws.send_text(message)

    def disconnect(self) -> None:
        """Tear down the connection without waiting for the close handshake."""
        if self._close_task is None and self._ws.connected:
            self._close_task = asyncio.create_task(self._shutdown())
            self._close_task.add_done_callback(self._log_shutdown_result)

    async def close(self) -> None:
        """Stop the listener and close the websocket.

        Waits for a teardown already started by ``disconnect``.
        """
        task = self._close_task
        if task is not None:
            if task is not asyncio.current_task():
                await asyncio.wait([task])
            return
        await self._shutdown()

    async def _shutdown(self) -> None:
        task, self._listen_task = self._listen_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        try:
            await asyncio.wait_for(self._ws.close(), timeout=2.0)
        except TimeoutError:
            _LOGGER.warning("WebSocket close timed out")

    @staticmethod
    def _log_shutdown_result(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            _LOGGER.error("WebSocket teardown failed: %s", err)

    async def _listen(self) -> None:
        """Deliver inbound frames to the handler one at a time."""
        message_count = 0
        try:
            async for msg in self._ws:
                if msg.type is HAWsMessageType.TEXT:
                    message_count += 1
                    if self._handler is None:
                        _LOGGER.debug("No handler registered, dropping frame")
                        continue
                    try:
                        await self._handler(msg.data or "")
                    except Exception as err:
                        _LOGGER.exception("Message handler error: %s", err)
                elif msg.type is HAWsMessageType.CLOSED:
                    _LOGGER.info("WebSocket closed by hub")
                    break
                elif msg.type is HAWsMessageType.ERROR:
                    _LOGGER.error("WebSocket error")
                    break
        except asyncio.CancelledError:
            _LOGGER.debug("Listener cancelled (%d messages)", message_count)
            raise
