"""Client façade for a hub websocket session.

This module provides the public operation surface:
- Authentication handshake
- Ping
- Area, device and entity registry listing
- Entity state retrieval

Every call is bounded by the request timeout. Replies are matched to
calls by correlation id through the pending request registry, and the
single inbound handler ``handle_text_message`` routes each frame by the
current session phase.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TypeVar

from .config import ClientConfig
from .errors import (
    AuthenticationFailed,
    AuthenticationRequired,
    HAConnectionError,
    RequestTimeout,
    ResponseError,
)
from .models import (
    Area,
    CommandKind,
    Device,
    Entity,
    GenericResult,
    Pong,
    ResultError,
    State,
)
from .protocol import (
    decode_envelope,
    decode_typed_result,
    serialize_auth,
    serialize_command,
)
from .registry import PendingRequests, Response
from .session import SessionPhase, SessionStateMachine
from .transport import MessageExchange, WebSocketMessageExchange

_LOGGER = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 1.0

_RecordT = TypeVar("_RecordT", Area, Device, Entity, State)


class HAClient:
    """Request/response client for one hub connection.

    Usage:
        client = await HAClient.connect(ClientConfig(host="hub.local", token="..."))
        await client.authenticate(config.token)
        areas = await client.list_areas()
        await client.close()
    """

    def __init__(
        self,
        exchange: MessageExchange,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        evict_on_timeout: bool = True,
    ) -> None:
        """Initialize client and register its inbound handler.

        Args:
            exchange: Transport port; must not have a handler registered yet
            request_timeout: Deadline for each call (seconds)
            evict_on_timeout: Drop the registry entry of a timed out call
        """
        self._exchange = exchange
        self._request_timeout = request_timeout
        self._evict_on_timeout = evict_on_timeout

        self._pending = PendingRequests()
        self._session = SessionStateMachine(on_auth_invalid=exchange.disconnect)

        self._exchange.set_message_handler(self.handle_text_message)

    @classmethod
    async def connect(cls, config: ClientConfig) -> HAClient:
        """Open a websocket to the hub described by ``config``.

        The returned client is connected but not yet authenticated.
        """
        exchange = WebSocketMessageExchange(
            config.url,
            ping_interval=config.ping_interval,
            connect_timeout=config.connect_timeout,
        )
        client = cls(
            exchange,
            request_timeout=config.request_timeout,
            evict_on_timeout=config.evict_on_timeout,
        )
        await exchange.connect()
        return client

    async def close(self) -> None:
        """Fail outstanding calls and tear down the transport."""
        self._pending.clear(HAConnectionError("Client closed"))
        if isinstance(self._exchange, WebSocketMessageExchange):
            await self._exchange.close()
        else:
            self._exchange.disconnect()

    @property
    def phase(self) -> SessionPhase:
        """Current authentication phase."""
        return self._session.phase

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    def on_phase_changed(self, callback: Callable[[SessionPhase], None]) -> None:
        """Register callback for authentication phase changes."""
        self._session.on_phase_changed(callback)

    # -------------------------------------------------------------------------
    # Public API: Commands
    # -------------------------------------------------------------------------

    async def authenticate(self, token: str) -> None:
        """Authenticate the session with an access token.

        Raises:
            AuthenticationFailed: The hub rejected the token.
            RequestTimeout: No auth reply within the deadline.
        """
        if not self._session.begin_authentication():
            _LOGGER.debug("Already authenticated, not sending auth")
            return

        await self._exchange.send_message(serialize_auth(token))

        try:
            phase = await asyncio.wait_for(
                self._session.wait_settled(), timeout=self._request_timeout
            )
        except TimeoutError as err:
            raise RequestTimeout(
                f"No authentication reply within {self._request_timeout}s"
            ) from err

        if phase is SessionPhase.AUTHENTICATION_FAILED:
            raise AuthenticationFailed(self._session.failure_reason or "")

        _LOGGER.info("Authentication successful")

    async def send_ping(self) -> None:
        """Send a ping and wait for the matching pong.

        Ping is not gated on authentication.
        """
        response = await self._request(CommandKind.PING)
        if not isinstance(response, Pong):
            raise ResponseError("Ping reply is not a pong")

    async def list_areas(self) -> list[Area]:
        """List the hub's area registry."""
        return await self._list(CommandKind.LIST_AREAS, Area)

    async def list_devices(self) -> list[Device]:
        """List the hub's device registry."""
        return await self._list(CommandKind.LIST_DEVICES, Device)

    async def list_entities(self) -> list[Entity]:
        """List the hub's entity registry."""
        return await self._list(CommandKind.LIST_ENTITIES, Entity)

    async def retrieve_states(self) -> list[State]:
        """Retrieve the current state of every entity."""
        return await self._list(CommandKind.RETRIEVE_STATES, State)

    # -------------------------------------------------------------------------
    # Internal: Correlated requests
    # -------------------------------------------------------------------------

    async def _list(
        self, kind: CommandKind, record_type: type[_RecordT]
    ) -> list[_RecordT]:
        if not self._session.is_authenticated:
            raise AuthenticationRequired(
                f"Cannot send {kind.value}: session is {self._session.phase.value}"
            )

        response = await self._request(kind)
        if not isinstance(response, tuple) or not all(
            isinstance(record, record_type) for record in response
        ):
            raise ResponseError(f"Reply to {kind.value} is not a list of {record_type.__name__}")
        return list(response)

    async def _request(self, kind: CommandKind) -> Response:
        """Send a correlated command and wait for its reply."""
        msg_id = self._pending.insert(kind)

        try:
            await self._exchange.send_message(serialize_command(kind, msg_id))
        except BaseException:
            self._pending.remove(msg_id)
            raise

        try:
            response = await self._pending.wait(msg_id, self._request_timeout)
        except RequestTimeout:
            _LOGGER.warning("Request %d (%s) timed out", msg_id, kind.value)
            if self._evict_on_timeout:
                self._pending.remove(msg_id)
            raise
        except asyncio.CancelledError:
            self._pending.remove(msg_id)
            raise

        self._pending.remove(msg_id)

        if isinstance(response, ResultError):
            raise ResponseError(response.message, code=response.code)
        return response

    # -------------------------------------------------------------------------
    # Internal: Message handling
    # -------------------------------------------------------------------------

    async def handle_text_message(self, text: str) -> None:
        """Route one inbound frame.

        Nothing raised here reaches a caller; unroutable frames are logged
        and dropped.
        """
        _LOGGER.debug("Incoming text message %.500s", text)
        message = decode_envelope(text)
        phase = self._session.phase

        if phase is SessionPhase.AUTH_REQUESTED:
            if message is None:
                _LOGGER.warning("Malformed message during authentication: %.200s", text)
                return
            self._session.handle(message)
            return

        if phase is not SessionPhase.AUTHENTICATED:
            _LOGGER.debug("Not handling message in phase %s", phase.value)
            return

        if isinstance(message, GenericResult):
            self._handle_result(message)
        elif isinstance(message, Pong):
            self._handle_pong(message)
        else:
            _LOGGER.debug("Unknown message encountered: %.200s", text)

    def _handle_result(self, message: GenericResult) -> None:
        kind = self._pending.kind_of(message.id)
        if kind is None:
            _LOGGER.debug("No matching request found with id %d", message.id)
            return

        if not message.success:
            error = message.error or {}
            code = error.get("code")
            reason = error.get("message") or "Command was not successful"
            _LOGGER.warning("Request %d (%s) failed: %s", message.id, kind.value, reason)
            self._pending.record_response(
                message.id,
                ResultError(
                    message=str(reason),
                    code=code if isinstance(code, str) else None,
                ),
            )
            return

        result = decode_typed_result(kind, message)
        if result is None:
            _LOGGER.warning(
                "Response for request %d with type %s could not be decoded",
                message.id,
                kind.value,
            )
            self._pending.record_response(
                message.id,
                ResultError(
                    message=f"Reply to {kind.value} could not be decoded",
                    code="decode_error",
                ),
            )
            return

        self._pending.record_response(message.id, result)

    def _handle_pong(self, message: Pong) -> None:
        if self._pending.kind_of(message.id) is None:
            _LOGGER.debug("No matching request found with id %d", message.id)
            return
        result = decode_typed_result(CommandKind.PING, message)
        if result is not None:
            self._pending.record_response(message.id, result)
