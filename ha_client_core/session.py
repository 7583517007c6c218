"""Authentication phase tracking for one hub connection.

Phase transitions:

    INITIAL --(authenticate called)--> AUTH_REQUESTED
    AUTH_REQUESTED --(auth_ok)--> AUTHENTICATED
    AUTH_REQUESTED --(auth_invalid)--> AUTHENTICATION_FAILED

The inbound delivery path is the only writer; callers only read. Once
AUTHENTICATED the phase never changes again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from .models import AuthInvalid, AuthOk, InboundMessage

_LOGGER = logging.getLogger(__name__)


class SessionPhase(Enum):
    """Authentication phase of a session."""

    INITIAL = "initial"
    AUTH_REQUESTED = "auth_requested"
    AUTHENTICATED = "authenticated"
    AUTHENTICATION_FAILED = "authentication_failed"


class SessionStateMachine:
    """Single-writer authentication state machine.

    Args:
        on_auth_invalid: Called when the hub rejects the token, used to
            tear down the transport.
    """

    def __init__(self, on_auth_invalid: Callable[[], None] | None = None) -> None:
        self._phase = SessionPhase.INITIAL
        self._failure_reason: str | None = None
        self._settled = asyncio.Event()
        self._on_auth_invalid = on_auth_invalid
        self._phase_callback: Callable[[SessionPhase], None] | None = None

    @property
    def phase(self) -> SessionPhase:
        """Current phase."""
        return self._phase

    @property
    def failure_reason(self) -> str | None:
        """Reason sent with auth_invalid, if authentication failed."""
        return self._failure_reason

    @property
    def is_authenticated(self) -> bool:
        return self._phase is SessionPhase.AUTHENTICATED

    def on_phase_changed(self, callback: Callable[[SessionPhase], None]) -> None:
        """Register callback for phase changes."""
        self._phase_callback = callback

    def begin_authentication(self) -> bool:
        """Enter AUTH_REQUESTED.

        Returns:
            False if the session is already authenticated, True otherwise.
        """
        if self._phase is SessionPhase.AUTHENTICATED:
            return False
        self._failure_reason = None
        self._settled.clear()
        self._set_phase(SessionPhase.AUTH_REQUESTED)
        return True

    def handle(self, message: InboundMessage) -> None:
        """Apply an inbound message received while AUTH_REQUESTED."""
        if self._phase is not SessionPhase.AUTH_REQUESTED:
            _LOGGER.debug("Ignoring %s in phase %s", type(message).__name__, self._phase.value)
            return

        if isinstance(message, AuthOk):
            self._set_phase(SessionPhase.AUTHENTICATED)
            self._settled.set()
        elif isinstance(message, AuthInvalid):
            _LOGGER.error("Authentication rejected: %s", message.reason)
            self._failure_reason = message.reason
            self._set_phase(SessionPhase.AUTHENTICATION_FAILED)
            self._settled.set()
            if self._on_auth_invalid is not None:
                self._on_auth_invalid()
        else:
            _LOGGER.debug("Ignoring %s during authentication", type(message).__name__)

    async def wait_settled(self) -> SessionPhase:
        """Wait until the phase leaves AUTH_REQUESTED.

        Callers bound the wait with their own deadline.
        """
        await self._settled.wait()
        return self._phase

    def _set_phase(self, phase: SessionPhase) -> None:
        if self._phase is phase:
            return
        _LOGGER.debug("Phase: %s → %s", self._phase.value, phase.value)
        self._phase = phase
        if self._phase_callback is not None:
            self._phase_callback(phase)
