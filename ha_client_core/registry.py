"""Registry of in-flight correlated requests.

The registry is the only mutable structure shared between the tasks that
issue calls and the task that delivers inbound frames. Every operation is
synchronous and never awaits, so on the owning event loop each one runs
to completion before any other task observes the table.

Each entry owns a one-shot future. ``record_response`` resolves it and
``wait`` awaits it with a deadline, so callers wake as soon as their reply
lands instead of polling.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field

from .errors import RequestTimeout
from .models import CommandKind, ResultError, TypedResult

_LOGGER = logging.getLogger(__name__)

Response = TypedResult | ResultError


@dataclass(slots=True)
class PendingRequest:
    """One outstanding request awaiting its reply."""

    id: int
    kind: CommandKind
    future: asyncio.Future[Response] = field(repr=False)
    response: Response | None = None


class PendingRequests:
    """Table of outstanding requests keyed by correlation id.

    Ids start at 1 and are never reused for the lifetime of the registry.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._entries: dict[int, PendingRequest] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, msg_id: object) -> bool:
        return msg_id in self._entries

    def insert(self, kind: CommandKind) -> int:
        """Allocate the next correlation id and record an empty entry."""
        msg_id = next(self._ids)
        loop = asyncio.get_running_loop()
        self._entries[msg_id] = PendingRequest(
            id=msg_id, kind=kind, future=loop.create_future()
        )
        return msg_id

    def record_response(self, msg_id: int, response: Response) -> bool:
        """Store the response for ``msg_id`` and wake its waiter.

        Returns:
            True if the response was stored, False when no unresolved
            entry exists for ``msg_id`` (late or duplicate replies).
        """
        entry = self._entries.get(msg_id)
        if entry is None:
            _LOGGER.debug("No pending request with id %d", msg_id)
            return False
        if entry.response is not None:
            _LOGGER.debug("Request %d already resolved, dropping reply", msg_id)
            return False
        entry.response = response
        if not entry.future.done():
            entry.future.set_result(response)
        return True

    def peek_response(self, msg_id: int) -> Response | None:
        """Return the stored response without waiting."""
        entry = self._entries.get(msg_id)
        return entry.response if entry is not None else None

    def kind_of(self, msg_id: int) -> CommandKind | None:
        """Return the command kind of the pending request, if any."""
        entry = self._entries.get(msg_id)
        return entry.kind if entry is not None else None

    def remove(self, msg_id: int) -> None:
        """Forget ``msg_id``. Unknown ids are ignored."""
        entry = self._entries.pop(msg_id, None)
        if entry is not None and not entry.future.done():
            entry.future.cancel()

    async def wait(self, msg_id: int, timeout: float) -> Response:
        """Wait until ``msg_id`` holds a response.

        Raises:
            KeyError: If ``msg_id`` is not pending.
            RequestTimeout: If no response arrives within ``timeout``.
        """
        entry = self._entries[msg_id]
        try:
            return await asyncio.wait_for(asyncio.shield(entry.future), timeout)
        except TimeoutError as err:
            raise RequestTimeout(
                f"No reply to request {msg_id} ({entry.kind.name}) within {timeout}s"
            ) from err

    def clear(self, exc: BaseException) -> None:
        """Fail every waiter with ``exc`` and empty the table."""
        for entry in self._entries.values():
            if not entry.future.done():
                entry.future.set_exception(exc)
        self._entries.clear()
