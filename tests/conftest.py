"""Pytest configuration and fixtures for ha_client_core tests."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from ha_client_core import HAClient
from ha_client_core.transport import MessageHandler


class FakeExchange:
    """In-memory MessageExchange recording sent frames."""

    def __init__(self) -> None:
        self.handler: MessageHandler | None = None
        self.sent: list[str] = []
        self.disconnect_calls = 0

    def set_message_handler(self, handler: MessageHandler) -> None:
        self.handler = handler

    async def send_message(self, message: str) -> None:
        self.sent.append(message)

    def disconnect(self) -> None:
        self.disconnect_calls += 1

    def sent_json(self) -> list[dict[str, Any]]:
        return [json.loads(message) for message in self.sent]

    async def deliver(self, payload: str | dict[str, Any]) -> None:
        """Feed one inbound frame to the registered handler."""
        assert self.handler is not None
        text = payload if isinstance(payload, str) else json.dumps(payload)
        await self.handler(text)

    async def wait_sent(self, count: int, timeout: float = 1.0) -> None:
        """Wait until at least ``count`` frames were sent."""

        async def _poll() -> None:
            while len(self.sent) < count:
                await asyncio.sleep(0)

        await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.fixture
def exchange() -> FakeExchange:
    """Create a fake exchange."""
    return FakeExchange()


@pytest.fixture
def client(exchange: FakeExchange) -> HAClient:
    """Create a client with a short request timeout."""
    return HAClient(exchange, request_timeout=0.2)


async def authenticate(client: HAClient, exchange: FakeExchange) -> None:
    """Drive the auth handshake to AUTHENTICATED."""
    task = asyncio.create_task(client.authenticate("token"))
    await exchange.wait_sent(len(exchange.sent) + 1)
    await exchange.deliver({"type": "auth_ok", "ha_version": "2024.1.0"})
    await task


def result_frame(msg_id: int, result: Any, *, success: bool = True) -> dict[str, Any]:
    """Build a result reply."""
    return {"id": msg_id, "type": "result", "success": success, "result": result}
