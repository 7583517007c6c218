"""Tests for the message codec."""

from __future__ import annotations

import json

import pytest

from ha_client_core.models import (
    Area,
    AuthInvalid,
    AuthOk,
    AuthRequired,
    CommandKind,
    Device,
    Entity,
    GenericResult,
    Pong,
    State,
)
from ha_client_core.protocol import (
    decode_envelope,
    decode_typed_result,
    serialize_auth,
    serialize_command,
)


class TestSerialize:
    """Tests for outgoing command serialization."""

    def test_serialize_auth(self):
        """Test auth command carries the access token."""
        assert json.loads(serialize_auth("T")) == {"type": "auth", "access_token": "T"}

    def test_serialize_command(self):
        """Test correlated command carries id and type."""
        text = serialize_command(CommandKind.LIST_AREAS, 1)
        assert text == '{"id":1,"type":"config/area_registry/list"}'

    def test_serialize_sorts_keys(self):
        """Test keys are emitted in sorted order."""
        text = serialize_auth("T")
        assert text.index("access_token") < text.index("type")


class TestDecodeEnvelope:
    """Tests for decode_envelope()."""

    def test_auth_required(self):
        message = decode_envelope('{"type": "auth_required", "ha_version": "2024.1.0"}')
        assert message == AuthRequired(ha_version="2024.1.0")

    def test_auth_ok(self):
        assert decode_envelope('{"type": "auth_ok"}') == AuthOk()

    def test_auth_invalid(self):
        message = decode_envelope('{"type": "auth_invalid", "message": "Invalid password"}')
        assert message == AuthInvalid(reason="Invalid password")

    def test_pong(self):
        assert decode_envelope('{"id": 4, "type": "pong"}') == Pong(id=4)

    def test_result(self):
        message = decode_envelope(
            '{"id": 2, "type": "result", "success": true, "result": [1]}'
        )
        assert message == GenericResult(id=2, success=True, payload=[1])

    def test_unsuccessful_result_keeps_error(self):
        message = decode_envelope(
            json.dumps(
                {
                    "id": 2,
                    "type": "result",
                    "success": False,
                    "error": {"code": "unknown_command", "message": "Unknown command."},
                }
            )
        )
        assert isinstance(message, GenericResult)
        assert message.success is False
        assert message.error == {"code": "unknown_command", "message": "Unknown command."}

    @pytest.mark.parametrize(
        "text",
        [
            "not json {",
            "[1, 2]",
            '{"id": 1}',
            '{"type": "event", "id": 1}',
            '{"type": "result", "success": true}',
            '{"type": "result", "id": 0, "success": true}',
            '{"type": "result", "id": true, "success": true}',
            '{"type": "result", "id": 1, "success": "yes"}',
            '{"type": "pong", "id": "1"}',
        ],
    )
    def test_unrecognized(self, text):
        """Test malformed or unknown frames decode to None."""
        assert decode_envelope(text) is None


class TestDecodeTypedResult:
    """Tests for decode_typed_result()."""

    def test_areas_round_trip(self):
        """Test a reply built from source records decodes to equal records."""
        source = [{"area_id": "a1", "name": "Kitchen"}, {"area_id": "a2", "name": "Hall"}]
        request = json.loads(serialize_command(CommandKind.LIST_AREAS, 7))
        reply = json.dumps(
            {"id": request["id"], "type": "result", "success": True, "result": source}
        )
        message = decode_envelope(reply)
        assert message is not None

        result = decode_typed_result(CommandKind.LIST_AREAS, message)

        assert result == (
            Area(area_id="a1", name="Kitchen"),
            Area(area_id="a2", name="Hall"),
        )

    def test_devices(self):
        message = GenericResult(id=1, success=True, payload=[{"id": "d1", "name": "Bulb"}])
        assert decode_typed_result(CommandKind.LIST_DEVICES, message) == (
            Device(id="d1", name="Bulb"),
        )

    def test_entities(self):
        message = GenericResult(id=1, success=True, payload=[{"entity_id": "light.a"}])
        assert decode_typed_result(CommandKind.LIST_ENTITIES, message) == (
            Entity(entity_id="light.a"),
        )

    def test_states(self):
        message = GenericResult(
            id=1, success=True, payload=[{"entity_id": "light.a", "state": "on"}]
        )
        assert decode_typed_result(CommandKind.RETRIEVE_STATES, message) == (
            State(entity_id="light.a", state="on"),
        )

    def test_empty_list(self):
        message = GenericResult(id=1, success=True, payload=[])
        assert decode_typed_result(CommandKind.LIST_AREAS, message) == ()

    def test_ping_decodes_pong(self):
        assert decode_typed_result(CommandKind.PING, Pong(id=3)) == Pong(id=3)

    def test_ping_rejects_result(self):
        message = GenericResult(id=3, success=True, payload=None)
        assert decode_typed_result(CommandKind.PING, message) is None

    def test_list_rejects_pong(self):
        assert decode_typed_result(CommandKind.LIST_AREAS, Pong(id=3)) is None

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            {"area_id": "a1", "name": "Kitchen"},
            [{"area_id": "a1"}],
            ["a1"],
            [{"area_id": 1, "name": "Kitchen"}],
            [{"area_id": "a1", "name": "Kitchen", "aliases": "cook"}],
        ],
    )
    def test_shape_mismatch(self, payload):
        """Test payloads that do not match the kind decode to None."""
        message = GenericResult(id=1, success=True, payload=payload)
        assert decode_typed_result(CommandKind.LIST_AREAS, message) is None
