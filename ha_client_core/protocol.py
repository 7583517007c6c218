"""Message codec for the hub websocket protocol.

Outgoing commands are serialized to JSON text with sorted keys. Inbound
text is decoded in two steps: ``decode_envelope`` resolves the ``type``
tag into one of the known inbound messages, and ``decode_typed_result``
turns a result payload into typed records once the pending command kind
is known.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .models import (
    Area,
    AuthInvalid,
    AuthOk,
    AuthRequired,
    CommandKind,
    Device,
    Entity,
    GenericResult,
    InboundMessage,
    Pong,
    State,
    TypedResult,
)

_LOGGER = logging.getLogger(__name__)

MSG_AUTH = "auth"
MSG_AUTH_REQUIRED = "auth_required"
MSG_AUTH_OK = "auth_ok"
MSG_AUTH_INVALID = "auth_invalid"
MSG_PONG = "pong"
MSG_RESULT = "result"

_RECORD_DECODERS: dict[CommandKind, Callable[[Mapping[str, Any]], Any]] = {
    CommandKind.LIST_AREAS: Area.from_dict,
    CommandKind.LIST_DEVICES: Device.from_dict,
    CommandKind.LIST_ENTITIES: Entity.from_dict,
    CommandKind.RETRIEVE_STATES: State.from_dict,
}


def _dumps(message: dict[str, Any]) -> str:
    return json.dumps(message, sort_keys=True, separators=(",", ":"))


def serialize_auth(token: str) -> str:
    """Serialize the auth command carrying the access token."""
    return _dumps({"type": MSG_AUTH, "access_token": token})


def serialize_command(kind: CommandKind, msg_id: int) -> str:
    """Serialize a correlated command."""
    return _dumps({"id": msg_id, "type": kind.value})


def _is_id(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def decode_envelope(text: str) -> InboundMessage | None:
    """Decode raw inbound text into a tagged inbound message.

    Returns:
        The decoded message, or None when the text is not JSON, not an
        object, carries an unknown ``type`` or lacks a required field.
    """
    try:
        data = json.loads(text)
    except ValueError:
        _LOGGER.debug("Inbound text is not JSON: %.200s", text)
        return None

    if not isinstance(data, dict):
        return None

    msg_type = data.get("type")

    if msg_type == MSG_AUTH_REQUIRED:
        return AuthRequired(ha_version=data.get("ha_version"))

    if msg_type == MSG_AUTH_OK:
        return AuthOk(ha_version=data.get("ha_version"))

    if msg_type == MSG_AUTH_INVALID:
        reason = data.get("message")
        return AuthInvalid(reason=reason if isinstance(reason, str) else "")

    if msg_type == MSG_PONG:
        msg_id = data.get("id")
        if not _is_id(msg_id):
            return None
        return Pong(id=msg_id)

    if msg_type == MSG_RESULT:
        msg_id = data.get("id")
        success = data.get("success")
        if not _is_id(msg_id) or not isinstance(success, bool):
            return None
        error = data.get("error")
        return GenericResult(
            id=msg_id,
            success=success,
            payload=data.get("result"),
            error=error if isinstance(error, dict) else None,
        )

    _LOGGER.debug("Unrecognized message type: %s", msg_type)
    return None


def decode_typed_result(kind: CommandKind, message: InboundMessage) -> TypedResult | None:
    """Decode a routed reply into the typed result for ``kind``.

    Ping replies decode to the ``Pong`` itself. The list kinds decode the
    result payload, which must be an array of objects, into a tuple of
    records.

    Returns:
        The typed result, or None when the reply does not match ``kind``.
    """
    if kind is CommandKind.PING:
        return message if isinstance(message, Pong) else None

    if not isinstance(message, GenericResult):
        return None

    payload = message.payload
    if not isinstance(payload, list):
        return None

    decoder = _RECORD_DECODERS[kind]
    try:
        return tuple(decoder(item) for item in payload)
    except (KeyError, TypeError, AttributeError) as err:
        _LOGGER.debug("Result %d does not decode as %s: %s", message.id, kind.name, err)
        return None
