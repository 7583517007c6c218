"""Data model for hub sessions.

Three groups of types live here:

- ``CommandKind``: the tag of an outgoing correlated command. Its value is
  the wire ``type`` and decides how a reply payload is decoded.
- Typed results (``Area``, ``Device``, ``Entity``, ``State``): the records
  returned by the list/retrieve commands.
- Inbound messages (``AuthRequired``, ``AuthOk``, ``AuthInvalid``,
  ``Pong``, ``GenericResult``): decoded envelopes. Each carries enough
  information to route itself, either a phase transition or a
  correlation id.

All records are frozen; nothing mutates a message after decoding.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias


class CommandKind(Enum):
    """Correlated command tags.

    The enum value is the wire ``type`` of the request.
    """

    PING = "ping"
    LIST_AREAS = "config/area_registry/list"
    LIST_DEVICES = "config/device_registry/list"
    LIST_ENTITIES = "config/entity_registry/list"
    RETRIEVE_STATES = "get_states"


# --------------------------------------------------------------------------
# Typed results
# --------------------------------------------------------------------------


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _required_str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _str_tuple(data: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TypeError(f"{key} must be a list of strings")
    return tuple(value)


@dataclass(frozen=True)
class Area:
    """An area registry entry."""

    area_id: str
    name: str
    picture: str | None = None
    aliases: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Area:
        return cls(
            area_id=_required_str(data, "area_id"),
            name=_required_str(data, "name"),
            picture=_optional_str(data, "picture"),
            aliases=_str_tuple(data, "aliases"),
        )


@dataclass(frozen=True)
class Device:
    """A device registry entry."""

    id: str
    name: str | None = None
    area_id: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    name_by_user: str | None = None
    sw_version: str | None = None
    disabled_by: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Device:
        return cls(
            id=_required_str(data, "id"),
            name=_optional_str(data, "name"),
            area_id=_optional_str(data, "area_id"),
            manufacturer=_optional_str(data, "manufacturer"),
            model=_optional_str(data, "model"),
            name_by_user=_optional_str(data, "name_by_user"),
            sw_version=_optional_str(data, "sw_version"),
            disabled_by=_optional_str(data, "disabled_by"),
        )

    @property
    def display_name(self) -> str | None:
        """Name chosen by the user, falling back to the integration name."""
        return self.name_by_user or self.name


@dataclass(frozen=True)
class Entity:
    """An entity registry entry."""

    entity_id: str
    platform: str | None = None
    device_id: str | None = None
    area_id: str | None = None
    name: str | None = None
    original_name: str | None = None
    disabled_by: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Entity:
        return cls(
            entity_id=_required_str(data, "entity_id"),
            platform=_optional_str(data, "platform"),
            device_id=_optional_str(data, "device_id"),
            area_id=_optional_str(data, "area_id"),
            name=_optional_str(data, "name"),
            original_name=_optional_str(data, "original_name"),
            disabled_by=_optional_str(data, "disabled_by"),
        )

    @property
    def domain(self) -> str:
        """Entity domain, e.g. ``light`` for ``light.kitchen``."""
        return self.entity_id.split(".", 1)[0]


@dataclass(frozen=True)
class State:
    """Current state of one entity.

    Timestamps are kept as the ISO strings the hub sends.
    """

    entity_id: str
    state: str
    attributes: Mapping[str, Any] = field(default_factory=lambda: {})
    last_changed: str | None = None
    last_updated: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> State:
        attributes = data.get("attributes") or {}
        if not isinstance(attributes, Mapping):
            raise TypeError("attributes must be an object")
        return cls(
            entity_id=_required_str(data, "entity_id"),
            state=_required_str(data, "state"),
            attributes=dict(attributes),
            last_changed=_optional_str(data, "last_changed"),
            last_updated=_optional_str(data, "last_updated"),
        )


# --------------------------------------------------------------------------
# Inbound messages
# --------------------------------------------------------------------------


@dataclass(frozen=True)
class AuthRequired:
    """Hub greeting asking the client to authenticate."""

    ha_version: str | None = None


@dataclass(frozen=True)
class AuthOk:
    """Hub accepted the access token."""

    ha_version: str | None = None


@dataclass(frozen=True)
class AuthInvalid:
    """Hub rejected the access token; the hub closes the connection."""

    reason: str


@dataclass(frozen=True)
class Pong:
    """Reply to a ping."""

    id: int


@dataclass(frozen=True)
class GenericResult:
    """Reply to a correlated command, before its payload is typed.

    Attributes:
        id: Correlation id copied from the request.
        success: Whether the hub executed the command.
        payload: Raw ``result`` value, re-decoded once the command kind
            is known.
        error: Raw ``error`` object sent with unsuccessful results.
    """

    id: int
    success: bool
    payload: Any = None
    error: Mapping[str, Any] | None = None


InboundMessage: TypeAlias = AuthRequired | AuthOk | AuthInvalid | Pong | GenericResult


@dataclass(frozen=True)
class ResultError:
    """Failure deposited for a pending request instead of a typed result."""

    message: str
    code: str | None = None


TypedResult: TypeAlias = (
    Pong
    | tuple[Area, ...]
    | tuple[Device, ...]
    | tuple[Entity, ...]
    | tuple[State, ...]
)
