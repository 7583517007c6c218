"""Client configuration loading."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

DEFAULT_PORT = 8123
DEFAULT_PATH = "/api/websocket"


@dataclass(frozen=True)
class ClientConfig:
    """Connection and timing settings for one hub session.

    Attributes:
        host: Hub hostname or IP.
        token: Long-lived access token.
        port: Hub port.
        use_ssl: Connect with wss:// instead of ws://.
        path: WebSocket endpoint path.
        request_timeout: Deadline for each call, in seconds.
        connect_timeout: Deadline for opening the websocket, in seconds.
        ping_interval: Websocket-level keepalive interval, in seconds.
        evict_on_timeout: Remove a request from the registry when its
            call times out.
    """

    host: str
    token: str
    port: int = DEFAULT_PORT
    use_ssl: bool = False
    path: str = DEFAULT_PATH
    request_timeout: float = 1.0
    connect_timeout: float = 15.0
    ping_interval: int = 20
    evict_on_timeout: bool = True

    def __post_init__(self) -> None:
        """Validate config invariants."""
        if not self.host:
            raise ValueError("host is required")
        if not 0 < self.port < 65536:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if not self.path.startswith("/"):
            raise ValueError(f"path must start with '/', got {self.path!r}")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.connect_timeout <= 0:
            raise ValueError(f"connect_timeout must be positive, got {self.connect_timeout}")

    @property
    def url(self) -> str:
        scheme = "wss" if self.use_ssl else "ws"
        return f"{scheme}://{self.host}:{self.port}{self.path}"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ClientConfig:
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        missing = [key for key in ("host", "token") if not data.get(key)]
        if missing:
            raise ConfigError(f"Missing required config keys: {', '.join(missing)}")
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except (TypeError, ValueError) as err:
            raise ConfigError(f"Invalid client config: {err}") from err


def load_config(path: Path) -> ClientConfig:
    """Load a ClientConfig from a YAML file."""
    if not path.exists():
        raise ConfigError(f"File not found: {path}")
    with path.open() as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as err:
            raise ConfigError(f"Invalid YAML in {path}") from err
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return ClientConfig.from_mapping(data)
