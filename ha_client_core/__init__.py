"""Session and correlation core for the hub websocket protocol."""

__version__ = "0.1.0"

from .client import HAClient
from .config import ClientConfig, load_config
from .errors import (
    AuthenticationFailed,
    AuthenticationRequired,
    ConfigError,
    HAClientError,
    HAConnectionError,
    HAHandshakeError,
    RequestTimeout,
    ResponseError,
)
from .models import (
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
from .registry import PendingRequests
from .session import SessionPhase, SessionStateMachine
from .transport import MessageExchange, WebSocketMessageExchange

__all__ = [
    "Area",
    "AuthInvalid",
    "AuthOk",
    "AuthRequired",
    "AuthenticationFailed",
    "AuthenticationRequired",
    "ClientConfig",
    "CommandKind",
    "ConfigError",
    "Device",
    "Entity",
    "GenericResult",
    "HAClient",
    "HAClientError",
    "HAConnectionError",
    "HAHandshakeError",
    "MessageExchange",
    "PendingRequests",
    "Pong",
    "RequestTimeout",
    "ResponseError",
    "SessionPhase",
    "SessionStateMachine",
    "State",
    "WebSocketMessageExchange",
    "__version__",
    "load_config",
]
