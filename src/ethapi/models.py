"""
Data Models for Requests, Subscriptions and Configuration.

Defines the JSON-RPC envelopes exchanged with the node, the records the
subscription manager keeps, and the typed view of the `api:` config section.
"""
from dataclasses import dataclass, field, asdict
import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Union

from enum import Enum

from ethapi.errors import TransportError


class Availability(str, Enum):
    PUBLIC = "public"
    PERSONAL = "personal"


class Capability(str, Enum):
    FULL = "full"
    LIGHT = "light"


class SubscriptionState(str, Enum):
    REQUESTED = "requested"
    ACTIVE = "active"
    UNSUBSCRIBED = "unsubscribed"


# --- JSON-RPC envelopes ---

@dataclass(frozen=True, kw_only=True)
class RpcRequest:
    """JSON-RPC 2.0 request."""
    method: str
    params: List[Any] = field(default_factory=list)
    id: Optional[Union[str, int]] = None
    jsonrpc: str = "2.0"

    def to_dict(self) -> Dict[str, Any]:
        request = asdict(self)
        if self.id is None:
            del request["id"]
        return request

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def to_bytes(self) -> bytes:
        """Converts the request to UTF-8 encoded bytes for the wire."""
        return self.to_json().encode('utf-8')


@dataclass(frozen=True, kw_only=True)
class RpcResponse:
    """JSON-RPC 2.0 response."""
    id: Optional[Union[str, int]] = None
    result: Any = None
    error: Optional[Dict[str, Any]] = None
    jsonrpc: str = "2.0"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RpcResponse":
        return cls(
            id=data.get("id"),
            result=data.get("result"),
            error=data.get("error"),
            jsonrpc=data.get("jsonrpc", "2.0"),
        )

    @classmethod
    def from_bytes(cls, payload: bytes) -> "RpcResponse":
        return cls.from_dict(json.loads(payload.decode('utf-8')))

    def unwrap(self) -> Any:
        """Returns the result, or raises the classified TransportError."""
        if self.error is not None:
            raise TransportError.from_rpc_error(self.error)
        return self.result


# --- Node classification ---

@dataclass(frozen=True)
class NodeKind:
    availability: Availability
    capability: Capability

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeKind":
        # Unknown values raise ValueError, which the injector treats as "no middleware"
        return cls(
            availability=Availability(data["availability"]),
            capability=Capability(data["capability"]),
        )

    @property
    def is_public(self) -> bool:
        return self.availability == Availability.PUBLIC


# --- Subscription & polling records ---

@dataclass
class Subscription:
    """A live emulated subscription owned by a SubscriptionManager."""
    id: int
    name: str
    callback: Callable[[Any], Any]
    state: SubscriptionState = SubscriptionState.REQUESTED
    last_value: Any = None
    delivered: bool = False
    task: Optional[asyncio.Task] = field(default=None, repr=False)


@dataclass(frozen=True, kw_only=True)
class PollContext:
    """Everything one poll_method invocation needs. Never shared."""
    selector: str
    operation: Callable[..., Any]
    args: tuple = ()
    validator: Optional[Callable[[Any], Any]] = None
    interval: float = 0.5
    max_attempts: Optional[int] = None


# --- Configuration ---

@dataclass(frozen=True, kw_only=True)
class ApiConfig:
    poll_interval: float = 0.5
    poll_max_attempts: Optional[int] = None
    poll_timeout: Optional[float] = None
    subscription_interval: float = 1.0
    inject_middleware: bool = True
    public_availability: Availability = Availability.PUBLIC
    local_accounts: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ApiConfig":
        """Reads the `api:` section of a loaded config file."""
        api_conf = config.get('api', {}) or {}
        max_attempts = api_conf.get('poll_max_attempts')
        timeout = api_conf.get('poll_timeout')
        return cls(
            poll_interval=float(api_conf.get('poll_interval', 0.5)),
            poll_max_attempts=int(max_attempts) if max_attempts is not None else None,
            poll_timeout=float(timeout) if timeout is not None else None,
            subscription_interval=float(api_conf.get('subscription_interval', 1.0)),
            inject_middleware=bool(api_conf.get('inject_middleware', True)),
            public_availability=Availability(api_conf.get('public_availability', 'public')),
            local_accounts=[address.lower() for address in api_conf.get('local_accounts', [])],
        )
