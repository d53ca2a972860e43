"""
Error Taxonomy.

Every failure the Api surfaces derives from `ApiError`. Transport failures
carry an `ErrorType` so callers (and the polling driver) can tell an
expected rejection apart from a real fault.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(str, Enum):
    REQUEST_REJECTED = "REQUEST_REJECTED"
    RPC = "RPC"
    TIMEOUT = "TIMEOUT"
    TRANSPORT = "TRANSPORT"


# JSON-RPC error codes the node uses for classified failures
REQUEST_REJECTED_CODE = -32040
REQUEST_REJECTED_LIMIT_CODE = -32041


class ApiError(Exception):
    """Base class for all errors raised by ethapi."""


class ConfigurationError(ApiError):
    """The Api was given a transport or a config file it cannot work with."""


class ServiceUnavailable(ApiError):
    """A capability (pubsub, subscriptions) was never built for this Api."""


class InvalidTopic(ApiError):
    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(f"{topic!r} is not a valid subscription topic")


class UnknownSubscription(ApiError):
    def __init__(self, subscription_id: Any):
        self.subscription_id = subscription_id
        super().__init__(f"No active subscription with id {subscription_id!r}")


class UnknownMethod(ApiError):
    def __init__(self, selector: Any):
        self.selector = selector
        super().__init__(f"Unknown method {selector!r}")


class PollExhausted(ApiError):
    """Polling gave up before the validator was satisfied."""

    def __init__(self, selector: str, attempts: int, timeout: Optional[float] = None):
        self.selector = selector
        self.attempts = attempts
        self.timeout = timeout
        if timeout is not None:
            message = f"{selector} not satisfied within {timeout}s ({attempts} attempts)"
        else:
            message = f"{selector} not satisfied after {attempts} attempts"
        super().__init__(message)


class PollCancelled(ApiError):
    def __init__(self, selector: str, attempts: int):
        self.selector = selector
        self.attempts = attempts
        super().__init__(f"Polling {selector} cancelled after {attempts} attempts")


class TransportError(ApiError):
    """
    A failure reported by (or while talking to) the remote node.
    """

    def __init__(self, message: str, type: ErrorType = ErrorType.TRANSPORT,
                 code: Optional[int] = None, data: Any = None):
        self.type = type
        self.code = code
        self.data = data
        super().__init__(message)

    @classmethod
    def from_rpc_error(cls, error: Dict[str, Any]) -> "TransportError":
        """Builds the right subclass from a JSON-RPC error object."""
        code = error.get("code")
        message = error.get("message", "Unknown error")
        data = error.get("data")
        if code in (REQUEST_REJECTED_CODE, REQUEST_REJECTED_LIMIT_CODE):
            return RequestRejected(message, code=code, data=data)
        return cls(message, type=ErrorType.RPC, code=code, data=data)

    def to_dict(self) -> Dict[str, Any]:
        error = {"type": self.type.value, "message": str(self)}
        if self.code is not None:
            error["code"] = self.code
        if self.data is not None:
            error["data"] = self.data
        return error


class RequestRejected(TransportError):
    """The user or node explicitly declined the request. Expected, not a fault."""

    def __init__(self, message: str = "Request has been rejected.",
                 code: Optional[int] = REQUEST_REJECTED_CODE, data: Any = None):
        super().__init__(message, type=ErrorType.REQUEST_REJECTED, code=code, data=data)


def is_request_rejected(error: BaseException) -> bool:
    return getattr(error, "type", None) == ErrorType.REQUEST_REJECTED
