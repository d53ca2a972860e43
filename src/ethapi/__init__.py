"""
ethapi

An asyncio client facade for Ethereum/Parity style JSON-RPC nodes over an
injectable transport, with emulated and native subscriptions, conditional
request middleware and a poll-until-satisfied helper.
"""
from ethapi.api import Api, PLACEHOLDER_SUBSCRIPTION_ID
from ethapi.errors import (
    ApiError,
    ConfigurationError,
    ErrorType,
    InvalidTopic,
    PollCancelled,
    PollExhausted,
    RequestRejected,
    ServiceUnavailable,
    TransportError,
    UnknownMethod,
    UnknownSubscription,
)
from ethapi.models import ApiConfig
from ethapi.transport import MqttTransport, Transport

__version__ = "0.1.0"
__all__ = [
    "Api",
    "ApiConfig",
    "PLACEHOLDER_SUBSCRIPTION_ID",
    # Transports
    "Transport",
    "MqttTransport",
    # Errors
    "ApiError",
    "ConfigurationError",
    "ErrorType",
    "InvalidTopic",
    "PollCancelled",
    "PollExhausted",
    "RequestRejected",
    "ServiceUnavailable",
    "TransportError",
    "UnknownMethod",
    "UnknownSubscription",
]
