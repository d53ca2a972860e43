"""
The Api Facade.

Single entry point wiring the method groups, subscriptions, pubsub, polling
and middleware injection around one injected transport.

Construction is two-phase. The synchronous phase validates the transport and
builds everything callers use directly. The background phase (node kind
probe + middleware registration) runs on its own; `wait_for_middleware()`
is its handle. The core behaves the same whether or not it has finished.
"""
import functools
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ethapi.contract import Contract
from ethapi.errors import ConfigurationError, ServiceUnavailable, UnknownMethod
from ethapi.middleware import LocalAccountsMiddleware, MiddlewareInjector
from ethapi.models import ApiConfig
from ethapi.polling import ErrorSink, PollingDriver
from ethapi.pubsub import Pubsub
from ethapi.rpc import (
    METHOD_GROUPS, Db, Eth, MethodGroup, MethodGroupName, Net, Parity,
    Personal, Shh, Signer, Trace, Web3,
)
from ethapi.subscriptions import SubscriptionManager

logger = logging.getLogger(__name__)

# Resolved by subscribe() when subscriptions are disabled
PLACEHOLDER_SUBSCRIPTION_ID = 1

Selector = Union[str, Tuple[Union[str, MethodGroupName], str]]


def _has_capability(transport: Any, name: str) -> bool:
    return callable(getattr(transport, name, None))


class Api:
    _groups: Dict[MethodGroupName, MethodGroup]
    _pubsub: Optional[Pubsub]
    _subscriptions: Optional[SubscriptionManager]
    _middleware: Optional[MiddlewareInjector]

    def __init__(self, transport, allow_subscriptions: bool = True,
                 config: Optional[ApiConfig] = None, error_sink: Optional[ErrorSink] = None):
        if transport is None or not _has_capability(transport, 'execute'):
            raise ConfigurationError("Api needs transport with execute() function defined")

        self._transport = transport
        self._config = config or ApiConfig()

        self._groups = {name: group(transport) for name, group in METHOD_GROUPS.items()}

        self._pubsub = Pubsub(transport) if _has_capability(transport, 'subscribe') else None

        self._subscriptions = None
        if allow_subscriptions:
            self._subscriptions = SubscriptionManager(
                self, interval=self._config.subscription_interval, error_sink=error_sink
            )

        self._polling = PollingDriver(
            self.method,
            interval=self._config.poll_interval,
            max_attempts=self._config.poll_max_attempts,
            timeout=self._config.poll_timeout,
            error_sink=error_sink,
        )

        self._middleware = None
        if self._config.inject_middleware and _has_capability(transport, 'add_middleware'):
            factory = functools.partial(LocalAccountsMiddleware, accounts=self._config.local_accounts)
            self._middleware = MiddlewareInjector(
                self.parity, transport, factory, availability=self._config.public_availability
            )
            self._middleware.register()

    # --- Accessors ---

    @property
    def pubsub(self) -> Pubsub:
        if self._pubsub is None:
            raise ServiceUnavailable("Pubsub is only available with a subscribing-supported transport injected!")
        return self._pubsub

    @property
    def subscriptions(self) -> SubscriptionManager:
        if self._subscriptions is None:
            raise ServiceUnavailable("Subscriptions were disabled for this Api (allow_subscriptions=False)")
        return self._subscriptions

    @property
    def config(self) -> ApiConfig:
        return self._config

    @property
    def transport(self):
        return self._transport

    @property
    def db(self) -> Db:
        return self._groups[MethodGroupName.DB]

    @property
    def eth(self) -> Eth:
        return self._groups[MethodGroupName.ETH]

    @property
    def net(self) -> Net:
        return self._groups[MethodGroupName.NET]

    @property
    def parity(self) -> Parity:
        return self._groups[MethodGroupName.PARITY]

    @property
    def personal(self) -> Personal:
        return self._groups[MethodGroupName.PERSONAL]

    @property
    def shh(self) -> Shh:
        return self._groups[MethodGroupName.SHH]

    @property
    def signer(self) -> Signer:
        return self._groups[MethodGroupName.SIGNER]

    @property
    def trace(self) -> Trace:
        return self._groups[MethodGroupName.TRACE]

    @property
    def web3(self) -> Web3:
        return self._groups[MethodGroupName.WEB3]

    # --- Method resolution ---

    def group(self, name: Union[str, MethodGroupName]) -> MethodGroup:
        try:
            return self._groups[MethodGroupName(name)]
        except ValueError:
            raise UnknownMethod(name) from None

    def method(self, selector: Selector) -> Callable[..., Any]:
        """
        Resolves 'eth_getTransactionReceipt', 'eth_get_transaction_receipt'
        or ('eth', 'get_transaction_receipt') to the bound operation.
        """
        if isinstance(selector, str):
            group_name, _, operation = selector.partition('_')
        else:
            group_name, operation = selector
        if not operation:
            raise UnknownMethod(selector)
        return self.group(group_name).operation(operation)

    # --- Contracts ---

    def new_contract(self, abi: List[Dict[str, Any]], address: Optional[str] = None) -> Contract:
        return Contract(self, abi).at(address)

    def bind_contract(self, abi: List[Dict[str, Any]], address: str) -> Contract:
        return self.new_contract(abi, address)

    # --- Subscriptions ---

    async def subscribe(self, name: str, callback: Callable[[Any], Any]) -> int:
        if self._subscriptions is None:
            return PLACEHOLDER_SUBSCRIPTION_ID
        return await self._subscriptions.subscribe(name, callback)

    async def unsubscribe(self, subscription_id: int) -> bool:
        if self._subscriptions is None:
            return True
        return await self._subscriptions.unsubscribe(subscription_id)

    # --- Polling ---

    async def poll_method(self, selector: Selector, input: Any = None,
                          validator: Optional[Callable[[Any], Any]] = None, **options: Any) -> Any:
        """
        Calls `selector` with `input` until `validator` accepts the result.
        `options` are passed on to PollingDriver.poll (interval, max_attempts,
        timeout, cancel_event).
        """
        return await self._polling.poll(selector, input, validator, **options)

    # --- Lifecycle ---

    async def wait_for_middleware(self) -> Optional[Callable[..., Any]]:
        """
        Waits for the background middleware probe. Returns the registered
        factory, or None when no middleware was (or will be) installed.
        """
        if self._middleware is None:
            return None
        return await self._middleware

    async def close(self) -> None:
        """Stops the middleware probe and the emulated subscriptions. The transport is left alone."""
        if self._middleware is not None:
            self._middleware.cancel()
        if self._subscriptions is not None:
            await self._subscriptions.close()
        logger.debug("Api closed")
