"""
Transport Base Class.

This module is responsible for:
- Allocating request ids.
- Holding the append-only list of middleware entries handed in through
  `add_middleware()`. Entries may be deferred (any awaitable resolving to a
  middleware factory or None); each one is awaited once and its factory is
  instantiated once with this transport.
- Running every request through the resolved middleware before it reaches
  the concrete `_execute()` of a subclass.

Subclasses that support native push notifications additionally define
`subscribe(topic, params, callback)` and `unsubscribe(subscription_id)`.
The base class does not, so the Api can detect the capability.
"""
import asyncio
import itertools
import logging
from typing import Any, Dict, List, Optional

from ethapi.middleware.base import Middleware, resolving_middleware

logger = logging.getLogger(__name__)


class Transport:
    _middleware: List[Any]
    _pending: Dict[int, asyncio.Future]
    _resolved: Dict[int, Optional[Middleware]]

    def __init__(self):
        self._ids = itertools.count(1)
        self._middleware = []
        self._pending = {}
        self._resolved = {}

    def next_id(self) -> int:
        return next(self._ids)

    @property
    def middleware(self) -> tuple:
        """The registered entries, in registration order."""
        return tuple(self._middleware)

    def add_middleware(self, provider: Any) -> None:
        """
        Appends a middleware entry. `provider` is a factory, a middleware
        instance, None, or an awaitable resolving to one of those.
        """
        self._middleware.append(provider)
        logger.debug(f"Registered middleware entry #{len(self._middleware)}")

    async def execute(self, method: str, *params: Any) -> Any:
        params_list = list(params)
        for middleware in await self._active_middleware():
            result = await middleware.handle(method, params_list)
            if result is not Middleware.CONTINUE:
                return result

        return await self._execute(method, params_list)

    async def _execute(self, method: str, params: List[Any]) -> Any:
        """
        Abstract hook: sends the request to the node and returns its result.
        Subclasses must override it; middleware has already run.
        """
        raise NotImplementedError(f"{type(self).__name__} does not implement _execute()")

    async def _active_middleware(self) -> List[Middleware]:
        bypass_pending = resolving_middleware.get()
        active: List[Middleware] = []

        for index, entry in enumerate(list(self._middleware)):
            if index not in self._resolved:
                if bypass_pending:
                    continue
                await self._resolve(index, entry)

            middleware = self._resolved.get(index)
            if middleware is not None:
                active.append(middleware)

        return active

    async def _resolve(self, index: int, entry: Any) -> None:
        if not hasattr(entry, '__await__'):
            self._resolved[index] = self._instantiate(entry)
            return

        # Concurrent requests share one future per entry
        future = self._pending.get(index)
        if future is None:
            future = asyncio.ensure_future(entry)
            self._pending[index] = future

        # A cancelled caller must not cancel the shared future or the probe behind it
        try:
            value = await asyncio.shield(future)
        except asyncio.CancelledError:
            if not future.cancelled():
                raise
            logger.info(f"Middleware entry #{index + 1} was cancelled, skipping it")
            value = None
        except Exception as e:
            logger.warning(f"Middleware entry #{index + 1} failed to resolve, skipping it: {e!r}")
            value = None
        if index not in self._resolved:
            self._resolved[index] = self._instantiate(value)
            self._pending.pop(index, None)

    def _instantiate(self, value: Any) -> Optional[Middleware]:
        if value is None or isinstance(value, Middleware):
            return value
        middleware = value(self)
        logger.info(f"Installed middleware {type(middleware).__name__}")
        return middleware
