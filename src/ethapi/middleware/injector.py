"""
Middleware Injection.

The MiddlewareInjector asks the node what kind of node it is and, for public
nodes, hands the transport a middleware factory. It is itself the deferred
value registered with the transport: awaiting it yields the factory or None.

The probe runs at most once per injector and never raises. Any failure, and
`cancel()`, degrades to "no middleware".
"""
import asyncio
import logging
from typing import Any, Callable, Optional

from ethapi.middleware.base import resolving_middleware
from ethapi.models import Availability

logger = logging.getLogger(__name__)

MiddlewareFactory = Callable[[Any], Any]


class MiddlewareInjector:
    _task: Optional[asyncio.Task]
    _registered: bool
    _cancelled: bool

    def __init__(self, parity, transport, factory: MiddlewareFactory,
                 availability: Availability = Availability.PUBLIC):
        self._parity = parity
        self._transport = transport
        self._factory = factory
        self._availability = availability
        self._task = None
        self._registered = False
        self._cancelled = False

    def __await__(self):
        return self._result().__await__()

    @property
    def done(self) -> bool:
        if self._task is None:
            return self._cancelled
        return self._task.done()

    def register(self) -> None:
        """
        Hands this injector to the transport as a pending middleware entry.
        Safe to call repeatedly; the transport only ever sees one entry.
        """
        if self._registered:
            return
        self._registered = True
        self._transport.add_middleware(self)

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Built outside a loop: the probe starts on first await instead
            logger.debug("No running event loop, deferring node kind probe")
            return
        self.start()

    def start(self) -> Optional[asyncio.Task]:
        if self._task is None and not self._cancelled:
            self._task = asyncio.get_running_loop().create_task(self._probe())
        return self._task

    def cancel(self) -> None:
        """Stops the probe. Anyone awaiting the injector then gets None."""
        self._cancelled = True
        if self._task is not None and not self._task.done():
            logger.debug("Cancelling node kind probe")
            self._task.cancel()

    async def _result(self) -> Optional[MiddlewareFactory]:
        task = self.start()
        if task is None:
            return None
        # One waiter giving up must not stop the probe for the others
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            return None

    async def _probe(self) -> Optional[MiddlewareFactory]:
        # The task runs in its own context copy, so this never leaks to callers
        resolving_middleware.set(True)
        try:
            node_kind = await self._parity.node_kind()
        except Exception as e:
            logger.debug(f"Node kind probe failed, continuing without middleware: {e!r}")
            return None

        if node_kind.availability == self._availability:
            logger.info(f"Node availability is '{node_kind.availability.value}', installing middleware")
            return self._factory

        logger.debug(f"Node availability is '{node_kind.availability.value}', no middleware needed")
        return None
