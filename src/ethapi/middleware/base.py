"""
Request Middleware.

A middleware sits in front of a transport and may answer a request itself
instead of letting it reach the node. Handlers are registered per RPC method
name; anything without a handler (or whose handler returns `CONTINUE`) is
passed on down the pipeline.
"""
import contextvars
import inspect
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

# Set inside the middleware probe task. Requests issued while it is set skip
# middleware entries that have not resolved yet, otherwise the probe would
# wait on its own registration.
resolving_middleware: contextvars.ContextVar[bool] = contextvars.ContextVar(
    "resolving_middleware", default=False
)


class _Continue:
    def __repr__(self) -> str:
        return "CONTINUE"


class Middleware:
    """Base middleware class."""

    CONTINUE = _Continue()

    def __init__(self, transport):
        self._transport = transport
        self._handlers: Dict[str, Callable[[List[Any]], Any]] = {}

    @property
    def transport(self):
        return self._transport

    @property
    def methods(self) -> List[str]:
        return sorted(self._handlers)

    def register(self, method: str, handler: Callable[[List[Any]], Any]) -> None:
        if method in self._handlers:
            logger.warning(f"Replacing middleware handler for {method}")
        self._handlers[method] = handler

    async def handle(self, method: str, params: List[Any]) -> Any:
        """Returns the handler's result, or CONTINUE when the method isn't ours."""
        handler = self._handlers.get(method)
        if handler is None:
            return Middleware.CONTINUE

        result = handler(params)
        if inspect.isawaitable(result):
            result = await result
        logger.debug(f"Middleware {type(self).__name__} handled {method}")
        return result
