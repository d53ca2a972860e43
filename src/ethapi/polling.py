"""
Poll-Until-Satisfied Driver.

Turns a one-shot RPC operation into a retried, validated asynchronous value:
the operation is called, the result checked, and the call repeated after a
fixed interval until the check passes.

Failures end the poll. A `RequestRejected` failure is an expected outcome
(the user declined) and is only propagated; every other failure is also
reported to the error sink first.
"""
import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

from ethapi.errors import PollCancelled, PollExhausted, is_request_rejected
from ethapi.models import PollContext

logger = logging.getLogger(__name__)

ErrorSink = Callable[[str, BaseException], None]


def log_error(context: str, error: BaseException) -> None:
    """Default error sink."""
    logger.error(f"{context} failed: {error!r}")


class PollingDriver:
    interval: float
    max_attempts: Optional[int]
    timeout: Optional[float]

    """
    Repeats an operation until a validator is satisfied.
    `resolve` maps a selector to a bound operation (see `Api.method`).
    """
    def __init__(self, resolve: Callable[[Any], Callable[..., Any]], interval: float = 0.5,
                 max_attempts: Optional[int] = None, timeout: Optional[float] = None,
                 error_sink: Optional[ErrorSink] = None):
        self._resolve = resolve
        self.interval = interval
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._error_sink = error_sink or log_error

    async def poll(self, selector: Any, input: Any = None,
                   validator: Optional[Callable[[Any], Any]] = None, *,
                   interval: Optional[float] = None,
                   max_attempts: Optional[int] = None,
                   timeout: Optional[float] = None,
                   cancel_event: Optional[asyncio.Event] = None) -> Any:
        """
        Resolves with the first result the validator accepts (or the first
        truthy result when there is no validator).

        `input` is passed as the single argument of the operation; a tuple is
        unpacked into several arguments and None means no arguments.
        Unknown selectors fail immediately with UnknownMethod.
        """
        context = PollContext(
            selector=_label(selector),
            operation=self._resolve(selector),
            args=_as_args(input),
            validator=validator,
            interval=self.interval if interval is None else interval,
            max_attempts=self.max_attempts if max_attempts is None else max_attempts,
        )
        timeout = self.timeout if timeout is None else timeout
        state = {'attempts': 0}

        if timeout is None:
            return await self._run(context, state, cancel_event)

        try:
            return await asyncio.wait_for(self._run(context, state, cancel_event), timeout)
        except asyncio.TimeoutError:
            raise PollExhausted(context.selector, state['attempts'], timeout=timeout) from None

    async def _run(self, context: PollContext, state: dict,
                   cancel_event: Optional[asyncio.Event]) -> Any:
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise PollCancelled(context.selector, state['attempts'])

            state['attempts'] += 1
            try:
                result = await context.operation(*context.args)
            except Exception as error:
                # Don't report if the request is rejected: that's ok
                if not is_request_rejected(error):
                    self._error_sink(f"poll_method {context.selector}", error)
                raise

            if await _satisfied(context.validator, result):
                logger.debug(f"{context.selector} satisfied after {state['attempts']} attempt(s)")
                return result

            if context.max_attempts is not None and state['attempts'] >= context.max_attempts:
                raise PollExhausted(context.selector, state['attempts'])

            await self._wait(context, state, cancel_event)

    async def _wait(self, context: PollContext, state: dict,
                    cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is None:
            await asyncio.sleep(context.interval)
            return

        try:
            await asyncio.wait_for(cancel_event.wait(), context.interval)
        except asyncio.TimeoutError:
            return
        raise PollCancelled(context.selector, state['attempts'])


def _label(selector: Any) -> str:
    if isinstance(selector, str):
        return selector
    return "_".join(selector)


def _as_args(input: Any) -> tuple:
    if input is None:
        return ()
    if isinstance(input, tuple):
        return input
    return (input,)


async def _satisfied(validator: Optional[Callable[[Any], Any]], result: Any) -> bool:
    if validator is None:
        return bool(result)
    verdict = validator(result)
    if inspect.isawaitable(verdict):
        verdict = await verdict
    return bool(verdict)
