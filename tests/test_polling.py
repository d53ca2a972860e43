import pytest
import asyncio
from unittest.mock import AsyncMock, MagicMock

from ethapi.errors import PollCancelled, PollExhausted, RequestRejected, TransportError, UnknownMethod
from ethapi.polling import PollingDriver, log_error

"""
PollingDriver: retry-until-valid semantics, failure classification and the
cancellation / bounding extensions.
"""


def make_driver(operation, sink=None, **kwargs):
    def resolve(selector):
        if selector == 'unknown_method':
            raise UnknownMethod(selector)
        return operation
    return PollingDriver(resolve, interval=kwargs.pop('interval', 0.01), error_sink=sink, **kwargs)


@pytest.mark.asyncio
async def test_resolves_after_exactly_n_attempts():
    operation = AsyncMock(side_effect=[1, 2, 3, 4, 5])
    driver = make_driver(operation)

    result = await driver.poll('eth_blockNumber', validator=lambda value: value >= 3)

    assert result == 3
    assert operation.await_count == 3

    # No attempt after satisfaction
    await asyncio.sleep(0.05)
    assert operation.await_count == 3


@pytest.mark.asyncio
async def test_truthy_result_satisfies_without_validator():
    operation = AsyncMock(side_effect=[None, {}, {'blockHash': '0x1'}])
    driver = make_driver(operation)

    assert await driver.poll('eth_getTransactionReceipt', '0xhash') == {'blockHash': '0x1'}
    assert operation.await_count == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("input, expected_args", [
    (None, ()),
    ('0xhash', ('0xhash',)),
    (('0xaddress', 'latest'), ('0xaddress', 'latest')),
    ([1, 2], ([1, 2],)),
])
async def test_input_is_passed_to_the_operation(input, expected_args):
    operation = AsyncMock(return_value=True)
    driver = make_driver(operation)

    await driver.poll('eth_call', input)

    operation.assert_awaited_once_with(*expected_args)


@pytest.mark.asyncio
async def test_async_validator_is_awaited():
    operation = AsyncMock(side_effect=['a', 'b'])
    validator = AsyncMock(side_effect=[False, True])
    driver = make_driver(operation)

    assert await driver.poll('parity_checkRequest', 1, validator) == 'b'
    assert validator.await_count == 2


@pytest.mark.asyncio
async def test_rejected_failure_propagates_without_reporting():
    operation = AsyncMock(side_effect=RequestRejected())
    sink = MagicMock()
    driver = make_driver(operation, sink)

    with pytest.raises(RequestRejected):
        await driver.poll('parity_checkRequest', 1)

    sink.assert_not_called()
    assert operation.await_count == 1


@pytest.mark.asyncio
async def test_other_failures_are_reported_once_and_propagate():
    error = TransportError("connection refused")
    operation = AsyncMock(side_effect=[None, error])
    sink = MagicMock()
    driver = make_driver(operation, sink)

    with pytest.raises(TransportError) as excinfo:
        await driver.poll('eth_getTransactionReceipt', '0xhash')

    assert excinfo.value is error
    sink.assert_called_once_with('poll_method eth_getTransactionReceipt', error)


@pytest.mark.asyncio
async def test_unexpected_exceptions_are_reported_too():
    operation = AsyncMock(side_effect=KeyError('result'))
    sink = MagicMock()
    driver = make_driver(operation, sink)

    with pytest.raises(KeyError):
        await driver.poll('eth_blockNumber')

    sink.assert_called_once()


@pytest.mark.asyncio
async def test_unknown_selector_fails_before_any_attempt():
    operation = AsyncMock()
    sink = MagicMock()
    driver = make_driver(operation, sink)

    with pytest.raises(UnknownMethod):
        await driver.poll('unknown_method')

    operation.assert_not_awaited()
    sink.assert_not_called()


@pytest.mark.asyncio
async def test_max_attempts_bounds_the_retries():
    operation = AsyncMock(return_value=None)
    driver = make_driver(operation)

    with pytest.raises(PollExhausted) as excinfo:
        await driver.poll('eth_getTransactionReceipt', '0xhash', max_attempts=4)

    assert excinfo.value.attempts == 4
    assert operation.await_count == 4


@pytest.mark.asyncio
async def test_driver_default_max_attempts_applies():
    operation = AsyncMock(return_value=False)
    driver = make_driver(operation, max_attempts=2)

    with pytest.raises(PollExhausted):
        await driver.poll('eth_syncing')

    assert operation.await_count == 2


@pytest.mark.asyncio
async def test_timeout_raises_poll_exhausted():
    operation = AsyncMock(return_value=None)
    driver = make_driver(operation)

    with pytest.raises(PollExhausted) as excinfo:
        await driver.poll('eth_getTransactionReceipt', '0xhash', timeout=0.05)

    assert excinfo.value.timeout == 0.05
    assert operation.await_count >= 1


@pytest.mark.asyncio
async def test_cancel_event_stops_polling():
    operation = AsyncMock(return_value=None)
    cancel = asyncio.Event()
    driver = make_driver(operation, interval=1.0)

    poll = asyncio.create_task(driver.poll('parity_checkRequest', 1, cancel_event=cancel))
    await asyncio.sleep(0.02)
    cancel.set()

    with pytest.raises(PollCancelled):
        await asyncio.wait_for(poll, timeout=0.5)
    assert operation.await_count == 1


@pytest.mark.asyncio
async def test_already_set_cancel_event_makes_no_attempt():
    operation = AsyncMock(return_value=None)
    cancel = asyncio.Event()
    cancel.set()
    driver = make_driver(operation)

    with pytest.raises(PollCancelled):
        await driver.poll('parity_checkRequest', 1, cancel_event=cancel)

    operation.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancelling_the_task_stops_retries():
    operation = AsyncMock(return_value=None)
    driver = make_driver(operation)

    poll = asyncio.create_task(driver.poll('eth_getTransactionReceipt', '0xhash'))
    await asyncio.sleep(0.03)
    poll.cancel()
    with pytest.raises(asyncio.CancelledError):
        await poll

    attempts = operation.await_count
    await asyncio.sleep(0.05)
    assert operation.await_count == attempts


@pytest.mark.asyncio
async def test_concurrent_polls_are_independent():
    first = AsyncMock(side_effect=[None, 'first'])
    second = AsyncMock(side_effect=['second'])
    operations = {'a_first': first, 'a_second': second}
    driver = PollingDriver(operations.__getitem__, interval=0.01)

    results = await asyncio.gather(driver.poll('a_first'), driver.poll('a_second'))

    assert results == ['first', 'second']


def test_default_sink_logs_errors(caplog):
    log_error('poll_method eth_blockNumber', TransportError('boom'))

    assert 'poll_method eth_blockNumber failed' in caplog.text
