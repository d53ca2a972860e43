import pytest
import asyncio
from unittest.mock import AsyncMock, MagicMock

from ethapi.middleware import Middleware
from ethapi.middleware.base import resolving_middleware
from ethapi.transport.base import Transport
from tests.helpers.fakes import FakeTransport

"""
Transport base class: request ids and the middleware pipeline.
"""


class EchoMiddleware(Middleware):
    def __init__(self, transport):
        super().__init__(transport)
        self.register('web3_clientVersion', lambda params: 'Echo/v1')


class PassThroughMiddleware(Middleware):
    def __init__(self, transport):
        super().__init__(transport)
        self.seen = []
        self.register('web3_clientVersion', self._record)

    def _record(self, params):
        self.seen.append(params)
        return Middleware.CONTINUE


def test_request_ids_increase():
    transport = FakeTransport()
    assert [transport.next_id() for _ in range(3)] == [1, 2, 3]


def test_base_transport_has_no_native_push():
    transport = Transport()
    assert not hasattr(transport, 'subscribe')
    assert not hasattr(transport, 'unsubscribe')


@pytest.mark.asyncio
async def test_base_execute_is_abstract():
    with pytest.raises(NotImplementedError, match="Transport does not implement _execute"):
        await Transport().execute('eth_blockNumber')


@pytest.mark.asyncio
async def test_execute_without_middleware_reaches_the_node():
    transport = FakeTransport({'eth_getBalance': '0x10'})

    assert await transport.execute('eth_getBalance', '0xabc', 'latest') == '0x10'
    assert transport.calls == [('eth_getBalance', ['0xabc', 'latest'])]


@pytest.mark.asyncio
async def test_factory_middleware_short_circuits():
    transport = FakeTransport({'web3_clientVersion': 'Node/v2'})
    transport.add_middleware(EchoMiddleware)

    assert await transport.execute('web3_clientVersion') == 'Echo/v1'
    assert transport.calls == []


@pytest.mark.asyncio
async def test_middleware_continue_falls_through_in_order():
    transport = FakeTransport({'web3_clientVersion': 'Node/v2'})
    passthrough = PassThroughMiddleware(transport)
    transport.add_middleware(passthrough)
    transport.add_middleware(EchoMiddleware)

    assert await transport.execute('web3_clientVersion', 'x') == 'Echo/v1'
    assert passthrough.seen == [['x']]


@pytest.mark.asyncio
async def test_none_entries_are_skipped():
    transport = FakeTransport({'net_version': '1'})
    transport.add_middleware(None)

    assert await transport.execute('net_version') == '1'


@pytest.mark.asyncio
async def test_deferred_entry_is_resolved_once_and_instantiated_once():
    transport = FakeTransport({'web3_clientVersion': 'Node/v2'})
    factory = MagicMock(side_effect=EchoMiddleware)
    future = asyncio.get_running_loop().create_future()
    transport.add_middleware(future)

    pending = [asyncio.create_task(transport.execute('web3_clientVersion')) for _ in range(3)]
    await asyncio.sleep(0.01)
    assert not any(task.done() for task in pending)

    future.set_result(factory)

    assert await asyncio.gather(*pending) == ['Echo/v1'] * 3
    assert await transport.execute('web3_clientVersion') == 'Echo/v1'
    factory.assert_called_once_with(transport)


@pytest.mark.asyncio
async def test_deferred_coroutine_entry_is_supported():
    transport = FakeTransport({'web3_clientVersion': 'Node/v2'})

    async def provide():
        return EchoMiddleware

    transport.add_middleware(provide())

    assert await transport.execute('web3_clientVersion') == 'Echo/v1'


@pytest.mark.asyncio
async def test_failed_deferred_entry_is_skipped():
    transport = FakeTransport({'web3_clientVersion': 'Node/v2'})
    transport.add_middleware(AsyncMock(side_effect=RuntimeError("no middleware"))())

    assert await transport.execute('web3_clientVersion') == 'Node/v2'


@pytest.mark.asyncio
async def test_pending_entries_are_bypassed_while_resolving_middleware():
    transport = FakeTransport({'parity_nodeKind': {'availability': 'public'}})
    transport.add_middleware(asyncio.get_running_loop().create_future())

    async def probe():
        resolving_middleware.set(True)
        return await transport.execute('parity_nodeKind')

    result = await asyncio.wait_for(asyncio.create_task(probe()), timeout=1.0)

    assert result == {'availability': 'public'}
    # The flag stays inside the probe task
    assert resolving_middleware.get() is False


@pytest.mark.asyncio
async def test_middleware_list_is_append_only():
    transport = FakeTransport()
    transport.add_middleware(None)
    transport.add_middleware(EchoMiddleware)

    assert transport.middleware == (None, EchoMiddleware)


@pytest.mark.asyncio
async def test_cancelled_caller_leaves_shared_entry_pending():
    transport = FakeTransport({'web3_clientVersion': 'Node/v2'})
    future = asyncio.get_running_loop().create_future()
    transport.add_middleware(future)

    waiting = asyncio.create_task(transport.execute('web3_clientVersion'))
    await asyncio.sleep(0.01)
    waiting.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiting

    assert not future.cancelled()
    future.set_result(EchoMiddleware)
    assert await transport.execute('web3_clientVersion') == 'Echo/v1'


@pytest.mark.asyncio
async def test_cancelled_entry_is_skipped():
    transport = FakeTransport({'web3_clientVersion': 'Node/v2'})
    future = asyncio.get_running_loop().create_future()
    future.cancel()
    transport.add_middleware(future)

    assert await transport.execute('web3_clientVersion') == 'Node/v2'
