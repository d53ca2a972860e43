from ethapi.rpc.base import MethodGroup, MethodGroupName
from ethapi.rpc.format import from_quantity


class Net(MethodGroup):
    name = MethodGroupName.NET
    OPERATIONS = ('listening', 'peer_count', 'version')

    async def listening(self) -> bool:
        return await self._execute('listening')

    async def peer_count(self) -> int:
        return from_quantity(await self._execute('peerCount'))

    async def version(self) -> str:
        return await self._execute('version')
