from ethapi.rpc.base import MethodGroup, MethodGroupName


class Web3(MethodGroup):
    name = MethodGroupName.WEB3
    OPERATIONS = ('client_version', 'sha3')

    async def client_version(self) -> str:
        return await self._execute('clientVersion')

    async def sha3(self, data: str) -> str:
        return await self._execute('sha3', data)
