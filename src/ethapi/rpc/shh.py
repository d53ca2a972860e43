from typing import Any, Dict

from ethapi.rpc.base import MethodGroup, MethodGroupName


class Shh(MethodGroup):
    name = MethodGroupName.SHH
    OPERATIONS = ('info', 'new_key_pair', 'post', 'version')

    async def info(self) -> Dict[str, Any]:
        return await self._execute('info')

    async def new_key_pair(self) -> str:
        return await self._execute('newKeyPair')

    async def post(self, message: Dict[str, Any]) -> bool:
        return await self._execute('post', message)

    async def version(self) -> str:
        return await self._execute('version')
