from typing import Any, Dict, List, Union

from ethapi.rpc.base import MethodGroup, MethodGroupName
from ethapi.rpc.format import to_block


class Trace(MethodGroup):
    name = MethodGroupName.TRACE
    OPERATIONS = ('block', 'filter', 'transaction')

    async def block(self, block: Union[str, int] = 'latest') -> List[Dict[str, Any]]:
        return await self._execute('block', to_block(block))

    async def filter(self, options: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._execute('filter', options)

    async def transaction(self, transaction_hash: str) -> List[Dict[str, Any]]:
        return await self._execute('transaction', transaction_hash)
