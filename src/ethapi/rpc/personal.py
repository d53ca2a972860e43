from typing import Any, Dict, List, Optional

from ethapi.rpc.base import MethodGroup, MethodGroupName
from ethapi.rpc.format import to_address


class Personal(MethodGroup):
    name = MethodGroupName.PERSONAL
    OPERATIONS = ('list_accounts', 'new_account', 'send_transaction', 'unlock_account')

    async def list_accounts(self) -> List[str]:
        return [to_address(address) for address in (await self._execute('listAccounts') or [])]

    async def new_account(self, password: str) -> str:
        return to_address(await self._execute('newAccount', password))

    async def send_transaction(self, options: Dict[str, Any], password: str) -> str:
        return await self._execute('sendTransaction', options, password)

    async def unlock_account(self, address: str, password: str, duration: Optional[int] = 1) -> bool:
        return await self._execute('unlockAccount', to_address(address), password, duration)
