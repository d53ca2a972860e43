from typing import Any, Dict, Optional

from ethapi.models import NodeKind
from ethapi.rpc.base import MethodGroup, MethodGroupName
from ethapi.rpc.format import from_quantity, to_address


class Parity(MethodGroup):
    name = MethodGroupName.PARITY
    OPERATIONS = (
        'accounts_info', 'all_accounts_info', 'chain', 'check_request',
        'default_account', 'enode', 'net_peers', 'node_health', 'node_kind',
        'post_transaction', 'set_account_name', 'version_info',
    )

    async def accounts_info(self) -> Dict[str, Dict[str, Any]]:
        return await self._execute('accountsInfo')

    async def all_accounts_info(self) -> Dict[str, Dict[str, Any]]:
        return await self._execute('allAccountsInfo')

    async def chain(self) -> str:
        return await self._execute('chain')

    async def check_request(self, request_id: Any) -> Optional[str]:
        """The transaction hash once a posted request has been confirmed, else None."""
        return await self._execute('checkRequest', request_id)

    async def default_account(self) -> Optional[str]:
        return to_address(await self._execute('defaultAccount'))

    async def enode(self) -> str:
        return await self._execute('enode')

    async def net_peers(self) -> Dict[str, Any]:
        peers = await self._execute('netPeers')
        return {
            **peers,
            'active': from_quantity(peers.get('active')),
            'connected': from_quantity(peers.get('connected')),
            'max': from_quantity(peers.get('max')),
        }

    async def node_health(self) -> Dict[str, Any]:
        return await self._execute('nodeHealth')

    async def node_kind(self) -> NodeKind:
        return NodeKind.from_dict(await self._execute('nodeKind'))

    async def post_transaction(self, options: Dict[str, Any]) -> Any:
        return await self._execute('postTransaction', options)

    async def set_account_name(self, address: str, name: str) -> bool:
        return await self._execute('setAccountName', to_address(address), name)

    async def version_info(self) -> Dict[str, Any]:
        return await self._execute('versionInfo')
