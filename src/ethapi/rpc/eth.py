from typing import Any, Dict, List, Optional, Union

from ethapi.rpc.base import MethodGroup, MethodGroupName
from ethapi.rpc.format import from_quantity, from_syncing, to_address, to_block


class Eth(MethodGroup):
    name = MethodGroupName.ETH
    OPERATIONS = (
        'accounts', 'block_number', 'call', 'chain_id', 'coinbase',
        'estimate_gas', 'gas_price', 'get_balance', 'get_block_by_number',
        'get_code', 'get_transaction_by_hash', 'get_transaction_count',
        'get_transaction_receipt', 'send_raw_transaction', 'syncing',
    )

    async def accounts(self) -> List[str]:
        return [to_address(address) for address in await self._execute('accounts')]

    async def block_number(self) -> int:
        return from_quantity(await self._execute('blockNumber'))

    async def call(self, options: Dict[str, Any], block: Union[str, int] = 'latest') -> str:
        return await self._execute('call', options, to_block(block))

    async def chain_id(self) -> Optional[int]:
        return from_quantity(await self._execute('chainId'))

    async def coinbase(self) -> Optional[str]:
        return to_address(await self._execute('coinbase'))

    async def estimate_gas(self, options: Dict[str, Any]) -> int:
        return from_quantity(await self._execute('estimateGas', options))

    async def gas_price(self) -> int:
        return from_quantity(await self._execute('gasPrice'))

    async def get_balance(self, address: str, block: Union[str, int] = 'latest') -> int:
        return from_quantity(await self._execute('getBalance', to_address(address), to_block(block)))

    async def get_block_by_number(self, block: Union[str, int] = 'latest', full: bool = False) -> Optional[Dict[str, Any]]:
        return await self._execute('getBlockByNumber', to_block(block), full)

    async def get_code(self, address: str, block: Union[str, int] = 'latest') -> str:
        return await self._execute('getCode', to_address(address), to_block(block))

    async def get_transaction_by_hash(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        return await self._execute('getTransactionByHash', transaction_hash)

    async def get_transaction_count(self, address: str, block: Union[str, int] = 'latest') -> int:
        return from_quantity(await self._execute('getTransactionCount', to_address(address), to_block(block)))

    async def get_transaction_receipt(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        """None until the transaction has been mined."""
        return await self._execute('getTransactionReceipt', transaction_hash)

    async def send_raw_transaction(self, data: str) -> str:
        return await self._execute('sendRawTransaction', data)

    async def syncing(self) -> Any:
        return from_syncing(await self._execute('syncing'))
