"""
Contract handle.

Binds an ABI description to a deployed address. Encoding calls against the
ABI is left to the caller; the handle only indexes the ABI and reads the
deployed code through the Api.
"""
from typing import Any, Dict, List, Optional


class Contract:

    def __init__(self, api, abi: List[Dict[str, Any]]):
        self._api = api
        self._abi = list(abi or [])
        self._address: Optional[str] = None

    @property
    def abi(self) -> List[Dict[str, Any]]:
        return self._abi

    @property
    def address(self) -> Optional[str]:
        return self._address

    @property
    def functions(self) -> Dict[str, Dict[str, Any]]:
        return {entry['name']: entry for entry in self._abi if entry.get('type', 'function') == 'function'}

    @property
    def events(self) -> Dict[str, Dict[str, Any]]:
        return {entry['name']: entry for entry in self._abi if entry.get('type') == 'event'}

    def at(self, address: Optional[str]) -> "Contract":
        self._address = address.lower() if address else None
        return self

    async def get_code(self) -> str:
        if self._address is None:
            raise ValueError("Contract is not bound to an address")
        return await self._api.eth.get_code(self._address)
