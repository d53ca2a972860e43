from typing import Any, Dict, List, Optional

from ethapi.rpc.base import MethodGroup, MethodGroupName


class Signer(MethodGroup):
    name = MethodGroupName.SIGNER
    OPERATIONS = (
        'confirm_request', 'generate_authorization_token',
        'reject_request', 'requests_to_confirm',
    )

    async def confirm_request(self, request_id: Any, options: Optional[Dict[str, Any]], password: str) -> Any:
        return await self._execute('confirmRequest', request_id, options or {}, password)

    async def generate_authorization_token(self) -> str:
        return await self._execute('generateAuthorizationToken')

    async def reject_request(self, request_id: Any) -> bool:
        return await self._execute('rejectRequest', request_id)

    async def requests_to_confirm(self) -> List[Dict[str, Any]]:
        return await self._execute('requestsToConfirm')
