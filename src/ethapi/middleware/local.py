"""
Local Accounts Middleware.

Public nodes don't hold the user's accounts, so account-listing calls are
answered from a locally configured account list instead of being sent to
the node. Installed by the MiddlewareInjector only when the node reports a
public availability.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from ethapi.middleware.base import Middleware

logger = logging.getLogger(__name__)


class LocalAccountsMiddleware(Middleware):

    def __init__(self, transport, accounts: Iterable[str] = (), names: Optional[Dict[str, str]] = None):
        super().__init__(transport)
        self._accounts: List[str] = [address.lower() for address in accounts]
        self._names: Dict[str, str] = {
            address.lower(): name for address, name in (names or {}).items()
        }

        self.register('eth_accounts', self._list_accounts)
        self.register('eth_coinbase', self._default_account)
        self.register('parity_defaultAccount', self._default_account)
        self.register('personal_listAccounts', self._list_accounts)
        self.register('parity_accountsInfo', self._accounts_info)
        self.register('parity_allAccountsInfo', self._all_accounts_info)
        self.register('parity_setAccountName', self._set_account_name)

        logger.info(f"Local accounts middleware serving {len(self._accounts)} account(s)")

    @property
    def accounts(self) -> List[str]:
        return list(self._accounts)

    def _name(self, address: str) -> str:
        return self._names.get(address, '')

    def _list_accounts(self, params: List[Any]) -> List[str]:
        return list(self._accounts)

    def _default_account(self, params: List[Any]) -> str:
        # Mirrors the node: the zero address when there's nothing to pick
        return self._accounts[0] if self._accounts else '0x' + '0' * 40

    def _accounts_info(self, params: List[Any]) -> Dict[str, Dict[str, str]]:
        return {address: {'name': self._name(address)} for address in self._accounts}

    def _all_accounts_info(self, params: List[Any]) -> Dict[str, Dict[str, Any]]:
        return {
            address: {'name': self._name(address), 'meta': {}, 'uuid': None}
            for address in self._accounts
        }

    def _set_account_name(self, params: List[Any]) -> Any:
        address, name = params[0].lower(), params[1]
        if address not in self._accounts:
            return Middleware.CONTINUE
        self._names[address] = name
        return True
