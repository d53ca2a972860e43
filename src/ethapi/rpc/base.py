"""
Method Group Base Class.

A method group is a namespace of remote operations (`eth`, `parity`, ...)
sharing the Api's transport. Each subclass lists its operations in
`OPERATIONS`, which is what `operation()` resolves selectors against.
"""
import re
from enum import Enum
from typing import Any, Callable, Tuple

from ethapi.errors import UnknownMethod


class MethodGroupName(str, Enum):
    DB = "db"
    ETH = "eth"
    NET = "net"
    PARITY = "parity"
    PERSONAL = "personal"
    SHH = "shh"
    SIGNER = "signer"
    TRACE = "trace"
    WEB3 = "web3"


_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def to_snake_case(name: str) -> str:
    """`getTransactionReceipt` -> `get_transaction_receipt`"""
    return _CAMEL_BOUNDARY.sub('_', name).lower()


class MethodGroup:
    name: MethodGroupName
    OPERATIONS: Tuple[str, ...] = ()

    def __init__(self, transport):
        self._transport = transport

    @property
    def transport(self):
        return self._transport

    async def _execute(self, method: str, *params: Any) -> Any:
        return await self._transport.execute(f"{self.name.value}_{method}", *params)

    def operation(self, name: str) -> Callable[..., Any]:
        """Returns the bound operation `name` (camelCase or snake_case)."""
        operation_name = to_snake_case(name)
        if operation_name not in self.OPERATIONS:
            raise UnknownMethod(f"{self.name.value}_{name}")
        return getattr(self, operation_name)
