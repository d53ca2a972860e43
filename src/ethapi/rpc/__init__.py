"""
RPC method groups, one class per namespace, and the static table the Api
builds them from.
"""
from ethapi.rpc.base import MethodGroup, MethodGroupName, to_snake_case
from ethapi.rpc.db import Db
from ethapi.rpc.eth import Eth
from ethapi.rpc.net import Net
from ethapi.rpc.parity import Parity
from ethapi.rpc.personal import Personal
from ethapi.rpc.shh import Shh
from ethapi.rpc.signer import Signer
from ethapi.rpc.trace import Trace
from ethapi.rpc.web3 import Web3

METHOD_GROUPS = {
    MethodGroupName.DB: Db,
    MethodGroupName.ETH: Eth,
    MethodGroupName.NET: Net,
    MethodGroupName.PARITY: Parity,
    MethodGroupName.PERSONAL: Personal,
    MethodGroupName.SHH: Shh,
    MethodGroupName.SIGNER: Signer,
    MethodGroupName.TRACE: Trace,
    MethodGroupName.WEB3: Web3,
}

__all__ = [
    "METHOD_GROUPS",
    "MethodGroup",
    "MethodGroupName",
    "to_snake_case",
    "Db", "Eth", "Net", "Parity", "Personal", "Shh", "Signer", "Trace", "Web3",
]
