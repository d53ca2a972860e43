"""
Thin value formatting shared by the method groups.

Quantities travel as `0x`-prefixed hex strings; block references are either
a tag ('latest', 'pending', 'earliest') or a number.
"""
from typing import Any, Optional, Union

BLOCK_TAGS = ('latest', 'pending', 'earliest')


def to_quantity(value: int) -> str:
    return hex(int(value))


def from_quantity(value: Optional[Union[str, int]]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(value, 16) if value.startswith(('0x', '0X')) else int(value)


def to_block(block: Union[str, int] = 'latest') -> str:
    if isinstance(block, str) and block in BLOCK_TAGS:
        return block
    return to_quantity(block)


def to_address(address: Optional[str]) -> Optional[str]:
    # Nodes answer null for an unset coinbase or default account
    if address is None:
        return None
    return address.lower()


def from_syncing(value: Any) -> Any:
    """False when the node is in sync, otherwise the progress with decoded numbers."""
    if not value:
        return False
    return {key: from_quantity(item) for key, item in value.items()}
