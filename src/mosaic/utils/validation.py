"""Input validation helpers.

Amounts, gas values and nonces travel as unsigned integers that callers may
hand over either as ``int`` or as decimal strings. Addresses are 20-byte hex
strings and are returned in checksum form. Every helper raises
:class:`~mosaic.errors.ValidationError` naming the offending field.
"""

import re
from typing import Any, Dict, Mapping, Optional

from web3 import Web3

from ..errors import ValidationError, create_validation_error

_BYTES32_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_address(value: Any) -> bool:
    """Check whether ``value`` is a well-formed account address."""
    return isinstance(value, str) and Web3.is_address(value)


def require_address(value: Any, field: str) -> str:
    """Validate an address and return its checksum form."""
    if not is_address(value):
        raise create_validation_error(field, value, "20-byte hex address")
    return Web3.to_checksum_address(value)


def to_uint(value: Any, field: str) -> int:
    """Convert an ``int`` or decimal string into a non-negative ``int``."""
    if isinstance(value, bool):
        raise create_validation_error(field, value, "unsigned integer")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdecimal():
        number = int(value.strip())
    else:
        raise create_validation_error(field, value, "unsigned integer")
    if number < 0:
        raise create_validation_error(field, value, "unsigned integer")
    return number


def require_positive(value: Any, field: str) -> int:
    """Convert ``value`` with :func:`to_uint` and reject zero."""
    number = to_uint(value, field)
    if number == 0:
        raise ValidationError(
            f"{field.replace('_', ' ').capitalize()} must be greater than zero: {value}.",
            field=field,
            value=value,
            expected="> 0",
        )
    return number


def require_bytes32(value: Any, field: str) -> str:
    """Validate a ``0x``-prefixed 32-byte hex string."""
    if isinstance(value, (bytes, bytearray)) and len(value) == 32:
        return Web3.to_hex(value)
    if not isinstance(value, str) or not _BYTES32_PATTERN.match(value):
        raise create_validation_error(field, value, "0x-prefixed 32-byte hex string")
    return value.lower()


def require_block_number(value: Any, field: str = "block_number") -> int:
    """Validate that a block height was given and is an unsigned integer."""
    if value is None:
        raise create_validation_error(field, value, "block height")
    return to_uint(value, field)


def require_tx_options(
    tx_options: Optional[Mapping[str, Any]], field: str = "tx_options"
) -> Dict[str, Any]:
    """Validate transaction options and return a copy with a checksum ``from``."""
    if not isinstance(tx_options, Mapping):
        raise create_validation_error(field, tx_options, "transaction options mapping")
    options = dict(tx_options)
    options["from"] = require_address(options.get("from"), f"{field}.from")
    return options


def to_block_height_hex(block_number: int) -> str:
    """Render a block height as the ``0x`` hex string JSON-RPC expects."""
    return hex(to_uint(block_number, "block_number"))


def to_bytes32(value: str) -> bytes:
    """Convert a validated 32-byte hex string into bytes for contract calls."""
    return Web3.to_bytes(hexstr=value)


def to_hex_string(value: Any) -> str:
    """Render bytes returned by web3 as a ``0x`` hex string."""
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    return str(value)
