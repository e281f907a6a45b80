"""
Addresses — 32-byte account identifiers

Local accounts are written as ``0x`` + 64 lowercase hex digits. On the wire
every address (local or remote) travels as a raw 32-byte value, so remote
chains with shorter addresses are left-padded with zeros.
"""

import re
from typing import Annotated, Final

from pydantic import AfterValidator


ADDRESS_LENGTH: Final[int] = 32

ZERO_ADDRESS: Final[str] = "0x" + "00" * ADDRESS_LENGTH

ZERO_BYTES32: Final[bytes] = bytes(ADDRESS_LENGTH)

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def normalize_address(address: str) -> str:
    """
    Canonical form of a hex address.

    Args:
        address: ``0x``-prefixed hex, 1..64 digits

    Returns:
        ``0x`` + 64 lowercase hex digits (left zero-padded)

    Raises:
        ValueError: If the string is not a hex address
    """
    if not isinstance(address, str) or not _HEX_RE.match(address):
        raise ValueError(f"invalid address: {address!r}")
    return "0x" + address[2:].lower().rjust(ADDRESS_LENGTH * 2, "0")


def validate_bytes32(value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)) or len(value) != ADDRESS_LENGTH:
        raise ValueError(f"expected {ADDRESS_LENGTH} bytes, got {value!r}")
    return bytes(value)


def address_to_bytes32(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address)[2:])


def bytes32_to_address(value: bytes) -> str:
    return "0x" + validate_bytes32(value).hex()


def is_zero_address(address: str | None) -> bool:
    """True for None and for the all-zero address."""
    return address is None or normalize_address(address) == ZERO_ADDRESS


# Pydantic field types
Address = Annotated[str, AfterValidator(normalize_address)]
Bytes32 = Annotated[bytes, AfterValidator(validate_bytes32)]
