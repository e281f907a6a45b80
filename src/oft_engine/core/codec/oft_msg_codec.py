"""
OFT message codec — the cross-chain transfer payload

Layout (big-endian):

    offset  size  field
    0       32    send_to        recipient on the destination chain
    32      8     amount_sd      u64, shared decimals
    40      32    compose_from   sender of the composed call   (compose only)
    72      n     compose_msg    opaque payload                (compose only)

The message kind is implied by length: anything longer than 40 bytes is a
compose message.
"""

import struct
from dataclasses import dataclass
from typing import Final, Optional

from oft_engine.core.domain.address import validate_bytes32
from oft_engine.core.errors import InvalidMessage
from oft_engine.core.math.integer_safeguards import validate_u64


SEND_TO_OFFSET: Final[int] = 0
SEND_AMOUNT_SD_OFFSET: Final[int] = 32
COMPOSE_FROM_OFFSET: Final[int] = 40
COMPOSE_MSG_OFFSET: Final[int] = 72

_U64 = struct.Struct(">Q")


@dataclass(frozen=True)
class DecodedMessage:
    """Decoded inbound payload."""

    send_to: bytes
    amount_sd: int
    compose_from: Optional[bytes] = None
    compose_msg: Optional[bytes] = None

    @property
    def is_compose(self) -> bool:
        return self.compose_msg is not None


def encode(send_to: bytes, amount_sd: int, compose_from: Optional[bytes] = None,
           compose_msg: bytes = b"") -> bytes:
    """
    Encode an outbound payload.

    Args:
        send_to: 32-byte recipient
        amount_sd: Amount in shared decimals (u64)
        compose_from: 32-byte sender of the composed call, required with compose_msg
        compose_msg: Composed-call payload; empty for a plain transfer

    Returns:
        Wire bytes
    """
    body = validate_bytes32(send_to) + _U64.pack(validate_u64(amount_sd, "amount_sd"))
    if not compose_msg:
        return body
    if compose_from is None:
        raise ValueError("compose_from is required with a compose_msg")
    return body + validate_bytes32(compose_from) + bytes(compose_msg)


def is_compose(message: bytes) -> bool:
    return len(message) > COMPOSE_FROM_OFFSET


def decode(message: bytes) -> DecodedMessage:
    """
    Decode an inbound payload.

    Raises:
        InvalidMessage: If the payload is shorter than a plain transfer or
            carries a truncated compose section
    """
    if len(message) < COMPOSE_FROM_OFFSET:
        raise InvalidMessage(f"payload too short: {len(message)} bytes")
    send_to = bytes(message[SEND_TO_OFFSET:SEND_AMOUNT_SD_OFFSET])
    (amount_sd,) = _U64.unpack_from(message, SEND_AMOUNT_SD_OFFSET)
    if not is_compose(message):
        return DecodedMessage(send_to=send_to, amount_sd=amount_sd)
    if len(message) <= COMPOSE_MSG_OFFSET:
        raise InvalidMessage(f"truncated compose section: {len(message)} bytes")
    return DecodedMessage(
        send_to=send_to,
        amount_sd=amount_sd,
        compose_from=bytes(message[COMPOSE_FROM_OFFSET:COMPOSE_MSG_OFFSET]),
        compose_msg=bytes(message[COMPOSE_MSG_OFFSET:]),
    )
