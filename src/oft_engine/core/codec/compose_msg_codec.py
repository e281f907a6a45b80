"""
Compose envelope codec — what a composer receives after a credited transfer

Layout (big-endian):

    offset  size  field
    0       8     nonce          u64, inbound delivery sequence number
    8       4     src_eid        u32, source pathway
    12      8     amount_ld      u64, credited amount (local decimals)
    20      32    compose_from   originator of the composed call
    52      n     compose_msg    opaque payload
"""

import struct
from dataclasses import dataclass
from typing import Final

from oft_engine.core.domain.address import validate_bytes32
from oft_engine.core.errors import InvalidMessage
from oft_engine.core.math.integer_safeguards import validate_u32, validate_u64


NONCE_OFFSET: Final[int] = 0
SRC_EID_OFFSET: Final[int] = 8
AMOUNT_LD_OFFSET: Final[int] = 12
COMPOSE_FROM_OFFSET: Final[int] = 20
COMPOSE_MSG_OFFSET: Final[int] = 52

_HEADER = struct.Struct(">QIQ")


@dataclass(frozen=True)
class ComposeEnvelope:
    nonce: int
    src_eid: int
    amount_ld: int
    compose_from: bytes
    compose_msg: bytes


def encode(nonce: int, src_eid: int, amount_ld: int, compose_from: bytes,
           compose_msg: bytes) -> bytes:
    header = _HEADER.pack(
        validate_u64(nonce, "nonce"),
        validate_u32(src_eid, "src_eid"),
        validate_u64(amount_ld, "amount_ld"),
    )
    return header + validate_bytes32(compose_from) + bytes(compose_msg)


def decode(message: bytes) -> ComposeEnvelope:
    if len(message) < COMPOSE_MSG_OFFSET:
        raise InvalidMessage(f"compose envelope too short: {len(message)} bytes")
    nonce, src_eid, amount_ld = _HEADER.unpack_from(message, NONCE_OFFSET)
    return ComposeEnvelope(
        nonce=nonce,
        src_eid=src_eid,
        amount_ld=amount_ld,
        compose_from=bytes(message[COMPOSE_FROM_OFFSET:COMPOSE_MSG_OFFSET]),
        compose_msg=bytes(message[COMPOSE_MSG_OFFSET:]),
    )
