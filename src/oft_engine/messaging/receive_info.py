"""Receive-execution metadata registered with the Messaging Channel.

Tells the channel's call builder which calls to assemble when a message for
this engine is delivered:

    lz_receive_info = version (u16 BE, = 1) || uleb128(n) || descriptor * n

    descriptor = target || uleb128(argc) || argument * argc || is_terminal (u8)
    target     = uleb128(len) || utf-8 "package::module::function"
    argument   = tag (u8) || body
                 tag 0 OBJECT       body = 32-byte object id
                 tag 1 PURE         body = uleb128(len) || bytes
                 tag 2 PLACEHOLDER  body = uleb128(len) || utf-8 name

Placeholders are resolved by the call builder at execution time.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Final, List, Sequence, Tuple, Union

from oft_engine.core.domain.address import address_to_bytes32, bytes32_to_address
from oft_engine.core.errors import InvalidMessage
from oft_engine.core.math.integer_safeguards import validate_u16


LZ_RECEIVE_INFO_VERSION: Final[int] = 1

# Placeholders understood by the call builder
PLACEHOLDER_MESSAGE: Final[str] = "message"
PLACEHOLDER_CLOCK: Final[str] = "clock"
PLACEHOLDER_COMPOSE_QUEUE: Final[str] = "compose_queue"
PLACEHOLDER_COMPOSER_REGISTRY: Final[str] = "composer_registry"


class ArgumentKind(IntEnum):
    OBJECT = 0
    PURE = 1
    PLACEHOLDER = 2


@dataclass(frozen=True)
class CallArgument:
    kind: ArgumentKind
    value: Union[str, bytes]

    @classmethod
    def object(cls, object_id: str) -> "CallArgument":
        return cls(ArgumentKind.OBJECT, object_id)

    @classmethod
    def pure(cls, data: bytes) -> "CallArgument":
        return cls(ArgumentKind.PURE, bytes(data))

    @classmethod
    def placeholder(cls, name: str) -> "CallArgument":
        return cls(ArgumentKind.PLACEHOLDER, name)


@dataclass(frozen=True)
class CallDescriptor:
    target: str
    arguments: Tuple[CallArgument, ...]
    is_terminal: bool = False


# =============================================================================
# ULEB128
# =============================================================================


def encode_uleb128(value: int) -> bytes:
    if value < 0:
        raise ValueError(f"uleb128 value must be non-negative, got {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_uleb128(data: bytes, offset: int) -> Tuple[int, int]:
    """Returns (value, next offset)."""
    value = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise InvalidMessage("truncated uleb128")
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, offset
        shift += 7


# =============================================================================
# ENCODING
# =============================================================================


def _encode_bytes(data: bytes) -> bytes:
    return encode_uleb128(len(data)) + data


def _encode_argument(arg: CallArgument) -> bytes:
    if arg.kind == ArgumentKind.OBJECT:
        body = address_to_bytes32(arg.value)
    elif arg.kind == ArgumentKind.PURE:
        body = _encode_bytes(arg.value)
    elif arg.kind == ArgumentKind.PLACEHOLDER:
        body = _encode_bytes(arg.value.encode("utf-8"))
    else:
        raise AssertionError(f"unhandled argument kind: {arg.kind}")
    return bytes([arg.kind]) + body


def encode_call_descriptor(call: CallDescriptor) -> bytes:
    out = _encode_bytes(call.target.encode("utf-8"))
    out += encode_uleb128(len(call.arguments))
    for arg in call.arguments:
        out += _encode_argument(arg)
    return out + bytes([1 if call.is_terminal else 0])


def encode_lz_receive_info(calls: Sequence[CallDescriptor],
                           version: int = LZ_RECEIVE_INFO_VERSION) -> bytes:
    out = validate_u16(version, "version").to_bytes(2, "big")
    out += encode_uleb128(len(calls))
    for call in calls:
        out += encode_call_descriptor(call)
    return out


def decode_lz_receive_info(data: bytes) -> Tuple[int, List[CallDescriptor]]:
    """
    Inverse of encode_lz_receive_info.

    Raises:
        InvalidMessage: On truncated or malformed input
    """
    if len(data) < 2:
        raise InvalidMessage("lz_receive_info too short")
    version = int.from_bytes(data[:2], "big")
    count, offset = decode_uleb128(data, 2)
    calls = []
    for _ in range(count):
        target, offset = _decode_bytes(data, offset)
        argc, offset = decode_uleb128(data, offset)
        args = []
        for _ in range(argc):
            arg, offset = _decode_argument(data, offset)
            args.append(arg)
        if offset >= len(data):
            raise InvalidMessage("truncated call descriptor")
        is_terminal = data[offset] == 1
        offset += 1
        calls.append(CallDescriptor(target.decode("utf-8"), tuple(args), is_terminal))
    if offset != len(data):
        raise InvalidMessage(f"{len(data) - offset} trailing bytes in lz_receive_info")
    return version, calls


def _decode_bytes(data: bytes, offset: int) -> Tuple[bytes, int]:
    length, offset = decode_uleb128(data, offset)
    if offset + length > len(data):
        raise InvalidMessage("truncated byte string")
    return bytes(data[offset:offset + length]), offset + length


def _decode_argument(data: bytes, offset: int) -> Tuple[CallArgument, int]:
    if offset >= len(data):
        raise InvalidMessage("truncated argument")
    try:
        kind = ArgumentKind(data[offset])
    except ValueError:
        raise InvalidMessage(f"unknown argument tag {data[offset]}")
    offset += 1
    if kind == ArgumentKind.OBJECT:
        if offset + 32 > len(data):
            raise InvalidMessage("truncated object id")
        return CallArgument.object(bytes32_to_address(data[offset:offset + 32])), offset + 32
    body, offset = _decode_bytes(data, offset)
    if kind == ArgumentKind.PURE:
        return CallArgument.pure(body), offset
    return CallArgument.placeholder(body.decode("utf-8")), offset


# =============================================================================
# ENGINE METADATA
# =============================================================================


def build_lz_receive_info(package: str, oft_address: str) -> bytes:
    """
    Metadata for an engine instance: one terminal call to ``lz_receive``
    with the engine object, the verified message and the clock.

    Args:
        package: Package id hosting the engine entry points
        oft_address: Engine instance object id
    """
    call = CallDescriptor(
        target=f"{package}::oft::lz_receive",
        arguments=(
            CallArgument.object(oft_address),
            CallArgument.placeholder(PLACEHOLDER_MESSAGE),
            CallArgument.placeholder(PLACEHOLDER_CLOCK),
        ),
        is_terminal=True,
    )
    return encode_lz_receive_info([call])


def build_lz_receive_with_compose_info(package: str, oft_address: str) -> bytes:
    """Metadata routing delivered compose messages to ``lz_receive_with_compose``."""
    call = CallDescriptor(
        target=f"{package}::oft::lz_receive_with_compose",
        arguments=(
            CallArgument.object(oft_address),
            CallArgument.placeholder(PLACEHOLDER_MESSAGE),
            CallArgument.placeholder(PLACEHOLDER_COMPOSE_QUEUE),
            CallArgument.placeholder(PLACEHOLDER_COMPOSER_REGISTRY),
            CallArgument.placeholder(PLACEHOLDER_CLOCK),
        ),
        is_terminal=True,
    )
    return encode_lz_receive_info([call])
