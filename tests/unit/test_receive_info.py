"""
Tests for receive-execution metadata (lz_receive_info)
"""

import pytest

from oft_engine.core.domain.address import normalize_address
from oft_engine.core.errors import InvalidMessage
from oft_engine.messaging import (
    LZ_RECEIVE_INFO_VERSION,
    ArgumentKind,
    CallArgument,
    CallDescriptor,
    build_lz_receive_info,
    build_lz_receive_with_compose_info,
    decode_lz_receive_info,
    encode_lz_receive_info,
)
from oft_engine.messaging.receive_info import decode_uleb128, encode_uleb128


PACKAGE = normalize_address("0x1234")
OFT = normalize_address("0xabcd")


class TestUleb128:
    @pytest.mark.parametrize(
        "value,encoded",
        [(0, b"\x00"), (127, b"\x7f"), (128, b"\x80\x01"), (300, b"\xac\x02")],
    )
    def test_known_encodings(self, value, encoded) -> None:
        assert encode_uleb128(value) == encoded
        assert decode_uleb128(encoded, 0) == (value, len(encoded))

    def test_truncated(self) -> None:
        with pytest.raises(InvalidMessage):
            decode_uleb128(b"\x80", 0)


class TestLzReceiveInfo:
    """version (u16 BE) || uleb128(n) || descriptors"""

    def test_default_metadata(self) -> None:
        data = build_lz_receive_info(PACKAGE, OFT)
        assert data[:2] == b"\x00\x01"

        version, calls = decode_lz_receive_info(data)
        assert version == LZ_RECEIVE_INFO_VERSION
        assert len(calls) == 1
        call = calls[0]
        assert call.target == f"{PACKAGE}::oft::lz_receive"
        assert call.is_terminal
        assert call.arguments[0] == CallArgument.object(OFT)
        assert [a.kind for a in call.arguments[1:]] == [ArgumentKind.PLACEHOLDER] * 2

    def test_compose_metadata(self) -> None:
        _, calls = decode_lz_receive_info(build_lz_receive_with_compose_info(PACKAGE, OFT))
        assert calls[0].target.endswith("::lz_receive_with_compose")
        placeholders = [a.value for a in calls[0].arguments if a.kind == ArgumentKind.PLACEHOLDER]
        assert placeholders == ["message", "compose_queue", "composer_registry", "clock"]

    def test_multiple_calls_with_pure_argument(self) -> None:
        calls = [
            CallDescriptor("0x2::prepare::run", (CallArgument.pure(b"\x01\x02"),)),
            CallDescriptor("0x2::oft::lz_receive", (CallArgument.object(OFT),), is_terminal=True),
        ]
        version, decoded = decode_lz_receive_info(encode_lz_receive_info(calls))
        assert version == 1
        assert decoded == calls

    def test_trailing_bytes_rejected(self) -> None:
        with pytest.raises(InvalidMessage):
            decode_lz_receive_info(build_lz_receive_info(PACKAGE, OFT) + b"\x00")

    def test_unknown_argument_tag(self) -> None:
        data = b"\x00\x01" + b"\x01" + encode_uleb128(1) + b"x" + b"\x01" + b"\x09"
        with pytest.raises(InvalidMessage):
            decode_lz_receive_info(data)
