"""
Tests for wire codecs: transfer payload, compose envelope, executor options
"""

import struct

import pytest

from oft_engine.core.codec import compose_msg_codec, oft_msg_codec
from oft_engine.core.codec.options import OPTIONS_TYPE_3, assert_type_3, combine_options, options_type
from oft_engine.core.errors import AmountOverflow, InvalidMessage, InvalidOptions
from oft_engine.core.math.integer_safeguards import U64_MAX


SEND_TO = bytes(range(32))
COMPOSE_FROM = b"\xaa" * 32

TYPE_3 = OPTIONS_TYPE_3.to_bytes(2, "big")
GAS_RECORD = b"\x01\x00\x11\x01" + (200_000).to_bytes(16, "big")
VALUE_RECORD = b"\x01\x00\x11\x02" + (1).to_bytes(16, "big")


# =============================================================================
# TRANSFER PAYLOAD
# =============================================================================


class TestOFTMessageCodec:
    """send_to(32) || amount_sd(u64) [|| compose_from(32) || compose_msg]"""

    def test_plain_layout(self) -> None:
        message = oft_msg_codec.encode(SEND_TO, 1_000_000)
        assert len(message) == 40
        assert message[:32] == SEND_TO
        assert struct.unpack(">Q", message[32:40])[0] == 1_000_000
        assert not oft_msg_codec.is_compose(message)

    def test_plain_decode(self) -> None:
        decoded = oft_msg_codec.decode(oft_msg_codec.encode(SEND_TO, 7))
        assert decoded.send_to == SEND_TO
        assert decoded.amount_sd == 7
        assert decoded.compose_from is None
        assert not decoded.is_compose

    def test_compose_layout(self) -> None:
        message = oft_msg_codec.encode(SEND_TO, 7, COMPOSE_FROM, b"hello")
        assert len(message) == 72 + 5
        assert oft_msg_codec.is_compose(message)

        decoded = oft_msg_codec.decode(message)
        assert decoded.is_compose
        assert decoded.compose_from == COMPOSE_FROM
        assert decoded.compose_msg == b"hello"

    def test_empty_compose_msg_encodes_plain(self) -> None:
        assert len(oft_msg_codec.encode(SEND_TO, 7, COMPOSE_FROM, b"")) == 40

    def test_compose_requires_from(self) -> None:
        with pytest.raises(ValueError):
            oft_msg_codec.encode(SEND_TO, 7, None, b"hello")

    @pytest.mark.parametrize("length", [0, 31, 39, 41, 72])
    def test_malformed_lengths(self, length) -> None:
        """Too short, or a compose section without payload"""
        with pytest.raises(InvalidMessage):
            oft_msg_codec.decode(b"\x00" * length)

    def test_amount_domain(self) -> None:
        with pytest.raises(AmountOverflow):
            oft_msg_codec.encode(SEND_TO, U64_MAX + 1)

    def test_send_to_must_be_32_bytes(self) -> None:
        with pytest.raises(ValueError):
            oft_msg_codec.encode(b"\x01" * 20, 1)


# =============================================================================
# COMPOSE ENVELOPE
# =============================================================================


class TestComposeEnvelope:
    def test_layout(self) -> None:
        envelope = compose_msg_codec.encode(
            nonce=5, src_eid=30101, amount_ld=1_000_000, compose_from=COMPOSE_FROM, compose_msg=b"go"
        )
        assert envelope[:8] == (5).to_bytes(8, "big")
        assert envelope[8:12] == (30101).to_bytes(4, "big")
        assert envelope[12:20] == (1_000_000).to_bytes(8, "big")
        assert envelope[20:52] == COMPOSE_FROM
        assert envelope[52:] == b"go"

        decoded = compose_msg_codec.decode(envelope)
        assert (decoded.nonce, decoded.src_eid, decoded.amount_ld) == (5, 30101, 1_000_000)
        assert decoded.compose_msg == b"go"

    def test_truncated(self) -> None:
        with pytest.raises(InvalidMessage):
            compose_msg_codec.decode(b"\x00" * 51)


# =============================================================================
# EXECUTOR OPTIONS
# =============================================================================


class TestOptions:
    def test_type_tag(self) -> None:
        assert options_type(TYPE_3 + GAS_RECORD) == 3
        assert_type_3(TYPE_3)

    @pytest.mark.parametrize("options", [b"", b"\x00", b"\x00\x01" + GAS_RECORD])
    def test_non_type_3_rejected(self, options) -> None:
        with pytest.raises(InvalidOptions):
            assert_type_3(options)

    def test_combine_appends_extra_records(self) -> None:
        combined = combine_options(TYPE_3 + GAS_RECORD, TYPE_3 + VALUE_RECORD)
        assert combined == TYPE_3 + GAS_RECORD + VALUE_RECORD

    def test_combine_with_one_side_empty(self) -> None:
        assert combine_options(b"", TYPE_3 + VALUE_RECORD) == TYPE_3 + VALUE_RECORD
        assert combine_options(TYPE_3 + GAS_RECORD, b"") == TYPE_3 + GAS_RECORD
        assert combine_options(b"", b"") == b""

    def test_combine_rejects_bad_extra(self) -> None:
        with pytest.raises(InvalidOptions):
            combine_options(TYPE_3 + GAS_RECORD, b"\x00\x01" + VALUE_RECORD)
