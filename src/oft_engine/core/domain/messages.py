"""
Message value objects — transfer parameters, receipts, fees and packets

Immutable Pydantic models exchanged between the caller, the engine and the
messaging channel. Amounts suffixed ``_ld`` are in local decimals, ``_sd`` in
shared decimals.
"""

from enum import IntEnum

from pydantic import BaseModel, Field, model_validator

from oft_engine.core.domain.address import Bytes32
from oft_engine.core.math.integer_safeguards import U32_MAX, U64_MAX


# =============================================================================
# ENUMS
# =============================================================================


class MessageType(IntEnum):
    """Message kind used to select enforced options."""

    SEND = 1
    SEND_AND_CALL = 2


# =============================================================================
# TRANSFER PARAMETERS
# =============================================================================


class SendParam(BaseModel):
    """Caller-supplied parameters of an outbound transfer."""

    dst_eid: int = Field(..., ge=0, le=U32_MAX, description="Destination endpoint id")
    to: Bytes32 = Field(..., description="Recipient on the destination chain")
    amount_ld: int = Field(..., ge=0, le=U64_MAX, description="Amount to send (local decimals)")
    min_amount_ld: int = Field(
        ..., ge=0, le=U64_MAX, description="Minimum amount to receive (local decimals)"
    )
    extra_options: bytes = Field(b"", description="Caller options merged with enforced ones")
    compose_msg: bytes = Field(b"", description="Payload for a composed call, empty for none")

    model_config = {"frozen": True}

    @property
    def message_type(self) -> MessageType:
        return MessageType.SEND_AND_CALL if self.compose_msg else MessageType.SEND


# =============================================================================
# OFT RECEIPTS AND QUOTES
# =============================================================================


class OFTReceipt(BaseModel):
    """Amounts actually debited and expected to be credited."""

    amount_sent_ld: int = Field(..., ge=0, le=U64_MAX)
    amount_received_ld: int = Field(..., ge=0, le=U64_MAX)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_received_not_above_sent(self) -> "OFTReceipt":
        if self.amount_received_ld > self.amount_sent_ld:
            raise ValueError(
                f"amount_received_ld {self.amount_received_ld} exceeds "
                f"amount_sent_ld {self.amount_sent_ld}"
            )
        return self

    @property
    def fee_ld(self) -> int:
        return self.amount_sent_ld - self.amount_received_ld


class OFTLimit(BaseModel):
    min_amount_ld: int = Field(..., ge=0, le=U64_MAX)
    max_amount_ld: int = Field(..., ge=0, le=U64_MAX)

    model_config = {"frozen": True}


class OFTFeeDetail(BaseModel):
    """One fee line of a quote; a charged fee is negative."""

    fee_amount_ld: int = Field(..., ge=-U64_MAX, le=U64_MAX)
    description: str

    model_config = {"frozen": True}


# =============================================================================
# MESSAGING CHANNEL VALUES
# =============================================================================


class MessagingFee(BaseModel):
    """Transport fee, in native token and in the optional ZRO token."""

    native_fee: int = Field(0, ge=0, le=U64_MAX)
    zro_fee: int = Field(0, ge=0, le=U64_MAX)

    model_config = {"frozen": True}


class MessagingReceipt(BaseModel):
    """Channel-side result of a dispatch."""

    guid: Bytes32 = Field(..., description="Unique correlation id of the message")
    nonce: int = Field(..., ge=1, le=U64_MAX, description="Outbound delivery sequence number")
    fee: MessagingFee

    model_config = {"frozen": True}


class MessagingParams(BaseModel):
    """What the engine hands to the channel for quoting or sending."""

    dst_eid: int = Field(..., ge=0, le=U32_MAX)
    receiver: Bytes32
    message: bytes
    options: bytes = b""
    pay_in_zro: bool = False

    model_config = {"frozen": True}


class Packet(BaseModel):
    """A delivered inbound message, as presented by the channel."""

    src_eid: int = Field(..., ge=0, le=U32_MAX)
    sender: Bytes32 = Field(..., description="Remote peer that sent the message")
    dst_eid: int = Field(..., ge=0, le=U32_MAX)
    receiver: Bytes32 = Field(..., description="Local application the message targets")
    nonce: int = Field(..., ge=1, le=U64_MAX, description="Inbound delivery sequence number")
    guid: Bytes32
    message: bytes

    model_config = {"frozen": True}
