"""
Notifications — observable side effects of engine operations

Immutable Pydantic models. Each event has a JSON Schema contract
(contracts/schema/<schema_name>.json); byte values are carried as
``0x``-prefixed hex strings so the JSON form is lossless.
"""

from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from oft_engine.core.domain.address import Address
from oft_engine.core.math.integer_safeguards import U16_MAX, U32_MAX, U64_MAX


HexBytes32 = str  # "0x" + 64 hex digits, checked by the JSON contract


class OFTEvent(BaseModel):
    """Base class for every notification."""

    schema_name: ClassVar[str] = ""

    oft_address: Address = Field(..., description="Emitting engine instance")

    model_config = {"frozen": True}

    def to_contract(self) -> dict:
        """JSON-ready dict validated by the event's contract."""
        data = self.model_dump(mode="json")
        data["event_type"] = self.schema_name
        return data


# =============================================================================
# LIFECYCLE
# =============================================================================


class OFTCreatedEvent(OFTEvent):
    schema_name: ClassVar[str] = "oft_created"

    token: str = Field(..., min_length=1)
    treasury_kind: Literal["mint_burn", "escrow"]
    local_decimals: int = Field(..., ge=0, le=255)
    shared_decimals: int = Field(..., ge=0, le=255)
    admin_cap_id: str = Field(..., min_length=1)


# =============================================================================
# TRANSFERS
# =============================================================================


class OFTSentEvent(OFTEvent):
    schema_name: ClassVar[str] = "oft_sent"

    guid: HexBytes32
    dst_eid: int = Field(..., ge=0, le=U32_MAX)
    from_address: Address
    amount_sent_ld: int = Field(..., ge=0, le=U64_MAX)
    amount_received_ld: int = Field(..., ge=0, le=U64_MAX)


class OFTReceivedEvent(OFTEvent):
    schema_name: ClassVar[str] = "oft_received"

    guid: HexBytes32
    src_eid: int = Field(..., ge=0, le=U32_MAX)
    to_address: Address
    amount_received_ld: int = Field(..., ge=0, le=U64_MAX)


# =============================================================================
# CONFIGURATION
# =============================================================================


class PausedSetEvent(OFTEvent):
    schema_name: ClassVar[str] = "paused_set"

    paused: bool


class FeeBpsSetEvent(OFTEvent):
    schema_name: ClassVar[str] = "fee_bps_set"

    fee_bps: int = Field(..., ge=0, le=U16_MAX)


class FeeDepositAddressSetEvent(OFTEvent):
    schema_name: ClassVar[str] = "fee_deposit_address_set"

    fee_deposit_address: Address


class PeerSetEvent(OFTEvent):
    schema_name: ClassVar[str] = "peer_set"

    eid: int = Field(..., ge=0, le=U32_MAX)
    peer: HexBytes32


class EnforcedOptionSetEvent(OFTEvent):
    schema_name: ClassVar[str] = "enforced_option_set"

    eid: int = Field(..., ge=0, le=U32_MAX)
    msg_type: int = Field(..., ge=0, le=U16_MAX)
    options: str = Field(..., description="0x-prefixed hex")


class RateLimitSetEvent(OFTEvent):
    schema_name: ClassVar[str] = "rate_limit_set"

    eid: int = Field(..., ge=0, le=U32_MAX)
    direction: Literal["inbound", "outbound"]
    limit: int = Field(..., ge=0, le=U64_MAX)
    window_seconds: int = Field(..., gt=0, le=U64_MAX)


class RateLimitUnsetEvent(OFTEvent):
    schema_name: ClassVar[str] = "rate_limit_unset"

    eid: int = Field(..., ge=0, le=U32_MAX)
    direction: Literal["inbound", "outbound"]
