"""
EngineConfig — creation parameters of a TransferEngine

Immutable Pydantic model. Only range checks live here; the decimals pair is
validated by the DecimalNormalizer when the engine is built, so the
creation-time error is InvalidLocalDecimals rather than a ValidationError.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from oft_engine.core.domain.address import Address, normalize_address
from oft_engine.core.math.decimal_normalizer import DEFAULT_SHARED_DECIMALS
from oft_engine.core.math.integer_safeguards import BPS_DENOMINATOR
from oft_engine.treasury.treasury import TreasuryKind


def _random_object_id() -> str:
    return normalize_address("0x" + uuid.uuid4().hex)


class EngineConfig(BaseModel):
    """Creation parameters of an engine instance."""

    token: str = Field(..., min_length=1, description="Token symbol handled by the instance")
    local_decimals: int = Field(..., ge=0, le=255, description="Token decimals on this chain")
    shared_decimals: int = Field(
        DEFAULT_SHARED_DECIMALS, ge=0, le=255, description="Decimals used on the wire"
    )
    treasury_kind: TreasuryKind = Field(..., description="Supply strategy, fixed for life")

    fee_bps: int = Field(0, ge=0, le=BPS_DENOMINATOR, description="Initial fee rate")
    fee_deposit_address: Optional[Address] = Field(
        None, description="Initial fee recipient; transfers are blocked until set"
    )

    oft_address: Address = Field(
        default_factory=_random_object_id, description="Object id of the instance"
    )
    package: Address = Field(
        default_factory=_random_object_id, description="Package id of the entry points"
    )
    validate_event_contracts: bool = Field(
        True, description="Check every notification against its JSON contract"
    )

    model_config = {"frozen": True}

    @field_validator("token")
    @classmethod
    def validate_token_symbol(cls, v: str) -> str:
        if v != v.strip():
            raise ValueError(f"token symbol {v!r} has surrounding whitespace")
        return v
