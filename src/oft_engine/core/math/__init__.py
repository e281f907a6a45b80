"""
Core math modules for oft_engine

Integer-domain primitives and decimal normalization. Everything here is pure.
"""

# Integer safeguards
from oft_engine.core.math.integer_safeguards import (
    BPS_DENOMINATOR,
    U16_MAX,
    U32_MAX,
    U64_MAX,
    checked_add_u64,
    mul_div_floor,
    validate_u16,
    validate_u32,
    validate_u64,
    validate_uint,
)

# Decimal normalization
from oft_engine.core.math.decimal_normalizer import (
    DEFAULT_SHARED_DECIMALS,
    DecimalNormalizer,
    conversion_rate,
    remove_dust,
    to_local,
    to_shared,
)

__all__ = [
    # Integer safeguards
    "BPS_DENOMINATOR",
    "U16_MAX",
    "U32_MAX",
    "U64_MAX",
    "checked_add_u64",
    "mul_div_floor",
    "validate_u16",
    "validate_u32",
    "validate_u64",
    "validate_uint",
    # Decimal normalization
    "DEFAULT_SHARED_DECIMALS",
    "DecimalNormalizer",
    "conversion_rate",
    "remove_dust",
    "to_local",
    "to_shared",
]
