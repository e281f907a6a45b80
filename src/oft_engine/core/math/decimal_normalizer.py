"""
Decimal Normalizer — local precision <-> shared cross-chain precision

Conversion rules:
- to_shared(amount_ld) = amount_ld // rate          (floor, never rounds up)
- to_local(amount_sd)  = amount_sd * rate           (exact)
- remove_dust(amount_ld) = (amount_ld // rate) * rate

Properties:
- remove_dust is idempotent
- to_shared(to_local(x)) == x
- to_local(to_shared(y)) == remove_dust(y)

Shared decimals are the minimum precision of every connected chain, so a
shared amount is always representable locally. Truncation keeps the dust
with the sender instead of overdrawing them.
"""

from dataclasses import dataclass
from typing import Final

from oft_engine.core.errors import AmountOverflow, InvalidLocalDecimals
from oft_engine.core.math.integer_safeguards import U64_MAX, validate_u64


# Shared decimals used when the creator does not pick one
DEFAULT_SHARED_DECIMALS: Final[int] = 6

# 10**19 already exceeds u64, so larger exponents are meaningless
MAX_DECIMALS_GAP: Final[int] = 19


def conversion_rate(local_decimals: int, shared_decimals: int) -> int:
    """
    decimal_conversion_rate = 10 ** (local_decimals - shared_decimals)

    Args:
        local_decimals: Decimals of the token on this chain
        shared_decimals: Decimals used on the wire

    Returns:
        Conversion rate (>= 1)

    Raises:
        InvalidLocalDecimals: If shared_decimals > local_decimals
        ValueError: If decimals are negative or the gap is too wide for u64
    """
    if local_decimals < 0 or shared_decimals < 0:
        raise ValueError(
            f"decimals must be non-negative, got local={local_decimals} shared={shared_decimals}"
        )
    if shared_decimals > local_decimals:
        raise InvalidLocalDecimals(local_decimals, shared_decimals)
    gap = local_decimals - shared_decimals
    if gap > MAX_DECIMALS_GAP:
        raise ValueError(f"decimals gap {gap} exceeds {MAX_DECIMALS_GAP}")
    return 10**gap


def to_shared(amount_ld: int, rate: int) -> int:
    """Local amount -> shared amount (floor division)."""
    validate_u64(amount_ld, "amount_ld")
    return amount_ld // rate


def to_local(amount_sd: int, rate: int) -> int:
    """
    Shared amount -> local amount (exact).

    Raises:
        AmountOverflow: If the local amount does not fit u64
    """
    validate_u64(amount_sd, "amount_sd")
    amount_ld = amount_sd * rate
    if amount_ld > U64_MAX:
        raise AmountOverflow(f"amount_sd={amount_sd} * rate={rate} exceeds u64")
    return amount_ld


def remove_dust(amount_ld: int, rate: int) -> int:
    """Floor ``amount_ld`` to the nearest multiple of ``rate``."""
    validate_u64(amount_ld, "amount_ld")
    return (amount_ld // rate) * rate


@dataclass(frozen=True)
class DecimalNormalizer:
    """Conversion set bound to one (local, shared) decimals pair.

    The rate is fixed at construction and never changes for the life of an
    engine instance.
    """

    local_decimals: int
    shared_decimals: int = DEFAULT_SHARED_DECIMALS

    def __post_init__(self) -> None:
        # Validates the pair and fails fast on an invalid configuration
        conversion_rate(self.local_decimals, self.shared_decimals)

    @property
    def rate(self) -> int:
        return 10 ** (self.local_decimals - self.shared_decimals)

    def to_shared(self, amount_ld: int) -> int:
        return to_shared(amount_ld, self.rate)

    def to_local(self, amount_sd: int) -> int:
        return to_local(amount_sd, self.rate)

    def remove_dust(self, amount_ld: int) -> int:
        return remove_dust(amount_ld, self.rate)

    def dust_of(self, amount_ld: int) -> int:
        """Remainder lost by remove_dust."""
        return amount_ld - self.remove_dust(amount_ld)
