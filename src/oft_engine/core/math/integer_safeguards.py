"""
Integer Safeguards — unsigned integer domains and widened arithmetic

Every amount that crosses the engine boundary is an unsigned machine integer
on the wire: u64 for token amounts and nonces, u32 for endpoint ids, u16 for
fee basis points and format versions. Python ints are unbounded, so the
bounds are enforced explicitly here.

CRITICAL INVARIANTS:
1. No amount leaves its declared domain silently (AmountOverflow instead)
2. Multiply-then-divide is computed on the unbounded intermediate, the
   result is checked against the target domain
3. All division is floor division (never rounds up)
"""

from typing import Final

from oft_engine.core.errors import AmountOverflow


# =============================================================================
# DOMAIN BOUNDS
# =============================================================================

U16_MAX: Final[int] = 2**16 - 1
U32_MAX: Final[int] = 2**32 - 1
U64_MAX: Final[int] = 2**64 - 1

# Fee rates are expressed in basis points of this denominator
BPS_DENOMINATOR: Final[int] = 10_000


# =============================================================================
# VALIDATION
# =============================================================================


def validate_uint(value: int, max_value: int, name: str = "value") -> int:
    """
    Check that ``value`` is an int in ``[0, max_value]``.

    Args:
        value: Value to check
        max_value: Inclusive upper bound of the domain
        name: Field name used in the error message

    Returns:
        ``value`` unchanged

    Raises:
        TypeError: If value is not an int (bool is rejected too)
        AmountOverflow: If value is negative or above max_value
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    if value < 0 or value > max_value:
        raise AmountOverflow(f"{name}={value} outside [0, {max_value}]")
    return value


def validate_u64(value: int, name: str = "value") -> int:
    return validate_uint(value, U64_MAX, name)


def validate_u32(value: int, name: str = "value") -> int:
    return validate_uint(value, U32_MAX, name)


def validate_u16(value: int, name: str = "value") -> int:
    return validate_uint(value, U16_MAX, name)


# =============================================================================
# WIDENED ARITHMETIC
# =============================================================================


def mul_div_floor(a: int, b: int, denominator: int) -> int:
    """
    floor(a * b / denominator) with an unbounded intermediate.

    The product of two u64 values does not fit u64; the intermediate is kept
    wide and only the quotient is checked against the u64 domain.

    Args:
        a: First factor (u64)
        b: Second factor (u64)
        denominator: Positive divisor

    Returns:
        Floor of the quotient (u64)

    Raises:
        ValueError: If denominator is not positive
        AmountOverflow: If an input or the result leaves the u64 domain

    Examples:
        >>> mul_div_floor(1000, 250, 10_000)
        25
        >>> mul_div_floor(1, 1, 10_000)
        0
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")
    validate_u64(a, "a")
    validate_u64(b, "b")
    return validate_u64((a * b) // denominator, "mul_div_floor result")


def checked_add_u64(a: int, b: int) -> int:
    """a + b, rejecting results above U64_MAX."""
    return validate_u64(a + b, "checked_add_u64 result")
