"""
Tests for the Decimal Normalizer

Checks:
1. Conversion rate and creation-time validation
2. to_shared / to_local / remove_dust
3. Dust removal idempotence and round-trip identities
"""

import pytest

from oft_engine.core.errors import AmountOverflow, InvalidLocalDecimals
from oft_engine.core.math.decimal_normalizer import (
    DEFAULT_SHARED_DECIMALS,
    DecimalNormalizer,
    conversion_rate,
    remove_dust,
)
from oft_engine.core.math.integer_safeguards import U64_MAX


# =============================================================================
# CONVERSION RATE
# =============================================================================


class TestConversionRate:
    """decimal_conversion_rate = 10 ** (local - shared)"""

    @pytest.mark.parametrize(
        "local,shared,rate",
        [(6, 6, 1), (9, 6, 1000), (18, 6, 10**12), (8, 0, 10**8)],
    )
    def test_rate(self, local, shared, rate) -> None:
        assert conversion_rate(local, shared) == rate

    def test_shared_above_local_rejected(self) -> None:
        with pytest.raises(InvalidLocalDecimals) as exc_info:
            DecimalNormalizer(local_decimals=4, shared_decimals=6)
        assert exc_info.value.local_decimals == 4
        assert exc_info.value.shared_decimals == 6

    def test_gap_too_wide(self) -> None:
        with pytest.raises(ValueError):
            conversion_rate(30, 6)

    def test_default_shared_decimals(self) -> None:
        assert DecimalNormalizer(local_decimals=9).shared_decimals == DEFAULT_SHARED_DECIMALS == 6


# =============================================================================
# CONVERSIONS
# =============================================================================


class TestConversions:
    """local <-> shared conversions at rate 1000 (9 -> 6 decimals)"""

    @pytest.fixture
    def normalizer(self) -> DecimalNormalizer:
        return DecimalNormalizer(local_decimals=9, shared_decimals=6)

    def test_remove_dust_example(self, normalizer) -> None:
        assert normalizer.remove_dust(123456789) == 123456000
        assert normalizer.dust_of(123456789) == 789

    def test_to_shared_floors(self, normalizer) -> None:
        assert normalizer.to_shared(123456789) == 123456
        assert normalizer.to_shared(999) == 0

    def test_to_local_exact(self, normalizer) -> None:
        assert normalizer.to_local(123456) == 123456000

    def test_to_local_overflow(self, normalizer) -> None:
        with pytest.raises(AmountOverflow):
            normalizer.to_local(U64_MAX)

    def test_shared_round_trip_is_identity(self, normalizer) -> None:
        for amount_sd in (0, 1, 999, 10**12):
            assert normalizer.to_shared(normalizer.to_local(amount_sd)) == amount_sd

    def test_local_round_trip_removes_dust(self, normalizer) -> None:
        for amount_ld in (0, 1, 1001, 123456789, U64_MAX):
            assert normalizer.to_local(normalizer.to_shared(amount_ld)) == normalizer.remove_dust(amount_ld)

    def test_rate_one_is_lossless(self) -> None:
        normalizer = DecimalNormalizer(local_decimals=6, shared_decimals=6)
        assert normalizer.remove_dust(1_000_001) == 1_000_001


class TestRemoveDustIdempotence:
    @pytest.mark.parametrize("rate", [1, 10, 1000, 10**12])
    @pytest.mark.parametrize("amount", [0, 1, 9, 10, 123456789, U64_MAX])
    def test_idempotent(self, amount, rate) -> None:
        once = remove_dust(amount, rate)
        assert remove_dust(once, rate) == once
        assert once <= amount
        assert amount - once < rate
