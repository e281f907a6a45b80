"""
Tests for the Fee Engine

Checks:
1. apply_fee reference values and floor rounding
2. Monotonicity in the fee rate
3. Deposit address requirement (also at fee_bps == 0)
4. Setter validation and no-op rejection
"""

import pytest

from oft_engine.core.errors import InvalidFeeBps, InvalidFeeDepositAddress, RedundantConfigValue
from oft_engine.core.math.integer_safeguards import U64_MAX
from oft_engine.fees import FeeConfig, FeeEngine


FEE_ADDRESS = "0x" + "fe" * 32


def engine_with(fee_bps: int) -> FeeEngine:
    return FeeEngine(FeeConfig(fee_bps=fee_bps, fee_deposit_address=FEE_ADDRESS))


class TestApplyFee:
    """apply_fee(amount) = amount - floor(amount * bps / 10000)"""

    @pytest.mark.parametrize(
        "bps,amount,expected",
        [
            (250, 1000, 975),
            (10000, 1000, 0),
            (1, 1, 1),
            (1, 10000, 9999),
            (9999, 1, 1),
            (9999, 10000, 1),
            (0, 1000, 1000),
        ],
    )
    def test_reference_values(self, bps, amount, expected) -> None:
        assert engine_with(bps).apply_fee(amount) == expected

    def test_fee_of(self) -> None:
        assert engine_with(250).fee_of(1000) == 25

    def test_no_overflow_on_max_amount(self) -> None:
        assert engine_with(10000).apply_fee(U64_MAX) == 0
        assert engine_with(1).apply_fee(U64_MAX) == U64_MAX - U64_MAX // 10000

    def test_monotonic_in_fee_rate(self) -> None:
        """Higher rate never leaves more"""
        rates = [0, 1, 10, 250, 5000, 9999, 10000]
        for amount in (1, 7, 999, 10_000, 123_456_789):
            results = [engine_with(bps).apply_fee(amount) for bps in rates]
            assert results == sorted(results, reverse=True)

    def test_deposit_address_required_at_zero_bps(self) -> None:
        engine = FeeEngine(FeeConfig(fee_bps=0))
        with pytest.raises(InvalidFeeDepositAddress):
            engine.apply_fee(1000)


class TestFeeConfiguration:
    """Setters replace the configuration wholesale"""

    def test_config_rejects_out_of_range(self) -> None:
        with pytest.raises(InvalidFeeBps):
            FeeConfig(fee_bps=10001)

    def test_set_fee_bps(self) -> None:
        engine = engine_with(0)
        config = engine.set_fee_bps(300)
        assert config.fee_bps == 300
        assert engine.fee_bps == 300
        assert engine.fee_deposit_address == FEE_ADDRESS

    @pytest.mark.parametrize("bad", [10001, -1])
    def test_set_fee_bps_out_of_range(self, bad) -> None:
        engine = engine_with(0)
        with pytest.raises(InvalidFeeBps):
            engine.set_fee_bps(bad)
        assert engine.fee_bps == 0

    def test_set_fee_bps_redundant(self) -> None:
        with pytest.raises(RedundantConfigValue):
            engine_with(250).set_fee_bps(250)

    def test_set_deposit_address_normalizes(self) -> None:
        engine = FeeEngine()
        engine.set_fee_deposit_address("0xABC")
        assert engine.fee_deposit_address == "0x" + "0" * 61 + "abc"

    def test_zero_deposit_address_rejected(self) -> None:
        with pytest.raises(InvalidFeeDepositAddress):
            FeeEngine().set_fee_deposit_address("0x0")

    def test_redundant_deposit_address(self) -> None:
        with pytest.raises(RedundantConfigValue):
            engine_with(0).set_fee_deposit_address(FEE_ADDRESS.upper().replace("0X", "0x"))
