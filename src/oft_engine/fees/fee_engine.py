"""Fee Engine — basis-point transfer fee and fee-deposit routing.

Rules:
- fee = floor(amount * fee_bps / 10000), computed on a widened intermediate
- apply_fee(amount) = amount - fee
- apply_fee requires a non-zero fee deposit address, also when fee_bps == 0
- setters reject out-of-range values and values identical to the current ones
- only the outbound (debit) path is charged
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from oft_engine.core.domain.address import is_zero_address, normalize_address
from oft_engine.core.errors import (
    InvalidFeeBps,
    InvalidFeeDepositAddress,
    RedundantConfigValue,
)
from oft_engine.core.math.integer_safeguards import BPS_DENOMINATOR, mul_div_floor, validate_u64


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeConfig:
    """Fee configuration.

    fee_bps: 0..=10000
    fee_deposit_address: recipient of collected fees; None until configured
    """

    fee_bps: int = 0
    fee_deposit_address: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 <= self.fee_bps <= BPS_DENOMINATOR:
            raise InvalidFeeBps(f"fee_bps {self.fee_bps} outside [0, {BPS_DENOMINATOR}]")


class FeeEngine:
    """Basis-point fee calculator.

    The configuration is replaced wholesale on every change so a snapshot of
    ``config`` is always a consistent (fee_bps, fee_deposit_address) pair.
    """

    def __init__(self, config: Optional[FeeConfig] = None):
        self.config = config or FeeConfig()

    @property
    def fee_bps(self) -> int:
        return self.config.fee_bps

    @property
    def fee_deposit_address(self) -> Optional[str]:
        return self.config.fee_deposit_address

    def fee_of(self, amount: int) -> int:
        """Fee charged on ``amount`` (floor)."""
        self._require_deposit_address()
        return mul_div_floor(validate_u64(amount, "amount"), self.config.fee_bps, BPS_DENOMINATOR)

    def apply_fee(self, amount: int) -> int:
        """
        Amount left after the fee.

        Args:
            amount: Gross amount (u64)

        Returns:
            amount - floor(amount * fee_bps / 10000)

        Raises:
            InvalidFeeDepositAddress: If no deposit address is configured
        """
        return amount - self.fee_of(amount)

    def set_fee_bps(self, fee_bps: int) -> FeeConfig:
        """
        Raises:
            InvalidFeeBps: If fee_bps > 10000 (or negative)
            RedundantConfigValue: If fee_bps equals the current value
        """
        if isinstance(fee_bps, bool) or not isinstance(fee_bps, int):
            raise InvalidFeeBps(f"fee_bps must be int, got {type(fee_bps).__name__}")
        if not 0 <= fee_bps <= BPS_DENOMINATOR:
            raise InvalidFeeBps(f"fee_bps {fee_bps} outside [0, {BPS_DENOMINATOR}]")
        if fee_bps == self.config.fee_bps:
            raise RedundantConfigValue(f"fee_bps already {fee_bps}")
        self.config = replace(self.config, fee_bps=fee_bps)
        logger.info("fee_bps set to %d", fee_bps)
        return self.config

    def set_fee_deposit_address(self, address: str) -> FeeConfig:
        """
        Raises:
            InvalidFeeDepositAddress: If address is the zero address
            RedundantConfigValue: If address equals the current one
        """
        if is_zero_address(address):
            raise InvalidFeeDepositAddress("fee deposit address must be non-zero")
        address = normalize_address(address)
        if address == self.config.fee_deposit_address:
            raise RedundantConfigValue(f"fee deposit address already {address}")
        self.config = replace(self.config, fee_deposit_address=address)
        logger.info("fee deposit address set to %s", address)
        return self.config

    def _require_deposit_address(self) -> None:
        # Enforced even at fee_bps == 0
        if is_zero_address(self.config.fee_deposit_address):
            raise InvalidFeeDepositAddress("fee deposit address is not set")
