"""
Coin primitives — balances, supply privilege and account ledger

Coin
    A movable balance of one token. Value is moved between coins with
    split/join; a coin handed to a recipient is emptied.
TreasuryCap
    The supply-control privilege of one token: the only way to mint or burn.
TokenLedger
    Account balances by (token, address): where transferred coins end up.

These model the resource semantics of the host chain. Amounts are u64.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Tuple

from oft_engine.core.domain.address import normalize_address
from oft_engine.core.errors import InsufficientBalance, TokenMismatch
from oft_engine.core.math.integer_safeguards import checked_add_u64, validate_u64


logger = logging.getLogger(__name__)


# =============================================================================
# COIN
# =============================================================================


@dataclass(eq=False)
class Coin:
    """Movable balance of a single token (value is u64)."""

    token: str
    value: int = 0
    coin_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        validate_u64(self.value, "coin value")

    @classmethod
    def zero(cls, token: str) -> "Coin":
        return cls(token=token, value=0)

    def is_zero(self) -> bool:
        return self.value == 0

    def split(self, amount: int) -> "Coin":
        """
        Move ``amount`` out of this coin into a new coin.

        Raises:
            InsufficientBalance: If this coin holds less than ``amount``
        """
        validate_u64(amount, "split amount")
        if amount > self.value:
            raise InsufficientBalance(requested=amount, available=self.value)
        self.value -= amount
        return Coin(token=self.token, value=amount)

    def join(self, other: "Coin") -> None:
        """Move the whole value of ``other`` into this coin."""
        self._check_token(other)
        self.value = checked_add_u64(self.value, other.value)
        other.value = 0

    def take_all(self) -> "Coin":
        return self.split(self.value)

    def _check_token(self, other: "Coin") -> None:
        if other.token != self.token:
            raise TokenMismatch(f"cannot join {other.token} into {self.token}")


# =============================================================================
# SUPPLY PRIVILEGE
# =============================================================================


@dataclass(eq=False)
class TreasuryCap:
    """Supply-control privilege for one token."""

    token: str
    total_supply: int = 0

    def mint(self, amount: int) -> Coin:
        self.total_supply = checked_add_u64(self.total_supply, validate_u64(amount, "mint amount"))
        logger.debug("mint token=%s amount=%d supply=%d", self.token, amount, self.total_supply)
        return Coin(token=self.token, value=amount)

    def burn(self, coin: Coin) -> int:
        """Destroy ``coin`` and return the burned amount."""
        if coin.token != self.token:
            raise TokenMismatch(f"cannot burn {coin.token} with {self.token} cap")
        amount = coin.value
        coin.value = 0
        self.total_supply -= amount
        logger.debug("burn token=%s amount=%d supply=%d", self.token, amount, self.total_supply)
        return amount


# =============================================================================
# ACCOUNT LEDGER
# =============================================================================


class TokenLedger:
    """Account balances keyed by (token, address)."""

    def __init__(self) -> None:
        self._balances: Dict[Tuple[str, str], int] = {}

    def check_transfer(self, token: str, recipient: str, amount: int) -> None:
        """
        Raises:
            AmountOverflow: If crediting ``amount`` would take the account past u64
        """
        checked_add_u64(self.balance_of(token, recipient), amount)

    def transfer(self, coin: Coin, recipient: str) -> int:
        """
        Credit the full value of ``coin`` to ``recipient`` and empty the coin.

        Returns:
            Amount credited

        Raises:
            AmountOverflow: If the account balance would exceed u64
        """
        key = (coin.token, normalize_address(recipient))
        amount = coin.value
        self._balances[key] = checked_add_u64(self._balances.get(key, 0), amount)
        coin.value = 0
        logger.debug("transfer token=%s to=%s amount=%d", key[0], key[1], amount)
        return amount

    def withdraw(self, token: str, owner: str, amount: int) -> Coin:
        """Move ``amount`` out of an account into a coin."""
        key = (token, normalize_address(owner))
        available = self._balances.get(key, 0)
        if amount > available:
            raise InsufficientBalance(requested=amount, available=available)
        self._balances[key] = available - amount
        return Coin(token=token, value=amount)

    def balance_of(self, token: str, owner: str) -> int:
        return self._balances.get((token, normalize_address(owner)), 0)
