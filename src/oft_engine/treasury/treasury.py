"""Treasury — token-supply strategy of an engine instance.

Variants (chosen once at creation, never changed):
- MINT_BURN: debit burns, credit mints. Holds the token's TreasuryCap.
- ESCROW:    debit locks tokens in the escrow pool, credit releases them.
             Credit never releases more than the pool holds.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from oft_engine.core.domain.coin import Coin, TreasuryCap
from oft_engine.core.errors import InsufficientEscrowBalance, TokenMismatch
from oft_engine.core.math.integer_safeguards import checked_add_u64, validate_u64


logger = logging.getLogger(__name__)


class TreasuryKind(str, Enum):
    MINT_BURN = "mint_burn"
    ESCROW = "escrow"


@dataclass(frozen=True)
class TreasurySnapshot:
    kind: TreasuryKind
    total_supply: Optional[int]
    escrow_balance: Optional[int]


class Treasury:
    """Tagged union over the two supply strategies.

    Construct with ``Treasury.mint_burn(cap)`` or ``Treasury.escrow(token)``.
    """

    def __init__(self, kind: TreasuryKind, token: str,
                 cap: Optional[TreasuryCap] = None, escrow: Optional[Coin] = None):
        if kind == TreasuryKind.MINT_BURN and cap is None:
            raise ValueError("MINT_BURN treasury requires a TreasuryCap")
        if kind == TreasuryKind.ESCROW and escrow is None:
            raise ValueError("ESCROW treasury requires an escrow pool")
        self._kind = kind
        self._token = token
        self._cap = cap
        self._escrow = escrow

    @classmethod
    def mint_burn(cls, cap: TreasuryCap) -> "Treasury":
        return cls(TreasuryKind.MINT_BURN, cap.token, cap=cap)

    @classmethod
    def escrow(cls, token: str) -> "Treasury":
        return cls(TreasuryKind.ESCROW, token, escrow=Coin.zero(token))

    @property
    def kind(self) -> TreasuryKind:
        return self._kind

    @property
    def token(self) -> str:
        return self._token

    @property
    def escrow_balance(self) -> int:
        """Tokens held in escrow; always 0 for MINT_BURN."""
        return self._escrow.value if self._escrow is not None else 0

    @property
    def total_supply(self) -> Optional[int]:
        """Circulating supply on this chain; None for ESCROW."""
        return self._cap.total_supply if self._cap is not None else None

    def debit(self, coin: Coin) -> int:
        """
        Take ``coin`` out of circulation (burn or lock).

        Returns:
            Amount debited

        Raises:
            TokenMismatch: If the coin is not this treasury's token
        """
        if coin.token != self._token:
            raise TokenMismatch(f"treasury holds {self._token}, got {coin.token}")
        amount = coin.value

        if self._kind == TreasuryKind.MINT_BURN:
            self._cap.burn(coin)
        elif self._kind == TreasuryKind.ESCROW:
            self._escrow.join(coin)
        else:
            raise AssertionError(f"unhandled treasury kind: {self._kind}")

        logger.debug("treasury debit kind=%s amount=%d", self._kind.value, amount)
        return amount

    def check_credit(self, amount: int) -> None:
        """
        Raises:
            InsufficientEscrowBalance: If an ESCROW pool holds less than amount
            AmountOverflow: If minting amount would take MINT_BURN supply past u64
        """
        validate_u64(amount, "amount")
        if self._kind == TreasuryKind.ESCROW and amount > self._escrow.value:
            raise InsufficientEscrowBalance(requested=amount, available=self._escrow.value)
        if self._kind == TreasuryKind.MINT_BURN:
            checked_add_u64(self._cap.total_supply, amount)

    def credit(self, amount: int) -> Coin:
        """
        Put ``amount`` into circulation (mint or release).

        Raises:
            InsufficientEscrowBalance: If an ESCROW pool holds less than amount
            AmountOverflow: If minting amount would take MINT_BURN supply past u64
        """
        self.check_credit(amount)

        if self._kind == TreasuryKind.MINT_BURN:
            coin = self._cap.mint(amount)
        elif self._kind == TreasuryKind.ESCROW:
            coin = self._escrow.split(amount)
        else:
            raise AssertionError(f"unhandled treasury kind: {self._kind}")

        logger.debug("treasury credit kind=%s amount=%d", self._kind.value, amount)
        return coin

    def snapshot(self) -> TreasurySnapshot:
        return TreasurySnapshot(
            kind=self._kind,
            total_supply=self.total_supply,
            escrow_balance=self._escrow.value if self._escrow is not None else None,
        )

    def restore(self, snapshot: TreasurySnapshot) -> None:
        if snapshot.kind != self._kind:
            raise ValueError("treasury kind cannot change")
        if self._cap is not None:
            self._cap.total_supply = snapshot.total_supply
        if self._escrow is not None:
            self._escrow.value = snapshot.escrow_balance
