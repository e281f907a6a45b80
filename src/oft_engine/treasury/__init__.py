"""Treasury — mint/burn or escrow/release supply strategy."""

from .treasury import Treasury, TreasuryKind, TreasurySnapshot

__all__ = [
    "Treasury",
    "TreasuryKind",
    "TreasurySnapshot",
]
