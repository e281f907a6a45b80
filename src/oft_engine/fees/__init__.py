"""Fee Engine — basis-point fee on outbound transfers."""

from .fee_engine import FeeConfig, FeeEngine

__all__ = [
    "FeeConfig",
    "FeeEngine",
]
