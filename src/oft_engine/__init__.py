"""
oft_engine — omnichain fungible token transfer engine

Debits tokens on the source chain (burn or escrow), carries the amount
across a messaging channel in shared decimals, and credits it on the
destination chain (mint or release), with basis-point fees, per-pathway
rate limits and optional composed calls.

Packages:
- core:      math, domain models, wire codecs, JSON event contracts
- fees:      basis-point fee engine
- ratelimit: inbound/outbound token-bucket limiters
- treasury:  mint/burn and escrow supply strategies
- messaging: channel interfaces and receive-execution metadata
- engine:    TransferEngine orchestration and admin credential
"""

from oft_engine.engine import AdminCap, ConfirmSendResult, EngineConfig, TransferEngine

__version__ = "0.1.0"

__all__ = [
    "AdminCap",
    "ConfirmSendResult",
    "EngineConfig",
    "TransferEngine",
]
