"""
Domain models and value objects.

Addresses, coins and supply privilege, transfer messages and notifications.
"""

from oft_engine.core.domain.address import (
    ZERO_ADDRESS,
    ZERO_BYTES32,
    Address,
    Bytes32,
    address_to_bytes32,
    bytes32_to_address,
    is_zero_address,
    normalize_address,
)
from oft_engine.core.domain.coin import Coin, TokenLedger, TreasuryCap
from oft_engine.core.domain.events import (
    EnforcedOptionSetEvent,
    FeeBpsSetEvent,
    FeeDepositAddressSetEvent,
    OFTCreatedEvent,
    OFTEvent,
    OFTReceivedEvent,
    OFTSentEvent,
    PausedSetEvent,
    PeerSetEvent,
    RateLimitSetEvent,
    RateLimitUnsetEvent,
)
from oft_engine.core.domain.messages import (
    MessageType,
    MessagingFee,
    MessagingParams,
    MessagingReceipt,
    OFTFeeDetail,
    OFTLimit,
    OFTReceipt,
    Packet,
    SendParam,
)

__all__ = [
    # Addresses
    "ZERO_ADDRESS",
    "ZERO_BYTES32",
    "Address",
    "Bytes32",
    "address_to_bytes32",
    "bytes32_to_address",
    "is_zero_address",
    "normalize_address",
    # Coins
    "Coin",
    "TokenLedger",
    "TreasuryCap",
    # Messages
    "MessageType",
    "MessagingFee",
    "MessagingParams",
    "MessagingReceipt",
    "OFTFeeDetail",
    "OFTLimit",
    "OFTReceipt",
    "Packet",
    "SendParam",
    # Events
    "OFTEvent",
    "OFTCreatedEvent",
    "OFTSentEvent",
    "OFTReceivedEvent",
    "PausedSetEvent",
    "FeeBpsSetEvent",
    "FeeDepositAddressSetEvent",
    "PeerSetEvent",
    "EnforcedOptionSetEvent",
    "RateLimitSetEvent",
    "RateLimitUnsetEvent",
]
