"""Transfer Engine — public protocol of one bridged token instance."""

from .admin import AdminCap, assert_admin
from .config import EngineConfig
from .event_log import EventLog
from .transfer_engine import ConfirmSendResult, OFTQuote, TransferEngine

__all__ = [
    "AdminCap",
    "assert_admin",
    "EngineConfig",
    "EventLog",
    "ConfirmSendResult",
    "OFTQuote",
    "TransferEngine",
]
