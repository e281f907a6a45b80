"""
Core exception types for oft_engine.

Dependency-free; may be imported by every other module.

Every error carries a stable ``code`` string so callers (and logs) can
classify an abort without matching on the class. All errors describe an
operation that did not happen: nothing raised from here is ever retried
internally.
"""

__all__ = [
    "OFTError",
    "Paused",
    "Unauthorized",
    "InvalidLocalDecimals",
    "InvalidFeeBps",
    "InvalidFeeDepositAddress",
    "RedundantConfigValue",
    "SlippageExceeded",
    "InsufficientEscrowBalance",
    "InsufficientBalance",
    "TokenMismatch",
    "RateLimitExceeded",
    "InvalidRateLimitConfig",
    "MismatchedSendContext",
    "PendingSendConsumed",
    "ComposeNotAllowed",
    "ComposeRequired",
    "InvalidComposeTarget",
    "UnknownPeer",
    "InvalidOptions",
    "InvalidMessage",
    "AmountOverflow",
]


class OFTError(Exception):
    """Base class for every engine abort."""

    code = "oft_error"


class Paused(OFTError):
    """Raised when a send or receive is attempted while the instance is paused."""

    code = "paused"


class Unauthorized(OFTError):
    """Raised when an admin credential is not bound to this instance."""

    code = "unauthorized"


class InvalidLocalDecimals(OFTError):
    """Raised at creation when shared decimals exceed local decimals."""

    code = "invalid_local_decimals"

    def __init__(self, local_decimals: int, shared_decimals: int):
        super().__init__(
            f"shared_decimals={shared_decimals} exceeds local_decimals={local_decimals}"
        )
        self.local_decimals = local_decimals
        self.shared_decimals = shared_decimals


class InvalidFeeBps(OFTError):
    code = "invalid_fee_bps"


class InvalidFeeDepositAddress(OFTError):
    code = "invalid_fee_deposit_address"


class RedundantConfigValue(OFTError):
    """Raised when a setter is called with the value already in effect."""

    code = "redundant_config_value"


class SlippageExceeded(OFTError):
    code = "slippage_exceeded"

    def __init__(self, amount_received_ld: int, min_amount_ld: int):
        super().__init__(
            f"amount_received_ld={amount_received_ld} below min_amount_ld={min_amount_ld}"
        )
        self.amount_received_ld = amount_received_ld
        self.min_amount_ld = min_amount_ld


class InsufficientEscrowBalance(OFTError):
    code = "insufficient_escrow_balance"

    def __init__(self, requested: int, available: int):
        super().__init__(f"escrow holds {available}, requested {requested}")
        self.requested = requested
        self.available = available


class InsufficientBalance(OFTError):
    """Raised when a caller-supplied coin cannot cover the amount to debit."""

    code = "insufficient_balance"

    def __init__(self, requested: int, available: int):
        super().__init__(f"coin holds {available}, requested {requested}")
        self.requested = requested
        self.available = available


class TokenMismatch(OFTError):
    code = "token_mismatch"


class RateLimitExceeded(OFTError):
    """Raised when a consume exceeds the pathway's current capacity.

    Args:
        eid: Remote endpoint id of the pathway
        requested: Amount the operation tried to consume
        available: Capacity left after regeneration at the time of the attempt
    """

    code = "rate_limit_exceeded"

    def __init__(self, eid: int, requested: int, available: int):
        super().__init__(
            f"eid={eid}: requested {requested} exceeds available capacity {available}"
        )
        self.eid = eid
        self.requested = requested
        self.available = available


class InvalidRateLimitConfig(OFTError):
    code = "invalid_rate_limit_config"


class MismatchedSendContext(OFTError):
    """Raised when a confirm step gets a request/record pair that does not belong together."""

    code = "mismatched_send_context"


class PendingSendConsumed(MismatchedSendContext):
    """Raised on a second confirm of the same pending send."""

    code = "pending_send_consumed"


class ComposeNotAllowed(OFTError):
    code = "compose_not_allowed"


class ComposeRequired(OFTError):
    code = "compose_required"


class InvalidComposeTarget(OFTError):
    code = "invalid_compose_target"


class UnknownPeer(OFTError):
    code = "unknown_peer"


class InvalidOptions(OFTError):
    code = "invalid_options"


class InvalidMessage(OFTError):
    """Raised when a wire payload cannot be decoded."""

    code = "invalid_message"


class AmountOverflow(OFTError):
    """Raised when an amount leaves its unsigned integer domain."""

    code = "amount_overflow"
