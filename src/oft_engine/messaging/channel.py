"""Messaging Channel and Composer Registry — external collaborator interfaces.

The channel transports payloads between chains. It authenticates peers,
assigns delivery order (nonce) and correlation ids (guid), enforces
in-order exactly-once delivery, and carries transport fee quoting and
payment. The engine never blocks on it: outbound work is handed over as a
request token and completed by a second call once the channel is done.

Request tokens:
- QuoteRequest: produced by ``quote``, resolved to a MessagingFee
- SendRequest:  produced by ``send``, completed by the channel with a
                SendResult (receipt plus unspent fee funds)
- PendingSend:  the engine's half of an in-flight send; single use
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from oft_engine.core.domain.coin import Coin
from oft_engine.core.domain.messages import (
    MessagingFee,
    MessagingParams,
    MessagingReceipt,
    OFTReceipt,
    Packet,
)


def _request_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# REQUEST TOKENS
# =============================================================================


@dataclass(eq=False)
class QuoteRequest:
    """Pending transport fee quote."""

    oapp: str
    sender: str
    params: MessagingParams
    request_id: str = field(default_factory=_request_id)
    fee: Optional[MessagingFee] = None  # filled in by the channel


@dataclass(frozen=True)
class SendResult:
    """Channel-side completion of a dispatch."""

    receipt: MessagingReceipt
    native_refund: Coin
    zro_refund: Optional[Coin] = None


@dataclass(eq=False)
class SendRequest:
    """Opaque handle of a dispatch handed to the channel."""

    oapp: str
    sender: str
    params: MessagingParams
    native_coin: Coin
    zro_coin: Optional[Coin] = None
    request_id: str = field(default_factory=_request_id)
    result: Optional[SendResult] = None  # filled in by the channel

    @property
    def completed(self) -> bool:
        return self.result is not None


@dataclass(eq=False)
class PendingSend:
    """Engine-side record of a send awaiting confirmation.

    Created by ``TransferEngine.send``; consumed exactly once by
    ``TransferEngine.confirm_send``. The engine keeps its own copy of every
    outstanding record, so ``consumed`` only reports the outcome to the caller.
    """

    oft_receipt: OFTReceipt
    sender: str
    request_id: str
    dst_eid: int
    consumed: bool = False


@dataclass(frozen=True)
class ComposeQueue:
    """Channel-held queue of compose messages for one composer."""

    composer: str
    queue_id: str = field(default_factory=_request_id)


# =============================================================================
# INTERFACES
# =============================================================================


class MessagingChannel(ABC):
    """Transport used by the engine. Implementations live outside this package."""

    @abstractmethod
    def quote(self, oapp: str, sender: str, params: MessagingParams) -> QuoteRequest:
        """Open a fee quote request for ``params``."""

    @abstractmethod
    def resolve_quote(self, request: QuoteRequest) -> MessagingFee:
        """Concrete fee of a quote request. Read-only."""

    @abstractmethod
    def send(self, oapp: str, sender: str, params: MessagingParams,
             native_coin: Coin, zro_coin: Optional[Coin] = None) -> SendRequest:
        """Hand a payload and its fee funding over for dispatch."""

    @abstractmethod
    def take_send_result(self, request: SendRequest) -> SendResult:
        """Completion of a dispatched request; raises if not yet completed."""

    @abstractmethod
    def clear(self, oapp: str, packet: Packet) -> None:
        """Verify a delivered packet and mark it delivered (in order, once)."""

    @abstractmethod
    def send_compose(self, oapp: str, compose_queue: ComposeQueue, guid: bytes,
                     index: int, message: bytes) -> None:
        """Enqueue a compose envelope for the queue's composer."""

    @abstractmethod
    def is_channel_inited(self, oapp: str, remote_eid: int) -> bool: ...

    @abstractmethod
    def init_channel(self, oapp: str, remote_eid: int, peer: bytes) -> None: ...

    @abstractmethod
    def set_delegate(self, oapp: str, delegate: str) -> None: ...

    @abstractmethod
    def register_oapp(self, oapp: str, lz_receive_info: bytes) -> None:
        """Register receive-execution metadata for ``oapp``."""


class ComposerRegistry(ABC):
    """Custodian of tokens credited to compose recipients."""

    @abstractmethod
    def deposit(self, guid: bytes, composer: str, coin: Coin, compose_message: bytes) -> None:
        """Hold ``coin`` and its compose envelope for ``composer`` under correlation id ``guid``."""
