"""
Shared fixtures: in-memory stand-ins for the external collaborators

InMemoryMessagingChannel
    One chain's endpoint. Assigns nonces and guids, charges a flat native
    fee, completes send requests (immediately unless auto_dispatch=False)
    and enforces in-order exactly-once delivery on ``clear``.
InMemoryComposerRegistry
    Holds coins credited to composers, keyed by guid.
"""

import hashlib
from typing import Dict, List, Optional, Set, Tuple

import pytest

from oft_engine.core.domain.address import address_to_bytes32
from oft_engine.core.domain.coin import Coin, TokenLedger, TreasuryCap
from oft_engine.core.domain.messages import MessagingFee, MessagingParams, MessagingReceipt, Packet
from oft_engine.engine import EngineConfig, TransferEngine
from oft_engine.messaging.channel import (
    ComposeQueue,
    ComposerRegistry,
    MessagingChannel,
    QuoteRequest,
    SendRequest,
    SendResult,
)
from oft_engine.treasury import TreasuryKind


NATIVE_TOKEN = "SUI"
DEFAULT_NATIVE_FEE = 100


class InMemoryMessagingChannel(MessagingChannel):
    def __init__(self, local_eid: int, native_fee: int = DEFAULT_NATIVE_FEE,
                 zro_fee: int = 0, auto_dispatch: bool = True) -> None:
        self.local_eid = local_eid
        self.native_fee = native_fee
        self.zro_fee = zro_fee
        self.auto_dispatch = auto_dispatch

        self.sent: List[SendRequest] = []
        self.composes: List[Tuple[ComposeQueue, bytes, int, bytes]] = []
        self.delegates: Dict[str, str] = {}
        self.registrations: Dict[str, bytes] = {}
        self.collected_native = Coin.zero(NATIVE_TOKEN)

        self._outbound_nonce: Dict[Tuple[str, int], int] = {}
        self._inbound_nonce: Dict[Tuple[str, int, bytes], int] = {}
        self._inited: Set[Tuple[str, int]] = set()

    # --- quoting ---------------------------------------------------------

    def _fee_for(self, params: MessagingParams) -> MessagingFee:
        return MessagingFee(native_fee=self.native_fee, zro_fee=self.zro_fee if params.pay_in_zro else 0)

    def quote(self, oapp: str, sender: str, params: MessagingParams) -> QuoteRequest:
        return QuoteRequest(oapp=oapp, sender=sender, params=params, fee=self._fee_for(params))

    def resolve_quote(self, request: QuoteRequest) -> MessagingFee:
        return request.fee

    # --- sending ---------------------------------------------------------

    def send(self, oapp: str, sender: str, params: MessagingParams,
             native_coin: Coin, zro_coin: Optional[Coin] = None) -> SendRequest:
        request = SendRequest(oapp=oapp, sender=sender, params=params,
                              native_coin=native_coin, zro_coin=zro_coin)
        if self.auto_dispatch:
            self.dispatch(request)
        self.sent.append(request)
        return request

    def dispatch(self, request: SendRequest) -> None:
        """Assign nonce and guid, collect the fee and complete the request."""
        fee = self._fee_for(request.params)
        self.collected_native.join(request.native_coin.split(fee.native_fee))
        zro_refund = None
        if request.zro_coin is not None:
            request.zro_coin.split(fee.zro_fee)
            zro_refund = request.zro_coin.take_all()

        key = (request.oapp, request.params.dst_eid)
        nonce = self._outbound_nonce.get(key, 0) + 1
        self._outbound_nonce[key] = nonce
        guid = self.make_guid(nonce, request.oapp, request.params.dst_eid, request.params.receiver)

        request.result = SendResult(
            receipt=MessagingReceipt(guid=guid, nonce=nonce, fee=fee),
            native_refund=request.native_coin.take_all(),
            zro_refund=zro_refund,
        )

    def make_guid(self, nonce: int, oapp: str, dst_eid: int, receiver: bytes) -> bytes:
        return hashlib.sha256(
            nonce.to_bytes(8, "big")
            + self.local_eid.to_bytes(4, "big")
            + address_to_bytes32(oapp)
            + dst_eid.to_bytes(4, "big")
            + receiver
        ).digest()

    def take_send_result(self, request: SendRequest) -> SendResult:
        if not request.completed:
            raise RuntimeError(f"send request {request.request_id} not dispatched yet")
        return request.result

    def packet_for(self, request: SendRequest) -> Packet:
        """The packet the destination chain sees for a completed request."""
        receipt = self.take_send_result(request).receipt
        return Packet(
            src_eid=self.local_eid,
            sender=address_to_bytes32(request.oapp),
            dst_eid=request.params.dst_eid,
            receiver=request.params.receiver,
            nonce=receipt.nonce,
            guid=receipt.guid,
            message=request.params.message,
        )

    # --- receiving -------------------------------------------------------

    def clear(self, oapp: str, packet: Packet) -> None:
        key = (oapp, packet.src_eid, packet.sender)
        expected = self._inbound_nonce.get(key, 0) + 1
        if packet.nonce != expected:
            raise RuntimeError(f"nonce {packet.nonce} not deliverable, expected {expected}")
        self._inbound_nonce[key] = packet.nonce

    def inbound_nonce(self, oapp: str, src_eid: int, sender: bytes) -> int:
        return self._inbound_nonce.get((oapp, src_eid, sender), 0)

    def send_compose(self, oapp: str, compose_queue: ComposeQueue, guid: bytes,
                     index: int, message: bytes) -> None:
        self.composes.append((compose_queue, guid, index, message))

    # --- configuration ---------------------------------------------------

    def is_channel_inited(self, oapp: str, remote_eid: int) -> bool:
        return (oapp, remote_eid) in self._inited

    def init_channel(self, oapp: str, remote_eid: int, peer: bytes) -> None:
        self._inited.add((oapp, remote_eid))

    def set_delegate(self, oapp: str, delegate: str) -> None:
        self.delegates[oapp] = delegate

    def register_oapp(self, oapp: str, lz_receive_info: bytes) -> None:
        self.registrations[oapp] = lz_receive_info


class InMemoryComposerRegistry(ComposerRegistry):
    def __init__(self) -> None:
        self.deposits: Dict[bytes, Tuple[str, Coin, bytes]] = {}

    def deposit(self, guid: bytes, composer: str, coin: Coin, compose_message: bytes) -> None:
        if guid in self.deposits:
            raise RuntimeError("duplicate compose deposit")
        self.deposits[guid] = (composer, coin, compose_message)


# -----------------------------
# Pytest fixtures
# -----------------------------


@pytest.fixture()
def ledger() -> TokenLedger:
    return TokenLedger()


@pytest.fixture()
def channel() -> InMemoryMessagingChannel:
    return InMemoryMessagingChannel(local_eid=101)


@pytest.fixture()
def remote_channel() -> InMemoryMessagingChannel:
    return InMemoryMessagingChannel(local_eid=102)


@pytest.fixture()
def composer_registry() -> InMemoryComposerRegistry:
    return InMemoryComposerRegistry()


@pytest.fixture()
def make_engine(ledger):
    """Factory: make_engine(channel, kind=..., local_decimals=..., **config)."""

    def _make(channel: MessagingChannel, kind: TreasuryKind = TreasuryKind.ESCROW,
              token: str = "USDX", local_decimals: int = 6, **overrides):
        config = EngineConfig(token=token, local_decimals=local_decimals,
                              treasury_kind=kind, **overrides)
        cap = TreasuryCap(token=token) if kind == TreasuryKind.MINT_BURN else None
        return TransferEngine.create(config, channel, ledger, treasury_cap=cap)

    return _make


@pytest.fixture()
def native_coin():
    def _native(value: int = 1_000) -> Coin:
        return Coin(token=NATIVE_TOKEN, value=value)

    return _native
