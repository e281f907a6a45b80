"""Transfer Engine — orchestration of cross-chain token transfers.

Owns the decimal normalizer, fee engine, inbound/outbound rate limiters and
treasury of one token, and implements the public protocol:

Outbound (two-step handshake around the messaging channel):
1. quote_send          -> QuoteRequest       (channel prices the dispatch)
2. confirm_quote_send  -> MessagingFee       (read-only)
3. send                -> (SendRequest, PendingSend)
4. confirm_send        -> ConfirmSendResult  (emits OFTSentEvent)

Inbound:
- lz_receive               plain transfer, credited to the recipient
- lz_receive_with_compose  credited to a composer with a compose envelope

Net-flow accounting per pathway:
- send:    consume outbound(dst), release inbound(dst)
- receive: consume inbound(src),  release outbound(src)

Every public operation is all-or-nothing: it runs under the instance lock
inside a snapshot of all engine-owned state, caller-owned coins are only
touched once nothing can fail any more, and on a receive the channel's
delivery commit is the last fallible step.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Iterator, List, Optional, Tuple

from oft_engine.core.codec import compose_msg_codec, oft_msg_codec
from oft_engine.core.codec.oft_msg_codec import DecodedMessage
from oft_engine.core.codec.options import assert_type_3, combine_options
from oft_engine.core.contracts import EventContractRegistry
from oft_engine.core.domain.address import (
    ZERO_BYTES32,
    address_to_bytes32,
    bytes32_to_address,
    normalize_address,
    validate_bytes32,
)
from oft_engine.core.domain.coin import Coin, TokenLedger, TreasuryCap
from oft_engine.core.domain.events import (
    EnforcedOptionSetEvent,
    FeeBpsSetEvent,
    FeeDepositAddressSetEvent,
    OFTCreatedEvent,
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
from oft_engine.core.errors import (
    ComposeNotAllowed,
    ComposeRequired,
    InsufficientBalance,
    InvalidComposeTarget,
    InvalidMessage,
    MismatchedSendContext,
    Paused,
    PendingSendConsumed,
    RedundantConfigValue,
    SlippageExceeded,
    TokenMismatch,
    UnknownPeer,
)
from oft_engine.core.math.decimal_normalizer import DecimalNormalizer
from oft_engine.core.math.integer_safeguards import validate_u32
from oft_engine.engine.admin import AdminCap, assert_admin
from oft_engine.engine.config import EngineConfig
from oft_engine.engine.event_log import EventLog
from oft_engine.fees.fee_engine import FeeConfig, FeeEngine
from oft_engine.messaging.channel import (
    ComposeQueue,
    ComposerRegistry,
    MessagingChannel,
    PendingSend,
    QuoteRequest,
    SendRequest,
)
from oft_engine.messaging.receive_info import (
    LZ_RECEIVE_INFO_VERSION,
    build_lz_receive_info,
    decode_lz_receive_info,
    encode_uleb128,
)
from oft_engine.ratelimit.rate_limiter import (
    Direction,
    RateLimitBucket,
    RateLimitConfig,
    RateLimiter,
)
from oft_engine.treasury.treasury import Treasury, TreasuryKind, TreasurySnapshot


logger = logging.getLogger(__name__)


# Reported by oft_version() as (interface, message)
OFT_INTERFACE_VERSION = 1
OFT_MESSAGE_VERSION = 1
OFT_INFO_VERSION = 1

FEE_DETAIL_DESCRIPTION = "OFT fee"

# compose index of the single compose message a transfer produces
COMPOSE_INDEX = 0


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class ConfirmSendResult:
    """Outcome of confirm_send.

    Refunds are None when they were forwarded to a refund address.
    """

    messaging_receipt: MessagingReceipt
    oft_receipt: OFTReceipt
    native_refund: Optional[Coin]
    zro_refund: Optional[Coin]


@dataclass(frozen=True)
class OFTQuote:
    limit: OFTLimit
    fee_details: Tuple[OFTFeeDetail, ...]
    receipt: OFTReceipt


@dataclass(frozen=True)
class _EngineSnapshot:
    paused: bool
    fee_config: FeeConfig
    inbound: Dict[int, RateLimitBucket]
    outbound: Dict[int, RateLimitBucket]
    treasury: TreasurySnapshot
    peers: Dict[int, bytes]
    enforced_options: Dict[Tuple[int, int], bytes]
    delegate: Optional[str]
    pending: Dict[str, PendingSend]
    event_mark: int


# =============================================================================
# ENGINE
# =============================================================================


class TransferEngine:
    """Aggregate root of one bridged token on this chain.

    Build with ``TransferEngine.create``; the returned AdminCap is the only
    credential accepted by the admin operations.
    """

    def __init__(self, config: EngineConfig, channel: MessagingChannel, ledger: TokenLedger,
                 treasury: Treasury, admin_cap_id: str):
        self._config = config
        self._channel = channel
        self._ledger = ledger
        self._treasury = treasury
        self._admin_cap_id = admin_cap_id

        self._normalizer = DecimalNormalizer(config.local_decimals, config.shared_decimals)
        self._fees = FeeEngine(FeeConfig(config.fee_bps, config.fee_deposit_address))
        self._inbound = RateLimiter(Direction.INBOUND)
        self._outbound = RateLimiter(Direction.OUTBOUND)

        self._paused = False
        self._peers: Dict[int, bytes] = {}
        self._enforced_options: Dict[Tuple[int, int], bytes] = {}
        self._delegate: Optional[str] = None
        # sends awaiting confirm_send, by request id
        self._pending: Dict[str, PendingSend] = {}

        self._lock = threading.RLock()
        self.event_log = EventLog(EventContractRegistry() if config.validate_event_contracts else None)

    @classmethod
    def create(cls, config: EngineConfig, channel: MessagingChannel, ledger: TokenLedger,
               treasury_cap: Optional[TreasuryCap] = None) -> Tuple["TransferEngine", AdminCap]:
        """
        Create an instance and its admin credential.

        Args:
            config: Creation parameters
            channel: Messaging channel the instance sends through
            ledger: Account ledger receiving credited and fee tokens
            treasury_cap: Supply privilege, required for MINT_BURN

        Raises:
            InvalidLocalDecimals: If shared_decimals > local_decimals
            TokenMismatch: If the cap belongs to another token
            ValueError: If a MINT_BURN instance gets no cap or an ESCROW one gets a cap
        """
        if config.treasury_kind == TreasuryKind.MINT_BURN:
            if treasury_cap is None:
                raise ValueError("MINT_BURN engine requires a TreasuryCap")
            if treasury_cap.token != config.token:
                raise TokenMismatch(f"cap is for {treasury_cap.token}, engine for {config.token}")
            treasury = Treasury.mint_burn(treasury_cap)
        elif config.treasury_kind == TreasuryKind.ESCROW:
            if treasury_cap is not None:
                raise ValueError("ESCROW engine must not hold a TreasuryCap")
            treasury = Treasury.escrow(config.token)
        else:
            raise AssertionError(f"unhandled treasury kind: {config.treasury_kind}")

        admin_cap = AdminCap()
        engine = cls(config, channel, ledger, treasury, admin_cap.cap_id)
        engine.event_log.emit(OFTCreatedEvent(
            oft_address=config.oft_address,
            token=config.token,
            treasury_kind=config.treasury_kind.value,
            local_decimals=config.local_decimals,
            shared_decimals=config.shared_decimals,
            admin_cap_id=admin_cap.cap_id,
        ))
        logger.info(
            "OFT created: address=%s token=%s kind=%s decimals=%d/%d",
            config.oft_address, config.token, config.treasury_kind.value,
            config.local_decimals, config.shared_decimals,
        )
        return engine, admin_cap

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def _snapshot(self) -> _EngineSnapshot:
        return _EngineSnapshot(
            paused=self._paused,
            fee_config=self._fees.config,
            inbound=self._inbound.snapshot(),
            outbound=self._outbound.snapshot(),
            treasury=self._treasury.snapshot(),
            peers=dict(self._peers),
            enforced_options=dict(self._enforced_options),
            delegate=self._delegate,
            pending=dict(self._pending),
            event_mark=self.event_log.mark(),
        )

    def _restore(self, snap: _EngineSnapshot) -> None:
        self._paused = snap.paused
        self._fees.config = snap.fee_config
        self._inbound.restore(snap.inbound)
        self._outbound.restore(snap.outbound)
        self._treasury.restore(snap.treasury)
        self._peers = snap.peers
        self._enforced_options = snap.enforced_options
        self._delegate = snap.delegate
        self._pending = snap.pending
        self.event_log.truncate(snap.event_mark)

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        with self._lock:
            snap = self._snapshot()
            try:
                yield
            except Exception as e:
                self._restore(snap)
                logger.warning("%s aborted: %s: %s", operation, type(e).__name__, e)
                raise

    # =========================================================================
    # VIEWS
    # =========================================================================

    @property
    def oft_address(self) -> str:
        return self._config.oft_address

    @property
    def token(self) -> str:
        return self._config.token

    def is_paused(self) -> bool:
        return self._paused

    def shared_decimals(self) -> int:
        return self._normalizer.shared_decimals

    def local_decimals(self) -> int:
        return self._normalizer.local_decimals

    def decimal_conversion_rate(self) -> int:
        return self._normalizer.rate

    def fee_bps(self) -> int:
        return self._fees.fee_bps

    def fee_deposit_address(self) -> Optional[str]:
        return self._fees.fee_deposit_address

    def treasury_kind(self) -> TreasuryKind:
        return self._treasury.kind

    def escrow_balance(self) -> int:
        return self._treasury.escrow_balance

    def total_supply(self) -> Optional[int]:
        return self._treasury.total_supply

    def has_peer(self, eid: int) -> bool:
        return self._peers.get(eid, ZERO_BYTES32) != ZERO_BYTES32

    def peer(self, eid: int) -> bytes:
        """
        Raises:
            UnknownPeer: If no peer is set for ``eid``
        """
        if not self.has_peer(eid):
            raise UnknownPeer(f"no peer for eid {eid}")
        return self._peers[eid]

    def delegate(self) -> Optional[str]:
        return self._delegate

    def enforced_options(self, eid: int, msg_type: int) -> bytes:
        return self._enforced_options.get((eid, int(msg_type)), b"")

    def combine_options(self, eid: int, msg_type: int, extra_options: bytes) -> bytes:
        return combine_options(self.enforced_options(eid, msg_type), extra_options)

    def _limiter(self, direction: Direction) -> RateLimiter:
        return self._inbound if direction == Direction.INBOUND else self._outbound

    def rate_limit_config(self, eid: int, direction: Direction) -> Optional[RateLimitConfig]:
        return self._limiter(direction).config(eid)

    def rate_limit_capacity(self, eid: int, direction: Direction, now_ms: int) -> int:
        return self._limiter(direction).available_capacity(eid, now_ms)

    def rate_limit_in_flight(self, eid: int, direction: Direction, now_ms: int) -> int:
        return self._limiter(direction).in_flight(eid, now_ms)

    def oft_version(self) -> Tuple[int, int]:
        return OFT_INTERFACE_VERSION, OFT_MESSAGE_VERSION

    def oft_info(self) -> bytes:
        """version (u16 BE) || instance object id (32) || uleb128-prefixed token symbol"""
        symbol = self._config.token.encode("utf-8")
        return (
            OFT_INFO_VERSION.to_bytes(2, "big")
            + address_to_bytes32(self.oft_address)
            + encode_uleb128(len(symbol)) + symbol
        )

    # =========================================================================
    # AMOUNT COMPUTATION
    # =========================================================================

    def debit_view(self, amount_ld: int, min_amount_ld: int) -> OFTReceipt:
        """
        Amounts a send would debit and deliver.

        sent     = remove_dust(amount_ld)
        received = remove_dust(apply_fee(sent))
        fee      = sent - received (includes the post-fee dust)

        Raises:
            InvalidFeeDepositAddress: If no fee deposit address is set
            SlippageExceeded: If received < min_amount_ld
        """
        amount_sent_ld = self._normalizer.remove_dust(amount_ld)
        amount_received_ld = self._normalizer.remove_dust(self._fees.apply_fee(amount_sent_ld))
        if amount_received_ld < min_amount_ld:
            raise SlippageExceeded(amount_received_ld, min_amount_ld)
        return OFTReceipt(amount_sent_ld=amount_sent_ld, amount_received_ld=amount_received_ld)

    def _build_messaging_params(self, sender: str, send_param: SendParam,
                                amount_received_ld: int, pay_in_zro: bool) -> MessagingParams:
        peer = self.peer(send_param.dst_eid)
        compose_from = address_to_bytes32(sender) if send_param.compose_msg else None
        message = oft_msg_codec.encode(
            send_param.to,
            self._normalizer.to_shared(amount_received_ld),
            compose_from,
            send_param.compose_msg,
        )
        options = self.combine_options(
            send_param.dst_eid, send_param.message_type, send_param.extra_options
        )
        return MessagingParams(
            dst_eid=send_param.dst_eid,
            receiver=peer,
            message=message,
            options=options,
            pay_in_zro=pay_in_zro,
        )

    def _assert_not_paused(self) -> None:
        if self._paused:
            logger.warning("operation rejected: instance %s is paused", self.oft_address)
            raise Paused("instance is paused")

    # =========================================================================
    # OUTBOUND
    # =========================================================================

    def quote_oft(self, send_param: SendParam, now_ms: int) -> OFTQuote:
        """
        Limits, fee lines and receipt of a prospective send. Read-only.

        max_amount_ld is the outbound capacity of the destination pathway
        (U64_MAX when unlimited).
        """
        with self._lock:
            receipt = self.debit_view(send_param.amount_ld, send_param.min_amount_ld)
            max_amount_ld = self._outbound.available_capacity(send_param.dst_eid, now_ms)
            fee_details: List[OFTFeeDetail] = []
            if receipt.fee_ld > 0:
                fee_details.append(OFTFeeDetail(
                    fee_amount_ld=-receipt.fee_ld, description=FEE_DETAIL_DESCRIPTION
                ))
            return OFTQuote(
                limit=OFTLimit(min_amount_ld=0, max_amount_ld=max_amount_ld),
                fee_details=tuple(fee_details),
                receipt=receipt,
            )

    def quote_send(self, sender: str, send_param: SendParam, pay_in_zro: bool = False) -> QuoteRequest:
        """
        Open a transport fee quote for a prospective send.

        Raises:
            Paused, SlippageExceeded, InvalidFeeDepositAddress, UnknownPeer
        """
        with self._lock:
            self._assert_not_paused()
            sender = normalize_address(sender)
            receipt = self.debit_view(send_param.amount_ld, send_param.min_amount_ld)
            params = self._build_messaging_params(
                sender, send_param, receipt.amount_received_ld, pay_in_zro
            )
            return self._channel.quote(self.oft_address, sender, params)

    def confirm_quote_send(self, request: QuoteRequest) -> MessagingFee:
        """Resolve a quote request into a concrete fee. Read-only."""
        if request.oapp != self.oft_address:
            raise MismatchedSendContext("quote request belongs to another instance")
        return self._channel.resolve_quote(request)

    def send(self, sender: str, send_param: SendParam, coin: Coin, native_coin: Coin,
             now_ms: int, zro_coin: Optional[Coin] = None) -> Tuple[SendRequest, PendingSend]:
        """
        Debit ``coin`` and hand the transfer over to the channel.

        Args:
            sender: Address initiating the transfer
            send_param: Transfer parameters
            coin: Sender's token coin; ``amount_sent_ld`` is taken from it
            native_coin: Transport fee funding
            now_ms: Clock reading for rate limiting
            zro_coin: Optional ZRO fee funding

        Returns:
            (request handle for the channel, pending record for confirm_send)

        Raises:
            Paused, SlippageExceeded, InvalidFeeDepositAddress, UnknownPeer,
            TokenMismatch, InsufficientBalance, RateLimitExceeded
        """
        with self._atomic("send"):
            self._assert_not_paused()
            sender = normalize_address(sender)
            receipt = self.debit_view(send_param.amount_ld, send_param.min_amount_ld)
            dst_eid = send_param.dst_eid

            if coin.token != self.token:
                raise TokenMismatch(f"engine handles {self.token}, got {coin.token}")
            if coin.value < receipt.amount_sent_ld:
                raise InsufficientBalance(requested=receipt.amount_sent_ld, available=coin.value)

            params = self._build_messaging_params(sender, send_param, receipt.amount_received_ld,
                                                  pay_in_zro=zro_coin is not None)
            if receipt.fee_ld > 0:
                self._ledger.check_transfer(self.token, self._fees.fee_deposit_address, receipt.fee_ld)

            self._outbound.try_consume(dst_eid, receipt.amount_received_ld, now_ms)
            self._inbound.release(dst_eid, receipt.amount_received_ld, now_ms)
            request = self._channel.send(self.oft_address, sender, params, native_coin, zro_coin)

            # Nothing below can fail
            debited = coin.split(receipt.amount_sent_ld)
            if receipt.fee_ld > 0:
                self._ledger.transfer(debited.split(receipt.fee_ld), self._fees.fee_deposit_address)
            self._treasury.debit(debited)

            logger.info(
                "send: request=%s sender=%s dst_eid=%d sent=%d received=%d",
                request.request_id, sender, dst_eid,
                receipt.amount_sent_ld, receipt.amount_received_ld,
            )
            pending = PendingSend(
                oft_receipt=receipt,
                sender=sender,
                request_id=request.request_id,
                dst_eid=dst_eid,
            )
            self._pending[request.request_id] = replace(pending)
            return request, pending

    def confirm_send(self, sender: str, request: SendRequest, pending: PendingSend,
                     refund_address: Optional[str] = None) -> ConfirmSendResult:
        """
        Complete a send after the channel has processed its request.

        Unspent fee funds go to ``refund_address`` when given, otherwise they
        are returned to the caller.

        The engine's own record of outstanding sends decides whether
        ``pending`` may still be confirmed; copies of a confirmed record are
        rejected like the original.

        Raises:
            PendingSendConsumed: If the send was already confirmed
            MismatchedSendContext: If sender, request or record do not match the send
        """
        with self._atomic("confirm_send"):
            stored = self._pending.get(pending.request_id)
            if stored is None:
                raise PendingSendConsumed(f"no outstanding send {pending.request_id}")
            sender = normalize_address(sender)
            if sender != stored.sender:
                raise MismatchedSendContext("sender does not match the pending send")
            if request.request_id != stored.request_id or request.oapp != self.oft_address:
                raise MismatchedSendContext("request does not match the pending send")
            if pending.oft_receipt != stored.oft_receipt or pending.dst_eid != stored.dst_eid:
                raise MismatchedSendContext("pending record differs from the one issued by send")

            result = self._channel.take_send_result(request)
            native_refund: Optional[Coin] = result.native_refund
            zro_refund: Optional[Coin] = result.zro_refund
            if refund_address is not None:
                refund_address = normalize_address(refund_address)
                self._ledger.check_transfer(native_refund.token, refund_address, native_refund.value)
                if zro_refund is not None:
                    self._ledger.check_transfer(zro_refund.token, refund_address, zro_refund.value)

            receipt = stored.oft_receipt
            self.event_log.emit(OFTSentEvent(
                oft_address=self.oft_address,
                guid=bytes32_to_address(result.receipt.guid),
                dst_eid=stored.dst_eid,
                from_address=sender,
                amount_sent_ld=receipt.amount_sent_ld,
                amount_received_ld=receipt.amount_received_ld,
            ))
            del self._pending[stored.request_id]

            if refund_address is not None:
                self._ledger.transfer(native_refund, refund_address)
                if zro_refund is not None:
                    self._ledger.transfer(zro_refund, refund_address)
                native_refund = zro_refund = None

            pending.consumed = True
            return ConfirmSendResult(
                messaging_receipt=result.receipt,
                oft_receipt=receipt,
                native_refund=native_refund,
                zro_refund=zro_refund,
            )

    # =========================================================================
    # INBOUND
    # =========================================================================

    def _check_packet_origin(self, packet: Packet) -> None:
        if not self.has_peer(packet.src_eid) or packet.sender != self._peers[packet.src_eid]:
            raise UnknownPeer(f"packet sender is not the peer of eid {packet.src_eid}")
        if packet.receiver != address_to_bytes32(self.oft_address):
            raise InvalidMessage("packet is addressed to another instance")

    def _credit_pathway(self, packet: Packet, expect_compose: bool, now_ms: int) -> Tuple[DecodedMessage, int]:
        """Shared receive steps up to (not including) the delivery commit."""
        self._assert_not_paused()
        self._check_packet_origin(packet)
        decoded = oft_msg_codec.decode(packet.message)
        if decoded.is_compose and not expect_compose:
            raise ComposeNotAllowed("compose message delivered to lz_receive")
        if not decoded.is_compose and expect_compose:
            raise ComposeRequired("plain message delivered to lz_receive_with_compose")

        amount_ld = self._normalizer.to_local(decoded.amount_sd)
        self._inbound.try_consume(packet.src_eid, amount_ld, now_ms)
        self._outbound.release(packet.src_eid, amount_ld, now_ms)
        self._treasury.check_credit(amount_ld)
        return decoded, amount_ld

    def _check_native_value(self, native_value: Optional[Coin], initiator: Optional[str]) -> None:
        if native_value is not None and not native_value.is_zero() and initiator is None:
            raise ValueError("initiator is required to return attached native value")

    def _check_ledger_credits(self, credits: List[Tuple[str, str, int]]) -> None:
        """Pre-check (token, recipient, amount) ledger credits, summed per account."""
        totals: Dict[Tuple[str, str], int] = {}
        for token, recipient, amount in credits:
            key = (token, normalize_address(recipient))
            totals[key] = totals.get(key, 0) + amount
        for (token, recipient), amount in totals.items():
            self._ledger.check_transfer(token, recipient, amount)

    def _return_native_value(self, native_value: Optional[Coin], initiator: Optional[str]) -> None:
        if native_value is not None and not native_value.is_zero():
            self._ledger.transfer(native_value, initiator)

    def _received_event(self, packet: Packet, to_address: str, amount_ld: int) -> OFTReceivedEvent:
        return self.event_log.emit(OFTReceivedEvent(
            oft_address=self.oft_address,
            guid=bytes32_to_address(packet.guid),
            src_eid=packet.src_eid,
            to_address=to_address,
            amount_received_ld=amount_ld,
        ))

    def lz_receive(self, packet: Packet, now_ms: int, native_value: Optional[Coin] = None,
                   initiator: Optional[str] = None) -> OFTReceivedEvent:
        """
        Credit a delivered plain transfer to its recipient.

        Native value attached by the executor is handed back to ``initiator``.

        Raises:
            Paused, UnknownPeer, InvalidMessage, ComposeNotAllowed,
            RateLimitExceeded, InsufficientEscrowBalance, AmountOverflow
        """
        with self._atomic("lz_receive"):
            self._check_native_value(native_value, initiator)
            decoded, amount_ld = self._credit_pathway(packet, expect_compose=False, now_ms=now_ms)
            to_address = bytes32_to_address(decoded.send_to)
            credits = [(self.token, to_address, amount_ld)]
            if native_value is not None and not native_value.is_zero():
                credits.append((native_value.token, initiator, native_value.value))
            self._check_ledger_credits(credits)
            event = self._received_event(packet, to_address, amount_ld)

            # Delivery commit; nothing after it can fail
            self._channel.clear(self.oft_address, packet)
            self._ledger.transfer(self._treasury.credit(amount_ld), to_address)
            self._return_native_value(native_value, initiator)

            logger.info(
                "lz_receive: src_eid=%d nonce=%d to=%s amount=%d",
                packet.src_eid, packet.nonce, to_address, amount_ld,
            )
            return event

    def lz_receive_with_compose(self, packet: Packet, compose_queue: ComposeQueue,
                                composer_registry: ComposerRegistry, now_ms: int,
                                native_value: Optional[Coin] = None,
                                initiator: Optional[str] = None) -> OFTReceivedEvent:
        """
        Credit a delivered compose transfer to its composer and enqueue the
        compose envelope on the composer's queue.

        Raises:
            Paused, UnknownPeer, InvalidMessage, ComposeRequired,
            InvalidComposeTarget, RateLimitExceeded, InsufficientEscrowBalance,
            AmountOverflow
        """
        with self._atomic("lz_receive_with_compose"):
            self._check_native_value(native_value, initiator)
            decoded, amount_ld = self._credit_pathway(packet, expect_compose=True, now_ms=now_ms)
            composer = bytes32_to_address(decoded.send_to)
            if composer != normalize_address(compose_queue.composer):
                raise InvalidComposeTarget(
                    f"message targets {composer}, queue belongs to {compose_queue.composer}"
                )
            envelope = compose_msg_codec.encode(
                nonce=packet.nonce,
                src_eid=packet.src_eid,
                amount_ld=amount_ld,
                compose_from=decoded.compose_from,
                compose_msg=decoded.compose_msg,
            )
            if native_value is not None and not native_value.is_zero():
                self._check_ledger_credits([(native_value.token, initiator, native_value.value)])
            event = self._received_event(packet, composer, amount_ld)

            # Delivery commit
            self._channel.clear(self.oft_address, packet)
            self._channel.send_compose(self.oft_address, compose_queue, packet.guid, COMPOSE_INDEX, envelope)
            composer_registry.deposit(packet.guid, composer, self._treasury.credit(amount_ld), envelope)
            self._return_native_value(native_value, initiator)

            logger.info(
                "lz_receive_with_compose: src_eid=%d nonce=%d composer=%s amount=%d",
                packet.src_eid, packet.nonce, composer, amount_ld,
            )
            return event

    # =========================================================================
    # ADMIN
    # =========================================================================

    def set_pause(self, admin: AdminCap, paused: bool) -> None:
        with self._atomic("set_pause"):
            assert_admin(admin, self._admin_cap_id)
            if paused == self._paused:
                raise RedundantConfigValue(f"paused already {paused}")
            self._paused = paused
            self.event_log.emit(PausedSetEvent(oft_address=self.oft_address, paused=paused))

    def set_peer(self, admin: AdminCap, eid: int, peer: bytes) -> None:
        """Set the remote peer of ``eid``; initializes the channel on first use."""
        with self._atomic("set_peer"):
            assert_admin(admin, self._admin_cap_id)
            validate_u32(eid, "eid")
            peer = validate_bytes32(peer)
            if self._peers.get(eid) == peer:
                raise RedundantConfigValue(f"peer for eid {eid} unchanged")
            self._peers[eid] = peer
            if not self._channel.is_channel_inited(self.oft_address, eid):
                self._channel.init_channel(self.oft_address, eid, peer)
            self.event_log.emit(PeerSetEvent(
                oft_address=self.oft_address, eid=eid, peer=bytes32_to_address(peer)
            ))

    def set_delegate(self, admin: AdminCap, delegate: str) -> None:
        with self._atomic("set_delegate"):
            assert_admin(admin, self._admin_cap_id)
            delegate = normalize_address(delegate)
            if delegate == self._delegate:
                raise RedundantConfigValue(f"delegate already {delegate}")
            self._channel.set_delegate(self.oft_address, delegate)
            self._delegate = delegate
            logger.info("delegate set to %s", delegate)

    def set_enforced_options(self, admin: AdminCap, eid: int, msg_type: int, options: bytes) -> None:
        """
        Raises:
            ValueError: If msg_type is not a known MessageType
            InvalidOptions: If options are not type 3
        """
        with self._atomic("set_enforced_options"):
            assert_admin(admin, self._admin_cap_id)
            validate_u32(eid, "eid")
            msg_type = MessageType(msg_type)
            assert_type_3(options)
            key = (eid, int(msg_type))
            if self._enforced_options.get(key) == bytes(options):
                raise RedundantConfigValue(f"enforced options for {key} unchanged")
            self._enforced_options[key] = bytes(options)
            self.event_log.emit(EnforcedOptionSetEvent(
                oft_address=self.oft_address, eid=eid, msg_type=int(msg_type),
                options="0x" + bytes(options).hex(),
            ))

    def set_rate_limit(self, admin: AdminCap, eid: int, direction: Direction, limit: int,
                       window_seconds: int, now_ms: int) -> None:
        """(Re)configure a pathway limit; the bucket restarts at full capacity."""
        with self._atomic("set_rate_limit"):
            assert_admin(admin, self._admin_cap_id)
            direction = Direction(direction)
            limiter = self._limiter(direction)
            if limiter.config(eid) == RateLimitConfig(limit, window_seconds):
                raise RedundantConfigValue(f"{direction.value} rate limit for eid {eid} unchanged")
            limiter.configure(eid, limit, window_seconds, now_ms)
            self.event_log.emit(RateLimitSetEvent(
                oft_address=self.oft_address, eid=eid, direction=direction.value,
                limit=limit, window_seconds=window_seconds,
            ))

    def unset_rate_limit(self, admin: AdminCap, eid: int, direction: Direction) -> None:
        with self._atomic("unset_rate_limit"):
            assert_admin(admin, self._admin_cap_id)
            direction = Direction(direction)
            if not self._limiter(direction).unconfigure(eid):
                raise RedundantConfigValue(f"no {direction.value} rate limit for eid {eid}")
            self.event_log.emit(RateLimitUnsetEvent(
                oft_address=self.oft_address, eid=eid, direction=direction.value,
            ))

    def set_fee_bps(self, admin: AdminCap, fee_bps: int) -> None:
        with self._atomic("set_fee_bps"):
            assert_admin(admin, self._admin_cap_id)
            self._fees.set_fee_bps(fee_bps)
            self.event_log.emit(FeeBpsSetEvent(oft_address=self.oft_address, fee_bps=fee_bps))

    def set_fee_deposit_address(self, admin: AdminCap, address: str) -> None:
        with self._atomic("set_fee_deposit_address"):
            assert_admin(admin, self._admin_cap_id)
            config = self._fees.set_fee_deposit_address(address)
            self.event_log.emit(FeeDepositAddressSetEvent(
                oft_address=self.oft_address, fee_deposit_address=config.fee_deposit_address,
            ))

    def register_oapp(self, admin: AdminCap, lz_receive_info: Optional[bytes] = None) -> bytes:
        """
        Register receive-execution metadata with the channel.

        Defaults to a single terminal ``lz_receive`` call on this instance.

        Returns:
            The registered metadata

        Raises:
            InvalidMessage: If the metadata is malformed or of another version
        """
        with self._atomic("register_oapp"):
            assert_admin(admin, self._admin_cap_id)
            if lz_receive_info is None:
                lz_receive_info = build_lz_receive_info(self._config.package, self.oft_address)
            version, calls = decode_lz_receive_info(lz_receive_info)
            if version != LZ_RECEIVE_INFO_VERSION:
                raise InvalidMessage(f"unsupported lz_receive_info version {version}")
            if not calls or not calls[-1].is_terminal:
                raise InvalidMessage("lz_receive_info must end with a terminal call")
            self._channel.register_oapp(self.oft_address, lz_receive_info)
            logger.info("registered with channel: %d call(s)", len(calls))
            return lz_receive_info
