"""Messaging — channel/composer interfaces, request tokens, receive metadata."""

from .channel import (
    ComposeQueue,
    ComposerRegistry,
    MessagingChannel,
    PendingSend,
    QuoteRequest,
    SendRequest,
    SendResult,
)
from .receive_info import (
    LZ_RECEIVE_INFO_VERSION,
    ArgumentKind,
    CallArgument,
    CallDescriptor,
    build_lz_receive_info,
    build_lz_receive_with_compose_info,
    decode_lz_receive_info,
    encode_lz_receive_info,
)

__all__ = [
    "ComposeQueue",
    "ComposerRegistry",
    "MessagingChannel",
    "PendingSend",
    "QuoteRequest",
    "SendRequest",
    "SendResult",
    "LZ_RECEIVE_INFO_VERSION",
    "ArgumentKind",
    "CallArgument",
    "CallDescriptor",
    "build_lz_receive_info",
    "build_lz_receive_with_compose_info",
    "decode_lz_receive_info",
    "encode_lz_receive_info",
]
