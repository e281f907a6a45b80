"""
Wire codecs: the OFT transfer payload, the compose envelope and executor options.
"""

from oft_engine.core.codec import compose_msg_codec, oft_msg_codec
from oft_engine.core.codec.compose_msg_codec import ComposeEnvelope
from oft_engine.core.codec.oft_msg_codec import DecodedMessage
from oft_engine.core.codec.options import OPTIONS_TYPE_3, assert_type_3, combine_options

__all__ = [
    "compose_msg_codec",
    "oft_msg_codec",
    "ComposeEnvelope",
    "DecodedMessage",
    "OPTIONS_TYPE_3",
    "assert_type_3",
    "combine_options",
]
