"""
Executor options — enforced per-pathway options combined with caller options

Only type-3 options are accepted: a 2-byte big-endian type tag ``0x0003``
followed by a sequence of option records. Combining enforced and extra
options appends the extra records (tag stripped) to the enforced ones.
"""

from typing import Final

from oft_engine.core.errors import InvalidOptions


OPTIONS_TYPE_3: Final[int] = 3
OPTIONS_TYPE_LENGTH: Final[int] = 2


def options_type(options: bytes) -> int:
    if len(options) < OPTIONS_TYPE_LENGTH:
        raise InvalidOptions(f"options too short: {len(options)} bytes")
    return int.from_bytes(options[:OPTIONS_TYPE_LENGTH], "big")


def assert_type_3(options: bytes) -> None:
    """
    Raises:
        InvalidOptions: If options do not carry the type-3 tag
    """
    found = options_type(options)
    if found != OPTIONS_TYPE_3:
        raise InvalidOptions(f"expected options type {OPTIONS_TYPE_3}, got {found}")


def combine_options(enforced: bytes, extra: bytes) -> bytes:
    """
    Merge enforced options with caller-supplied extra options.

    - no enforced options: extra is used as is
    - no extra options: enforced is used as is
    - both: extra must be type 3, its records are appended to enforced
    """
    if not enforced:
        return bytes(extra)
    if not extra:
        return bytes(enforced)
    assert_type_3(extra)
    return bytes(enforced) + bytes(extra[OPTIONS_TYPE_LENGTH:])
