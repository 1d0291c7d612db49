"""
pikaid - compact, sortable unique identifier.

Format: 7 base36 chars of Unix seconds + 19 base36 chars of 96 random bits
= 26 lowercase chars, no separators.
"""

import re
import secrets
from collections import namedtuple
from datetime import timedelta

from core.errors import InvalidFormat, TimestampOutOfRange
from pikaid.engine import ALPHABET, BASE, BLOCK_SIZE, get_converter
from utils.timestamp import UNIX_EPOCH, from_unix_seconds, now_seconds

LENGTH = 26
TS_LENGTH = 7
RAND_LENGTH = LENGTH - TS_LENGTH
MAX_SECONDS = BASE ** TS_LENGTH - 1

_PATTERN = re.compile(r"[0-9a-z]{%d}" % LENGTH)


class ParsedIdentifier(namedtuple("ParsedIdentifier", ["timestamp", "randomness"])):
    """Decoded identifier: UTC datetime and 24-char lowercase hex."""

    __slots__ = ()

    @property
    def seconds(self):
        return (self.timestamp - UNIX_EPOCH) // timedelta(seconds=1)

    def to_dict(self):
        return {
            "timestamp": self.timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "seconds": self.seconds,
            "randomness": self.randomness,
        }


def _encode_seconds(seconds):
    if not 0 <= seconds <= MAX_SECONDS:
        raise TimestampOutOfRange(
            f"{seconds} does not fit in {TS_LENGTH} base36 characters", seconds=seconds
        )
    chars = []
    while seconds > 0:
        seconds, remainder = divmod(seconds, BASE)
        chars.append(ALPHABET[remainder])
    return "".join(reversed(chars)).rjust(TS_LENGTH, "0")


def encode(seconds, randomness, converter=None):
    """Build an identifier from explicit seconds and a 12-byte block."""
    if len(randomness) != BLOCK_SIZE:
        raise ValueError(f"randomness must be {BLOCK_SIZE} bytes, got {len(randomness)}")
    converter = converter or get_converter()
    ts36 = _encode_seconds(seconds)
    rand36 = converter.bytes_to_digits(randomness).rjust(RAND_LENGTH, "0")
    return ts36 + rand36


def generate(converter=None):
    """Generate a new 26-character identifier."""
    return encode(now_seconds(), secrets.token_bytes(BLOCK_SIZE), converter)


def is_valid(candidate):
    """True when candidate is 26 lowercase base36 characters."""
    return (isinstance(candidate, str)
            and len(candidate) == LENGTH
            and _PATTERN.fullmatch(candidate) is not None)


def parse(candidate, converter=None):
    """Decode an identifier into timestamp and randomness.

    Raises InvalidFormat when is_valid(candidate) is false. Timestamps are
    not range-checked beyond the syntax. A randomness segment above
    2**96 - 1 keeps only its low-order 12 bytes, so such identifiers can
    decode to the same randomness as a different one.
    """
    if not is_valid(candidate):
        raise InvalidFormat(candidate=candidate)

    converter = converter or get_converter()
    seconds = int(candidate[:TS_LENGTH], BASE)
    block = converter.digits_to_bytes(candidate[TS_LENGTH:])
    return ParsedIdentifier(from_unix_seconds(seconds), block.hex())


def timestamp_of(candidate):
    """Only the UTC timestamp of an identifier."""
    if not is_valid(candidate):
        raise InvalidFormat(candidate=candidate)
    return from_unix_seconds(int(candidate[:TS_LENGTH], BASE))
