from pikaid.codec import (
    LENGTH,
    MAX_SECONDS,
    ParsedIdentifier,
    encode,
    generate,
    is_valid,
    parse,
    timestamp_of,
)
from pikaid.engine import (
    LongDivisionConverter,
    NativeConverter,
    NumericCapabilities,
    get_converter,
    reset_backend,
)
from core.errors import InvalidFormat, MissingNumericBackend, TimestampOutOfRange

__all__ = [
    "LENGTH",
    "MAX_SECONDS",
    "ParsedIdentifier",
    "encode",
    "generate",
    "is_valid",
    "parse",
    "timestamp_of",
    "LongDivisionConverter",
    "NativeConverter",
    "NumericCapabilities",
    "get_converter",
    "reset_backend",
    "InvalidFormat",
    "MissingNumericBackend",
    "TimestampOutOfRange",
]
