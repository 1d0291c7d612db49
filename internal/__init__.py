from utils.timestamp import now_seconds, format_timestamp
from internal.logging import LogLevel, StructuredLogger, get_logger

__all__ = [
    "now_seconds",
    "format_timestamp",
    "LogLevel",
    "StructuredLogger",
    "get_logger",
]
