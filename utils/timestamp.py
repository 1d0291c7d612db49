"""Clock and UTC timestamp utilities."""

import time
from datetime import datetime, timedelta, timezone

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_seconds():
    """Current time in whole seconds since Unix epoch."""
    return int(time.time())


def from_unix_seconds(seconds):
    """UTC datetime for a Unix second count.

    Built from a timedelta so values past the platform's time_t range
    still resolve.
    """
    return UNIX_EPOCH + timedelta(seconds=seconds)


def format_timestamp(dt=None):
    """Format timestamp as ISO 8601 with microseconds."""
    if dt is None:
        dt = datetime.now(timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f") + "Z"
