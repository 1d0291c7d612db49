"""Identifier errors with context for tracking."""

from utils.timestamp import format_timestamp


class PikaidError(Exception):
    """Base error with context and the time it was raised."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.timestamp = format_timestamp()
        self.context = context or {}
        self.cause = cause


class InvalidFormat(PikaidError, ValueError):
    """Candidate string is not a syntactically valid identifier."""

    def __init__(self, message="Invalid pikaid format", candidate=None, **kwargs):
        context = kwargs.pop("context", {})
        if candidate is not None:
            context["candidate"] = candidate
        super().__init__(message, context=context, **kwargs)


class TimestampOutOfRange(PikaidError, ValueError):
    """Seconds value does not fit the 7-character timestamp segment."""

    def __init__(self, message, seconds=None, **kwargs):
        context = kwargs.pop("context", {})
        if seconds is not None:
            context["seconds"] = seconds
        super().__init__(message, context=context, **kwargs)


class MissingNumericBackend(PikaidError, RuntimeError):
    """No configured numeric backend is usable in this process."""

    def __init__(self, message, backends=None, **kwargs):
        context = kwargs.pop("context", {})
        if backends is not None:
            context["backends"] = list(backends)
        super().__init__(message, context=context, **kwargs)
