# File: errors.py
"""
errors.py

Exception types shared across opswatch modules.
Stream errors never escape a StreamSession; they are converted to a
diagnostic line and a terminal state there.
"""


class OpsWatchError(Exception):
    """Base exception for opswatch."""


class ConfigError(OpsWatchError):
    """config.json holds a value that cannot be used."""


class StreamError(OpsWatchError):
    """Base for failures while opening or reading a log stream."""

    def diagnostic(self) -> str:
        return f"--- Error: {self} ---"


class MissingCredential(StreamError):
    """No auth token is available locally; no request is made."""

    def __init__(self, message: str = "No Auth Token Found"):
        super().__init__(message)


class ConnectFailure(StreamError):
    """Non-success HTTP status or unreadable body on stream open."""

    def __init__(self, status_code, reason: str = ""):
        self.status_code = status_code
        self.reason = reason or "Unknown"
        super().__init__(f"{status_code} {self.reason}" if status_code else self.reason)


class TransportFailure(StreamError):
    """I/O failure that was not caused by a deliberate cancel."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


class Cancellation(StreamError):
    """Deliberate abort. Never reported as an error."""
