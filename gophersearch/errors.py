"""
Error taxonomy for the Gopher search client.

TransportError covers anything that is not a semantic answer from the
service (connection failures, timeouts, bodies we cannot read). ServiceError
means the service understood the request and rejected it with a message.
"""

from typing import Optional


class GopherError(Exception):
    """Base class for every failure raised by the client."""
    pass


class ConfigError(GopherError, ValueError):
    """Raised when required configuration is missing or invalid."""
    pass


class TransportError(GopherError):
    """Failure to communicate with the service."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ServiceError(GopherError):
    """The service rejected the request with an explicit message."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(f"API error: {message}")
        self.message = message
        self.code = code
        self.status_code = status_code


class PollTimeout(GopherError):
    """Attempt budget (or deadline) ran out while the job was still pending."""

    def __init__(self, attempts: int):
        super().__init__(
            f"timeout waiting for search results after {attempts} attempts"
        )
        self.attempts = attempts


class PollCancelled(GopherError):
    """Polling was stopped by the caller."""

    def __init__(self, attempts: int):
        super().__init__(f"search cancelled after {attempts} attempts")
        self.attempts = attempts
