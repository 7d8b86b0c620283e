"""
Trade History API Exception Hierarchy

Specific exception types for history API failures so callers can tell
transport problems, throttling and malformed payloads apart. The client never
retries; retry policy belongs to the caller.
"""


class HistoryApiError(Exception):
    """Base exception for all trade history API errors."""

    def __init__(
        self, message: str, status_code: int | None = None, url: str | None = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class BadRequestError(HistoryApiError):
    """400 - Bad league name or parameters."""

    pass


class NotFoundError(HistoryApiError):
    """404 - League unknown or no history available."""

    pass


class RateLimitError(HistoryApiError):
    """429 - Too many requests."""

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(HistoryApiError):
    """500+ - Server-side error."""

    pass


class UnexpectedPayloadError(HistoryApiError):
    """Response body is not ``{"result": [...]}``."""

    pass
