class RateLimitException(Exception):
    """Raised when the source site rate limits us (HTTP 429)."""

    def __init__(self, message: str, retry_after: int = None):
        super().__init__(message)
        self.retry_after = retry_after


class TransportError(Exception):
    """Raised when a page could not be fetched after all retries."""

    def __init__(self, message: str, url: str = None):
        super().__init__(message)
        self.url = url


class StoreError(Exception):
    """Base class for key-value store failures."""

    def __init__(self, message: str, table: str = None):
        super().__init__(message)
        self.table = table


class StoreReadError(StoreError):
    """A scan or get against the store failed."""


class StoreWriteError(StoreError):
    """A put or batch write against the store failed."""
