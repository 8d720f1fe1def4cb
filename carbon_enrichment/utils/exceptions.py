"""Exception hierarchy for the enrichment client.

- Base exception for every error raised by the client
- Non-retryable client errors (4xx)
- Retryable transient errors (network, 5xx, timeouts)
- Retry exhaustion wrapper

All exceptions inherit from EnrichmentError so a caller can catch every
client-side failure in a single except block when needed.

Degraded reference data is NOT an exception: fallback tables are returned
as successful values with ``used_fallback=True``.
"""

from typing import Optional


class EnrichmentError(Exception):
    """Base exception for all enrichment client errors

    ```python
    try:
        lookup = await client.fetch_material("steel_rebar_12mm")
    except EnrichmentError as e:
        logger.error("lookup_failed", error=str(e))
    ```
    """

    pass


class ClientError(EnrichmentError):
    """Upstream rejected the request (4xx)

    Raised when:
    - Request is malformed (400)
    - Credentials are missing or invalid (401/403)
    - Resource does not exist (404)

    Never retried: repeating the same request cannot succeed.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class InvalidResponseError(EnrichmentError):
    """Upstream answered 2xx but the payload is unusable

    Raised when:
    - Body is not JSON
    - Required fields are missing or out of range

    Not retried: the registry will keep serving the same record.
    """

    pass


class TransientError(EnrichmentError):
    """Base for retryable failures (network errors, 5xx, timeouts)."""

    pass


class ServerError(TransientError):
    """Upstream returned a 5xx status."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class RequestTimeoutError(TransientError):
    """A single attempt exceeded the configured timeout."""

    pass


class ExhaustedRetriesError(EnrichmentError):
    """Every attempt failed with a transient error.

    Wraps the last underlying error and reports how many attempts were made.
    """

    def __init__(self, attempts: int, last_error: Optional[BaseException]) -> None:
        detail = f"{type(last_error).__name__}: {last_error}" if last_error else "unknown"
        super().__init__(f"Request failed after {attempts} attempts: {detail}")
        self.attempts = attempts
        self.last_error = last_error


class ConfigValidationError(EnrichmentError):
    """Configuration validation failed"""

    pass
