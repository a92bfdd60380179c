"""Error taxonomy for provider lookups.

Adapters raise `ProviderError` subclasses; the rotator records them and moves
on to the next provider. Only `AllProvidersFailed` and `InvalidQueryError`
reach callers of the lookup service.
"""

from typing import List, Optional, Sequence

from freelookup.domain.models.results import AttemptRecord


class ProviderError(Exception):
    """Base class for a single provider's failure."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class ProviderHTTPError(ProviderError):
    """Provider answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str = "", provider: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"HTTP {status_code}", provider=provider)


class ProviderRateLimitedError(ProviderHTTPError):
    """Provider answered HTTP 429."""

    def __init__(self, message: str = "", provider: Optional[str] = None, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(429, message or "HTTP 429 Too Many Requests", provider=provider)


class ProviderResponseError(ProviderError):
    """Body did not match the expected schema, or carried a soft error marker."""


class EmptyResultError(ProviderError):
    """Body was valid but contained no usable result."""


class ProviderTimeoutError(ProviderError):
    """Attempt exceeded the per-attempt timeout."""


class InvalidQueryError(ValueError):
    """Query rejected before any network I/O."""


class SkillFormatError(ValueError):
    """A skill document is missing or has malformed front matter."""


class AllProvidersFailed(Exception):
    """Raised when every provider in a rotation failed."""

    def __init__(
        self,
        operation: str,
        tried: Sequence[str],
        last_error: Optional[BaseException],
        attempts: Optional[List[AttemptRecord]] = None,
    ):
        self.operation = operation
        self.tried = list(tried)
        self.last_error = last_error
        self.attempts = list(attempts or [])
        last = f"{type(last_error).__name__}: {last_error}" if last_error else "none"
        super().__init__(
            f"All {len(self.tried)} providers failed for '{operation}' "
            f"(tried: {', '.join(self.tried)}). Last error: {last}"
        )

    @property
    def rate_limited(self) -> bool:
        """True when the final failure was an HTTP 429."""
        return isinstance(self.last_error, ProviderRateLimitedError)
