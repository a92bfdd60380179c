"""Service for executing lookups against interchangeable providers.

Tries each provider of an ordered list exactly once, in order, under a
per-attempt timeout. The first provider returning a non-empty normalized
result wins; if all of them fail, `AllProvidersFailed` reports which
providers were tried and the last error seen. There is no delay between
attempts and no state survives a call.
"""

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Sequence

import httpx

from freelookup.domain.errors import (
    AllProvidersFailed,
    EmptyResultError,
    ProviderError,
    ProviderTimeoutError,
)
from freelookup.domain.events.api_events import (
    AllProvidersExhausted,
    DomainEvent,
    ProviderAttemptFailed,
    ProviderAttemptStarted,
    ProviderAttemptSucceeded,
)
from freelookup.domain.interfaces.provider import ProviderAdapter
from freelookup.domain.models.results import AttemptRecord, RotationResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0

EventHandler = Callable[[DomainEvent], None]
ClientFactory = Callable[[], httpx.AsyncClient]


def is_empty_result(value: Any) -> bool:
    """None and empty containers/strings never count as a successful lookup."""
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set, str)):
        return len(value) == 0
    return False


def rotate(providers: Sequence[ProviderAdapter], start_index: int) -> List[ProviderAdapter]:
    """Returns providers starting at `start_index` (mod len), wrapping around."""
    if not providers:
        return []
    start = start_index % len(providers)
    return list(providers[start:]) + list(providers[:start])


class ProviderRotator:
    """Runs one lookup across an ordered list of providers."""

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: Optional[str] = None,
        client_factory: Optional[ClientFactory] = None,
        event_handler: Optional[EventHandler] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initializes the ProviderRotator.

        Args:
            timeout_s: Default per-attempt timeout in seconds.
            user_agent: User-Agent header for the HTTP client it creates.
            client_factory: Builds the httpx.AsyncClient used when the caller
                does not pass one. Tests substitute a MockTransport client.
            event_handler: Receives rotation events; events are logged at
                DEBUG when no handler is given.
            clock: Monotonic clock used to measure attempt latency.
        """
        if timeout_s <= 0:
            raise ValueError("timeout_s must be positive")
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.client_factory = client_factory or self._default_client
        self.event_handler = event_handler
        self.clock = clock
        logger.debug(f"ProviderRotator initialized: timeout={timeout_s}s")

    def _default_client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return httpx.AsyncClient(headers=headers, timeout=self.timeout_s, follow_redirects=True)

    def _dispatch(self, event: DomainEvent) -> None:
        if self.event_handler is not None:
            self.event_handler(event)
        else:
            logger.debug(f"EVENT: {event}")

    async def execute(
        self,
        operation: str,
        query: Any,
        providers: Sequence[ProviderAdapter],
        timeout_s: Optional[float] = None,
        start_index: int = 0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> RotationResult:
        """Returns the first successful normalized result among `providers`.

        Args:
            operation: Operation label for logs and errors (e.g. 'search').
            query: Immutable payload passed unchanged to every provider.
            providers: Non-empty ordered list of interchangeable providers.
            timeout_s: Per-attempt timeout; defaults to the rotator's.
            start_index: Position to start from, wrapping around the list.
            client: Optional shared HTTP client; one is created and closed
                for this call otherwise.

        Returns:
            RotationResult with the winning value, provider name and the
            record of every attempt made.

        Raises:
            ValueError: If `providers` is empty or the timeout is not positive.
            AllProvidersFailed: If every provider failed.
        """
        if not providers:
            raise ValueError(f"No providers configured for '{operation}'")
        timeout = self.timeout_s if timeout_s is None else timeout_s
        if timeout <= 0:
            raise ValueError("timeout_s must be positive")

        ordered = rotate(providers, start_index)
        if client is not None:
            return await self._run(operation, query, ordered, timeout, client)
        async with self.client_factory() as own_client:
            return await self._run(operation, query, ordered, timeout, own_client)

    async def _run(
        self,
        operation: str,
        query: Any,
        providers: List[ProviderAdapter],
        timeout: float,
        client: httpx.AsyncClient,
    ) -> RotationResult:
        attempts: List[AttemptRecord] = []
        last_exception: Optional[Exception] = None

        for position, provider in enumerate(providers, start=1):
            name = provider.name
            self._dispatch(ProviderAttemptStarted(operation=operation, provider=name, position=position))
            start = self.clock()
            try:
                value = await asyncio.wait_for(provider.fetch(client, query), timeout=timeout)
                elapsed = self.clock() - start
                # Late answers count as timeouts; elapsed == timeout is on time.
                if elapsed > timeout:
                    raise ProviderTimeoutError(
                        f"Response after {elapsed:.3f}s exceeded timeout of {timeout}s", provider=name
                    )
                if is_empty_result(value):
                    raise EmptyResultError("Provider returned an empty result", provider=name)
            except asyncio.TimeoutError:
                elapsed = self.clock() - start
                last_exception = ProviderTimeoutError(f"No response within {timeout}s", provider=name)
                logger.warning(f"{operation}: {name} timed out after {timeout}s (attempt {position}/{len(providers)})")
            except (ProviderError, httpx.HTTPError) as e:
                elapsed = self.clock() - start
                last_exception = e
                logger.warning(
                    f"{operation}: {name} failed (attempt {position}/{len(providers)}): {type(e).__name__}: {e}"
                )
            except Exception as e:
                # Adapter bugs (KeyError, TypeError, ...) still only cost this provider.
                elapsed = self.clock() - start
                last_exception = e
                logger.error(
                    f"{operation}: unexpected error from {name} (attempt {position}/{len(providers)}): {e}",
                    exc_info=True,
                )
            else:
                latency_ms = elapsed * 1000
                attempts.append(AttemptRecord(provider=name, ok=True, elapsed_s=elapsed))
                self._dispatch(ProviderAttemptSucceeded(
                    operation=operation, provider=name, position=position, latency_ms=latency_ms
                ))
                logger.info(f"{operation}: {name} succeeded in {latency_ms:.0f}ms (attempt {position})")
                return RotationResult(value=value, provider=name, attempts=attempts)

            attempts.append(AttemptRecord(
                provider=name,
                ok=False,
                elapsed_s=elapsed,
                error_type=type(last_exception).__name__,
                error_message=str(last_exception),
            ))
            self._dispatch(ProviderAttemptFailed(
                operation=operation,
                provider=name,
                position=position,
                error_type=type(last_exception).__name__,
                error_message=str(last_exception),
                latency_ms=elapsed * 1000,
            ))

        tried = [a.provider for a in attempts]
        logger.error(f"{operation}: all {len(tried)} providers failed. Last error: {last_exception}")
        self._dispatch(AllProvidersExhausted(
            operation=operation,
            tried=tried,
            last_error_type=type(last_exception).__name__ if last_exception else None,
        ))
        raise AllProvidersFailed(operation, tried, last_exception, attempts)
