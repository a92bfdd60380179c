"""Core service for sequential batch lookups.

Items are processed strictly in input order, one at a time. A rate limiter
spaces requests by a fixed delay to respect third-party usage policies.
After an item exhausts every provider with a rate-limit response, the batch
sleeps with exponential backoff before the next item. Any other outcome,
invalid input included, resets it.
A failing item is recorded and never stops the batch.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from freelookup.domain.errors import AllProvidersFailed, InvalidQueryError
from freelookup.domain.events.api_events import BatchBackoffScheduled, DomainEvent
from freelookup.domain.models.common import BackoffPolicy
from freelookup.domain.models.results import BatchItemOutcome, RotationResult
from freelookup.infrastructure.resilience.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_BACKOFF: BackoffPolicy = {"initial_delay": 2.0, "factor": 2.0, "max_delay": 60.0}

ItemOperation = Callable[[Any], Awaitable[RotationResult]]
ProgressCallback = Callable[[int, int, BatchItemOutcome], None]


class BatchService:
    """Runs one lookup operation over many inputs, sequentially."""

    def __init__(
        self,
        delay_s: float = 1.0,
        backoff: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        event_handler: Optional[Callable[[DomainEvent], None]] = None,
    ):
        """Initializes the BatchService.

        Args:
            delay_s: Minimum spacing between consecutive requests.
            backoff: Outer backoff after rate-limited exhaustion.
            sleep: Awaitable sleep used for spacing and backoff (tests pass a fake).
            clock: Monotonic clock for request spacing.
            event_handler: Receives BatchBackoffScheduled events.
        """
        if delay_s < 0:
            raise ValueError("delay_s must not be negative")
        self.delay_s = delay_s
        self.backoff: BackoffPolicy = backoff or DEFAULT_BACKOFF
        self.sleep = sleep
        self.clock = clock
        self.event_handler = event_handler

    def next_backoff(self, consecutive_rate_limits: int) -> float:
        """Delay after the n-th consecutive rate-limited item (n >= 1)."""
        if consecutive_rate_limits < 1:
            return 0.0
        delay = self.backoff["initial_delay"] * self.backoff["factor"] ** (consecutive_rate_limits - 1)
        return min(delay, self.backoff["max_delay"])

    async def run(
        self,
        items: Sequence[Any],
        operation: ItemOperation,
        operation_name: str = "batch",
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[BatchItemOutcome]:
        """Applies `operation` to every item in order.

        Args:
            items: Inputs, processed in this order.
            operation: Coroutine function performing one lookup per item.
            operation_name: Label for logs and events.
            on_progress: Called after each item with (index, total, outcome).

        Returns:
            One BatchItemOutcome per item, in input order.
        """
        limiter = RateLimiter.fixed_interval(self.delay_s, clock=self.clock, sleep=self.sleep)
        outcomes: List[BatchItemOutcome] = []
        consecutive_rate_limits = 0
        total = len(items)

        for index, item in enumerate(items):
            await limiter.wait_for_permission()
            try:
                result = await operation(item)
                outcome = BatchItemOutcome(item=item, result=result)
                consecutive_rate_limits = 0
            except InvalidQueryError as e:
                # Rejected before any request; no provider was involved.
                logger.warning(f"{operation_name}[{index}]: invalid input {item!r}: {e}")
                outcome = BatchItemOutcome(item=item, error=e)
                consecutive_rate_limits = 0
            except AllProvidersFailed as e:
                logger.warning(f"{operation_name}[{index}]: {e}")
                outcome = BatchItemOutcome(item=item, error=e)
                if e.rate_limited:
                    consecutive_rate_limits += 1
                else:
                    consecutive_rate_limits = 0

            outcomes.append(outcome)
            if on_progress is not None:
                on_progress(index, total, outcome)

            if consecutive_rate_limits and index < total - 1:
                delay = self.next_backoff(consecutive_rate_limits)
                logger.info(f"{operation_name}: rate limited, backing off {delay:.1f}s before item {index + 1}")
                if self.event_handler is not None:
                    self.event_handler(BatchBackoffScheduled(
                        operation=operation_name, item_index=index + 1, delay_seconds=delay
                    ))
                await self.sleep(delay)

        failed = sum(1 for o in outcomes if not o.ok)
        logger.info(f"{operation_name}: {total - failed}/{total} item(s) succeeded")
        return outcomes
