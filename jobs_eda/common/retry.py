"""Retry policy for geocoding lookups.

Lookups run one row at a time, so a failed request is retried in place with
exponentially growing pauses before the location is given up on for the
current run. A ``RetryPolicy`` decides which failures are worth another
attempt (exception types and HTTP status codes) and how long to wait;
``call_with_retries`` applies it to a single lookup and logs every attempt
against the lookup's context (typically the location query).
"""

import logging
import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Rate limiting and server-side failures
DEFAULT_RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """
    When and how often a failed lookup is attempted again.

    Attributes:
        max_retries: Attempts after the first one (0 disables retries)
        initial_delay: Pause in seconds before the first retry
        backoff_factor: Multiplier applied to the pause after each retry
        retry_on: Exception types that mark a failure as transient
        retry_statuses: HTTP status codes that mark a response as transient

    With initial_delay=1.0 and backoff_factor=2.0 the pauses are 1, 2, 4, ...
    """

    max_retries: int = 2
    initial_delay: float = 1.0
    backoff_factor: float = 2.0
    retry_on: tuple[type[BaseException], ...] = (ConnectionError, TimeoutError)
    retry_statuses: frozenset[int] = DEFAULT_RETRY_STATUSES

    def delays(self) -> Iterator[float]:
        """Pauses before each retry, in order."""
        for attempt in range(max(self.max_retries, 0)):
            yield self.initial_delay * (self.backoff_factor ** attempt)

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on)

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retry_statuses


def call_with_retries(
    func: Callable[..., T],
    *args: Any,
    policy: RetryPolicy,
    context: Optional[Mapping[str, Any]] = None,
    **kwargs: Any,
) -> T:
    """
    Call ``func`` until it succeeds, fails permanently, or retries run out.

    Args:
        func: The lookup to perform
        *args: Positional arguments for ``func``
        policy: Retry policy deciding which failures are transient
        context: Fields added to every log record (e.g. the geocode query)
        **kwargs: Keyword arguments for ``func``

    Returns:
        Whatever ``func`` returns

    Raises:
        The first non-retryable exception, or the last retryable one once
        ``policy.max_retries`` retries have been spent
    """
    fields = dict(context or {})
    delays = policy.delays()
    attempt = 0

    while True:
        attempt += 1
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not policy.is_retryable(e):
                raise

            delay = next(delays, None)
            if delay is None:
                logger.error(
                    "Lookup failed after %d attempts: %s",
                    attempt,
                    e,
                    extra={**fields, "attempts": attempt, "exception_type": type(e).__name__},
                )
                raise

            logger.warning(
                "Lookup attempt %d/%d failed (%s); retrying in %.1f seconds",
                attempt,
                policy.max_retries + 1,
                e,
                delay,
                extra={
                    **fields,
                    "retry_attempt": attempt,
                    "delay_seconds": delay,
                    "exception_type": type(e).__name__,
                },
            )
            time.sleep(delay)
