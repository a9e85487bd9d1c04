"""
Retry with exponential backoff for async callables.

Failures can be filtered with a predicate; :func:`is_transient_error` treats
timeouts, connection failures, server errors (5xx) and rate limits (429) as
worth retrying and everything else as final.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

import httpx

from utilkit.errors import InvalidArgumentError, validate_positive_int
from utilkit.utils.promise import wait

if TYPE_CHECKING:  # pragma: no cover
    from utilkit.config.models import EnvSettings

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    attempts: int = 3  # Total attempts, including the first one
    delay_seconds: float = 1.0  # Wait before the first retry
    backoff_factor: float = 2.0  # Delay multiplier per retry

    def __post_init__(self):
        validate_positive_int(self.attempts, "attempts")
        if self.delay_seconds < 0:
            raise InvalidArgumentError(
                f"delay_seconds must be >= 0, got {self.delay_seconds}"
            )
        if self.backoff_factor < 1:
            raise InvalidArgumentError(
                f"backoff_factor must be >= 1, got {self.backoff_factor}"
            )

    @classmethod
    def from_settings(cls, settings: "EnvSettings") -> "RetryConfig":
        """Build a config from environment-driven settings."""
        return cls(
            attempts=settings.retry_attempts,
            delay_seconds=settings.retry_delay_seconds,
            backoff_factor=settings.retry_backoff_factor,
        )


def is_transient_error(exc: BaseException) -> bool:
    """
    Determine if an exception is likely to succeed on retry.

    Only server errors (5xx), rate limits (429), timeouts and connection
    failures count. Client errors (4xx) are final.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500 or exc.response.status_code == 429
    if isinstance(exc, (httpx.TimeoutException, httpx.ConnectError)):
        return True
    if isinstance(exc, asyncio.TimeoutError):
        return True
    return False


async def retry(
    func: Callable[..., Any],
    *args,
    config: Optional[RetryConfig] = None,
    retry_if: Optional[Callable[[Exception], bool]] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
    **kwargs,
):
    """
    Call `func` until it succeeds or attempts run out.

    Parameters
    ----------
    func : callable
        Async function to call (plain callables are also accepted)
    *args, **kwargs
        Arguments to pass to function
    config : RetryConfig, optional
        Attempts and backoff, uses defaults if None
    retry_if : callable, optional
        Predicate deciding whether an exception is retried; retries all
        exceptions if None
    on_retry : callable, optional
        Called as ``on_retry(exc, attempt)`` before sleeping, where `attempt`
        is the number of the attempt that just failed (1-based)

    Returns
    -------
    Any
        Result from function

    Raises
    ------
    Exception
        The last exception raised by the function, or the first one that
        `retry_if` rejects
    """
    config = config or RetryConfig()
    delay = config.delay_seconds

    for attempt in range(1, config.attempts + 1):
        try:
            outcome = func(*args, **kwargs)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            return outcome
        except Exception as exc:
            if attempt >= config.attempts or (retry_if and not retry_if(exc)):
                raise
            logger.info(
                "retry.attempt_failed",
                extra={
                    "attempt": attempt,
                    "max_attempts": config.attempts,
                    "delay_seconds": delay,
                    "error": str(exc),
                },
            )
            if on_retry is not None:
                on_retry(exc, attempt)
            await wait(delay)
            delay *= config.backoff_factor

    # attempts >= 1 guarantees the loop returns or raises
    raise AssertionError("unreachable")  # pragma: no cover
