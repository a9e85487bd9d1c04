"""
Small awaitable helpers.

`wait` is an awaitable delay, `safe_async` runs a callable and reports its
outcome as a :class:`SafeResult` instead of raising.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from utilkit.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SafeResult(Generic[T]):
    """
    Outcome of a call made through :func:`safe_async`.

    Attributes
    ----------
    success : bool
        True if the call returned normally
    data : T or None
        Return value on success, None on failure
    error : Exception or None
        Raised exception on failure, None on success
    """

    success: bool
    data: Optional[T] = None
    error: Optional[Exception] = None


async def wait(seconds: float) -> None:
    """
    Sleep for `seconds`.

    Raises
    ------
    InvalidArgumentError
        If `seconds` is negative
    """
    if seconds < 0:
        raise InvalidArgumentError(f"seconds must be >= 0, got {seconds}")
    await asyncio.sleep(seconds)


async def safe_async(func: Callable[..., Any], *args, **kwargs) -> SafeResult:
    """
    Call `func` and capture its result or exception.

    Coroutine functions are awaited; plain callables are called directly.
    Cancellation is propagated, not captured.

    Parameters
    ----------
    func : callable
        Function to call
    *args, **kwargs
        Arguments to pass to function

    Returns
    -------
    SafeResult
        ``SafeResult(True, data, None)`` or ``SafeResult(False, None, exc)``

    Examples
    --------
    >>> result = await safe_async(fetch_user, user_id)
    >>> if not result.success:
    ...     logger.warning("fetch failed: %s", result.error)
    """
    try:
        outcome = func(*args, **kwargs)
        if inspect.isawaitable(outcome):
            outcome = await outcome
    except Exception as exc:
        logger.debug("safe_async.captured", extra={"error": repr(exc)})
        return SafeResult(success=False, data=None, error=exc)
    return SafeResult(success=True, data=outcome, error=None)
