"""
Bounded-concurrency task pool for asyncio.

Limits the number of jobs running at once and queues the excess in
submission order. Queued jobs are started only when a running job settles,
so start order among queued jobs always matches submission order.
"""

import asyncio
import inspect
import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Deque, Dict, Optional, Set, Tuple

from utilkit.errors import validate_positive_int

if TYPE_CHECKING:  # pragma: no cover
    from utilkit.config.models import EnvSettings

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _Job:
    """A submitted callable together with the future its caller awaits."""

    func: Callable[..., Any]
    args: Tuple[Any, ...]
    kwargs: Dict[str, Any]
    future: asyncio.Future
    seq: int = 0


class TaskPool:
    """
    Async task pool with a fixed concurrency ceiling.

    Jobs submitted while a slot is free start immediately. Otherwise they wait
    in a FIFO queue; every time a running job settles (success or failure)
    its slot is released and the oldest queued jobs are started until the
    ceiling is reached again.

    A job's result or exception is delivered unchanged to the future returned
    for that submission only. Failures never affect other jobs or the pool's
    bookkeeping.

    Examples
    --------
    >>> pool = TaskPool(max_concurrency=2)
    >>> results = await asyncio.gather(*(pool.execute(fetch, url) for url in urls))
    """

    def __init__(self, max_concurrency: int):
        """
        Initialize task pool.

        Parameters
        ----------
        max_concurrency : int
            Maximum number of jobs running at the same time

        Raises
        ------
        InvalidArgumentError
            If `max_concurrency` is not a positive integer
        """
        self._max_concurrency = validate_positive_int(
            max_concurrency, "max_concurrency"
        )
        self._running = 0
        self._queue: Deque[_Job] = deque()
        self._tasks: Set[asyncio.Task] = set()
        self._seq = 0
        self._draining = False

    @classmethod
    def from_settings(cls, settings: "EnvSettings") -> "TaskPool":
        """Build a pool limited by ``settings.default_max_concurrency``."""
        return cls(settings.default_max_concurrency)

    @property
    def running_count(self) -> int:
        """Number of jobs currently running."""
        return self._running

    @property
    def queued_count(self) -> int:
        """Number of jobs waiting for a slot."""
        return len(self._queue)

    @property
    def max_concurrency(self) -> int:
        """Concurrency ceiling fixed at construction."""
        return self._max_concurrency

    @property
    def is_at_capacity(self) -> bool:
        """True when every slot is taken."""
        return self._running == self._max_concurrency

    def submit(self, func: Callable[..., Any], *args, **kwargs) -> asyncio.Future:
        """
        Admit `func` and return a future for its outcome.

        Must be called from a running event loop. If a slot is free,
        ``func(*args, **kwargs)`` is invoked before this method returns;
        otherwise the job is queued behind earlier submissions.

        Parameters
        ----------
        func : callable
            Coroutine function or plain callable to run
        *args, **kwargs
            Arguments to pass to function

        Returns
        -------
        asyncio.Future
            Settles with the return value or exception of `func`
        """
        loop = asyncio.get_running_loop()
        self._seq += 1
        job = _Job(func, args, kwargs, loop.create_future(), self._seq)

        if self._running < self._max_concurrency:
            self._start(job)
        else:
            self._queue.append(job)
            job.future.add_done_callback(lambda _f, j=job: self._withdraw(j))
            logger.debug(
                "task_pool.queued",
                extra={
                    "job": job.seq,
                    "running": self._running,
                    "queued": len(self._queue),
                },
            )
        return job.future

    async def execute(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run `func` within the pool's concurrency limit.

        Parameters
        ----------
        func : callable
            Coroutine function or plain callable to run
        *args, **kwargs
            Arguments to pass to function

        Returns
        -------
        Any
            Result from function

        Raises
        ------
        Exception
            Any exception raised by the function
        """
        return await self.submit(func, *args, **kwargs)

    def _start(self, job: _Job) -> None:
        self._running += 1
        logger.debug(
            "task_pool.started",
            extra={"job": job.seq, "running": self._running},
        )
        error: Optional[Exception] = None
        try:
            outcome = job.func(*job.args, **job.kwargs)
        except Exception as exc:
            outcome, error = None, exc
        else:
            if inspect.isawaitable(outcome):
                task = asyncio.ensure_future(self._run(job, outcome))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
                return

        try:
            self._settle(job, result=outcome, exc=error)
        finally:
            self._release()

    async def _run(self, job: _Job, awaitable) -> None:
        try:
            result = await awaitable
        except asyncio.CancelledError:
            if not job.future.done():
                job.future.cancel()
            raise
        except Exception as exc:
            self._settle(job, exc=exc)
        else:
            self._settle(job, result=result)
        finally:
            self._release()

    def _settle(
        self, job: _Job, result: Any = None, exc: Optional[Exception] = None
    ) -> None:
        # The caller may have cancelled its future; the job still ran.
        if job.future.done():
            return
        if exc is not None:
            logger.debug(
                "task_pool.failed",
                extra={"job": job.seq, "error": exc},
            )
            if isinstance(exc, StopIteration):
                # Futures refuse StopIteration; wrap it like coroutines do.
                wrapped = RuntimeError(f"job raised StopIteration: {exc!r}")
                wrapped.__cause__ = exc
                exc = wrapped
            job.future.set_exception(exc)
        else:
            job.future.set_result(result)

    def _release(self) -> None:
        self._running -= 1
        self._drain()

    def _drain(self) -> None:
        # Jobs that settle synchronously release their slot from inside this
        # loop; the outer loop picks the slot up.
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue and self._running < self._max_concurrency:
                job = self._queue.popleft()
                if job.future.cancelled():
                    continue
                self._start(job)
        finally:
            self._draining = False

    def _withdraw(self, job: _Job) -> None:
        """Drop a queued job whose caller cancelled before it started."""
        if job.future.cancelled():
            try:
                self._queue.remove(job)
            except ValueError:
                pass
            else:
                logger.debug("task_pool.withdrawn", extra={"job": job.seq})
