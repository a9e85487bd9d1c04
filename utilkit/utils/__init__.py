"""
Cache, task pool and async helpers.

Modules
-------
cache
    Fixed-capacity LRU cache with recency-ordered enumeration
pool
    Bounded-concurrency task pool with FIFO queueing
retry
    Retry with exponential backoff and a transient-error predicate
promise
    Awaitable delay and exception-capturing wrapper
"""

__all__ = []
