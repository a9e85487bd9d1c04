"""
utilkit Python package.

Small in-process utilities: a bounded LRU cache, a bounded-concurrency
task pool, and async helpers for retrying, waiting and capturing failures.
"""

from .__version__ import __version__
from .errors import InvalidArgumentError
from .utils.cache import LRUCache
from .utils.pool import TaskPool

__all__ = ["__version__", "InvalidArgumentError", "LRUCache", "TaskPool"]
