"""Fixed-capacity LRU cache.

Entries are kept in an ordered mapping from least- to most-recently used.
Reads through :meth:`LRUCache.get` and writes through :meth:`LRUCache.put`
move a key to the most-recent end; membership checks and enumeration do not.
When a new key is inserted into a full cache, the least-recently-used entry
is discarded.

Keys follow ``dict`` semantics: they must be hashable, and objects without a
custom ``__eq__`` are distinct keys even when structurally equal.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Hashable
from typing import (
    TYPE_CHECKING,
    Callable,
    Generic,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from utilkit.errors import validate_positive_int

if TYPE_CHECKING:  # pragma: no cover
    from utilkit.config.models import EnvSettings

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
D = TypeVar("D")


class LRUCache(Generic[K, V]):
    """Least-recently-used cache with a fixed capacity.

    Parameters
    ----------
    capacity: int
        Maximum number of entries to retain. Must be a positive integer.
        When the cache is full, inserting a new key discards the
        least-recently-used entry.

    Raises
    ------
    InvalidArgumentError
        If `capacity` is not a positive integer.

    Examples
    --------
    >>> cache = LRUCache(3)
    >>> cache.put("a", 1)
    >>> cache.put("b", 2)
    >>> cache.put("c", 3)
    >>> cache.get("a")
    1
    >>> cache.put("d", 4)
    >>> list(cache.keys())
    ['c', 'a', 'd']
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = validate_positive_int(capacity, "capacity")
        self._entries: "OrderedDict[K, V]" = OrderedDict()

    @classmethod
    def from_settings(cls, settings: "EnvSettings") -> "LRUCache[K, V]":
        """Build a cache sized by ``settings.default_cache_capacity``."""
        return cls(settings.default_cache_capacity)

    def get(self, key: K, default: Optional[D] = None) -> Union[V, D, None]:
        """Return value for `key` and mark it most-recently used.

        A miss returns `default` and leaves the cache untouched.
        """
        if key not in self._entries:
            return default
        self._entries.move_to_end(key)
        return self._entries[key]

    def put(self, key: K, value: V) -> None:
        """Insert or update `key` with `value` and mark it most-recently used."""
        if key in self._entries:
            self._entries[key] = value
            self._entries.move_to_end(key)
            return

        evicted = None
        if len(self._entries) >= self._capacity:
            evicted = self._entries.popitem(last=False)
        self._entries[key] = value

        if evicted is not None:
            # Pass the key itself; formatting is left to the handler.
            logger.debug(
                "lru_cache.evicted",
                extra={"evicted_key": evicted[0], "capacity": self._capacity},
            )

    def has(self, key: K) -> bool:
        """Return True if `key` is cached. Does not affect recency."""
        return key in self._entries

    def delete(self, key: K) -> bool:
        """Remove `key`; return whether it was present."""
        if key not in self._entries:
            return False
        del self._entries[key]
        return True

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    @property
    def size(self) -> int:
        """Current number of entries."""
        return len(self._entries)

    @property
    def capacity(self) -> int:
        """Maximum number of entries, fixed at construction."""
        return self._capacity

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def is_full(self) -> bool:
        return len(self._entries) == self._capacity

    # Enumeration works on a snapshot so callers may mutate while iterating.

    def keys(self) -> Iterator[K]:
        """Iterate keys from least- to most-recently used."""
        return iter(list(self._entries.keys()))

    def values(self) -> Iterator[V]:
        """Iterate values from least- to most-recently used."""
        return iter(list(self._entries.values()))

    def items(self) -> Iterator[Tuple[K, V]]:
        """Iterate ``(key, value)`` pairs from least- to most-recently used."""
        return iter(list(self._entries.items()))

    def for_each(self, callback: Callable[[V, K, "LRUCache[K, V]"], None]) -> None:
        """Call ``callback(value, key, cache)`` for each entry in LRU order."""
        for key, value in self.items():
            callback(value, key, self)

    def to_list(self) -> List[Tuple[K, V]]:
        """Return entries as a list of pairs in LRU order."""
        return list(self._entries.items())

    def __iter__(self) -> Iterator[Tuple[K, V]]:
        return self.items()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self._capacity}, "
            f"size={len(self._entries)})"
        )
