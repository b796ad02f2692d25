"""
Recency-bounded cache for in-memory tree nodes
"""
import logging
from collections import OrderedDict
from typing import Generic, Hashable, Iterator, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """Keeps at most `capacity` entries, evicting the least recently used one"""

    def __init__(self, capacity: int = 8):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: "OrderedDict[K, V]" = OrderedDict()

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """
        Look up an entry and mark it most recently used

        Args:
            key: Entry key
            default: Returned on a miss

        Returns:
            The cached value, or default
        """
        if key not in self._entries:
            return default
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: K, value: V) -> V:
        """
        Insert or replace an entry, evicting one entry if over capacity

        Args:
            key: Entry key
            value: Value to cache

        Returns:
            The cached value
        """
        self._entries[key] = value
        self._entries.move_to_end(key)
        if len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted {evicted!r} from cache")
        return value

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> Iterator[K]:
        """Keys from least to most recently used"""
        return iter(list(self._entries))

    def __getitem__(self, key: K) -> V:
        self._entries.move_to_end(key)
        return self._entries[key]

    def __setitem__(self, key: K, value: V) -> None:
        self.set(key, value)

    def __contains__(self, key: K) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
