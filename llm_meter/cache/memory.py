"""
In-process cache backends.

``MemoryCache`` never evicts and suits short-lived processes and tests.
``BoundedMemoryCache`` combines LRU eviction with an optional TTL and is
the safer choice for long-lived processes.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from .base import BaseCache

logger = logging.getLogger(__name__)


class MemoryCache(BaseCache):
    """Unbounded in-memory cache. No eviction, no TTL."""

    def __init__(self):
        self._store: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._store.get(key)

    def set(self, key: str, value: Any) -> None:
        self._store[key] = value

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class _Node:
    """Entry in the recency list."""
    __slots__ = ("key", "value", "expires_at_ms", "prev", "next")

    def __init__(self, key: Optional[str], value: Any = None, expires_at_ms: Optional[float] = None):
        self.key = key
        self.value = value
        self.expires_at_ms = expires_at_ms
        self.prev: "_Node" = self
        self.next: "_Node" = self


class BoundedMemoryCache(BaseCache):
    """In-memory cache with LRU eviction and optional TTL.

    Entries live in a circular doubly-linked list behind a sentinel node,
    indexed by key. The node after the sentinel is least recently used and
    the node before it most recently used, so both promotion and eviction
    are O(1). Recency reflects the latest successful ``get`` or ``set``.
    """

    def __init__(
        self,
        max_entries: int,
        ttl_ms: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Create a bounded cache.

        Args:
            max_entries: Maximum number of keys kept (coerced to at least 1)
            ttl_ms: Optional time-to-live per entry, in milliseconds
            clock: Returns the current time in seconds
        """
        if ttl_ms is not None and ttl_ms < 0:
            raise ValueError("ttl_ms cannot be negative")
        self.max_entries = max(1, int(max_entries))
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._index: Dict[str, _Node] = {}
        self._head = _Node(None)

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _unlink(self, node: _Node) -> None:
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = node.next = node

    def _append(self, node: _Node) -> None:
        tail = self._head.prev
        tail.next = node
        node.prev = tail
        node.next = self._head
        self._head.prev = node

    def _remove(self, node: _Node) -> None:
        self._unlink(node)
        del self._index[node.key]

    def get(self, key: str) -> Optional[Any]:
        node = self._index.get(key)
        if node is None:
            return None

        if node.expires_at_ms is not None and self._now_ms() > node.expires_at_ms:
            self._remove(node)
            return None

        self._unlink(node)
        self._append(node)
        return node.value

    def set(self, key: str, value: Any) -> None:
        expires_at_ms = self._now_ms() + self.ttl_ms if self.ttl_ms is not None else None

        existing = self._index.get(key)
        if existing is not None:
            self._remove(existing)

        node = _Node(key, value, expires_at_ms)
        self._index[key] = node
        self._append(node)

        while len(self._index) > self.max_entries:
            oldest = self._head.next
            logger.debug("Evicting least recently used cache key %s", oldest.key)
            self._remove(oldest)

    def clear(self) -> None:
        for node in list(self._index.values()):
            self._unlink(node)
        self._index.clear()

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key: object) -> bool:
        """Presence check that does not touch recency or expire entries."""
        return key in self._index

    def keys(self):
        """Keys from least to most recently used."""
        node = self._head.next
        while node is not self._head:
            yield node.key
            node = node.next
