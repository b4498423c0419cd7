"""Bounded in-memory cache with per-entry TTL and LRU eviction.

Design:
    - Entries live in an arena (a list of slots). ``prev`` / ``next`` are slot
      indices, so the recency list is a doubly-linked list without object
      cycles. A dict maps key -> slot; freed slots are recycled.
    - Head is the most recently used entry, tail the least recently used one.
    - An entry whose expiry has passed is logically absent: ``get`` drops it,
      ``set`` replaces it with a brand-new entry instead of refreshing it.
    - One lock guards every public method. All operations are O(1) except the
      diagnostics, which walk the list.

Note: each uvicorn worker owns its own cache instance; there is no
cross-process coherency.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar

logger = logging.getLogger("fxquote.cache")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_NIL = -1


@dataclass
class _Entry(Generic[K, V]):
    key: K
    value: V
    expires_at: float
    prev: int = _NIL
    next: int = _NIL


class ExpiringLRUCache(Generic[K, V]):
    def __init__(
        self,
        capacity: int,
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
    ):
        if capacity < 1:
            raise ValueError("cache capacity must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("cache ttl must be positive seconds")
        self._capacity = capacity
        self._ttl = ttl_seconds
        self._clock = clock
        self._slots: List[Optional[_Entry[K, V]]] = []
        self._free: List[int] = []
        self._index: Dict[K, int] = {}
        self._head = _NIL
        self._tail = _NIL
        self._lock = threading.Lock()

    # Public API -----------------------------------------------
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def size(self) -> int:
        with self._lock:
            return len(self._index)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            slot = self._index.get(key)  # type: ignore[arg-type]
            return slot is not None and not self._expired(self._entry(slot), self._clock())

    def get(self, key: K) -> Optional[V]:
        with self._lock:
            slot = self._index.get(key)
            if slot is None:
                return None
            entry = self._entry(slot)
            if self._expired(entry, self._clock()):
                self._remove(slot)
                return None
            self._move_to_head(slot)
            return entry.value

    def set(self, key: K, value: V) -> None:
        with self._lock:
            now = self._clock()
            slot = self._index.get(key)
            if slot is not None:
                entry = self._entry(slot)
                if not self._expired(entry, now):
                    entry.value = value
                    entry.expires_at = now + self._ttl
                    self._move_to_head(slot)
                    return
                self._remove(slot)
            if len(self._index) >= self._capacity:
                logger.debug("cache evict", extra={"pair": self._entry(self._tail).key})
                self._remove(self._tail)
            self._insert_head(key, value, now + self._ttl)

    # Diagnostics (never reorder) ------------------------------
    def most_recent_key(self) -> Optional[K]:
        with self._lock:
            return None if self._head == _NIL else self._entry(self._head).key

    def least_recent_key(self) -> Optional[K]:
        with self._lock:
            return None if self._tail == _NIL else self._entry(self._tail).key

    def ordered_keys(self) -> List[K]:
        """Keys from most to least recently used."""
        with self._lock:
            return [e.key for e in self._walk()]

    def keys_with_expirations(self) -> List[Dict[str, Any]]:
        with self._lock:
            now = self._clock()
            out = []
            for e in self._walk():
                ms_left = max(0.0, (e.expires_at - now) * 1000)
                out.append(
                    {
                        "key": e.key,
                        "is_expired": ms_left == 0,
                        "ms_until_expiration": math.ceil(ms_left),
                    }
                )
            return out

    def expiry_timestamps(self) -> List[float]:
        """Absolute expiry times (clock units), most to least recently used."""
        with self._lock:
            return [e.expires_at for e in self._walk()]

    def keys(self) -> List[K]:
        """Keys in index insertion order (not recency order)."""
        with self._lock:
            return list(self._index)

    def entries(self) -> List[Tuple[K, V]]:
        with self._lock:
            return [(k, self._entry(s).value) for k, s in self._index.items()]

    # Internal --------------------------------------------------
    def _entry(self, slot: int) -> _Entry[K, V]:
        entry = self._slots[slot]
        assert entry is not None
        return entry

    @staticmethod
    def _expired(entry: _Entry[K, V], now: float) -> bool:
        return now >= entry.expires_at

    def _walk(self) -> Iterator[_Entry[K, V]]:
        slot = self._head
        while slot != _NIL:
            entry = self._entry(slot)
            yield entry
            slot = entry.next

    def _unlink(self, slot: int) -> None:
        entry = self._entry(slot)
        if entry.prev != _NIL:
            self._entry(entry.prev).next = entry.next
        else:
            self._head = entry.next
        if entry.next != _NIL:
            self._entry(entry.next).prev = entry.prev
        else:
            self._tail = entry.prev
        entry.prev = entry.next = _NIL

    def _link_head(self, slot: int) -> None:
        entry = self._entry(slot)
        entry.prev = _NIL
        entry.next = self._head
        if self._head != _NIL:
            self._entry(self._head).prev = slot
        self._head = slot
        if self._tail == _NIL:
            self._tail = slot

    def _move_to_head(self, slot: int) -> None:
        if slot == self._head:
            return
        self._unlink(slot)
        self._link_head(slot)

    def _insert_head(self, key: K, value: V, expires_at: float) -> None:
        entry = _Entry(key=key, value=value, expires_at=expires_at)
        if self._free:
            slot = self._free.pop()
            self._slots[slot] = entry
        else:
            slot = len(self._slots)
            self._slots.append(entry)
        self._index[key] = slot
        self._link_head(slot)

    def _remove(self, slot: int) -> None:
        entry = self._entry(slot)
        self._unlink(slot)
        del self._index[entry.key]
        self._slots[slot] = None
        self._free.append(slot)
