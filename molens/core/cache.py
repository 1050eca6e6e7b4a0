"""Bounded, thread-safe result cache keyed by a hash of the input text."""

from __future__ import annotations

import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from molens.core.logging_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def normalize_text(text: str) -> str:
    """Unify line endings and drop trailing whitespace per line and at the end."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return "\n".join(line.rstrip() for line in lines).rstrip("\n")


def text_key(text: str, namespace: str = "sdf") -> str:
    """Cache key for ``text``: ``<namespace>:<sha256 of normalized text>``."""
    digest = hashlib.sha256(normalize_text(text).encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}"


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0


class ResultCache(Generic[T]):
    """LRU mapping with an optional time-to-live.

    ``max_entries`` bounds the size; the least recently used entry is evicted
    first. Entries older than ``ttl_seconds`` are treated as absent. Two threads
    missing on the same key may both compute the value; the later ``put`` wins.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: OrderedDict[str, tuple[float, T]] = OrderedDict()
        self._lock = threading.Lock()
        self.stats = CacheStats()

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                self.stats.misses += 1
                return None
            stored_at, value = entry
            if self.ttl_seconds is not None and self._clock() - stored_at > self.ttl_seconds:
                del self._data[key]
                self.stats.expirations += 1
                self.stats.misses += 1
                return None
            self._data.move_to_end(key)
            self.stats.hits += 1
            return value

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._data[key] = (self._clock(), value)
            self._data.move_to_end(key)
            while len(self._data) > self.max_entries:
                self._data.popitem(last=False)
                self.stats.evictions += 1

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """Return the cached value for ``key`` or compute, store and return it."""
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit %s", key[:24])
            return cached
        logger.debug("Cache miss %s", key[:24])
        value = compute()
        self.put(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return (
            f"<ResultCache size={len(self)} max={self.max_entries} "
            f"ttl={self.ttl_seconds} hits={self.stats.hits} misses={self.stats.misses}>"
        )
