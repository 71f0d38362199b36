# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Process-local TTL cache.

Entries expire lazily on read and are also removed by :meth:`sweep`, which a
daemon thread can run periodically. When the cache is full the oldest inserted
entry is evicted (FIFO, not LRU). Each process has its own cache, so values may
be stale across workers for up to their TTL.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import Lock
from typing import Generic, TypeVar

from medcourier.shared.logging import logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


@dataclass(slots=True)
class CacheEntry(Generic[V]):  # noqa: UP046
    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryTTLCache(Generic[K, V]):  # noqa: UP046
    def __init__(
        self,
        ttl_seconds: float = 60.0,
        max_size: int = 1000,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_size = max(1, max_size)
        self._clock = clock
        self._lock = Lock()
        self._store: dict[K, CacheEntry[V]] = {}
        self._sweeper: threading.Thread | None = None
        self._stop = threading.Event()

    def get(self, key: K, default: V | None = None) -> V | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return default
            if entry.is_expired(self._clock()):
                del self._store[key]
                return default
            return entry.value

    def set(self, key: K, value: V, ttl_seconds: float | None = None) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._store.pop(key, None)
            if len(self._store) >= self._max_size:
                oldest = next(iter(self._store))
                del self._store[oldest]
                logger.debug(f"cache: evicted key={oldest}")
            self._store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def get_or_set(
        self, key: K, factory: Callable[[], V], ttl_seconds: float | None = None
    ) -> V:
        cached = self.get(key, _MISSING)  # type: ignore[arg-type]
        if cached is not _MISSING:
            logger.debug(f"cache: hit key={key}")
            return cached  # type: ignore[return-value]

        logger.debug(f"cache: miss key={key}")
        value = factory()
        self.set(key, value, ttl_seconds)
        return value

    def delete(self, key: K) -> None:
        with self._lock:
            self._store.pop(key, None)

    def delete_prefix(self, prefix: str) -> None:
        with self._lock:
            for key in [k for k in self._store if isinstance(k, str) and k.startswith(prefix)]:
                del self._store[key]

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._store.items() if entry.is_expired(now)]
            for key in expired:
                del self._store[key]
        if expired:
            logger.debug(f"cache: swept {len(expired)} expired keys")
        return len(expired)

    def start_sweeper(self, interval_seconds: float) -> None:
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop.clear()

        def _run() -> None:
            while not self._stop.wait(interval_seconds):
                self.sweep()

        self._sweeper = threading.Thread(target=_run, name="cache-sweeper", daemon=True)
        self._sweeper.start()

    def stop_sweeper(self) -> None:
        self._stop.set()
        self._sweeper = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


__all__ = ["CacheEntry", "InMemoryTTLCache"]
