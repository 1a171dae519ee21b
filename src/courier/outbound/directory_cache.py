"""TTL cache for channel directory snapshots (users/groups per channel+account).

Entries expire ``ttl_seconds`` after they were *fetched*, not after last
access.  The cache is wiped whenever it sees a different config object
than the previous call, so one long-lived instance never serves listings
that belong to a config that has since been reloaded or swapped out.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Literal, TypeAlias, TypeVar

from courier.types import DirectoryEntryKind

DIRECTORY_CACHE_TTL_MS = 30 * 60 * 1000

T = TypeVar("T")

CacheSource: TypeAlias = Literal["cache", "live"]


def build_directory_cache_key(
    channel: str,
    account_id: str | None,
    kind: DirectoryEntryKind,
    source: CacheSource,
) -> str:
    """``<channel>:<account-or-"default">:<kind>:<source>``.

    A missing and an empty account id both map to ``default``.
    """
    return f"{channel}:{account_id or 'default'}:{kind}:{source}"


@dataclass
class _CacheEntry(Generic[T]):
    value: T
    fetched_at: float


class DirectoryCache(Generic[T]):
    """Thread-safe TTL map with config-identity invalidation."""

    def __init__(
        self,
        ttl_seconds: float = DIRECTORY_CACHE_TTL_MS / 1000,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._data: dict[str, _CacheEntry[T]] = {}
        self._last_config: object | None = None
        self._lock = threading.Lock()

    def get(self, key: str, config: object) -> T | None:
        with self._lock:
            self._reset_if_config_changed(config)
            entry = self._data.get(key)
            if entry is None:
                return None
            if self._clock() - entry.fetched_at > self._ttl:
                del self._data[key]
                return None
            return entry.value

    def set(self, key: str, value: T, config: object) -> None:
        with self._lock:
            self._reset_if_config_changed(config)
            self._data[key] = _CacheEntry(value=value, fetched_at=self._clock())

    def clear_matching(self, match: Callable[[str], bool]) -> None:
        with self._lock:
            for key in [k for k in self._data if match(k)]:
                del self._data[key]

    def clear(self, config: object | None = None) -> None:
        with self._lock:
            self._data.clear()
            if config is not None:
                self._last_config = config

    def __len__(self) -> int:
        return len(self._data)

    def _reset_if_config_changed(self, config: object) -> None:
        if self._last_config is not None and self._last_config is not config:
            self._data.clear()
        self._last_config = config
