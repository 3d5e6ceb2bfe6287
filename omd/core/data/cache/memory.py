"""线程安全的内存结果缓存实现."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from threading import Lock
from typing import Any

from omd.core.data.cache.key import CATEGORY_TTL_MS, make_cache_key
from omd.core.data.clock import Clock, monotonic_ms
from omd.core.logging import logger
from omd.core.models.enums import DataCategory

MAX_ENTRIES = 500


@dataclass(slots=True)
class CacheEntry:
    data: Any
    expires_at: float


class ResultCache:
    """按 (provider, category, args) 缓存提供商结果.

    过期在读取时惰性处理；写入超过 ``max_entries`` 时先清除过期条目，
    仍然超出则按 ``expires_at`` 升序淘汰最早过期的条目。
    """

    def __init__(
        self,
        max_entries: int = MAX_ENTRIES,
        ttl_ms: Mapping[DataCategory, int] | None = None,
        clock: Clock = monotonic_ms,
    ):
        self.max_entries = max_entries
        self.ttl_ms = dict(CATEGORY_TTL_MS if ttl_ms is None else ttl_ms)
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._lock = Lock()

    def get(self, provider: str, category: DataCategory, args: Mapping[str, Any]) -> Any | None:
        """从缓存获取数据，过期条目会被删除."""
        key = make_cache_key(provider, category, args)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._store[key]
                return None
            return entry.data

    def set(self, provider: str, category: DataCategory, args: Mapping[str, Any], data: Any) -> None:
        """写入缓存并在需要时淘汰条目."""
        key = make_cache_key(provider, category, args)
        ttl = self.ttl_ms[DataCategory(category)]
        with self._lock:
            self._store[key] = CacheEntry(data=data, expires_at=self._clock() + ttl)
            self._evict_if_needed()

    def _evict_if_needed(self) -> None:
        if len(self._store) <= self.max_entries:
            return

        now = self._clock()
        expired = [key for key, entry in self._store.items() if entry.expires_at <= now]
        for key in expired:
            del self._store[key]
        if len(self._store) <= self.max_entries:
            return

        surplus = len(self._store) - self.max_entries
        by_expiry = sorted(self._store.items(), key=lambda item: item[1].expires_at)
        for key, _ in by_expiry[:surplus]:
            del self._store[key]
        logger.debug("Evicted {} expired and {} live cache entries", len(expired), surplus)

    def clear(self) -> None:
        """清空缓存."""
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        """获取当前缓存大小."""
        with self._lock:
            return len(self._store)

    def __len__(self) -> int:
        return self.size()
