"""缓存系统实现模块."""

from omd.core.data.cache.key import CATEGORY_TTL_MS, make_cache_key
from omd.core.data.cache.memory import MAX_ENTRIES, CacheEntry, ResultCache

__all__ = [
    "CATEGORY_TTL_MS",
    "MAX_ENTRIES",
    "CacheEntry",
    "ResultCache",
    "make_cache_key",
]
