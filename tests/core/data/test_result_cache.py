"""测试内存结果缓存."""

import pytest

from omd.core.data.cache import CATEGORY_TTL_MS, ResultCache, make_cache_key
from omd.core.models import DataCategory


@pytest.fixture
def cache(clock):
    return ResultCache(clock=clock)


class TestCacheKey:
    """测试缓存键生成."""

    def test_key_is_order_independent(self):
        """测试参数顺序不影响缓存键."""
        first = make_cache_key("yahoo", DataCategory.QUOTE, {"symbol": "AAPL", "action": "get"})
        second = make_cache_key("yahoo", DataCategory.QUOTE, {"action": "get", "symbol": "AAPL"})
        assert first == second

    def test_key_includes_provider_and_category(self):
        assert make_cache_key("yahoo", DataCategory.QUOTE, {}) != make_cache_key("fmp", DataCategory.QUOTE, {})
        assert make_cache_key("yahoo", "quote", {}) != make_cache_key("yahoo", "search", {})

    def test_key_distinguishes_value_types(self):
        """测试数字和字符串参数生成不同的键."""
        assert make_cache_key("p", "quote", {"limit": 5}) != make_cache_key("p", "quote", {"limit": "5"})

    def test_key_format(self):
        key = make_cache_key("yahoo", DataCategory.QUOTE, {"symbol": "AAPL", "action": "get"})
        assert key == 'yahoo:quote:action="get"&symbol="AAPL"'


class TestResultCache:
    """测试缓存读写、过期与淘汰."""

    def test_get_missing_returns_none(self, cache):
        assert cache.get("yahoo", DataCategory.QUOTE, {"symbol": "AAPL"}) is None

    def test_set_and_get_with_reordered_args(self, cache):
        """测试参数顺序不同也能命中."""
        cache.set("yahoo", DataCategory.QUOTE, {"symbol": "AAPL", "action": "get"}, {"price": 1})
        assert cache.get("yahoo", DataCategory.QUOTE, {"action": "get", "symbol": "AAPL"}) == {"price": 1}

    def test_quote_ttl(self, cache, clock):
        """测试行情类别30秒过期."""
        cache.set("yahoo", DataCategory.QUOTE, {"symbol": "AAPL"}, {"price": 1})

        clock.advance(29_000)
        assert cache.get("yahoo", DataCategory.QUOTE, {"symbol": "AAPL"}) == {"price": 1}

        clock.advance(1_001)
        assert cache.get("yahoo", DataCategory.QUOTE, {"symbol": "AAPL"}) is None
        assert cache.size() == 0

    def test_expired_entry_is_removed_lazily(self, cache, clock):
        """测试过期条目只在读取时删除."""
        cache.set("p", DataCategory.CRYPTO, {"symbol": "BTC"}, 1)
        clock.advance(CATEGORY_TTL_MS[DataCategory.CRYPTO])
        assert cache.size() == 1
        assert cache.get("p", DataCategory.CRYPTO, {"symbol": "BTC"}) is None
        assert cache.size() == 0

    def test_every_category_has_ttl(self):
        assert set(CATEGORY_TTL_MS) == set(DataCategory)

    def test_eviction_keeps_max_entries(self, cache, clock):
        """测试写入第501个条目后淘汰最早过期的条目."""
        for i in range(501):
            clock.advance(1)
            cache.set("p", DataCategory.MACRO, {"i": i}, i)

        assert cache.size() == 500
        assert cache.get("p", DataCategory.MACRO, {"i": 0}) is None
        assert cache.get("p", DataCategory.MACRO, {"i": 500}) == 500

    def test_eviction_drops_expired_entries_first(self, clock):
        """测试淘汰时优先清理过期条目."""
        cache = ResultCache(max_entries=2, clock=clock)
        cache.set("p", DataCategory.CRYPTO, {"i": 0}, 0)
        cache.set("p", DataCategory.MACRO, {"i": 1}, 1)
        clock.advance(20_000)
        cache.set("p", DataCategory.MACRO, {"i": 2}, 2)

        assert cache.size() == 2
        assert cache.get("p", DataCategory.MACRO, {"i": 1}) == 1
        assert cache.get("p", DataCategory.MACRO, {"i": 2}) == 2

    def test_eviction_by_expiry_not_insertion(self, clock):
        """测试淘汰按过期时间而不是插入顺序."""
        cache = ResultCache(max_entries=2, clock=clock)
        cache.set("p", DataCategory.MACRO, {"i": 0}, 0)
        cache.set("p", DataCategory.QUOTE, {"i": 1}, 1)
        cache.set("p", DataCategory.MACRO, {"i": 2}, 2)

        assert cache.get("p", DataCategory.QUOTE, {"i": 1}) is None
        assert cache.get("p", DataCategory.MACRO, {"i": 0}) == 0

    def test_overwrite_same_key(self, cache):
        cache.set("p", DataCategory.QUOTE, {"s": "A"}, 1)
        cache.set("p", DataCategory.QUOTE, {"s": "A"}, 2)
        assert cache.size() == 1
        assert cache.get("p", DataCategory.QUOTE, {"s": "A"}) == 2

    def test_clear(self, cache):
        cache.set("p", DataCategory.QUOTE, {"s": "A"}, 1)
        cache.set("p", DataCategory.SEARCH, {"q": "x"}, 2)
        cache.clear()
        assert cache.size() == 0
        assert len(cache) == 0
