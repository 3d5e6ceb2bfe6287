"""Tests for the routing context and package level helpers."""

import pytest

import omd
from omd.core.config import CacheConfig, OmdConfig
from omd.core.context import RoutingContext, create_default_context
from omd.core.models import DataCategory, RateLimitConfig


class TestRoutingContext:
    def test_cache_size_comes_from_config(self):
        context = RoutingContext(config=OmdConfig(cache=CacheConfig(max_entries=3)))
        assert context.cache.max_entries == 3

    def test_shares_clock(self, clock):
        context = RoutingContext(clock=clock)
        context.cache.set("p", DataCategory.QUOTE, {}, 1)
        clock.advance(30_000)
        assert context.cache.get("p", DataCategory.QUOTE, {}) is None

    def test_reset_keeps_providers(self, context, make_provider):
        limits = RateLimitConfig(2, 60_000)
        context.register_provider(make_provider("a", [DataCategory.QUOTE]))
        context.cache.set("a", DataCategory.QUOTE, {}, 1)
        context.rate_limiter.consume_token("a", limits)

        context.reset()

        assert context.cache.size() == 0
        assert context.rate_limiter.get_remaining("a", limits) == 2
        assert len(context.registry) == 1

    def test_disabled_sources(self):
        context = RoutingContext(config=OmdConfig(disabled_sources=["fred"]))
        assert context.disabled_sources == frozenset({"fred"})


def test_create_default_context_registers_builtin_providers():
    context = create_default_context(OmdConfig(fred_api_key="k"))

    assert [p.name for p in context.registry] == [
        "sec-edgar",
        "yahoo",
        "binance",
        "coingecko",
        "fred",
        "finnhub",
        "alphavantage",
    ]
    assert all(p.rate_limiter is context.rate_limiter for p in context.registry)
    assert context.registry.get_provider("fred").is_enabled()
    assert not context.registry.get_provider("coingecko").is_enabled()


def test_create_default_context_reads_environment(monkeypatch):
    monkeypatch.setenv("COINGECKO_API_KEY", "cg")
    monkeypatch.setenv("OMD_DISABLED_SOURCES", "binance")

    context = create_default_context()

    assert context.registry.get_provider("coingecko").is_enabled()
    assert context.disabled_sources == frozenset({"binance"})


@pytest.mark.asyncio
async def test_package_route_uses_default_router(monkeypatch, router, make_provider):
    router.register_provider(make_provider("a", [DataCategory.CRYPTO], outcome={"price": 1}))
    monkeypatch.setattr(omd, "_router", router)

    result = await omd.route("crypto", "quote", {"symbol": "BTC"})
    cached = await omd.route("crypto", "quote", {"symbol": "BTC"})
    fresh = await omd.route("crypto", "quote", {"symbol": "BTC"}, no_cache=True)

    assert result.source == "a"
    assert cached.cached is True
    assert fresh.cached is False


def test_default_router_is_created_once(monkeypatch):
    monkeypatch.setattr(omd, "_router", None)
    first = omd.get_default_router()
    assert omd.get_default_router() is first
    omd.reset_default_router()
    assert omd.get_default_router() is not first
    omd.reset_default_router()
