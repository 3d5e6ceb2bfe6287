"""Routing context owning all shared routing state."""

from __future__ import annotations

from omd.core.config import ConfigManager, OmdConfig
from omd.core.data.cache import ResultCache
from omd.core.data.clock import Clock, monotonic_ms
from omd.core.data.providers import DataProvider, ProviderRegistry, create_default_providers
from omd.core.data.ratelimit import TokenBucketRateLimiter


class RoutingContext:
    """Registry, result cache, rate limiter and configuration for one process.

    Built once at startup (or once per test) and handed to the router instead
    of relying on module-level state.
    """

    def __init__(
        self,
        config: OmdConfig | None = None,
        clock: Clock = monotonic_ms,
        registry: ProviderRegistry | None = None,
        rate_limiter: TokenBucketRateLimiter | None = None,
        cache: ResultCache | None = None,
    ) -> None:
        self.config = config or OmdConfig()
        self.clock = clock
        self.registry = registry or ProviderRegistry()
        self.rate_limiter = rate_limiter or TokenBucketRateLimiter(clock=clock)
        self.cache = cache or ResultCache(max_entries=self.config.cache.max_entries, clock=clock)

    @property
    def disabled_sources(self) -> frozenset[str]:
        return frozenset(self.config.disabled_sources)

    @property
    def cache_enabled(self) -> bool:
        return self.config.cache.enabled

    def register_provider(self, provider: DataProvider) -> bool:
        return self.registry.register_provider(provider)

    def reset(self) -> None:
        """Drop cached results and bucket state; registered providers stay."""
        self.cache.clear()
        self.rate_limiter.reset()


def create_default_context(config: OmdConfig | None = None, clock: Clock = monotonic_ms) -> RoutingContext:
    """Context with the built-in providers registered."""
    context = RoutingContext(config=config or ConfigManager().get_config(), clock=clock)
    for provider in create_default_providers(context.rate_limiter, context.config):
        context.register_provider(provider)
    return context
