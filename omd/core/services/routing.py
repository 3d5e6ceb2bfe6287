"""数据路由器实现"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from omd.core.context import RoutingContext
from omd.core.data.providers import DataProvider
from omd.core.exceptions import (
    AllProvidersFailedError,
    NoProvidersAvailableError,
    SourceNotAvailableError,
)
from omd.core.logging import bind, log_context
from omd.core.models import (
    DataCategory,
    ProviderFailure,
    ProviderResult,
    RouteOptions,
    SourceInfo,
)


def _as_category(category: DataCategory | str) -> DataCategory:
    try:
        return DataCategory(category)
    except ValueError:
        raise NoProvidersAvailableError(str(category), details={"reason": "unknown category"}) from None


class DataRouter:
    """数据路由器，负责将请求路由到合适的数据提供商

    特性：
    - 按类别优先级排序，同优先级时优先选择仍有速率余量的提供商
    - 结果缓存（与参数顺序无关的缓存键）
    - 顺序故障转移：依次尝试候选提供商，第一个成功的结果被缓存并返回
    """

    def __init__(self, context: RoutingContext):
        """初始化数据路由器

        Args:
            context: 持有注册表、缓存、速率限制器和配置的路由上下文
        """
        self.context = context

    def register_provider(self, provider: DataProvider) -> bool:
        return self.context.register_provider(provider)

    def get_providers(self) -> list[DataProvider]:
        """按注册顺序返回所有提供商的快照"""
        return self.context.registry.get_providers()

    def get_providers_for_category(self, category: DataCategory | str) -> list[DataProvider]:
        """返回可服务该类别的已启用提供商，按优先级和速率余量排序

        Args:
            category: 数据类别

        Returns:
            排序后的候选提供商列表（稳定排序）
        """
        category = _as_category(category)
        disabled = self.context.disabled_sources
        limiter = self.context.rate_limiter

        candidates = [
            provider
            for provider in self.context.registry.providers_with_capability(category)
            if provider.is_enabled() and provider.name not in disabled
        ]
        return sorted(
            candidates,
            key=lambda p: (
                p.get_priority(category),
                0 if limiter.can_request(p.name, p.rate_limits) else 1,
            ),
        )

    async def route(
        self,
        category: DataCategory | str,
        action: str,
        args: Mapping[str, Any] | None = None,
        options: RouteOptions | None = None,
    ) -> ProviderResult:
        """将请求路由到提供商并返回第一个成功的结果

        Args:
            category: 数据类别
            action: 提供商内部的操作名，例如 ``quote``
            args: 请求参数
            options: 强制数据源 / 跳过缓存

        Returns:
            ProviderResult，缓存命中时 ``cached`` 为 True

        Raises:
            SourceNotAvailableError: 强制的数据源未注册、不支持该类别或已禁用
            NoProvidersAvailableError: 没有可用的提供商，或类别未知
            AllProvidersFailedError: 所有候选提供商都失败
        """
        category = _as_category(category)
        request_args = dict(args or {})
        options = options or RouteOptions()
        use_cache = not options.no_cache and self.context.cache_enabled
        cache_args = {"action": action, **request_args}

        with log_context(category=category.value, action=action):
            log = bind(component="DataRouter")

            if use_cache:
                cached = self._lookup_cache(category, cache_args, options.source)
                if cached is not None:
                    log.debug("Cache hit from {}", cached.source)
                    return cached

            candidates = self._select_candidates(category, options.source)
            log.debug("Routing candidates: {}", [p.name for p in candidates])

            failures: list[ProviderFailure] = []
            for provider in candidates:
                outcome = await provider.execute(category, action, request_args)
                if isinstance(outcome, ProviderFailure):
                    failures.append(outcome)
                    log.bind(provider=provider.name).warning(
                        "Provider failed ({}): {}", outcome.kind.value, outcome.message
                    )
                    continue

                if use_cache:
                    self.context.cache.set(provider.name, category, cache_args, outcome.data)
                log.bind(provider=provider.name).debug("Routed {}/{}", category.value, action)
                return outcome

            error = AllProvidersFailedError(category.value, action, [f.to_dict() for f in failures])
            log.bind(error_code=error.error_code.value).error(error.message)
            raise error

    async def route_many(
        self,
        category: DataCategory | str,
        action: str,
        args_list: Sequence[Mapping[str, Any]],
        options: RouteOptions | None = None,
        return_exceptions: bool = False,
    ) -> list[Any]:
        """并发执行多个独立的 ``route`` 调用（例如批量查询多个代码）"""
        return await asyncio.gather(
            *(self.route(category, action, args, options) for args in args_list),
            return_exceptions=return_exceptions,
        )

    def _lookup_cache(
        self, category: DataCategory, cache_args: dict[str, Any], source: str | None
    ) -> ProviderResult | None:
        cache = self.context.cache
        if source:
            names = [source]
        else:
            # First hit in registration order, not priority order
            names = [p.name for p in self.context.registry.providers_with_capability(category)]

        for name in names:
            data = cache.get(name, category, cache_args)
            if data is not None:
                return ProviderResult(data=data, source=name, cached=True)
        return None

    def _select_candidates(self, category: DataCategory, source: str | None) -> list[DataProvider]:
        candidates = self.get_providers_for_category(category)

        if source:
            candidates = [p for p in candidates if p.name == source]
            if not candidates:
                raise SourceNotAvailableError(source, category.value)
            return candidates

        if not candidates:
            capable = self.context.registry.providers_with_capability(category)
            if not capable:
                raise NoProvidersAvailableError(category.value)
            raise NoProvidersAvailableError(
                category.value,
                unavailable=[{"provider": p.name, "reason": self._unavailable_reason(p)} for p in capable],
            )
        return candidates

    def _unavailable_reason(self, provider: DataProvider) -> str:
        if provider.name in self.context.disabled_sources:
            return "disabled in config (disabled_sources)"
        return provider.disabled_reason() or "provider is disabled"

    def list_sources(self) -> list[SourceInfo]:
        """所有已注册提供商的状态快照"""
        sources = []
        for provider in self.get_providers():
            enabled = provider.is_enabled() and provider.name not in self.context.disabled_sources
            sources.append(
                SourceInfo(
                    name=provider.name,
                    enabled=enabled,
                    requires_key=provider.requires_key,
                    key_configured=provider.requires_key and provider.api_key is not None,
                    categories=sorted(provider.capabilities, key=lambda c: c.value),
                    rate_limit=provider.rate_limits.describe(),
                    remaining=self.context.rate_limiter.get_remaining(provider.name, provider.rate_limits),
                    disabled_reason=None if enabled else self._unavailable_reason(provider),
                )
            )
        return sources
