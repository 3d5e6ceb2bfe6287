"""omd - open market data

One async call over several market data sources, with priority routing,
fallback, per-source rate limiting and a TTL result cache.
"""

__version__ = "0.1.0"

from typing import Any  # noqa: E402

from omd.core.context import RoutingContext, create_default_context  # noqa: E402
from omd.core.models import DataCategory, ProviderResult, RouteOptions  # noqa: E402
from omd.core.services import DataRouter  # noqa: E402

# 全局路由器实例（惰性创建）
_router: DataRouter | None = None


def get_default_router() -> DataRouter:
    """获取全局路由器实例，首次调用时加载配置并注册内置提供商"""
    global _router
    if _router is None:
        _router = DataRouter(create_default_context())
    return _router


def reset_default_router() -> None:
    global _router
    _router = None


async def route(
    category: DataCategory | str,
    action: str,
    args: dict[str, Any] | None = None,
    *,
    source: str | None = None,
    no_cache: bool = False,
) -> ProviderResult:
    """异步获取数据

    Examples:
        >>> import asyncio, omd
        >>> result = asyncio.run(omd.route("crypto", "quote", {"symbol": "BTC"}))
        >>> result.source
        'binance'
    """
    options = RouteOptions(source=source, no_cache=no_cache)
    return await get_default_router().route(category, action, args, options)


__all__ = [
    "__version__",
    "DataCategory",
    "DataRouter",
    "ProviderResult",
    "RouteOptions",
    "RoutingContext",
    "create_default_context",
    "get_default_router",
    "reset_default_router",
    "route",
]
