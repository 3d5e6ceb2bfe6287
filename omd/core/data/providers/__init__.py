"""数据提供商适配器框架."""

from __future__ import annotations

from omd.core.config import OmdConfig
from omd.core.data.providers.alpha_vantage import AlphaVantageProvider
from omd.core.data.providers.base import DataProvider, HttpDataProvider
from omd.core.data.providers.binance import BinanceProvider
from omd.core.data.providers.coingecko import CoinGeckoProvider
from omd.core.data.providers.finnhub import FinnhubProvider
from omd.core.data.providers.fred import FredProvider
from omd.core.data.providers.registry import ProviderRegistry
from omd.core.data.providers.sec_edgar import SecEdgarProvider
from omd.core.data.providers.yahoo import YahooFinanceProvider
from omd.core.data.ratelimit import TokenBucketRateLimiter

# 注册顺序即同优先级时的先后顺序
DEFAULT_PROVIDER_CLASSES: tuple[type[DataProvider], ...] = (
    SecEdgarProvider,
    YahooFinanceProvider,
    BinanceProvider,
    CoinGeckoProvider,
    FredProvider,
    FinnhubProvider,
    AlphaVantageProvider,
)


def create_default_providers(
    rate_limiter: TokenBucketRateLimiter,
    config: OmdConfig,
) -> list[DataProvider]:
    """Instantiate the built-in adapters sharing one limiter and config."""
    return [provider_class(rate_limiter=rate_limiter, config=config) for provider_class in DEFAULT_PROVIDER_CLASSES]


__all__ = [
    "DataProvider",
    "HttpDataProvider",
    "ProviderRegistry",
    "AlphaVantageProvider",
    "BinanceProvider",
    "CoinGeckoProvider",
    "FinnhubProvider",
    "FredProvider",
    "SecEdgarProvider",
    "YahooFinanceProvider",
    "DEFAULT_PROVIDER_CLASSES",
    "create_default_providers",
]
