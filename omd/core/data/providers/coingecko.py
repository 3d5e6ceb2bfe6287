"""CoinGecko demo API provider."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from omd.core.data.providers.base import HttpDataProvider
from omd.core.exceptions import AuthenticationError, DataNotFoundError, UnsupportedActionError
from omd.core.models import CryptoQuote, DataCategory, RateLimitConfig, SearchResult

SYMBOL_TO_ID = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "BNB": "binancecoin",
    "XRP": "ripple",
    "ADA": "cardano",
    "DOGE": "dogecoin",
    "DOT": "polkadot",
    "AVAX": "avalanche-2",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "ATOM": "cosmos",
    "LTC": "litecoin",
}


class CoinGeckoProvider(HttpDataProvider):
    """Crypto quotes, rankings and coin search."""

    name = "coingecko"
    base_url = "https://api.coingecko.com/api/v3"
    requires_key = True
    key_env_var = "COINGECKO_API_KEY"
    key_config_field = "coingecko_api_key"
    capabilities = frozenset({DataCategory.CRYPTO, DataCategory.SEARCH})
    priority = MappingProxyType({DataCategory.CRYPTO: 2, DataCategory.SEARCH: 4})
    rate_limits = RateLimitConfig(max_requests=30, window_ms=60_000)

    def _headers(self) -> dict[str, str]:
        api_key = self.api_key
        if api_key is None:
            raise AuthenticationError(
                "CoinGecko API key not configured. Set COINGECKO_API_KEY or run: omd config set coingecko_api_key <key>",
                self.name,
                self.key_env_var,
            )
        return {**super()._headers(), "x-cg-demo-api-key": api_key}

    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        if category is DataCategory.SEARCH:
            if action == "search":
                return await self.search(self.require_arg(args, "query"))
            raise UnsupportedActionError(self.name, category.value, action)

        if action == "quote":
            return await self.get_quote(self.require_arg(args, "symbol"))
        if action == "top":
            return await self.get_top(self.int_arg(args, "limit", 10))
        if action == "trending":
            return await self.get_trending()
        if action == "global":
            return await self.get_global()
        raise UnsupportedActionError(self.name, category.value, action)

    async def resolve_coin_id(self, symbol: str) -> str:
        mapped = SYMBOL_TO_ID.get(symbol.upper())
        if mapped:
            return mapped

        data = await self._get_json("/search", {"query": symbol})
        coins = data.get("coins") or []
        if not coins:
            raise DataNotFoundError(f'CoinGecko: could not resolve coin ID for symbol "{symbol}"', self.name)
        return coins[0]["id"]

    async def get_quote(self, symbol: str) -> CryptoQuote:
        coin_id = await self.resolve_coin_id(symbol)
        data = await self._get_json(
            "/simple/price",
            {
                "ids": coin_id,
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_24hr_vol": "true",
                "include_market_cap": "true",
            },
        )
        entry = data.get(coin_id)
        if not entry:
            raise DataNotFoundError(f'CoinGecko: no price data for "{coin_id}"', self.name)

        price = entry["usd"]
        change_percent = entry.get("usd_24h_change")
        # usd_24h_change is a percentage
        change = price * (change_percent / 100) if change_percent is not None else None
        return CryptoQuote(
            symbol=symbol.upper(),
            price=price,
            change_24h=change,
            change_percent_24h=change_percent,
            volume_24h=entry.get("usd_24h_vol"),
            market_cap=entry.get("usd_market_cap"),
            source=self.name,
        )

    async def get_top(self, limit: int | None = 10) -> list[CryptoQuote]:
        coins = await self._get_json(
            "/coins/markets",
            {"vs_currency": "usd", "order": "market_cap_desc", "per_page": limit, "sparkline": "false"},
        )
        return [
            CryptoQuote(
                symbol=coin["symbol"].upper(),
                name=coin.get("name"),
                price=coin["current_price"],
                change_24h=coin.get("price_change_24h"),
                change_percent_24h=coin.get("price_change_percentage_24h"),
                volume_24h=coin.get("total_volume"),
                market_cap=coin.get("market_cap"),
                market_cap_rank=coin.get("market_cap_rank"),
                high_24h=coin.get("high_24h"),
                low_24h=coin.get("low_24h"),
                circulating_supply=coin.get("circulating_supply"),
                ath=coin.get("ath"),
                source=self.name,
            )
            for coin in coins
        ]

    async def get_trending(self) -> list[CryptoQuote]:
        data = await self._get_json("/search/trending")
        quotes = []
        for wrapper in data.get("coins", []):
            item = wrapper["item"]
            details = item.get("data") or {}
            quotes.append(
                CryptoQuote(
                    symbol=item["symbol"].upper(),
                    name=item.get("name"),
                    price=details.get("price") or 0,
                    market_cap_rank=item.get("market_cap_rank"),
                    change_percent_24h=(details.get("price_change_percentage_24h") or {}).get("usd"),
                    source=self.name,
                )
            )
        return quotes

    async def get_global(self) -> dict[str, Any]:
        data = await self._get_json("/global")
        return data["data"]

    async def search(self, query: str) -> list[SearchResult]:
        data = await self._get_json("/search", {"query": query})
        return [
            SearchResult(symbol=coin["symbol"].upper(), name=coin["name"], type="crypto", source=self.name)
            for coin in data.get("coins", [])
        ]
