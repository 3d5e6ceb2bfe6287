"""Finnhub provider (free API key)."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from omd.core.data.providers.base import HttpDataProvider
from omd.core.exceptions import AuthenticationError, DataNotFoundError, UnsupportedActionError
from omd.core.models import DataCategory, EarningsData, HistoricalQuote, Quote, RateLimitConfig, SearchResult

SECONDS_PER_DAY = 86_400


class FinnhubProvider(HttpDataProvider):
    """US equity quotes, earnings history, daily candles and symbol search."""

    name = "finnhub"
    base_url = "https://finnhub.io/api/v1"
    requires_key = True
    key_env_var = "FINNHUB_API_KEY"
    key_config_field = "finnhub_api_key"
    capabilities = frozenset({DataCategory.SEARCH, DataCategory.QUOTE, DataCategory.EARNINGS, DataCategory.HISTORY})
    priority = MappingProxyType(
        {DataCategory.SEARCH: 5, DataCategory.QUOTE: 3, DataCategory.EARNINGS: 2, DataCategory.HISTORY: 3}
    )
    rate_limits = RateLimitConfig(max_requests=60, window_ms=60_000)

    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        route = f"{category.value}/{action}"
        if route == "search/search":
            return await self.search(self.require_arg(args, "query"))
        if route == "quote/get":
            return await self.get_quote(self.require_arg(args, "symbol"))
        if route == "earnings/get":
            return await self.get_earnings(self.require_arg(args, "symbol"))
        if route == "history/get":
            return await self.get_history(self.require_arg(args, "symbol"), self.int_arg(args, "days", 30))
        raise UnsupportedActionError(self.name, category.value, action)

    async def _finnhub_get(self, path: str, params: dict[str, Any]) -> Any:
        api_key = self.api_key
        if api_key is None:
            raise AuthenticationError(
                "Finnhub API key not configured. Set FINNHUB_API_KEY or run: omd config set finnhub_api_key <key>",
                self.name,
                self.key_env_var,
            )
        return await self._get_json(path, {**params, "token": api_key})

    async def search(self, query: str) -> list[SearchResult]:
        data = await self._finnhub_get("/search", {"q": query})
        return [
            SearchResult(symbol=r["symbol"], name=r["description"], type=r.get("type"), source=self.name)
            for r in data.get("result") or []
        ]

    async def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        data = await self._finnhub_get("/quote", {"symbol": symbol})
        # 无效代码时 Finnhub 返回全零
        if not any(data.get(k) for k in ("c", "h", "l", "o", "pc")):
            raise DataNotFoundError(f'No quote data for "{symbol}", ticker may be invalid', self.name)
        return Quote(
            symbol=symbol,
            price=data["c"],
            change=data.get("d") or 0.0,
            change_percent=data.get("dp") or 0.0,
            open=data.get("o"),
            previous_close=data.get("pc"),
            day_high=data.get("h"),
            day_low=data.get("l"),
            source=self.name,
        )

    async def get_earnings(self, symbol: str) -> list[EarningsData]:
        symbol = symbol.upper()
        data = await self._finnhub_get("/stock/earnings", {"symbol": symbol})
        return [
            EarningsData(
                symbol=symbol,
                earnings_date=e.get("period"),
                eps_actual=e.get("actual"),
                eps_estimate=e.get("estimate"),
                surprise_percent=e.get("surprisePercent"),
                source=self.name,
            )
            for e in data or []
        ]

    async def get_history(self, symbol: str, days: int | None = 30) -> list[HistoricalQuote]:
        now = int(time.time())
        data = await self._finnhub_get(
            "/stock/candle",
            {"symbol": symbol.upper(), "resolution": "D", "from": now - (days or 30) * SECONDS_PER_DAY, "to": now},
        )
        if data.get("s") != "ok":
            raise DataNotFoundError(
                f'Candle data not available for "{symbol}" (status: {data.get("s")}). '
                "This endpoint may require a paid plan.",
                self.name,
            )
        return [
            HistoricalQuote(
                date=datetime.fromtimestamp(ts, tz=timezone.utc).date().isoformat(),
                open=data["o"][i],
                high=data["h"][i],
                low=data["l"][i],
                close=data["c"][i],
                volume=data["v"][i],
            )
            for i, ts in enumerate(data["t"])
        ]
