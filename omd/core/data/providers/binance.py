"""Binance public market data (no API key)."""

from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from omd.core.data.providers.base import HttpDataProvider
from omd.core.exceptions import UnsupportedActionError
from omd.core.models import CryptoCandle, CryptoPrice, CryptoQuote, DataCategory, RateLimitConfig


def _pair(symbol: str) -> str:
    return f"{symbol.upper()}USDT"


class BinanceProvider(HttpDataProvider):
    """Spot prices quoted against USDT."""

    name = "binance"
    base_url = "https://api.binance.com"
    capabilities = frozenset({DataCategory.CRYPTO})
    priority = MappingProxyType({DataCategory.CRYPTO: 1})
    rate_limits = RateLimitConfig(max_requests=1200, window_ms=60_000)

    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        if action == "quote":
            return await self.get_quote(self.require_arg(args, "symbol"))
        if action == "history":
            return await self.get_history(
                self.require_arg(args, "symbol"),
                days=self.int_arg(args, "days", 30),
                interval=args.get("interval") or "1d",
            )
        if action == "price":
            return await self.get_price(self.require_arg(args, "symbol"))
        raise UnsupportedActionError(self.name, category.value, action)

    async def get_quote(self, symbol: str) -> CryptoQuote:
        data = await self._get_json("/api/v3/ticker/24hr", {"symbol": _pair(symbol)})
        return CryptoQuote(
            symbol=symbol.upper(),
            price=float(data["lastPrice"]),
            change_24h=float(data["priceChange"]),
            change_percent_24h=float(data["priceChangePercent"]),
            volume_24h=float(data["quoteVolume"]),
            high_24h=float(data["highPrice"]),
            low_24h=float(data["lowPrice"]),
            source=self.name,
        )

    async def get_history(self, symbol: str, days: int | None = 30, interval: str = "1d") -> list[CryptoCandle]:
        klines = await self._get_json(
            "/api/v3/klines", {"symbol": _pair(symbol), "interval": interval, "limit": days}
        )
        return [
            CryptoCandle(
                time=datetime.fromtimestamp(k[0] / 1000, tz=timezone.utc).isoformat(),
                open=float(k[1]),
                high=float(k[2]),
                low=float(k[3]),
                close=float(k[4]),
                volume=float(k[5]),
            )
            for k in klines
        ]

    async def get_price(self, symbol: str) -> CryptoPrice:
        data = await self._get_json("/api/v3/ticker/price", {"symbol": _pair(symbol)})
        return CryptoPrice(symbol=symbol.upper(), price=float(data["price"]))
