"""Alpha Vantage provider (free key, 25 requests per day)."""

from __future__ import annotations

import asyncio
from types import MappingProxyType
from typing import Any

from omd.core.data.providers.base import HttpDataProvider
from omd.core.exceptions import (
    AuthenticationError,
    DataNotFoundError,
    RateLimitError,
    UnsupportedActionError,
    UpstreamError,
)
from omd.core.models import (
    DataCategory,
    FinancialStatement,
    HistoricalQuote,
    Quote,
    RateLimitConfig,
    SearchResult,
)


def to_float(value: Any) -> float | None:
    """Alpha Vantage sends numbers as strings and ``"None"`` for missing values."""
    if value is None or value in ("", "None", "-"):
        return None
    try:
        return float(str(value).rstrip("%"))
    except ValueError:
        return None


class AlphaVantageProvider(HttpDataProvider):
    """Quotes, daily history, statements and symbol search via the ``/query`` endpoint."""

    name = "alphavantage"
    base_url = "https://www.alphavantage.co"
    requires_key = True
    key_env_var = "ALPHA_VANTAGE_API_KEY"
    key_config_field = "alpha_vantage_api_key"
    capabilities = frozenset(
        {DataCategory.SEARCH, DataCategory.QUOTE, DataCategory.FINANCIALS, DataCategory.HISTORY}
    )
    priority = MappingProxyType(
        {DataCategory.SEARCH: 6, DataCategory.QUOTE: 5, DataCategory.FINANCIALS: 4, DataCategory.HISTORY: 4}
    )
    rate_limits = RateLimitConfig(max_requests=25, window_ms=86_400_000)

    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        route = f"{category.value}/{action}"
        if route == "search/search":
            return await self.search(self.require_arg(args, "query"))
        if route == "quote/get":
            return await self.get_quote(self.require_arg(args, "symbol"))
        if route == "financials/get":
            return await self.get_financials(self.require_arg(args, "symbol"), args.get("period") or "annual")
        if route == "history/get":
            return await self.get_history(self.require_arg(args, "symbol"), self.int_arg(args, "days", 30))
        raise UnsupportedActionError(self.name, category.value, action)

    async def _query(self, function: str, **params: Any) -> dict[str, Any]:
        api_key = self.api_key
        if api_key is None:
            raise AuthenticationError(
                "Alpha Vantage API key not configured. Set ALPHA_VANTAGE_API_KEY or run: "
                "omd config set alpha_vantage_api_key <key>",
                self.name,
                self.key_env_var,
            )
        data = await self._get_json("/query", {"function": function, **params, "apikey": api_key})

        # 错误以 HTTP 200 返回在响应体中
        if "Error Message" in data:
            raise UpstreamError(f"alphavantage: {data['Error Message']}", self.name)
        if "Note" in data:
            raise RateLimitError(f"alphavantage: {data['Note']}", self.name)
        if "Information" in data:
            raise RateLimitError(f"alphavantage: {data['Information']}", self.name)
        return data

    async def search(self, query: str) -> list[SearchResult]:
        data = await self._query("SYMBOL_SEARCH", keywords=query)
        return [
            SearchResult(
                symbol=m["1. symbol"],
                name=m["2. name"],
                exchange=m.get("4. region"),
                type=m.get("3. type"),
                source=self.name,
            )
            for m in data.get("bestMatches") or []
        ]

    async def get_quote(self, symbol: str) -> Quote:
        data = await self._query("GLOBAL_QUOTE", symbol=symbol)
        q = data.get("Global Quote") or {}
        if not q.get("01. symbol"):
            raise DataNotFoundError(f'No quote data returned for "{symbol}"', self.name)
        return Quote(
            symbol=q["01. symbol"],
            price=to_float(q.get("05. price")) or 0.0,
            change=to_float(q.get("09. change")) or 0.0,
            change_percent=to_float(q.get("10. change percent")) or 0.0,
            volume=to_float(q.get("06. volume")),
            open=to_float(q.get("02. open")),
            previous_close=to_float(q.get("08. previous close")),
            day_high=to_float(q.get("03. high")),
            day_low=to_float(q.get("04. low")),
            source=self.name,
        )

    async def get_financials(self, symbol: str, period: str = "annual") -> list[FinancialStatement]:
        income, balance = await asyncio.gather(
            self._query("INCOME_STATEMENT", symbol=symbol),
            self._query("BALANCE_SHEET", symbol=symbol),
        )
        report_key = "quarterlyReports" if period == "quarterly" else "annualReports"
        balance_by_date = {b["fiscalDateEnding"]: b for b in balance.get(report_key) or []}

        statements = []
        for inc in (income.get(report_key) or [])[:5]:
            bal = balance_by_date.get(inc["fiscalDateEnding"], {})
            statements.append(
                FinancialStatement(
                    period=period,
                    date=inc["fiscalDateEnding"],
                    revenue=to_float(inc.get("totalRevenue")),
                    gross_profit=to_float(inc.get("grossProfit")),
                    operating_income=to_float(inc.get("operatingIncome")),
                    net_income=to_float(inc.get("netIncome")),
                    operating_cash_flow=to_float(inc.get("operatingCashflow")),
                    total_assets=to_float(bal.get("totalAssets")),
                    total_liabilities=to_float(bal.get("totalLiabilities")),
                    stockholders_equity=to_float(bal.get("totalShareholderEquity")),
                    long_term_debt=to_float(bal.get("longTermDebt")),
                    shares_outstanding=to_float(bal.get("commonStockSharesOutstanding")),
                    source=self.name,
                )
            )
        return statements

    async def get_history(self, symbol: str, days: int | None = 30) -> list[HistoricalQuote]:
        days = days or 30
        data = await self._query("TIME_SERIES_DAILY", symbol=symbol, outputsize="full" if days > 100 else "compact")
        series = data.get("Time Series (Daily)")
        if not series:
            raise DataNotFoundError(f'No history data returned for "{symbol}"', self.name)

        bars = [
            HistoricalQuote(
                date=date,
                open=to_float(bar.get("1. open")) or 0.0,
                high=to_float(bar.get("2. high")) or 0.0,
                low=to_float(bar.get("3. low")) or 0.0,
                close=to_float(bar.get("4. close")) or 0.0,
                volume=to_float(bar.get("5. volume")) or 0.0,
            )
            for date, bar in series.items()
        ]
        bars.sort(key=lambda bar: bar.date, reverse=True)
        return bars[:days]
