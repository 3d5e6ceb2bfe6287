"""Yahoo Finance数据提供商实现 (基于 yfinance, 无需 API key)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import date, timedelta
from types import MappingProxyType
from typing import Any

import pandas as pd
import yfinance as yf
from yfinance.exceptions import YFRateLimitError

from omd.core.config import OmdConfig
from omd.core.data.providers.base import DataProvider
from omd.core.data.ratelimit import TokenBucketRateLimiter
from omd.core.exceptions import (
    DataNotFoundError,
    InvalidRequestError,
    ProviderError,
    RateLimitError,
    UnsupportedActionError,
    UpstreamError,
)
from omd.core.models import (
    DataCategory,
    DividendEvent,
    EarningsData,
    FinancialStatement,
    HistoricalQuote,
    OptionContract,
    Quote,
    RateLimitConfig,
    SearchResult,
)

# FinancialStatement 字段 -> (报表, yfinance 行名)
STATEMENT_ROWS: dict[str, tuple[str, str]] = {
    "revenue": ("income", "Total Revenue"),
    "gross_profit": ("income", "Gross Profit"),
    "operating_income": ("income", "Operating Income"),
    "net_income": ("income", "Net Income"),
    "eps": ("income", "Basic EPS"),
    "eps_diluted": ("income", "Diluted EPS"),
    "total_assets": ("balance", "Total Assets"),
    "total_liabilities": ("balance", "Total Liabilities Net Minority Interest"),
    "stockholders_equity": ("balance", "Stockholders Equity"),
    "long_term_debt": ("balance", "Long Term Debt"),
    "shares_outstanding": ("balance", "Ordinary Shares Number"),
    "operating_cash_flow": ("cashflow", "Operating Cash Flow"),
}


def _num(value: Any) -> float | None:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _day(value: Any) -> str:
    if hasattr(value, "date"):
        return value.date().isoformat()
    return str(value)[:10]


def _cell(frame: pd.DataFrame | None, row: str, column: Any) -> float | None:
    if frame is None or frame.empty or row not in frame.index or column not in frame.columns:
        return None
    return _num(frame.at[row, column])


class YahooFinanceProvider(DataProvider):
    """Equities, ETFs and indices from Yahoo Finance."""

    name = "yahoo"
    capabilities = frozenset(
        {
            DataCategory.SEARCH,
            DataCategory.QUOTE,
            DataCategory.FINANCIALS,
            DataCategory.HISTORY,
            DataCategory.OPTIONS,
            DataCategory.EARNINGS,
            DataCategory.DIVIDENDS,
        }
    )
    priority = MappingProxyType(
        {
            DataCategory.SEARCH: 3,
            DataCategory.QUOTE: 1,
            DataCategory.FINANCIALS: 2,
            DataCategory.HISTORY: 1,
            DataCategory.OPTIONS: 1,
            DataCategory.EARNINGS: 1,
            DataCategory.DIVIDENDS: 1,
        }
    )
    rate_limits = RateLimitConfig(max_requests=60, window_ms=60_000)

    def __init__(
        self,
        rate_limiter: TokenBucketRateLimiter | None = None,
        config: OmdConfig | None = None,
        ticker_factory: Callable[[str], Any] | None = None,
        search_factory: Callable[..., Any] | None = None,
    ) -> None:
        super().__init__(rate_limiter, config)
        self._ticker_factory = ticker_factory or yf.Ticker
        self._search_factory = search_factory or yf.Search

    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        route = f"{category.value}/{action}"
        if route == "search/search":
            return await self._run(self._search, self.require_arg(args, "query"))
        if route == "quote/get":
            return await self._run(self._quote, self.require_arg(args, "symbol"))
        if route == "history/get":
            return await self._run(self._history, self.require_arg(args, "symbol"), self.int_arg(args, "days", 30))
        if route == "financials/get":
            return await self._run(self._financials, self.require_arg(args, "symbol"), args.get("period") or "annual")
        if route == "options/get":
            option_type = args.get("type")
            if option_type not in (None, "", "call", "put"):
                raise InvalidRequestError(f"type must be call or put, got {option_type!r}", self.name)
            return await self._run(
                self._options, self.require_arg(args, "symbol"), args.get("expiration") or None, option_type or None
            )
        if route == "earnings/get":
            return await self._run(self._earnings, self.require_arg(args, "symbol"), self.int_arg(args, "limit", 12))
        if route == "dividends/get":
            return await self._run(self._dividends, self.require_arg(args, "symbol"), self.int_arg(args, "limit"))
        raise UnsupportedActionError(self.name, category.value, action)

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking yfinance call in a worker thread, one rate-limit token per call."""
        self.consume_token()
        try:
            return await asyncio.to_thread(func, *args)
        except ProviderError:
            raise
        except YFRateLimitError as exc:
            raise RateLimitError(f"yahoo rate limited the request: {exc}", self.name) from exc
        except Exception as exc:
            raise UpstreamError(f"yahoo request failed: {type(exc).__name__}: {exc}", self.name) from exc

    def _search(self, query: str) -> list[SearchResult]:
        quotes = self._search_factory(query, max_results=10).quotes or []
        return [
            SearchResult(
                symbol=q["symbol"],
                name=q.get("longname") or q.get("shortname") or q["symbol"],
                exchange=q.get("exchDisp") or q.get("exchange"),
                type=q.get("quoteType"),
                source=self.name,
            )
            for q in quotes
            if q.get("isYahooFinance", True) and q.get("symbol")
        ]

    def _quote(self, symbol: str) -> Quote:
        info = self._ticker_factory(symbol).info or {}
        price = _num(info.get("regularMarketPrice"))
        if price is None:
            raise DataNotFoundError(f'No quote data for "{symbol}"', self.name)
        return Quote(
            symbol=info.get("symbol") or symbol.upper(),
            price=price,
            change=_num(info.get("regularMarketChange")) or 0.0,
            change_percent=_num(info.get("regularMarketChangePercent")) or 0.0,
            volume=_num(info.get("regularMarketVolume")),
            market_cap=_num(info.get("marketCap")),
            high_52w=_num(info.get("fiftyTwoWeekHigh")),
            low_52w=_num(info.get("fiftyTwoWeekLow")),
            open=_num(info.get("regularMarketOpen")),
            previous_close=_num(info.get("regularMarketPreviousClose")),
            day_high=_num(info.get("regularMarketDayHigh")),
            day_low=_num(info.get("regularMarketDayLow")),
            source=self.name,
        )

    def _history(self, symbol: str, days: int | None) -> list[HistoricalQuote]:
        start = date.today() - timedelta(days=days or 30)
        frame = self._ticker_factory(symbol).history(start=start.isoformat(), interval="1d", auto_adjust=False)
        if frame is None or frame.empty:
            raise DataNotFoundError(f'No history data for "{symbol}"', self.name)
        return [
            HistoricalQuote(
                date=_day(index),
                open=_num(row["Open"]) or 0.0,
                high=_num(row["High"]) or 0.0,
                low=_num(row["Low"]) or 0.0,
                close=_num(row["Close"]) or 0.0,
                adj_close=_num(row.get("Adj Close")),
                volume=_num(row["Volume"]) or 0.0,
            )
            for index, row in frame.iterrows()
        ]

    def _financials(self, symbol: str, period: str) -> list[FinancialStatement]:
        ticker = self._ticker_factory(symbol)
        quarterly = period == "quarterly"
        frames = {
            "income": ticker.quarterly_income_stmt if quarterly else ticker.income_stmt,
            "balance": ticker.quarterly_balance_sheet if quarterly else ticker.balance_sheet,
            "cashflow": ticker.quarterly_cashflow if quarterly else ticker.cashflow,
        }
        income = frames["income"]
        if income is None or income.empty:
            raise DataNotFoundError(f'No financial statements for "{symbol}"', self.name)

        statements = [
            FinancialStatement(
                period="quarterly" if quarterly else "annual",
                date=_day(column),
                source=self.name,
                **{field: _cell(frames[frame], row, column) for field, (frame, row) in STATEMENT_ROWS.items()},
            )
            for column in income.columns
        ]
        statements.sort(key=lambda s: s.date, reverse=True)
        return statements

    def _options(self, symbol: str, expiration: str | None, option_type: str | None) -> list[OptionContract]:
        ticker = self._ticker_factory(symbol)
        expirations = list(ticker.options or ())
        if not expirations:
            raise DataNotFoundError(f'No options listed for "{symbol}"', self.name)
        expiration = expiration or expirations[0]
        if expiration not in expirations:
            raise InvalidRequestError(
                f"Unknown expiration {expiration} for {symbol}", self.name, {"expirations": expirations}
            )

        chain = ticker.option_chain(expiration)
        sides = [("call", chain.calls), ("put", chain.puts)]
        contracts = []
        for side, frame in sides:
            if option_type and side != option_type:
                continue
            for _, row in frame.iterrows():
                contracts.append(
                    OptionContract(
                        contract_symbol=row.get("contractSymbol"),
                        type=side,
                        expiration=expiration,
                        strike=float(row["strike"]),
                        last_price=_num(row.get("lastPrice")),
                        bid=_num(row.get("bid")),
                        ask=_num(row.get("ask")),
                        volume=_num(row.get("volume")),
                        open_interest=_num(row.get("openInterest")),
                        implied_volatility=_num(row.get("impliedVolatility")),
                    )
                )
        return contracts

    def _earnings(self, symbol: str, limit: int | None) -> list[EarningsData]:
        frame = self._ticker_factory(symbol).get_earnings_dates(limit=limit or 12)
        if frame is None or frame.empty:
            return []
        return [
            EarningsData(
                symbol=symbol.upper(),
                earnings_date=_day(index),
                eps_estimate=_num(row.get("EPS Estimate")),
                eps_actual=_num(row.get("Reported EPS")),
                surprise_percent=_num(row.get("Surprise(%)")),
                source=self.name,
            )
            for index, row in frame.iterrows()
        ]

    def _dividends(self, symbol: str, limit: int | None) -> list[DividendEvent]:
        series = self._ticker_factory(symbol).dividends
        if series is None or series.empty:
            return []
        events = [DividendEvent(date=_day(index), amount=float(amount), source=self.name) for index, amount in series.items()]
        events.reverse()
        return events[:limit] if limit else events
