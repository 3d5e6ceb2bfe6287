"""Market data payload models returned by providers."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """搜索结果."""

    symbol: str
    name: str
    exchange: str | None = None
    type: str | None = None
    source: str


class CryptoQuote(BaseModel):
    """加密货币报价."""

    symbol: str
    name: str | None = None
    price: float
    change_24h: float | None = None
    change_percent_24h: float | None = None
    volume_24h: float | None = None
    market_cap: float | None = None
    market_cap_rank: int | None = None
    high_24h: float | None = None
    low_24h: float | None = None
    circulating_supply: float | None = None
    ath: float | None = None
    source: str


class CryptoPrice(BaseModel):
    """Last traded price only."""

    symbol: str
    price: float


class CryptoCandle(BaseModel):
    """OHLCV candle."""

    time: str
    open: float
    high: float
    low: float
    close: float
    volume: float


class MacroDataPoint(BaseModel):
    date: str
    value: float


class MacroSeries(BaseModel):
    """宏观经济时间序列."""

    id: str
    title: str
    units: str | None = None
    frequency: str | None = None
    seasonal_adjustment: str | None = None
    data: list[MacroDataPoint] = Field(default_factory=list)
    source: str


class MacroSeriesSummary(BaseModel):
    """Series metadata returned by series search."""

    id: str
    title: str
    units: str | None = None
    frequency: str | None = None
    seasonal_adjustment: str | None = None
    popularity: int | None = None


class MacroCategory(BaseModel):
    id: int
    name: str
    parent_id: int


class Quote(BaseModel):
    """股票报价."""

    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    volume: float | None = None
    market_cap: float | None = None
    high_52w: float | None = None
    low_52w: float | None = None
    open: float | None = None
    previous_close: float | None = None
    day_high: float | None = None
    day_low: float | None = None
    source: str


class HistoricalQuote(BaseModel):
    """Daily OHLCV bar."""

    date: str
    open: float
    high: float
    low: float
    close: float
    adj_close: float | None = None
    volume: float


class FinancialStatement(BaseModel):
    """财务报表摘要 (单个报告期)."""

    period: str
    date: str
    revenue: float | None = None
    gross_profit: float | None = None
    operating_income: float | None = None
    net_income: float | None = None
    eps: float | None = None
    eps_diluted: float | None = None
    total_assets: float | None = None
    total_liabilities: float | None = None
    stockholders_equity: float | None = None
    operating_cash_flow: float | None = None
    long_term_debt: float | None = None
    shares_outstanding: float | None = None
    source: str


class Filing(BaseModel):
    accession_number: str
    form: str
    filing_date: str
    report_date: str | None = None
    primary_document: str | None = None
    description: str | None = None
    source: str


class InsiderTransaction(BaseModel):
    """内部人交易记录."""

    name: str
    title: str | None = None
    transaction_date: str
    transaction_type: str
    shares: float = 0
    price_per_share: float | None = None
    total_value: float | None = None
    shares_owned: float | None = None
    description: str | None = None
    accession_number: str | None = None
    source: str


class OptionContract(BaseModel):
    """One row of an option chain."""

    contract_symbol: str | None = None
    type: Literal["call", "put"]
    expiration: str
    strike: float
    last_price: float | None = None
    bid: float | None = None
    ask: float | None = None
    volume: float | None = None
    open_interest: float | None = None
    implied_volatility: float | None = None


class EarningsData(BaseModel):
    symbol: str
    earnings_date: str | None = None
    eps_estimate: float | None = None
    eps_actual: float | None = None
    surprise_percent: float | None = None
    source: str


class DividendEvent(BaseModel):
    date: str
    amount: float
    source: str
