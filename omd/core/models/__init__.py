"""Data models module."""

from omd.core.models.enums import DataCategory, FailureKind
from omd.core.models.market import (
    CryptoCandle,
    CryptoPrice,
    CryptoQuote,
    DividendEvent,
    EarningsData,
    Filing,
    FinancialStatement,
    HistoricalQuote,
    InsiderTransaction,
    MacroCategory,
    MacroDataPoint,
    MacroSeries,
    MacroSeriesSummary,
    OptionContract,
    Quote,
    SearchResult,
)
from omd.core.models.provider import (
    DEFAULT_PRIORITY,
    ProviderFailure,
    ProviderOutcome,
    ProviderResult,
    RateLimitConfig,
    RouteOptions,
    SourceInfo,
)

__all__ = [
    "DataCategory",
    "FailureKind",
    "DEFAULT_PRIORITY",
    "RateLimitConfig",
    "ProviderResult",
    "ProviderFailure",
    "ProviderOutcome",
    "RouteOptions",
    "SourceInfo",
    "SearchResult",
    "CryptoQuote",
    "CryptoPrice",
    "CryptoCandle",
    "MacroDataPoint",
    "MacroSeries",
    "MacroSeriesSummary",
    "MacroCategory",
    "Quote",
    "HistoricalQuote",
    "FinancialStatement",
    "Filing",
    "InsiderTransaction",
    "OptionContract",
    "EarningsData",
    "DividendEvent",
]
