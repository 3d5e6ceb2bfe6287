"""Data category enums."""

from enum import Enum


class DataCategory(str, Enum):
    """数据类别枚举."""

    SEARCH = "search"
    QUOTE = "quote"
    FINANCIALS = "financials"
    FILING = "filing"
    INSIDERS = "insiders"
    MACRO = "macro"
    CRYPTO = "crypto"
    HISTORY = "history"
    OPTIONS = "options"
    EARNINGS = "earnings"
    DIVIDENDS = "dividends"


class FailureKind(str, Enum):
    """提供商执行失败类型."""

    UNSUPPORTED = "unsupported"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    INVALID_REQUEST = "invalid_request"
    NETWORK = "network"
    UPSTREAM = "upstream"
