"""缓存键生成和TTL策略."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from omd.core.models.enums import DataCategory

# 各类别缓存时间(毫秒): 行情类短，基本面类长
CATEGORY_TTL_MS: dict[DataCategory, int] = {
    DataCategory.SEARCH: 300_000,  # 5分钟
    DataCategory.QUOTE: 30_000,  # 30秒
    DataCategory.FINANCIALS: 3_600_000,  # 1小时
    DataCategory.FILING: 3_600_000,
    DataCategory.INSIDERS: 3_600_000,
    DataCategory.MACRO: 3_600_000,
    DataCategory.CRYPTO: 15_000,  # 15秒
    DataCategory.HISTORY: 3_600_000,
    DataCategory.OPTIONS: 60_000,  # 1分钟
    DataCategory.EARNINGS: 3_600_000,
    DataCategory.DIVIDENDS: 3_600_000,
}


def _serialize(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def make_cache_key(provider: str, category: DataCategory | str, args: Mapping[str, Any]) -> str:
    """生成与参数顺序无关的缓存键.

    >>> make_cache_key("yahoo", DataCategory.QUOTE, {"symbol": "AAPL", "action": "get"})
    'yahoo:quote:action="get"&symbol="AAPL"'
    """
    category_value = category.value if isinstance(category, DataCategory) else str(category)
    rendered = "&".join(f"{key}={_serialize(args[key])}" for key in sorted(args))
    return f"{provider}:{category_value}:{rendered}"
