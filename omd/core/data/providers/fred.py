"""Federal Reserve Economic Data (FRED) provider."""

from __future__ import annotations

import asyncio
import math
from types import MappingProxyType
from typing import Any

from omd.core.data.providers.base import HttpDataProvider
from omd.core.exceptions import AuthenticationError, UnsupportedActionError
from omd.core.models import (
    DataCategory,
    MacroCategory,
    MacroDataPoint,
    MacroSeries,
    MacroSeriesSummary,
    RateLimitConfig,
    SearchResult,
)


class FredProvider(HttpDataProvider):
    """Macro-economic series from the St. Louis Fed."""

    name = "fred"
    base_url = "https://api.stlouisfed.org/fred"
    requires_key = True
    key_env_var = "FRED_API_KEY"
    key_config_field = "fred_api_key"
    capabilities = frozenset({DataCategory.MACRO, DataCategory.SEARCH})
    priority = MappingProxyType({DataCategory.MACRO: 1, DataCategory.SEARCH: 5})
    rate_limits = RateLimitConfig(max_requests=120, window_ms=60_000)

    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        route = f"{category.value}/{action}"
        if route == "macro/get":
            return await self.get_series(
                self.require_arg(args, "series_id"),
                start=args.get("start"),
                end=args.get("end"),
                limit=self.int_arg(args, "limit"),
            )
        if route == "macro/search":
            return await self.search_series(self.require_arg(args, "query"), self.int_arg(args, "limit", 20))
        if route == "macro/categories":
            return await self.get_categories(self.int_arg(args, "category_id", 0))
        if route == "search/search":
            series = await self.search_series(self.require_arg(args, "query"), self.int_arg(args, "limit", 20))
            return [SearchResult(symbol=s.id, name=s.title, type="macro-series", source=self.name) for s in series]
        raise UnsupportedActionError(self.name, category.value, action)

    async def _fred_get(self, path: str, params: dict[str, Any]) -> Any:
        api_key = self.api_key
        if api_key is None:
            raise AuthenticationError(
                "FRED API key not configured. Set FRED_API_KEY env var or run: omd config set fred_api_key <key>",
                self.name,
                self.key_env_var,
            )
        return await self._get_json(path, {**params, "api_key": api_key, "file_type": "json"})

    async def get_series(
        self,
        series_id: str,
        start: str | None = None,
        end: str | None = None,
        limit: int | None = None,
    ) -> MacroSeries:
        observations, metadata = await asyncio.gather(
            self._fred_get(
                "/series/observations",
                {"series_id": series_id, "observation_start": start, "observation_end": end, "limit": limit},
            ),
            self._fred_get("/series", {"series_id": series_id}),
        )

        points = []
        for obs in observations.get("observations", []):
            # FRED marks missing observations with "."
            if obs["value"] == ".":
                continue
            try:
                value = float(obs["value"])
            except ValueError:
                continue
            if not math.isnan(value):
                points.append(MacroDataPoint(date=obs["date"], value=value))

        meta = (metadata.get("seriess") or [{}])[0]
        return MacroSeries(
            id=meta.get("id", series_id),
            title=meta.get("title", series_id),
            units=meta.get("units"),
            frequency=meta.get("frequency"),
            seasonal_adjustment=meta.get("seasonal_adjustment"),
            data=points,
            source=self.name,
        )

    async def search_series(self, query: str, limit: int | None = 20) -> list[MacroSeriesSummary]:
        data = await self._fred_get(
            "/series/search",
            {"search_text": query, "limit": limit, "order_by": "popularity", "sort_order": "desc"},
        )
        return [
            MacroSeriesSummary(
                id=s["id"],
                title=s["title"],
                units=s.get("units"),
                frequency=s.get("frequency"),
                seasonal_adjustment=s.get("seasonal_adjustment"),
                popularity=s.get("popularity"),
            )
            for s in data.get("seriess", [])
        ]

    async def get_categories(self, category_id: int | None = 0) -> list[MacroCategory]:
        data = await self._fred_get("/category/children", {"category_id": category_id})
        return [
            MacroCategory(id=c["id"], name=c["name"], parent_id=c["parent_id"])
            for c in data.get("categories", [])
        ]
