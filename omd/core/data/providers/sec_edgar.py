"""SEC EDGAR provider: filings, XBRL financials, Form 4 insiders and company search."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from omd.core.data.providers.base import HttpDataProvider
from omd.core.exceptions import DataNotFoundError, ProviderError, UnsupportedActionError
from omd.core.logging import bind
from omd.core.models import (
    DataCategory,
    Filing,
    FinancialStatement,
    InsiderTransaction,
    RateLimitConfig,
    SearchResult,
)

TICKERS_URL = "https://www.sec.gov/files/company_tickers.json"
FULL_TEXT_SEARCH_URL = "https://efts.sec.gov/LATEST/search-index"
DEFAULT_EDGAR_USER_AGENT = "open-market-data/0.1.0 (dev@open-market-data.dev)"

# XBRL us-gaap 标签 -> FinancialStatement 字段 (按优先顺序)
XBRL_FIELDS: dict[str, tuple[str, ...]] = {
    "revenue": ("Revenues", "RevenueFromContractWithCustomerExcludingAssessedTax"),
    "gross_profit": ("GrossProfit",),
    "operating_income": ("OperatingIncomeLoss",),
    "net_income": ("NetIncomeLoss",),
    "eps": ("EarningsPerShareBasic",),
    "eps_diluted": ("EarningsPerShareDiluted",),
    "total_assets": ("Assets",),
    "total_liabilities": ("Liabilities",),
    "stockholders_equity": ("StockholdersEquity",),
    "operating_cash_flow": ("NetCashProvidedByOperatingActivities",),
    "long_term_debt": ("LongTermDebt", "LongTermDebtNoncurrent"),
    "shares_outstanding": ("CommonStockSharesOutstanding",),
}
LIABILITY_PARTS = ("LiabilitiesCurrent", "LiabilitiesNoncurrent")
UNIT_PREFERENCE = ("USD", "USD/shares", "shares")
MAX_STATEMENTS = 10


def pad_cik(cik: int) -> str:
    return f"CIK{cik:010d}"


def group_facts_by_period(us_gaap: dict[str, Any] | None, form: str) -> dict[str, dict[str, Any]]:
    """Collect the values of every known tag per fiscal period (``FY-2023``, ``Q1-2024``).

    Later entries overwrite earlier ones, so restated values win. ``_end``
    keeps the period end date for sorting.
    """
    periods: dict[str, dict[str, Any]] = {}
    if not us_gaap:
        return periods

    tags = [tag for tags in XBRL_FIELDS.values() for tag in tags] + list(LIABILITY_PARTS)
    for tag in tags:
        concept = us_gaap.get(tag)
        if not concept:
            continue
        units = concept.get("units") or {}
        entries = next((units[u] for u in UNIT_PREFERENCE if u in units), None)
        if entries is None and units:
            entries = next(iter(units.values()))
        for entry in entries or []:
            if entry.get("form") != form:
                continue
            facts = periods.setdefault(f"{entry['fp']}-{entry['fy']}", {})
            facts[tag] = entry["val"]
            facts["_end"] = entry["end"]
    return periods


def build_statement(period: str, facts: dict[str, Any], source: str) -> FinancialStatement:
    values: dict[str, Any] = {}
    for field_name, tags in XBRL_FIELDS.items():
        values[field_name] = next((facts[tag] for tag in tags if tag in facts), None)
    if values["total_liabilities"] is None and any(part in facts for part in LIABILITY_PARTS):
        values["total_liabilities"] = sum(facts.get(part, 0) for part in LIABILITY_PARTS)
    return FinancialStatement(period=period, date=facts.get("_end", "unknown"), source=source, **values)


class SecEdgarProvider(HttpDataProvider):
    """Keyless access to EDGAR. The SEC asks for a descriptive ``User-Agent``."""

    name = "sec-edgar"
    base_url = "https://data.sec.gov"
    capabilities = frozenset(
        {DataCategory.SEARCH, DataCategory.FINANCIALS, DataCategory.FILING, DataCategory.INSIDERS}
    )
    priority = MappingProxyType(
        {DataCategory.SEARCH: 2, DataCategory.FINANCIALS: 1, DataCategory.FILING: 1, DataCategory.INSIDERS: 1}
    )
    rate_limits = RateLimitConfig(max_requests=10, window_ms=1000)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._tickers: dict[str, tuple[int, str]] | None = None
        self._warned_user_agent = False

    def _headers(self) -> dict[str, str]:
        user_agent = self.config.edgar_user_agent
        if not user_agent:
            if not self._warned_user_agent:
                self._warned_user_agent = True
                bind(provider=self.name).warning(
                    "Using the default EDGAR User-Agent. Set EDGAR_USER_AGENT or run: "
                    'omd config set edgar_user_agent "YourApp/1.0 (you@example.com)"'
                )
            user_agent = DEFAULT_EDGAR_USER_AGENT
        return {"User-Agent": user_agent, "Accept": "application/json"}

    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        route = f"{category.value}/{action}"
        if route == "search/search":
            return await self.search(
                self.require_arg(args, "query"),
                start=args.get("start_date"),
                end=args.get("end_date"),
                forms=args.get("forms"),
            )
        if route == "financials/get":
            return await self.get_financials(self.require_arg(args, "symbol"), args.get("period") or "annual")
        if route == "filing/list":
            return await self.list_filings(
                self.require_arg(args, "symbol"),
                form=args.get("type"),
                limit=1 if _truthy(args.get("latest")) else self.int_arg(args, "limit", 20),
            )
        if route == "insiders/list":
            return await self.list_insiders(self.require_arg(args, "symbol"))
        raise UnsupportedActionError(self.name, category.value, action)

    async def load_tickers(self) -> dict[str, tuple[int, str]]:
        """Ticker -> (CIK, company name), downloaded once per provider instance."""
        if self._tickers is None:
            data = await self._get_json(TICKERS_URL)
            self._tickers = {
                entry["ticker"].upper(): (int(entry["cik_str"]), entry["title"]) for entry in data.values()
            }
        return self._tickers

    async def lookup(self, symbol: str) -> tuple[int, str]:
        tickers = await self.load_tickers()
        entry = tickers.get(symbol.upper())
        if entry is None:
            raise DataNotFoundError(f'Ticker "{symbol}" not found in SEC EDGAR database', self.name)
        return entry

    async def search(
        self,
        query: str,
        start: str | None = None,
        end: str | None = None,
        forms: str | None = None,
    ) -> list[SearchResult]:
        needle = query.upper()
        results: list[SearchResult] = []
        for ticker, (_, company) in (await self.load_tickers()).items():
            if needle in ticker or needle in company.upper():
                results.append(SearchResult(symbol=ticker, name=company, type="equity", source=self.name))
                if len(results) >= 10:
                    break

        try:
            data = await self._get_json(
                FULL_TEXT_SEARCH_URL, {"q": query, "startdt": start, "enddt": end, "forms": forms}
            )
        except ProviderError as exc:
            # 全文检索失败时仍返回代码表匹配结果
            bind(provider=self.name, error_code=exc.error_code.value).debug("Full-text search skipped: {}", exc)
            return results

        names = {r.name for r in results}
        for hit in ((data.get("hits") or {}).get("hits") or [])[:10]:
            entity = hit.get("entity_name") or "Unknown"
            if entity in names:
                continue
            names.add(entity)
            results.append(
                SearchResult(
                    symbol=hit.get("file_num") or "",
                    name=entity,
                    type=hit.get("form_type") or "filing",
                    source=self.name,
                )
            )
        return results

    async def get_financials(self, symbol: str, period: str = "annual") -> list[FinancialStatement]:
        cik, _ = await self.lookup(symbol)
        body = await self._get_json(f"/api/xbrl/companyfacts/{pad_cik(cik)}.json")
        form = "10-Q" if period == "quarterly" else "10-K"
        periods = group_facts_by_period((body.get("facts") or {}).get("us-gaap"), form)
        statements = [build_statement(key, facts, self.name) for key, facts in periods.items()]
        statements.sort(key=lambda s: s.date, reverse=True)
        return statements[:MAX_STATEMENTS]

    async def list_filings(self, symbol: str, form: str | None = None, limit: int | None = 20) -> list[Filing]:
        cik, _ = await self.lookup(symbol)
        body = await self._get_json(f"/submissions/{pad_cik(cik)}.json")
        recent = (body.get("filings") or {}).get("recent")
        if not recent:
            return []

        filings: list[Filing] = []
        for i, accession in enumerate(recent["accessionNumber"]):
            if form and recent["form"][i] != form:
                continue
            filings.append(
                Filing(
                    accession_number=accession,
                    form=recent["form"][i],
                    filing_date=recent["filingDate"][i],
                    report_date=recent["reportDate"][i] or None,
                    primary_document=recent["primaryDocument"][i] or None,
                    description=recent["primaryDocDescription"][i] or None,
                    source=self.name,
                )
            )
            if limit and len(filings) >= limit:
                break
        return filings

    async def list_insiders(self, symbol: str) -> list[InsiderTransaction]:
        """Recent Form 4 filings naming the company. Share counts are not in the search index."""
        _, company = await self.lookup(symbol)
        data = await self._get_json(FULL_TEXT_SEARCH_URL, {"forms": "4", "entityName": company})
        transactions = []
        for hit in ((data.get("hits") or {}).get("hits") or [])[:20]:
            display_names = hit.get("display_names") or []
            transactions.append(
                InsiderTransaction(
                    name=display_names[0] if display_names else hit.get("entity_name") or "Unknown",
                    transaction_date=hit.get("file_date") or "unknown",
                    transaction_type="Form 4",
                    accession_number=hit.get("_id"),
                    source=self.name,
                )
            )
        return transactions


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


__all__ = ["SecEdgarProvider", "pad_cik", "group_facts_by_period", "build_statement"]
