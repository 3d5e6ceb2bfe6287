"""Pytest configuration for omd test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

import pytest

from omd.core.context import RoutingContext
from omd.core.data.providers import DataProvider
from omd.core.exceptions import ProviderError
from omd.core.logging import configure_logging
from omd.core.models import DataCategory, RateLimitConfig
from omd.core.services import DataRouter


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--omd-run-integration",
        action="store_true",
        default=False,
        help="Run omd integration tests that require external services.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for omd tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks omd tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--omd-run-integration"):
        return

    omd_skip_integration = pytest.mark.skip(
        reason="integration tests require --omd-run-integration",
    )
    for omd_item in items:
        if "integration" in omd_item.keywords:
            omd_item.add_marker(omd_skip_integration)


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeProvider(DataProvider):
    """In-memory provider whose outcome is set by the test.

    ``outcome`` may be a value to return, a ``ProviderError`` to raise, or a
    callable taking ``(action, args)``.
    """

    def __init__(
        self,
        name: str,
        categories: Iterable[DataCategory],
        *,
        priority: Mapping[DataCategory, int] | None = None,
        outcome: Any = None,
        requires_key: bool = False,
        api_key: str | None = None,
        rate_limits: RateLimitConfig | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.name = name
        self.capabilities = frozenset(categories)
        self.priority = dict(priority or {})
        self.requires_key = requires_key
        self.key_env_var = f"{name.upper()}_API_KEY" if requires_key else None
        self._api_key = api_key
        if rate_limits is not None:
            self.rate_limits = rate_limits
        self.outcome = outcome if outcome is not None else {"provider": name}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    @property
    def api_key(self) -> str | None:
        return self._api_key

    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        self.calls.append((action, args))
        self.consume_token()
        if isinstance(self.outcome, ProviderError):
            raise self.outcome
        if callable(self.outcome):
            return self.outcome(action, args)
        return self.outcome


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context(clock: FakeClock) -> RoutingContext:
    return RoutingContext(clock=clock)


@pytest.fixture
def router(context: RoutingContext) -> DataRouter:
    return DataRouter(context)


@pytest.fixture
def make_provider(context: RoutingContext) -> Callable[..., FakeProvider]:
    """Factory for fake providers bound to the test context's limiter and config."""

    def factory(name: str, categories: Iterable[DataCategory], **kwargs: Any) -> FakeProvider:
        kwargs.setdefault("rate_limiter", context.rate_limiter)
        kwargs.setdefault("config", context.config)
        return FakeProvider(name, categories, **kwargs)

    return factory


_ENV_VARS = (
    "FRED_API_KEY",
    "COINGECKO_API_KEY",
    "FINNHUB_API_KEY",
    "ALPHA_VANTAGE_API_KEY",
    "EDGAR_USER_AGENT",
    "OMD_DISABLED_SOURCES",
    "OMD_CACHE_ENABLED",
    "OMD_CACHE_MAX_ENTRIES",
    "OMD_PROVIDER_TIMEOUT",
    "OMD_LOGGING_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep the user's config file, ``.env`` and credentials out of tests."""

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OMD_CONFIG_PATH", str(tmp_path / "config.toml"))
    monkeypatch.chdir(tmp_path)
    yield
    configure_logging()
