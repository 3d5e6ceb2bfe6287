from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from omd.cli import utils as utils_module
from omd.cli.main import create_app
from omd.core.exceptions import NetworkError
from omd.core.models import CryptoQuote, DataCategory


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def app(monkeypatch, router):
    monkeypatch.setattr(utils_module, "create_router", lambda: router)
    return create_app()


def _error_payload(output: str) -> dict[str, object]:
    line = next(line for line in output.splitlines() if line.startswith('{"code"'))
    return json.loads(line)


def test_get_json_output(runner, app, router, make_provider) -> None:
    provider = make_provider(
        "binance",
        [DataCategory.CRYPTO],
        outcome=lambda action, args: CryptoQuote(symbol=args["symbol"], price=65000.0, source="binance"),
    )
    router.register_provider(provider)

    result = runner.invoke(app, ["--format", "json", "get", "crypto", "quote", "-a", "symbol=BTC"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["source"] == "binance"
    assert payload["cached"] is False
    assert payload["data"]["symbol"] == "BTC"
    assert payload["data"]["price"] == 65000.0
    assert provider.calls == [("quote", {"symbol": "BTC"})]


def test_get_table_output_reports_source_and_cache(runner, app, router, make_provider) -> None:
    provider = make_provider("a", [DataCategory.QUOTE], outcome={"symbol": "AAPL", "price": 190.5})
    router.register_provider(provider)

    first = runner.invoke(app, ["get", "quote", "get", "--arg", "symbol=AAPL"])
    second = runner.invoke(app, ["get", "quote", "get", "--arg", "symbol=AAPL"])

    assert first.exit_code == 0, first.output
    assert "AAPL" in first.output
    assert "190.5" in first.output
    assert "Source: a" in first.output
    assert "(cached)" not in first.output
    assert "Source: a (cached)" in second.output
    assert len(provider.calls) == 1


def test_get_no_cache_and_forced_source(runner, app, router, make_provider) -> None:
    router.register_provider(make_provider("a", [DataCategory.QUOTE], priority={DataCategory.QUOTE: 1}))
    b = make_provider("b", [DataCategory.QUOTE], priority={DataCategory.QUOTE: 2})
    router.register_provider(b)

    for _ in range(2):
        result = runner.invoke(app, ["--format", "json", "get", "quote", "get", "--source", "b", "--no-cache"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["source"] == "b"
    assert len(b.calls) == 2


def test_get_all_providers_failed(runner, app, router, make_provider) -> None:
    router.register_provider(make_provider("a", [DataCategory.QUOTE], outcome=NetworkError("down", "a")))

    result = runner.invoke(app, ["get", "quote", "get"])

    assert result.exit_code == 1
    payload = _error_payload(result.output)
    assert payload["code"] == "ALL_PROVIDERS_FAILED"
    assert payload["message"] == "All providers failed for quote/get (tried: a): down"


def test_get_malformed_payload_is_reported_not_raised(runner, app, router, make_provider) -> None:
    def malformed(action, args):
        return {}["lastPrice"]

    router.register_provider(make_provider("a", [DataCategory.QUOTE], outcome=malformed))

    result = runner.invoke(app, ["get", "quote", "get", "-a", "symbol=AAPL"])

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    payload = _error_payload(result.output)
    assert payload["code"] == "ALL_PROVIDERS_FAILED"
    assert "KeyError" in payload["message"]


def test_get_unknown_source(runner, app, router, make_provider) -> None:
    router.register_provider(make_provider("a", [DataCategory.QUOTE]))

    result = runner.invoke(app, ["get", "quote", "get", "--source", "nope"])

    assert result.exit_code == 1
    assert _error_payload(result.output)["code"] == "SOURCE_NOT_AVAILABLE"


def test_get_no_providers(runner, app) -> None:
    result = runner.invoke(app, ["get", "macro", "get", "-a", "series_id=GDP"])

    assert result.exit_code == 1
    assert _error_payload(result.output)["code"] == "NO_PROVIDERS_AVAILABLE"


def test_get_unknown_category(runner, app) -> None:
    result = runner.invoke(app, ["get", "stocks", "quote"])

    assert result.exit_code == 2
    payload = _error_payload(result.output)
    assert payload["code"] == "INVALID_CATEGORY"
    assert "crypto" in payload["message"]


def test_get_rejects_malformed_argument(runner, app, router, make_provider) -> None:
    router.register_provider(make_provider("a", [DataCategory.QUOTE]))

    result = runner.invoke(app, ["get", "quote", "get", "-a", "symbol"])

    assert result.exit_code == 2
    assert "key=value" in result.output


def test_invalid_format_is_rejected(runner, app) -> None:
    result = runner.invoke(app, ["--format", "xml", "sources"])
    assert result.exit_code == 2
