"""
Data provider abstraction.

Every data source is a :class:`DataProvider` subclass declaring its name,
capabilities, per-category priority and rate limits. ``execute`` never raises
for provider-side problems: adapters raise :class:`ProviderError` subclasses
from ``_fetch`` and ``execute`` folds them into a typed
:class:`ProviderFailure`, so the router can fall back on the failure kind.
Anything else escaping ``_fetch`` (a payload with an unexpected shape, say)
becomes an ``upstream`` failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import httpx

from omd import __version__
from omd.core.config import OmdConfig
from omd.core.data.ratelimit import TokenBucketRateLimiter
from omd.core.exceptions import (
    AuthenticationError,
    DataNotFoundError,
    ErrorCode,
    InvalidRequestError,
    NetworkError,
    ProviderError,
    RateLimitError,
    UpstreamError,
)
from omd.core.logging import bind
from omd.core.models import (
    DEFAULT_PRIORITY,
    DataCategory,
    FailureKind,
    ProviderFailure,
    ProviderOutcome,
    ProviderResult,
    RateLimitConfig,
)

USER_AGENT = f"omd/{__version__}"


class DataProvider(ABC):
    """Abstract base class for data providers."""

    name: str
    requires_key: bool = False
    key_env_var: str | None = None
    key_config_field: str | None = None
    capabilities: frozenset[DataCategory] = frozenset()
    priority: Mapping[DataCategory, int] = MappingProxyType({})
    rate_limits: RateLimitConfig = RateLimitConfig(max_requests=60, window_ms=60_000)

    def __init__(
        self,
        rate_limiter: TokenBucketRateLimiter | None = None,
        config: OmdConfig | None = None,
    ) -> None:
        self.rate_limiter = rate_limiter or TokenBucketRateLimiter()
        self.config = config or OmdConfig()

    @property
    def api_key(self) -> str | None:
        if not self.key_config_field:
            return None
        return self.config.get_api_key(self.key_config_field)

    def is_enabled(self) -> bool:
        """Whether the provider can currently serve requests."""
        return not self.requires_key or self.api_key is not None

    def disabled_reason(self) -> str | None:
        """Explain why ``is_enabled`` is false, ``None`` when enabled."""
        if self.is_enabled():
            return None
        if self.requires_key and self.api_key is None:
            hint = f"set {self.key_env_var}" if self.key_env_var else "configure a key"
            return f"API key not configured ({hint})"
        return "provider is disabled"

    def supports(self, category: DataCategory | str) -> bool:
        return DataCategory(category) in self.capabilities

    def get_priority(self, category: DataCategory | str) -> int:
        return self.priority.get(DataCategory(category), DEFAULT_PRIORITY)

    async def execute(
        self, category: DataCategory | str, action: str, args: Mapping[str, Any]
    ) -> ProviderOutcome:
        """Run one request and return either a result or a typed failure."""
        category = DataCategory(category)
        try:
            data = await self._fetch(category, action, dict(args))
        except ProviderError as exc:
            bind(provider=self.name, error_code=exc.error_code.value).debug(
                "Provider {} failed {}/{}: {}", self.name, category.value, action, exc.message
            )
            return ProviderFailure(source=self.name, kind=exc.failure_kind, message=exc.message)
        except Exception as exc:
            message = (
                f"{self.name} returned an unusable response for {category.value}/{action}: "
                f"{type(exc).__name__}: {exc}"
            )
            bind(provider=self.name, error_code=ErrorCode.UPSTREAM_ERROR.value).opt(exception=exc).debug("{}", message)
            return ProviderFailure(source=self.name, kind=FailureKind.UPSTREAM, message=message)
        return ProviderResult(data=data, source=self.name, cached=False)

    @abstractmethod
    async def _fetch(self, category: DataCategory, action: str, args: dict[str, Any]) -> Any:
        """Perform the request; raise ``ProviderError`` subclasses on failure."""

    def consume_token(self) -> None:
        """Take one token from this provider's bucket or raise ``RateLimitError``."""
        if not self.rate_limiter.consume_token(self.name, self.rate_limits):
            raise RateLimitError(f"{self.name} rate limit exceeded", self.name)

    def require_arg(self, args: Mapping[str, Any], key: str) -> Any:
        value = args.get(key)
        if value is None or value == "":
            raise InvalidRequestError(f"{key} is required", self.name, {"argument": key})
        return value

    def int_arg(self, args: Mapping[str, Any], key: str, default: int | None = None) -> int | None:
        value = args.get(key)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise InvalidRequestError(f"{key} must be an integer, got {value!r}", self.name) from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class HttpDataProvider(DataProvider):
    """Provider backed by a JSON HTTP API."""

    base_url: str

    def __init__(
        self,
        rate_limiter: TokenBucketRateLimiter | None = None,
        config: OmdConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(rate_limiter, config)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": USER_AGENT}

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.config.providers.timeout),
            headers=self._headers(),
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET ``path`` and decode JSON, consuming one rate-limit token first."""
        self.consume_token()
        query = {key: value for key, value in (params or {}).items() if value is not None and value != ""}

        try:
            async with self._create_client() as client:
                response = await client.get(path, params=query)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"{self.name} request timed out", self.name) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"{self.name} request failed: {exc}", self.name) from exc

        self._raise_for_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"{self.name} returned invalid JSON", self.name, response.status_code) from exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return
        body = response.text[:200]
        message = f"{self.name} API error {status}: {body}"
        if status == 404:
            raise DataNotFoundError(message, self.name, {"status_code": status})
        if status in (401, 403):
            raise AuthenticationError(message, self.name, self.key_env_var)
        if status == 429:
            raise RateLimitError(message, self.name, {"status_code": status})
        raise UpstreamError(message, self.name, status)
