"""Provider-facing routing models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

from pydantic import BaseModel, Field

from omd.core.models.enums import DataCategory, FailureKind

# Priority used for categories a provider does not rank explicitly.
DEFAULT_PRIORITY = 99


@dataclass(frozen=True)
class RateLimitConfig:
    """Token bucket sizing for a single provider."""

    max_requests: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if self.window_ms <= 0:
            raise ValueError("window_ms must be positive")

    def describe(self) -> str:
        """Human readable rate, e.g. ``30/min``."""
        if self.window_ms < 2_000:
            unit = "sec"
        elif self.window_ms < 120_000:
            unit = "min"
        else:
            unit = "day"
        return f"{self.max_requests}/{unit}"


class ProviderResult(BaseModel):
    """Successful provider response."""

    data: Any
    source: str
    cached: bool = False


class ProviderFailure(BaseModel):
    """Typed provider failure returned instead of raising."""

    source: str
    kind: FailureKind
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"provider": self.source, "kind": self.kind.value, "message": self.message}


ProviderOutcome: TypeAlias = ProviderResult | ProviderFailure


@dataclass(slots=True)
class RouteOptions:
    """Per-call routing overrides."""

    source: str | None = None
    no_cache: bool = False


class SourceInfo(BaseModel):
    """Status snapshot of a registered provider."""

    name: str
    enabled: bool
    requires_key: bool
    key_configured: bool
    categories: list[DataCategory] = Field(default_factory=list)
    rate_limit: str
    remaining: int
    disabled_reason: str | None = None

    @property
    def key_status(self) -> str:
        if not self.requires_key:
            return "none"
        return "configured" if self.key_configured else "missing"
