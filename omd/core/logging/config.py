"""Logging settings."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class LogConfig(BaseModel):
    """Where routing logs go and at which level.

    ``stream`` defaults to ``sys.stderr`` so command output on stdout stays
    machine readable. ``file_path`` adds a JSON-lines file next to it.
    """

    level: str = "WARNING"
    stream: Any = None
    file_path: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


__all__ = ["LogConfig"]
