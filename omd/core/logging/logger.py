"""JSON-lines logging on top of loguru.

Every record carries the routing fields (``trace_id``, ``category``,
``action``, ``provider``, ``error_code``). They are taken from ``bind(...)``
first and from the surrounding :func:`log_context` second. Anything else that
was bound ends up under ``context``.
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import IO, Any, Iterator
from uuid import uuid4

from loguru import logger

from omd.core.logging.config import LogConfig

ROUTING_FIELDS = ("trace_id", "category", "action", "provider", "error_code")

_TRACE_ID: ContextVar[str | None] = ContextVar("omd_trace_id", default=None)
_FIELDS: ContextVar[dict[str, Any]] = ContextVar("omd_log_fields", default={})


def _inject_fields(record: dict[str, Any]) -> None:
    extra = record["extra"]
    for key, value in _FIELDS.get().items():
        if extra.get(key) is None:
            extra[key] = value
    if not extra.get("trace_id"):
        extra["trace_id"] = _TRACE_ID.get() or uuid4().hex


def _to_json(record: dict[str, Any]) -> str:
    extra = record["extra"]
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
    }
    for key in ROUTING_FIELDS:
        payload[key] = extra.get(key)
    context = {key: value for key, value in extra.items() if key not in ROUTING_FIELDS}
    if context:
        payload["context"] = context
    if record["exception"] is not None:
        payload["exception"] = repr(record["exception"].value)
    return json.dumps(payload, ensure_ascii=False, default=str)


class JsonLineSink:
    """Write one JSON document per record to a text stream or an append-only file."""

    def __init__(self, stream: IO[str] | None = None, path: str | Path | None = None) -> None:
        if (stream is None) == (path is None):
            raise ValueError("JsonLineSink needs exactly one of stream or path")
        self._stream = stream
        self._path = Path(path) if path is not None else None
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, message: Any) -> None:
        line = _to_json(message.record) + "\n"
        if self._path is not None:
            with self._path.open("a", encoding="utf-8") as file:
                file.write(line)
            return
        self._stream.write(line)
        self._stream.flush()


def apply_config(config: LogConfig) -> None:
    """Replace all loguru handlers according to ``config``."""
    level = config.level.upper()
    handlers: list[dict[str, Any]] = [{"sink": JsonLineSink(stream=config.stream or sys.stderr), "level": level}]
    if config.file_path:
        handlers.append({"sink": JsonLineSink(path=config.file_path), "level": level})
    logger.configure(handlers=handlers, patcher=_inject_fields, extra=dict(config.extra))


def configure_logging(level: str = "WARNING", **kwargs: Any) -> None:
    """Shortcut for ``apply_config(LogConfig(level=level, ...))``."""
    apply_config(LogConfig(level=level, **kwargs))


def bind(**kwargs: Any) -> Any:
    return logger.bind(**kwargs)


@contextmanager
def log_context(*, trace_id: str | None = None, **fields: Any) -> Iterator[str]:
    """Attach ``fields`` and a trace id to every record logged inside the block.

    Nested blocks inherit the outer trace id unless one is passed explicitly.
    """
    active = trace_id or _TRACE_ID.get() or uuid4().hex
    trace_token = _TRACE_ID.set(active)
    fields_token = _FIELDS.set({**_FIELDS.get(), **fields})
    try:
        yield active
    finally:
        _FIELDS.reset(fields_token)
        _TRACE_ID.reset(trace_token)


configure_logging()


__all__ = [
    "JsonLineSink",
    "ROUTING_FIELDS",
    "apply_config",
    "bind",
    "configure_logging",
    "log_context",
    "logger",
]
