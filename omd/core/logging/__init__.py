"""Structured logging for omd."""

from omd.core.logging.config import LogConfig
from omd.core.logging.logger import (
    ROUTING_FIELDS,
    JsonLineSink,
    apply_config,
    bind,
    configure_logging,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "JsonLineSink",
    "ROUTING_FIELDS",
    "apply_config",
    "bind",
    "configure_logging",
    "log_context",
    "logger",
]
