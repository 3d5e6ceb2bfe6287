"""Utility helpers shared across CLI commands."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Mapping

import typer

from omd.core.context import create_default_context
from omd.core.exceptions import OmdError
from omd.core.services import DataRouter

ROUTING_EXIT_CODE = 1
VALIDATION_EXIT_CODE = 2


@dataclass(slots=True)
class CLIOptions:
    """Resolved options derived from the Typer context."""

    format: str = "table"
    no_color: bool = False


def get_cli_options(ctx: typer.Context) -> CLIOptions:
    """Extract :class:`CLIOptions` from the Typer context object."""

    ctx.ensure_object(dict)
    data = ctx.obj or {}
    return CLIOptions(
        format=str(data.get("format", "table")),
        no_color=bool(data.get("no_color", False)),
    )


def create_router() -> DataRouter:
    """Factory hook for obtaining a :class:`DataRouter` with the built-in providers."""

    return DataRouter(create_default_context())


def get_router(ctx: typer.Context) -> DataRouter:
    """Return the router stored on the context, building it lazily."""

    ctx.ensure_object(dict)
    router = ctx.obj.get("router")
    if router is None:
        router = create_router()
        ctx.obj["router"] = router
    return router


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = dict(details)
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


def exit_with_error(exc: OmdError, exit_code: int = ROUTING_EXIT_CODE) -> None:
    payload = exc.to_payload()
    emit_error(payload["message"], payload["code"], details=payload.get("details"))
    raise typer.Exit(code=exit_code) from exc


def parse_key_values(pairs: list[str]) -> dict[str, str]:
    """Parse ``key=value`` arguments into a dictionary."""

    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--arg")
        parsed[key.strip()] = value.strip()
    return parsed


__all__ = [
    "CLIOptions",
    "ROUTING_EXIT_CODE",
    "VALIDATION_EXIT_CODE",
    "emit_error",
    "exit_with_error",
    "create_router",
    "get_cli_options",
    "get_router",
    "parse_key_values",
]
