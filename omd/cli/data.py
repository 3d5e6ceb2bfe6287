"""``omd get`` command: route one request and render the result."""

from __future__ import annotations

import asyncio
import json
import sys

import typer

from omd.core.exceptions import OmdError
from omd.core.models import DataCategory, RouteOptions

from .formatters import create_formatter, to_rows
from .utils import VALIDATION_EXIT_CODE, emit_error, exit_with_error, get_cli_options, get_router, parse_key_values


def register(app: typer.Typer) -> None:
    """Register the ``get`` command on the provided application."""

    app.command("get")(get_command)


def get_command(
    ctx: typer.Context,
    category: str = typer.Argument(..., help="Data category, e.g. crypto or macro."),
    action: str = typer.Argument(..., help="Provider action, e.g. quote or history."),
    arg: list[str] | None = typer.Option(
        None,
        "--arg",
        "-a",
        help="Request argument as key=value. Repeatable.",
    ),
    source: str | None = typer.Option(None, "--source", "-s", help="Force a single data source."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the result cache."),
) -> None:
    """Fetch data for CATEGORY/ACTION from the best available source."""

    options = get_cli_options(ctx)
    try:
        resolved_category = DataCategory(category.strip().lower())
    except ValueError as exc:
        valid = ", ".join(c.value for c in DataCategory)
        emit_error(f"Unknown category '{category}'. Valid categories: {valid}", "INVALID_CATEGORY")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

    args = parse_key_values(arg or [])
    router = get_router(ctx)
    try:
        result = asyncio.run(
            router.route(resolved_category, action, args, RouteOptions(source=source, no_cache=no_cache))
        )
    except OmdError as exc:
        exit_with_error(exc)
        return

    if options.format == "json":
        json.dump(result.model_dump(mode="json"), sys.stdout, ensure_ascii=False, default=str, indent=2)
        sys.stdout.write("\n")
        return

    formatter = create_formatter(options.format, no_color=options.no_color)
    formatter.render(to_rows(result.data), stream=sys.stdout)
    suffix = " (cached)" if result.cached else ""
    typer.echo(f"Source: {result.source}{suffix}", err=True)


__all__ = ["get_command", "register"]
