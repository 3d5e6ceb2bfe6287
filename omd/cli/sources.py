"""``omd sources`` command."""

from __future__ import annotations

import sys

import typer

from .formatters import create_formatter
from .utils import get_cli_options, get_router

COLUMNS = ["Source", "Status", "API Key", "Categories", "Rate Limit", "Remaining"]


def register(app: typer.Typer) -> None:
    app.command("sources")(sources_command)


def sources_command(ctx: typer.Context) -> None:
    """List registered data sources with their status and rate limits."""

    options = get_cli_options(ctx)
    router = get_router(ctx)
    rows = []
    for info in router.list_sources():
        if info.enabled:
            status = "enabled"
        else:
            status = f"disabled: {info.disabled_reason}" if info.disabled_reason else "disabled"
        rows.append(
            {
                "Source": info.name,
                "Status": status,
                "API Key": info.key_status,
                "Categories": ", ".join(c.value for c in info.categories),
                "Rate Limit": info.rate_limit,
                "Remaining": info.remaining,
            }
        )
    formatter = create_formatter(options.format, no_color=options.no_color)
    formatter.render(rows, stream=sys.stdout, columns=COLUMNS)


__all__ = ["COLUMNS", "register", "sources_command"]
