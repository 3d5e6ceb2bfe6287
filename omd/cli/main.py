"""Main entry point for the omd command line interface."""

from __future__ import annotations

import typer

from omd.core.config import ConfigManager
from omd.core.logging import configure_logging

from .config import register as register_config_commands
from .data import register as register_data_commands
from .formatters import create_formatter
from .sources import register as register_sources_commands


def create_app() -> typer.Typer:
    """Create a Typer application instance for omd."""

    app = typer.Typer(add_completion=False, help="omd - open market data from the command line")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str | None = typer.Option(
            None,
            "--format",
            "-f",
            help="Output format (table or json). Defaults to default_format from the config file.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Log level for the stderr JSON log sink. Defaults to logging.level from the config file.",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output for table format.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        settings = ConfigManager().get_config()
        normalized_format = (format or settings.default_format).strip().lower()
        try:
            create_formatter(normalized_format, no_color=no_color)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--format") from exc

        level = (log_level or settings.logging.level).upper()
        ctx.obj.update(
            {
                "format": normalized_format,
                "log_level": level,
                "no_color": no_color,
            }
        )
        try:
            configure_logging(level, file_path=settings.logging.file)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--log-level") from exc

    register_sources_commands(app)
    register_data_commands(app)
    register_config_commands(app)
    return app


app = create_app()
