"""``omd config`` command group."""

from __future__ import annotations

import json
import sys

import typer

from omd.core.config import CREDENTIAL_ENV_VARS, ConfigManager
from omd.core.exceptions import ConfigurationError

from .formatters import create_formatter
from .utils import VALIDATION_EXIT_CODE, exit_with_error, get_cli_options

config_app = typer.Typer(help="Inspect and edit the configuration file.")

SECRET_FIELDS = frozenset(CREDENTIAL_ENV_VARS.values()) - {"edgar_user_agent"}


def register(app: typer.Typer) -> None:
    """Register the config command group on the provided application."""

    app.add_typer(config_app, name="config", help="Manage omd configuration")


def get_config_manager(load_env: bool = True) -> ConfigManager:
    """Factory hook for obtaining a :class:`ConfigManager`."""

    return ConfigManager(load_env=load_env)


def mask_secret(value: str) -> str:
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"


@config_app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Show the effective configuration (file overlaid with environment)."""

    options = get_cli_options(ctx)
    config = get_config_manager().get_config().to_dict()
    for field_name in SECRET_FIELDS:
        if config.get(field_name):
            config[field_name] = mask_secret(config[field_name])

    if options.format == "json":
        json.dump(config, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        return

    for key, value in _flatten(config):
        typer.echo(f"{key} = {value}")


@config_app.command("set")
def set_command(
    key: str = typer.Argument(..., help="Key to set, e.g. fred_api_key or cache.max_entries."),
    value: str = typer.Argument(..., help="New value."),
) -> None:
    """Write a single value to the configuration file."""

    # File contents only, no env overlay
    manager = get_config_manager(load_env=False)
    try:
        if key == "default_format":
            _validate_format(value)
        manager.set_value(key, value)
    except ConfigurationError as exc:
        exit_with_error(exc, VALIDATION_EXIT_CODE)
        return
    manager.save_config()
    typer.echo(f"Set {key} in {manager.config_path}")


@config_app.command("path")
def path_command() -> None:
    """Print the configuration file location."""

    typer.echo(str(get_config_manager(load_env=False).config_path))


def _validate_format(value: str) -> None:
    try:
        create_formatter(value)
    except ValueError as exc:
        raise ConfigurationError(str(exc), config_key="default_format") from exc


def _flatten(values: dict, prefix: str = "") -> list[tuple[str, object]]:
    items: list[tuple[str, object]] = []
    for key, value in values.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            items.extend(_flatten(value, f"{name}."))
        elif isinstance(value, list):
            items.append((name, ",".join(str(v) for v in value)))
        else:
            items.append((name, value))
    return items


__all__ = ["config_app", "get_config_manager", "mask_secret", "register"]
