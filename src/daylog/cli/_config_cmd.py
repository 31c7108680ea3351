"""CLI commands: daylog config init | show | validate."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from daylog.core.config import DaylogConfig, _config_file_path, load_config, save_config
from daylog.core.constants import ExitCode
from daylog.core.exceptions import ConfigError


def cmd_config_init(obj: dict[str, Any], force: bool, console: Console) -> None:
    """Write a config file holding the defaults (and --root, when given)."""
    cfg_path = Path(obj["config_path"]) if obj.get("config_path") else _config_file_path()
    if cfg_path.exists() and not force:
        console.print(
            f"[red]Config already exists:[/red] {escape(str(cfg_path))} (use --force to overwrite)"
        )
        sys.exit(ExitCode.ERROR)

    cfg = DaylogConfig()
    if root := obj.get("root_dir"):
        cfg = cfg.model_copy(update={"root_dir": root})
    try:
        written = save_config(cfg.model_dump(), cfg_path)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.CONFIG_ERROR)
    console.print(f"[green]Config written:[/green] {escape(str(written))}")


def cmd_config_show(obj: dict[str, Any], as_json: bool, console: Console) -> None:
    """Display the effective configuration (file, env overrides and --root applied)."""
    from daylog.cli._view import load_settings

    try:
        cfg = load_settings(obj)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.CONFIG_ERROR)

    data = _config_to_dict(cfg)
    cfg_path = Path(obj["config_path"]) if obj.get("config_path") else _config_file_path()
    data["_config_path"] = str(cfg_path) if cfg_path.exists() else "(defaults)"

    if as_json:
        click.echo(json.dumps(data, indent=2))
    else:
        _print_config_rich(data, console)


def cmd_config_validate(obj: dict[str, Any], console: Console) -> None:
    """Validate the config file against the schema."""
    cfg_path = Path(obj["config_path"]) if obj.get("config_path") else _config_file_path()
    if not cfg_path.exists():
        console.print(f"[red]Config not found:[/red] {escape(str(cfg_path))}")
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        load_config(cfg_path)
    except ConfigError as exc:
        console.print(f"[red]Config validation failed:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.CONFIG_ERROR)
    console.print(f"[green]Config is valid:[/green] {escape(str(cfg_path))}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config_to_dict(cfg: DaylogConfig) -> dict[str, Any]:
    data = cfg.model_dump()
    data["channels"] = {
        "security": str(cfg.channel_dir(cfg.security)),
        "errors": str(cfg.channel_dir(cfg.errors)),
    }
    return data


def _print_config_rich(data: dict[str, Any], console: Console) -> None:
    """Print config dict in a human-friendly format."""
    path = data.pop("_config_path", "unknown")
    console.print(f"[bold]daylog configuration[/bold]  ({escape(path)})\n")

    for section, values in data.items():
        if isinstance(values, dict):
            console.print(f"  [cyan]\\[{section}][/cyan]")
            for k, v in values.items():
                console.print(f"    {k} = {escape(repr(v))}")
        else:
            console.print(f"  {section} = {escape(repr(values))}")
    console.print()
