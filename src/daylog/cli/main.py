"""
daylog CLI entry point.

Commands:
  daylog days <channel>              - list day files, newest first
  daylog show <channel>              - recent events for a day
  daylog search <channel> <query>    - substring search within a day
  daylog stats <channel>             - daily statistics
  daylog weekly <channel>            - per-day statistics over the last N days
  daylog download <channel>          - copy a raw day file
  daylog record <channel> <category> - append an event by hand
  daylog config init|show|validate   - write or inspect configuration
  daylog version                     - show version
"""

from __future__ import annotations

import click
from rich.console import Console

from daylog import __version__

console = Console()
err_console = Console(stderr=True)

CHANNEL = click.Choice(["security", "errors"])


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="daylog %(version)s")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: $DAYLOG_CONFIG or ./daylog.toml)",
)
@click.option("--root", "root_dir", default=None, help="Override the log root directory")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, root_dir: str | None) -> None:
    """daylog - day-partitioned security and error event logs."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["root_dir"] = root_dir


# ---------------------------------------------------------------------------
# days
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("channel", type=CHANNEL)
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def days(ctx: click.Context, channel: str, as_json: bool) -> None:
    """List a channel's day files, newest first."""
    from daylog.cli._view import cmd_days, open_channel

    cmd_days(open_channel(ctx.obj, channel, err_console), as_json=as_json, console=console)


# ---------------------------------------------------------------------------
# show / search
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("channel", type=CHANNEL)
@click.option("--date", "day", default="", help="Day to show (YYYY-MM-DD, default: today)")
@click.option("--limit", default=None, help="Number of most recent lines (1-10000)")
@click.option("--raw", is_flag=True, default=False, help="Print stored lines verbatim")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def show(
    ctx: click.Context, channel: str, day: str, limit: str | None, raw: bool, as_json: bool
) -> None:
    """Show recent events for one day."""
    from daylog.cli._view import cmd_show, open_channel

    log = open_channel(ctx.obj, channel, err_console)
    cmd_show(log, day=day, limit=limit, raw=raw, as_json=as_json, console=console)


@cli.command()
@click.argument("channel", type=CHANNEL)
@click.argument("query", default="")
@click.option("--date", "day", default="", help="Day to search (YYYY-MM-DD, default: today)")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def search(ctx: click.Context, channel: str, query: str, day: str, as_json: bool) -> None:
    """Search one day for a substring."""
    from daylog.cli._view import cmd_search, open_channel

    log = open_channel(ctx.obj, channel, err_console)
    cmd_search(log, query=query, day=day, as_json=as_json, console=console)


# ---------------------------------------------------------------------------
# stats / weekly
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("channel", type=CHANNEL)
@click.option("--date", "day", default="", help="Day (YYYY-MM-DD, default: today)")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def stats(ctx: click.Context, channel: str, day: str, as_json: bool) -> None:
    """Show daily statistics."""
    from daylog.cli._view import cmd_stats, open_channel

    cmd_stats(open_channel(ctx.obj, channel, err_console), day=day, as_json=as_json, console=console)


@cli.command()
@click.argument("channel", type=CHANNEL)
@click.option("--date", "day", default="", help="Last day of the series (default: today)")
@click.option("--days", "num_days", type=int, default=None, help="Number of days (default: 7)")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def weekly(
    ctx: click.Context, channel: str, day: str, num_days: int | None, as_json: bool
) -> None:
    """Show per-day statistics for the days ending at --date."""
    from daylog.cli._view import cmd_weekly, open_channel

    log = open_channel(ctx.obj, channel, err_console)
    cmd_weekly(log, day=day, num_days=num_days, as_json=as_json, console=console)


# ---------------------------------------------------------------------------
# download
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("channel", type=CHANNEL)
@click.option("--date", "day", default="", help="Day (YYYY-MM-DD, default: today)")
@click.option("--output", default="", help="Destination path (default: <prefix>_log_YYYYMMDD.log)")
@click.pass_context
def download(ctx: click.Context, channel: str, day: str, output: str) -> None:
    """Copy a raw day file verbatim."""
    from daylog.cli._view import cmd_download, open_channel

    log = open_channel(ctx.obj, channel, err_console)
    cmd_download(log, day=day, output=output, console=console)


# ---------------------------------------------------------------------------
# record
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("channel", type=CHANNEL)
@click.argument("category")
@click.option(
    "--level",
    type=click.Choice(["INFO", "WARN", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
)
@click.option("--message", default="", help="Message (errors channel)")
@click.option("--detail", "details", multiple=True, help="Detail as key=value (repeatable)")
@click.option("--actor", default="", help="Actor as login:id (default: anonymous)")
@click.option("--ip", "source_ip", default="", help="Source IP")
@click.option("--user-agent", default="", help="User agent (security channel)")
@click.pass_context
def record(
    ctx: click.Context,
    channel: str,
    category: str,
    level: str,
    message: str,
    details: tuple[str, ...],
    actor: str,
    source_ip: str,
    user_agent: str,
) -> None:
    """Append one event by hand."""
    from daylog.cli._view import cmd_record, open_channel

    log = open_channel(ctx.obj, channel, err_console)
    cmd_record(
        log,
        category=category,
        level=level,
        message=message,
        details=details,
        actor=actor,
        source_ip=source_ip,
        user_agent=user_agent,
        console=console,
    )


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.group("config")
def config_group() -> None:
    """View and validate daylog configuration."""


@config_group.command("init")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a config file with the default settings."""
    from daylog.cli._config_cmd import cmd_config_init

    cmd_config_init(ctx.obj, force=force, console=console)


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Display the effective configuration."""
    from daylog.cli._config_cmd import cmd_config_show

    cmd_config_show(ctx.obj, as_json=as_json, console=console)


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the config file against the schema."""
    from daylog.cli._config_cmd import cmd_config_validate

    cmd_config_validate(ctx.obj, console=console)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
def version(as_json: bool) -> None:
    """Show version information."""
    import platform
    import sys as _sys

    if as_json:
        import json

        click.echo(
            json.dumps(
                {
                    "daylog": __version__,
                    "python": _sys.version.split()[0],
                    "platform": _sys.platform,
                    "arch": platform.machine(),
                },
                indent=2,
            )
        )
    else:
        console.print(f"daylog {__version__}")
        console.print(f"Python {_sys.version.split()[0]}")
        console.print(f"Platform: {_sys.platform} {platform.machine()}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
