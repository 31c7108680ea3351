"""Operator views: days, show, search, stats, weekly, download, record."""

from __future__ import annotations

import getpass
import json
import shutil
import sys
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from daylog.core.config import DaylogConfig, load_config, load_config_or_default
from daylog.core.constants import ExitCode
from daylog.core.exceptions import ConfigError
from daylog.core.logging import configure_logging
from daylog.eventlog import Actor, EventLog, EventRecord, Level, Logs, open_logs
from daylog.eventlog.model import format_details_plain
from daylog.eventlog.schema import LineFormat


@dataclass
class ChannelContext:
    """The channel a command operates on, plus the security log used for auditing."""

    log: EventLog
    logs: Logs
    config: DaylogConfig

    def audit(self, action: str, details: dict[str, Any], level: Level = Level.INFO) -> None:
        self.logs.security.log_action(_operator(), action, None, details, level=level)


def load_settings(obj: dict[str, Any]) -> DaylogConfig:
    """Effective config: --config (strict) or default lookup, then --root."""
    path = obj.get("config_path")
    cfg = load_config(Path(path)) if path else load_config_or_default()
    if root := obj.get("root_dir"):
        cfg = cfg.model_copy(update={"root_dir": root})
    return cfg


def open_channel(obj: dict[str, Any], channel: str, err_console: Console) -> ChannelContext:
    try:
        cfg = load_settings(obj)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.CONFIG_ERROR)
    configure_logging(cfg.logging, console=err_console)
    logs = open_logs(cfg)
    return ChannelContext(log=logs.channel(channel), logs=logs, config=cfg)


def parse_date(text: str, today: date, console: Console | None = None) -> date:
    """Parse YYYY-MM-DD or YYYYMMDD; malformed input falls back to today."""
    if not text:
        return today
    for fmt in ("%Y-%m-%d", "%Y%m%d"):
        try:
            return datetime.strptime(text.strip(), fmt).date()
        except ValueError:
            continue
    if console is not None:
        console.print(
            f"[yellow]Invalid date {escape(text)!r}, showing {today.isoformat()} instead[/yellow]"
        )
    return today


# ---------------------------------------------------------------------------
# days
# ---------------------------------------------------------------------------


def cmd_days(ctx: ChannelContext, as_json: bool, console: Console) -> None:
    day_files = ctx.log.list_days()
    if as_json:
        rows = [
            {
                "date": d.date.isoformat(),
                "filename": d.filename,
                "size": d.size,
                "modified_at": d.modified_at.isoformat(),
                "date_inferred": d.date_inferred,
            }
            for d in day_files
        ]
        click.echo(json.dumps(rows, indent=2))
        return

    if not day_files:
        console.print(f"No {ctx.log.schema.label} log files in {escape(str(ctx.log.directory))}")
        return

    table = Table(title=f"{ctx.log.name} log files")
    table.add_column("Date")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    for d in day_files:
        label = d.date.isoformat() + (" [yellow](inferred)[/yellow]" if d.date_inferred else "")
        table.add_row(
            label,
            escape(d.filename),
            f"{d.size / 1024:.1f} KB",
            d.modified_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# show / search
# ---------------------------------------------------------------------------


def cmd_show(
    ctx: ChannelContext,
    day: str,
    limit: str | None,
    raw: bool,
    as_json: bool,
    console: Console,
) -> None:
    target = parse_date(day, ctx.log.today(), console=None if as_json else console)
    records = ctx.log.read(target, ctx.config.read.view_limit if limit is None else limit)
    ctx.audit(f"view_{ctx.log.schema.label}_logs", {"date": target.isoformat()})
    _print_records(ctx.log, records, target, raw=raw, as_json=as_json, console=console)


def cmd_search(ctx: ChannelContext, query: str, day: str, as_json: bool, console: Console) -> None:
    target = parse_date(day, ctx.log.today(), console=None if as_json else console)
    records = ctx.log.search(target, query)
    ctx.audit(
        f"search_{ctx.log.schema.label}_logs", {"query": query, "date": target.isoformat()}
    )
    _print_records(ctx.log, records, target, raw=False, as_json=as_json, console=console)


def _print_records(
    log: EventLog,
    records: list[EventRecord],
    day: date,
    *,
    raw: bool,
    as_json: bool,
    console: Console,
) -> None:
    if as_json:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2))
        return
    if raw:
        for r in records:
            click.echo(r.raw)
            for entry in r.backtrace:
                click.echo(f"  {entry}")
        return
    if not records:
        console.print(f"No {log.schema.label} events for {day.isoformat()}")
        return

    is_errors = log.schema.line_format is LineFormat.ERRORS
    table = Table(title=f"{log.name} - {day.isoformat()} ({len(records)} events)")
    for column in ("Time", "Level", "Actor", "IP", "Error type" if is_errors else "Action"):
        table.add_column(column)
    table.add_column("Message" if is_errors else "Details", overflow="fold")
    for r in records:
        text = format_details_plain(r.details)
        if is_errors:
            text = f"{r.message} | {text}" if r.details else r.message
        table.add_row(
            escape(r.timestamp),
            _level_markup(r.level),
            escape(r.actor),
            escape(r.source_ip),
            escape(r.category),
            escape(text),
        )
    console.print(table)


def _level_markup(level: str) -> str:
    colour = {"WARN": "yellow", "ERROR": "red", "CRITICAL": "bold red"}.get(level)
    return f"[{colour}]{escape(level)}[/{colour}]" if colour else escape(level)


# ---------------------------------------------------------------------------
# stats / weekly
# ---------------------------------------------------------------------------


def cmd_stats(ctx: ChannelContext, day: str, as_json: bool, console: Console) -> None:
    target = parse_date(day, ctx.log.today(), console=None if as_json else console)
    stats = ctx.log.daily_statistics(target)
    summary = stats.as_dict(ctx.log.schema)

    if as_json:
        payload = {"date": target.isoformat(), **summary}
        payload["unparsed_timestamps"] = stats.unparsed_timestamps
        click.echo(json.dumps(payload, indent=2))
        return

    console.print(f"[bold]{ctx.log.name} statistics[/bold] - {target.isoformat()}\n")
    for key, value in summary.items():
        if isinstance(value, dict):
            console.print(f"  {key}:")
            if not value:
                console.print("    [dim](none)[/dim]")
            for k, v in value.items():
                console.print(f"    {escape(str(k)):<24} {v}")
        else:
            console.print(f"  {key:<24} {value}")
    if stats.unparsed_timestamps:
        console.print(
            f"\n  [yellow]{stats.unparsed_timestamps} event(s) with unparseable "
            "timestamps counted in hour 0[/yellow]"
        )


def cmd_weekly(
    ctx: ChannelContext, day: str, num_days: int | None, as_json: bool, console: Console
) -> None:
    target = parse_date(day, ctx.log.today(), console=None if as_json else console)
    span = num_days if num_days and num_days > 0 else ctx.config.stats.series_days
    series = ctx.log.series(target, span)
    schema = ctx.log.schema

    if as_json:
        rows = [{"date": e.date.isoformat(), "stats": e.stats.as_dict(schema)} for e in series]
        click.echo(json.dumps(rows, indent=2))
        return

    total_key = dict(schema.summary_keys).get("total_events", "total_events")
    table = Table(title=f"{ctx.log.name} - {len(series)} days to {target.isoformat()}")
    table.add_column("Date")
    table.add_column(total_key, justify="right")
    for counter in schema.counters:
        table.add_column(counter.name, justify="right")
    for entry in series:
        summary = entry.stats.as_dict(schema)
        table.add_row(
            entry.date.isoformat(),
            str(summary[total_key]),
            *(str(summary[c.name]) for c in schema.counters),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# download
# ---------------------------------------------------------------------------


def cmd_download(ctx: ChannelContext, day: str, output: str, console: Console) -> None:
    target = parse_date(day, ctx.log.today(), console=console)
    source = ctx.log.existing_path(target)
    if source is None:
        console.print(
            f"[red]No {ctx.log.schema.label} log file for {target.strftime('%d.%m.%Y')}[/red]"
        )
        sys.exit(ExitCode.NOT_FOUND)

    ctx.audit(
        f"download_{ctx.log.schema.label}_log", {"date": target.isoformat()}, level=Level.WARN
    )
    dest = Path(output) if output else Path.cwd() / ctx.log.download_name(target)
    try:
        shutil.copyfile(source, dest)
    except OSError as exc:
        console.print(f"[red]Cannot write {escape(str(dest))}:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.ERROR)
    console.print(f"[green]Saved[/green] {escape(str(dest))}")


# ---------------------------------------------------------------------------
# record
# ---------------------------------------------------------------------------


def cmd_record(
    ctx: ChannelContext,
    category: str,
    level: str,
    message: str,
    details: tuple[str, ...],
    actor: str,
    source_ip: str,
    user_agent: str,
    console: Console,
) -> None:
    parsed: dict[str, str] = {}
    for item in details:
        key, sep, value = item.partition("=")
        if not sep or not key:
            console.print(f"[red]Invalid --detail {escape(item)!r}; expected key=value[/red]")
            sys.exit(ExitCode.ERROR)
        parsed[key] = value

    fields: dict[str, Any] = {
        "category": category,
        "actor": _parse_actor(actor),
        "message": message,
        "details": parsed,
        "user_agent": user_agent or None,
    }
    if source_ip:
        fields["source_ip"] = source_ip

    if not ctx.log.append(level.upper(), **fields):
        console.print(f"[red]Failed to write {ctx.log.name} log (see diagnostics above)[/red]")
        sys.exit(ExitCode.ERROR)
    console.print(f"[green]Recorded[/green] {escape(category)} in {ctx.log.name} log")


def _parse_actor(text: str) -> Actor | None:
    if not text:
        return None
    login, _, ident = text.partition(":")
    return Actor(login=login, id=ident or "0")


def _operator() -> Actor | None:
    try:
        return Actor(login=getpass.getuser(), id="cli")
    except (KeyError, OSError):
        return None
