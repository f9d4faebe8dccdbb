"""
CLI (Command Line Interface).

Quick terminal commands to inspect a course timeline, e.g.:

    courseschedule show 23
    courseschedule show 23 --student 1042
    courseschedule json 23 --student 1042 --now 2026-03-01T12:00:00Z
    courseschedule export 23 schedule.ics --student 1042

Data comes from the JSON exports in --data-dir, or from the REST API when
--api-url (or COURSESCHEDULE_API_URL) is set.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from courseschedule.config import Settings
from courseschedule.export_ics import export_schedule_to_ics
from courseschedule.model import ScheduleItem, Status
from courseschedule.parse import parse_instant
from courseschedule.remote import HttpSource
from courseschedule.schedule import compute_schedule
from courseschedule.sources import CachingSource, ScheduleSource, UpstreamDataUnavailable
from courseschedule.storage import JsonSnapshotSource

STATUS_STYLES = {
    Status.DONE: "green",
    Status.AVAILABLE: "bold cyan",
    Status.REVIEW: "yellow",
    Status.REGISTERED: "yellow",
    Status.MISSED: "red",
    Status.FUTURE: "white",
    Status.ARCHIVED: "dim",
    Status.UNAVAILABLE: "dim",
}


def _make_source(settings: Settings) -> ScheduleSource:
    """
    Pick the REST source if an API URL is configured, else the JSON exports.
    """
    if settings.api_url:
        source: ScheduleSource = HttpSource(settings.api_url, timeout=settings.request_timeout)
    else:
        source = JsonSnapshotSource(settings.data_dir)
    return CachingSource(source, ttl_seconds=settings.cache_ttl)


def _fmt_dt(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"


def _fmt_score(item: ScheduleItem) -> str:
    if item.score is None:
        return ""
    if item.max_score is None:
        return f"{item.score:g}"
    return f"{item.score:g}/{item.max_score:g}"


def _compute(args: argparse.Namespace, settings: Settings) -> list[ScheduleItem]:
    now = parse_instant(args.now) if args.now else None
    return compute_schedule(_make_source(settings), args.course_id, args.student, now=now)


def _cmd_show(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    items = _compute(args, settings)
    if not items:
        console.print("No schedule items.")
        return 0

    title = f"Course {args.course_id}" + (f" / student {args.student}" if args.student is not None else "")
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Tag")
    table.add_column("Status")
    table.add_column("Name")
    table.add_column("Score", justify="right")

    for item in items:
        style = STATUS_STYLES.get(item.status, "")
        table.add_row(
            _fmt_dt(item.window.start),
            _fmt_dt(item.window.end),
            item.tag.value,
            f"[{style}]{item.status.value}[/]" if style else item.status.value,
            item.name,
            _fmt_score(item),
        )
    console.print(table)
    return 0


def _cmd_json(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    items = _compute(args, settings)
    print(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))
    return 0


def _cmd_export(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    out_path = (args.out or "").strip()
    if not out_path:
        console.print("Please provide output .ics path.")
        return 1

    items = _compute(args, settings)
    n = export_schedule_to_ics(items, out_path)
    console.print(f"Exported {n} items to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="courseschedule", description="Course schedule timeline")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory with JSON exports")
    parser.add_argument("--api-url", type=str, default=None, help="Base URL of the course platform API")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("course_id", type=int, help="Course ID")
        p.add_argument("--student", type=int, default=None, help="Student ID (omit for the course view)")
        p.add_argument("--now", type=str, default=None, help="Evaluate statuses at this ISO time")

    p_show = sub.add_parser("show", help="Print the timeline as a table")
    add_common(p_show)

    p_json = sub.add_parser("json", help="Print the timeline as JSON")
    add_common(p_json)

    p_export = sub.add_parser("export", help="Export the timeline to .ics")
    add_common(p_export)
    p_export.add_argument("out", type=str, help="Output file path (e.g. out.ics)")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.now and parse_instant(args.now) is None:
        parser.error(f"invalid --now value: {args.now!r}")

    settings = Settings.from_env()
    overrides = {}
    if args.data_dir is not None:
        overrides["data_dir"] = args.data_dir
    if args.api_url:
        overrides["api_url"] = args.api_url
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    if overrides:
        settings = replace(settings, **overrides)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    console = Console()
    handlers = {"show": _cmd_show, "json": _cmd_json, "export": _cmd_export}
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        raise SystemExit(handler(args, settings, console))
    except UpstreamDataUnavailable as exc:
        print(f"Upstream data unavailable: {exc}", file=sys.stderr)
        raise SystemExit(1)
