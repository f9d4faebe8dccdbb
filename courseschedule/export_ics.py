"""
iCalendar (.ics) export.

We convert a computed timeline into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Entries without a complete window are skipped. Status and tag go into the
event description and categories.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from courseschedule.model import ScheduleItem


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _dt_utc(value: datetime) -> str:
    """
    Convert an aware datetime to ICS UTC form 'YYYYMMDDTHHMMSSZ'.
    """
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _uid(item: ScheduleItem) -> str:
    # a cross-check task yields two items with the same id, the tag keeps UIDs unique
    return f"{item.source_kind.value}-{item.id}-{item.tag.value}@courseschedule"


def render_ics(items: Iterable[ScheduleItem], now: Optional[datetime] = None) -> tuple[str, int]:
    """
    Render items as iCalendar text. Returns (text, number of exported events).
    """
    dtstamp = _dt_utc(now or datetime.now(timezone.utc))

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//CourseSchedule//EN")
    lines.append("CALSCALE:GREGORIAN")

    count = 0
    for item in items:
        if not item.window.is_complete:
            continue
        start = item.window.start
        end = item.window.end

        description = f"Status: {item.status.value}"
        if item.score is not None:
            max_part = f"/{item.max_score:g}" if item.max_score is not None else ""
            description += f"\nScore: {item.score:g}{max_part}"
        if item.description_url:
            description += f"\n{item.description_url}"

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_ics_escape(_uid(item))}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART:{_dt_utc(start)}")
        lines.append(f"DTEND:{_dt_utc(end)}")
        lines.append(f"SUMMARY:{_ics_escape(item.name or 'Course schedule item')}")
        lines.append(f"CATEGORIES:{_ics_escape(item.tag.value)}")
        lines.append(f"DESCRIPTION:{_ics_escape(description)}")
        if item.description_url:
            lines.append(f"URL:{item.description_url}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    return "\r\n".join(lines) + "\r\n", count


def export_schedule_to_ics(items: Iterable[ScheduleItem], out_path: str | Path) -> int:
    """
    Export items to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    text, count = render_ics(items)
    out.write_text(text, encoding="utf-8")
    return count
