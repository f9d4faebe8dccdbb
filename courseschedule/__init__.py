"""
Course schedule timeline: tasks, events and team distribution rounds of a
course merged into one ordered list with per-student statuses.
"""

from courseschedule.model import ScheduleItem, SourceKind, Status, Tag
from courseschedule.schedule import build_schedule, compute_schedule, sort_schedule
from courseschedule.sources import UpstreamDataUnavailable

__all__ = [
    "ScheduleItem",
    "SourceKind",
    "Status",
    "Tag",
    "UpstreamDataUnavailable",
    "build_schedule",
    "compute_schedule",
    "sort_schedule",
]
