"""
Timeline aggregation.

Builds one ordered list of ScheduleItems from the three record sources of a
course (tasks, events, team distribution rounds):

    tasks   -> tag -> (cross-check split | single item) -> status
    events  -> tag -> status
    rounds  -> membership lookup -> status

then concatenates the three streams and sorts them.

Ordering rule:
    ascending start (minute resolution), ties broken by tag priority
    (self-study < test < coding < everything else)
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from courseschedule.crosscheck import split_cross_check_task
from courseschedule.model import (
    Checker,
    CourseEventRecord,
    CourseTaskRecord,
    ScheduleItem,
    SourceKind,
    StudentProgress,
    Tag,
    TeamDistributionRound,
    Window,
)
from courseschedule.scores import resolve_score, resolve_submitted
from courseschedule.sources import ScheduleSource, SourceSnapshot, StudentData, fetch_snapshot
from courseschedule.status import distribution_status, event_end_time, event_status, task_status
from courseschedule.tags import event_tag, tag_priority, task_tag

logger = logging.getLogger(__name__)


def _progress(task_id: int, student: Optional[StudentData]) -> Optional[StudentProgress]:
    if student is None:
        return None
    return StudentProgress(
        score=resolve_score(
            task_id,
            student.task_results,
            student.interview_results,
            student.screening_results,
        ),
        submitted=resolve_submitted(task_id, student.submissions, student.reviewer_assignments),
    )


def _task_items(task: CourseTaskRecord, now: datetime, student: Optional[StudentData]) -> list[ScheduleItem]:
    progress = _progress(task.id, student)

    if task.scoring.checker == Checker.CROSS_CHECK:
        return split_cross_check_task(task, now, progress)

    window = Window(task.window.student_start, task.window.student_end)
    return [
        ScheduleItem(
            id=task.id,
            name=task.name,
            course_id=task.course_id,
            window=window,
            status=task_status(now, window, task.scoring, progress),
            tag=task_tag(task),
            source_kind=SourceKind.TASK,
            score=progress.score if progress else None,
            max_score=task.scoring.max_score,
            score_weight=task.scoring.score_weight,
            description_url=task.description_url,
            organizer=task.organizer,
            cross_check_end=task.window.cross_check_end,
        )
    ]


def _event_item(event: CourseEventRecord, now: datetime) -> ScheduleItem:
    return ScheduleItem(
        id=event.id,
        name=event.name,
        course_id=event.course_id,
        window=Window(event.start, event_end_time(event)),
        status=event_status(now, event),
        tag=event_tag(event),
        source_kind=SourceKind.EVENT,
        description_url=event.description_url,
        organizer=event.organizer,
    )


def _round_item(round_: TeamDistributionRound, now: datetime, student: Optional[StudentData]) -> ScheduleItem:
    memberships = student.memberships if student is not None else ()
    membership = next((m for m in memberships if m.round_id == round_.id), None)
    return ScheduleItem(
        id=round_.id,
        name=round_.name,
        course_id=round_.course_id,
        window=Window(round_.start, round_.end),
        status=distribution_status(now, round_, membership),
        tag=Tag.TEAM_DISTRIBUTION,
        source_kind=SourceKind.TEAM_DISTRIBUTION,
        description_url=round_.description_url,
    )


def _sort_key(item: ScheduleItem) -> tuple[bool, float, float]:
    start = item.window.start
    if start is None:
        # undated entries go last
        return (True, math.inf, tag_priority(item.tag))
    minute = math.floor(start.timestamp() / 60)
    return (False, minute, tag_priority(item.tag))


def sort_schedule(items: Iterable[ScheduleItem]) -> list[ScheduleItem]:
    """
    Stable sort by start minute, then tag priority.
    """
    return sorted(items, key=_sort_key)


def build_schedule(snapshot: SourceSnapshot, now: datetime) -> list[ScheduleItem]:
    """
    Build the ordered timeline from an already fetched snapshot.

    Pure function of (snapshot, now). A naive ``now`` is taken as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    student = snapshot.student

    items: list[ScheduleItem] = []
    for task in snapshot.tasks:
        items.extend(_task_items(task, now, student))
    items.extend(_event_item(event, now) for event in snapshot.events)
    items.extend(_round_item(round_, now, student) for round_ in snapshot.rounds)

    return sort_schedule(items)


def compute_schedule(
    source: ScheduleSource,
    course_id: int,
    student_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> list[ScheduleItem]:
    """
    Fetch everything for a course (and optionally a student) and build its timeline.

    Raises UpstreamDataUnavailable if any source collection cannot be fetched.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    snapshot = fetch_snapshot(source, course_id, student_id)
    items = build_schedule(snapshot, now)
    logger.info(
        "Schedule for course %s (student %s): %d items",
        course_id,
        student_id if student_id is not None else "-",
        len(items),
    )
    return items
