"""
Cross-check (peer review) tasks.

One cross-check task record becomes two timeline entries:
- submit phase: [student_start, student_end]
- review phase: [student_end, cross_check_end]

Both share id, name, scoring metadata and organizer. Their statuses are
derived independently.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from courseschedule.model import (
    CourseTaskRecord,
    ScheduleItem,
    SourceKind,
    StudentProgress,
    Tag,
    Window,
)
from courseschedule.status import cross_check_status


def _phase_item(
    task: CourseTaskRecord,
    window: Window,
    tag: Tag,
    now: datetime,
    progress: Optional[StudentProgress],
    score: Optional[float],
) -> ScheduleItem:
    status = cross_check_status(now, window, tag == Tag.CROSS_CHECK_SUBMIT, progress)
    return ScheduleItem(
        id=task.id,
        name=task.name,
        course_id=task.course_id,
        window=window,
        status=status,
        tag=tag,
        source_kind=SourceKind.TASK,
        score=score,
        max_score=task.scoring.max_score,
        score_weight=task.scoring.score_weight,
        description_url=task.description_url,
        organizer=task.organizer,
    )


def split_cross_check_task(
    task: CourseTaskRecord,
    now: datetime,
    progress: Optional[StudentProgress],
) -> list[ScheduleItem]:
    """
    Return [submit_item, review_item] for a cross-check task.
    """
    score = progress.score if progress is not None else None

    w = task.window
    submit_window = Window(w.student_start, w.student_end)
    review_window = Window(w.student_end, w.cross_check_end)

    return [
        _phase_item(task, submit_window, Tag.CROSS_CHECK_SUBMIT, now, progress, score),
        _phase_item(task, review_window, Tag.CROSS_CHECK_REVIEW, now, progress, score),
    ]
