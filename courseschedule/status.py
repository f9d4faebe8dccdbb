"""
Status derivation.

Small pure functions mapping (now, window, scoring policy, student progress)
to one Status. Each function is a transition table evaluated top to bottom;
the first matching branch wins.

Student context:
    progress=None means no student was specified. This is not the same as a
    student without score: it turns "missed" into "archived".
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from courseschedule.model import (
    Checker,
    CourseEventRecord,
    RoundMembership,
    ScoringPolicy,
    Status,
    StudentProgress,
    TeamDistributionRound,
    Window,
)

DEFAULT_EVENT_DURATION_MINUTES = 60


def task_status(
    now: datetime,
    window: Window,
    policy: ScoringPolicy,
    progress: Optional[StudentProgress],
) -> Status:
    """
    Status of an ordinary (non cross-check) task.
    """
    if window.start is None or window.end is None:
        return Status.ARCHIVED
    if now < window.start:
        return Status.FUTURE

    score = progress.score if progress else None
    submitted = progress.submitted if progress else False
    in_window = window.contains(now)

    # A missing score counts as 0 here, so an unscored auto-test stays open
    if (
        policy.checker == Checker.AUTO_TEST
        and in_window
        and policy.max_score is not None
        and (score or 0) < policy.max_score
    ):
        return Status.AVAILABLE
    if score is not None:
        return Status.DONE
    if submitted:
        return Status.REVIEW
    if in_window:
        return Status.AVAILABLE
    return Status.MISSED if progress is not None else Status.ARCHIVED


def cross_check_status(
    now: datetime,
    window: Window,
    submit_phase: bool,
    progress: Optional[StudentProgress],
) -> Status:
    """
    Status of one phase of a cross-check task.

    The submit phase is also done once its window lapsed with work submitted;
    the review phase is done only when a score exists.
    """
    if window.start is None or window.end is None:
        return Status.ARCHIVED
    if now < window.start:
        return Status.FUTURE

    score = progress.score if progress else None
    submitted = progress.submitted if progress else False

    if score is not None or (submit_phase and submitted and now > window.end):
        return Status.DONE
    if window.contains(now):
        return Status.AVAILABLE
    return Status.MISSED if progress is not None else Status.ARCHIVED


def event_end_time(event: CourseEventRecord) -> Optional[datetime]:
    """
    Explicit end if set, otherwise start + duration (default 60 minutes).
    """
    if event.end is not None:
        return event.end
    if event.start is None:
        return None
    duration = event.duration if event.duration is not None else DEFAULT_EVENT_DURATION_MINUTES
    return event.start + timedelta(minutes=duration)


def event_status(now: datetime, event: CourseEventRecord) -> Status:
    if event.start is None:
        return Status.ARCHIVED
    end = event_end_time(event)
    if end is not None and now > end:
        return Status.ARCHIVED
    if now > event.start:
        return Status.AVAILABLE
    return Status.FUTURE


def distribution_status(
    now: datetime,
    round_: TeamDistributionRound,
    membership: Optional[RoundMembership],
) -> Status:
    """
    Status of a team distribution round for one student (or nobody).
    """
    if round_.start is None or round_.end is None:
        return Status.ARCHIVED
    if now < round_.start:
        return Status.FUTURE
    if membership is not None and membership.distributed:
        return Status.DONE
    if membership is not None and membership.active:
        return Status.REGISTERED

    student = membership.student if membership is not None else None
    if student is None or student.is_expelled:
        return Status.UNAVAILABLE
    # an unknown total score does not fail the threshold
    if student.total_score is not None and student.total_score < round_.min_total_score:
        return Status.UNAVAILABLE
    if round_.start <= now <= round_.end:
        return Status.AVAILABLE
    if now > round_.end:
        return Status.MISSED
    return Status.UNAVAILABLE
