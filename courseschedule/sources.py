"""
Data access boundary.

The schedule core never owns persistence. It reads collections through a
ScheduleSource (file snapshot, REST API, ...) and works on one consistent,
immutable SourceSnapshot per call.

Fetching:
- all collection queries are independent and run concurrently
- any failing query aborts the whole fetch (no partial timeline)
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple

from courseschedule.model import (
    CourseEventRecord,
    CourseTaskRecord,
    InterviewResult,
    ReviewerAssignment,
    RoundMembership,
    ScreeningResult,
    TaskResult,
    TaskSubmission,
    TeamDistributionRound,
)

logger = logging.getLogger(__name__)


class UpstreamDataUnavailable(Exception):
    """
    Raised when any source collection cannot be fetched.
    """


class ScheduleSource(Protocol):
    def list_active_course_tasks(self, course_id: int) -> Sequence[CourseTaskRecord]: ...

    def list_course_events(self, course_id: int) -> Sequence[CourseEventRecord]: ...

    def list_team_distribution_rounds(self, course_id: int) -> Sequence[TeamDistributionRound]: ...

    def list_task_results(self, student_id: int) -> Sequence[TaskResult]: ...

    def list_interview_results(self, student_id: int) -> Sequence[InterviewResult]: ...

    def list_screening_feedback(self, student_id: int) -> Sequence[ScreeningResult]: ...

    def list_submissions(self, student_id: int) -> Sequence[TaskSubmission]: ...

    def list_reviewer_assignments(self, student_id: int) -> Sequence[ReviewerAssignment]: ...

    def list_round_memberships(self, course_id: int, student_id: int) -> Sequence[RoundMembership]: ...


@dataclass(frozen=True)
class StudentData:
    task_results: Tuple[TaskResult, ...] = ()
    interview_results: Tuple[InterviewResult, ...] = ()
    screening_results: Tuple[ScreeningResult, ...] = ()
    submissions: Tuple[TaskSubmission, ...] = ()
    reviewer_assignments: Tuple[ReviewerAssignment, ...] = ()
    memberships: Tuple[RoundMembership, ...] = ()


@dataclass(frozen=True)
class SourceSnapshot:
    """
    Everything one aggregation needs, fetched at once.

    ``student`` is None when no student was specified.
    """

    course_id: int
    tasks: Tuple[CourseTaskRecord, ...]
    events: Tuple[CourseEventRecord, ...]
    rounds: Tuple[TeamDistributionRound, ...]
    student: Optional[StudentData] = None


def _timed(name: str, fn: Callable[[], Sequence[Any]]) -> Tuple[Any, ...]:
    t0 = time.perf_counter()
    rows = tuple(fn())
    logger.debug("Fetched %s: %d rows in %.3fs", name, len(rows), time.perf_counter() - t0)
    return rows


def fetch_snapshot(
    source: ScheduleSource,
    course_id: int,
    student_id: Optional[int] = None,
    max_workers: int = 9,
) -> SourceSnapshot:
    """
    Fetch all collections for a course (and a student) concurrently.

    Raises UpstreamDataUnavailable if any of the queries fails.
    """
    queries: dict[str, Callable[[], Sequence[Any]]] = {
        "tasks": lambda: source.list_active_course_tasks(course_id),
        "events": lambda: source.list_course_events(course_id),
        "rounds": lambda: source.list_team_distribution_rounds(course_id),
    }
    if student_id is not None:
        queries.update(
            {
                "task_results": lambda: source.list_task_results(student_id),
                "interview_results": lambda: source.list_interview_results(student_id),
                "screening_results": lambda: source.list_screening_feedback(student_id),
                "submissions": lambda: source.list_submissions(student_id),
                "reviewer_assignments": lambda: source.list_reviewer_assignments(student_id),
                "memberships": lambda: source.list_round_memberships(course_id, student_id),
            }
        )

    results: dict[str, Tuple[Any, ...]] = {}
    with ThreadPoolExecutor(max_workers=min(max_workers, len(queries))) as pool:
        futures = {name: pool.submit(_timed, name, fn) for name, fn in queries.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except UpstreamDataUnavailable:
                raise
            except Exception as exc:
                raise UpstreamDataUnavailable(f"Failed to fetch {name} for course {course_id}: {exc}") from exc

    student: Optional[StudentData] = None
    if student_id is not None:
        student = StudentData(
            task_results=results["task_results"],
            interview_results=results["interview_results"],
            screening_results=results["screening_results"],
            submissions=results["submissions"],
            reviewer_assignments=results["reviewer_assignments"],
            memberships=results["memberships"],
        )

    return SourceSnapshot(
        course_id=course_id,
        tasks=results["tasks"],
        events=results["events"],
        rounds=results["rounds"],
        student=student,
    )


class CachingSource:
    """
    Wraps a source and caches the course-scoped collections for a short time.

    Entries are keyed by (collection, course_id) and stored as tuples, so
    cached values are never mutated in place. Student collections always
    pass through.
    """

    def __init__(
        self,
        source: ScheduleSource,
        ttl_seconds: float = 90.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[Tuple[str, int], Tuple[float, Tuple[Any, ...]]] = {}

    def _cached(self, name: str, course_id: int, fn: Callable[[], Sequence[Any]]) -> Tuple[Any, ...]:
        key = (name, course_id)
        now = self._clock()
        with self._lock:
            hit = self._entries.get(key)
            if hit is not None and now - hit[0] < self._ttl:
                logger.debug("Cache hit: %s course=%s", name, course_id)
                return hit[1]

        rows = tuple(fn())
        with self._lock:
            self._entries[key] = (now, rows)
        return rows

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def list_active_course_tasks(self, course_id: int) -> Sequence[CourseTaskRecord]:
        return self._cached("tasks", course_id, lambda: self._source.list_active_course_tasks(course_id))

    def list_course_events(self, course_id: int) -> Sequence[CourseEventRecord]:
        return self._cached("events", course_id, lambda: self._source.list_course_events(course_id))

    def list_team_distribution_rounds(self, course_id: int) -> Sequence[TeamDistributionRound]:
        return self._cached("rounds", course_id, lambda: self._source.list_team_distribution_rounds(course_id))

    def list_task_results(self, student_id: int) -> Sequence[TaskResult]:
        return self._source.list_task_results(student_id)

    def list_interview_results(self, student_id: int) -> Sequence[InterviewResult]:
        return self._source.list_interview_results(student_id)

    def list_screening_feedback(self, student_id: int) -> Sequence[ScreeningResult]:
        return self._source.list_screening_feedback(student_id)

    def list_submissions(self, student_id: int) -> Sequence[TaskSubmission]:
        return self._source.list_submissions(student_id)

    def list_reviewer_assignments(self, student_id: int) -> Sequence[ReviewerAssignment]:
        return self._source.list_reviewer_assignments(student_id)

    def list_round_memberships(self, course_id: int, student_id: int) -> Sequence[RoundMembership]:
        return self._source.list_round_memberships(course_id, student_id)
