"""
File-backed schedule source.

Reads a data directory with one JSON file per collection:

    course_tasks.json                 team_distributions.json
    course_events.json                team_distribution_students.json
    task_results.json                 interview_results.json
    stage_interviews.json             task_solutions.json
    task_checkers.json

Each file holds a JSON list of rows in the course platform's camelCase shape
(see courseschedule.parse). Filtering by course, student, disabled flag and
interview completion happens here, like the database queries would do.

Design rationale:
- a missing file is an empty collection (e.g. no interviews exported yet)
- a broken file is an upstream failure: we never build a timeline from
  half-readable data
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from courseschedule import parse
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
from courseschedule.sources import UpstreamDataUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

COURSE_TASKS_FILE = "course_tasks.json"
COURSE_EVENTS_FILE = "course_events.json"
TEAM_DISTRIBUTIONS_FILE = "team_distributions.json"
TASK_RESULTS_FILE = "task_results.json"
INTERVIEW_RESULTS_FILE = "interview_results.json"
STAGE_INTERVIEWS_FILE = "stage_interviews.json"
TASK_SOLUTIONS_FILE = "task_solutions.json"
TASK_CHECKERS_FILE = "task_checkers.json"
TEAM_DISTRIBUTION_STUDENTS_FILE = "team_distribution_students.json"


def default_data_dir() -> Path:
    """
    Return the default data directory inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can pass their own directory.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data"


def _same_id(value: Any, expected: int) -> bool:
    try:
        return int(value) == expected
    except (TypeError, ValueError):
        return False


class JsonSnapshotSource:
    """
    ScheduleSource reading JSON exports from a directory.

    Files are re-read on every call, so each aggregation sees the current
    state of the directory.
    """

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()

    def _load_rows(self, filename: str) -> list[dict[str, Any]]:
        path = self.data_dir / filename

        # Nothing exported yet -> empty collection
        if not path.exists():
            logger.debug("Missing %s, treating as empty", path)
            return []

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise UpstreamDataUnavailable(f"Cannot read {path}: {exc}") from exc

        if not isinstance(data, list):
            raise UpstreamDataUnavailable(f"Expected a JSON list in {path}")
        return [row for row in data if isinstance(row, dict)]

    def _select(
        self,
        filename: str,
        keep: Callable[[dict[str, Any]], bool],
        convert: Callable[[dict[str, Any]], T],
    ) -> list[T]:
        out: list[T] = []
        for row in self._load_rows(filename):
            if not keep(row):
                continue
            try:
                out.append(convert(row))
            except (KeyError, TypeError, ValueError) as exc:
                raise UpstreamDataUnavailable(f"Invalid row in {filename}: {row!r}") from exc
        return out

    # -- course collections -------------------------------------------------

    def list_active_course_tasks(self, course_id: int) -> list[CourseTaskRecord]:
        return self._select(
            COURSE_TASKS_FILE,
            lambda r: _same_id(r.get("courseId"), course_id) and not r.get("disabled", False),
            parse.parse_course_task,
        )

    def list_course_events(self, course_id: int) -> list[CourseEventRecord]:
        return self._select(
            COURSE_EVENTS_FILE,
            lambda r: _same_id(r.get("courseId"), course_id),
            parse.parse_course_event,
        )

    def list_team_distribution_rounds(self, course_id: int) -> list[TeamDistributionRound]:
        return self._select(
            TEAM_DISTRIBUTIONS_FILE,
            lambda r: _same_id(r.get("courseId"), course_id),
            parse.parse_team_distribution,
        )

    # -- student collections ------------------------------------------------

    def _for_student(self, student_id: int, extra: Optional[Callable[[dict[str, Any]], bool]] = None):
        def keep(row: dict[str, Any]) -> bool:
            if not _same_id(row.get("studentId"), student_id):
                return False
            return extra(row) if extra is not None else True

        return keep

    def list_task_results(self, student_id: int) -> list[TaskResult]:
        return self._select(TASK_RESULTS_FILE, self._for_student(student_id), parse.parse_task_result)

    def list_interview_results(self, student_id: int) -> list[InterviewResult]:
        return self._select(INTERVIEW_RESULTS_FILE, self._for_student(student_id), parse.parse_interview_result)

    def list_screening_feedback(self, student_id: int) -> list[ScreeningResult]:
        # only completed screening interviews carry a usable score
        return self._select(
            STAGE_INTERVIEWS_FILE,
            self._for_student(student_id, lambda r: bool(r.get("isCompleted"))),
            parse.parse_screening_result,
        )

    def list_submissions(self, student_id: int) -> list[TaskSubmission]:
        return self._select(TASK_SOLUTIONS_FILE, self._for_student(student_id), parse.parse_submission)

    def list_reviewer_assignments(self, student_id: int) -> list[ReviewerAssignment]:
        return self._select(TASK_CHECKERS_FILE, self._for_student(student_id), parse.parse_reviewer_assignment)

    def list_round_memberships(self, course_id: int, student_id: int) -> list[RoundMembership]:
        return self._select(
            TEAM_DISTRIBUTION_STUDENTS_FILE,
            self._for_student(student_id, lambda r: _same_id(r.get("courseId"), course_id)),
            parse.parse_membership,
        )
