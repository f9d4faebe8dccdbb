from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, TypeVar

import requests

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


# ---------------------------------------------------------------------------
# REST source
# ---------------------------------------------------------------------------


class HttpSource:
    """
    ScheduleSource backed by the course platform's REST API.

    Endpoints (relative to base_url):
        courses/{courseId}/tasks                      (disabled tasks excluded)
        courses/{courseId}/events
        courses/{courseId}/team-distributions
        courses/{courseId}/students/{studentId}/team-distributions
        students/{studentId}/task-results
        students/{studentId}/interview-results
        students/{studentId}/stage-interviews         (completed only)
        students/{studentId}/task-solutions
        students/{studentId}/task-checkers

    Collections are fetched from worker threads, so an injected session must be
    safe to share between threads. Without one each request uses requests.get.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout

    def _get_rows(self, path: str) -> List[dict[str, Any]]:
        url = f"{self.base_url}/{path}"
        logger.debug("GET %s", url)
        if self.session is not None:
            resp = self.session.get(url, timeout=self.timeout)
        else:
            resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamDataUnavailable(f"Invalid JSON from {url}") from exc
        if not isinstance(data, list):
            raise UpstreamDataUnavailable(f"Expected a JSON list from {url}")
        return [row for row in data if isinstance(row, dict)]

    def _fetch(self, path: str, convert: Callable[[dict[str, Any]], T]) -> List[T]:
        rows = self._get_rows(path)
        try:
            return [convert(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamDataUnavailable(f"Invalid row from {path}: {exc}") from exc

    def list_active_course_tasks(self, course_id: int) -> List[CourseTaskRecord]:
        return self._fetch(f"courses/{course_id}/tasks", parse.parse_course_task)

    def list_course_events(self, course_id: int) -> List[CourseEventRecord]:
        return self._fetch(f"courses/{course_id}/events", parse.parse_course_event)

    def list_team_distribution_rounds(self, course_id: int) -> List[TeamDistributionRound]:
        return self._fetch(f"courses/{course_id}/team-distributions", parse.parse_team_distribution)

    def list_task_results(self, student_id: int) -> List[TaskResult]:
        return self._fetch(f"students/{student_id}/task-results", parse.parse_task_result)

    def list_interview_results(self, student_id: int) -> List[InterviewResult]:
        return self._fetch(f"students/{student_id}/interview-results", parse.parse_interview_result)

    def list_screening_feedback(self, student_id: int) -> List[ScreeningResult]:
        return self._fetch(f"students/{student_id}/stage-interviews", parse.parse_screening_result)

    def list_submissions(self, student_id: int) -> List[TaskSubmission]:
        return self._fetch(f"students/{student_id}/task-solutions", parse.parse_submission)

    def list_reviewer_assignments(self, student_id: int) -> List[ReviewerAssignment]:
        return self._fetch(f"students/{student_id}/task-checkers", parse.parse_reviewer_assignment)

    def list_round_memberships(self, course_id: int, student_id: int) -> List[RoundMembership]:
        return self._fetch(
            f"courses/{course_id}/students/{student_id}/team-distributions",
            parse.parse_membership,
        )
