"""
Parsing (raw JSON rows -> record dataclasses).

Rows use the camelCase field names of the course platform API, e.g.

    {"id": 7, "courseId": 1, "studentStartDate": "2026-02-19T10:00:00Z", ...}

Both storage.JsonSnapshotSource and remote.HttpSource feed their rows
through this module, so the two sources always agree on the record shape.

Rules:
- instants that are missing or cannot be parsed become None
  (the status engine turns those into "archived", never an error)
- naive instants are taken as UTC
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from courseschedule.model import (
    Checker,
    CourseEventRecord,
    CourseTaskRecord,
    InterviewResult,
    Person,
    ReviewerAssignment,
    RoundMembership,
    ScoringPolicy,
    ScreeningResult,
    StudentSummary,
    TaskResult,
    TaskSubmission,
    TaskWindow,
    TeamDistributionRound,
)

Row = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or datetime) into an aware UTC-based datetime.
    Returns None for missing or invalid values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        # fromisoformat() on older interpreters does not accept "Z"
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _nested(row: Row, key: str) -> Row:
    value = row.get(key)
    return value if isinstance(value, Mapping) else {}


def parse_person(data: Any) -> Optional[Person]:
    if not isinstance(data, Mapping):
        return None
    pid = _int(data.get("id"))
    if pid is None:
        return None
    name = data.get("name")
    if name is None and (data.get("firstName") or data.get("lastName")):
        name = f"{data.get('firstName') or ''} {data.get('lastName') or ''}".strip()
    return Person(id=pid, github_id=data.get("githubId"), name=name)


# ---------------------------------------------------------------------------
# Course collections
# ---------------------------------------------------------------------------


def parse_course_task(row: Row) -> CourseTaskRecord:
    """
    Parse one course task row.

    The display category is the course-level type override if set,
    otherwise the type of the underlying task.
    """
    task = _nested(row, "task")
    return CourseTaskRecord(
        id=int(row["id"]),
        course_id=int(row["courseId"]),
        window=TaskWindow(
            student_start=parse_instant(row.get("studentStartDate")),
            student_end=parse_instant(row.get("studentEndDate")),
            cross_check_end=parse_instant(row.get("crossCheckEndDate")),
        ),
        scoring=ScoringPolicy(
            max_score=_number(row.get("maxScore")),
            score_weight=_number(row.get("scoreWeight")),
            checker=Checker.parse(row.get("checker")),
        ),
        category=row.get("type") or task.get("type"),
        name=str(task.get("name") or row.get("name") or ""),
        description_url=task.get("descriptionUrl") or row.get("descriptionUrl"),
        organizer=parse_person(row.get("taskOwner")),
    )


def parse_course_event(row: Row) -> CourseEventRecord:
    event = _nested(row, "event")
    return CourseEventRecord(
        id=int(row["id"]),
        course_id=int(row["courseId"]),
        start=parse_instant(row.get("dateTime")),
        end=parse_instant(row.get("endTime")),
        duration=_int(row.get("duration")),
        category=event.get("type") or row.get("type"),
        name=str(event.get("name") or row.get("name") or ""),
        description_url=event.get("descriptionUrl") or row.get("descriptionUrl"),
        organizer=parse_person(row.get("organizer")),
    )


def parse_team_distribution(row: Row) -> TeamDistributionRound:
    return TeamDistributionRound(
        id=int(row["id"]),
        course_id=int(row["courseId"]),
        start=parse_instant(row.get("startDate")),
        end=parse_instant(row.get("endDate")),
        min_total_score=_number(row.get("minTotalScore")) or 0,
        name=str(row.get("name") or ""),
        description_url=row.get("descriptionUrl"),
    )


# ---------------------------------------------------------------------------
# Student collections
# ---------------------------------------------------------------------------


def parse_task_result(row: Row) -> TaskResult:
    return TaskResult(task_id=int(row["courseTaskId"]), score=_number(row.get("score")))


def parse_interview_result(row: Row) -> InterviewResult:
    return InterviewResult(task_id=int(row["courseTaskId"]), score=_number(row.get("score")))


def parse_screening_result(row: Row) -> ScreeningResult:
    """
    Feedback payloads are kept raw; they are decoded during score resolution
    so one corrupt entry cannot fail the whole fetch.
    """
    feedbacks = row.get("stageInterviewFeedbacks") or []
    payloads = tuple(f.get("json") if isinstance(f, Mapping) else f for f in feedbacks)
    return ScreeningResult(task_id=int(row["courseTaskId"]), feedbacks=payloads)


def parse_submission(row: Row) -> TaskSubmission:
    return TaskSubmission(task_id=int(row["courseTaskId"]))


def parse_reviewer_assignment(row: Row) -> ReviewerAssignment:
    return ReviewerAssignment(task_id=int(row["courseTaskId"]))


def parse_membership(row: Row) -> RoundMembership:
    student = row.get("student")
    summary: Optional[StudentSummary] = None
    if isinstance(student, Mapping):
        summary = StudentSummary(
            is_expelled=bool(student.get("isExpelled")),
            total_score=_number(student.get("totalScore")),
        )
    return RoundMembership(
        round_id=int(row["teamDistributionId"]),
        active=bool(row.get("active")),
        distributed=bool(row.get("distributed")),
        student=summary,
    )
