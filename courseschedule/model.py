"""
Central data model definitions used across the project.

This module defines the canonical structure of the records read from the
course platform and of the schedule items we produce from them, so that:
- all modules share the same field names
- statuses and tags are closed enums instead of loose strings
- every record is an immutable snapshot (frozen dataclasses)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple


class Status(str, Enum):
    DONE = "done"
    AVAILABLE = "available"
    ARCHIVED = "archived"
    FUTURE = "future"
    MISSED = "missed"
    REVIEW = "review"
    REGISTERED = "registered"
    UNAVAILABLE = "unavailable"


class Tag(str, Enum):
    LECTURE = "lecture"
    CODING = "coding"
    SELF_STUDY = "self-study"
    INTERVIEW = "interview"
    CROSS_CHECK_SUBMIT = "cross-check-submit"
    CROSS_CHECK_REVIEW = "cross-check-review"
    TEST = "test"
    TEAM_DISTRIBUTION = "team-distribution"


class SourceKind(str, Enum):
    TASK = "courseTask"
    EVENT = "courseEvent"
    TEAM_DISTRIBUTION = "courseTeamDistribution"


class Checker(str, Enum):
    """
    Grading mechanism of a course task.
    """

    AUTO_TEST = "auto-test"
    MENTOR = "mentor"
    ASSIGNED = "assigned"
    TASK_OWNER = "taskOwner"
    CROSS_CHECK = "crossCheck"
    JURY = "jury"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "Checker":
        try:
            return cls(str(value))
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Person:
    id: int
    github_id: Optional[str] = None
    name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "githubId": self.github_id, "name": self.name}


@dataclass(frozen=True)
class TaskWindow:
    """
    Student-facing time window of a course task.

    A task with either student endpoint missing is unscheduled.
    """

    student_start: Optional[datetime]
    student_end: Optional[datetime]
    cross_check_end: Optional[datetime] = None


@dataclass(frozen=True)
class Window:
    start: Optional[datetime]
    end: Optional[datetime]

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, now: datetime) -> bool:
        # inclusive on both ends
        if self.start is None or self.end is None:
            return False
        return self.start <= now <= self.end


@dataclass(frozen=True)
class ScoringPolicy:
    max_score: Optional[float]
    score_weight: Optional[float]
    checker: Checker


@dataclass(frozen=True)
class CourseTaskRecord:
    id: int
    course_id: int
    window: TaskWindow
    scoring: ScoringPolicy
    category: Optional[str]
    name: str
    description_url: Optional[str] = None
    organizer: Optional[Person] = None


@dataclass(frozen=True)
class CourseEventRecord:
    """
    Represents one scheduled live event (lecture, self-study slot, ...).

    Either ``end`` is given or it is derived from ``start + duration``.
    """

    id: int
    course_id: int
    start: Optional[datetime]
    end: Optional[datetime]
    duration: Optional[int]
    category: Optional[str]
    name: str
    description_url: Optional[str] = None
    organizer: Optional[Person] = None


@dataclass(frozen=True)
class TeamDistributionRound:
    id: int
    course_id: int
    start: Optional[datetime]
    end: Optional[datetime]
    min_total_score: float
    name: str
    description_url: Optional[str] = None


@dataclass(frozen=True)
class TaskResult:
    task_id: int
    score: Optional[float]


@dataclass(frozen=True)
class InterviewResult:
    task_id: int
    score: Optional[float]


@dataclass(frozen=True)
class ScreeningResult:
    """
    Completed screening (stage) interview with its raw feedback payloads.

    Each payload is a JSON string or an already decoded mapping.
    """

    task_id: int
    feedbacks: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class TaskSubmission:
    task_id: int


@dataclass(frozen=True)
class ReviewerAssignment:
    task_id: int


@dataclass(frozen=True)
class StudentSummary:
    is_expelled: bool
    total_score: Optional[float]


@dataclass(frozen=True)
class RoundMembership:
    round_id: int
    active: bool
    distributed: bool
    student: Optional[StudentSummary] = None


@dataclass(frozen=True)
class StudentProgress:
    """
    Resolved per-student state for one task.

    Passing ``None`` instead of an instance means "no student context".
    """

    score: Optional[float]
    submitted: bool


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class ScheduleItem:
    """
    One entry of the aggregated timeline.
    """

    id: int
    name: str
    course_id: int
    window: Window
    status: Status
    tag: Tag
    source_kind: SourceKind
    score: Optional[float] = None
    max_score: Optional[float] = None
    score_weight: Optional[float] = None
    description_url: Optional[str] = None
    organizer: Optional[Person] = None
    cross_check_end: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the camelCase shape used by the course platform API.
        """
        return {
            "id": self.id,
            "name": self.name,
            "courseId": self.course_id,
            "startDate": _iso(self.window.start),
            "endDate": _iso(self.window.end),
            "crossCheckEndDate": _iso(self.cross_check_end),
            "score": self.score,
            "maxScore": self.max_score,
            "scoreWeight": self.score_weight,
            "status": self.status.value,
            "tag": self.tag.value,
            "descriptionUrl": self.description_url,
            "organizer": self.organizer.to_dict() if self.organizer else None,
            "type": self.source_kind.value,
        }
