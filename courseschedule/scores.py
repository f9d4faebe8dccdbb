"""
Score and submission resolution for one course task.

Three scoring subsystems keep results independently:
- direct task results
- interview results
- screening (stage) interviews with free-form feedback payloads

The "current" score is the first one found in that order. Nothing here
mutates its inputs.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Callable, Iterable, Optional

from courseschedule.model import (
    InterviewResult,
    ReviewerAssignment,
    ScreeningResult,
    TaskResult,
    TaskSubmission,
)

logger = logging.getLogger(__name__)


def _as_number(value: Any) -> Optional[float]:
    """
    Return value as a number, or None if it is not one.
    Numeric strings are accepted, booleans are not.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _dig(payload: Any, *keys: str) -> Any:
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def feedback_value(payload: Any) -> float:
    """
    Extract the score contributed by one screening feedback payload.

    Prefers the resume score, then the final decision score, else 0.
    Payloads that cannot be decoded contribute 0.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (ValueError, TypeError):
            logger.debug("Ignoring malformed screening feedback: %r", payload)
            return 0

    resume_score = _as_number(_dig(payload, "resume", "score"))
    if resume_score is not None:
        return resume_score
    decision_score = _as_number(_dig(payload, "steps", "decision", "values", "finalScore"))
    if decision_score is not None:
        return decision_score
    return 0


def _direct_score(task_id: int, results: Iterable[TaskResult]) -> Optional[float]:
    for r in results:
        if r.task_id == task_id:
            return _as_number(r.score)
    return None


def _interview_score(task_id: int, results: Iterable[InterviewResult]) -> Optional[float]:
    for r in results:
        if r.task_id == task_id:
            return _as_number(r.score)
    return None


def _screening_score(task_id: int, results: Iterable[ScreeningResult]) -> Optional[float]:
    record = next((r for r in results if r.task_id == task_id), None)
    if record is None:
        return None
    values = [feedback_value(f) for f in record.feedbacks]
    # max over an empty feedback set has no value
    if not values:
        return None
    return max(values)


def resolve_score(
    task_id: int,
    task_results: Iterable[TaskResult] = (),
    interview_results: Iterable[InterviewResult] = (),
    screening_results: Iterable[ScreeningResult] = (),
) -> Optional[float]:
    """
    Resolve the current score of a task for one student.

    First match wins, independent of magnitude. A score of 0 is a valid
    result; None means no subsystem has a usable score.
    """
    chain: list[Callable[[], Optional[float]]] = [
        lambda: _direct_score(task_id, task_results),
        lambda: _interview_score(task_id, interview_results),
        lambda: _screening_score(task_id, screening_results),
    ]
    for step in chain:
        score = step()
        if score is not None:
            return score if math.isfinite(score) else None
    return None


def resolve_submitted(
    task_id: int,
    submissions: Iterable[TaskSubmission] = (),
    reviewer_assignments: Iterable[ReviewerAssignment] = (),
) -> bool:
    """
    True if the student submitted work for the task or was assigned as reviewer.
    """
    return any(s.task_id == task_id for s in submissions) or any(
        a.task_id == task_id for a in reviewer_assignments
    )
