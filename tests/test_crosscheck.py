"""
Unit tests for splitting a cross-check task into submit and review items.
"""

import unittest
from datetime import datetime, timedelta, timezone

from courseschedule.crosscheck import split_cross_check_task
from courseschedule.model import (
    Checker,
    CourseTaskRecord,
    Person,
    ScoringPolicy,
    SourceKind,
    Status,
    StudentProgress,
    Tag,
    TaskWindow,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
T0 = NOW - timedelta(days=14)
T1 = NOW - timedelta(days=2)
T2 = NOW + timedelta(days=5)


def _cross_check_task(t0=T0, t1=T1, t2=T2) -> CourseTaskRecord:
    return CourseTaskRecord(
        id=42,
        course_id=3,
        window=TaskWindow(student_start=t0, student_end=t1, cross_check_end=t2),
        scoring=ScoringPolicy(max_score=50, score_weight=0.5, checker=Checker.CROSS_CHECK),
        category="htmltask",
        name="Portfolio",
        description_url="https://example.org/portfolio",
        organizer=Person(id=7, github_id="owner"),
    )


class TestSplitCrossCheckTask(unittest.TestCase):
    def test_windows_and_tags(self) -> None:
        submit, review = split_cross_check_task(_cross_check_task(), NOW, None)

        self.assertEqual(submit.tag, Tag.CROSS_CHECK_SUBMIT)
        self.assertEqual((submit.window.start, submit.window.end), (T0, T1))
        self.assertEqual(review.tag, Tag.CROSS_CHECK_REVIEW)
        self.assertEqual((review.window.start, review.window.end), (T1, T2))

    def test_items_share_task_metadata(self) -> None:
        items = split_cross_check_task(_cross_check_task(), NOW, StudentProgress(score=31, submitted=True))
        for item in items:
            self.assertEqual(item.id, 42)
            self.assertEqual(item.course_id, 3)
            self.assertEqual(item.name, "Portfolio")
            self.assertEqual(item.score, 31)
            self.assertEqual(item.max_score, 50)
            self.assertEqual(item.score_weight, 0.5)
            self.assertEqual(item.organizer, Person(id=7, github_id="owner"))
            self.assertEqual(item.source_kind, SourceKind.TASK)

    def test_submitted_student_during_review(self) -> None:
        submit, review = split_cross_check_task(
            _cross_check_task(), NOW, StudentProgress(score=None, submitted=True)
        )
        self.assertEqual(submit.status, Status.DONE)
        self.assertEqual(review.status, Status.AVAILABLE)

    def test_student_who_never_submitted(self) -> None:
        submit, review = split_cross_check_task(
            _cross_check_task(), NOW, StudentProgress(score=None, submitted=False)
        )
        self.assertEqual(submit.status, Status.MISSED)
        self.assertEqual(review.status, Status.AVAILABLE)

    def test_review_phase_not_done_by_submission_alone(self) -> None:
        task = _cross_check_task(t0=NOW - timedelta(days=20), t1=NOW - timedelta(days=10), t2=NOW - timedelta(days=1))
        submit, review = split_cross_check_task(task, NOW, StudentProgress(score=None, submitted=True))
        self.assertEqual(submit.status, Status.DONE)
        self.assertEqual(review.status, Status.MISSED)

    def test_without_cross_check_end_review_is_archived(self) -> None:
        task = _cross_check_task(t2=None)
        _, review = split_cross_check_task(task, NOW, StudentProgress(score=None, submitted=True))
        self.assertEqual(review.status, Status.ARCHIVED)

    def test_without_student_context(self) -> None:
        task = _cross_check_task(t0=NOW - timedelta(days=20), t1=NOW - timedelta(days=10), t2=NOW - timedelta(days=1))
        submit, review = split_cross_check_task(task, NOW, None)
        self.assertEqual(submit.status, Status.ARCHIVED)
        self.assertEqual(review.status, Status.ARCHIVED)
        self.assertIsNone(submit.score)


if __name__ == "__main__":
    unittest.main()
