"""
Unit tests for the status transition tables.

Every test pins "now" explicitly, so results never depend on the clock.
"""

import unittest
from datetime import datetime, timedelta, timezone

from courseschedule.model import (
    Checker,
    CourseEventRecord,
    RoundMembership,
    ScoringPolicy,
    Status,
    StudentProgress,
    StudentSummary,
    TeamDistributionRound,
    Window,
)
from courseschedule.status import (
    cross_check_status,
    distribution_status,
    event_end_time,
    event_status,
    task_status,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
YESTERDAY = NOW - timedelta(days=1)
TOMORROW = NOW + timedelta(days=1)
OPEN = Window(YESTERDAY, TOMORROW)
CLOSED = Window(NOW - timedelta(days=10), YESTERDAY)
UPCOMING = Window(TOMORROW, TOMORROW + timedelta(days=7))

AUTO_TEST = ScoringPolicy(max_score=100, score_weight=1, checker=Checker.AUTO_TEST)
MENTOR = ScoringPolicy(max_score=100, score_weight=1, checker=Checker.MENTOR)


def _progress(score=None, submitted=False) -> StudentProgress:
    return StudentProgress(score=score, submitted=submitted)


class TestTaskStatus(unittest.TestCase):
    def test_missing_window_is_archived(self) -> None:
        self.assertEqual(task_status(NOW, Window(None, TOMORROW), MENTOR, _progress()), Status.ARCHIVED)
        self.assertEqual(task_status(NOW, Window(YESTERDAY, None), MENTOR, _progress(5)), Status.ARCHIVED)

    def test_before_start_is_future(self) -> None:
        self.assertEqual(task_status(NOW, UPCOMING, MENTOR, _progress(score=100)), Status.FUTURE)

    def test_auto_test_without_score_is_available(self) -> None:
        self.assertEqual(task_status(NOW, OPEN, AUTO_TEST, _progress()), Status.AVAILABLE)

    def test_auto_test_below_max_stays_available(self) -> None:
        self.assertEqual(task_status(NOW, OPEN, AUTO_TEST, _progress(score=60)), Status.AVAILABLE)

    def test_auto_test_with_max_score_is_done(self) -> None:
        self.assertEqual(task_status(NOW, OPEN, AUTO_TEST, _progress(score=100)), Status.DONE)

    def test_auto_test_after_window_with_score_is_done(self) -> None:
        self.assertEqual(task_status(NOW, CLOSED, AUTO_TEST, _progress(score=60)), Status.DONE)

    def test_scored_task_is_done(self) -> None:
        self.assertEqual(task_status(NOW, OPEN, MENTOR, _progress(score=0)), Status.DONE)

    def test_submitted_without_score_is_review(self) -> None:
        self.assertEqual(task_status(NOW, CLOSED, MENTOR, _progress(submitted=True)), Status.REVIEW)

    def test_open_window_is_available(self) -> None:
        self.assertEqual(task_status(NOW, OPEN, MENTOR, _progress()), Status.AVAILABLE)

    def test_closed_window_with_student_is_missed(self) -> None:
        self.assertEqual(task_status(NOW, CLOSED, MENTOR, _progress()), Status.MISSED)

    def test_closed_window_without_student_is_archived(self) -> None:
        self.assertEqual(task_status(NOW, CLOSED, MENTOR, None), Status.ARCHIVED)

    def test_window_bounds_are_inclusive(self) -> None:
        self.assertEqual(task_status(NOW, Window(NOW, TOMORROW), MENTOR, None), Status.AVAILABLE)
        self.assertEqual(task_status(NOW, Window(YESTERDAY, NOW), MENTOR, None), Status.AVAILABLE)


class TestCrossCheckStatus(unittest.TestCase):
    def test_missing_window_is_archived(self) -> None:
        self.assertEqual(cross_check_status(NOW, Window(YESTERDAY, None), False, _progress()), Status.ARCHIVED)

    def test_before_start_is_future(self) -> None:
        self.assertEqual(cross_check_status(NOW, UPCOMING, True, _progress(score=3)), Status.FUTURE)

    def test_score_means_done_in_both_phases(self) -> None:
        self.assertEqual(cross_check_status(NOW, OPEN, True, _progress(score=3)), Status.DONE)
        self.assertEqual(cross_check_status(NOW, OPEN, False, _progress(score=3)), Status.DONE)

    def test_lapsed_submit_phase_with_submission_is_done(self) -> None:
        self.assertEqual(cross_check_status(NOW, CLOSED, True, _progress(submitted=True)), Status.DONE)

    def test_lapsed_review_phase_with_submission_is_missed(self) -> None:
        self.assertEqual(cross_check_status(NOW, CLOSED, False, _progress(submitted=True)), Status.MISSED)

    def test_open_submit_phase_with_submission_is_available(self) -> None:
        self.assertEqual(cross_check_status(NOW, OPEN, True, _progress(submitted=True)), Status.AVAILABLE)

    def test_lapsed_without_student_is_archived(self) -> None:
        self.assertEqual(cross_check_status(NOW, CLOSED, True, None), Status.ARCHIVED)


def _event(start, end=None, duration=None) -> CourseEventRecord:
    return CourseEventRecord(
        id=1, course_id=1, start=start, end=end, duration=duration, category="lecture", name="Lecture"
    )


class TestEventStatus(unittest.TestCase):
    def test_started_half_an_hour_ago_is_available(self) -> None:
        event = _event(NOW - timedelta(minutes=30), duration=60)
        self.assertEqual(event_status(NOW, event), Status.AVAILABLE)

    def test_started_ninety_minutes_ago_is_archived(self) -> None:
        event = _event(NOW - timedelta(minutes=90), duration=60)
        self.assertEqual(event_status(NOW, event), Status.ARCHIVED)

    def test_default_duration_is_sixty_minutes(self) -> None:
        event = _event(NOW - timedelta(minutes=61))
        self.assertEqual(event_end_time(event), NOW - timedelta(minutes=1))
        self.assertEqual(event_status(NOW, event), Status.ARCHIVED)

    def test_zero_duration_ends_at_start(self) -> None:
        start = NOW - timedelta(minutes=10)
        event = _event(start, duration=0)
        self.assertEqual(event_end_time(event), start)
        self.assertEqual(event_status(NOW, event), Status.ARCHIVED)

    def test_explicit_end_wins_over_duration(self) -> None:
        event = _event(NOW - timedelta(hours=3), end=TOMORROW, duration=10)
        self.assertEqual(event_status(NOW, event), Status.AVAILABLE)

    def test_upcoming_event_is_future(self) -> None:
        self.assertEqual(event_status(NOW, _event(TOMORROW)), Status.FUTURE)

    def test_event_without_start_is_archived(self) -> None:
        self.assertEqual(event_status(NOW, _event(None)), Status.ARCHIVED)


def _round(start=YESTERDAY, end=TOMORROW, min_total_score=100) -> TeamDistributionRound:
    return TeamDistributionRound(
        id=5, course_id=1, start=start, end=end, min_total_score=min_total_score, name="Teams"
    )


def _membership(active=False, distributed=False, expelled=False, total=150) -> RoundMembership:
    return RoundMembership(
        round_id=5,
        active=active,
        distributed=distributed,
        student=StudentSummary(is_expelled=expelled, total_score=total),
    )


class TestDistributionStatus(unittest.TestCase):
    def test_before_start_is_future_regardless_of_membership(self) -> None:
        r = _round(start=TOMORROW, end=TOMORROW + timedelta(days=3))
        self.assertEqual(distribution_status(NOW, r, None), Status.FUTURE)
        self.assertEqual(distribution_status(NOW, r, _membership(distributed=True)), Status.FUTURE)

    def test_distributed_is_done(self) -> None:
        self.assertEqual(distribution_status(NOW, _round(), _membership(distributed=True)), Status.DONE)

    def test_active_is_registered(self) -> None:
        self.assertEqual(distribution_status(NOW, _round(), _membership(active=True)), Status.REGISTERED)

    def test_no_membership_is_unavailable(self) -> None:
        self.assertEqual(distribution_status(NOW, _round(), None), Status.UNAVAILABLE)

    def test_expelled_is_unavailable(self) -> None:
        self.assertEqual(distribution_status(NOW, _round(), _membership(expelled=True)), Status.UNAVAILABLE)

    def test_low_total_score_is_unavailable(self) -> None:
        self.assertEqual(distribution_status(NOW, _round(), _membership(total=99)), Status.UNAVAILABLE)

    def test_eligible_in_window_is_available(self) -> None:
        self.assertEqual(distribution_status(NOW, _round(), _membership()), Status.AVAILABLE)

    def test_eligible_after_window_is_missed(self) -> None:
        r = _round(start=NOW - timedelta(days=5), end=YESTERDAY)
        self.assertEqual(distribution_status(NOW, r, _membership()), Status.MISSED)

    def test_unknown_total_score_passes_threshold(self) -> None:
        self.assertEqual(distribution_status(NOW, _round(), _membership(total=None)), Status.AVAILABLE)
        r = _round(start=NOW - timedelta(days=5), end=YESTERDAY)
        self.assertEqual(distribution_status(NOW, r, _membership(total=None)), Status.MISSED)

    def test_missing_window_is_archived(self) -> None:
        self.assertEqual(distribution_status(NOW, _round(end=None), _membership()), Status.ARCHIVED)


if __name__ == "__main__":
    unittest.main()
