import unittest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from analytics import (
    build_analytics,
    calculate_productivity_score,
    get_streak_info,
    subject_progress,
    today_progress,
    total_study_time,
    weekly_goal_progress,
)
from errors import InvalidArgument
from models import Analytics, PlannerSettings, StudySession, Subject


def make_session(sid, when, duration=30, completed=True, actual=None, subject_id="math"):
    return StudySession(
        id=sid,
        task_id=sid,
        title=f"Session {sid}",
        subject_id=subject_id,
        duration=duration,
        scheduled_time=when,
        completed=completed,
        actual_duration=actual,
    )


def on_day(day, hour=10):
    return datetime(2026, 3, day, hour, 0)


class ProductivityScoreTests(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(calculate_productivity_score([]), 0)

    def test_all_completed_on_time(self):
        sessions = [make_session(str(i), on_day(i + 1), actual=30) for i in range(4)]
        self.assertEqual(calculate_productivity_score(sessions), 100)

    def test_nothing_completed(self):
        sessions = [make_session(str(i), on_day(i + 1), completed=False) for i in range(3)]
        self.assertEqual(calculate_productivity_score(sessions), 0)

    def test_half_completed(self):
        sessions = [
            make_session("a", on_day(1), actual=30),
            make_session("b", on_day(2), completed=False),
        ]
        self.assertEqual(calculate_productivity_score(sessions), 70)

    def test_short_actual_reduces_efficiency(self):
        sessions = [make_session("a", on_day(1), duration=30, actual=15)]
        self.assertEqual(calculate_productivity_score(sessions), 80)

    def test_long_actual_is_capped(self):
        sessions = [make_session("a", on_day(1), duration=30, actual=90)]
        self.assertEqual(calculate_productivity_score(sessions), 100)

    def test_missing_actual_gets_full_credit(self):
        sessions = [make_session("a", on_day(1), actual=None)]
        self.assertEqual(calculate_productivity_score(sessions), 100)

    def test_zero_actual_counts_as_no_credit(self):
        sessions = [make_session("a", on_day(1), actual=0)]
        self.assertEqual(calculate_productivity_score(sessions), 60)

    def test_score_bounds(self):
        for completed in range(0, 5):
            for actual in (0, 10, 30, 200, None):
                sessions = [
                    make_session(str(i), on_day(i + 1), completed=i < completed, actual=actual)
                    for i in range(4)
                ]
                score = calculate_productivity_score(sessions)
                self.assertGreaterEqual(score, 0)
                self.assertLessEqual(score, 100)


class StreakTests(unittest.TestCase):
    def setUp(self):
        self.sessions = [make_session(str(d), on_day(d)) for d in (1, 2, 3, 5, 6)]

    def test_empty(self):
        info = get_streak_info([])
        self.assertEqual((info.current, info.longest), (0, 0))
        self.assertIsNone(info.last_study_date)

    def test_gap_splits_runs(self):
        info = get_streak_info(self.sessions, today=date(2026, 3, 6))
        self.assertEqual(info.longest, 3)
        self.assertEqual(info.current, 2)
        self.assertEqual(info.last_study_date, date(2026, 3, 6))

    def test_current_is_zero_without_a_session_today(self):
        info = get_streak_info(self.sessions, today=date(2026, 3, 7))
        self.assertEqual(info.current, 0)
        self.assertEqual(info.longest, 3)
        self.assertEqual(get_streak_info(self.sessions, today=date(2026, 3, 8)).current, 0)

    def test_same_day_sessions_count_once(self):
        sessions = self.sessions + [make_session("extra", on_day(2, hour=18)), make_session("x", on_day(3, hour=7))]
        info = get_streak_info(sessions, today=date(2026, 3, 3))
        self.assertEqual(info.longest, 3)
        self.assertEqual(info.current, 3)

    def test_incomplete_sessions_are_ignored(self):
        sessions = self.sessions + [make_session("4", on_day(4), completed=False)]
        self.assertEqual(get_streak_info(sessions, today=date(2026, 3, 6)).longest, 3)

    def test_future_sessions_do_not_count_towards_current(self):
        sessions = [make_session("a", on_day(10)), make_session("b", on_day(11))]
        info = get_streak_info(sessions, today=date(2026, 3, 5))
        self.assertEqual(info.current, 0)
        self.assertEqual(info.longest, 2)

    def test_days_follow_the_configured_timezone(self):
        late_evening_utc = datetime(2026, 3, 1, 23, 30, tzinfo=timezone.utc)
        sessions = [
            make_session("a", late_evening_utc),
            make_session("b", datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)),
        ]
        self.assertEqual(get_streak_info(sessions, today=date(2026, 3, 2)).longest, 2)
        tokyo = get_streak_info(sessions, today=date(2026, 3, 2), tz=ZoneInfo("Asia/Tokyo"))
        self.assertEqual(tokyo.longest, 1)
        self.assertEqual(tokyo.last_study_date, date(2026, 3, 2))


class AnalyticsTests(unittest.TestCase):
    def test_build_analytics(self):
        subjects = [
            Subject(id="math", name="Mathematics", total_hours=2.5, target_hours=10),
            Subject(id="phys", name="Physics", total_hours=0, target_hours=5),
        ]
        sessions = [
            make_session("a", on_day(1), duration=60, actual=45),
            make_session("b", on_day(2), duration=30),
            make_session("c", on_day(3), duration=50, completed=False),
        ]
        settings = PlannerSettings(weekly_goal_minutes=600, daily_average_minutes=90)
        analytics = build_analytics(subjects, sessions, settings=settings, today=date(2026, 3, 2))
        self.assertEqual(analytics.total_study_time, 75)
        self.assertEqual(analytics.weekly_goal, 600)
        self.assertEqual(analytics.daily_average, 90)
        self.assertEqual(analytics.subject_breakdown, {"math": 150.0, "phys": 0.0})
        self.assertEqual(analytics.streak.current, 2)
        self.assertEqual(analytics.productivity_score, calculate_productivity_score(sessions))

    def test_unknown_timezone_is_rejected(self):
        with self.assertRaises(InvalidArgument):
            build_analytics([], [], settings=PlannerSettings(timezone="Mars/Olympus"))

    def test_total_study_time_empty(self):
        self.assertEqual(total_study_time([]), 0)

    def test_subject_progress(self):
        self.assertEqual(subject_progress(Subject(id="s", name="S", total_hours=5, target_hours=20)), 25.0)
        self.assertEqual(subject_progress(Subject(id="s", name="S", total_hours=30, target_hours=20)), 100.0)
        self.assertEqual(subject_progress(Subject(id="s", name="S", total_hours=3, target_hours=0)), 0.0)

    def test_goal_and_today_progress(self):
        self.assertEqual(weekly_goal_progress(Analytics(total_study_time=1200, weekly_goal=2400)), 50.0)
        self.assertEqual(weekly_goal_progress(Analytics(total_study_time=10, weekly_goal=0)), 0.0)
        self.assertEqual(today_progress([]), 0.0)
        today = [make_session("a", on_day(1)), make_session("b", on_day(1), completed=False)]
        self.assertEqual(today_progress(today), 50.0)


if __name__ == "__main__":
    unittest.main()
