from __future__ import annotations
import logging
import math
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, List
from config import get_timezone
from models import Analytics, PlannerSettings, StreakInfo, StudySession, Subject
from scheduler import local_date

logger = logging.getLogger(__name__)

COMPLETION_WEIGHT = 0.6
EFFICIENCY_WEIGHT = 0.4


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _efficiency(session: StudySession) -> float:
    # finishing early or on time earns full credit, overrunning earns less
    if session.actual_duration is not None and session.duration > 0:
        return min(session.actual_duration / session.duration, 1.0)
    return 1.0


def calculate_productivity_score(sessions: List[StudySession]) -> int:
    if not sessions:
        return 0

    completed = [s for s in sessions if s.completed]
    completion_rate = len(completed) / len(sessions)
    if completed:
        efficiency = sum(_efficiency(s) for s in completed) / len(completed)
    else:
        efficiency = 0.0

    score = _round_half_up((completion_rate * COMPLETION_WEIGHT + efficiency * EFFICIENCY_WEIGHT) * 100)
    return max(0, min(100, score))


def _current_streak(study_days: List[date], today: date) -> int:
    past = {d for d in study_days if d <= today}
    anchor = today
    current = 0
    while anchor in past:
        current += 1
        anchor -= timedelta(days=1)
    return current


def _longest_streak(study_days: List[date]) -> int:
    longest = run = 1
    for prev, cur in zip(study_days, study_days[1:]):
        if (cur - prev).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
    return longest


def get_streak_info(
    sessions: List[StudySession],
    today: date | None = None,
    tz: tzinfo | None = None,
) -> StreakInfo:
    """
    Count consecutive calendar days with at least one completed session.

    Days are calendar dates in ``tz`` (UTC when omitted). ``current`` is
    the run ending today; it is 0 when nothing is completed today.
    """
    tz = tz or get_timezone("UTC")
    study_days = sorted({local_date(s.scheduled_time, tz) for s in sessions if s.completed})
    if not study_days:
        return StreakInfo()

    today = today or datetime.now(tz).date()
    return StreakInfo(
        current=_current_streak(study_days, today),
        longest=_longest_streak(study_days),
        last_study_date=study_days[-1],
    )


def total_study_time(sessions: List[StudySession]) -> int:
    total = 0
    for s in sessions:
        if not s.completed:
            continue
        total += s.actual_duration if s.actual_duration is not None else s.duration
    return total


def subject_breakdown(subjects: List[Subject]) -> Dict[str, float]:
    return {s.id: s.total_hours * 60 for s in subjects}


def build_analytics(
    subjects: List[Subject],
    sessions: List[StudySession],
    settings: PlannerSettings | None = None,
    today: date | None = None,
) -> Analytics:
    settings = settings or PlannerSettings()
    tz = get_timezone(settings.timezone)
    analytics = Analytics(
        total_study_time=total_study_time(sessions),
        weekly_goal=settings.weekly_goal_minutes,
        daily_average=settings.daily_average_minutes,
        subject_breakdown=subject_breakdown(subjects),
        productivity_score=calculate_productivity_score(sessions),
        streak=get_streak_info(sessions, today=today, tz=tz),
    )
    logger.debug(
        "Analytics: %d min studied, score %d, streak %d/%d",
        analytics.total_study_time,
        analytics.productivity_score,
        analytics.streak.current,
        analytics.streak.longest,
    )
    return analytics


def subject_progress(subject: Subject) -> float:
    if subject.target_hours <= 0:
        return 0.0
    return min(subject.total_hours / subject.target_hours * 100, 100.0)


def weekly_goal_progress(analytics: Analytics) -> float:
    if analytics.weekly_goal <= 0:
        return 0.0
    return analytics.total_study_time / analytics.weekly_goal * 100


def today_progress(sessions_today: List[StudySession]) -> float:
    if not sessions_today:
        return 0.0
    done = sum(1 for s in sessions_today if s.completed)
    return done / len(sessions_today) * 100
