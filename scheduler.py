from __future__ import annotations
import logging
import math
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional
from uuid import uuid4
from config import get_timezone
from errors import InvalidArgument
from models import PlannerSettings, StudySession, Subject, Task, SessionType

logger = logging.getLogger(__name__)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """
    Express a datetime in the planner timezone.
    Naive values are taken as wall-clock time in that zone.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_date(value: datetime, tz: tzinfo) -> date:
    return localize(value, tz).date()


def _task_sort_key(task: Task, tz: tzinfo) -> tuple:
    # higher priority first, then earlier due date
    return (-task.priority.weight, localize(task.due_date, tz))


def _budget_minutes(available_hours_per_day: float) -> int:
    return math.floor(round(available_hours_per_day * 60, 6))


def _validate_inputs(
    tasks: Iterable[Task],
    subjects: Iterable[Subject],
    available_hours_per_day: float,
) -> None:
    if (
        isinstance(available_hours_per_day, bool)
        or not isinstance(available_hours_per_day, (int, float))
        or not math.isfinite(available_hours_per_day)
    ):
        raise InvalidArgument(
            f"available_hours_per_day must be a finite number, got {available_hours_per_day!r}"
        )

    known = {s.id for s in subjects}
    for t in tasks:
        if t.completed:
            continue
        if t.estimated_time <= 0:
            raise InvalidArgument(f"Task {t.id!r} has a non-positive estimated_time")
        if t.subject_id not in known:
            raise InvalidArgument(f"Task {t.id!r} references unknown subject {t.subject_id!r}")


def generate_smart_schedule(
    tasks: List[Task],
    subjects: List[Subject],
    available_hours_per_day: float,
    start: datetime | None = None,
    settings: PlannerSettings | None = None,
) -> List[StudySession]:
    """
    Greedily place the incomplete backlog into one day's study budget.

    Tasks are taken by priority (high first) then due date; each yields at
    most one session, clipped to what is left of the budget. Clipped
    sessions shorter than the minimum length are skipped without moving the
    cursor. Consecutive sessions are separated by a fixed break.
    """
    settings = settings or PlannerSettings()
    _validate_inputs(tasks, subjects, available_hours_per_day)
    tz = get_timezone(settings.timezone)

    if available_hours_per_day <= 0:
        return []

    backlog = sorted((t for t in tasks if not t.completed), key=lambda t: _task_sort_key(t, tz))
    if not backlog:
        return []

    current_time = start or datetime.now(tz)
    remaining = _budget_minutes(available_hours_per_day)

    sessions: List[StudySession] = []
    for task in backlog:
        if remaining <= 0:
            break

        duration = min(task.estimated_time, remaining)
        if duration < settings.min_session_minutes:
            logger.debug(
                "Skipping task %s: %s minutes left is under the %s minute minimum",
                task.id, duration, settings.min_session_minutes,
            )
            continue

        sessions.append(StudySession(
            id=str(uuid4()),
            task_id=task.id,
            title=task.title,
            subject_id=task.subject_id,
            duration=duration,
            scheduled_time=current_time,
            completed=False,
            priority=task.priority,
            type=SessionType.study,
        ))
        current_time = current_time + timedelta(minutes=duration + settings.break_minutes)
        remaining -= duration

    logger.info(
        "Scheduled %d of %d open tasks, %d minutes of budget left",
        len(sessions), len(backlog), remaining,
    )
    return sessions


def sessions_on(
    sessions: List[StudySession],
    day: date,
    tz: tzinfo,
) -> List[StudySession]:
    out = [s for s in sessions if local_date(s.scheduled_time, tz) == day]
    out.sort(key=lambda s: localize(s.scheduled_time, tz))
    return out


def upcoming_sessions(
    sessions: List[StudySession],
    now: datetime,
    tz: tzinfo,
    limit: int = 5,
) -> List[StudySession]:
    now = localize(now, tz)
    pending = [
        s for s in sessions
        if not s.completed and localize(s.scheduled_time, tz) > now
    ]
    pending.sort(key=lambda s: localize(s.scheduled_time, tz))
    return pending[:limit]


def next_session(
    sessions: List[StudySession],
    today: date,
    tz: tzinfo,
) -> Optional[StudySession]:
    for s in sessions_on(sessions, today, tz):
        if not s.completed:
            return s
    return None


def schedule_summary(sessions: List[StudySession]) -> Dict[str, int]:
    completed = sum(1 for s in sessions if s.completed)
    return {
        "completed": completed,
        "pending": len(sessions) - completed,
        "planned_minutes": sum(s.duration for s in sessions),
    }
