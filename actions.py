from __future__ import annotations
import logging
from datetime import date, datetime
from typing import Any, List
from uuid import uuid4
from pydantic import BaseModel
from analytics import build_analytics
from errors import InvalidArgument
from models import Analytics, AppState, Priority, StudySession, Subject, Task
from scheduler import generate_smart_schedule

logger = logging.getLogger(__name__)


def _find_subject(state: AppState, subject_id: str) -> Subject:
    for s in state.subjects:
        if s.id == subject_id:
            return s
    raise InvalidArgument(f"Unknown subject: {subject_id!r}")


def _find_task(state: AppState, task_id: str) -> Task:
    for t in state.tasks:
        if t.id == task_id:
            return t
    raise InvalidArgument(f"Unknown task: {task_id!r}")


def _find_session(state: AppState, session_id: str) -> StudySession:
    for s in state.sessions:
        if s.id == session_id:
            return s
    raise InvalidArgument(f"Unknown session: {session_id!r}")


def _apply_changes(item: BaseModel, changes: dict[str, Any]) -> Any:
    if "id" in changes and changes["id"] != getattr(item, "id"):
        raise InvalidArgument("Ids cannot be changed.")
    # revalidate the whole record so constraints hold after the edit
    return type(item).model_validate({**item.model_dump(), **changes})


def _replace(items: List[Any], updated: Any) -> None:
    for i, existing in enumerate(items):
        if existing.id == updated.id:
            items[i] = updated
            return


def regenerate_schedule(state: AppState, start: datetime | None = None) -> List[StudySession]:
    """
    Rebuild the pending tail of the schedule.
    Completed sessions are kept as they are; pending ones are discarded and
    the open backlog is scheduled again from ``start``.
    """
    kept = [s for s in state.sessions if s.completed]
    fresh = generate_smart_schedule(
        state.tasks,
        state.subjects,
        state.settings.available_hours_per_day,
        start=start,
        settings=state.settings,
    )
    dropped = len(state.sessions) - len(kept)
    state.sessions = kept + fresh
    logger.info(
        "Regenerated schedule: kept %d completed, replaced %d pending with %d",
        len(kept), dropped, len(fresh),
    )
    return fresh


def add_subject(
    state: AppState,
    name: str,
    color: str = "#3B82F6",
    target_hours: float = 10.0,
    description: str | None = None,
) -> Subject:
    name = name.strip()
    if not name:
        raise InvalidArgument("Subject name cannot be empty.")
    subject = Subject(
        id=str(uuid4()),
        name=name,
        color=color,
        total_hours=0.0,
        target_hours=target_hours,
        description=description or None,
    )
    state.subjects.append(subject)
    logger.info("Added subject %s (%s)", subject.id, subject.name)
    return subject


def update_subject(state: AppState, subject_id: str, **changes: Any) -> Subject:
    updated = _apply_changes(_find_subject(state, subject_id), changes)
    _replace(state.subjects, updated)
    logger.info("Updated subject %s: %s", subject_id, sorted(changes))
    return updated


def delete_subject(state: AppState, subject_id: str) -> None:
    before = (len(state.tasks), len(state.sessions))
    state.subjects = [s for s in state.subjects if s.id != subject_id]
    state.tasks = [t for t in state.tasks if t.subject_id != subject_id]
    state.sessions = [s for s in state.sessions if s.subject_id != subject_id]
    logger.info(
        "Deleted subject %s with %d tasks and %d sessions",
        subject_id,
        before[0] - len(state.tasks),
        before[1] - len(state.sessions),
    )


def add_task(
    state: AppState,
    title: str,
    subject_id: str,
    due_date: datetime,
    priority: Priority | str = Priority.medium,
    estimated_time: int = 60,
    description: str | None = None,
    start: datetime | None = None,
) -> Task:
    title = title.strip()
    if not title:
        raise InvalidArgument("Task title cannot be empty.")
    _find_subject(state, subject_id)
    task = Task(
        id=str(uuid4()),
        title=title,
        subject_id=subject_id,
        due_date=due_date,
        priority=priority,
        completed=False,
        estimated_time=estimated_time,
        description=description or None,
    )
    state.tasks.append(task)
    logger.info("Added task %s (%s)", task.id, task.title)
    regenerate_schedule(state, start=start)
    return task


def update_task(
    state: AppState,
    task_id: str,
    start: datetime | None = None,
    **changes: Any,
) -> Task:
    updated = _apply_changes(_find_task(state, task_id), changes)
    _find_subject(state, updated.subject_id)
    _replace(state.tasks, updated)
    logger.info("Updated task %s: %s", task_id, sorted(changes))
    regenerate_schedule(state, start=start)
    return updated


def toggle_task(state: AppState, task_id: str, start: datetime | None = None) -> Task:
    task = _find_task(state, task_id)
    return update_task(state, task_id, start=start, completed=not task.completed)


def delete_task(state: AppState, task_id: str) -> None:
    state.tasks = [t for t in state.tasks if t.id != task_id]
    before = len(state.sessions)
    state.sessions = [s for s in state.sessions if s.task_id != task_id]
    logger.info("Deleted task %s and %d sessions", task_id, before - len(state.sessions))


def complete_session(
    state: AppState,
    session_id: str,
    actual_duration: int | None = None,
) -> StudySession:
    session = _find_session(state, session_id)
    if session.completed:
        raise InvalidArgument(f"Session {session_id!r} is already completed.")
    if actual_duration is None:
        actual_duration = session.duration
    if actual_duration < 0:
        raise InvalidArgument("actual_duration cannot be negative.")

    done = session.model_copy(update={"completed": True, "actual_duration": actual_duration})
    _replace(state.sessions, done)

    try:
        subject = _find_subject(state, session.subject_id)
    except InvalidArgument:
        logger.warning("Completed session %s has no subject %s", session_id, session.subject_id)
    else:
        _replace(state.subjects, subject.model_copy(
            update={"total_hours": subject.total_hours + actual_duration / 60},
        ))

    logger.info("Completed session %s in %d minutes", session_id, actual_duration)
    return done


def analytics_for(state: AppState, today: date | None = None) -> Analytics:
    return build_analytics(state.subjects, state.sessions, settings=state.settings, today=today)
