from __future__ import annotations
import logging
from datetime import tzinfo
from typing import Dict, List, Tuple
from icalendar import Calendar, Event as IcsEvent
from config import get_timezone
from formatting import format_duration
from models import StudySession, Subject
from scheduler import localize

logger = logging.getLogger(__name__)


def sessions_to_ics(
    sessions: List[StudySession],
    subjects: List[Subject],
    tz: tzinfo | None = None,
) -> Tuple[bytes, List[str]]:
    cal = Calendar()
    cal.add("PRODID", "-//Study Planner//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", "Study Plan")

    warnings: List[str] = []
    tz = tz or get_timezone("UTC")
    by_id: Dict[str, Subject] = {s.id: s for s in subjects}

    for session in sorted(sessions, key=lambda s: localize(s.scheduled_time, tz)):
        subject = by_id.get(session.subject_id)
        if subject is None:
            subject_name = "Unknown subject"
            warnings.append(
                f"{session.title} references subject {session.subject_id} which no longer exists."
            )
        else:
            subject_name = subject.name

        start_time = localize(session.scheduled_time, tz)
        event = IcsEvent()
        event.add("uid", f"{session.id}@study-planner")
        event.add("summary", f"Study: {session.title}")
        event.add("dtstart", start_time)
        event.add("dtend", localize(session.end_time, tz))
        event.add("status", "CONFIRMED")
        event.add("x-study-planner-state", "completed" if session.completed else "pending")
        description = (
            f"{subject_name} | {session.priority.value} priority | "
            f"{format_duration(session.duration)} planned"
        )
        if session.completed and session.actual_duration is not None:
            description += f", {format_duration(session.actual_duration)} actual"
        event.add("description", description + ".")
        if subject is not None:
            event.add("categories", [subject.name])
        cal.add_component(event)

    if warnings:
        logger.warning("Calendar export produced %d warnings", len(warnings))
    return cal.to_ical(), warnings
