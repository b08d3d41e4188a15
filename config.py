from __future__ import annotations
import logging
import os
from typing import Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from errors import InvalidArgument
from models import PlannerSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "STUDY_PLANNER_"

_ENV_FIELDS: Dict[str, str] = {
    "AVAILABLE_HOURS": "available_hours_per_day",
    "BREAK_MINUTES": "break_minutes",
    "MIN_SESSION_MINUTES": "min_session_minutes",
    "WEEKLY_GOAL_MINUTES": "weekly_goal_minutes",
    "DAILY_AVERAGE_MINUTES": "daily_average_minutes",
    "TIMEZONE": "timezone",
    "LOG_LEVEL": "log_level",
}


def load_settings(environ: Dict[str, str] | None = None) -> PlannerSettings:
    """
    Build planner settings from defaults plus STUDY_PLANNER_* overrides.
    Values are validated by the settings model, so a bad override raises
    a pydantic ValidationError instead of silently falling back.
    """
    env = os.environ if environ is None else environ
    overrides = {}
    for suffix, field_name in _ENV_FIELDS.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is not None and raw.strip():
            overrides[field_name] = raw.strip()
    settings = PlannerSettings.model_validate(overrides)
    get_timezone(settings.timezone)
    if overrides:
        logger.debug("Loaded planner settings overrides: %s", sorted(overrides))
    return settings


def get_timezone(name: str | None = None) -> ZoneInfo:
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidArgument(f"Unknown timezone: {name!r}") from exc


def configure_logging(settings: PlannerSettings | None = None) -> None:
    settings = settings or load_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise InvalidArgument(f"Unknown log level: {settings.log_level!r}")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)
