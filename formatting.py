from __future__ import annotations
from datetime import datetime


def format_duration(minutes: float) -> str:
    total = max(0, int(round(minutes)))
    hours, mins = divmod(total, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_clock_time(value: datetime) -> str:
    # 12-hour clock, e.g. "09:05 AM"
    return value.strftime("%I:%M %p")


def format_percent(value: float) -> str:
    return f"{int(round(value))}%"
