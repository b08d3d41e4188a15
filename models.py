from __future__ import annotations
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

    @property
    def weight(self) -> int:
        return PRIORITY_WEIGHT[self]


PRIORITY_WEIGHT: Dict[Priority, int] = {
    Priority.high: 3,
    Priority.medium: 2,
    Priority.low: 1,
}


class SessionType(str, Enum):
    study = "study"
    review = "review"
    practice = "practice"
    reading = "reading"


class Subject(BaseModel):
    id: str
    name: str
    color: str = "#3B82F6"
    total_hours: float = Field(default=0.0, ge=0)
    target_hours: float = Field(default=10.0, ge=0)
    description: Optional[str] = None


class Task(BaseModel):
    id: str
    title: str
    subject_id: str
    due_date: datetime
    priority: Priority = Priority.medium
    completed: bool = False
    estimated_time: int = Field(gt=0)  # minutes
    description: Optional[str] = None


class StudySession(BaseModel):
    id: str
    task_id: Optional[str] = None
    title: str
    subject_id: str
    duration: int = Field(gt=0)  # planned minutes
    scheduled_time: datetime
    completed: bool = False
    actual_duration: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None
    priority: Priority = Priority.medium
    type: SessionType = SessionType.study

    @property
    def end_time(self) -> datetime:
        return self.scheduled_time + timedelta(minutes=self.duration)


class StreakInfo(BaseModel):
    current: int = Field(default=0, ge=0)
    longest: int = Field(default=0, ge=0)
    last_study_date: Optional[date] = None


class Analytics(BaseModel):
    total_study_time: int = 0  # minutes
    weekly_goal: int = 2400
    daily_average: int = 180
    subject_breakdown: Dict[str, float] = Field(default_factory=dict)
    productivity_score: int = Field(default=0, ge=0, le=100)
    streak: StreakInfo = Field(default_factory=StreakInfo)


class PlannerSettings(BaseModel):
    available_hours_per_day: float = Field(default=8.0, ge=0, le=24)
    break_minutes: int = Field(default=15, ge=0, le=180)
    min_session_minutes: int = Field(default=25, ge=1, le=600)
    weekly_goal_minutes: int = Field(default=2400, ge=0)
    daily_average_minutes: int = Field(default=180, ge=0)
    timezone: str = "UTC"
    log_level: str = "WARNING"


class AppState(BaseModel):
    subjects: List[Subject] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    sessions: List[StudySession] = Field(default_factory=list)
    settings: PlannerSettings = Field(default_factory=PlannerSettings)
