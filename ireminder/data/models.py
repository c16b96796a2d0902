"""
iReminder — Data Models.

Tasks, reminders, wellness check-ins and productivity snapshots live only on
this machine. Each model knows how to turn itself into the camelCase record
layout written by the persistence adapter, and back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def weight(self) -> int:
        """Sort weight: low=1 < medium=2 < high=3 < urgent=4."""
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.URGENT: 4,
}


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RecommendationType(str, Enum):
    TASK_ORDER = "task_order"
    BREAK = "break"
    WELLNESS = "wellness"
    FOCUS = "focus"


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class Task:
    """A to-do item owned by the task store."""

    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    description: str | None = None
    due_date: datetime | None = None
    due_time: str | None = None           # "HH:MM", display only
    category: str | None = None
    estimated_duration: int | None = None  # minutes

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.value,
            "dueDate": _iso(self.due_date),
            "dueTime": self.due_time,
            "category": self.category,
            "estimatedDuration": self.estimated_duration,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Task:
        return cls(
            id=record["id"],
            title=record["title"],
            description=record.get("description"),
            completed=bool(record.get("completed", False)),
            priority=Priority(record.get("priority", "medium")),
            due_date=_dt(record.get("dueDate")),
            due_time=record.get("dueTime"),
            category=record.get("category"),
            estimated_duration=record.get("estimatedDuration"),
            created_at=datetime.fromisoformat(record["createdAt"]),
            updated_at=datetime.fromisoformat(record["updatedAt"]),
        )


@dataclass
class Reminder:
    """A time-triggered notice, optionally linked to a task by id."""

    id: str
    title: str
    message: str
    scheduled_time: datetime
    created_at: datetime
    task_id: str | None = None
    is_recurring: bool = False
    recurring_pattern: RecurrencePattern | None = None
    is_completed: bool = False
    snooze_count: int = 0

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "title": self.title,
            "message": self.message,
            "scheduledTime": _iso(self.scheduled_time),
            "isRecurring": self.is_recurring,
            "recurringPattern": (
                self.recurring_pattern.value if self.recurring_pattern else None
            ),
            "isCompleted": self.is_completed,
            "snoozeCount": self.snooze_count,
            "createdAt": _iso(self.created_at),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Reminder:
        pattern = record.get("recurringPattern")
        return cls(
            id=record["id"],
            task_id=record.get("taskId"),
            title=record["title"],
            message=record.get("message", ""),
            scheduled_time=datetime.fromisoformat(record["scheduledTime"]),
            is_recurring=bool(record.get("isRecurring", False)),
            recurring_pattern=RecurrencePattern(pattern) if pattern else None,
            is_completed=bool(record.get("isCompleted", False)),
            snooze_count=int(record.get("snoozeCount", 0)),
            created_at=datetime.fromisoformat(record["createdAt"]),
        )


@dataclass
class WellnessEntry:
    """Once-per-day self-report. mood/energy/stress are 1..5."""

    id: str
    date: date
    mood: int
    energy: int
    stress: int
    notes: str | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "mood": self.mood,
            "energy": self.energy,
            "stress": self.stress,
            "notes": self.notes,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> WellnessEntry:
        return cls(
            id=record["id"],
            date=date.fromisoformat(record["date"]),
            mood=int(record["mood"]),
            energy=int(record["energy"]),
            stress=int(record["stress"]),
            notes=record.get("notes"),
        )


@dataclass
class ProductivityStats:
    """Once-per-day aggregate of task completion and focus time."""

    date: date
    tasks_completed: int
    total_tasks: int
    focus_time: int = 0       # minutes
    breaks_taken: int = 0

    def to_record(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "tasksCompleted": self.tasks_completed,
            "totalTasks": self.total_tasks,
            "focusTime": self.focus_time,
            "breaksTaken": self.breaks_taken,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> ProductivityStats:
        return cls(
            date=date.fromisoformat(record["date"]),
            tasks_completed=int(record.get("tasksCompleted", 0)),
            total_tasks=int(record.get("totalTasks", 0)),
            focus_time=int(record.get("focusTime", 0)),
            breaks_taken=int(record.get("breaksTaken", 0)),
        )


@dataclass
class WorkingHours:
    start: str = "09:00"
    end: str = "17:00"


@dataclass
class AppSettings:
    """User preferences: notification/voice toggles, theme, break cadence."""

    notifications: bool = True
    voice_output: bool = True
    theme: str = "light"               # light | dark | auto
    working_hours: WorkingHours = field(default_factory=WorkingHours)
    break_reminders: bool = True
    break_interval: int = 60           # minutes

    def to_record(self) -> dict[str, Any]:
        return {
            "notifications": self.notifications,
            "voiceOutput": self.voice_output,
            "theme": self.theme,
            "workingHours": {
                "start": self.working_hours.start,
                "end": self.working_hours.end,
            },
            "breakReminders": self.break_reminders,
            "breakInterval": self.break_interval,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> AppSettings:
        defaults = cls()
        hours = record.get("workingHours") or {}
        return cls(
            notifications=bool(record.get("notifications", defaults.notifications)),
            voice_output=bool(record.get("voiceOutput", defaults.voice_output)),
            theme=record.get("theme", defaults.theme),
            working_hours=WorkingHours(
                start=hours.get("start", defaults.working_hours.start),
                end=hours.get("end", defaults.working_hours.end),
            ),
            break_reminders=bool(record.get("breakReminders", defaults.break_reminders)),
            break_interval=int(record.get("breakInterval", defaults.break_interval)),
        )


@dataclass(frozen=True)
class Recommendation:
    """Transient engine output. Never persisted, never mutated."""

    id: str
    type: RecommendationType
    title: str
    description: str
    priority: int          # higher = more urgent
    created_at: datetime
