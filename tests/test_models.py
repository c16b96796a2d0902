"""Tests for ireminder.data.models — dataclasses and record layout."""

from dataclasses import FrozenInstanceError
from datetime import date, datetime

import pytest

from ireminder.data.models import (
    AppSettings,
    Priority,
    ProductivityStats,
    Recommendation,
    RecommendationType,
    Reminder,
    Task,
    WellnessEntry,
)

CREATED = datetime(2026, 3, 4, 9, 0)


def test_priority_weights_are_totally_ordered():
    weights = [p.weight for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.URGENT)]
    assert weights == [1, 2, 3, 4]


def test_task_defaults():
    task = Task(id="t1", title="Read", created_at=CREATED, updated_at=CREATED)
    assert task.completed is False
    assert task.priority is Priority.MEDIUM
    assert task.due_date is None


def test_task_record_uses_camel_case():
    task = Task(
        id="t1", title="Read", created_at=CREATED, updated_at=CREATED,
        priority=Priority.HIGH, due_date=datetime(2026, 3, 5, 17, 0), estimated_duration=25,
    )
    record = task.to_record()
    assert record["dueDate"] == "2026-03-05T17:00:00"
    assert record["estimatedDuration"] == 25
    assert record["priority"] == "high"
    assert Task.from_record(record) == task


def test_reminder_record_keeps_task_reference():
    reminder = Reminder(
        id="r1", title="Ping", message="", scheduled_time=CREATED,
        created_at=CREATED, task_id="t1",
    )
    record = reminder.to_record()
    assert record["taskId"] == "t1"
    assert record["snoozeCount"] == 0
    assert record["recurringPattern"] is None


def test_wellness_and_stats_records_use_plain_days():
    entry = WellnessEntry(id="w1", date=date(2026, 3, 4), mood=3, energy=4, stress=2)
    stats = ProductivityStats(date=date(2026, 3, 4), tasks_completed=1, total_tasks=2)
    assert entry.to_record()["date"] == "2026-03-04"
    assert stats.to_record()["totalTasks"] == 2


def test_app_settings_from_partial_record_fills_defaults():
    settings = AppSettings.from_record({"theme": "dark"})
    assert settings.theme == "dark"
    assert settings.break_interval == 60
    assert settings.working_hours.start == "09:00"


def test_recommendation_is_immutable():
    rec = Recommendation(
        id="x", type=RecommendationType.FOCUS, title="t", description="d",
        priority=1, created_at=CREATED,
    )
    with pytest.raises(FrozenInstanceError):
        rec.priority = 5
