"""
iReminder — Task & Reminder Store.

Owns the canonical list of tasks and reminders. Every mutation is validated
first, applied in memory, then written through to StateStorage, so a store
re-created over the same database sees the latest state.

Callers get copies; editing a returned Task does not touch the store.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Callable

from ireminder.core.dates import same_day
from ireminder.data.errors import NotFoundError, ValidationError
from ireminder.data.models import Priority, RecurrencePattern, Reminder, Task
from ireminder.data.storage import TASKS_KEY, StateStorage

logger = logging.getLogger(__name__)

UPCOMING_WINDOW = timedelta(minutes=60)

_TASK_FIELDS = {
    "title", "description", "completed", "priority", "due_date",
    "due_time", "category", "estimated_duration",
}
_REMINDER_FIELDS = {
    "task_id", "title", "message", "scheduled_time", "is_recurring",
    "recurring_pattern", "is_completed", "snooze_count",
}


def _new_id() -> str:
    return uuid.uuid4().hex


def _coerce_priority(value: Priority | str) -> Priority:
    try:
        return Priority(value)
    except ValueError:
        raise ValidationError(f"Unknown priority: {value!r}") from None


def _coerce_pattern(value: RecurrencePattern | str | None) -> RecurrencePattern | None:
    if value is None:
        return None
    try:
        return RecurrencePattern(value)
    except ValueError:
        raise ValidationError(f"Unknown recurrence pattern: {value!r}") from None


def _check_fields(changes: dict[str, Any], allowed: set[str], kind: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Cannot update {kind} field(s): {', '.join(sorted(unknown))}")


def _validate_task(task: Task) -> Task:
    if not task.title or not task.title.strip():
        raise ValidationError("Task title must not be empty")
    task.title = task.title.strip()
    task.priority = _coerce_priority(task.priority)
    if task.estimated_duration is not None and task.estimated_duration < 0:
        raise ValidationError("Estimated duration must not be negative")
    return task


def _validate_reminder(reminder: Reminder) -> Reminder:
    if not reminder.title or not reminder.title.strip():
        raise ValidationError("Reminder title must not be empty")
    reminder.title = reminder.title.strip()
    reminder.recurring_pattern = _coerce_pattern(reminder.recurring_pattern)
    if reminder.recurring_pattern is not None and not reminder.is_recurring:
        raise ValidationError("Recurrence pattern requires is_recurring=True")
    if reminder.snooze_count < 0:
        raise ValidationError("Snooze count must not be negative")
    return reminder


class TaskStore:
    """In-memory task/reminder state with write-through persistence."""

    def __init__(
        self,
        storage: StateStorage | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._tasks: dict[str, Task] = {}
        self._reminders: dict[str, Reminder] = {}
        self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if self._storage is None:
            return
        record = self._storage.load(TASKS_KEY)
        if record is None:
            return
        for raw in record.get("tasks", []):
            try:
                task = Task.from_record(raw)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable task record: %s", exc)
                continue
            self._tasks[task.id] = task
        for raw in record.get("reminders", []):
            try:
                reminder = Reminder.from_record(raw)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable reminder record: %s", exc)
                continue
            self._reminders[reminder.id] = reminder
        logger.debug(
            "Loaded %d tasks and %d reminders", len(self._tasks), len(self._reminders),
        )

    def _commit(
        self,
        tasks: dict[str, Task] | None = None,
        reminders: dict[str, Reminder] | None = None,
    ) -> None:
        """Save the new state, then swap it in. A failed save changes nothing."""
        tasks = self._tasks if tasks is None else tasks
        reminders = self._reminders if reminders is None else reminders
        if self._storage is not None:
            self._storage.save(TASKS_KEY, {
                "tasks": [t.to_record() for t in tasks.values()],
                "reminders": [r.to_record() for r in reminders.values()],
            })
        self._tasks = tasks
        self._reminders = reminders

    def _touch(self, task: Task) -> None:
        """Refresh updated_at, keeping it strictly increasing."""
        now = self._clock()
        if now <= task.updated_at:
            now = task.updated_at + timedelta(microseconds=1)
        task.updated_at = now

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def add_task(
        self,
        title: str,
        *,
        description: str | None = None,
        priority: Priority | str = Priority.MEDIUM,
        due_date: datetime | None = None,
        due_time: str | None = None,
        category: str | None = None,
        estimated_duration: int | None = None,
        completed: bool = False,
    ) -> Task:
        """Create a task with a fresh id; created_at == updated_at."""
        now = self._clock()
        task = _validate_task(Task(
            id=_new_id(),
            title=title,
            description=description,
            priority=priority,
            due_date=due_date,
            due_time=due_time,
            category=category,
            estimated_duration=estimated_duration,
            completed=completed,
            created_at=now,
            updated_at=now,
        ))
        self._commit(tasks={**self._tasks, task.id: task})
        logger.info("Task added: %s '%s' (%s)", task.id, task.title, task.priority.value)
        return replace(task)

    def get_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return replace(task) if task is not None else None

    def list_tasks(self) -> list[Task]:
        """All tasks in insertion order."""
        return [replace(t) for t in self._tasks.values()]

    def _require_task(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def update_task(self, task_id: str, **changes: Any) -> Task:
        """Merge changes into an existing task and refresh updated_at."""
        current = self._require_task(task_id)
        _check_fields(changes, _TASK_FIELDS, "task")
        updated = _validate_task(replace(current, **changes))
        self._touch(updated)
        self._commit(tasks={**self._tasks, task_id: updated})
        logger.info("Task updated: %s (%s)", task_id, ", ".join(sorted(changes)) or "touch")
        return replace(updated)

    def toggle_task(self, task_id: str) -> Task:
        """Flip completed. Announcing a completion is up to the caller."""
        task = self._require_task(task_id)
        toggled = replace(task, completed=not task.completed)
        self._touch(toggled)
        self._commit(tasks={**self._tasks, task_id: toggled})
        logger.info("Task %s marked %s", task_id, "done" if toggled.completed else "not done")
        return replace(toggled)

    def delete_task(self, task_id: str) -> Task:
        """Remove a task together with every reminder that references it."""
        task = self._require_task(task_id)
        reminders = {rid: r for rid, r in self._reminders.items() if r.task_id != task_id}
        linked = len(self._reminders) - len(reminders)
        self._commit(
            tasks={tid: t for tid, t in self._tasks.items() if tid != task_id},
            reminders=reminders,
        )
        logger.info("Task deleted: %s '%s' (+%d reminders)", task_id, task.title, linked)
        return task

    def get_tasks_by_date(self, day: date | datetime) -> list[Task]:
        """Tasks due on the same calendar day as `day`."""
        return [
            replace(t) for t in self._tasks.values()
            if t.due_date is not None and same_day(t.due_date, day)
        ]

    def get_overdue_tasks(self) -> list[Task]:
        """Incomplete tasks whose due date is strictly in the past."""
        now = self._clock()
        return [
            replace(t) for t in self._tasks.values()
            if t.due_date is not None and not t.completed and t.due_date < now
        ]

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def add_reminder(
        self,
        title: str,
        message: str,
        scheduled_time: datetime,
        *,
        task_id: str | None = None,
        is_recurring: bool = False,
        recurring_pattern: RecurrencePattern | str | None = None,
        is_completed: bool = False,
    ) -> Reminder:
        reminder = _validate_reminder(Reminder(
            id=_new_id(),
            task_id=task_id,
            title=title,
            message=message,
            scheduled_time=scheduled_time,
            is_recurring=is_recurring,
            recurring_pattern=recurring_pattern,
            is_completed=is_completed,
            snooze_count=0,
            created_at=self._clock(),
        ))
        self._commit(reminders={**self._reminders, reminder.id: reminder})
        logger.info(
            "Reminder added: %s '%s' at %s", reminder.id, reminder.title,
            reminder.scheduled_time.isoformat(),
        )
        return replace(reminder)

    def get_reminder(self, reminder_id: str) -> Reminder | None:
        reminder = self._reminders.get(reminder_id)
        return replace(reminder) if reminder is not None else None

    def list_reminders(self) -> list[Reminder]:
        return [replace(r) for r in self._reminders.values()]

    def get_reminders_for_task(self, task_id: str) -> list[Reminder]:
        return [replace(r) for r in self._reminders.values() if r.task_id == task_id]

    def _require_reminder(self, reminder_id: str) -> Reminder:
        reminder = self._reminders.get(reminder_id)
        if reminder is None:
            raise NotFoundError("Reminder", reminder_id)
        return reminder

    def update_reminder(self, reminder_id: str, **changes: Any) -> Reminder:
        current = self._require_reminder(reminder_id)
        _check_fields(changes, _REMINDER_FIELDS, "reminder")
        updated = _validate_reminder(replace(current, **changes))
        self._commit(reminders={**self._reminders, reminder_id: updated})
        logger.info("Reminder updated: %s (%s)", reminder_id, ", ".join(sorted(changes)))
        return replace(updated)

    def delete_reminder(self, reminder_id: str) -> Reminder:
        reminder = self._require_reminder(reminder_id)
        self._commit(reminders={
            rid: r for rid, r in self._reminders.items() if rid != reminder_id
        })
        logger.info("Reminder deleted: %s", reminder_id)
        return reminder

    def snooze_reminder(self, reminder_id: str, minutes: int) -> Reminder:
        """Reschedule to now + minutes (not relative to the old time)."""
        current = self._require_reminder(reminder_id)
        snoozed = replace(
            current,
            scheduled_time=self._clock() + timedelta(minutes=minutes),
            snooze_count=current.snooze_count + 1,
        )
        self._commit(reminders={**self._reminders, reminder_id: snoozed})
        logger.info(
            "Reminder %s snoozed %d min (count=%d)", reminder_id, minutes, snoozed.snooze_count,
        )
        return replace(snoozed)

    def get_due_reminders(self) -> list[Reminder]:
        """Incomplete reminders whose scheduled time has arrived, oldest first."""
        now = self._clock()
        due = [
            r for r in self._reminders.values()
            if not r.is_completed and r.scheduled_time <= now
        ]
        return [replace(r) for r in sorted(due, key=lambda r: r.scheduled_time)]

    def get_upcoming_reminders(self) -> list[Reminder]:
        """Incomplete reminders scheduled within the next 60 minutes."""
        now = self._clock()
        horizon = now + UPCOMING_WINDOW
        return [
            replace(r) for r in self._reminders.values()
            if not r.is_completed and now <= r.scheduled_time <= horizon
        ]
