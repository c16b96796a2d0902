"""
iReminder — Announcer.

Formats reminder, task-due, break and motivation notices and hands them to
the NotificationPort / SpeechPort. Respects the user's AppSettings toggles.

This module is provider-agnostic: it depends on port protocols, not on
Telegram or OpenAI.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import TYPE_CHECKING

from ireminder.core.dates import datetime_from_time_string, time_until
from ireminder.core.recommender import Chooser

if TYPE_CHECKING:
    from ireminder.data.models import AppSettings, Reminder, Task
    from ireminder.data.task_store import TaskStore
    from ireminder.data.wellness_store import WellnessStore
    from ireminder.ports.notification_port import NotificationPort
    from ireminder.ports.speech_port import SpeechPort

logger = logging.getLogger(__name__)

BREAK_PHRASES = (
    "Time for a break! Step away from your work and recharge.",
    "Break time! Your mind and body will thank you for taking a moment to rest.",
    "It's time to pause and take a well-deserved break.",
)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


async def _notify(
    notifier: NotificationPort,
    title: str,
    body: str,
    tag: str,
    require_interaction: bool = False,
) -> bool:
    """Ask for permission, then show. False means nothing was shown."""
    if not await notifier.request_permission():
        logger.info("Notification '%s' skipped: permission denied", tag)
        return False
    return await notifier.show_notification(
        title, body, tag=tag, require_interaction=require_interaction,
    )


async def notify_reminder(notifier: NotificationPort, reminder: Reminder) -> bool:
    return await _notify(
        notifier,
        f"⏰ {reminder.title}",
        reminder.message,
        tag=f"reminder-{reminder.id}",
        require_interaction=True,
    )


async def notify_task_due(
    notifier: NotificationPort,
    task: Task,
    now: datetime | None = None,
) -> bool:
    due = time_until(task.due_date, now) if task.due_date else "soon"
    return await _notify(
        notifier,
        "📋 Task Due",
        f'"{task.title}" is due {due}',
        tag="task-due",
    )


async def notify_break(notifier: NotificationPort) -> bool:
    return await _notify(
        notifier, "🧘 Break Time", "Time to take a break and recharge!", tag="break-reminder",
    )


async def notify_motivation(notifier: NotificationPort, quote: str) -> bool:
    return await _notify(notifier, "✨ Stay Motivated", quote, tag="motivation")


def _announce_key(reminder: Reminder) -> str:
    return f"{reminder.id}@{reminder.scheduled_time.isoformat()}"


async def dispatch_due_reminders(
    task_store: TaskStore,
    notifier: NotificationPort,
    app_settings: AppSettings,
    announced: set[str],
) -> int:
    """Notify every due reminder not announced yet. Returns how many were sent.

    `announced` is owned by the caller and keyed by id + scheduled time, so a
    snoozed reminder is announced again at its new time. Keys of reminders
    that were completed or deleted are pruned on every run.
    """
    live = {_announce_key(r) for r in task_store.list_reminders() if not r.is_completed}
    announced.intersection_update(live)
    if not app_settings.notifications:
        return 0

    sent = 0
    for reminder in task_store.get_due_reminders():
        key = _announce_key(reminder)
        if key in announced:
            continue
        if await notify_reminder(notifier, reminder):
            announced.add(key)
            sent += 1
    if sent:
        logger.info("Dispatched %d reminder notification(s)", sent)
    return sent


def within_working_hours(app_settings: AppSettings, now: datetime | None = None) -> bool:
    now = now or datetime.now()
    start = datetime_from_time_string(app_settings.working_hours.start, now)
    end = datetime_from_time_string(app_settings.working_hours.end, now)
    return start <= now <= end


async def dispatch_break_reminder(
    wellness_store: WellnessStore,
    notifier: NotificationPort,
    app_settings: AppSettings,
    last_notice: datetime | None = None,
    now: datetime | None = None,
) -> datetime | None:
    """Send a break notice when one is due. Returns the send time, or None.

    Due means: break reminders on, inside working hours, at least
    `break_interval` minutes since the last break (or no break logged yet)
    and since the last notice.
    """
    now = now or datetime.now()
    if not (app_settings.notifications and app_settings.break_reminders):
        return None
    if not within_working_hours(app_settings, now):
        return None

    interval = app_settings.break_interval
    last_break = wellness_store.last_break_time
    if last_break is not None and (now - last_break).total_seconds() / 60 < interval:
        return None
    if last_notice is not None and (now - last_notice).total_seconds() / 60 < interval:
        return None

    if not await notify_break(notifier):
        return None
    return now


# ---------------------------------------------------------------------------
# Speech
# ---------------------------------------------------------------------------


async def speak_reminder(
    speaker: SpeechPort,
    app_settings: AppSettings,
    title: str,
    message: str | None = None,
) -> None:
    if not app_settings.voice_output:
        return
    text = f"Reminder: {title}. {message}" if message else f"Reminder: {title}"
    await speaker.speak(text, rate=0.9, pitch=1.1)


async def speak_task_complete(
    speaker: SpeechPort,
    app_settings: AppSettings,
    task_title: str,
) -> None:
    if not app_settings.voice_output:
        return
    await speaker.speak(f"Great job! You completed: {task_title}", rate=1.1, pitch=1.2)


def greeting_for(hour: int) -> str:
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    return "Good evening"


async def speak_welcome(
    speaker: SpeechPort,
    app_settings: AppSettings,
    now: datetime | None = None,
) -> None:
    if not app_settings.voice_output:
        return
    greeting = greeting_for((now or datetime.now()).hour)
    await speaker.speak(
        f"{greeting}! Welcome to iReminder. How can I help you stay productive today?"
    )


async def speak_break_reminder(
    speaker: SpeechPort,
    app_settings: AppSettings,
    choose: Chooser = random.choice,
) -> None:
    if not app_settings.voice_output:
        return
    await speaker.speak(choose(BREAK_PHRASES), rate=0.9)
