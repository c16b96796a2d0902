"""
iReminder — Telegram Bot.

The chat front-end for the local stores: add and complete tasks, set and
snooze reminders, log mood/energy/stress and breaks, and ask for a
recommendation. A repeating job pushes due reminders and break notices.

Security-first: unauthorized users are silently ignored.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from functools import wraps
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Coroutine

from telegram import Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
)

from ireminder.config import require_bot_token, settings
from ireminder.core import announcer, recommender
from ireminder.core.dates import format_datetime, time_until
from ireminder.data.errors import NotFoundError, StoreError
from ireminder.data.models import Priority

if TYPE_CHECKING:
    from ireminder.data.models import Reminder, Task
    from ireminder.data.settings_store import SettingsStore
    from ireminder.data.task_store import TaskStore
    from ireminder.data.wellness_store import WellnessStore
    from ireminder.ports.notification_port import NotificationPort
    from ireminder.ports.speech_port import SpeechPort

logger = logging.getLogger(__name__)

DEFAULT_SNOOZE_MINUTES = 10

_PRIORITY_ICONS = {
    Priority.URGENT: "🔴",
    Priority.HIGH: "🟠",
    Priority.MEDIUM: "🟡",
    Priority.LOW: "🟢",
}


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, None]],
) -> Callable[..., Coroutine[Any, Any, None]]:
    """Decorator that silently ignores messages from unauthorized users."""

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user = update.effective_user
        if user is None or user.id not in settings.ALLOWED_USER_IDS:
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return  # Silent ignore
        return await func(update, context)

    return wrapper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _task_store(context: ContextTypes.DEFAULT_TYPE) -> TaskStore:
    return context.bot_data["task_store"]


def _wellness_store(context: ContextTypes.DEFAULT_TYPE) -> WellnessStore:
    return context.bot_data["wellness_store"]


def _settings_store(context: ContextTypes.DEFAULT_TYPE) -> SettingsStore:
    return context.bot_data["settings_store"]


def _format_task(index: int, task: Task, now: datetime | None = None) -> str:
    mark = "✅" if task.completed else _PRIORITY_ICONS[task.priority]
    line = f"{index}. {mark} {task.title}"
    if task.due_date is not None and not task.completed:
        line += f" (due {format_datetime(task.due_date, now)})"
    return line


def _format_reminder(index: int, reminder: Reminder, now: datetime | None = None) -> str:
    when = time_until(reminder.scheduled_time, now)
    when = "overdue" if when == "Overdue" else f"in {when}"
    line = f"{index}. ⏰ {reminder.title} — {when}"
    if reminder.snooze_count:
        line += f" (snoozed {reminder.snooze_count}x)"
    return line


def _parse_add_args(args: list[str]) -> tuple[Priority, str] | None:
    """'/add [priority] <title>' → (priority, title), or None without a title."""
    if not args:
        return None
    priority = Priority.MEDIUM
    words = list(args)
    try:
        priority = Priority(words[0].lower())
        words = words[1:]
    except ValueError:
        pass
    title = " ".join(words).strip()
    if not title:
        return None
    return priority, title


def _pick(items: list, raw: str):
    """1-based index lookup. Raises ValueError on a bad index."""
    index = int(raw)
    if not 1 <= index <= len(items):
        raise ValueError(f"index {index} out of range")
    return items[index - 1]


def _pending_reminders(task_store: TaskStore) -> list[Reminder]:
    pending = [r for r in task_store.list_reminders() if not r.is_completed]
    return sorted(pending, key=lambda r: r.scheduled_time)


def record_today(
    task_store: TaskStore,
    wellness_store: WellnessStore,
    now: datetime | None = None,
    extra_breaks: int = 0,
) -> None:
    """Refresh today's productivity snapshot from the current task list."""
    now = now or datetime.now()
    tasks = task_store.list_tasks()
    existing = wellness_store.get_productivity_stats(now)
    wellness_store.add_productivity_stats(
        now,
        tasks_completed=sum(1 for t in tasks if t.completed),
        total_tasks=len(tasks),
        focus_time=existing.focus_time if existing else 0,
        breaks_taken=(existing.breaks_taken if existing else 0) + extra_breaks,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message."""
    await update.message.reply_text(
        "Welcome to *iReminder*!\n\n"
        "I keep your tasks, reminders and wellness check-ins on this machine:\n"
        "• /add to create a task, /tasks to list them, /done to complete one\n"
        "• /remind to set a reminder\n"
        "• /mood to log how you feel, /break when you step away\n"
        "• /recommend for what to do next\n\n"
        "Type /help for the full command list.",
        parse_mode="Markdown",
    )
    speaker = context.bot_data.get("speaker")
    if speaker is not None:
        await announcer.speak_welcome(speaker, _settings_store(context).settings)


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "Available commands:\n"
        "/tasks — List tasks\n"
        "/add [low|medium|high|urgent] <title> — Add a task\n"
        "/done <n> — Toggle task n complete\n"
        "/delete <n> — Delete task n and its reminders\n"
        "/overdue — List overdue tasks\n"
        "/remind <minutes> <text> — Set a reminder\n"
        "/reminders — List pending reminders\n"
        "/snooze <n> [minutes] — Snooze reminder n\n"
        "/mood <mood> <energy> <stress> — Log today's check-in (1-5 each)\n"
        "/break — Log a break\n"
        "/recommend — What to do next\n"
        "/stats — Weekly averages and completion rate\n"
        "/quote — A motivational quote\n"
        "/help — Show this message",
    )


@authorized_only
async def cmd_tasks(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /tasks — list all tasks."""
    tasks = _task_store(context).list_tasks()
    if not tasks:
        await update.message.reply_text("No tasks yet. Add one with /add <title>.")
        return
    lines = ["Your tasks:\n"]
    lines.extend(_format_task(i, t) for i, t in enumerate(tasks, start=1))
    await update.message.reply_text("\n".join(lines))


@authorized_only
async def cmd_add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add [priority] <title>."""
    parsed = _parse_add_args(context.args or [])
    if parsed is None:
        await update.message.reply_text("Usage: /add [low|medium|high|urgent] <title>")
        return

    priority, title = parsed
    try:
        task = _task_store(context).add_task(title, priority=priority)
    except StoreError as exc:
        await update.message.reply_text(f"Couldn't add that task: {exc}")
        return
    record_today(_task_store(context), _wellness_store(context))
    await update.message.reply_text(f"Added: {task.title} ({task.priority.value})")


@authorized_only
async def cmd_done(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /done <n> — toggle a task; announce when it becomes complete."""
    args = context.args
    if not args:
        await update.message.reply_text("Usage: /done <n>\nUse /tasks to see numbers.")
        return

    store = _task_store(context)
    try:
        task = _pick(store.list_tasks(), args[0])
        toggled = store.toggle_task(task.id)
    except (ValueError, NotFoundError):
        await update.message.reply_text("Invalid task number. Use /tasks to see valid numbers.")
        return

    record_today(store, _wellness_store(context))
    if toggled.completed:
        await update.message.reply_text(f"✅ Completed: {toggled.title}")
        speaker = context.bot_data.get("speaker")
        if speaker is not None:
            await announcer.speak_task_complete(
                speaker, _settings_store(context).settings, toggled.title,
            )
    else:
        await update.message.reply_text(f"↩️ Reopened: {toggled.title}")


@authorized_only
async def cmd_delete(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delete <n>."""
    args = context.args
    if not args:
        await update.message.reply_text("Usage: /delete <n>")
        return

    store = _task_store(context)
    try:
        task = _pick(store.list_tasks(), args[0])
        store.delete_task(task.id)
    except (ValueError, NotFoundError):
        await update.message.reply_text("Invalid task number. Use /tasks to see valid numbers.")
        return
    record_today(store, _wellness_store(context))
    await update.message.reply_text(f"🗑 Deleted: {task.title}")


@authorized_only
async def cmd_overdue(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    overdue = _task_store(context).get_overdue_tasks()
    if not overdue:
        await update.message.reply_text("Nothing overdue. 🎉")
        return
    lines = ["Overdue:\n"]
    lines.extend(_format_task(i, t) for i, t in enumerate(overdue, start=1))
    await update.message.reply_text("\n".join(lines))


@authorized_only
async def cmd_remind(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /remind <minutes> <text>."""
    args = context.args or []
    if len(args) < 2:
        await update.message.reply_text("Usage: /remind <minutes> <text>")
        return
    try:
        minutes = int(args[0])
    except ValueError:
        await update.message.reply_text("Minutes must be a whole number.")
        return
    if minutes < 0:
        await update.message.reply_text("Minutes must not be negative.")
        return

    text = " ".join(args[1:])
    try:
        reminder = _task_store(context).add_reminder(
            text, text, datetime.now() + timedelta(minutes=minutes),
        )
    except StoreError as exc:
        await update.message.reply_text(f"Couldn't set that reminder: {exc}")
        return
    await update.message.reply_text(
        f"⏰ I'll remind you: {reminder.title} ({format_datetime(reminder.scheduled_time)})"
    )


@authorized_only
async def cmd_reminders(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    pending = _pending_reminders(_task_store(context))
    if not pending:
        await update.message.reply_text("No pending reminders.")
        return
    lines = ["Pending reminders:\n"]
    lines.extend(_format_reminder(i, r) for i, r in enumerate(pending, start=1))
    await update.message.reply_text("\n".join(lines))


@authorized_only
async def cmd_snooze(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /snooze <n> [minutes]."""
    args = context.args or []
    if not args:
        await update.message.reply_text("Usage: /snooze <n> [minutes]")
        return

    store = _task_store(context)
    try:
        minutes = int(args[1]) if len(args) > 1 else DEFAULT_SNOOZE_MINUTES
        reminder = _pick(_pending_reminders(store), args[0])
        snoozed = store.snooze_reminder(reminder.id, minutes)
    except (ValueError, NotFoundError):
        await update.message.reply_text("Invalid reminder. Use /reminders to see numbers.")
        return
    await update.message.reply_text(
        f"😴 Snoozed '{snoozed.title}' for {minutes} min (snoozed {snoozed.snooze_count}x)"
    )


@authorized_only
async def cmd_mood(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /mood <mood> <energy> <stress> — today's check-in."""
    args = context.args or []
    try:
        mood, energy, stress = (int(a) for a in args[:3])
    except ValueError:
        await update.message.reply_text("Usage: /mood <mood> <energy> <stress> (each 1-5)")
        return

    notes = " ".join(args[3:]) or None
    try:
        _wellness_store(context).add_wellness_entry(
            datetime.now(), mood, energy, stress, notes=notes,
        )
    except StoreError as exc:
        await update.message.reply_text(f"Couldn't save your check-in: {exc}")
        return

    rec = recommender.recommend_wellness(mood, energy, stress)
    await update.message.reply_text(
        f"Wellness entry saved!\n\n*{rec.title}*\n{rec.description}",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_break(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    wellness = _wellness_store(context)
    wellness.update_last_break_time()
    record_today(_task_store(context), wellness, extra_breaks=1)
    await update.message.reply_text("Break time logged! Take care of yourself 🌱")


@authorized_only
async def cmd_recommend(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    dashboard = recommender.build_dashboard(_task_store(context), _wellness_store(context))
    rec = dashboard.primary
    lines = [f"*{rec.title}*", rec.description]
    if dashboard.overdue_count:
        lines.append(f"\n⚠️ {dashboard.overdue_count} overdue task(s)")
    if dashboard.upcoming_reminders:
        lines.append(f"⏰ {dashboard.upcoming_reminders} reminder(s) in the next hour")
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


@authorized_only
async def cmd_stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    wellness = _wellness_store(context)
    await update.message.reply_text(
        "Last 7 days:\n"
        f"• Completion rate: {wellness.get_completion_rate(7):.0f}%\n"
        f"• Mood: {wellness.get_average_mood(7):.1f}/5\n"
        f"• Energy: {wellness.get_average_energy(7):.1f}/5\n"
        f"• Stress: {wellness.get_average_stress(7):.1f}/5"
    )


@authorized_only
async def cmd_quote(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(f"✨ {recommender.motivational_quote()}")


# ---------------------------------------------------------------------------
# Reminder buttons and the periodic job
# ---------------------------------------------------------------------------


async def _handle_reminder_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the Mark Complete / Snooze buttons on a reminder notice."""
    query = update.callback_query
    await query.answer()

    user = update.effective_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    _, action, reminder_id = query.data.split(":", 2)
    store = _task_store(context)
    try:
        if action == "complete":
            reminder = store.update_reminder(reminder_id, is_completed=True)
            await query.edit_message_text(f"✅ Done: {reminder.title}")
        elif action == "snooze":
            reminder = store.snooze_reminder(reminder_id, DEFAULT_SNOOZE_MINUTES)
            await query.edit_message_text(
                f"😴 Snoozed '{reminder.title}' for {DEFAULT_SNOOZE_MINUTES} min"
            )
    except NotFoundError:
        await query.edit_message_text("That reminder no longer exists.")


async def _reminder_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Push due reminders and, when due, a break notice."""
    bot_data = context.bot_data
    notifier: NotificationPort = bot_data["notifier"]
    app_settings = _settings_store(context).settings

    await announcer.dispatch_due_reminders(
        _task_store(context), notifier, app_settings, bot_data.setdefault("announced", set()),
    )
    sent_at = await announcer.dispatch_break_reminder(
        _wellness_store(context), notifier, app_settings,
        last_notice=bot_data.get("last_break_notice"),
    )
    if sent_at is not None:
        bot_data["last_break_notice"] = sent_at
        speaker = bot_data.get("speaker")
        if speaker is not None:
            await announcer.speak_break_reminder(speaker, app_settings)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def build_app(
    task_store: TaskStore | None = None,
    wellness_store: WellnessStore | None = None,
    settings_store: SettingsStore | None = None,
    notifier: NotificationPort | None = None,
    speaker: SpeechPort | None = None,
) -> Application:
    """Build the Telegram Application with all handlers and the reminder job.

    Stores default to ones backed by DATABASE_PATH; the notifier defaults to
    TelegramNotifier and the speaker to OpenAISpeaker (when a key is set).
    """
    app = ApplicationBuilder().token(require_bot_token()).build()

    if task_store is None or wellness_store is None or settings_store is None:
        from ireminder.data.settings_store import SettingsStore
        from ireminder.data.storage import StateStorage
        from ireminder.data.task_store import TaskStore
        from ireminder.data.wellness_store import WellnessStore

        storage = StateStorage()
        task_store = task_store or TaskStore(storage)
        wellness_store = wellness_store or WellnessStore(storage)
        settings_store = settings_store or SettingsStore(storage)

    if notifier is None:
        from ireminder.adapters.telegram_notifier import TelegramNotifier
        notifier = TelegramNotifier(app.bot, settings.ALLOWED_USER_IDS)

    if speaker is None and settings.OPENAI_API_KEY:
        from ireminder.adapters.openai_speaker import OpenAISpeaker

        async def _send_voice(path: Path) -> None:
            for chat_id in settings.ALLOWED_USER_IDS:
                with path.open("rb") as audio:
                    await app.bot.send_voice(chat_id=chat_id, voice=audio)

        speaker = OpenAISpeaker(
            api_key=settings.OPENAI_API_KEY,
            model=settings.TTS_MODEL,
            voice=settings.TTS_VOICE,
            audio_dir=settings.AUDIO_DIR,
            deliver=_send_voice,
        )

    app.bot_data["task_store"] = task_store
    app.bot_data["wellness_store"] = wellness_store
    app.bot_data["settings_store"] = settings_store
    app.bot_data["notifier"] = notifier
    app.bot_data["speaker"] = speaker
    app.bot_data["announced"] = set()

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("tasks", cmd_tasks))
    app.add_handler(CommandHandler("add", cmd_add))
    app.add_handler(CommandHandler("done", cmd_done))
    app.add_handler(CommandHandler("delete", cmd_delete))
    app.add_handler(CommandHandler("overdue", cmd_overdue))
    app.add_handler(CommandHandler("remind", cmd_remind))
    app.add_handler(CommandHandler("reminders", cmd_reminders))
    app.add_handler(CommandHandler("snooze", cmd_snooze))
    app.add_handler(CommandHandler("mood", cmd_mood))
    app.add_handler(CommandHandler("break", cmd_break))
    app.add_handler(CommandHandler("recommend", cmd_recommend))
    app.add_handler(CommandHandler("stats", cmd_stats))
    app.add_handler(CommandHandler("quote", cmd_quote))
    app.add_handler(CallbackQueryHandler(
        _handle_reminder_callback, pattern=r"^reminder:(complete|snooze):",
    ))

    app.job_queue.run_repeating(
        _reminder_job,
        interval=settings.REMINDER_CHECK_SECONDS,
        first=5,
        name="reminder_check",
    )

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting iReminder bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
