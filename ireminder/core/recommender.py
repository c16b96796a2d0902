"""Recommendation engine — pure business logic.

Turns a snapshot of tasks, breaks, wellness ratings and completion counts
into typed, ranked Recommendation values. Nothing here mutates a store.

The only randomness is picking display text (a break activity, a quote).
It goes through an injectable `choose` callable so type and priority stay
deterministic under test.
"""

from __future__ import annotations

import logging
import math
import random
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterable, Sequence

from ireminder.data.models import Recommendation, RecommendationType, Task

if TYPE_CHECKING:
    from ireminder.data.task_store import TaskStore
    from ireminder.data.wellness_store import WellnessStore

logger = logging.getLogger(__name__)

Chooser = Callable[[Sequence[str]], str]

TASK_ORDER_PRIORITY = 3
BREAK_PRIORITY = 2
BREAK_THRESHOLD_MINUTES = 45
# Used when no break has ever been logged, so a suggestion can fire on first use.
UNSET_BREAK_MINUTES = 120

BREAK_ACTIVITIES = (
    "Take a 5-minute walk around your space",
    "Do some gentle stretching exercises",
    "Practice deep breathing for 2-3 minutes",
    "Step outside for fresh air",
    "Hydrate with a glass of water",
    "Do some quick desk exercises",
)

MOTIVATIONAL_QUOTES = (
    "The way to get started is to quit talking and begin doing. - Walt Disney",
    "Don't let yesterday take up too much of today. - Will Rogers",
    "You learn more from failure than from success. Don't let it stop you. Failure builds character.",
    "If you are working on something that you really care about, you don't have to be pushed. "
    "The vision pulls you. - Steve Jobs",
    "The future depends on what you do today. - Mahatma Gandhi",
    "Success is not final, failure is not fatal: it is the courage to continue that counts. "
    "- Winston Churchill",
    "The only way to do great work is to love what you do. - Steve Jobs",
    "Progress, not perfection, is the goal.",
    "Small steps daily lead to big changes yearly.",
    "Your only limit is your mind.",
)

# (hour upper bound, suggestion); the last band catches everything from 17:00.
_HOUR_BANDS = (
    (10, "Start your day strong with your highest priority task"),
    (14, "Perfect time to tackle important work while your energy is high"),
    (17, "Keep the momentum going with this important task"),
    (24, "Finish strong with this priority item"),
)


def _make(
    rec_type: RecommendationType,
    title: str,
    description: str,
    priority: int,
    now: datetime,
) -> Recommendation:
    return Recommendation(
        id=uuid.uuid4().hex,
        type=rec_type,
        title=title,
        description=description,
        priority=priority,
        created_at=now,
    )


def _task_sort_key(task: Task) -> tuple:
    # Higher weight first; among equals, earliest due date, undated last.
    return (
        -task.priority.weight,
        task.due_date is None,
        task.due_date or datetime.max,
    )


def order_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Incomplete tasks in recommended working order."""
    return sorted((t for t in tasks if not t.completed), key=_task_sort_key)


def time_of_day_suggestion(hour: int) -> str:
    for upper, suggestion in _HOUR_BANDS:
        if hour < upper:
            return suggestion
    return _HOUR_BANDS[-1][1]


def recommend_task_order(
    tasks: Iterable[Task],
    now: datetime | None = None,
) -> Recommendation:
    """Recommend the next task to work on, or congratulate when none are left."""
    now = now or datetime.now()
    ordered = order_tasks(tasks)

    if not ordered:
        return _make(
            RecommendationType.TASK_ORDER,
            "All caught up!",
            "Great job! You've completed all your tasks. "
            "Consider adding new goals or taking a well-deserved break.",
            1,
            now,
        )

    next_task = ordered[0]
    suggestion = time_of_day_suggestion(now.hour)
    urgency = "is due soon" if next_task.due_date else "needs your attention"
    return _make(
        RecommendationType.TASK_ORDER,
        f"Focus on: {next_task.title}",
        f"{suggestion}. This {next_task.priority.value} priority task {urgency}.",
        TASK_ORDER_PRIORITY,
        now,
    )


def minutes_since_break(
    last_break_time: datetime | None,
    now: datetime | None = None,
) -> float:
    """Elapsed minutes since the last break; UNSET_BREAK_MINUTES if never logged."""
    if last_break_time is None:
        return UNSET_BREAK_MINUTES
    now = now or datetime.now()
    return (now - last_break_time).total_seconds() / 60


def recommend_break(
    last_break_time: datetime | None,
    now: datetime | None = None,
    choose: Chooser = random.choice,
) -> Recommendation | None:
    """Suggest a break after 45 focused minutes. Returns None if it is too soon."""
    now = now or datetime.now()
    elapsed = minutes_since_break(last_break_time, now)
    if elapsed < BREAK_THRESHOLD_MINUTES:
        return None

    activity = choose(BREAK_ACTIVITIES)
    return _make(
        RecommendationType.BREAK,
        "Time for a break!",
        f"You've been focused for {math.floor(elapsed + 0.5)} minutes. "
        f"{activity} to recharge your energy.",
        BREAK_PRIORITY,
        now,
    )


def select_primary(
    task_rec: Recommendation,
    break_rec: Recommendation | None,
) -> Recommendation:
    """Pick between the task and break suggestions.

    The break wins only when its priority is >= the task's. With the default
    weights (break 2, task 3) the task suggestion always wins.
    """
    if break_rec is not None and break_rec.priority >= task_rec.priority:
        return break_rec
    return task_rec


def recommend_wellness(
    mood: int,
    energy: int,
    stress: int,
    now: datetime | None = None,
) -> Recommendation:
    """First matching rule wins: stress, then energy, then mood, then praise."""
    now = now or datetime.now()

    if stress >= 4:
        title = "Stress Management"
        description = (
            "Your stress levels seem high. Try a 5-minute meditation, listen to "
            "calming music, or practice progressive muscle relaxation."
        )
        priority = 3
    elif energy <= 2:
        title = "Energy Boost"
        description = (
            "Feeling low energy? Consider a short walk, some light stretching, "
            "or a healthy snack to naturally boost your energy."
        )
        priority = 2
    elif mood <= 2:
        title = "Mood Lift"
        description = (
            "Here are some mood boosters: listen to your favorite music, call a "
            "friend, or write down three things you're grateful for."
        )
        priority = 2
    else:
        title = "Keep up the great work!"
        description = (
            "You're doing well today. Maintain this positive momentum by staying "
            "hydrated and taking regular breaks."
        )
        priority = 1

    return _make(RecommendationType.WELLNESS, title, description, priority, now)


def completion_rate(completed: int, total: int) -> float:
    return completed / total * 100 if total > 0 else 0


def recommend_focus(
    completed: int,
    total: int,
    now: datetime | None = None,
) -> Recommendation:
    now = now or datetime.now()
    rate = completion_rate(completed, total)

    if rate >= 80:
        title = "Excellent progress!"
        description = (
            "You're crushing your goals today! Keep this momentum going and "
            "consider tackling one more challenging task."
        )
        priority = 1
    elif rate >= 50:
        title = "Good momentum"
        description = (
            "You're making solid progress. Focus on your highest priority "
            "remaining tasks to maximize your impact."
        )
        priority = 2
    elif rate >= 25:
        title = "Time to focus"
        description = (
            "Let's pick up the pace! Try the Pomodoro technique: 25 minutes of "
            "focused work, then a 5-minute break."
        )
        priority = 2
    else:
        title = "Fresh start opportunity"
        description = (
            "Every moment is a chance to begin again. Choose one small task and "
            "complete it to build momentum."
        )
        priority = 3

    return _make(RecommendationType.FOCUS, title, description, priority, now)


def motivational_quote(choose: Chooser = random.choice) -> str:
    return choose(MOTIVATIONAL_QUOTES)


# ---------------------------------------------------------------------------
# Dashboard snapshot
# ---------------------------------------------------------------------------


@dataclass
class Dashboard:
    """Everything the home view shows, computed from one store snapshot."""

    primary: Recommendation
    wellness: Recommendation
    focus: Recommendation
    tasks_due_today: int
    completed_today: int
    overdue_count: int
    upcoming_reminders: int
    weekly_completion_rate: float
    average_mood: float
    average_energy: float


def build_dashboard(
    task_store: TaskStore,
    wellness_store: WellnessStore,
    now: datetime | None = None,
    choose: Chooser = random.choice,
) -> Dashboard:
    """Read both stores and assemble the dashboard recommendations and counters."""
    now = now or datetime.now()
    tasks = task_store.list_tasks()

    primary = select_primary(
        recommend_task_order(tasks, now),
        recommend_break(wellness_store.last_break_time, now, choose),
    )

    entry = wellness_store.get_wellness_entry(now)
    if entry is not None:
        wellness = recommend_wellness(entry.mood, entry.energy, entry.stress, now)
    else:
        wellness = recommend_wellness(3, 3, 3, now)

    completed = sum(1 for t in tasks if t.completed)
    focus = recommend_focus(completed, len(tasks), now)

    due_today = task_store.get_tasks_by_date(now)
    dashboard = Dashboard(
        primary=primary,
        wellness=wellness,
        focus=focus,
        tasks_due_today=len(due_today),
        completed_today=sum(1 for t in due_today if t.completed),
        overdue_count=len(task_store.get_overdue_tasks()),
        upcoming_reminders=len(task_store.get_upcoming_reminders()),
        weekly_completion_rate=wellness_store.get_completion_rate(7),
        average_mood=wellness_store.get_average_mood(7),
        average_energy=wellness_store.get_average_energy(7),
    )
    logger.debug("Dashboard built: primary=%s (%s)", primary.type.value, primary.title)
    return dashboard
