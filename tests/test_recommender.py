"""Tests for ireminder.core.recommender — recommendation rules."""

from datetime import datetime, timedelta

import pytest

from ireminder.core.recommender import (
    BREAK_ACTIVITIES,
    MOTIVATIONAL_QUOTES,
    build_dashboard,
    minutes_since_break,
    motivational_quote,
    order_tasks,
    recommend_break,
    recommend_focus,
    recommend_task_order,
    recommend_wellness,
    select_primary,
)
from ireminder.data.models import Priority, RecommendationType, Task

NOW = datetime(2026, 3, 4, 11, 0)


def _first(options):
    return options[0]


def _task(title, priority="medium", due=None, completed=False):
    return Task(
        id=title, title=title, priority=Priority(priority), due_date=due,
        completed=completed, created_at=NOW, updated_at=NOW,
    )


# ---------------------------------------------------------------------------
# Task order
# ---------------------------------------------------------------------------


class TestTaskOrder:
    def test_all_caught_up_when_nothing_open(self):
        rec = recommend_task_order([_task("done", completed=True)], NOW)
        assert rec.type is RecommendationType.TASK_ORDER
        assert rec.title == "All caught up!"
        assert rec.priority == 1

    def test_empty_list_is_caught_up(self):
        assert recommend_task_order([], NOW).priority == 1

    def test_priority_beats_due_date(self):
        tasks = [
            _task("high soon", "high", NOW + timedelta(days=1)),
            _task("urgent later", "urgent", NOW + timedelta(days=3)),
        ]
        rec = recommend_task_order(tasks, NOW)
        assert rec.title == "Focus on: urgent later"
        assert rec.priority == 3

    def test_earlier_due_date_wins_tie(self):
        tasks = [
            _task("later", "high", NOW + timedelta(days=2)),
            _task("sooner", "high", NOW + timedelta(hours=2)),
        ]
        assert [t.title for t in order_tasks(tasks)] == ["sooner", "later"]

    def test_undated_sorts_after_dated_within_priority(self):
        tasks = [
            _task("undated", "high"),
            _task("dated", "high", NOW + timedelta(days=10)),
            _task("low dated", "low", NOW),
        ]
        assert [t.title for t in order_tasks(tasks)] == ["dated", "undated", "low dated"]

    def test_completed_tasks_skipped(self):
        tasks = [_task("urgent done", "urgent", completed=True), _task("low open", "low")]
        assert recommend_task_order(tasks, NOW).title == "Focus on: low open"

    @pytest.mark.parametrize("hour,phrase", [
        (9, "Start your day strong"),
        (10, "Perfect time to tackle important work"),
        (13, "Perfect time to tackle important work"),
        (14, "Keep the momentum going"),
        (16, "Keep the momentum going"),
        (17, "Finish strong"),
        (23, "Finish strong"),
    ])
    def test_hour_bands(self, hour, phrase):
        rec = recommend_task_order([_task("x")], NOW.replace(hour=hour))
        assert rec.description.startswith(phrase)

    def test_description_mentions_priority_and_due(self):
        dated = recommend_task_order([_task("a", "urgent", NOW)], NOW)
        undated = recommend_task_order([_task("b", "low")], NOW)
        assert "This urgent priority task is due soon." in dated.description
        assert "This low priority task needs your attention." in undated.description


# ---------------------------------------------------------------------------
# Break
# ---------------------------------------------------------------------------


class TestBreak:
    def test_suppressed_after_30_minutes(self):
        assert recommend_break(NOW - timedelta(minutes=30), NOW, _first) is None

    def test_suppressed_just_under_threshold(self):
        assert recommend_break(NOW - timedelta(minutes=44, seconds=59), NOW, _first) is None

    def test_fires_at_threshold(self):
        rec = recommend_break(NOW - timedelta(minutes=45), NOW, _first)
        assert rec is not None
        assert rec.type is RecommendationType.BREAK
        assert rec.priority == 2
        assert "45 minutes" in rec.description

    def test_unset_break_assumes_120_minutes(self):
        assert minutes_since_break(None, NOW) == 120
        rec = recommend_break(None, NOW, _first)
        assert "You've been focused for 120 minutes." in rec.description

    def test_activity_comes_from_chooser(self):
        rec = recommend_break(None, NOW, lambda options: options[-1])
        assert BREAK_ACTIVITIES[-1] in rec.description

    def test_randomness_never_changes_type_or_priority(self):
        for i in range(len(BREAK_ACTIVITIES)):
            rec = recommend_break(None, NOW, lambda options, i=i: options[i])
            assert (rec.type, rec.priority, rec.title) == (
                RecommendationType.BREAK, 2, "Time for a break!",
            )

    def test_default_chooser_picks_known_activity(self):
        rec = recommend_break(None, NOW)
        assert any(a in rec.description for a in BREAK_ACTIVITIES)


class TestSelectPrimary:
    def test_task_wins_with_default_weights(self):
        # Break (2) never reaches task (3) with the built-in constants.
        task_rec = recommend_task_order([_task("x")], NOW)
        break_rec = recommend_break(None, NOW, _first)
        assert select_primary(task_rec, break_rec) is task_rec

    def test_task_wins_when_break_absent(self):
        task_rec = recommend_task_order([_task("x")], NOW)
        assert select_primary(task_rec, None) is task_rec

    def test_break_wins_ties(self):
        caught_up = recommend_task_order([], NOW)  # priority 1
        break_rec = recommend_break(None, NOW, _first)
        assert select_primary(caught_up, break_rec) is break_rec

    def test_break_wins_on_equal_priority(self):
        from dataclasses import replace

        task_rec = recommend_task_order([_task("x")], NOW)
        break_rec = replace(recommend_break(None, NOW, _first), priority=3)
        assert select_primary(task_rec, break_rec) is break_rec


# ---------------------------------------------------------------------------
# Wellness
# ---------------------------------------------------------------------------


class TestWellness:
    def test_stress_beats_everything(self):
        rec = recommend_wellness(mood=1, energy=1, stress=5, now=NOW)
        assert rec.title == "Stress Management"
        assert rec.priority == 3

    def test_stress_threshold_is_four(self):
        assert recommend_wellness(3, 3, 4, NOW).title == "Stress Management"
        assert recommend_wellness(3, 3, 3, NOW).title != "Stress Management"

    def test_energy_before_mood(self):
        rec = recommend_wellness(mood=1, energy=2, stress=3, now=NOW)
        assert rec.title == "Energy Boost"
        assert rec.priority == 2

    def test_mood_lift(self):
        rec = recommend_wellness(mood=2, energy=3, stress=1, now=NOW)
        assert rec.title == "Mood Lift"
        assert rec.priority == 2

    def test_affirmation(self):
        rec = recommend_wellness(mood=5, energy=5, stress=1, now=NOW)
        assert rec.title == "Keep up the great work!"
        assert rec.priority == 1
        assert rec.type is RecommendationType.WELLNESS


# ---------------------------------------------------------------------------
# Focus
# ---------------------------------------------------------------------------


class TestFocus:
    @pytest.mark.parametrize("completed,total,title,priority", [
        (8, 10, "Excellent progress!", 1),
        (5, 10, "Good momentum", 2),
        (79, 100, "Good momentum", 2),
        (1, 4, "Time to focus", 2),
        (1, 5, "Fresh start opportunity", 3),
        (0, 0, "Fresh start opportunity", 3),
    ])
    def test_bands(self, completed, total, title, priority):
        rec = recommend_focus(completed, total, NOW)
        assert rec.type is RecommendationType.FOCUS
        assert (rec.title, rec.priority) == (title, priority)


def test_motivational_quote_uses_chooser():
    assert motivational_quote(_first) == MOTIVATIONAL_QUOTES[0]
    assert motivational_quote() in MOTIVATIONAL_QUOTES


def test_each_call_produces_fresh_recommendation():
    a = recommend_wellness(3, 3, 3, NOW)
    b = recommend_wellness(3, 3, 3, NOW)
    assert a.id != b.id
    assert a.created_at == NOW


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class TestDashboard:
    def test_dashboard_from_stores(self, task_store, wellness_store, clock):
        now = clock.now
        done = task_store.add_task("Done today", due_date=now.replace(hour=9))
        task_store.toggle_task(done.id)
        task_store.add_task("Late", priority="urgent", due_date=now - timedelta(days=1))
        task_store.add_reminder("Soon", "", now + timedelta(minutes=10))
        wellness_store.add_wellness_entry(now, 4, 1, 2)
        wellness_store.add_productivity_stats(now, 1, 2)

        dash = build_dashboard(task_store, wellness_store, now, _first)

        assert dash.primary.title == "Focus on: Late"
        assert dash.wellness.title == "Energy Boost"
        assert dash.focus.title == "Good momentum"
        assert dash.tasks_due_today == 1
        assert dash.completed_today == 1
        assert dash.overdue_count == 1
        assert dash.upcoming_reminders == 1
        assert dash.weekly_completion_rate == 50.0
        assert dash.average_mood == 4.0

    def test_dashboard_without_entries_is_neutral(self, task_store, wellness_store, clock):
        dash = build_dashboard(task_store, wellness_store, clock.now, _first)
        assert dash.wellness.title == "Keep up the great work!"
        # Nothing to do and no break logged: the break suggestion wins the tie-break.
        assert dash.primary.type is RecommendationType.BREAK
        assert dash.average_mood == 0
