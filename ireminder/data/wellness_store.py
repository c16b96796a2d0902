"""
iReminder — Wellness & Productivity Store.

Owns daily mood/energy/stress check-ins, per-day productivity snapshots and
the last-break timestamp. Both collections are dicts keyed by calendar day,
so "one entry per day" holds by construction: writing a day that already
has an entry replaces it in place.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Callable

from ireminder.data.errors import NotFoundError, ValidationError
from ireminder.data.models import ProductivityStats, WellnessEntry
from ireminder.data.storage import WELLNESS_KEY, StateStorage

logger = logging.getLogger(__name__)

_RATING_FIELDS = ("mood", "energy", "stress")
_ENTRY_FIELDS = {"date", "mood", "energy", "stress", "notes"}
_KEEP = object()


def _as_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _validate_entry(entry: WellnessEntry) -> WellnessEntry:
    entry.date = _as_day(entry.date)
    for name in _RATING_FIELDS:
        value = getattr(entry, name)
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
            raise ValidationError(f"{name} must be an integer between 1 and 5, got {value!r}")
    return entry


def _validate_stats(stats: ProductivityStats) -> ProductivityStats:
    stats.date = _as_day(stats.date)
    for name in ("tasks_completed", "total_tasks", "focus_time", "breaks_taken"):
        if getattr(stats, name) < 0:
            raise ValidationError(f"{name} must not be negative")
    return stats


class WellnessStore:
    """Day-keyed wellness/productivity state with write-through persistence."""

    def __init__(
        self,
        storage: StateStorage | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._entries: dict[date, WellnessEntry] = {}
        self._stats: dict[date, ProductivityStats] = {}
        self._last_break_time: datetime | None = None
        self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if self._storage is None:
            return
        record = self._storage.load(WELLNESS_KEY)
        if record is None:
            return
        for raw in record.get("wellnessEntries", []):
            try:
                entry = WellnessEntry.from_record(raw)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable wellness record: %s", exc)
                continue
            self._entries[entry.date] = entry
        for raw in record.get("productivityStats", []):
            try:
                stats = ProductivityStats.from_record(raw)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable productivity record: %s", exc)
                continue
            self._stats[stats.date] = stats
        last_break = record.get("lastBreakTime")
        self._last_break_time = datetime.fromisoformat(last_break) if last_break else None

    def _commit(
        self,
        entries: dict[date, WellnessEntry] | None = None,
        stats: dict[date, ProductivityStats] | None = None,
        last_break: Any = _KEEP,
    ) -> None:
        """Save the new state, then swap it in. A failed save changes nothing."""
        entries = self._entries if entries is None else entries
        stats = self._stats if stats is None else stats
        last_break = self._last_break_time if last_break is _KEEP else last_break
        if self._storage is not None:
            self._storage.save(WELLNESS_KEY, {
                "wellnessEntries": [entries[d].to_record() for d in sorted(entries)],
                "productivityStats": [stats[d].to_record() for d in sorted(stats)],
                "lastBreakTime": last_break.isoformat() if last_break else None,
            })
        self._entries = entries
        self._stats = stats
        self._last_break_time = last_break

    # ------------------------------------------------------------------
    # Wellness entries
    # ------------------------------------------------------------------

    def add_wellness_entry(
        self,
        day: date | datetime,
        mood: int,
        energy: int,
        stress: int,
        notes: str | None = None,
    ) -> WellnessEntry:
        """Upsert the entry for a calendar day. Always assigns a fresh id."""
        entry = _validate_entry(WellnessEntry(
            id=uuid.uuid4().hex,
            date=day,
            mood=mood,
            energy=energy,
            stress=stress,
            notes=notes,
        ))
        replaced = entry.date in self._entries
        self._commit(entries={**self._entries, entry.date: entry})
        logger.info(
            "Wellness entry %s for %s (mood=%d energy=%d stress=%d)",
            "replaced" if replaced else "added", entry.date.isoformat(),
            entry.mood, entry.energy, entry.stress,
        )
        return replace(entry)

    def update_wellness_entry(self, entry_id: str, **changes: Any) -> WellnessEntry:
        """Edit an entry in place, keeping its id.

        Moving it to another day takes over that day's slot.
        """
        current = next((e for e in self._entries.values() if e.id == entry_id), None)
        if current is None:
            raise NotFoundError("Wellness entry", entry_id)
        unknown = set(changes) - _ENTRY_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update wellness field(s): {', '.join(sorted(unknown))}")

        updated = _validate_entry(replace(current, **changes))
        entries = {d: e for d, e in self._entries.items() if d != current.date}
        entries[updated.date] = updated
        self._commit(entries=entries)
        logger.info("Wellness entry %s updated for %s", entry_id, updated.date.isoformat())
        return replace(updated)

    def get_wellness_entry(self, day: date | datetime) -> WellnessEntry | None:
        entry = self._entries.get(_as_day(day))
        return replace(entry) if entry is not None else None

    def list_wellness_entries(self) -> list[WellnessEntry]:
        return [replace(self._entries[d]) for d in sorted(self._entries)]

    # ------------------------------------------------------------------
    # Productivity stats
    # ------------------------------------------------------------------

    def add_productivity_stats(
        self,
        day: date | datetime,
        tasks_completed: int,
        total_tasks: int,
        focus_time: int = 0,
        breaks_taken: int = 0,
    ) -> ProductivityStats:
        """Upsert the snapshot for a calendar day."""
        stats = _validate_stats(ProductivityStats(
            date=day,
            tasks_completed=tasks_completed,
            total_tasks=total_tasks,
            focus_time=focus_time,
            breaks_taken=breaks_taken,
        ))
        self._commit(stats={**self._stats, stats.date: stats})
        logger.info(
            "Productivity stats for %s: %d/%d tasks, %d min focus",
            stats.date.isoformat(), stats.tasks_completed, stats.total_tasks, stats.focus_time,
        )
        return replace(stats)

    def get_productivity_stats(self, day: date | datetime) -> ProductivityStats | None:
        stats = self._stats.get(_as_day(day))
        return replace(stats) if stats is not None else None

    def list_productivity_stats(self) -> list[ProductivityStats]:
        return [replace(self._stats[d]) for d in sorted(self._stats)]

    def get_weekly_stats(self, start_day: date | datetime) -> list[ProductivityStats]:
        """Snapshots from start_day through start_day + 6, inclusive."""
        first = _as_day(start_day)
        last = first + timedelta(days=6)
        return [s for s in self.list_productivity_stats() if first <= s.date <= last]

    # ------------------------------------------------------------------
    # Breaks
    # ------------------------------------------------------------------

    @property
    def last_break_time(self) -> datetime | None:
        """None until the first break is logged."""
        return self._last_break_time

    def update_last_break_time(self) -> datetime:
        self._commit(last_break=self._clock())
        logger.info("Break logged at %s", self._last_break_time.isoformat())
        return self._last_break_time

    def reset_last_break_time(self) -> None:
        self._commit(last_break=None)
        logger.info("Last break time cleared")

    # ------------------------------------------------------------------
    # Rolling analytics
    # ------------------------------------------------------------------

    def _window_start(self, days: int) -> date:
        return (self._clock() - timedelta(days=days)).date()

    def _average(self, attr: str, days: int) -> float:
        cutoff = self._window_start(days)
        values = [getattr(e, attr) for d, e in self._entries.items() if d >= cutoff]
        if not values:
            return 0
        return sum(values) / len(values)

    def get_average_mood(self, days: int) -> float:
        return self._average("mood", days)

    def get_average_energy(self, days: int) -> float:
        return self._average("energy", days)

    def get_average_stress(self, days: int) -> float:
        return self._average("stress", days)

    def get_completion_rate(self, days: int) -> float:
        """Percent of tasks completed over the trailing window; 0 when nothing was tracked."""
        cutoff = self._window_start(days)
        recent = [s for d, s in self._stats.items() if d >= cutoff]
        completed = sum(s.tasks_completed for s in recent)
        total = sum(s.total_tasks for s in recent)
        if total == 0:
            return 0
        return completed / total * 100
