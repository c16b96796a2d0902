"""App settings store — user preferences with update and reset-to-defaults."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any

from ireminder.data.errors import ValidationError
from ireminder.data.models import AppSettings, WorkingHours
from ireminder.data.storage import SETTINGS_KEY, StateStorage

logger = logging.getLogger(__name__)

THEMES = ("light", "dark", "auto")
_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_FIELDS = {
    "notifications", "voice_output", "theme", "working_hours",
    "break_reminders", "break_interval",
}


def _validate(app_settings: AppSettings) -> AppSettings:
    if app_settings.theme not in THEMES:
        raise ValidationError(f"Unknown theme: {app_settings.theme!r}")
    hours = app_settings.working_hours
    if isinstance(hours, dict):
        hours = WorkingHours(**hours)
        app_settings.working_hours = hours
    for value in (hours.start, hours.end):
        if not _HHMM.match(value):
            raise ValidationError(f"Working hours must be HH:MM, got {value!r}")
    if app_settings.break_interval <= 0:
        raise ValidationError("Break interval must be a positive number of minutes")
    return app_settings


class SettingsStore:
    def __init__(self, storage: StateStorage | None = None) -> None:
        self._storage = storage
        self._settings = AppSettings()
        if storage is not None:
            record = storage.load(SETTINGS_KEY)
            if record is not None:
                self._settings = AppSettings.from_record(record)

    @property
    def settings(self) -> AppSettings:
        return replace(self._settings, working_hours=replace(self._settings.working_hours))

    def _commit(self, new: AppSettings) -> None:
        """Save, then swap in. A failed save leaves the current settings."""
        if self._storage is not None:
            self._storage.save(SETTINGS_KEY, new.to_record())
        self._settings = new

    def update_settings(self, **changes: Any) -> AppSettings:
        unknown = set(changes) - _FIELDS
        if unknown:
            raise ValidationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        self._commit(_validate(replace(self.settings, **changes)))
        logger.info("Settings updated: %s", ", ".join(sorted(changes)))
        return self.settings

    def reset_settings(self) -> AppSettings:
        self._commit(AppSettings())
        logger.info("Settings reset to defaults")
        return self.settings
