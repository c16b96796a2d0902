"""Telegram notification adapter — implements NotificationPort.

Wraps a telegram.Bot instance. "Permission" means at least one chat is
allowed to receive notices. Reminder notices carry inline buttons for
marking the reminder complete or snoozing it.
"""

from __future__ import annotations

import logging

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.error import TelegramError

logger = logging.getLogger(__name__)

REMINDER_TAG_PREFIX = "reminder-"
SNOOZE_MINUTES = 10


def reminder_keyboard(reminder_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[
        InlineKeyboardButton("Mark Complete", callback_data=f"reminder:complete:{reminder_id}"),
        InlineKeyboardButton(
            f"Snooze {SNOOZE_MINUTES}min", callback_data=f"reminder:snooze:{reminder_id}",
        ),
    ]])


class TelegramNotifier:
    """Telegram implementation of NotificationPort."""

    def __init__(self, bot: Bot, chat_ids: list[int]) -> None:
        self._bot = bot
        self._chat_ids = list(chat_ids)

    async def request_permission(self) -> bool:
        return bool(self._chat_ids)

    async def show_notification(
        self,
        title: str,
        body: str,
        tag: str | None = None,
        require_interaction: bool = False,
    ) -> bool:
        markup = None
        if require_interaction and tag and tag.startswith(REMINDER_TAG_PREFIX):
            markup = reminder_keyboard(tag[len(REMINDER_TAG_PREFIX):])

        text = f"{title}\n{body}" if body else title
        delivered = False
        for chat_id in self._chat_ids:
            try:
                await self._bot.send_message(chat_id=chat_id, text=text, reply_markup=markup)
                delivered = True
            except TelegramError as exc:
                logger.error("Failed to notify chat %d (%s): %s", chat_id, tag, exc)
        return delivered
