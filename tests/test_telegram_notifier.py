"""Tests for the Telegram notification adapter.

The telegram.Bot is mocked; nothing is sent.
"""

import pytest
from unittest.mock import AsyncMock

from telegram import InlineKeyboardMarkup
from telegram.error import TelegramError

from ireminder.adapters.telegram_notifier import TelegramNotifier, reminder_keyboard


class TestPermission:
    @pytest.mark.asyncio
    async def test_granted_with_chats(self):
        assert await TelegramNotifier(AsyncMock(), [1]).request_permission() is True

    @pytest.mark.asyncio
    async def test_denied_without_chats(self):
        assert await TelegramNotifier(AsyncMock(), []).request_permission() is False


class TestShowNotification:
    @pytest.mark.asyncio
    async def test_sends_to_every_chat(self):
        bot = AsyncMock()
        notifier = TelegramNotifier(bot, [1, 2])
        assert await notifier.show_notification("🧘 Break Time", "Stretch", tag="break-reminder")
        assert bot.send_message.await_count == 2
        kwargs = bot.send_message.await_args.kwargs
        assert kwargs["text"] == "🧘 Break Time\nStretch"
        assert kwargs["reply_markup"] is None

    @pytest.mark.asyncio
    async def test_reminder_gets_action_buttons(self):
        bot = AsyncMock()
        notifier = TelegramNotifier(bot, [1])
        await notifier.show_notification(
            "⏰ Call", "", tag="reminder-abc", require_interaction=True,
        )
        kwargs = bot.send_message.await_args.kwargs
        assert kwargs["text"] == "⏰ Call"
        markup = kwargs["reply_markup"]
        assert isinstance(markup, InlineKeyboardMarkup)
        data = [b.callback_data for b in markup.inline_keyboard[0]]
        assert data == ["reminder:complete:abc", "reminder:snooze:abc"]

    @pytest.mark.asyncio
    async def test_one_failed_chat_still_delivered(self):
        bot = AsyncMock()
        bot.send_message.side_effect = [TelegramError("blocked"), None]
        notifier = TelegramNotifier(bot, [1, 2])
        assert await notifier.show_notification("t", "b") is True

    @pytest.mark.asyncio
    async def test_all_chats_failing_is_not_delivered(self):
        bot = AsyncMock()
        bot.send_message.side_effect = TelegramError("down")
        notifier = TelegramNotifier(bot, [1])
        assert await notifier.show_notification("t", "b") is False


def test_reminder_keyboard_labels():
    buttons = reminder_keyboard("r1").inline_keyboard[0]
    assert [b.text for b in buttons] == ["Mark Complete", "Snooze 10min"]
