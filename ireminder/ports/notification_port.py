"""Notification port — abstract interface for showing notifications to the user.

Core modules depend on this protocol, never on a specific messaging provider.
A refused permission is reported as False, never raised.
"""

from __future__ import annotations

from typing import Protocol


class NotificationPort(Protocol):
    """Abstract notification interface used by core modules."""

    async def request_permission(self) -> bool: ...

    async def show_notification(
        self,
        title: str,
        body: str,
        tag: str | None = None,
        require_interaction: bool = False,
    ) -> bool: ...
