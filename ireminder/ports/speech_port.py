"""Speech port — abstract interface for spoken feedback.

Fire-and-forget: callers never consume a result.
"""

from __future__ import annotations

from typing import Protocol


class SpeechPort(Protocol):
    """Abstract text-to-speech interface used by core modules."""

    async def speak(
        self,
        text: str,
        rate: float = 1.0,
        pitch: float = 1.0,
        volume: float = 0.8,
    ) -> None: ...
