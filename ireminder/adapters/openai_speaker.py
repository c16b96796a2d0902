"""OpenAI speech adapter — implements SpeechPort.

Synthesizes speech with OpenAI text-to-speech and caches the MP3 by
voice + text, so repeated phrases ("Time for a break!") cost one API call.
The finished file is handed to an optional `deliver` callback (the bot
sends it as a voice message).

Speech is fire-and-forget: failures are logged, never raised.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Awaitable, Callable

from openai import AsyncOpenAI, OpenAIError

logger = logging.getLogger(__name__)

Deliver = Callable[[Path], Awaitable[None]]

# OpenAI accepts speed in [0.25, 4.0]; pitch and volume have no equivalent.
_MIN_SPEED = 0.25
_MAX_SPEED = 4.0


class OpenAISpeaker:
    """OpenAI TTS implementation of SpeechPort."""

    def __init__(
        self,
        api_key: str,
        model: str = "tts-1",
        voice: str = "alloy",
        audio_dir: str | Path = "data/audio",
        deliver: Deliver | None = None,
    ) -> None:
        self._model = model
        self._voice = voice
        self._audio_dir = Path(audio_dir)
        self._deliver = deliver
        self._client = AsyncOpenAI(api_key=api_key) if api_key else None
        if self._client is None:
            logger.warning("No OPENAI_API_KEY set - speech output disabled")

    def _cache_path(self, text: str, speed: float) -> Path:
        key = hashlib.md5(f"{self._voice}:{speed}:{text}".encode()).hexdigest()
        return self._audio_dir / f"{key}.mp3"

    async def synthesize(self, text: str, rate: float = 1.0) -> Path | None:
        """Return the path of an MP3 for text, calling the API on a cache miss."""
        if self._client is None:
            return None

        speed = min(max(rate, _MIN_SPEED), _MAX_SPEED)
        path = self._cache_path(text, speed)
        if path.exists():
            logger.debug("Speech cache hit: %s", path.name)
            return path

        try:
            response = await self._client.audio.speech.create(
                model=self._model,
                voice=self._voice,
                input=text,
                speed=speed,
            )
        except OpenAIError as exc:
            logger.error("Speech synthesis failed: %s", exc)
            return None

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(response.content)
        logger.info("Synthesized %d chars to %s", len(text), path.name)
        return path

    async def speak(
        self,
        text: str,
        rate: float = 1.0,
        pitch: float = 1.0,
        volume: float = 0.8,
    ) -> None:
        path = await self.synthesize(text, rate)
        if path is None or self._deliver is None:
            return
        try:
            await self._deliver(path)
        except Exception as exc:
            logger.error("Speech delivery failed for %s: %s", path.name, exc)
