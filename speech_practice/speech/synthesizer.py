import logging
from typing import Protocol

from core.config import SPEECH_LANGUAGE

logger = logging.getLogger("synthesizer")


class SpeechSynthesizer(Protocol):
    """Text-to-speech playback. Fire-and-forget: nothing is returned or awaited."""

    def speak(self, text: str, rate: float = 1.0, language: str = SPEECH_LANGUAGE) -> None: ...


class LoggingSynthesizer:
    """Stand-in used when no playback device is wired up."""

    def speak(self, text: str, rate: float = 1.0, language: str = SPEECH_LANGUAGE) -> None:
        logger.info("speak | language=%s rate=%s length=%s", language, rate, len(text or ""))
