from __future__ import annotations

from enum import Enum
from typing import AsyncIterator, Protocol

from speech_practice.transcript.models import RecognitionEvent


class CaptureErrorKind(str, Enum):
    NO_SPEECH = "no-speech"
    PERMISSION_DENIED = "permission-denied"
    OTHER = "other"

    @property
    def user_message(self) -> str:
        return _CAPTURE_MESSAGES[self]

    @classmethod
    def from_reason(cls, reason: str | None) -> "CaptureErrorKind":
        normalized = str(reason or "").strip().lower()
        # NET-0001: Deepgram closed the stream after receiving no audio
        if normalized in {"no-speech", "net-0001"}:
            return cls.NO_SPEECH
        if normalized in {"not-allowed", "permission-denied", "service-not-allowed"}:
            return cls.PERMISSION_DENIED
        return cls.OTHER


_CAPTURE_MESSAGES = {
    CaptureErrorKind.NO_SPEECH: "No speech was detected. Please try again.",
    CaptureErrorKind.PERMISSION_DENIED: "Microphone access is denied. Please enable it in your browser settings.",
    CaptureErrorKind.OTHER: "An error occurred with speech recognition. Please try again.",
}


class RecognizerError(Exception):
    def __init__(self, kind: CaptureErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(detail or kind.value)


class RecognizerStartError(RecognizerError):
    """Recognizer could not be started (e.g. microphone permission refused)."""


class RecognizerStreamError(RecognizerError):
    """Recognizer reported a failure after it started streaming."""


class Recognizer(Protocol):
    """
    Streaming speech recognizer.
    start() may suspend until the permission prompt resolves.
    events() yields RecognitionEvents in delivery order and ends when the
    recognizer stops on its own (e.g. silence timeout) or after stop().
    """

    async def start(self) -> None: ...

    def events(self) -> AsyncIterator[RecognitionEvent]: ...

    async def stop(self) -> None: ...
