from enum import Enum
import logging
from typing import Optional

from speech_practice.recording.recognizer import CaptureErrorKind
from speech_practice.transcript.engine import TranscriptAssembler

logger = logging.getLogger("recording")


class RecordingState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    REVIEWING = "reviewing"
    ERROR = "error"


_ALLOWED = {
    (RecordingState.IDLE, RecordingState.LISTENING),
    (RecordingState.LISTENING, RecordingState.REVIEWING),
    (RecordingState.LISTENING, RecordingState.IDLE),
    (RecordingState.LISTENING, RecordingState.ERROR),
    (RecordingState.REVIEWING, RecordingState.LISTENING),
    (RecordingState.REVIEWING, RecordingState.IDLE),
    (RecordingState.ERROR, RecordingState.IDLE),
}


class RecordingLifecycle:
    """
    Single explicit recording state.
    Owns the assembler resets; transcript state only changes while LISTENING.
    """

    def __init__(self, assembler: Optional[TranscriptAssembler] = None):
        self.assembler = assembler or TranscriptAssembler()
        self.state = RecordingState.IDLE
        self.error: Optional[CaptureErrorKind] = None
        self.error_detail: str = ""
        # bumped on each entry into LISTENING; anything tagged older is stale
        self.generation = 0

    @property
    def is_listening(self) -> bool:
        return self.state == RecordingState.LISTENING

    @property
    def error_message(self) -> Optional[str]:
        return self.error.user_message if self.error else None

    def _transition(self, target: RecordingState, reason: str) -> bool:
        if (self.state, target) not in _ALLOWED:
            logger.info(f"[REC] Transition refused {self.state.value} → {target.value} | reason={reason}")
            return False

        logger.info(f"[REC] Transition {self.state.value} → {target.value} | reason={reason}")
        self.state = target
        return True

    # -------------------------
    # CAPTURE
    # -------------------------

    def start(self) -> bool:
        if self.state != RecordingState.IDLE:
            return False
        return self._enter_listening("start")

    def retake(self) -> bool:
        if self.state != RecordingState.REVIEWING:
            return False
        return self._enter_listening("retake")

    def _enter_listening(self, reason: str) -> bool:
        self.assembler.reset()
        self.error = None
        self.error_detail = ""
        if not self._transition(RecordingState.LISTENING, reason):
            return False
        self.generation += 1
        return True

    def finish(self, reason: str = "stop") -> RecordingState:
        """
        Leave LISTENING after stop or when the recognizer ended on its own.
        Review only makes sense when something was finalized.
        """
        if self.state != RecordingState.LISTENING:
            return self.state

        if self.assembler.has_finalized_text():
            self._transition(RecordingState.REVIEWING, reason)
        else:
            self._transition(RecordingState.IDLE, f"{reason}:empty")
            self.assembler.reset()
        return self.state

    def fail(self, kind: CaptureErrorKind, detail: str = "") -> bool:
        if not self._transition(RecordingState.ERROR, f"error:{kind.value}"):
            return False
        self.error = kind
        self.error_detail = detail
        return True

    # -------------------------
    # REVIEW EXIT
    # -------------------------

    def complete(self, reason: str = "send") -> bool:
        """
        Leave REVIEWING for IDLE (send or discard) and drop the draft.
        """
        if self.state != RecordingState.REVIEWING:
            return False
        if not self._transition(RecordingState.IDLE, reason):
            return False
        self.assembler.reset()
        return True

    def acknowledge_error(self) -> bool:
        if self.state != RecordingState.ERROR:
            return False
        if not self._transition(RecordingState.IDLE, "acknowledge"):
            return False
        self.error = None
        self.error_detail = ""
        self.assembler.reset()
        return True
