from dataclasses import dataclass
from enum import Enum
import logging
from typing import Optional

from core.config import FEEDBACK_FALLBACK_MESSAGE
from core.logger import log_event
from speech_practice.conversation.client import ConversationClient
from speech_practice.feedback.render import AdvisoryParagraph, render_advisory
from speech_practice.transcript.models import WordConfidenceDetail

logger = logging.getLogger("feedback_orchestrator")


class FeedbackStatus(str, Enum):
    NOT_REQUESTED = "not_requested"
    LOADING = "loading"
    AVAILABLE = "available"


@dataclass(frozen=True)
class FeedbackResult:
    text: str
    is_fallback: bool = False

    @property
    def paragraphs(self) -> list[AdvisoryParagraph]:
        return render_advisory(self.text)


class FeedbackOrchestrator:
    """
    Single-flight round trip to the AI feedback service for the transcript
    under review. Late results for an invalidated review are dropped.
    """

    def __init__(
        self,
        client: ConversationClient,
        fallback_message: str = FEEDBACK_FALLBACK_MESSAGE,
        session_id: str = "",
    ):
        self.client = client
        self.fallback_message = fallback_message
        self.session_id = session_id
        self.status = FeedbackStatus.NOT_REQUESTED
        self.result: Optional[FeedbackResult] = None
        self._in_flight = False
        self._generation = 0

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def invalidate(self) -> None:
        """The review moved on; any pending result is no longer relevant."""
        self._generation += 1
        self._in_flight = False
        self.status = FeedbackStatus.NOT_REQUESTED
        self.result = None

    reset = invalidate

    async def request_feedback(
        self,
        transcript: str,
        details: list[WordConfidenceDetail],
    ) -> Optional[FeedbackResult]:
        text = str(transcript or "").strip()
        if not text:
            return None
        if self._in_flight:
            logger.info("Feedback request skipped (already in flight)")
            return None

        generation = self._generation
        self._in_flight = True
        self.status = FeedbackStatus.LOADING
        self.result = None
        log_event("feedback", "requested", self.session_id, text=text, words=len(details))

        try:
            feedback = await self.client.analyze_speech(text, list(details))
            result = FeedbackResult(text=feedback)
        except Exception as exc:
            logger.warning("Feedback request failed | err=%s", exc)
            result = FeedbackResult(text=self.fallback_message, is_fallback=True)

        if generation != self._generation:
            log_event("feedback", "stale_result_dropped", self.session_id)
            return None

        self._in_flight = False
        self.status = FeedbackStatus.AVAILABLE
        self.result = result
        log_event("feedback", "available", self.session_id, fallback=result.is_fallback)
        return result
