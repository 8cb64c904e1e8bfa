import asyncio
import contextlib
from dataclasses import dataclass
import logging
from typing import Optional

from core.config import SPEECH_LANGUAGE, WORD_PLAYBACK_RATE
from core.logger import log_event
from speech_practice.conversation.client import BackendError, ConversationClient
from speech_practice.conversation.summary import SessionSummary, summarize
from speech_practice.conversation.timeline import TurnTimeline
from speech_practice.feedback.orchestrator import FeedbackOrchestrator, FeedbackResult
from speech_practice.recording.lifecycle import RecordingLifecycle, RecordingState
from speech_practice.recording.recognizer import (
    CaptureErrorKind,
    Recognizer,
    RecognizerStartError,
    RecognizerStreamError,
)
from speech_practice.speech.synthesizer import LoggingSynthesizer, SpeechSynthesizer
from speech_practice.transcript.models import WordConfidenceDetail

logger = logging.getLogger("session_controller")

# How long stop() waits for trailing final results before giving up on the stream
STOP_DRAIN_TIMEOUT_SEC = 2.0


@dataclass
class SendOutcome:
    ok: bool
    draft: str
    error: Optional[str] = None


class PracticeSessionController:
    """
    One practice conversation: recording, review, send, feedback, summary.
    Every async failure is caught here and surfaced as state, never raised.
    """

    def __init__(
        self,
        conversation_id: str,
        client: ConversationClient,
        recognizer: Recognizer,
        synthesizer: Optional[SpeechSynthesizer] = None,
        lifecycle: Optional[RecordingLifecycle] = None,
        timeline: Optional[TurnTimeline] = None,
        feedback: Optional[FeedbackOrchestrator] = None,
    ):
        self.conversation_id = conversation_id
        self.client = client
        self.recognizer = recognizer
        self.synthesizer = synthesizer or LoggingSynthesizer()
        self.lifecycle = lifecycle or RecordingLifecycle()
        self.timeline = timeline or TurnTimeline()
        self.feedback = feedback or FeedbackOrchestrator(client, session_id=conversation_id)

        self.alert: Optional[str] = None
        self.summary: Optional[SessionSummary] = None

        self._pump_task: Optional[asyncio.Task] = None
        self._stop_requested = False
        self._sending = False

    # -------------------------
    # VIEW STATE
    # -------------------------

    @property
    def state(self) -> RecordingState:
        return self.lifecycle.state

    @property
    def live_text(self) -> str:
        return self.lifecycle.assembler.display_text()

    @property
    def details(self) -> list[WordConfidenceDetail]:
        return self.lifecycle.assembler.details

    @property
    def is_sending(self) -> bool:
        return self._sending

    def dismiss_alert(self) -> None:
        self.alert = None

    # -------------------------
    # TIMELINE
    # -------------------------

    async def _refresh(self) -> None:
        turns = await self.client.fetch_turns(self.conversation_id)
        self.timeline.replace(turns)

    async def load(self) -> bool:
        try:
            await self._refresh()
        except BackendError as exc:
            logger.error("Error fetching messages | conversation=%s err=%s", self.conversation_id, exc.message)
            return False
        return True

    def toggle_translation(self, turn_id: str) -> Optional[bool]:
        return self.timeline.toggle_translation(turn_id)

    # -------------------------
    # CAPTURE
    # -------------------------

    async def start_recording(self) -> bool:
        if not self.lifecycle.start():
            return False
        self.feedback.invalidate()
        return await self._open_capture()

    async def retake(self) -> bool:
        if not self.lifecycle.retake():
            return False
        self.feedback.invalidate()
        return await self._open_capture()

    async def _open_capture(self) -> bool:
        generation = self.lifecycle.generation
        self._stop_requested = False
        log_event("recording", "capture_starting", self.conversation_id, generation=generation)

        try:
            await self.recognizer.start()
        except RecognizerStartError as exc:
            logger.warning("Recognizer start failed | kind=%s detail=%s", exc.kind.value, exc.detail)
            self.lifecycle.fail(exc.kind, exc.detail)
            return False
        except Exception as exc:
            logger.error("Could not start microphone | err=%s", exc)
            self.lifecycle.fail(CaptureErrorKind.OTHER, str(exc))
            return False

        if generation != self.lifecycle.generation:
            # a newer capture owns the recognizer now
            logger.info("Stale recognizer start ignored | generation=%s current=%s", generation, self.lifecycle.generation)
            return False

        if not self.lifecycle.is_listening:
            # stopped while the permission prompt was open
            await self._stop_recognizer()
            return False

        self._pump_task = asyncio.create_task(self._pump(generation))
        return True

    def _is_current(self, generation: int) -> bool:
        return generation == self.lifecycle.generation and self.lifecycle.is_listening

    async def _pump(self, generation: int) -> None:
        try:
            async for event in self.recognizer.events():
                if not self._is_current(generation):
                    logger.info("Stale recognizer event dropped | sequence=%s", event.sequence)
                    break
                self.lifecycle.assembler.ingest(event)
        except RecognizerStreamError as exc:
            logger.warning("Recognizer stream error | kind=%s detail=%s", exc.kind.value, exc.detail)
            if self._is_current(generation):
                self.lifecycle.fail(exc.kind, exc.detail)
            return
        except Exception as exc:
            logger.error("Recognizer stream crashed | err=%s", exc)
            if self._is_current(generation):
                self.lifecycle.fail(CaptureErrorKind.OTHER, str(exc))
            return

        if self._is_current(generation):
            reason = "stop" if self._stop_requested else "recognizer_end"
            state = self.lifecycle.finish(reason)
            log_event(
                "recording",
                "capture_finished",
                self.conversation_id,
                reason=reason,
                state=state.value,
                **self.lifecycle.assembler.snapshot(),
            )

    async def _stop_recognizer(self) -> None:
        try:
            await self.recognizer.stop()
        except Exception as exc:
            # best effort: events already ingested stand
            logger.warning("Recognizer stop failed | err=%s", exc)

    async def stop_recording(self) -> RecordingState:
        if not self.lifecycle.is_listening:
            return self.lifecycle.state

        generation = self.lifecycle.generation
        self._stop_requested = True
        await self._stop_recognizer()

        task = self._pump_task
        if task is not None and not task.done():
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=STOP_DRAIN_TIMEOUT_SEC)
            except asyncio.TimeoutError:
                logger.warning("Recognizer did not end after stop; cancelling pump")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        if self._is_current(generation):
            self.lifecycle.finish("stop")
        return self.lifecycle.state

    async def wait_for_capture(self) -> None:
        task = self._pump_task
        if task is not None:
            await task

    def discard(self) -> bool:
        if not self.lifecycle.complete("discard"):
            return False
        self.feedback.invalidate()
        return True

    def acknowledge_error(self) -> bool:
        return self.lifecycle.acknowledge_error()

    # -------------------------
    # SEND
    # -------------------------

    async def send_recording(self) -> Optional[SendOutcome]:
        if self.lifecycle.state != RecordingState.REVIEWING or self._sending:
            return None

        assembler = self.lifecycle.assembler
        draft = assembler.finalized_text
        details = assembler.details

        # draft is cleared whatever the network outcome
        self.lifecycle.complete("send")
        self.feedback.invalidate()
        return await self._send(draft, details)

    async def send_text(self, text: str) -> Optional[SendOutcome]:
        message = str(text or "").strip()
        if not message or self._sending or self.lifecycle.state != RecordingState.IDLE:
            return None
        return await self._send(message, [])

    async def _send(self, draft: str, details: list[WordConfidenceDetail]) -> SendOutcome:
        if self.timeline.is_full:
            self.alert = (
                f"Conversation limit reached ({self.timeline.max_messages} messages). "
                "Please end the session to see your report."
            )
            return SendOutcome(ok=False, draft=draft, error=self.alert)

        self._sending = True
        self.alert = None
        log_event("conversation", "send", self.conversation_id, draft=draft, words=len(details))
        try:
            try:
                await self.client.send_turn(self.conversation_id, draft, details)
            except BackendError as exc:
                logger.error("Error sending message | status=%s err=%s", exc.status_code, exc.message)
                self.alert = f"Error: {exc.message}"
                return SendOutcome(ok=False, draft=draft, error=self.alert)

            try:
                await self._refresh()
            except BackendError as exc:
                logger.error("Error refreshing messages after send | err=%s", exc.message)
                self.alert = f"Error: {exc.message}"
            return SendOutcome(ok=True, draft=draft)
        finally:
            self._sending = False

    # -------------------------
    # FEEDBACK & PLAYBACK
    # -------------------------

    async def request_feedback(self) -> Optional[FeedbackResult]:
        if self.lifecycle.state != RecordingState.REVIEWING:
            return None
        assembler = self.lifecycle.assembler
        return await self.feedback.request_feedback(assembler.finalized_text, assembler.details)

    def speak_turn(self, turn_id: str) -> bool:
        turn = self.timeline.get(turn_id)
        if turn is None:
            return False
        self.synthesizer.speak(turn.content, rate=1.0, language=SPEECH_LANGUAGE)
        return True

    def speak_word(self, word: str) -> bool:
        if not str(word or "").strip():
            return False
        self.synthesizer.speak(word, rate=WORD_PLAYBACK_RATE, language=SPEECH_LANGUAGE)
        return True

    # -------------------------
    # END
    # -------------------------

    async def end_session(self) -> Optional[SessionSummary]:
        if self.lifecycle.is_listening:
            await self.stop_recording()

        try:
            await self.client.end_session(self.conversation_id)
        except BackendError as exc:
            logger.error("Error ending conversation | err=%s", exc.message)
            self.alert = f"Error: {exc.message}"
            return None

        try:
            await self._refresh()
        except BackendError as exc:
            logger.error("Error refreshing messages after end | err=%s", exc.message)

        self.summary = summarize(self.timeline)
        log_event("conversation", "ended", self.conversation_id, **self.summary.to_dict())
        return self.summary

    async def close(self) -> None:
        task = self._pump_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._stop_recognizer()
