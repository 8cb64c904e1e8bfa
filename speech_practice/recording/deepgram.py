import asyncio
import json
import logging
from typing import AsyncIterator, Optional
from urllib.parse import urlencode

import websockets
from websockets.exceptions import ConnectionClosed, InvalidStatus, WebSocketException

from core.config import DEEPGRAM_API_KEY, DEEPGRAM_ENDPOINTING_MS, SPEECH_LANGUAGE
from speech_practice.recording.recognizer import (
    CaptureErrorKind,
    RecognizerStartError,
    RecognizerStreamError,
)
from speech_practice.transcript.models import (
    RecognitionAlternative,
    RecognitionEvent,
    RecognitionSlot,
)

logger = logging.getLogger("deepgram_recognizer")

DEEPGRAM_LISTEN_URL = "wss://api.deepgram.com/v1/listen"


class DeepgramResultMapper:
    """
    Maps Deepgram live "Results" messages onto RecognitionEvents.
    Deepgram revises the current segment until is_final, then opens the next
    one, so each segment becomes one slot index.
    """

    def __init__(self):
        self.sequence = 0
        self.slot_index = 0
        self.last_event_ts = 0.0

    def is_in_order(self, message: dict) -> bool:
        event_ts = message.get("start", 0) or 0
        if event_ts < self.last_event_ts:
            logger.warning("Deepgram out-of-order event ignored")
            return False
        self.last_event_ts = event_ts
        return True

    def map(self, message: dict) -> Optional[RecognitionEvent]:
        if message.get("type") != "Results":
            return None
        if not self.is_in_order(message):
            return None

        channel = message.get("channel") or {}
        alternatives = [
            RecognitionAlternative(
                text=str(alt.get("transcript") or ""),
                confidence=float(alt.get("confidence") or 0.0),
            )
            for alt in channel.get("alternatives") or []
        ]
        is_final = bool(message.get("is_final", False))

        self.sequence += 1
        event = RecognitionEvent(
            sequence=self.sequence,
            slots=[RecognitionSlot(index=self.slot_index, is_final=is_final, alternatives=alternatives)],
        )
        if is_final:
            self.slot_index += 1
        return event


class DeepgramRecognizer:
    """
    Recognizer backed by a Deepgram live websocket.
    Audio capture is the caller's job: feed linear16 PCM through send_audio().
    """

    def __init__(
        self,
        api_key: str | None = None,
        language: str | None = None,
        sample_rate: int = 16000,
        url: str = DEEPGRAM_LISTEN_URL,
    ):
        self.api_key = api_key if api_key is not None else DEEPGRAM_API_KEY
        self.language = language or SPEECH_LANGUAGE
        self.sample_rate = sample_rate
        self.url = url
        self.ws = None
        self.mapper = DeepgramResultMapper()
        self._closing = False

    def _listen_url(self) -> str:
        params = {
            "model": "nova-2",
            "language": self.language,
            "punctuate": "true",
            "interim_results": "true",
            "endpointing": DEEPGRAM_ENDPOINTING_MS,
            "encoding": "linear16",
            "sample_rate": self.sample_rate,
            "channels": 1,
        }
        return f"{self.url}?{urlencode(params)}"

    async def start(self) -> None:
        if not self.api_key:
            raise RecognizerStartError(CaptureErrorKind.OTHER, "DEEPGRAM_API_KEY not set")

        self.mapper = DeepgramResultMapper()
        self._closing = False
        try:
            self.ws = await websockets.connect(
                self._listen_url(),
                additional_headers={"Authorization": f"Token {self.api_key}"},
                ping_interval=5,
                ping_timeout=20,
                max_size=None,
            )
        except InvalidStatus as exc:
            status = exc.response.status_code
            logger.error("[DG] Handshake rejected | status=%s", status)
            detail = "Deepgram rejected the API key" if status in (401, 403) else f"Deepgram handshake failed ({status})"
            raise RecognizerStartError(CaptureErrorKind.OTHER, detail) from exc
        except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
            logger.error("[DG] Connect failed: %s", exc)
            raise RecognizerStartError(CaptureErrorKind.OTHER, str(exc)) from exc

        logger.info("[DG] Streaming connected | language=%s", self.language)

    async def send_audio(self, pcm_bytes: bytes) -> None:
        if self.ws is None or self._closing:
            return
        await self.ws.send(bytes(pcm_bytes))

    async def events(self) -> AsyncIterator[RecognitionEvent]:
        if self.ws is None:
            return
        try:
            async for raw in self.ws:
                if isinstance(raw, bytes):
                    continue
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning("[DG] Non-JSON message ignored")
                    continue

                event = self.mapper.map(message)
                if event is not None:
                    yield event
        except ConnectionClosed as exc:
            if self._closing:
                return
            if exc.rcvd is not None and exc.rcvd.code == 1000:
                return
            kind = CaptureErrorKind.from_reason(exc.rcvd.reason if exc.rcvd is not None else None)
            raise RecognizerStreamError(kind, f"Deepgram stream closed: {exc}") from exc

    async def stop(self) -> None:
        if self.ws is None:
            return
        self._closing = True
        try:
            await self.ws.send(json.dumps({"type": "CloseStream"}))
        except ConnectionClosed:
            pass
        await self.ws.close()
        self.ws = None
        logger.info("[DG] Streaming closed")
