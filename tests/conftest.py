import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from speech_practice.transcript.models import (  # noqa: E402
    RecognitionAlternative,
    RecognitionEvent,
    RecognitionSlot,
)


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PRACTICE_API_BASE_URL", "http://practice.test/api")
    monkeypatch.setenv("PRACTICE_API_TOKEN", "test-token")
    monkeypatch.setenv("DEEPGRAM_API_KEY", "")


def make_event(sequence: int, *slots: tuple) -> RecognitionEvent:
    """slots are (index, is_final, text, confidence) tuples"""
    return RecognitionEvent(
        sequence=sequence,
        slots=[
            RecognitionSlot(
                index=index,
                is_final=is_final,
                alternatives=[RecognitionAlternative(text=text, confidence=confidence)],
            )
            for index, is_final, text, confidence in slots
        ],
    )


class FakeRecognizer:
    def __init__(self, start_error: Exception | None = None):
        self.start_error = start_error
        self.started = 0
        self.stopped = 0
        self.queue: asyncio.Queue = asyncio.Queue()

    async def start(self) -> None:
        self.started += 1
        if self.start_error is not None:
            raise self.start_error

    def push(self, *items) -> None:
        for item in items:
            self.queue.put_nowait(item)

    def end(self) -> None:
        self.queue.put_nowait(None)

    async def events(self):
        while True:
            item = await self.queue.get()
            if item is None:
                return
            if isinstance(item, Exception):
                raise item
            yield item

    async def stop(self) -> None:
        self.stopped += 1
        self.queue.put_nowait(None)


class RecordingSynthesizer:
    def __init__(self):
        self.calls: list[dict] = []

    def speak(self, text: str, rate: float = 1.0, language: str = "en-US") -> None:
        self.calls.append({"text": text, "rate": rate, "language": language})


class FakeBackend:
    """In-memory conversation backend served through httpx.MockTransport."""

    def __init__(self, conversation_id: str = "conv-1"):
        self.conversation_id = conversation_id
        self.messages: list[dict] = [
            {
                "messageId": "m-0",
                "senderType": "AI",
                "content": "Hello, how can I help you today?",
                "sentAt": "2025-01-01T10:00:00",
                "pronunciationScore": None,
                "feedback": "TRANSLATION:Xin chào",
            }
        ]
        self.requests: list[tuple[str, str, dict | None]] = []
        self.fail_paths: dict[str, tuple[int, dict]] = {}
        self.analysis_text = "- Stress the first syllable of 'today'"
        self.ended = False

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def count(self, method: str, suffix: str) -> int:
        return sum(1 for m, path, _ in self.requests if m == method and path.endswith(suffix))

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path
        self.requests.append((request.method, path, body))

        for suffix, (status, payload) in self.fail_paths.items():
            if path.endswith(suffix):
                return httpx.Response(status, json=payload)

        base = f"/api/conversations/{self.conversation_id}"
        if request.method == "GET" and path == f"{base}/messages":
            return httpx.Response(200, json=self.messages)

        if request.method == "POST" and path == f"{base}/messages":
            details = body.get("pronunciationDetails") or []
            score = None
            if details:
                correct = sum(1 for d in details if d["status"] == "correct")
                score = round(correct / len(details), 2)
            index = len(self.messages)
            self.messages.append(
                {
                    "messageId": f"m-{index}",
                    "senderType": "USER",
                    "content": body["message"],
                    "sentAt": "2025-01-01T10:01:00",
                    "pronunciationScore": score,
                    "feedback": json.dumps(details) if details else None,
                }
            )
            self.messages.append(
                {
                    "messageId": f"m-{index + 1}",
                    "senderType": "AI",
                    "content": "Nice, tell me more.",
                    "sentAt": "2025-01-01T10:01:05",
                    "pronunciationScore": None,
                    "feedback": "TRANSLATION:Hay lắm, kể thêm đi.",
                }
            )
            return httpx.Response(200, json=self.messages[index])

        if request.method == "POST" and path == f"{base}/end":
            self.ended = True
            return httpx.Response(200, json={"conversationId": self.conversation_id, "status": "COMPLETED"})

        if request.method == "POST" and path == "/api/speech/analyze":
            return httpx.Response(200, json={"feedback": self.analysis_text})

        return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def synthesizer() -> RecordingSynthesizer:
    return RecordingSynthesizer()
