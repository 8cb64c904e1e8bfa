import asyncio
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from core.config import PRACTICE_API_BASE_URL, PRACTICE_API_TOKEN, REQUEST_TIMEOUT_SEC
from speech_practice.conversation.feedback_codec import encode_details
from speech_practice.conversation.models import (
    AnalyzeSpeechRequest,
    AnalyzeSpeechResponse,
    SendTurnRequest,
    Turn,
)
from speech_practice.transcript.models import WordConfidenceDetail

logger = logging.getLogger("conversation_client")


class BackendError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if value:
                return str(value)
    return "Server error"


class ConversationClient:
    """
    Async client for the conversation backend and the speech analysis endpoint.
    Raises BackendError for any transport failure or non-2xx response.
    """

    def __init__(
        self,
        base_url: str = PRACTICE_API_BASE_URL,
        token: str = PRACTICE_API_TOKEN,
        timeout_sec: float = REQUEST_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_sec,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, json_body: Any = None, retries: int = 0) -> Any:
        last_error: Exception | None = None
        for attempt in range(max(1, retries + 1)):
            try:
                response = await self._http.request(method, path, json=json_body)
            except httpx.HTTPError as exc:
                last_error = exc
                logger.warning("Backend request failed | %s %s attempt=%s err=%s", method, path, attempt + 1, exc)
                if attempt < retries:
                    await asyncio.sleep(0.4 * (attempt + 1))
                continue

            if response.is_success:
                if not response.content:
                    return None
                try:
                    return response.json()
                except ValueError as exc:
                    raise BackendError("Invalid JSON from server", response.status_code) from exc

            message = _error_message(response)
            logger.warning("Backend error | %s %s status=%s", method, path, response.status_code)
            raise BackendError(message, response.status_code)

        raise BackendError(f"Network error: {last_error}") from last_error

    # -------------------------
    # CONVERSATION
    # -------------------------

    async def fetch_turns(self, conversation_id: str) -> list[Turn]:
        data = await self._request("GET", f"/conversations/{conversation_id}/messages", retries=1)
        if not isinstance(data, list):
            raise BackendError("Unexpected messages payload")
        try:
            return [Turn.model_validate(item) for item in data]
        except ValidationError as exc:
            raise BackendError("Unexpected messages payload") from exc

    async def send_turn(
        self,
        conversation_id: str,
        message: str,
        details: list[WordConfidenceDetail],
        audio_file_url: str = "",
    ) -> Any:
        body = SendTurnRequest(
            message=message,
            audio_file_url=audio_file_url,
            pronunciation_details=encode_details(details),
        )
        return await self._request(
            "POST",
            f"/conversations/{conversation_id}/messages",
            json_body=body.model_dump(by_alias=True),
        )

    async def end_session(self, conversation_id: str) -> Any:
        return await self._request("POST", f"/conversations/{conversation_id}/end")

    # -------------------------
    # AI FEEDBACK
    # -------------------------

    async def analyze_speech(self, text: str, details: list[WordConfidenceDetail]) -> str:
        body = AnalyzeSpeechRequest(text=text, details=encode_details(details))
        data = await self._request("POST", "/speech/analyze", json_body=body.model_dump())
        try:
            return AnalyzeSpeechResponse.model_validate(data or {}).feedback
        except ValidationError as exc:
            raise BackendError("Unexpected analysis payload") from exc
