from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from speech_practice.conversation.feedback_codec import decode_feedback
from speech_practice.conversation.payloads import (
    Advisory,
    FeedbackPayload,
    PronunciationDetails,
    Translation,
)
from speech_practice.transcript.models import WordConfidenceDetail


class SenderKind(str, Enum):
    USER = "USER"
    AGENT = "AI"


class Turn(BaseModel):
    """One timeline message as returned by the conversation backend."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="messageId")
    sender_kind: SenderKind = Field(alias="senderType")
    content: str = ""
    sent_at: Optional[datetime] = Field(default=None, alias="sentAt")
    pronunciation_score: Optional[float] = Field(default=None, alias="pronunciationScore")
    feedback: Optional[str] = None

    # local UI state, never sent back
    show_translation: bool = Field(default=False, alias="showTranslation")

    _payload: Optional[FeedbackPayload] = PrivateAttr(default=None)

    @field_validator("sender_kind", mode="before")
    @classmethod
    def _normalize_sender(cls, value: Any) -> Any:
        normalized = str(value or "").strip().upper()
        if normalized in {"AGENT", "ASSISTANT", "BOT"}:
            return SenderKind.AGENT.value
        return normalized

    def model_post_init(self, __context: Any) -> None:
        self._payload = decode_feedback(self.feedback)

    @property
    def payload(self) -> Optional[FeedbackPayload]:
        return self._payload

    @property
    def translation(self) -> Optional[str]:
        return self._payload.text if isinstance(self._payload, Translation) else None

    @property
    def pronunciation_details(self) -> Optional[list[WordConfidenceDetail]]:
        return self._payload.details if isinstance(self._payload, PronunciationDetails) else None

    @property
    def advisory(self) -> Optional[Advisory]:
        return self._payload if isinstance(self._payload, Advisory) else None

    @property
    def is_user(self) -> bool:
        return self.sender_kind == SenderKind.USER


class SendTurnRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    audio_file_url: str = Field(default="", alias="audioFileUrl")
    pronunciation_details: list[dict] = Field(default_factory=list, alias="pronunciationDetails")


class AnalyzeSpeechRequest(BaseModel):
    text: str
    details: list[dict] = Field(default_factory=list)


class AnalyzeSpeechResponse(BaseModel):
    feedback: str = ""
