from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from speech_practice.feedback.render import AdvisoryParagraph, render_advisory
from speech_practice.transcript.models import WordConfidenceDetail


@dataclass(frozen=True)
class Translation:
    text: str


@dataclass(frozen=True)
class PronunciationDetails:
    details: list[WordConfidenceDetail] = field(default_factory=list)


@dataclass(frozen=True)
class Advisory:
    text: str

    @property
    def paragraphs(self) -> list[AdvisoryParagraph]:
        return render_advisory(self.text)


FeedbackPayload = Union[Translation, PronunciationDetails, Advisory]
