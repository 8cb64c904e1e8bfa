from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ConfidenceTier(str, Enum):
    CORRECT = "correct"
    FAIR = "fair"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class RecognitionAlternative:
    text: str = ""
    confidence: float = 0.0


@dataclass
class RecognitionSlot:
    """
    One result slot of a recognizer event.
    May be revised by later events until is_final, then immutable.
    """
    index: int = 0
    is_final: bool = False
    alternatives: List[RecognitionAlternative] = field(default_factory=list)

    @property
    def text(self) -> str:
        return self.alternatives[0].text if self.alternatives else ""

    @property
    def confidence(self) -> float:
        return self.alternatives[0].confidence if self.alternatives else 0.0


@dataclass
class RecognitionEvent:
    """
    Raw recognizer output, delivered in increasing sequence order.
    """
    sequence: int = 0
    slots: List[RecognitionSlot] = field(default_factory=list)


@dataclass(frozen=True)
class WordConfidenceDetail:
    word: str
    tier: ConfidenceTier

    def to_dict(self) -> dict:
        # backend field name is "status"
        return {
            "word": self.word,
            "status": self.tier.value,
        }


def event_from_dict(data: dict) -> RecognitionEvent:
    """
    Build an event from its JSON form. A slot may list "alternatives" or
    carry a single "text"/"confidence" pair directly.
    """
    slots: List[RecognitionSlot] = []
    for position, raw_slot in enumerate(data.get("slots") or []):
        raw_alternatives = raw_slot.get("alternatives")
        if raw_alternatives is None:
            raw_alternatives = [{"text": raw_slot.get("text", ""), "confidence": raw_slot.get("confidence", 0.0)}]
        slots.append(
            RecognitionSlot(
                index=int(raw_slot.get("index", position)),
                is_final=bool(raw_slot.get("is_final", False)),
                alternatives=[
                    RecognitionAlternative(
                        text=str(alt.get("text") or ""),
                        confidence=float(alt.get("confidence") or 0.0),
                    )
                    for alt in raw_alternatives
                ],
            )
        )
    return RecognitionEvent(sequence=int(data.get("sequence", 0)), slots=slots)
