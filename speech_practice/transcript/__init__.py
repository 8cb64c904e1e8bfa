from .classifier import classify
from .engine import TranscriptAssembler
from .models import (
    ConfidenceTier,
    RecognitionAlternative,
    RecognitionEvent,
    RecognitionSlot,
    WordConfidenceDetail,
    event_from_dict,
)
from .state import TranscriptState

__all__ = [
    "ConfidenceTier",
    "RecognitionAlternative",
    "RecognitionEvent",
    "RecognitionSlot",
    "TranscriptAssembler",
    "TranscriptState",
    "WordConfidenceDetail",
    "classify",
    "event_from_dict",
]
