import logging
from typing import List

from .classifier import classify
from .models import RecognitionEvent, WordConfidenceDetail
from .state import TranscriptState

logging.basicConfig(
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger("transcript_assembler")


class TranscriptAssembler:
    """
    Deterministic transcript assembler.
    Only finalized slots are durable; confidence is tiered once per final word.
    Single source of truth = TranscriptState.
    """

    def __init__(self):
        self.state = TranscriptState()

    def reset(self):
        self.state = TranscriptState()

    # -------------------------
    # INPUT API (FROM RECOGNIZER)
    # -------------------------

    def ingest(self, event: RecognitionEvent) -> bool:
        """
        Apply one recognizer event in place.
        Returns False when the event was out of order and ignored.
        """
        last = self.state.last_sequence
        if last is not None and event.sequence <= last:
            logger.warning("Out-of-order event ignored | sequence=%s last=%s", event.sequence, last)
            return False
        self.state.last_sequence = event.sequence

        interim_parts: List[str] = []

        for slot in sorted(event.slots, key=lambda s: s.index):
            text = slot.text.strip()

            if not slot.is_final:
                if text:
                    interim_parts.append(text)
                continue

            if slot.index in self.state.finalized_indices:
                logger.info("Duplicate final slot ignored | index=%s", slot.index)
                continue
            self.state.finalized_indices.add(slot.index)

            if not text:
                continue

            tier = classify(slot.confidence)
            details = [WordConfidenceDetail(word=word, tier=tier) for word in text.split()]
            self.state.commit_final(text, details)

        # interim is a revisable guess: this event's guess supersedes the last one in full
        self.state.replace_interim(" ".join(interim_parts))
        return True

    # -------------------------
    # OUTPUT (FOR REVIEW)
    # -------------------------

    @property
    def finalized_text(self) -> str:
        return self.state.finalized_text

    @property
    def interim_text(self) -> str:
        return self.state.interim_text

    @property
    def details(self) -> List[WordConfidenceDetail]:
        return list(self.state.details)

    def display_text(self) -> str:
        parts = [self.state.finalized_text, self.state.interim_text]
        return " ".join(part for part in parts if part)

    def has_finalized_text(self) -> bool:
        return bool(self.state.finalized_text.strip())

    def snapshot(self) -> dict:
        return {
            "finalized_words": self.state.word_count(),
            "details": len(self.state.details),
            "interim_length": len(self.state.interim_text),
            "last_sequence": self.state.last_sequence,
        }
