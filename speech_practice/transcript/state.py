from typing import List, Optional, Set

from .models import WordConfidenceDetail


class TranscriptState:
    """
    Holds all transcript state for ONE recording.
    Reset at every recording start.
    """

    def __init__(self):
        # FINAL truth
        self.finalized_text: str = ""
        self.details: List[WordConfidenceDetail] = []
        self.finalized_indices: Set[int] = set()

        # Revisable guess, replaced on every event
        self.interim_text: str = ""

        # Ordering
        self.last_sequence: Optional[int] = None

    # -------------------------
    # FINAL HANDLING
    # -------------------------

    def commit_final(self, text: str, details: List[WordConfidenceDetail]):
        """
        Commit a finalized slot to truth.
        Never revised afterwards.
        """
        if not self.finalized_text:
            self.finalized_text = text
        else:
            self.finalized_text += " " + text
        self.details.extend(details)

    # -------------------------
    # PARTIAL HANDLING
    # -------------------------

    def replace_interim(self, text: str):
        self.interim_text = text

    def word_count(self) -> int:
        return len(self.finalized_text.split())
