from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from core.config import MAX_CONVERSATION_MESSAGES
from speech_practice.conversation.models import Turn

logger = logging.getLogger("turn_timeline")


class TurnTimeline:
    """
    Ordered conversation log.
    Always replaced wholesale from the backend, never merged locally.
    """

    def __init__(self, max_messages: int = MAX_CONVERSATION_MESSAGES):
        self.max_messages = max_messages
        self._turns: list[Turn] = []

    def replace(self, turns: Iterable[Turn]) -> None:
        self._turns = list(turns)
        logger.info("Timeline replaced | turns=%s", len(self._turns))

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self._turns)

    @property
    def turns(self) -> list[Turn]:
        return list(self._turns)

    def get(self, turn_id: str) -> Optional[Turn]:
        for turn in self._turns:
            if turn.id == turn_id:
                return turn
        return None

    def toggle_translation(self, turn_id: str) -> Optional[bool]:
        turn = self.get(turn_id)
        if turn is None:
            return None
        turn.show_translation = not turn.show_translation
        return turn.show_translation

    @staticmethod
    def visible_text(turn: Turn) -> str:
        if turn.show_translation and turn.translation:
            return turn.translation
        return turn.content

    @property
    def remaining_capacity(self) -> int:
        return max(0, self.max_messages - len(self._turns))

    @property
    def is_full(self) -> bool:
        return self.remaining_capacity == 0
