from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from speech_practice.conversation.models import Turn


def _avg(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


@dataclass(frozen=True)
class SessionSummary:
    total_turns: int
    average_pronunciation_score: float

    @property
    def average_percent(self) -> int:
        return int(round(self.average_pronunciation_score * 100))

    def to_dict(self) -> dict:
        return {
            "total_turns": self.total_turns,
            "average_pronunciation_score": self.average_pronunciation_score,
            "average_percent": self.average_percent,
        }


def summarize(turns: Iterable[Turn]) -> SessionSummary:
    items = list(turns)
    scores = [
        float(turn.pronunciation_score)
        for turn in items
        if turn.is_user and turn.pronunciation_score is not None
    ]
    return SessionSummary(
        total_turns=len(items),
        average_pronunciation_score=_avg(scores),
    )
