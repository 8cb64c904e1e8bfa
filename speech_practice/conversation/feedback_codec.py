"""
Decoding of the overloaded ``feedback`` string carried on a turn.

The backend stores three different things in that one field:

- ``TRANSLATION:<text>`` on agent turns, the translated reply;
- a JSON array of ``{"word", "status"}`` objects on user turns, the
  per-word pronunciation detail;
- anything else, free-form advisory text.

The shape is decided once here so nothing downstream sniffs prefixes again.
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from speech_practice.conversation.payloads import (
    Advisory,
    FeedbackPayload,
    PronunciationDetails,
    Translation,
)
from speech_practice.transcript.models import ConfidenceTier, WordConfidenceDetail

logger = logging.getLogger("feedback_codec")

TRANSLATION_MARKER = "TRANSLATION:"


def _parse_details(raw: str) -> Optional[list[WordConfidenceDetail]]:
    try:
        items = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(items, list):
        return None

    details: list[WordConfidenceDetail] = []
    try:
        for item in items:
            tier = item.get("status", item.get("tier"))
            details.append(WordConfidenceDetail(word=str(item["word"]), tier=ConfidenceTier(tier)))
    except (AttributeError, KeyError, ValueError):
        return None
    return details


def decode_feedback(raw: Optional[str]) -> Optional[FeedbackPayload]:
    if not raw:
        return None

    if raw.startswith(TRANSLATION_MARKER):
        return Translation(text=raw[len(TRANSLATION_MARKER):])

    if raw.startswith("["):
        details = _parse_details(raw)
        if details is None:
            logger.debug("Malformed pronunciation detail payload ignored | length=%s", len(raw))
            return None
        return PronunciationDetails(details=details)

    return Advisory(text=raw)


def encode_details(details: list[WordConfidenceDetail]) -> list[dict]:
    return [detail.to_dict() for detail in details]
