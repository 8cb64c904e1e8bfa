from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AdvisoryParagraph:
    text: str
    bullet: bool = False  # rendered with a hanging indent


def render_advisory(raw_text: str) -> list[AdvisoryParagraph]:
    text = str(raw_text or "").replace("\r", "\n")
    paragraphs: list[AdvisoryParagraph] = []
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        paragraphs.append(AdvisoryParagraph(text=line, bullet=line.startswith("-")))
    return paragraphs
