from .models import ConfidenceTier
from . import rules


def classify(confidence: float) -> ConfidenceTier:
    if confidence < rules.FAIR_MIN:
        return ConfidenceTier.INCORRECT
    if confidence < rules.CORRECT_MIN:
        return ConfidenceTier.FAIR
    return ConfidenceTier.CORRECT
