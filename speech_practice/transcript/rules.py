"""
All confidence thresholds live here.
Changing these changes how every finalized word is tiered.
"""

# Recognizer confidence (0..1)
FAIR_MIN = 0.60
CORRECT_MIN = 0.85
