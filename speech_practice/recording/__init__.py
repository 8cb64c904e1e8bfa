from speech_practice.recording.deepgram import DeepgramRecognizer
from speech_practice.recording.lifecycle import RecordingLifecycle, RecordingState
from speech_practice.recording.recognizer import (
    CaptureErrorKind,
    Recognizer,
    RecognizerError,
    RecognizerStartError,
    RecognizerStreamError,
)

__all__ = [
    "DeepgramRecognizer",
    "CaptureErrorKind",
    "Recognizer",
    "RecognizerError",
    "RecognizerStartError",
    "RecognizerStreamError",
    "RecordingLifecycle",
    "RecordingState",
]
