import os
from pathlib import Path
from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_PROJECT_ENV_PATH = _PROJECT_ROOT / ".env"
load_dotenv(dotenv_path=_PROJECT_ENV_PATH, override=True)

PRACTICE_API_BASE_URL = str(os.getenv("PRACTICE_API_BASE_URL") or "http://localhost:8080/api").strip().rstrip("/")
PRACTICE_API_TOKEN = str(os.getenv("PRACTICE_API_TOKEN") or "").strip()
REQUEST_TIMEOUT_SEC = float(os.getenv("REQUEST_TIMEOUT_SEC", "15"))

SPEECH_LANGUAGE = str(os.getenv("SPEECH_LANGUAGE") or "en-US").strip()
WORD_PLAYBACK_RATE = float(os.getenv("WORD_PLAYBACK_RATE", "0.8"))  # slower for single words

# Backend rejects sends past this many messages in one conversation
MAX_CONVERSATION_MESSAGES = max(1, int(os.getenv("MAX_CONVERSATION_MESSAGES", "15")))

FEEDBACK_FALLBACK_MESSAGE = str(
    os.getenv("FEEDBACK_FALLBACK_MESSAGE")
    or "Could not reach the AI reviewer for feedback. Please try again."
).strip()

DEEPGRAM_API_KEY = str(os.getenv("DEEPGRAM_API_KEY") or "").strip()
DEEPGRAM_ENDPOINTING_MS = max(300, int(os.getenv("DEEPGRAM_ENDPOINTING_MS", "700")))
