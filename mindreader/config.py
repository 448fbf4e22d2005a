import os
from dotenv import load_dotenv

load_dotenv()

PORT = int(os.getenv("PORT", "3001"))

# Deepgram (transcription + summarization)
DEEPGRAM_API_KEY = os.getenv("DEEPGRAM_API_KEY", "")
DEEPGRAM_BASE_URL = os.getenv("DEEPGRAM_BASE_URL", "https://api.deepgram.com/v1")
DEEPGRAM_MODEL = os.getenv("DEEPGRAM_MODEL", "nova-3")
FRAGMENT_TRANSCRIBE_TIMEOUT = float(os.getenv("FRAGMENT_TRANSCRIBE_TIMEOUT", "20"))
DIARIZATION_TIMEOUT = float(os.getenv("DIARIZATION_TIMEOUT", "150"))

# Gemini (AI topic)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GOOGLE_CLOUD_PROJECT = os.getenv("GOOGLE_CLOUD_PROJECT", "")
GOOGLE_CLOUD_LOCATION = os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")

# Fragment uploads
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024)))
DEFAULT_LANGUAGE = "en"

# Logging. An empty LOG_DIR disables the file sink.
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
