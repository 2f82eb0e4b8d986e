"""Runtime configuration, read once from the environment (and an optional .env)."""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ===========================================
# Video generation provider (kie.ai / Kling)
# ===========================================
# Dry-run is ON unless explicitly disabled, so a fresh checkout never spends credits.
DRY_RUN = _flag("SHOT_ENGINE_DRY_RUN", "true")
KIE_API_BASE_URL = os.getenv("KIE_API_BASE_URL", "https://api.kie.ai/api/v1")
KIE_API_KEY = os.getenv("KIE_API_KEY", "")
KIE_MODEL = os.getenv("KIE_MODEL", "kling-3.0/video")
GENERATION_POLL_INTERVAL_SEC = float(os.getenv("GENERATION_POLL_INTERVAL_SEC", "10"))
GENERATION_TIMEOUT_SEC = float(os.getenv("GENERATION_TIMEOUT_SEC", "600"))
REQUEST_TIMEOUT_SEC = float(os.getenv("KIE_REQUEST_TIMEOUT_SEC", "30"))
DEFAULT_ASPECT_RATIO = os.getenv("DEFAULT_ASPECT_RATIO", "16:9")

# ===========================================
# Frame extraction
# ===========================================
FFMPEG_BINARY = os.getenv("FFMPEG_BINARY", "ffmpeg")
FFMPEG_TIMEOUT_SEC = float(os.getenv("FFMPEG_TIMEOUT_SEC", "120"))

# ===========================================
# Persistence
# ===========================================
STORE_DIR = Path(os.getenv("SHOT_ENGINE_STORE_DIR", "./.shot_engine_store"))

# ===========================================
# Logging
# ===========================================
LOG_LEVEL = os.getenv("SHOT_ENGINE_LOG_LEVEL", "INFO").upper()
LOG_JSON = _flag("SHOT_ENGINE_LOG_JSON", "false")
