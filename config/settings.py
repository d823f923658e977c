"""Paths, timeouts and service endpoints for the kiosk.

Everything here is read once at import from environment variables so a
kiosk can be retuned without code changes.  Behavioural constants that must
not drift between deployments (the module acceptance threshold, the
speaking-duration policy) live next to the code that uses them instead.
"""

import os

# Paths
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
# Optional catalog JSON; unset = built-in content (config/content.py)
CATALOG_PATH = os.environ.get("KIOSK_CATALOG_PATH")

# ── Inactivity watchdog ──────────────────────────────────────────────
# First stage: "are you still there?" after this much silence.
IDLE_TIMEOUT_MS = int(os.environ.get("KIOSK_IDLE_TIMEOUT_MS", "30000"))
# Second stage: no answer to the cue within this window resets to welcome.
PROMPT_TIMEOUT_MS = int(os.environ.get("KIOSK_PROMPT_TIMEOUT_MS", "10000"))

# ── Presentation ─────────────────────────────────────────────────────
# Embeds that cannot report "ended" (Synthesia iframes) are closed after this.
MEDIA_FALLBACK_SEC = float(os.environ.get("KIOSK_MEDIA_FALLBACK_SEC", "120"))
# Gap between the two greeting lines.
GREETING_PAUSE_MS = int(os.environ.get("KIOSK_GREETING_PAUSE_MS", "400"))

# ── HeyGen streaming avatar (optional speech actor) ──────────────────
HEYGEN_API_KEY = os.environ.get("HEYGEN_API_KEY")
HEYGEN_BASE_URL = os.environ.get("HEYGEN_BASE_URL", "https://api.heygen.com")
HEYGEN_AVATAR_NAME = os.environ.get("HEYGEN_AVATAR_NAME", "default")
HEYGEN_QUALITY = os.environ.get("HEYGEN_QUALITY", "high")
# Seconds of avatar silence before HeyGen closes the stream on its side.
HEYGEN_ACTIVITY_IDLE_TIMEOUT = int(os.environ.get("HEYGEN_ACTIVITY_IDLE_TIMEOUT", "300"))
HEYGEN_TIMEOUT_SEC = float(os.environ.get("HEYGEN_TIMEOUT_SEC", "15"))

# ── Server (FastAPI / WebSocket bridge) ──────────────────────────────
KIOSK_SERVE_HOST = os.environ.get("KIOSK_SERVE_HOST", "0.0.0.0")
KIOSK_SERVE_PORT = int(os.environ.get("KIOSK_SERVE_PORT", "8000"))
KIOSK_WS_PATH = os.environ.get("KIOSK_WS_PATH", "/ws")
# Optional HTTPS for wss:// (browsers require a secure context for the microphone)
KIOSK_HTTPS_CERT = os.environ.get("KIOSK_HTTPS_CERT")  # path to .pem
KIOSK_HTTPS_KEY = os.environ.get("KIOSK_HTTPS_KEY")    # path to .key


def heygen_enabled() -> bool:
    """True if a HeyGen API key is configured (server speech goes through the avatar)."""
    return bool(HEYGEN_API_KEY)
