# --- Standard library imports ---
import os

# --- Third-party imports ---
from dotenv import load_dotenv


# Load .env once
load_dotenv()

def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default

def _int_list_env(name: str, default: str) -> tuple[int, ...]:
    raw = os.getenv(name, default)
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        return tuple(int(part) for part in default.split(","))

class Config:
    """Centralized config for the hub monitor and the relay it drives"""

    # --- Monitored hub ---
    HUB_URL = os.getenv("HUB_URL")

    # --- Relay device ---
    RELAY_HOST = os.getenv("RELAY_HOST")
    RELAY_IDS = _int_list_env("RELAY_IDS", "0")

    UP_MODE = os.getenv("UP_MODE", "detached").lower()     # hub reachable
    DOWN_MODE = os.getenv("DOWN_MODE", "follow").lower()   # hub unreachable

    # --- Polling / Backoff Policy ---
    POLL_INTERVAL_MS = _int_env("POLL_INTERVAL_MS", 30000)
    MAX_BACKOFF_MS = _int_env("MAX_BACKOFF_MS", 180000)
    BACKOFF_JITTER_MS = _int_env("BACKOFF_JITTER_MS", 3000)

    # --- Network Policy ---
    HTTP_TIMEOUT_MS = _int_env("HTTP_TIMEOUT_MS", 4000)
    PROBE_RETRY_DELAY_MS = _int_env("PROBE_RETRY_DELAY_MS", 300)

    # --- Startup / Event settling (NOT usually tuned) ---
    DEBOUNCE_MS = _int_env("DEBOUNCE_MS", 3000)
    STARTUP_DELAY_MS = _int_env("STARTUP_DELAY_MS", 3000)

    # --- LAN link monitoring (disabled when host is unset) ---
    LINK_CHECK_HOST = os.getenv("LINK_CHECK_HOST")
    LINK_CHECK_PORT = _int_env("LINK_CHECK_PORT", 80)
    LINK_CHECK_INTERVAL_MS = _int_env("LINK_CHECK_INTERVAL_MS", 5000)

    # --- Observability Policy ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_TIMING = os.getenv("LOG_TIMING", "false").lower() == "true"
