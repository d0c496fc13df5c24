# --- Standard library imports ---
import sys
import logging

# --- Project imports ---
from .config import Config


# --- Custom log levels ---
TIMING = 25   # Between INFO (20) and WARNING (30)
logging.addLevelName(TIMING, "TIME")

def timing(self, message, *args, **kwargs):
    """Logger.timing(): probe/cycle latency lines at TIMING level."""
    if self.isEnabledFor(TIMING):
        self._log(TIMING, message, args, stacklevel=2, **kwargs)

logging.Logger.timing = timing

# --- Filters ---
class TimingFilter(logging.Filter):
    """Filter out TIMING logs unless explicitly enabled."""
    def __init__(self, enabled: bool):
        super().__init__()
        self.enabled = enabled

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == TIMING:
            return self.enabled
        return True

# --- Format configuration constants ---
LOG_LEVEL_EMOJIS = {
    logging.DEBUG: "🧱",
    logging.INFO: "🟢",
    TIMING: "⚡️",
    logging.WARNING: "⚠️ ",
    logging.ERROR: "❌",
    logging.CRITICAL: "🔥",
}

LEVEL_NAME_MAP = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
}

# --- Formatters ---
class EmojiFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        """
        Formatter that prepends an emoji per
        log level and shortens log level names.
        """
        record.levelemoji = LOG_LEVEL_EMOJIS.get(record.levelno, "")
        record.levelname = LEVEL_NAME_MAP.get(record.levelname, record.levelname)
        return super().format(record)

# --- Public logging setup API ---
def setup_logging(level=logging.INFO, log_timing: bool | None = None) -> None:
    """
    Configure root logging for the monitor: stdout, emoji per level and
    cycle TIMING lines gated by `log_timing` (LOG_TIMING when omitted).
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = EmojiFormatter(
        fmt="%(asctime)s %(levelemoji)s %(name)s:%(funcName)s → %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    # Apply optional TIMING filter, config decides unless overridden
    if log_timing is None:
        log_timing = Config.LOG_TIMING
    handler.addFilter(TimingFilter(enabled=log_timing))
    root.addHandler(handler)

def get_logger(name: str) -> logging.Logger:
    """
    Return the `relay_failover.<name>` logger for a subsystem.
    """
    return logging.getLogger(f"relay_failover.{name}")
