# ─── Future imports ───
from __future__ import annotations

# ─── Standard library imports ───
from dataclasses import dataclass

# ─── Project imports ───
from .config import Config
from .modes import InputMode


@dataclass(frozen=True)
class MonitorPolicy:
    """
    Policy governing how the hub is watched and how the relay reacts.

    Timing values are milliseconds. The steady heartbeat doubles as the
    backoff floor: a healthy hub is polled every `min_delay_ms`, an
    unreachable one progressively less often up to `max_delay_ms`.
    """

    # ─── Targets ───
    hub_url: str | None = None
    relay_host: str | None = None
    channel_ids: tuple[int, ...] = (0,)

    # ─── Modes ───
    up_mode: InputMode = InputMode.DETACHED     # hub reachable (powered mode)
    down_mode: InputMode = InputMode.FOLLOW     # hub unreachable

    # ─── Polling / backoff ───
    min_delay_ms: int = 30000
    max_delay_ms: int = 180000
    jitter_ms: int = 3000

    # ─── Probe ───
    http_timeout_ms: int = 4000
    retry_delay_ms: int = 300

    # ─── Settling delays ───
    debounce_ms: int = 3000
    startup_delay_ms: int = 3000

    # ─── LAN link monitoring ───
    link_check_host: str | None = None
    link_check_port: int = 80
    link_check_interval_ms: int = 5000

    @classmethod
    def from_config(cls, config=Config) -> MonitorPolicy:
        """
        Build the policy from environment-backed `Config`.

        Raises:
            ValueError: if a configured mode name is unknown.
        """
        return cls(
            hub_url=config.HUB_URL,
            relay_host=config.RELAY_HOST,
            channel_ids=tuple(config.RELAY_IDS),
            up_mode=InputMode.parse(config.UP_MODE),
            down_mode=InputMode.parse(config.DOWN_MODE),
            min_delay_ms=config.POLL_INTERVAL_MS,
            max_delay_ms=config.MAX_BACKOFF_MS,
            jitter_ms=config.BACKOFF_JITTER_MS,
            http_timeout_ms=config.HTTP_TIMEOUT_MS,
            retry_delay_ms=config.PROBE_RETRY_DELAY_MS,
            debounce_ms=config.DEBOUNCE_MS,
            startup_delay_ms=config.STARTUP_DELAY_MS,
            link_check_host=config.LINK_CHECK_HOST,
            link_check_port=config.LINK_CHECK_PORT,
            link_check_interval_ms=config.LINK_CHECK_INTERVAL_MS,
        )

    def desired_mode(self, hub_up: bool) -> InputMode:
        return self.up_mode if hub_up else self.down_mode

    # ─── Introspection / debugging helpers ───────────────────────────────

    def summary(self) -> dict[str, object]:
        """
        Return a structured summary of the effective policy values.
        Useful for startup diagnostics.
        """
        return {
            "hub_url": self.hub_url,
            "relay_host": self.relay_host,
            "channel_ids": list(self.channel_ids),
            "up_mode": str(self.up_mode),
            "down_mode": str(self.down_mode),
            "min_delay_ms": self.min_delay_ms,
            "max_delay_ms": self.max_delay_ms,
            "jitter_ms": self.jitter_ms,
            "http_timeout_ms": self.http_timeout_ms,
            "retry_delay_ms": self.retry_delay_ms,
            "debounce_ms": self.debounce_ms,
            "startup_delay_ms": self.startup_delay_ms,
            "link_check_host": self.link_check_host,
        }
