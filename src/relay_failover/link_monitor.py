# ─── Standard library imports ───
import asyncio
from typing import Callable, Optional

# ─── Project imports ───
from .utils import ping_host, spawn
from .telemetry import tlog
from .logger import get_logger
from .timers import TimerHandle
from .debouncer import CONNECTED, DISCONNECTED


class LinkMonitor:
    """
    LAN link watcher that publishes connectivity transitions.

    Periodically checks TCP reachability of the local gateway. The first
    observation only records a baseline; afterwards each change is
    published as "connected" / "disconnected" to the single subscriber.
    """

    def __init__(
        self,
        timers,
        host: str,
        port: int = 80,
        interval_ms: int = 5000,
        timeout_s: float = 1.0,
        check: Callable[..., bool] = ping_host,
    ):
        self.timers = timers
        self.host = host
        self.port = port
        self.interval_ms = interval_ms
        self.timeout_s = timeout_s
        self.check = check
        self.logger = get_logger("link_monitor")

        self.link_up: Optional[bool] = None
        self._handler: Optional[Callable[[str], None]] = None
        self._timer: Optional[TimerHandle] = None
        self._in_flight = False
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, handler: Callable[[str], None]) -> None:
        """Register the one handler; a later call replaces it."""
        self._handler = handler

    def start(self) -> None:
        self.stop()
        self._timer = self.timers.schedule(self.interval_ms, True, self._tick)
        self.logger.info(
            f"Watching LAN link via {self.host}:{self.port} every {self.interval_ms} ms"
        )

    def stop(self) -> None:
        self.timers.cancel(self._timer)
        self._timer = None

    def _tick(self) -> None:
        if self._in_flight:
            return
        self._in_flight = True
        spawn(self.check_once(), self._tasks)

    async def check_once(self) -> None:
        try:
            up = await asyncio.to_thread(self.check, self.host, self.port, self.timeout_s)
        except Exception:
            self.logger.exception("Link check failed unexpectedly")
            return
        finally:
            self._in_flight = False

        self.observe(bool(up))

    def observe(self, up: bool) -> None:
        previous, self.link_up = self.link_up, up
        if previous is None or previous == up:
            return

        event = CONNECTED if up else DISCONNECTED
        tlog(self.logger, "🛜" if up else "📴", "LINK", event.upper(), primary=self.host)

        if self._handler is not None:
            self._handler(event)
