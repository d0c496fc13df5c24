# --- Standard library imports ---
from typing import Callable, Optional

# --- Project imports ---
from .logger import get_logger
from .timers import TimerHandle


CONNECTED = "connected"
DISCONNECTED = "disconnected"
TRANSITION_EVENTS = frozenset({CONNECTED, DISCONNECTED})

class EventDebouncer:
    """
    Collapses bursts of connectivity transitions into one settled event.

    Every accepted event restarts the window; the callback fires once,
    `delay_ms` after the last event of the burst, with that event's name.
    """

    def __init__(self, timers, delay_ms: int, on_settled: Callable[[str], None]):
        self.timers = timers
        self.delay_ms = delay_ms
        self.on_settled = on_settled
        self.pending: Optional[TimerHandle] = None
        self.last_event: Optional[str] = None
        self.logger = get_logger("debouncer")

    def notify(self, event: str) -> None:
        if event not in TRANSITION_EVENTS:
            self.logger.debug(f"Ignoring event {event!r}")
            return

        self.last_event = event
        self.timers.cancel(self.pending)
        self.pending = self.timers.schedule(self.delay_ms, False, self._fire)
        self.logger.debug(f"Event {event!r}; settling for {self.delay_ms} ms")

    def cancel(self) -> None:
        self.timers.cancel(self.pending)
        self.pending = None

    def _fire(self) -> None:
        self.pending = None
        self.on_settled(self.last_event)
