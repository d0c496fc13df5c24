# --- Standard library imports ---
import random
from typing import Callable, Optional

# --- Project imports ---
from .logger import get_logger
from .timers import TimerHandle


class BackoffScheduler:
    """
    Adaptive poll scheduling.

    Invariants:
      - min_delay_ms <= current_delay_ms <= max_delay_ms
      - current_delay_ms resets only on healthy probes or explicit reset()
      - jitter only stretches the wait actually armed, never current_delay_ms
      - at most one pending probe timer; arming always cancels the previous one
    """

    def __init__(
        self,
        timers,
        min_delay_ms: int,
        max_delay_ms: int,
        jitter_ms: int = 0,
        rng: Optional[random.Random] = None,
    ):
        self.timers = timers
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self.jitter_ms = jitter_ms
        self.rng = rng or random.Random()
        self.current_delay_ms = min_delay_ms
        self.pending: Optional[TimerHandle] = None
        self.logger = get_logger("backoff")

    def next_delay(self, was_reachable: bool) -> int:
        """
        Advance the backoff state by one probe outcome and return it.
        """
        if was_reachable:
            self.current_delay_ms = self.min_delay_ms
        else:
            self.current_delay_ms = min(self.current_delay_ms * 2, self.max_delay_ms)
        return self.current_delay_ms

    def reset(self) -> None:
        self.current_delay_ms = self.min_delay_ms

    def cancel(self) -> None:
        self.timers.cancel(self.pending)
        self.pending = None

    def arm(self, delay_ms: int, callback: Callable[[], None]) -> None:
        """Cancel any pending probe and arm a new one `delay_ms` from now."""
        self.cancel()
        self.pending = self.timers.schedule(delay_ms, False, callback)

    def schedule_next(self, was_reachable: bool, callback: Callable[[], None]) -> int:
        """
        Compute the next delay, add jitter and arm the next probe.

        Returns:
            The wait actually armed (delay + jitter), in milliseconds.
        """
        delay = self.next_delay(was_reachable)
        wait = delay + self.rng.randint(0, max(0, self.jitter_ms))
        self.arm(wait, callback)
        self.logger.debug(
            f"Next probe in {wait} ms (backoff={delay} ms, reachable={was_reachable})"
        )
        return wait
