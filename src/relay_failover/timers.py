# ─── Standard library imports ───
import asyncio
from typing import Callable, Optional

# ─── Project imports ───
from .logger import get_logger


logger = get_logger("timers")

class TimerHandle:
    """
    Handle for one scheduled timer.

    A handle stays `active` until it fires (one-shot) or is cancelled.
    Repeating handles stay active until cancelled.
    """

    def __init__(self, delay_ms: int, repeat: bool, callback: Callable[[], None]):
        self.delay_ms = delay_ms
        self.repeat = repeat
        self.callback = callback
        self.active = True
        self._loop_handle: Optional[asyncio.TimerHandle] = None

    def __repr__(self) -> str:
        return (
            f"TimerHandle(delay_ms={self.delay_ms}, repeat={self.repeat}, "
            f"active={self.active})"
        )

class TimerService:
    """
    Millisecond timers on the asyncio event loop.

    Callbacks run on the loop thread, one at a time, so timer-driven state
    changes never race each other. A callback that raises is logged and
    does not affect other timers (or, for repeating timers, its own next
    firing).
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(
        self,
        delay_ms: int,
        repeat: bool,
        callback: Callable[[], None],
    ) -> TimerHandle:
        handle = TimerHandle(delay_ms, repeat, callback)
        self._arm(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        """
        Cancel a timer.

        Safe on None, on handles that already fired and on handles that
        were already cancelled.
        """
        if handle is None or not handle.active:
            return
        handle.active = False
        if handle._loop_handle is not None:
            handle._loop_handle.cancel()
            handle._loop_handle = None

    def _arm(self, handle: TimerHandle) -> None:
        handle._loop_handle = self.loop.call_later(
            max(0, handle.delay_ms) / 1000, self._fire, handle
        )

    def _fire(self, handle: TimerHandle) -> None:
        if not handle.active:
            return

        if handle.repeat:
            self._arm(handle)
        else:
            handle.active = False
            handle._loop_handle = None

        try:
            handle.callback()
        except Exception:
            logger.exception(f"Timer callback failed ({handle!r})")
