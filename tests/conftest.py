import pytest

from relay_failover.errors import TransportError
from relay_failover.logger import setup_logging
from relay_failover.transport import HttpResult


# ========
# FIXTURES
# ========

@pytest.fixture(autouse=True)
def configure_logging():
    setup_logging(log_timing=True)
    yield   # allow test to run


# -------------------------------
# Virtual-clock timer service
# -------------------------------
class ManualHandle:
    def __init__(self, due_ms, delay_ms, repeat, callback):
        self.due_ms = due_ms
        self.delay_ms = delay_ms
        self.repeat = repeat
        self.callback = callback
        self.active = True


class ManualTimers:
    """Drop-in TimerService whose clock only moves on advance()"""

    def __init__(self):
        self.now_ms = 0
        self.handles = []
        self.fired = []   # (time_ms, handle)

    def schedule(self, delay_ms, repeat, callback):
        handle = ManualHandle(self.now_ms + delay_ms, delay_ms, repeat, callback)
        self.handles.append(handle)
        return handle

    def cancel(self, handle):
        if handle is not None:
            handle.active = False

    def pending(self):
        return [h for h in self.handles if h.active]

    def advance(self, ms):
        target = self.now_ms + ms
        while True:
            due = [h for h in self.handles if h.active and h.due_ms <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.due_ms)
            self.now_ms = handle.due_ms
            if handle.repeat:
                handle.due_ms += handle.delay_ms
            else:
                handle.active = False
            self.fired.append((self.now_ms, handle))
            handle.callback()
        self.now_ms = target


@pytest.fixture
def timers():
    return ManualTimers()


# -------------------------------
# Scripted hub transport
# -------------------------------
class FakeTransport:
    """Returns scripted HttpResults (or raises scripted exceptions) in order"""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    async def http_get(self, url, timeout_ms):
        self.calls.append((url, timeout_ms))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


OK = HttpResult(status_code=200)
DOWN = HttpResult(error="ConnectionError")


# -------------------------------
# In-memory relay (config + power store)
# -------------------------------
class FakeRelay:
    def __init__(self, modes, outputs=None):
        self.modes = dict(modes)
        self.outputs = dict(outputs or {cid: False for cid in modes})
        self.calls = []
        self.failing = set()   # {(method, channel_id)}

    def _record(self, method, channel_id, *args):
        self.calls.append((method, channel_id, *args))
        if (method, channel_id) in self.failing:
            raise TransportError(f"{method} failed for channel {channel_id}")

    def count(self, method, channel_id=None):
        return sum(
            1 for call in self.calls
            if call[0] == method and (channel_id is None or call[1] == channel_id)
        )

    async def get_input_mode(self, channel_id):
        self._record("get_input_mode", channel_id)
        return self.modes[channel_id]

    async def set_input_mode(self, channel_id, mode):
        self._record("set_input_mode", channel_id, mode)
        self.modes[channel_id] = mode

    async def get_output_state(self, channel_id):
        self._record("get_output_state", channel_id)
        return self.outputs[channel_id]

    async def set_output_state(self, channel_id, on):
        self._record("set_output_state", channel_id, on)
        self.outputs[channel_id] = on
