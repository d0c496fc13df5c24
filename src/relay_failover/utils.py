# --- Standard library imports ---
import time
import socket
import asyncio
from typing import Coroutine


def ping_host(ip: str, port: int = 80, timeout: float = 1.0) -> bool:
    """
    Check host reachability efficiently and cross-platform.

    Performs a TCP connection (Layer 4) to the given IP/hostname and port,
    avoiding ICMP so no admin privileges are required.

    Args:
        ip: IP address or hostname to check.
        port: TCP port to attempt (default 80).
        timeout: Seconds before giving up.

    Returns:
        True if the host is reachable, False otherwise.
    """
    try:
        with socket.create_connection((ip, port), timeout=timeout):
            return True
    except (OSError, socket.timeout):
        return False

def spawn(coro: Coroutine, registry: set[asyncio.Task]) -> asyncio.Task:
    """
    Start `coro` as a fire-and-forget task on the running loop.

    The task is held in `registry` until it finishes so it cannot be
    garbage collected mid-flight; callers may await the registry to drain.
    """
    task = asyncio.get_running_loop().create_task(coro)
    registry.add(task)
    task.add_done_callback(registry.discard)
    return task

# ============================================================
# Cycle latency instrumentation (TIMING level, off by default)
# ============================================================

class CycleTimer:
    """
    Stage latencies of one probe → apply → schedule cycle.

    One instance per cycle, so overlapping cycles never share lap state.
    Lines go out at TIMING level and only show when LOG_TIMING=true.
    """

    def __init__(self, logger, cycle: int):
        self.logger = logger
        self.cycle = cycle
        self.started = time.perf_counter()
        self.last_lap = self.started

    def lap(self, stage: str) -> float:
        """Log and return milliseconds spent in `stage`."""
        now = time.perf_counter()
        stage_ms = (now - self.last_lap) * 1000
        self.last_lap = now
        self.logger.timing(f"Cycle {self.cycle:>4} | {stage:<18} [{stage_ms:8.1f} ms]")
        return stage_ms

    def finish(self) -> float:
        total_ms = (time.perf_counter() - self.started) * 1000
        self.logger.timing(f"Cycle {self.cycle:>4} | {'total':<18} [{total_ms:8.1f} ms]")
        return total_ms
