import random

import pytest

from relay_failover.backoff import BackoffScheduler


MIN_MS = 30000
MAX_MS = 180000


@pytest.fixture
def scheduler(timers):
    return BackoffScheduler(timers, MIN_MS, MAX_MS, jitter_ms=0)


# ================================
# TEST GROUP: Delay Computation
# ================================
# Method: next_delay()
# --------------------
def test_consecutive_failures_double_until_capped(scheduler):
    """Unreachable outcomes double the delay and stick at the cap"""
    delays = [scheduler.next_delay(False) for _ in range(5)]

    assert delays == [60000, 120000, 180000, 180000, 180000]


def test_single_success_resets_to_minimum(scheduler):
    """One healthy probe drops straight back to the heartbeat"""
    for _ in range(4):
        scheduler.next_delay(False)

    assert scheduler.next_delay(True) == MIN_MS
    assert scheduler.current_delay_ms == MIN_MS


def test_delay_stays_within_bounds(scheduler):
    """min <= current <= max for any outcome sequence"""
    rng = random.Random(7)
    for _ in range(200):
        scheduler.next_delay(rng.random() < 0.3)
        assert MIN_MS <= scheduler.current_delay_ms <= MAX_MS


def test_reset(scheduler):
    scheduler.next_delay(False)
    scheduler.reset()

    assert scheduler.current_delay_ms == MIN_MS


# ================================
# TEST GROUP: Scheduling
# ================================
# Method: schedule_next() / arm() / cancel()
# ------------------------------------------
def test_schedule_next_keeps_single_pending_timer(scheduler, timers):
    """Arming a new probe cancels the previous one"""
    scheduler.schedule_next(False, lambda: None)
    first = scheduler.pending
    scheduler.schedule_next(False, lambda: None)

    assert first.active is False
    assert timers.pending() == [scheduler.pending]


def test_jitter_stretches_wait_but_not_backoff(timers):
    """Jitter lands in the armed wait only; backoff growth stays deterministic"""
    scheduler = BackoffScheduler(
        timers, MIN_MS, MAX_MS, jitter_ms=3000, rng=random.Random(1)
    )

    waits = []
    for expected_delay in (60000, 120000, 180000):
        waits.append(scheduler.schedule_next(False, lambda: None))
        assert scheduler.current_delay_ms == expected_delay
        assert expected_delay <= waits[-1] <= expected_delay + 3000
        assert scheduler.pending.delay_ms == waits[-1]


def test_scheduled_callback_fires_after_wait(scheduler, timers):
    fired = []
    scheduler.schedule_next(True, lambda: fired.append(timers.now_ms))

    timers.advance(MIN_MS - 1)
    assert fired == []

    timers.advance(1)
    assert fired == [MIN_MS]


def test_cancel_is_idempotent(scheduler, timers):
    """Cancel without a timer, twice, and after firing: all no-ops"""
    scheduler.cancel()

    scheduler.arm(100, lambda: None)
    timers.advance(100)
    scheduler.cancel()
    scheduler.cancel()

    assert timers.pending() == []
