import pytest

from conftest import FakeRelay
from relay_failover.modes import InputMode
from relay_failover.mode_applier import ModeApplier


UP = InputMode.DETACHED
DOWN = InputMode.FOLLOW


def make_applier(relay, channel_ids=(0,)):
    return ModeApplier(relay, relay, channel_ids, powered_mode=UP)


async def apply_and_wait(applier, mode):
    applier.apply(mode)
    await applier.wait_idle()


# =====================================
# TEST GROUP: Mode Reconciliation
# =====================================
# Method: ModeApplier.apply()
# ---------------------------
@pytest.mark.asyncio
async def test_apply_writes_only_differing_channels():
    """Channel 0 needs a write, channel 1 is already detached"""
    relay = FakeRelay({0: DOWN, 1: UP}, {0: True, 1: True})
    applier = make_applier(relay, (0, 1))

    await apply_and_wait(applier, UP)

    assert relay.modes == {0: UP, 1: UP}
    assert relay.count("set_input_mode", 0) == 1
    assert relay.count("set_input_mode", 1) == 0


@pytest.mark.asyncio
async def test_last_applied_mode_set_when_issued():
    """Global mode is recorded once tasks are issued, not when they finish"""
    relay = FakeRelay({0: DOWN})
    applier = make_applier(relay)
    assert applier.last_applied_mode is None

    tasks = applier.apply(UP)

    assert applier.last_applied_mode is UP
    assert not all(task.done() for task in tasks)
    await applier.wait_idle()


@pytest.mark.asyncio
async def test_repeat_apply_skips_mode_writes_but_rechecks_output():
    """Same mode twice: no mode reads/writes on the second call, output re-checked"""
    relay = FakeRelay({0: DOWN}, {0: True})
    applier = make_applier(relay)

    await apply_and_wait(applier, UP)
    mode_calls = relay.count("get_input_mode") + relay.count("set_input_mode")

    # Output drifted OFF, e.g. someone toggled it manually
    relay.outputs[0] = False
    await apply_and_wait(applier, UP)

    assert relay.count("get_input_mode") + relay.count("set_input_mode") == mode_calls
    assert relay.count("get_output_state") == 2
    assert relay.calls[-1] == ("set_output_state", 0, True)


# =====================================
# TEST GROUP: Output Invariant
# =====================================
# Method: ModeApplier._ensure_on_if_powered()
# -------------------------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "output_on, expected_set_calls",
    [
        # ❌ Output OFF in powered mode → exactly one turn-on
        (False, 1),

        # ✅ Output already ON → nothing to do
        (True, 0),
    ],
)
async def test_powered_mode_forces_output_on(output_on, expected_set_calls):
    relay = FakeRelay({0: UP}, {0: output_on})
    applier = make_applier(relay)

    await apply_and_wait(applier, UP)

    assert relay.count("set_output_state") == expected_set_calls
    assert relay.outputs[0] is True


@pytest.mark.asyncio
async def test_unpowered_mode_never_touches_output():
    """In follow mode the output is neither read nor forced off"""
    relay = FakeRelay({0: UP}, {0: True})
    applier = make_applier(relay)

    await apply_and_wait(applier, DOWN)
    await apply_and_wait(applier, DOWN)

    assert relay.modes[0] is DOWN
    assert relay.count("get_output_state") == 0
    assert relay.count("set_output_state") == 0


# =====================================
# TEST GROUP: Failure Isolation
# =====================================
@pytest.mark.asyncio
async def test_channel_failure_does_not_block_others():
    """A failing read on channel 0 leaves channel 1 fully applied"""
    relay = FakeRelay({0: DOWN, 1: DOWN}, {0: False, 1: False})
    relay.failing.add(("get_input_mode", 0))
    applier = make_applier(relay, (0, 1))

    await apply_and_wait(applier, UP)

    assert relay.modes == {0: DOWN, 1: UP}
    assert relay.outputs == {0: False, 1: True}
    assert applier.last_applied_mode is UP
    assert applier.unsettled == {0}


@pytest.mark.asyncio
async def test_failed_write_still_forces_output_on():
    """SetConfig fails: channel stays unsettled but bulbs still get power"""
    relay = FakeRelay({0: DOWN}, {0: False})
    relay.failing.add(("set_input_mode", 0))
    applier = make_applier(relay)

    await apply_and_wait(applier, UP)

    assert relay.modes[0] is DOWN
    assert relay.outputs[0] is True
    assert relay.count("set_output_state", 0) == 1
    assert applier.unsettled == {0}


@pytest.mark.asyncio
async def test_failed_read_abandons_channel():
    """GetConfig fails: nothing else is attempted on that channel"""
    relay = FakeRelay({0: DOWN}, {0: False})
    relay.failing.add(("get_input_mode", 0))
    applier = make_applier(relay)

    await apply_and_wait(applier, UP)

    assert relay.count("get_output_state") == 0
    assert relay.outputs[0] is False
    assert applier.unsettled == {0}


@pytest.mark.asyncio
async def test_unsettled_channel_reconciled_on_next_apply():
    """Only the channel that failed is re-read when the global mode is unchanged"""
    relay = FakeRelay({0: DOWN, 1: DOWN}, {0: True, 1: True})
    relay.failing.add(("get_input_mode", 0))
    applier = make_applier(relay, (0, 1))
    await apply_and_wait(applier, UP)

    relay.failing.clear()
    await apply_and_wait(applier, UP)

    assert relay.modes == {0: UP, 1: UP}
    assert relay.count("get_input_mode", 0) == 2
    assert relay.count("get_input_mode", 1) == 1
    assert applier.unsettled == set()


@pytest.mark.asyncio
async def test_output_failure_is_swallowed():
    relay = FakeRelay({0: UP}, {0: False})
    relay.failing.add(("set_output_state", 0))
    applier = make_applier(relay)

    await apply_and_wait(applier, UP)

    assert relay.outputs[0] is False
    assert applier.unsettled == set()
