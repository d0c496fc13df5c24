# ─── Standard library imports ───
import asyncio
import logging
from typing import Optional

# ─── Project imports ───
from .telemetry import tlog
from .logger import get_logger
from .utils import CycleTimer, spawn
from .policy import MonitorPolicy
from .debouncer import EventDebouncer
from .backoff import BackoffScheduler
from .mode_applier import ModeApplier
from .probe import ReachabilityProbe
from .modes import ControllerState, Reachability, STATE_EMOJI


class Controller:
    """
    Hub availability controller: probe → apply → schedule, forever.

    Design:
    • Startup grace delay before the first probe lets the network settle
    • Every probe outcome drives exactly one apply and one reschedule
    • A settled connectivity transition short-circuits the schedule:
      backoff reset, pending probe cancelled, probe immediately
    • No terminal state; failures degrade to "retry next cycle"
    """

    def __init__(
        self,
        probe: ReachabilityProbe,
        applier: ModeApplier,
        scheduler: BackoffScheduler,
        timers,
        policy: MonitorPolicy,
    ):
        # ─── Dependencies / Configuration ───
        self.probe = probe
        self.applier = applier
        self.scheduler = scheduler
        self.policy = policy
        self.debouncer = EventDebouncer(
            timers, policy.debounce_ms, self._on_connectivity_settled
        )

        # ─── Observability ───
        self.logger = get_logger("controller")

        # ─── Runtime State ───
        self.state = ControllerState.STARTUP
        self.last_wait_ms: Optional[int] = None
        self._tasks: set[asyncio.Task] = set()

        # Bumped per cycle; a cycle whose probe finishes after a newer one
        # started has a stale answer and must not apply or reschedule
        self.generation: int = 0

    def start(self, event_source=None) -> None:
        """
        Arm the startup probe and wire connectivity events, if any.
        """
        if event_source is not None:
            event_source.subscribe(self.debouncer.notify)

        self.scheduler.arm(self.policy.startup_delay_ms, self.trigger_cycle)
        tlog(
            self.logger,
            STATE_EMOJI[self.state],
            "CONTROLLER",
            str(self.state),
            primary=f"first probe in {self.policy.startup_delay_ms} ms",
        )

    def stop(self) -> None:
        self.scheduler.cancel()
        self.debouncer.cancel()

    async def wait_idle(self) -> None:
        """Await in-flight cycles and the channel work they issued."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self.applier.wait_idle()

    def trigger_cycle(self) -> None:
        spawn(self.run_cycle(), self._tasks)

    async def run_cycle(self) -> None:
        self.generation += 1
        generation = self.generation
        timer = CycleTimer(self.logger, generation)

        try:
            reachability = await self.probe.probe()
        except Exception:
            self.logger.exception("Probe raised; treating hub as unreachable")
            reachability = Reachability.UNREACHABLE
        timer.lap("probe")

        if generation != self.generation:
            self.logger.info(
                f"Discarding stale probe result ({reachability.name}) "
                f"from cycle {generation}; cycle {self.generation} supersedes it"
            )
            return

        self.handle_probe_result(reachability)
        timer.lap("apply + schedule")
        timer.finish()

    def handle_probe_result(self, reachability: Reachability) -> None:
        hub_up = reachability.is_up
        desired = self.policy.desired_mode(hub_up)
        self._transition(ControllerState.HUB_UP if hub_up else ControllerState.HUB_DOWN)

        try:
            self.applier.apply(desired)
        except Exception:
            self.logger.exception(f"Applying {desired} failed")

        self.last_wait_ms = self.scheduler.schedule_next(hub_up, self.trigger_cycle)
        self.logger.info(
            f"💤 Next probe in {self.last_wait_ms / 1000:.2f} s "
            f"(backoff {self.scheduler.current_delay_ms} ms)"
        )

    def _transition(self, new_state: ControllerState) -> None:
        previous, self.state = self.state, new_state
        if previous == new_state:
            return

        tlog(
            self.logger,
            STATE_EMOJI[new_state],
            "HUB",
            "CHANGE",
            primary=f"{previous} → {new_state}",
            meta=f"desired={self.policy.desired_mode(new_state is ControllerState.HUB_UP)}",
            level=logging.WARNING if new_state is ControllerState.HUB_DOWN else logging.INFO,
        )

    def _on_connectivity_settled(self, event: Optional[str]) -> None:
        tlog(
            self.logger,
            "🔁",
            "LINK",
            "SETTLED",
            primary=str(event),
            meta="backoff reset | probing now",
        )
        self.scheduler.reset()
        self.scheduler.cancel()
        self.trigger_cycle()
