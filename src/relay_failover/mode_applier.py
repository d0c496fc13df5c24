# ─── Standard library imports ───
import asyncio
from typing import Iterable, Optional

# ─── Project imports ───
from .utils import spawn
from .telemetry import tlog
from .modes import InputMode
from .logger import get_logger
from .errors import ChannelError


class ModeApplier:
    """
    Idempotent reconciliation of every relay channel to one global mode.

    Responsibilities:
    • Write a channel's input mode only when it differs from the target
    • In the powered mode, force a channel's output ON if found OFF
    • Isolate failures per channel; nothing propagates to the caller

    Channel work is fire-and-forget: `apply()` returns as soon as the
    per-channel tasks are issued, with no ordering between channels.
    """

    def __init__(
        self,
        config_store,
        power_store,
        channel_ids: Iterable[int],
        powered_mode: InputMode = InputMode.DETACHED,
    ):
        self.config_store = config_store
        self.power_store = power_store
        self.channel_ids = tuple(channel_ids)
        self.powered_mode = powered_mode
        self.logger = get_logger("mode_applier")

        # ─── Runtime State ───
        self.last_applied_mode: Optional[InputMode] = None

        # Channels whose last reconcile failed; re-read on the next apply
        self.unsettled: set[int] = set()

        self._tasks: set[asyncio.Task] = set()

    def apply(self, desired: InputMode) -> list[asyncio.Task]:
        """
        Reconcile all channels towards `desired`.

        Returns:
            The spawned per-channel tasks (callers are not required to await them).
        """
        if desired == self.last_applied_mode:
            self.logger.debug(f"No global change; already {desired}")
            return [
                spawn(self._reconcile_channel(cid, desired), self._tasks)
                if cid in self.unsettled
                else spawn(self._ensure_on_if_powered(cid, desired), self._tasks)
                for cid in self.channel_ids
            ]

        tasks = [
            spawn(self._reconcile_channel(cid, desired), self._tasks)
            for cid in self.channel_ids
        ]

        previous = self.last_applied_mode
        self.last_applied_mode = desired
        tlog(
            self.logger,
            "🎛️ ",
            "MODE",
            "APPLIED",
            primary=str(desired),
            meta=f"previous={previous} | channels={list(self.channel_ids)}",
        )
        return tasks

    async def wait_idle(self) -> None:
        """Await every channel task still in flight."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _reconcile_channel(self, channel_id: int, desired: InputMode) -> None:
        """
        Read-then-write the channel's input mode, then enforce the output.

        A failed read abandons the channel. A failed write still runs the
        output step, since the powered mode must never leave bulbs dark.
        """
        try:
            current = await self.config_store.get_input_mode(channel_id)
        except ChannelError as e:
            self.unsettled.add(channel_id)
            self.logger.warning(f"GetConfig failed | channel={channel_id}: {e}")
            return
        except Exception:
            self.unsettled.add(channel_id)
            self.logger.exception(f"Unexpected error reading channel {channel_id}")
            return

        if current == desired:
            self.logger.debug(f"Already set | channel={channel_id} in_mode={desired}")
            self.unsettled.discard(channel_id)
        else:
            try:
                await self.config_store.set_input_mode(channel_id, desired)
                self.logger.info(f"SetConfig OK | channel={channel_id} in_mode={desired}")
                self.unsettled.discard(channel_id)
            except ChannelError as e:
                self.unsettled.add(channel_id)
                self.logger.warning(f"SetConfig failed | channel={channel_id}: {e}")
            except Exception:
                self.unsettled.add(channel_id)
                self.logger.exception(f"Unexpected error writing channel {channel_id}")

        await self._ensure_on_if_powered(channel_id, desired)

    async def _ensure_on_if_powered(self, channel_id: int, desired: InputMode) -> None:
        """
        In the powered mode the output must be ON (fail-safe for smart bulbs).
        Output is never forced OFF.
        """
        if desired != self.powered_mode:
            return

        try:
            if await self.power_store.get_output_state(channel_id):
                self.logger.debug(f"Output already ON | channel={channel_id}")
                return

            await self.power_store.set_output_state(channel_id, True)
            self.logger.info(f"Switch.Set OK | channel={channel_id} on=True")

        except ChannelError as e:
            self.logger.warning(f"Output step failed | channel={channel_id}: {e}")

        except Exception:
            self.logger.exception(f"Unexpected error enforcing output on channel {channel_id}")
