# ─── Standard library imports ───
from enum import Enum, auto


class InputMode(Enum):
    """
    Relay input modes as reported by the device (`in_mode`).

    • FOLLOW     — wall switch drives the relay output directly
    • DETACHED   — wall switch only reports its state; output stays untouched
    • FLIP       — every switch toggle flips the output
    • MOMENTARY  — push-button semantics
    """
    MOMENTARY = "momentary"
    FOLLOW = "follow"
    FLIP = "flip"
    DETACHED = "detached"
    CYCLE = "cycle"
    ACTIVATE = "activate"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "InputMode":
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ValueError(
                f"Unknown input mode {value!r}; "
                f"expected one of {[m.value for m in cls]}"
            ) from None


class Reachability(Enum):
    REACHABLE = auto()
    UNREACHABLE = auto()

    @property
    def is_up(self) -> bool:
        return self is Reachability.REACHABLE

    @classmethod
    def from_bool(cls, up: bool) -> "Reachability":
        return cls.REACHABLE if up else cls.UNREACHABLE


class ControllerState(Enum):
    """
    Hub availability as seen by the controller.

    Invariants:
    • STARTUP is left on the first probe result and never re-entered
    • HUB_UP ⇄ HUB_DOWN transitions are driven only by probe outcomes
    """
    STARTUP = auto()
    HUB_UP = auto()
    HUB_DOWN = auto()

    def __str__(self) -> str:
        return self.name

STATE_EMOJI = {
    ControllerState.STARTUP:  "⚪",
    ControllerState.HUB_UP:   "💚",
    ControllerState.HUB_DOWN: "🔴",
}
