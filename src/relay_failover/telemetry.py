# --- Standard library imports ---
import logging


def tlog(
    logger: logging.Logger,
    emoji: str,
    subsystem: str,
    state: str,
    primary: str = "—--",
    meta: str | None = None,
    level: int = logging.INFO,
) -> None:
    """
    Emit one aligned operator line for a hub, link or relay event.

    Format:
        <emoji> SUBSYSTEM STATE PRIMARY | meta

    e.g. "🔴 HUB CHANGE HUB_UP → HUB_DOWN | desired=follow"
    """
    line = f"{emoji} {subsystem:<10} {state:<12} {primary}"
    if meta:
        line += f" | {meta}"

    logger.log(level, line, stacklevel=2)
