# --- Standard library imports ---
import sys
import asyncio
import logging

# --- Project imports ---
from .config import Config
from .timers import TimerService
from .bootstrap import bootstrap
from .controller import Controller
from .policy import MonitorPolicy
from .backoff import BackoffScheduler
from .link_monitor import LinkMonitor
from .mode_applier import ModeApplier
from .probe import ReachabilityProbe
from .shelly_rpc import ShellyRpcClient
from .transport import HttpTransport
from .logger import get_logger, setup_logging


async def run(policy: MonitorPolicy, link_monitoring: bool) -> None:
    """
    Wire the monitor together on the running loop and serve forever.

    All state lives on this one loop; blocking HTTP runs in worker
    threads and resumes here.
    """
    timers = TimerService()
    relay = ShellyRpcClient(policy.relay_host, timeout_ms=policy.http_timeout_ms)

    probe = ReachabilityProbe(
        HttpTransport(),
        policy.hub_url,
        timeout_ms=policy.http_timeout_ms,
        retry_delay_ms=policy.retry_delay_ms,
    )
    applier = ModeApplier(relay, relay, policy.channel_ids, powered_mode=policy.up_mode)
    scheduler = BackoffScheduler(
        timers,
        min_delay_ms=policy.min_delay_ms,
        max_delay_ms=policy.max_delay_ms,
        jitter_ms=policy.jitter_ms,
    )
    controller = Controller(probe, applier, scheduler, timers, policy)

    link = None
    if link_monitoring:
        link = LinkMonitor(
            timers,
            policy.link_check_host,
            port=policy.link_check_port,
            interval_ms=policy.link_check_interval_ms,
        )

    controller.start(link)
    if link is not None:
        link.start()

    try:
        await asyncio.Event().wait()
    finally:
        if link is not None:
            link.stop()
        controller.stop()

def main():
    """
    Entry point for the hub availability monitor.

    Configures logging, validates policy and starts the event loop.
    """

    setup_logging(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
    logger = get_logger("main")
    logger.info("🚀 Starting hub availability relay monitor")
    logger.debug(f"Python version: {sys.version}")

    policy = MonitorPolicy.from_config()
    logger.debug(f"Policy: {policy.summary()}")
    capabilities = bootstrap(policy)

    try:
        asyncio.run(run(policy, capabilities.link_monitoring_available))
    except KeyboardInterrupt:
        logger.info("👋 Stopped")

if __name__ == "__main__":
    main()
