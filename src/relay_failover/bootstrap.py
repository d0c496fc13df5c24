# ─── Standard library imports ───
from dataclasses import dataclass

# ─── Project imports ───
from .utils import ping_host
from .logger import get_logger
from .policy import MonitorPolicy


logger = get_logger("bootstrap")

@dataclass(frozen=True)
class EnvCapabilities:
    """
    Observed runtime capabilities derived at startup.

    These represent what the system is actually capable of doing,
    not what it is configured to do in theory.
    """
    link_monitoring_available: bool

def bootstrap(policy: MonitorPolicy) -> EnvCapabilities:
    """
    Validate runtime configuration and derive startup capabilities.

    Hard invariant violations raise and abort startup.
    Soft reachability checks are logged and used to gate capabilities.
    """

    _validate_invariants(policy)
    return discover_runtime_capabilities(policy)

def _validate_invariants(policy: MonitorPolicy) -> None:
    """
    Validate logical invariants of the control loop.

    Violations indicate a configuration that cannot behave correctly
    and should fail fast at startup.
    """
    if not policy.hub_url:
        raise ValueError("HUB_URL is required")

    if not policy.relay_host:
        raise ValueError("RELAY_HOST is required")

    if not policy.channel_ids:
        raise ValueError("RELAY_IDS must name at least one channel")

    if any(cid < 0 for cid in policy.channel_ids):
        raise ValueError(f"RELAY_IDS must be non-negative: {policy.channel_ids}")

    if policy.up_mode == policy.down_mode:
        raise ValueError(
            f"UP_MODE and DOWN_MODE are both {policy.up_mode}; nothing would change"
        )

    if not 0 < policy.min_delay_ms <= policy.max_delay_ms:
        raise ValueError(
            "POLL_INTERVAL_MS must be positive and not exceed MAX_BACKOFF_MS "
            f"({policy.min_delay_ms} > {policy.max_delay_ms})"
        )

    if policy.jitter_ms < 0 or policy.http_timeout_ms <= 0:
        raise ValueError("BACKOFF_JITTER_MS must be >= 0 and HTTP_TIMEOUT_MS > 0")

    # Warn-only: a timeout longer than the heartbeat lets probes pile up
    if policy.http_timeout_ms * 2 + policy.retry_delay_ms > policy.min_delay_ms:
        logger.warning(
            f"Worst-case probe time ({policy.http_timeout_ms * 2 + policy.retry_delay_ms} ms) "
            f"exceeds the poll interval ({policy.min_delay_ms} ms)"
        )

def discover_runtime_capabilities(policy: MonitorPolicy) -> EnvCapabilities:
    """
    Perform non-fatal reachability checks of local hardware.

    Failures are logged for visibility but do not prevent startup,
    as the relay or the LAN may come up later.
    """
    if ping_host(policy.relay_host):
        logger.info(f"Relay reachable at startup ({policy.relay_host})")
    else:
        logger.warning(f"Relay NOT reachable at startup ({policy.relay_host})")

    link_monitoring_available = bool(policy.link_check_host)

    if link_monitoring_available:
        if ping_host(policy.link_check_host, policy.link_check_port):
            logger.info(f"Gateway reachable at startup ({policy.link_check_host})")
        else:
            logger.warning(f"Gateway NOT reachable at startup ({policy.link_check_host})")
    else:
        logger.warning("LINK_CHECK_HOST unset; LAN link monitoring disabled")

    return EnvCapabilities(
        link_monitoring_available=link_monitoring_available
    )
