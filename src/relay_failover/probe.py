# ─── Standard library imports ───
import time
import asyncio

# ─── Project imports ───
from .logger import get_logger
from .modes import Reachability
from .transport import HttpResult


MAX_ATTEMPTS = 2   # first try + one retry, never more

def is_reachable(result: HttpResult) -> bool:
    """
    Any answered HTTP status below 500 counts as reachable.

    200/302/401/403 all prove the hub is up and serving; only transport
    failures and server errors count against it.
    """
    status = result.status_code
    return (
        result.error is None
        and isinstance(status, int)
        and not isinstance(status, bool)
        and 0 <= status < 500
    )

class ReachabilityProbe:
    """
    Bounded-retry liveness check of the monitored hub.

    Invariants:
    • At most MAX_ATTEMPTS transport calls per probe
    • Never raises; every failure collapses into UNREACHABLE
    """

    def __init__(
        self,
        transport,
        url: str,
        timeout_ms: int = 4000,
        retry_delay_ms: int = 300,
        sleep=asyncio.sleep,
    ):
        self.transport = transport
        self.url = url
        self.timeout_ms = timeout_ms
        self.retry_delay_ms = retry_delay_ms
        self._sleep = sleep
        self.logger = get_logger("probe")

    async def _attempt(self) -> HttpResult:
        start = time.perf_counter()
        try:
            result = await self.transport.http_get(self.url, self.timeout_ms)
        except Exception as e:
            self.logger.exception("Transport raised during probe")
            return HttpResult(error=e.__class__.__name__)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.logger.timing(f"Timing | {'HTTP.GET hub':<34} [{elapsed_ms:8.1f} ms]")

        if not isinstance(result, HttpResult):
            return HttpResult(error="malformed transport result")
        return result

    async def probe(self) -> Reachability:
        attempt = 1
        while True:
            result = await self._attempt()

            if is_reachable(result):
                self.logger.info(
                    f"HTTP.GET OK | code={result.status_code} attempt={attempt}"
                )
                return Reachability.REACHABLE

            if attempt >= MAX_ATTEMPTS:
                self.logger.warning(
                    f"HTTP.GET FAIL | code={result.status_code} error={result.error}"
                )
                return Reachability.UNREACHABLE

            self.logger.info(
                f"HTTP.GET retry | attempt={attempt} "
                f"code={result.status_code} error={result.error}"
            )
            await self._sleep(self.retry_delay_ms / 1000)
            attempt += 1
