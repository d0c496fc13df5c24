# ─── Standard library imports ───
import asyncio
import threading
from dataclasses import dataclass
from typing import Optional

# ─── Third-party imports ───
import requests

# ─── Project imports ───
from .logger import get_logger


@dataclass(frozen=True)
class HttpResult:
    """
    Outcome of a single HTTP attempt.

    Exactly one of `status_code` / `error` is normally set. `error` is a
    short classification (e.g. "timeout", "ConnectionError").
    """
    status_code: Optional[int] = None
    error: Optional[str] = None


class HttpTransport:
    """
    Single-attempt HTTP GET client.

    • No retries here; retry policy belongs to the caller
    • Redirects are not followed, the first answer is what counts
    • Never raises: every failure is folded into `HttpResult.error`
    • One `requests.Session` per worker thread unless one is injected
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self._shared_session = session
        self._local = threading.local()
        self.logger = get_logger("transport")

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def get(self, url: str, timeout_ms: int) -> HttpResult:
        try:
            resp = self.session.get(
                url,
                timeout=timeout_ms / 1000,
                allow_redirects=False,
            )
            return HttpResult(status_code=resp.status_code)

        except requests.Timeout:
            return HttpResult(error="timeout")

        except requests.RequestException as e:
            self.logger.debug(f"GET {url} failed: {e.__class__.__name__}: {e}")
            return HttpResult(error=e.__class__.__name__)

    async def http_get(self, url: str, timeout_ms: int) -> HttpResult:
        """Run `get` off the event loop; the loop keeps serving timers meanwhile."""
        return await asyncio.to_thread(self.get, url, timeout_ms)
