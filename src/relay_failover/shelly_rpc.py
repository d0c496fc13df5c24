# ─── Standard library imports ───
import asyncio
import itertools
import threading
from typing import Optional

# ─── Third-party imports ───
import requests

# ─── Project imports ───
from .modes import InputMode
from .logger import get_logger
from .errors import ProtocolError, TransportError


class ShellyRpcClient:
    """
    Handles all communication with a Shelly Gen2 relay over its local
    JSON-RPC endpoint (`POST http://<host>/rpc`).

    Serves as both the channel config store (input mode) and the channel
    power store (output state). Every public coroutine performs exactly
    one RPC and raises `TransportError` / `ProtocolError` on failure.

    Channel tasks run their RPCs concurrently in worker threads, and
    `requests.Session` is not thread-safe, so each worker thread gets its
    own session. An injected `session` is shared as-is; only pass one
    that is never used from two threads at once (e.g. in tests).
    """

    def __init__(
        self,
        host: str,
        timeout_ms: int = 4000,
        session: Optional[requests.Session] = None,
    ):
        self.logger = get_logger("shelly_rpc")
        self.host = host
        self.timeout_ms = timeout_ms
        self._shared_session = session
        self._local = threading.local()
        self.rpc_url = f"http://{host}/rpc"
        self._request_ids = itertools.count(1)

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def call(self, method: str, params: dict) -> dict:
        """
        Issue one JSON-RPC request and return its `result` object.

        Raises:
            TransportError: request failed or HTTP status without an RPC body
            ProtocolError: malformed body, missing result or RPC error object
        """
        payload = {
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        self.logger.debug(f"RPC → {method} {params}")

        try:
            resp = self.session.post(
                self.rpc_url,
                json=payload,
                timeout=self.timeout_ms / 1000,
            )
        except requests.RequestException as e:
            raise TransportError(
                f"{method} failed: {e.__class__.__name__}"
            ) from e

        try:
            body = resp.json()
        except ValueError:
            if not resp.ok:
                raise TransportError(f"{method} failed: HTTP {resp.status_code}")
            raise ProtocolError(f"{method} returned non-JSON body")

        if not isinstance(body, dict):
            raise ProtocolError(f"{method} returned unexpected body: {body!r}")

        error = body.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message") if isinstance(error, dict) else error
            raise ProtocolError(f"{method} error {code}: {message}", code=code)

        if not resp.ok:
            raise TransportError(f"{method} failed: HTTP {resp.status_code}")

        result = body.get("result")
        if not isinstance(result, dict):
            raise ProtocolError(f"{method} response missing result")

        return result

    # ─── Synchronous operations ───

    def read_input_mode(self, channel_id: int) -> InputMode:
        result = self.call("Switch.GetConfig", {"id": channel_id})
        raw = result.get("in_mode")
        try:
            return InputMode(raw)
        except ValueError:
            raise ProtocolError(
                f"Switch.GetConfig returned unknown in_mode {raw!r}"
            ) from None

    def write_input_mode(self, channel_id: int, mode: InputMode) -> None:
        self.call(
            "Switch.SetConfig",
            {"id": channel_id, "config": {"in_mode": mode.value}},
        )

    def read_output_state(self, channel_id: int) -> bool:
        result = self.call("Switch.GetStatus", {"id": channel_id})
        output = result.get("output")
        if not isinstance(output, bool):
            raise ProtocolError(
                f"Switch.GetStatus returned no boolean output: {output!r}"
            )
        return output

    def write_output_state(self, channel_id: int, on: bool) -> None:
        self.call("Switch.Set", {"id": channel_id, "on": bool(on)})

    # ─── Store contract (awaitable, runs off the event loop) ───

    async def get_input_mode(self, channel_id: int) -> InputMode:
        return await asyncio.to_thread(self.read_input_mode, channel_id)

    async def set_input_mode(self, channel_id: int, mode: InputMode) -> None:
        await asyncio.to_thread(self.write_input_mode, channel_id, mode)

    async def get_output_state(self, channel_id: int) -> bool:
        return await asyncio.to_thread(self.read_output_state, channel_id)

    async def set_output_state(self, channel_id: int, on: bool) -> None:
        await asyncio.to_thread(self.write_output_state, channel_id, on)
