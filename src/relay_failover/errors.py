class ChannelError(Exception):
    """Base class for failures talking to a relay channel."""


class TransportError(ChannelError):
    """Timeout, connection refused, DNS failure or HTTP error status."""


class ProtocolError(ChannelError):
    """Response arrived but was malformed, incomplete or an RPC error."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code
