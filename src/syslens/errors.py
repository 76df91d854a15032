"""Exception hierarchy for syslens."""


class SyslensError(Exception):
    """Base error for syslens."""


class FrameError(SyslensError):
    """A frame could not be decoded."""


class ShortReadError(FrameError):
    """The peer closed the stream before a full frame arrived."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(f"short read: expected {expected} bytes, got {received}")
        self.expected = expected
        self.received = received


class AgentConnectionError(SyslensError, ConnectionError):
    """The agent could not reach the collector."""

    def __init__(self, host: str, port: int, reason: object = None) -> None:
        message = f"cannot connect to {host}:{port}"
        if reason is not None:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.host = host
        self.port = port
