from __future__ import annotations
from typing import Any


class AwaitXError(Exception):
    """Base class for every signal raised by awaitx."""


class ServiceUnavailable(AwaitXError):
    """
    Raised by an executor that cannot serve a name (unknown name, or a name
    qualified for another node). It never produces a response envelope, so on
    a shared channel only the nodes that can serve a name answer.
    """


class TimedOut(AwaitXError):
    """Raised to a caller whose request timer fired before any response."""

    def __init__(self, request_id: str, timeout_ms: float):
        super().__init__(f"request {request_id} timed out after {timeout_ms} ms")
        self.request_id = request_id
        self.timeout_ms = timeout_ms


class RemoteError(AwaitXError):
    """A remote executor failed; ``error`` is the payload it sent back."""

    def __init__(self, error: Any):
        super().__init__(_describe(error))
        self.error = error


def to_wire_error(exc: BaseException) -> Any:
    """Turn an exception into something every codec can carry."""
    if isinstance(exc, RemoteError):
        return exc.error
    return {"type": type(exc).__name__, "message": str(exc)}


def _describe(error: Any) -> str:
    if isinstance(error, dict) and "message" in error:
        kind = error.get("type") or "Error"
        return f"{kind}: {error['message']}"
    return repr(error)
