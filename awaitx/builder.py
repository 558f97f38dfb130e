from __future__ import annotations
import itertools
from typing import Any, Dict, Optional, Sequence

from .message import Call, Envelope, MsgType

class EnvelopeBuilder:
    """
    Builder that always produces a valid Envelope for one sender.
    It also enforces the correlation rules:
     - REQUEST carries a fresh request id "<sender>.<n>" and no response id
     - RESPONSE carries the id it answers and no request id
     - PUBLISH carries neither
    """
    def __init__(self, sender: str, channel_id: str = ""):
        self.sender = sender
        self.channel_id = channel_id
        self._counter = itertools.count(1)
        self._env: Dict[str, Any] = {}

    def next_request_id(self) -> str:
        return f"{self.sender}.{next(self._counter)}"

    def request(self, name: str, args: Sequence[Any] = (), request_id: Optional[str] = None):
        self._env = {
            "type":       MsgType.REQUEST,
            "data":       Call(name, list(args)),
            "request_id": request_id or self.next_request_id(),
        }
        return self

    def response(self, response_id: str, data: Any = None, error: Any = None):
        self._env = {
            "type":        MsgType.RESPONSE,
            "data":        data,
            "response_id": response_id,
            "error":       error,
        }
        return self

    def publish(self, name: str, args: Sequence[Any] = ()):
        self._env = {
            "type": MsgType.PUBLISH,
            "data": Call(name, list(args)),
        }
        return self

    def build(self) -> Envelope:
        if not self._env:
            raise ValueError("Nothing to build; call request/response/publish first.")
        kind = self._env["type"]
        if kind == MsgType.REQUEST and not self._env.get("request_id"):
            raise ValueError("REQUEST requires a request id.")
        if kind == MsgType.RESPONSE and not self._env.get("response_id"):
            raise ValueError("RESPONSE requires the id of the request it answers.")
        if kind in (MsgType.REQUEST, MsgType.PUBLISH) and not self._env["data"].name:
            raise ValueError(f"{kind} requires a name.")
        env = Envelope(sender=self.sender, channel_id=self.channel_id, **self._env)
        self._env = {}
        return env
