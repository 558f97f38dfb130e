from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import StrEnum

# Envelope kinds; the wire tag is "<channel id>:<kind>"
class MsgType(StrEnum):
    REQUEST  = "X-MSG-REQUEST"
    RESPONSE = "X-MSG-RESPONSE"
    PUBLISH  = "X-MSG-PUBLISH"

    def tag(self, channel_id: str = "") -> str:
        return f"{channel_id}:{self.value}"


@dataclass(frozen=True)
class Call:
    """Decoded request/publish payload."""
    name: str
    args: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": list(self.args)}


@dataclass(frozen=True)
class Envelope:
    """
    Envelope fields. Exactly one of request_id/response_id is set for a
    REQUEST/RESPONSE; a PUBLISH carries neither.
    """
    type: MsgType                      # REQUEST | RESPONSE | PUBLISH
    sender: str                        # node id of the sender ("from" on the wire)
    channel_id: str = ""               # sub-channel scope
    data: Any = None                   # Call for REQUEST/PUBLISH, result for RESPONSE
    request_id: Optional[str] = None   # "<sender>.<counter>"
    response_id: Optional[str] = None  # request_id being answered
    error: Any = None                  # set on a failed RESPONSE

    @property
    def call(self) -> Call:
        if not isinstance(self.data, Call):
            raise ValueError(f"{self.type} envelope carries no call")
        return self.data


@dataclass(frozen=True)
class CallOptions:
    """Per-call options, passed as the first positional argument of a call."""
    timeout_ms: float = 0   # 0 waits indefinitely


def split_options(args, default: Optional[CallOptions] = None):
    """Return (options, remaining args); options default to ``default``."""
    args = list(args)
    if args and isinstance(args[0], CallOptions):
        return args[0], args[1:]
    return (default or CallOptions()), args
