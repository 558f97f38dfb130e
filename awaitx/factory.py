
from __future__ import annotations
from typing import Any, Callable, Dict, Mapping, Optional, Union

from . import wire
from .channel import Channel
from .channels import LocalChannel, ThreadChannel
from .node import Node

def AwaitX(local: Optional[Mapping[str, Any]] = None,
           *,
           channel: Union[str, Channel] = "local",
           node_id: Optional[str] = None,
           channel_id: str = "",
           timeout_ms: float = 1000,
           decode: Callable[[Any], Dict[str, Any]] = wire.decode,
           **channel_kwargs) -> Node:
    """
    One-liner factory:
      AwaitX({"add": lambda a, b: a + b}, node_id="math")
      AwaitX({"mul": mul}, channel=my_channel, channel_id="g1", timeout_ms=0)

    - local: mapping of names to callables or plain values served by this node
    - channel: "local" (the shared LocalChannel.default() bus) | "thread" | Channel instance
    - node_id: node identifier; a random uuid4 hex when omitted
    - channel_id: sub-channel so several logical buses can share one channel
    - timeout_ms: default per-call timeout; 0 waits indefinitely
    - decode: extracts the envelope mapping from a channel event
    - **channel_kwargs: passed to the channel constructor ("thread" only)
    """
    if isinstance(channel, str):
        label = channel.lower()
        if label == "local":
            chan: Channel = LocalChannel.default()
        elif label == "thread":
            chan = ThreadChannel(**channel_kwargs)
        else:
            raise ValueError(f"Unknown channel label: {channel}")
    else:
        chan = channel
        # Trust caller to have wired the channel to its peers

    return Node(local, channel=chan, node_id=node_id, channel_id=channel_id,
                timeout_ms=timeout_ms, decode=decode)
