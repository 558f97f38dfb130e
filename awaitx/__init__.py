"""
Public API:
- AwaitX: one-liner factory returning a Node
- Node: local registry + façade; resolves names locally or over the channel
- Messenger: correlation engine (request/response with timeout, publish)
- Accessor and its variants: what a resolved name gives you
- Envelope, Call, CallOptions, MsgType: wire-level types
- Channel, MessageEvent: contract transports must implement
- LocalChannel, ThreadChannel: bundled channels
- Directory: best-effort cache filled by directory sweeps
- ServiceUnavailable, TimedOut, RemoteError: signals
- get_codec, FrameError: frame codecs for serializing channels
"""

# Core runtime
from .node import Node
from .messenger import Messenger
from .factory import AwaitX

# Resolution
from .resolver import (
    Accessor,
    Address,
    LocalCallable,
    LocalPublish,
    LocalValue,
    MemberAccess,
    RemoteCall,
    RemotePublish,
    parse_name,
)

# Builder & wire types
from .builder import EnvelopeBuilder
from .message import (
    Call,
    CallOptions,
    Envelope,
    MsgType,
)
from .wire import decode, pack, unpack

# Channel contract & bundled channels
from .channel import Channel, MessageEvent
from .channels import LocalChannel, ThreadChannel

# Registry & discovery
from .registry import LocalRegistry
from .directory import Directory

from .errors import AwaitXError, RemoteError, ServiceUnavailable, TimedOut
from .codecs import Codec, FrameError, get_codec

__all__ = [
    "AwaitX",
    "Node",
    "Messenger",
    "Accessor",
    "Address",
    "LocalCallable",
    "LocalPublish",
    "LocalValue",
    "MemberAccess",
    "RemoteCall",
    "RemotePublish",
    "parse_name",
    "EnvelopeBuilder",
    "Call",
    "CallOptions",
    "Envelope",
    "MsgType",
    "decode",
    "pack",
    "unpack",
    "Channel",
    "MessageEvent",
    "LocalChannel",
    "ThreadChannel",
    "LocalRegistry",
    "Directory",
    "AwaitXError",
    "RemoteError",
    "ServiceUnavailable",
    "TimedOut",
    "Codec",
    "FrameError",
    "get_codec",
]

__version__ = "0.1.0"
