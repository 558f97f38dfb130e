"""
Frame codecs for channels that cross a serialization boundary.

A codec turns one posted message (the wire mapping, or None) into a
self-contained frame and back. Anything a codec cannot read back raises
FrameError, so a channel has one thing to catch for bad input.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict

import json

import msgpack

from .errors import AwaitXError

class FrameError(AwaitXError):
    """A frame could not be encoded or decoded by a codec."""

class Codec(ABC):
    name: str

    def encode(self, message: Any) -> bytes:
        try:
            return self._dumps(message)
        except (TypeError, ValueError, OverflowError) as ex:
            raise FrameError(f"{self.name}: cannot encode {type(message).__name__}: {ex}") from ex

    def decode(self, frame: bytes) -> Any:
        try:
            return self._loads(frame)
        except (TypeError, ValueError) as ex:
            raise FrameError(f"{self.name}: bad frame of {len(frame)} bytes: {ex}") from ex

    @abstractmethod
    def _dumps(self, message: Any) -> bytes: ...

    @abstractmethod
    def _loads(self, frame: bytes) -> Any: ...

class JSONCodec(Codec):
    name = "json"

    def _dumps(self, message: Any) -> bytes:
        return json.dumps(message, separators=(",", ":"), allow_nan=False).encode("utf-8")

    def _loads(self, frame: bytes) -> Any:
        return json.loads(frame.decode("utf-8"))

class MsgPackCodec(Codec):
    name = "msgpack"

    def _dumps(self, message: Any) -> bytes:
        return msgpack.packb(message, use_bin_type=True)

    def _loads(self, frame: bytes) -> Any:
        # strict_map_key off: registry names are str, but a result may map ints
        return msgpack.unpackb(frame, raw=False, strict_map_key=False)

_CODECS: Dict[str, Codec] = {c.name: c for c in (JSONCodec(), MsgPackCodec())}

def get_codec(name: str) -> Codec:
    if name not in _CODECS:
        raise ValueError(f"Unknown codec: {name}")
    return _CODECS[name]
