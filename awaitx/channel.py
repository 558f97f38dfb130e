from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

MESSAGE = "message"

@dataclass(frozen=True)
class MessageEvent:
    """What a listener receives; the envelope mapping sits in ``data`` or ``detail``."""
    data: Any = None
    detail: Any = None

Listener = Callable[[Any], None]

class Channel(ABC):
    """
    Bidirectional message transport shared by several nodes. A posted
    message reaches every *other* listener; ordering and timing are up to the
    implementation.
    """

    @abstractmethod
    def post_message(self, message: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_event_listener(self, type: str, listener: Listener) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_event_listener(self, type: str, listener: Listener) -> bool:
        raise NotImplementedError
