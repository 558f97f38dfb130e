from __future__ import annotations
import threading
from typing import Any, Dict, List, Optional

from ..channel import Channel, Listener, MessageEvent, MESSAGE

class LocalChannel(Channel):
    """
    In-process event bus. ``post_message`` hands the message to every
    listener synchronously, in registration order, on the caller's thread.
    Listeners may post again while being called.
    """

    _default: Optional["LocalChannel"] = None
    _default_lock = threading.Lock()

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    @classmethod
    def default(cls) -> "LocalChannel":
        """The shared process-wide bus behind the ``"local"`` channel label."""
        with cls._default_lock:
            if cls._default is None:
                cls._default = cls()
            return cls._default

    def add_event_listener(self, type: str, listener: Listener) -> None:
        self._listeners.setdefault(type, []).append(listener)

    def remove_event_listener(self, type: str, listener: Listener) -> bool:
        listeners = self._listeners.get(type)
        if not listeners or listener not in listeners:
            return False
        listeners.remove(listener)
        return True

    def dispatch_event(self, type: str, event: MessageEvent) -> None:
        # snapshot: listeners may (un)register while we iterate
        for listener in list(self._listeners.get(type, ())):
            listener(event)

    def post_message(self, message: Any) -> None:
        self.dispatch_event(MESSAGE, MessageEvent(data=message))

    def listener_count(self, type: str = MESSAGE) -> int:
        return len(self._listeners.get(type, ()))
