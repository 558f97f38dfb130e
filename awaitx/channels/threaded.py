from __future__ import annotations
import logging
import threading
from queue import Queue, Empty
from typing import Any, List, Union

from ..channel import Channel, Listener, MessageEvent, MESSAGE
from ..codecs import Codec, FrameError, get_codec

logger = logging.getLogger(__name__)

class ThreadChannel(Channel):
    """Channel with a worker-style boundary.

    Posted messages are encoded with a codec into frames and queued; one
    receive thread decodes each frame and hands a fresh copy to every
    listener. Listeners therefore run serially, never on the poster's thread,
    and never share objects with the sender.
    """

    def __init__(self, codec: Union[str, Codec] = "msgpack", *, poll_s: float = 0.1):
        self.codec = get_codec(codec) if isinstance(codec, str) else codec
        self._poll_s = poll_s
        self._inbox: "Queue[bytes]" = Queue()
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self._running = True
        self._rx_thread = threading.Thread(target=self._rx_loop, daemon=True)
        self._rx_thread.start()

    def post_message(self, message: Any) -> None:
        if not self._running:
            return
        self._inbox.put(self.codec.encode(message))

    def add_event_listener(self, type: str, listener: Listener) -> None:
        if type != MESSAGE:
            return
        with self._lock:
            self._listeners.append(listener)

    def remove_event_listener(self, type: str, listener: Listener) -> bool:
        with self._lock:
            if listener not in self._listeners:
                return False
            self._listeners.remove(listener)
            return True

    def _rx_loop(self):
        while self._running:
            try:
                frame = self._inbox.get(timeout=self._poll_s)
            except Empty:
                continue
            with self._lock:
                listeners = list(self._listeners)
            for listener in listeners:
                try:
                    message = self.codec.decode(frame)
                except FrameError as ex:
                    logger.debug("dropping frame: %s", ex)
                    break
                try:
                    listener(MessageEvent(data=message))
                except Exception:
                    logger.exception("listener failed on %s", self.codec.name)

    def close(self):
        self._running = False
        self._rx_thread.join(timeout=1)
