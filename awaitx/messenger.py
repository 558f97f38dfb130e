
from __future__ import annotations
import logging, threading, time, uuid
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

from . import wire
from .builder import EnvelopeBuilder
from .channel import Channel, MESSAGE
from .codecs import FrameError
from .errors import RemoteError, ServiceUnavailable, TimedOut, to_wire_error
from .message import Call, Envelope, MsgType

logger = logging.getLogger(__name__)

Executor = Callable[[Call], Any]
Decoder = Callable[[Any], Dict[str, Any]]

def _unavailable(call: Call) -> Any:
    raise ServiceUnavailable(call.name)

@dataclass
class Pending:
    future: Future
    ts: float
    timeout_ms: float
    timer: Optional[threading.Timer] = field(default=None, repr=False)

class Messenger:
    """
    Correlation engine over one channel.

    Outbound calls become pending futures keyed by request id; inbound
    requests and publishes are handed to ``execute``; inbound responses
    settle the matching pending future exactly once.
    """

    def __init__(self, channel: Channel, node_id: Optional[str] = None, *,
                 channel_id: str = "",
                 execute: Executor = _unavailable,
                 decode: Decoder = wire.decode):
        self.channel = channel
        self.node_id = node_id or uuid.uuid4().hex
        self.channel_id = channel_id
        self.execute = execute
        self.decode = decode
        self.requests: Dict[str, Pending] = {}
        self._builder = EnvelopeBuilder(self.node_id, channel_id)
        self._lock = threading.Lock()
        self._closed = False
        self.channel.add_event_listener(MESSAGE, self.on_message)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self.requests)

    # ---- API ----
    def send(self, name: str, args: Sequence[Any] = (), *, timeout_ms: float = 0) -> Future:
        """Post a request; the returned future settles with the first response."""
        future: Future = Future()
        with self._lock:
            env = self._builder.request(name, args).build()
            entry = Pending(future=future, ts=time.time(), timeout_ms=timeout_ms)
            if timeout_ms and timeout_ms > 0:
                entry.timer = threading.Timer(timeout_ms / 1000.0, self._expire,
                                              args=(env.request_id,))
                entry.timer.daemon = True
            self.requests[env.request_id] = entry
        if entry.timer is not None:
            entry.timer.start()
        logger.debug("%s> request %s %s", self.node_id, env.request_id, name)
        try:
            self.channel.post_message(wire.pack(env))
        except Exception:
            self._take(env.request_id)
            raise
        return future

    def publish(self, name: str, args: Sequence[Any] = ()) -> None:
        """Post a publish; nothing is tracked and nothing comes back."""
        with self._lock:
            env = self._builder.publish(name, args).build()
        self.channel.post_message(wire.pack(env))

    def close(self) -> None:
        """Stop listening. Pending futures are left as they are."""
        if self._closed:
            return
        self._closed = True
        self.channel.remove_event_listener(MESSAGE, self.on_message)

    # ---- RX ----
    def on_message(self, event: Any) -> None:
        try:
            raw = self.decode(event)
        except Exception:
            logger.debug("%s> undecodable event %r", self.node_id, event, exc_info=True)
            return
        env = wire.unpack(raw, self.channel_id) if isinstance(raw, dict) else None
        if env is None or env.sender == self.node_id:
            return

        if env.type == MsgType.RESPONSE:
            self._settle(env)
        elif env.type == MsgType.REQUEST:
            self._serve(env)
        elif env.type == MsgType.PUBLISH:
            self._notify(env)

    def _take(self, request_id: str) -> Optional[Pending]:
        with self._lock:
            entry = self.requests.pop(request_id, None)
        if entry is not None and entry.timer is not None:
            entry.timer.cancel()
        return entry

    def _settle(self, env: Envelope) -> None:
        entry = self._take(env.response_id)
        if entry is None:
            logger.debug("%s> unknown response %s from %s", self.node_id, env.response_id, env.sender)
            return
        if not entry.future.set_running_or_notify_cancel():
            logger.debug("%s> response %s for a cancelled call", self.node_id, env.response_id)
            return
        if env.error is not None:
            entry.future.set_exception(RemoteError(env.error))
        else:
            entry.future.set_result(env.data)

    def _expire(self, request_id: str) -> None:
        entry = self._take(request_id)
        if entry is not None and entry.future.set_running_or_notify_cancel():
            logger.debug("%s> request %s timed out", self.node_id, request_id)
            entry.future.set_exception(TimedOut(request_id, entry.timeout_ms))

    def _serve(self, env: Envelope) -> None:
        try:
            result = self.execute(env.call)
        except ServiceUnavailable:
            return
        except Exception as ex:
            self._respond(env, error=to_wire_error(ex))
            return

        if isinstance(result, Future):
            result.add_done_callback(lambda f: self._respond_later(env, f))
            return
        self._respond(env, data=result)

    def _respond_later(self, env: Envelope, done: Future) -> None:
        if done.cancelled():
            self._respond(env, error={"type": "CancelledError", "message": env.call.name})
            return
        ex = done.exception()
        if isinstance(ex, ServiceUnavailable):
            return
        if ex is not None:
            self._respond(env, error=to_wire_error(ex))
        else:
            self._respond(env, data=done.result())

    def _respond(self, req: Envelope, data: Any = None, error: Any = None) -> None:
        if self._closed:
            return
        with self._lock:
            resp = self._builder.response(req.request_id, data=data, error=error).build()
        try:
            self.channel.post_message(wire.pack(resp))
        except FrameError as ex:
            if error is not None:
                raise
            # the result itself could not travel; answer with why
            self._respond(req, error=to_wire_error(ex))

    def _notify(self, env: Envelope) -> None:
        try:
            self.execute(env.call)
        except ServiceUnavailable:
            return
        except Exception as ex:
            logger.warning("%s> publish %s from %s failed: %r",
                           self.node_id, env.call.name, env.sender, ex)
