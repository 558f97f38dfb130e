from __future__ import annotations
import logging
import uuid
from typing import Any, Dict, Iterator, List, Mapping, Optional

from . import wire
from .channel import Channel
from .directory import Directory, SWEEP_CALLBACK, sweep_reply, sweep_request
from .errors import ServiceUnavailable
from .message import Call, CallOptions
from .messenger import Decoder, Messenger
from .registry import LocalRegistry
from .resolver import (
    PUBLISH_MARK,
    Accessor,
    LocalCallable,
    LocalPublish,
    LocalValue,
    MemberAccess,
    RemoteCall,
    RemotePublish,
    parse_name,
)

logger = logging.getLogger(__name__)


class Node:

    # Notes:
    # - resolve() decides where a name is served: local registry first, then
    #   the channel. Unknown names are a network concern, never a local error.
    # - Mapping operations (in, [], del, iteration) touch the local registry
    #   only; a node administrates itself and nobody else.
    # - _execute() serves inbound requests/publishes with the same precedence,
    #   and raises ServiceUnavailable to stay silent.

    def __init__(self, local: Optional[Mapping[str, Any]] = None, *,
                 channel: Channel,
                 node_id: Optional[str] = None,
                 channel_id: str = "",
                 timeout_ms: float = 1000,
                 decode: Decoder = wire.decode):
        self.id = node_id or uuid.uuid4().hex
        self.registry = LocalRegistry(local)
        self.options = CallOptions(timeout_ms=timeout_ms)
        self.directory = Directory()
        self.directory.learn(self.id, self.registry.names())
        self.messenger: Optional[Messenger] = Messenger(
            channel, self.id,
            channel_id=channel_id,
            execute=self._execute,
            decode=decode,
        )

    def __repr__(self) -> str:
        return f"Node({self.id!r}, {self.registry.names()!r})"

    # ---- resolution ----
    def resolve(self, name: str) -> Accessor:
        addr = parse_name(name)

        if addr.publish:
            if addr.node_id == self.id:
                return LocalPublish(self._execute, addr.target)
            return RemotePublish(self._online(name), addr.target)

        if addr.node_id in (None, self.id):
            if addr.member:
                return MemberAccess(self, addr.name)
            if addr.name in self.registry:
                return self._local(addr.name)

        return RemoteCall(self._online(name), addr.target, self.options)

    def call(self, name: str, *args: Any) -> Any:
        """Call ``name``: a plain result when served locally, a Future when remote."""
        return self.resolve(name).call(*args)

    def publish(self, name: str, *args: Any) -> None:
        """Publish to every other node serving ``name``, or to this one if qualified with its id."""
        if not name.endswith(PUBLISH_MARK):
            name += PUBLISH_MARK
        self.resolve(name).call(*args)

    def _local(self, name: str) -> Accessor:
        if self.registry.is_callable(name):
            return LocalCallable(self.registry, name)
        return LocalValue(self.registry, name)

    def _online(self, name: str) -> Messenger:
        if self.messenger is None:
            raise ServiceUnavailable(f"{self.id} is closed; cannot reach {name!r}")
        return self.messenger

    # ---- executor ----
    def _execute(self, call: Call) -> Any:
        try:
            addr = parse_name(call.name)
        except ValueError:
            raise ServiceUnavailable(call.name) from None
        if addr.node_id is not None and addr.node_id != self.id:
            raise ServiceUnavailable(call.name)
        if addr.member:
            return MemberAccess(self, addr.name).call(*call.args)
        if addr.name in self.registry:
            return self._local(addr.name).call(*call.args)
        raise ServiceUnavailable(call.name)

    # ---- local registry, mapping style ----
    def __getitem__(self, name: str) -> Accessor:
        return self.resolve(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.registry[name] = value

    def __delitem__(self, name: str) -> None:
        del self.registry[name]

    def __contains__(self, name: object) -> bool:
        return name in self.registry

    def __iter__(self) -> Iterator[str]:
        return iter(self.registry)

    def __len__(self) -> int:
        return len(self.registry)

    def keys(self) -> List[str]:
        return self.registry.names()

    # ---- directory ----
    def sync_directory(self, message: Optional[Dict[str, Any]] = None) -> None:
        """
        One sweep step. With no message, ask every peer for its names; with
        a ``callback``, answer on it; with a ``from``, store the answer.
        Timing is non-deterministic, replies trickle in as peers answer.
        """
        message = message or {}
        if message.get("from"):
            self.directory.learn(message["from"], message.get("names") or [])
            return

        self.directory.learn(self.id, self.registry.names())
        callback = message.get("callback")
        if not callback:
            self.resolve(SWEEP_CALLBACK).call(sweep_request())
            return
        self.resolve(callback).call(sweep_reply(self.id, self.registry.names()))

    # ---- lifecycle ----
    def close(self) -> None:
        """Leave the channel and serve locally only."""
        if self.messenger is not None:
            self.messenger.close()
            self.messenger = None
            logger.debug("%s> closed", self.id)
