"""
Name grammar and the accessors a name resolves to.

    "fn"          plain name
    "node.fn"     only the node whose id is "node" may serve it
    "$member"     the node's own administrative surface (directory, close, ...)
    "fn!"         publish instead of call; combines with the forms above

An accessor gives uniform ``get()`` / ``set(value)`` / ``call(*args)`` over
the places a name can end up: a local value, a local callable, a remote
call, a remote publish, a publish to the node itself, or a member of the
node.
"""
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from .errors import ServiceUnavailable
from .message import Call, CallOptions, split_options

if TYPE_CHECKING:
    from .messenger import Messenger
    from .registry import LocalRegistry

logger = logging.getLogger(__name__)

PUBLISH_MARK = "!"
MEMBER_MARK = "$"
QUALIFIER = "."

@dataclass(frozen=True)
class Address:
    name: str                       # bare name, markers and qualifier stripped
    node_id: Optional[str] = None   # set for "node.name"
    member: bool = False
    publish: bool = False

    @property
    def target(self) -> str:
        """Name as it travels on the wire (qualified, member mark kept, no publish mark)."""
        name = MEMBER_MARK + self.name if self.member else self.name
        return f"{self.node_id}{QUALIFIER}{name}" if self.node_id else name

def parse_name(name: str) -> Address:
    if not isinstance(name, str) or not name:
        raise ValueError(f"invalid name: {name!r}")

    publish = name.endswith(PUBLISH_MARK)
    if publish:
        name = name[:-len(PUBLISH_MARK)]

    node_id = None
    head, sep, rest = name.partition(QUALIFIER)
    if sep and head and rest:
        node_id, name = head, rest

    member = name.startswith(MEMBER_MARK)
    if member:
        name = name[len(MEMBER_MARK):]

    if not name:
        raise ValueError(f"invalid name: {name!r}")
    return Address(name=name, node_id=node_id, member=member, publish=publish)


class Accessor(ABC):
    """
    ``get()`` and ``set(v)`` default to ``call()`` and ``call(v)``, the same
    get-or-set-through-call rule local values follow.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def call(self, *args: Any) -> Any:
        raise NotImplementedError

    def get(self) -> Any:
        return self.call()

    def set(self, value: Any) -> Any:
        return self.call(value)

    def __call__(self, *args: Any) -> Any:
        return self.call(*args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class LocalValue(Accessor):
    """A non-callable registry entry: call() reads, call(v) overwrites."""

    def __init__(self, registry: "LocalRegistry", name: str):
        super().__init__(name)
        self.registry = registry

    def get(self) -> Any:
        return self.registry[self.name]

    def set(self, value: Any) -> Any:
        self.registry[self.name] = value
        return value

    def call(self, *args: Any) -> Any:
        _, args = split_options(args)
        if len(args) == 1:
            return self.set(args[0])
        return self.get()


class LocalCallable(Accessor):

    def __init__(self, registry: "LocalRegistry", name: str):
        super().__init__(name)
        self.registry = registry

    def get(self) -> Any:
        return self.registry[self.name]

    def set(self, value: Any) -> Any:
        self.registry[self.name] = value
        return value

    def call(self, *args: Any) -> Any:
        _, args = split_options(args)
        return self.registry[self.name](*args)


class RemoteCall(Accessor):
    """Request through the messenger; ``call`` returns a Future."""

    def __init__(self, messenger: "Messenger", name: str, options: CallOptions):
        super().__init__(name)
        self.messenger = messenger
        self.options = options

    def call(self, *args: Any) -> Future:
        opt, args = split_options(args, self.options)
        return self.messenger.send(self.name, args, timeout_ms=opt.timeout_ms)


class RemotePublish(Accessor):
    """Fire-and-forget through the messenger; ``call`` returns None at once."""

    def __init__(self, messenger: "Messenger", name: str):
        super().__init__(name)
        self.messenger = messenger

    def call(self, *args: Any) -> None:
        _, args = split_options(args)
        self.messenger.publish(self.name, args)


class LocalPublish(Accessor):
    """
    A publish addressed to the owner's own id. It runs here, since the
    channel never echoes a node's messages back to it; like any publish the
    result is dropped and failures are only logged.
    """

    def __init__(self, execute: Callable[[Call], Any], name: str):
        super().__init__(name)
        self.execute = execute

    def call(self, *args: Any) -> None:
        _, args = split_options(args)
        try:
            self.execute(Call(self.name, args))
        except ServiceUnavailable:
            return
        except Exception as ex:
            logger.warning("local publish %s failed: %r", self.name, ex)


class MemberAccess(Accessor):
    """A public attribute of the owner; methods are called, values are read."""

    def __init__(self, owner: Any, name: str):
        super().__init__(name)
        if name.startswith("_") or not hasattr(owner, name):
            raise ServiceUnavailable(MEMBER_MARK + name)
        self.owner = owner

    def get(self) -> Any:
        return getattr(self.owner, self.name)

    def set(self, value: Any) -> Any:
        raise ServiceUnavailable(f"{MEMBER_MARK}{self.name} is read-only")

    def call(self, *args: Any) -> Any:
        _, args = split_options(args)
        member = getattr(self.owner, self.name)
        return member(*args) if callable(member) else member
