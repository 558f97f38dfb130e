from collections import deque

import pytest

from awaitx import AwaitX, Channel, LocalChannel, MessageEvent


class QueuedChannel(Channel):
    """Holds posted messages until flush(), so tests control delivery order."""

    def __init__(self):
        self.listeners = []
        self.queue = deque()

    def post_message(self, message):
        self.queue.append(message)

    def add_event_listener(self, type, listener):
        self.listeners.append(listener)

    def remove_event_listener(self, type, listener):
        if listener not in self.listeners:
            return False
        self.listeners.remove(listener)
        return True

    def flush(self):
        delivered = 0
        while self.queue:
            message = self.queue.popleft()
            for listener in list(self.listeners):
                listener(MessageEvent(data=message))
            delivered += 1
        return delivered


@pytest.fixture
def channel():
    return LocalChannel()


@pytest.fixture
def queued():
    return QueuedChannel()


@pytest.fixture
def nodes(channel):
    """The arithmetic mesh: fn1 calls out, the others serve."""
    made = {
        "fn1":  AwaitX({"fn1": lambda a, b: a + b}, channel=channel, node_id="fn1"),
        "fn2":  AwaitX({"fn2": lambda a, b: a * b, "var2": 111}, channel=channel, node_id="fn2"),
        "fn3a": AwaitX({"fn3": lambda a, b: a - b}, channel=channel, node_id="fn3a"),
        "fn3b": AwaitX({"fn3": lambda a, b: a - 2 * b}, channel=channel, node_id="fn3b"),
    }
    yield made
    for node in made.values():
        node.close()
