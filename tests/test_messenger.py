import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeout

import pytest

from awaitx import Call, Messenger, RemoteError, ServiceUnavailable, TimedOut


def serve(table):
    """Executor over a plain dict of callables."""
    def execute(call: Call):
        if call.name not in table:
            raise ServiceUnavailable(call.name)
        return table[call.name](*call.args)
    return execute


def test_request_response(channel):
    a = Messenger(channel, "a")
    Messenger(channel, "b", execute=serve({"mul": lambda x, y: x * y}))

    fut = a.send("mul", [3, 4])

    assert fut.result(timeout=1) == 12
    assert a.pending == 0


def test_request_ids_are_sender_scoped_and_increasing(queued):
    a = Messenger(queued, "a")
    a.send("x")
    a.send("y")
    assert [m["requestId"] for m in queued.queue] == ["a.1", "a.2"]
    assert all(m["from"] == "a" for m in queued.queue)


def test_remote_error_is_carried_back(channel):
    def boom():
        raise ValueError("bad input")

    a = Messenger(channel, "a")
    Messenger(channel, "b", execute=serve({"boom": boom}))

    with pytest.raises(RemoteError) as info:
        a.send("boom").result(timeout=1)
    assert info.value.error == {"type": "ValueError", "message": "bad input"}


def test_unserved_request_stays_silent_and_times_out(channel):
    a = Messenger(channel, "a")
    Messenger(channel, "b")   # default executor serves nothing

    start = time.monotonic()
    fut = a.send("nobody", timeout_ms=100)
    with pytest.raises(TimedOut):
        fut.result(timeout=2)
    assert time.monotonic() - start >= 0.1
    assert a.pending == 0


def test_zero_timeout_waits_forever(channel):
    a = Messenger(channel, "a")
    fut = a.send("nobody", timeout_ms=0)
    with pytest.raises(FutureTimeout):
        fut.result(timeout=0.2)
    assert a.pending == 1


def test_self_messages_are_ignored(channel):
    calls = []
    a = Messenger(channel, "a", execute=lambda call: calls.append(call))
    a.publish("x")
    a.send("x")
    assert calls == []


def test_first_response_wins(queued):
    a = Messenger(queued, "a")
    Messenger(queued, "b", execute=lambda call: "from b")
    Messenger(queued, "c", execute=lambda call: "from c")

    fut = a.send("who")
    queued.flush()

    assert fut.result(timeout=1) == "from b"
    assert a.pending == 0


def test_late_response_is_dropped(queued):
    a = Messenger(queued, "a")
    Messenger(queued, "b", execute=lambda call: 42)

    fut = a.send("slow", timeout_ms=50)
    with pytest.raises(TimedOut):
        fut.result(timeout=1)

    queued.flush()   # b answers now; nobody is waiting
    assert a.pending == 0
    assert isinstance(fut.exception(), TimedOut)


def test_unknown_response_is_ignored(channel):
    a = Messenger(channel, "a")
    channel.post_message({":X-MSG-RESPONSE": 1})
    channel.post_message({"type": ":X-MSG-RESPONSE", "responseId": "a.99", "data": 1, "from": "z"})
    assert a.pending == 0


@pytest.mark.parametrize("raw", [
    "not a mapping",
    None,
    {},
    {"type": ":X-MSG-REQUEST", "data": {"name": "x", "args": []}, "from": "z"},   # no requestId
    {"type": ":X-MSG-REQUEST", "requestId": "z.1", "data": {"name": "x", "args": []}},  # no from
    {"type": ":X-MSG-REQUEST", "requestId": "z.1", "data": "x", "from": "z"},
    {"type": ":X-MSG-REQUEST", "requestId": "z.1", "data": {"args": []}, "from": "z"},
    {"type": "X-MSG-REQUEST", "requestId": "z.1", "data": {"name": "x"}, "from": "z"},
    {"type": "g2:X-MSG-PUBLISH", "data": {"name": "x", "args": []}, "from": "z"},
])
def test_malformed_or_foreign_envelopes_are_ignored(channel, raw):
    calls = []
    Messenger(channel, "b", execute=lambda call: calls.append(call))
    channel.post_message(raw)
    assert calls == []


def test_sub_channels_share_one_channel(channel):
    a = Messenger(channel, "a", channel_id="g1")
    Messenger(channel, "b", channel_id="g1", execute=serve({"f": lambda: "g1"}))
    Messenger(channel, "c", channel_id="g2", execute=serve({"f": lambda: "g2"}))

    assert a.send("f").result(timeout=1) == "g1"


def test_publish_creates_no_pending_entry(channel):
    seen = []
    a = Messenger(channel, "a")
    Messenger(channel, "b", execute=lambda call: seen.append(call.args))
    Messenger(channel, "c", execute=lambda call: seen.append(call.args))

    assert a.publish("note", [1]) is None
    assert seen == [[1], [1]]
    assert a.pending == 0


def test_publish_failure_is_logged_locally(channel, caplog):
    def boom(*args):
        raise RuntimeError("kaput")

    a = Messenger(channel, "a")
    Messenger(channel, "b", execute=boom)

    with caplog.at_level(logging.WARNING, logger="awaitx.messenger"):
        a.publish("note")
    assert "kaput" in caplog.text
    assert channel.listener_count() == 2


def test_executor_future_answers_when_done(channel):
    later: Future = Future()
    a = Messenger(channel, "a")
    Messenger(channel, "b", execute=lambda call: later)

    fut = a.send("later")
    assert not fut.done()
    later.set_result("ready")
    assert fut.result(timeout=1) == "ready"


def test_close_detaches_and_leaves_pending(queued):
    a = Messenger(queued, "a")
    Messenger(queued, "b", execute=lambda call: 1)

    fut = a.send("x")
    a.close()
    queued.flush()

    assert not fut.done()
    assert a.pending == 1
    assert len(queued.listeners) == 1


def test_cancelled_call_ignores_its_response(queued):
    seen = []
    a = Messenger(queued, "a")
    Messenger(queued, "b", execute=lambda call: 1)
    queued.add_event_listener("message", lambda e: seen.append(e.data["type"]))

    fut = a.send("x")
    assert fut.cancel()
    queued.flush()

    assert fut.cancelled()
    assert a.pending == 0
    assert seen == [":X-MSG-REQUEST", ":X-MSG-RESPONSE"]


def test_cancelled_call_ignores_its_timer(channel, monkeypatch):
    crashed = []
    monkeypatch.setattr(threading, "excepthook", lambda args: crashed.append(args.exc_type))
    a = Messenger(channel, "a")

    fut = a.send("nobody", timeout_ms=50)
    assert fut.cancel()
    time.sleep(0.2)

    assert crashed == []
    assert fut.cancelled()
    assert a.pending == 0


def test_cancelled_executor_future_answers_with_error(channel):
    later: Future = Future()
    a = Messenger(channel, "a")
    Messenger(channel, "b", execute=lambda call: later)

    fut = a.send("later")
    later.cancel()
    with pytest.raises(RemoteError) as info:
        fut.result(timeout=1)
    assert info.value.error["type"] == "CancelledError"


def test_failed_post_leaves_nothing_pending(channel, monkeypatch):
    def refuse(message):
        raise OSError("channel gone")

    a = Messenger(channel, "a")
    monkeypatch.setattr(channel, "post_message", refuse)

    with pytest.raises(OSError):
        a.send("x", timeout_ms=50)
    assert a.pending == 0
