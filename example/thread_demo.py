import time

from awaitx import AwaitX, CallOptions, ThreadChannel, TimedOut

def main():
    # Two nodes behind a worker-style boundary: every message is msgpack
    # encoded and delivered on the channel's own receive thread.
    channel = ThreadChannel(codec="msgpack")

    A = AwaitX({"add": lambda a, b: a + b}, channel=channel, node_id="PeerA")
    B = AwaitX({"mul": lambda a, b: a * b, "greeting": "hello"},
               channel=channel, node_id="PeerB")

    # local name, served without touching the channel
    print("add on A:", A.call("add", 1, 2))

    # remote name, served by B
    print("mul via A:", A.call("mul", 3, 4).result(timeout=1))

    # remote value read and write through call syntax
    print("greeting via A:", A.call("greeting").result(timeout=1))
    A.call("greeting", "hi").result(timeout=1)
    print("greeting on B:", B.call("greeting"))

    # nobody serves this name
    try:
        A.call("missing", CallOptions(timeout_ms=200)).result(timeout=1)
    except TimedOut as e:
        print("missing:", e)

    # ask peers for their names
    A.call("$sync_directory")
    time.sleep(0.3)
    print("directory on A:", A.directory.snapshot())

    A.close()
    B.close()
    channel.close()

if __name__ == "__main__":
    main()
