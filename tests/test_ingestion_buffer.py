import threading

from poi_radio.p2p.buffer import IngestionBuffer
from poi_radio.protocol import RadioMessage


def _msg(sender: str, *, identifier: str = "Qm1", block: int = 100, content: str = "0xabc") -> RadioMessage:
    return RadioMessage(
        identifier=identifier,
        network="mainnet",
        block_number=block,
        content=content,
        sender=sender,
        nonce=0,
        signature="",
    )


def test_deliver_assigns_increasing_sequence_numbers():
    buf = IngestionBuffer()

    a = buf.deliver("A", _msg("A"))
    b = buf.deliver("B", _msg("B"))

    assert (a.seq, b.seq) == (1, 2)
    assert [e.sender for e in buf.snapshot()] == ["A", "B"]
    assert b.identifier == "Qm1" and b.block_number == 100 and b.content == "0xabc"


def test_snapshot_is_a_copy():
    buf = IngestionBuffer()
    buf.deliver("A", _msg("A"))

    snap = buf.snapshot()
    buf.deliver("B", _msg("B"))

    assert len(snap) == 1
    assert len(buf) == 2


def test_bound_evicts_oldest():
    buf = IngestionBuffer(max_messages=2)
    for sender in ("A", "B", "C"):
        buf.deliver(sender, _msg(sender))

    assert [e.sender for e in buf.snapshot()] == ["B", "C"]
    assert buf.evicted == 1


def test_drop_and_clear():
    buf = IngestionBuffer()
    buf.deliver("A", _msg("A", block=96))
    buf.deliver("B", _msg("B", block=100))
    buf.deliver("C", _msg("C", block=104))

    assert buf.drop(lambda e: e.block_number <= 100) == 2
    assert [e.sender for e in buf.snapshot()] == ["C"]
    assert buf.clear() == 1
    assert len(buf) == 0


def test_concurrent_appends_are_not_lost():
    buf = IngestionBuffer()

    def worker(prefix: str) -> None:
        for i in range(200):
            buf.deliver(f"{prefix}{i}", _msg(f"{prefix}{i}"))

    threads = [threading.Thread(target=worker, args=(p,)) for p in "ABCD"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    snap = buf.snapshot()
    assert len(snap) == 800
    assert sorted(e.seq for e in snap) == list(range(1, 801))
