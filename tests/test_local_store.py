from poi_radio.attestation.local_store import LocalAttestationStore


def test_record_creates_and_overwrites_claim():
    store = LocalAttestationStore()

    first = store.record("Qm1", 100, "0xaaa", 42)
    assert first.stake_weight == 42
    assert first.senders == []
    assert store.get("Qm1", 100) == first

    store.record("Qm1", 100, "0xbbb", 42)
    assert store.get("Qm1", 100).claimed_value == "0xbbb"
    assert len(store) == 1


def test_record_with_self_marker():
    store = LocalAttestationStore()

    att = store.record("Qm1", 100, "0xaaa", 7, sender="me")
    assert att.senders == ["me"]


def test_keys_are_independent():
    store = LocalAttestationStore()
    store.record("Qm1", 100, "0xaaa", 1)
    store.record("Qm1", 104, "0xbbb", 1)
    store.record("Qm2", 100, "0xccc", 1)

    assert store.get("Qm1", 104).claimed_value == "0xbbb"
    assert store.get("Qm2", 104) is None
    assert len(store) == 3


def test_locked_yields_backing_map():
    store = LocalAttestationStore()
    store.record("Qm1", 100, "0xaaa", 1)

    with store.locked() as local:
        assert local["Qm1"][100].claimed_value == "0xaaa"

    # The lock is released again afterwards.
    store.record("Qm1", 104, "0xbbb", 1)
    assert store.get("Qm1", 104).claimed_value == "0xbbb"
