from poi_radio.attestation.comparator import compare_attestations, compare_block, top_attestation
from poi_radio.attestation.models import Attestation


def _local(value: str, *, identifier: str = "Qm1", block: int = 100):
    return {identifier: {block: Attestation(claimed_value=value, stake_weight=1)}}


def _remote(weights, *, identifier: str = "Qm1", block: int = 100):
    return {identifier: {block: [Attestation(claimed_value=v, stake_weight=w) for v, w in weights.items()]}}


def test_match_when_local_equals_top_stake_claim():
    result = compare_attestations("Qm1", 100, _remote({"x": 10, "y": 3}), _local("x"))

    assert result.verdict == "MATCH"
    assert result.local_value == "x"
    assert result.remote_value == "x"
    assert not result.diverged


def test_diverged_when_local_differs_from_top_stake_claim():
    result = compare_attestations("Qm1", 100, _remote({"x": 3, "y": 10}), _local("x"))

    assert result.verdict == "DIVERGED"
    assert (result.local_value, result.remote_value) == ("x", "y")
    assert result.diverged
    assert "don't match" in result.describe()


def test_inconclusive_without_local_claim():
    result = compare_attestations("Qm1", 100, _remote({"x": 1}), _local("x", block=96))

    assert result.verdict == "INCONCLUSIVE"
    assert result.reason == "no local attestation"


def test_inconclusive_without_remote_entry_for_identifier():
    result = compare_attestations("Qm1", 100, _remote({"x": 1}, identifier="Qm2"), _local("x"))

    assert result.verdict == "INCONCLUSIVE"
    assert result.reason == "no remote attestation store entry"


def test_inconclusive_without_remote_claims_for_block():
    result = compare_attestations("Qm1", 100, _remote({"x": 1}, block=96), _local("x"))

    assert result.verdict == "INCONCLUSIVE"
    assert result.reason == "no remote attestations for block"


def test_local_check_takes_priority_over_remote_checks():
    result = compare_attestations("Qm1", 100, {}, {})

    assert result.reason == "no local attestation"


def test_equal_stake_tie_is_broken_by_claimed_value():
    candidates = [Attestation("0xaa", 5), Attestation("0xbb", 5)]

    assert top_attestation(candidates).claimed_value == "0xbb"
    assert top_attestation(list(reversed(candidates))).claimed_value == "0xbb"


def test_compare_block_covers_every_local_identifier():
    local = {**_local("x"), **_local("z", identifier="Qm2")}
    remote = {**_remote({"x": 2}), **_remote({"y": 2}, identifier="Qm2")}

    results = compare_block(100, remote, local)

    assert [(r.identifier, r.verdict) for r in results] == [("Qm1", "MATCH"), ("Qm2", "DIVERGED")]


def test_compare_block_with_explicit_identifiers():
    results = compare_block(100, _remote({"x": 2}), _local("x"), identifiers=["Qm1", "Qm3"])

    assert [(r.identifier, r.verdict) for r in results] == [("Qm1", "MATCH"), ("Qm3", "INCONCLUSIVE")]
