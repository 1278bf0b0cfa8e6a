"""Fold buffered peer messages into a stake-weighted view of remote POIs."""

from __future__ import annotations

from typing import Callable, Dict, Iterable

import bittensor as bt

from poi_radio.attestation.models import Attestation, RemoteAttestationsMap
from poi_radio.p2p.buffer import BufferedMessage


StakeLookup = Callable[[str], int]


class AggregationError(RuntimeError):
    """The message set could not be aggregated; retry on a later tick."""


def aggregate(messages: Iterable[BufferedMessage], stake_lookup: StakeLookup) -> RemoteAttestationsMap:
    """
    Build the remote attestation map from scratch.

    Each distinct claimed value per (identifier, block) becomes one Attestation
    whose weight is the summed stake of its distinct senders. A sender that
    claims different values for the same key backs each of them; there is no
    exclusivity between claims.

    Stake is looked up once per sender per call. Any lookup failure aborts the
    whole aggregation: a partial tally could elect the wrong winner.
    """
    remote: RemoteAttestationsMap = {}
    stakes: Dict[str, int] = {}

    for entry in messages:
        sender = entry.sender
        if not sender:
            raise AggregationError(f"Message #{entry.seq} has no recoverable sender")

        if sender not in stakes:
            try:
                stakes[sender] = int(stake_lookup(sender))
            except Exception as exc:
                raise AggregationError(f"Stake lookup failed for {sender}: {exc}") from exc
        stake = stakes[sender]

        attestations = remote.setdefault(entry.identifier, {}).setdefault(entry.block_number, [])
        existing = next((a for a in attestations if a.claimed_value == entry.content), None)
        if existing is None:
            attestations.append(Attestation(claimed_value=entry.content, stake_weight=stake, senders=[sender]))
        elif not existing.add_sender(sender, stake):
            bt.logging.trace(
                f"Duplicate attestation from {sender} for {entry.identifier}@{entry.block_number}; skipping"
            )

    return remote
