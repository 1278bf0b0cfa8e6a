from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from poi_radio.attestation.models import Attestation, LocalAttestationsMap


class LocalAttestationStore:
    """POIs computed by this radio, keyed by subgraph and block number."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._attestations: LocalAttestationsMap = {}

    def record(
        self,
        identifier: str,
        block_number: int,
        claimed_value: str,
        own_stake: int,
        *,
        sender: Optional[str] = None,
    ) -> Attestation:
        attestation = Attestation(
            claimed_value=claimed_value,
            stake_weight=int(own_stake),
            senders=[sender] if sender else [],
        )
        with self._lock:
            self._attestations.setdefault(identifier, {})[int(block_number)] = attestation
        return attestation

    def get(self, identifier: str, block_number: int) -> Optional[Attestation]:
        with self._lock:
            return self._attestations.get(identifier, {}).get(int(block_number))

    @contextmanager
    def locked(self) -> Iterator[LocalAttestationsMap]:
        """Yield the backing map while holding the store lock (used for comparisons)."""
        with self._lock:
            yield self._attestations

    def __len__(self) -> int:
        with self._lock:
            return sum(len(blocks) for blocks in self._attestations.values())
