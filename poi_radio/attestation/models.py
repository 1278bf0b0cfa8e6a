from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set


@dataclass
class Attestation:
    """A claimed POI together with the stake of every distinct sender backing it."""

    claimed_value: str
    stake_weight: int = 0
    senders: List[str] = field(default_factory=list)

    def add_sender(self, address: str, stake: int) -> bool:
        """
        Count `address` towards this claim.

        Stake is only added the first time an address is seen, so repeated
        messages from one sender never inflate the weight. Returns whether the
        sender was new.
        """
        if address in self.senders:
            return False
        self.senders.append(address)
        self.stake_weight += int(stake)
        return True


@dataclass(frozen=True)
class BlockPointer:
    hash: str
    number: int


@dataclass(frozen=True)
class SubgraphStatus:
    """Indexing status of one subgraph as reported by the graph node."""

    network: str
    block: BlockPointer
    # Chain head of `network`; absent when the node did not report it.
    chain_head: Optional[BlockPointer] = None

    @property
    def head(self) -> BlockPointer:
        return self.chain_head or self.block


@dataclass
class BlockClock:
    current_block: int = 0
    # Blocks at which a comparison becomes due; empty when none is pending.
    compare_blocks: Set[int] = field(default_factory=set)

    @property
    def compare_block(self) -> int:
        """Earliest pending comparison block, 0 when none is pending."""
        return min(self.compare_blocks, default=0)

    def due(self) -> List[int]:
        return sorted(b for b in self.compare_blocks if b <= self.current_block)


LocalAttestationsMap = Dict[str, Dict[int, Attestation]]
RemoteAttestationsMap = Dict[str, Dict[int, List[Attestation]]]
