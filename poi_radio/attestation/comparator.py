from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Literal, Optional, Sequence

from poi_radio.attestation.models import Attestation, LocalAttestationsMap, RemoteAttestationsMap


Verdict = Literal["MATCH", "DIVERGED", "INCONCLUSIVE"]


@dataclass(frozen=True)
class ComparisonResult:
    verdict: Verdict
    identifier: str
    block_number: int
    local_value: Optional[str] = None
    remote_value: Optional[str] = None
    reason: str = ""

    @property
    def diverged(self) -> bool:
        return self.verdict == "DIVERGED"

    def describe(self) -> str:
        where = f"subgraph {self.identifier} on block {self.block_number}"
        if self.verdict == "MATCH":
            return f"POIs match for {where}"
        if self.verdict == "DIVERGED":
            return f"POIs don't match for {where}: local={self.local_value} remote={self.remote_value}"
        return f"Inconclusive for {where}: {self.reason}"


def top_attestation(attestations: Sequence[Attestation]) -> Attestation:
    """
    Most stake-backed attestation.

    Equal stake is broken by the greater claimed value so the winner never
    depends on message arrival order.
    """
    return max(attestations, key=lambda a: (a.stake_weight, a.claimed_value))


def compare_attestations(
    identifier: str,
    block_number: int,
    remote: RemoteAttestationsMap,
    local: LocalAttestationsMap,
) -> ComparisonResult:
    local_attestation = local.get(identifier, {}).get(block_number)
    if local_attestation is None:
        return ComparisonResult("INCONCLUSIVE", identifier, block_number, reason="no local attestation")

    remote_blocks = remote.get(identifier)
    if not remote_blocks:
        return ComparisonResult(
            "INCONCLUSIVE",
            identifier,
            block_number,
            local_value=local_attestation.claimed_value,
            reason="no remote attestation store entry",
        )

    candidates = remote_blocks.get(block_number)
    if not candidates:
        return ComparisonResult(
            "INCONCLUSIVE",
            identifier,
            block_number,
            local_value=local_attestation.claimed_value,
            reason="no remote attestations for block",
        )

    winner = top_attestation(candidates)
    verdict: Verdict = "MATCH" if winner.claimed_value == local_attestation.claimed_value else "DIVERGED"
    return ComparisonResult(
        verdict,
        identifier,
        block_number,
        local_value=local_attestation.claimed_value,
        remote_value=winner.claimed_value,
    )


def compare_block(
    block_number: int,
    remote: RemoteAttestationsMap,
    local: LocalAttestationsMap,
    identifiers: Optional[Iterable[str]] = None,
) -> List[ComparisonResult]:
    """Compare every tracked identifier (default: all local ones) at `block_number`."""
    targets = sorted(set(identifiers)) if identifiers is not None else sorted(local)
    return [compare_attestations(ident, block_number, remote, local) for ident in targets]
