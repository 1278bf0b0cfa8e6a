from poi_radio.attestation.models import (
    Attestation,
    BlockClock,
    BlockPointer,
    LocalAttestationsMap,
    RemoteAttestationsMap,
    SubgraphStatus,
)
from poi_radio.attestation.local_store import LocalAttestationStore
from poi_radio.attestation.aggregator import AggregationError, aggregate
from poi_radio.attestation.comparator import (
    ComparisonResult,
    compare_attestations,
    compare_block,
    top_attestation,
)

__all__ = [
    "AggregationError",
    "Attestation",
    "BlockClock",
    "BlockPointer",
    "ComparisonResult",
    "LocalAttestationStore",
    "LocalAttestationsMap",
    "RemoteAttestationsMap",
    "SubgraphStatus",
    "aggregate",
    "compare_attestations",
    "compare_block",
    "top_attestation",
]
