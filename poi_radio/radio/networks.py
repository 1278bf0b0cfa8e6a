from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


# Blocks between two POI messages, per indexed network.
DEFAULT_NETWORK_INTERVALS: Dict[str, int] = {
    "goerli": 2,
    "mainnet": 4,
    "gnosis": 5,
    "hardhat": 5,
    "arbitrum-one": 5,
    "arbitrum-goerli": 5,
    "avalanche": 5,
    "polygon": 5,
    "celo": 5,
    "optimism": 5,
}


def parse_network_intervals(raw: str) -> Dict[str, int]:
    """
    Parse `name:interval` pairs, e.g. "mainnet:4,goerli:2".

    Raises ValueError on malformed pairs or non-positive intervals.
    """
    out: Dict[str, int] = {}
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, interval = item.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Expected name:interval, got {item!r}")
        value = int(interval)
        if value <= 0:
            raise ValueError(f"Interval for {name.strip()!r} must be positive, got {value}")
        out[name.strip().lower()] = value
    return out


@dataclass(frozen=True)
class NetworkRegistry:
    intervals: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_NETWORK_INTERVALS))

    @classmethod
    def with_overrides(cls, overrides: Optional[Mapping[str, int]] = None) -> "NetworkRegistry":
        merged = dict(DEFAULT_NETWORK_INTERVALS)
        merged.update(overrides or {})
        return cls(intervals=merged)

    def interval(self, network: str) -> Optional[int]:
        """Examination interval for `network`, or None when it is not supported."""
        return self.intervals.get((network or "").strip().lower())
