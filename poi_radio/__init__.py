"""POI radio: gossip proofs of indexing and compare them against stake-weighted peers."""

__version__ = "0.1.0"
