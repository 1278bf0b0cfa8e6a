from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import List, Optional

import bittensor as bt

from poi_radio.attestation.local_store import LocalAttestationStore
from poi_radio.graphql.client import GraphQueryClient, QueryError
from poi_radio.p2p.buffer import IngestionBuffer
from poi_radio.p2p.gossip_client import GossipClient
from poi_radio.radio.config import RadioEnvConfig
from poi_radio.radio.networks import NetworkRegistry


@dataclass
class RadioContext:
    """
    Everything one radio process shares between its scheduler and its relay.

    Built once at startup and handed to each component; there is no module
    level state. `queries` and `gossip` are duck-typed so tests can swap in
    fakes.
    """

    config: RadioEnvConfig
    queries: GraphQueryClient
    gossip: GossipClient
    topics: List[str]
    own_address: str
    own_stake: int = 0
    indexer_address: Optional[str] = None
    registry: NetworkRegistry = field(default_factory=NetworkRegistry)
    buffer: IngestionBuffer = field(default_factory=IngestionBuffer)
    local_store: LocalAttestationStore = field(default_factory=LocalAttestationStore)
    stop_event: threading.Event = field(default_factory=threading.Event)

    @property
    def stopping(self) -> bool:
        return self.stop_event.is_set()


def build_context(cfg: RadioEnvConfig, keypair: bt.Keypair) -> RadioContext:
    queries = GraphQueryClient(
        cfg.graph_node_endpoint,
        cfg.registry_subgraph,
        cfg.network_subgraph,
        timeout_s=cfg.query_timeout_s,
    )
    gossip = GossipClient(cfg.peer_urls, keypair, radio_name=cfg.radio_name, timeout_s=cfg.query_timeout_s)

    indexer = cfg.indexer_address
    if indexer is None:
        try:
            indexer = queries.resolve_indexer(keypair.ss58_address)
        except QueryError as exc:
            bt.logging.warning(f"Could not resolve indexer for {keypair.ss58_address}: {exc}")

    own_stake = 0
    allocations: List[str] = []
    if indexer:
        try:
            own_stake = queries.indexer_stake(indexer)
            if not cfg.topics:
                allocations = queries.indexer_allocations(indexer)
        except QueryError as exc:
            bt.logging.warning(f"Could not query network subgraph for indexer {indexer}: {exc}")

    topics = list(cfg.topics) or allocations
    if not topics:
        raise SystemExit("[poi-radio] No subgraphs to track: set POI_RADIO_SUBGRAPHS or allocate as an indexer.")

    bt.logging.info(f"Acting on behalf of indexer {indexer} with stake {own_stake}; tracking {len(topics)} subgraph(s)")

    return RadioContext(
        config=cfg,
        queries=queries,
        gossip=gossip,
        topics=topics,
        own_address=gossip.address,
        own_stake=own_stake,
        indexer_address=indexer,
        registry=NetworkRegistry.with_overrides(cfg.network_intervals),
        buffer=IngestionBuffer(max_messages=cfg.buffer_limit),
    )
