"""Request/response queries against the graph node and the registry/network subgraphs."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import bittensor as bt
import requests

from poi_radio.attestation.models import BlockPointer, SubgraphStatus


INDEXING_STATUSES_QUERY = """
query indexingStatuses {
  indexingStatuses {
    subgraph
    synced
    health
    chains {
      network
      latestBlock { number hash }
      chainHeadBlock { number hash }
    }
  }
}
"""

BLOCK_HASH_QUERY = """
query blockHashFromNumber($network: String!, $blockNumber: Int!) {
  blockHashFromNumber(network: $network, blockNumber: $blockNumber)
}
"""

POI_QUERY = """
query proofOfIndexing($subgraph: String!, $blockNumber: Int!, $blockHash: String!, $indexer: String) {
  proofOfIndexing(subgraph: $subgraph, blockNumber: $blockNumber, blockHash: $blockHash, indexer: $indexer)
}
"""

REGISTRY_INDEXER_QUERY = """
query indexers($address: String!) {
  indexers(where: {graphcastID: $address}) {
    graphcastID
    id
  }
}
"""

NETWORK_INDEXER_QUERY = """
query indexer($address: String!) {
  indexer(id: $address) {
    stakedTokens
    allocations {
      subgraphDeployment { ipfsHash }
    }
  }
}
"""

# Public POIs are requested with the zero indexer address.
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class QueryError(RuntimeError):
    """An external query failed; the caller retries on its next tick."""


def _block_pointer(raw: Any) -> Optional[BlockPointer]:
    if not isinstance(raw, dict) or raw.get("number") is None:
        return None
    try:
        number = int(raw["number"])
    except (TypeError, ValueError) as exc:
        raise QueryError(f"Malformed block number {raw['number']!r}: {exc}") from exc
    return BlockPointer(hash=str(raw.get("hash") or ""), number=number)


class GraphQueryClient:
    def __init__(
        self,
        graph_node_endpoint: str,
        registry_subgraph: str,
        network_subgraph: str,
        *,
        timeout_s: float = 10.0,
    ) -> None:
        self.graph_node_endpoint = graph_node_endpoint
        self.registry_subgraph = registry_subgraph
        self.network_subgraph = network_subgraph
        self.timeout_s = timeout_s

    def _query(self, url: str, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            r = requests.post(url, json={"query": query, "variables": variables or {}}, timeout=self.timeout_s)
            r.raise_for_status()
            body = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise QueryError(f"Query to {url} failed: {exc}") from exc

        if not isinstance(body, dict):
            raise QueryError(f"Query to {url} returned a non-object body")
        errors = body.get("errors")
        if errors:
            raise QueryError(f"Query to {url} returned errors: {errors}")
        data = body.get("data")
        if not isinstance(data, dict):
            raise QueryError(f"Query to {url} returned no data")
        return data

    def get_chain_head_blocks(self) -> Dict[str, SubgraphStatus]:
        """Latest indexed block and network chain head for every deployment on the graph node."""
        data = self._query(self.graph_node_endpoint, INDEXING_STATUSES_QUERY)
        out: Dict[str, SubgraphStatus] = {}
        for status in data.get("indexingStatuses") or []:
            if not isinstance(status, dict):
                continue
            identifier = status.get("subgraph")
            chains = status.get("chains") or []
            if not identifier or not chains or not isinstance(chains[0], dict):
                continue
            chain = chains[0]
            latest = _block_pointer(chain.get("latestBlock"))
            if latest is None:
                bt.logging.debug(f"Subgraph {identifier} has not indexed any block yet")
                continue
            out[identifier] = SubgraphStatus(
                network=str(chain.get("network") or ""),
                block=latest,
                chain_head=_block_pointer(chain.get("chainHeadBlock")),
            )
        return out

    def get_canonical_block_hash(self, network: str, block_number: int) -> str:
        data = self._query(
            self.graph_node_endpoint,
            BLOCK_HASH_QUERY,
            {"network": network, "blockNumber": int(block_number)},
        )
        block_hash = data.get("blockHashFromNumber")
        if not block_hash:
            raise QueryError(f"No block hash for {network} block {block_number}")
        return str(block_hash)

    def get_work_item_value(self, identifier: str, block_hash: str, block_number: int) -> str:
        data = self._query(
            self.graph_node_endpoint,
            POI_QUERY,
            {
                "subgraph": identifier,
                "blockNumber": int(block_number),
                "blockHash": block_hash,
                "indexer": ZERO_ADDRESS,
            },
        )
        poi = data.get("proofOfIndexing")
        if not poi:
            raise QueryError(f"No POI for {identifier} at block {block_number}")
        return str(poi)

    def resolve_indexer(self, graphcast_id: str) -> Optional[str]:
        """Indexer address registered for a radio's signing identity, if any."""
        data = self._query(self.registry_subgraph, REGISTRY_INDEXER_QUERY, {"address": graphcast_id})
        indexers = data.get("indexers") or []
        if not indexers or not isinstance(indexers[0], dict):
            return None
        return indexers[0].get("id") or None

    def _indexer(self, indexer_address: str) -> Optional[Dict[str, Any]]:
        data = self._query(self.network_subgraph, NETWORK_INDEXER_QUERY, {"address": indexer_address})
        indexer = data.get("indexer")
        return indexer if isinstance(indexer, dict) else None

    def indexer_stake(self, indexer_address: str) -> int:
        indexer = self._indexer(indexer_address)
        if indexer is None:
            return 0
        try:
            return int(indexer.get("stakedTokens") or 0)
        except (TypeError, ValueError) as exc:
            raise QueryError(f"Malformed stake for indexer {indexer_address}: {exc}") from exc

    def indexer_allocations(self, indexer_address: str) -> List[str]:
        indexer = self._indexer(indexer_address)
        if indexer is None:
            return []
        out: List[str] = []
        for alloc in indexer.get("allocations") or []:
            ipfs_hash = ((alloc or {}).get("subgraphDeployment") or {}).get("ipfsHash")
            if ipfs_hash and ipfs_hash not in out:
                out.append(ipfs_hash)
        return out

    def get_stake(self, address: str) -> int:
        """Stake backing a radio identity; unregistered identities carry none."""
        indexer = self.resolve_indexer(address)
        if indexer is None:
            bt.logging.debug(f"No registered indexer for {address}; counting zero stake")
            return 0
        return self.indexer_stake(indexer)
