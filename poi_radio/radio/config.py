from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from poi_radio.radio.networks import parse_network_intervals
from poi_radio.utils.env import _env_bool, _env_csv, _env_float, _env_int, _env_str


@dataclass(frozen=True)
class RadioEnvConfig:
    graph_node_endpoint: str
    registry_subgraph: str
    network_subgraph: str
    indexer_address: Optional[str]
    topics: Tuple[str, ...]
    peer_urls: Tuple[str, ...]
    radio_name: str = "poi-radio"
    panic_if_diverged: bool = False
    tick_seconds: float = 5.0
    wait_blocks: int = 2
    buffer_limit: int = 10_000
    max_message_age_s: int = 120
    query_timeout_s: float = 10.0
    listen_host: str = "127.0.0.1"
    listen_port: int = 8020
    network_intervals: Dict[str, int] = field(default_factory=dict)
    mnemonic: Optional[str] = None


def _die(msg: str) -> None:
    raise SystemExit(f"[poi-radio] {msg}")


def _require_http(name: str) -> str:
    url = _env_str(name, "").rstrip("/")
    if not url:
        _die(f"Missing required env var: {name}.")
    if not url.startswith("http"):
        _die(f"{name} must be http(s). Got: {url!r}")
    return url


def load_radio_env(*, panic_if_diverged: Optional[bool] = None) -> RadioEnvConfig:
    """
    Load radio configuration from env/.env with strict validation.

    `panic_if_diverged` lets a CLI flag take precedence over the env value.
    """
    graph_node_endpoint = _require_http("POI_RADIO_GRAPH_NODE_STATUS_ENDPOINT")
    registry_subgraph = _require_http("POI_RADIO_REGISTRY_SUBGRAPH_ENDPOINT")
    network_subgraph = _require_http("POI_RADIO_NETWORK_SUBGRAPH_ENDPOINT")

    peer_urls = tuple(u.rstrip("/") for u in _env_csv("POI_RADIO_PEER_URLS"))
    for url in peer_urls:
        if not url.startswith("http"):
            _die(f"POI_RADIO_PEER_URLS entries must be http(s). Got: {url!r}")

    try:
        tick_seconds = _env_float("POI_RADIO_TICK_SECONDS", 5.0)
        wait_blocks = _env_int("POI_RADIO_WAIT_BLOCKS", 2)
        buffer_limit = _env_int("POI_RADIO_BUFFER_LIMIT", 10_000)
        max_message_age_s = _env_int("POI_RADIO_MAX_MESSAGE_AGE_S", 120)
        query_timeout_s = _env_float("POI_RADIO_QUERY_TIMEOUT_S", 10.0)
        listen_port = _env_int("POI_RADIO_LISTEN_PORT", 8020)
    except ValueError as exc:
        _die(f"Invalid numeric setting: {exc}")

    if wait_blocks < 1:
        _die(f"POI_RADIO_WAIT_BLOCKS must be >= 1. Got: {wait_blocks}")
    if not 0 < listen_port < 65536:
        _die(f"POI_RADIO_LISTEN_PORT out of range: {listen_port}")

    try:
        network_intervals = parse_network_intervals(_env_str("POI_RADIO_NETWORK_INTERVALS", ""))
    except ValueError as exc:
        _die(f"Invalid POI_RADIO_NETWORK_INTERVALS: {exc}")

    if panic_if_diverged is None:
        panic_if_diverged = _env_bool("POI_RADIO_PANIC_IF_DIVERGED", False)

    return RadioEnvConfig(
        graph_node_endpoint=graph_node_endpoint,
        registry_subgraph=registry_subgraph,
        network_subgraph=network_subgraph,
        indexer_address=_env_str("POI_RADIO_INDEXER_ADDRESS", "") or None,
        topics=tuple(_env_csv("POI_RADIO_SUBGRAPHS")),
        peer_urls=peer_urls,
        radio_name=_env_str("POI_RADIO_NAME", "poi-radio") or "poi-radio",
        panic_if_diverged=bool(panic_if_diverged),
        tick_seconds=max(0.1, float(tick_seconds)),
        wait_blocks=int(wait_blocks),
        buffer_limit=max(1, int(buffer_limit)),
        max_message_age_s=max(1, int(max_message_age_s)),
        query_timeout_s=max(0.5, float(query_timeout_s)),
        listen_host=_env_str("POI_RADIO_LISTEN_HOST", "127.0.0.1") or "127.0.0.1",
        listen_port=int(listen_port),
        network_intervals=network_intervals,
        mnemonic=_env_str("POI_RADIO_MNEMONIC", "") or None,
    )
