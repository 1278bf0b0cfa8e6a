"""Block-windowed control loop driving POI production and comparison."""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import bittensor as bt

from poi_radio.attestation.aggregator import AggregationError, aggregate
from poi_radio.attestation.comparator import ComparisonResult, compare_block
from poi_radio.attestation.models import BlockClock, SubgraphStatus
from poi_radio.graphql.client import QueryError
from poi_radio.p2p.buffer import BufferedMessage
from poi_radio.p2p.gossip_client import TransportError
from poi_radio.radio.context import RadioContext


MessagesHook = Callable[[Sequence[BufferedMessage]], None]


class PoiDivergedError(RuntimeError):
    def __init__(self, result: ComparisonResult) -> None:
        super().__init__(result.describe())
        self.result = result


def message_block_for(head_number: int, interval: int) -> int:
    """Latest interval boundary at or below `head_number`."""
    return head_number - head_number % interval


@dataclass(frozen=True)
class _Target:
    identifier: str
    network: str
    interval: int
    status: SubgraphStatus

    @property
    def message_block(self) -> int:
        return message_block_for(self.status.head.number, self.interval)


class BlockScheduler:
    """
    Polls the graph node and, per network:

    - produces and gossips one POI per examination interval for every tracked
      subgraph
    - once the chain head reaches a pending compare block, aggregates the buffered peer
      messages and compares them against the local POIs of the block that is
      `wait_blocks` behind

    Networks advance independently. All work happens on the calling thread.
    """

    def __init__(self, ctx: RadioContext, *, on_messages: Optional[MessagesHook] = None) -> None:
        self.ctx = ctx
        self.on_messages = on_messages
        self.clocks: Dict[str, BlockClock] = {}
        self.tick_count = 0

    @property
    def wait_blocks(self) -> int:
        return self.ctx.config.wait_blocks

    def run(self) -> None:
        bt.logging.info(
            f"Radio loop started: {len(self.ctx.topics)} subgraph(s), "
            f"tick={self.ctx.config.tick_seconds}s, wait={self.wait_blocks} block(s)"
        )
        while not self.ctx.stopping:
            try:
                self.tick()
            except PoiDivergedError:
                raise
            except Exception:
                bt.logging.error(f"Unexpected error in radio tick:\n{traceback.format_exc()}")
            self.ctx.stop_event.wait(self.ctx.config.tick_seconds)
        bt.logging.info("Radio loop stopped.")

    def tick(self) -> List[ComparisonResult]:
        if self.ctx.stopping:
            return []
        self.tick_count += 1

        try:
            statuses = self.ctx.queries.get_chain_head_blocks()
        except QueryError as exc:
            bt.logging.error(f"Could not query indexing statuses, pulling again next tick: {exc}")
            return []

        targets = self._resolve_targets(statuses)
        by_network: Dict[str, List[str]] = {}
        heads: Dict[str, int] = {}
        for t in targets:
            by_network.setdefault(t.network, []).append(t.identifier)
            heads[t.network] = max(heads.get(t.network, 0), t.status.head.number)
        for network, head in heads.items():
            self.clocks.setdefault(network, BlockClock()).current_block = head

        results: List[ComparisonResult] = []
        for network in sorted(by_network):
            results.extend(self._compare_network(network, by_network[network]))

        for t in targets:
            if self.ctx.stopping:
                break
            self._produce(t)
        return results

    def _resolve_targets(self, statuses: Dict[str, SubgraphStatus]) -> List[_Target]:
        targets: List[_Target] = []
        for identifier in self.ctx.topics:
            status = statuses.get(identifier)
            if status is None:
                bt.logging.error(
                    f"Could not find the indexing network of {identifier}; check the graph node's indexing statuses"
                )
                continue
            interval = self.ctx.registry.interval(status.network)
            if interval is None:
                bt.logging.warning(f"Subgraph {identifier} is indexing unsupported network {status.network!r}; skipping")
                continue
            targets.append(_Target(identifier=identifier, network=status.network, interval=interval, status=status))
        return targets

    def _compare_network(self, network: str, identifiers: List[str]) -> List[ComparisonResult]:
        clock = self.clocks[network]
        due = clock.due()
        if not due:
            return []

        snapshot = self.ctx.buffer.snapshot()
        if self.on_messages is not None:
            self.on_messages(snapshot)
        if self.ctx.stopping:
            return []

        target_blocks = [b - self.wait_blocks for b in due]
        bt.logging.debug(f"Comparing attestations for {network} block(s) {target_blocks} over {len(snapshot)} message(s)")
        try:
            remote = aggregate(snapshot, self.ctx.queries.get_stake)
        except AggregationError as exc:
            bt.logging.error(f"An error occurred while processing messages, retrying next tick: {exc}")
            return []

        results: List[ComparisonResult] = []
        with self.ctx.local_store.locked() as local:
            for target_block in target_blocks:
                results.extend(compare_block(target_block, remote, local, identifiers=identifiers))
        clock.compare_blocks.difference_update(due)

        # Consumed entries must not count again in a later pass.
        last_seq = snapshot[-1].seq if snapshot else 0
        last_target = target_blocks[-1]
        compared = set(identifiers)
        dropped = self.ctx.buffer.drop(
            lambda e: e.seq <= last_seq and e.identifier in compared and e.block_number <= last_target
        )
        bt.logging.debug(f"Dropped {dropped} consumed message(s) for {network}")

        for result in results:
            self._report(result)
        return results

    def _produce(self, target: _Target) -> None:
        identifier, network = target.identifier, target.network
        message_block = target.message_block

        if target.status.block.number < message_block:
            bt.logging.debug(
                f"{identifier} indexed up to {target.status.block.number}, waiting for block {message_block}"
            )
            return
        if self.ctx.local_store.get(identifier, message_block) is not None:
            return

        try:
            block_hash = self.ctx.queries.get_canonical_block_hash(network, message_block)
            if self.ctx.stopping:
                return
            content = self.ctx.queries.get_work_item_value(identifier, block_hash, message_block)
        except QueryError as exc:
            bt.logging.error(f"Failed to query POI for {identifier} on {network} block {message_block}: {exc}")
            return

        self.ctx.local_store.record(identifier, message_block, content, self.ctx.own_stake)
        self.clocks.setdefault(network, BlockClock()).compare_blocks.add(message_block + self.wait_blocks)

        if self.ctx.stopping:
            return
        try:
            sent = self.ctx.gossip.publish(identifier, network, message_block, content)
        except TransportError as exc:
            bt.logging.error(f"Failed to send message for {identifier}@{message_block}: {exc}")
            return
        bt.logging.info(f"Sent message id {sent} for {identifier} on {network} block {message_block}")

    def _report(self, result: ComparisonResult) -> None:
        if result.verdict == "MATCH":
            bt.logging.info(result.describe())
        elif result.verdict == "INCONCLUSIVE":
            bt.logging.debug(result.describe())
        else:
            bt.logging.error(result.describe())
            if self.ctx.config.panic_if_diverged:
                raise PoiDivergedError(result)
