"""
Parametrized checks over the buffered peer messages.

A check stays PENDING until enough messages are buffered, then its predicate
decides PASS or FAIL. Plugged into the scheduler through `CheckHook`, this lets
a radio process assert on what its peers gossip and exit with the verdict.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Literal, Optional, Sequence

import bittensor as bt

from poi_radio.p2p.buffer import BufferedMessage


CheckVerdict = Literal["PENDING", "PASS", "FAIL"]
Predicate = Callable[[Sequence[BufferedMessage]], bool]


def deduplicate_messages(messages: Iterable[BufferedMessage]) -> List[BufferedMessage]:
    """Keep the first message of every sender."""
    seen = set()
    out: List[BufferedMessage] = []
    for m in messages:
        if m.sender in seen:
            continue
        seen.add(m.sender)
        out.append(m)
    return out


@dataclass(frozen=True)
class MessageCheck:
    name: str
    min_messages: int
    predicate: Predicate

    def evaluate(self, messages: Sequence[BufferedMessage]) -> CheckVerdict:
        if len(messages) < self.min_messages:
            return "PENDING"
        return "PASS" if self.predicate(messages) else "FAIL"


def num_messages(count: int = 5, ratio: float = 0.7) -> MessageCheck:
    def _enough_distinct_senders(messages: Sequence[BufferedMessage]) -> bool:
        if not messages:
            return False
        block = messages[-1].block_number
        latest = [m for m in messages if m.block_number == block]
        return len(deduplicate_messages(latest)) >= int(count * ratio)

    return MessageCheck("num_messages", count, _enough_distinct_senders)


def poi_ok(count: int = 5) -> MessageCheck:
    return MessageCheck("poi_ok", count, lambda messages: all(m.content for m in messages))


def skip_messages_from_self(own_address: str, count: int = 5) -> MessageCheck:
    return MessageCheck(
        "skip_messages_from_self",
        count,
        lambda messages: all(m.sender != own_address for m in messages),
    )


def topics_present(topics: Sequence[str], count: int = 5) -> MessageCheck:
    return MessageCheck(
        "topics_present",
        count,
        lambda messages: all(any(m.identifier == t for m in messages) for t in topics),
    )


def topics_absent(topics: Sequence[str], count: int = 5) -> MessageCheck:
    return MessageCheck(
        "topics_absent",
        count,
        lambda messages: all(m.identifier not in topics for m in messages),
    )


CHECKS: Dict[str, Callable[..., MessageCheck]] = {
    "num_messages": num_messages,
    "poi_ok": poi_ok,
    "skip_messages_from_self": skip_messages_from_self,
    "topics_present": topics_present,
    "topics_absent": topics_absent,
}


class CheckHook:
    """Scheduler `on_messages` callback that stops the radio once a check decides."""

    def __init__(self, check: MessageCheck, stop_event: threading.Event) -> None:
        self.check = check
        self.stop_event = stop_event
        self.verdict: CheckVerdict = "PENDING"

    def __call__(self, messages: Sequence[BufferedMessage]) -> None:
        if self.verdict != "PENDING":
            return
        verdict = self.check.evaluate(messages)
        if verdict == "PENDING":
            bt.logging.debug(f"{self.check.name}: {len(messages)}/{self.check.min_messages} message(s) buffered")
            return
        self.verdict = verdict
        if verdict == "PASS":
            bt.logging.info(f"{self.check.name} check is successful")
        else:
            bt.logging.error(f"{self.check.name} check failed")
        self.stop_event.set()

    @property
    def exit_code(self) -> Optional[int]:
        if self.verdict == "PENDING":
            return None
        return 0 if self.verdict == "PASS" else 1
