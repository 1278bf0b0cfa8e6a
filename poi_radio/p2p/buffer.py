from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List

import bittensor as bt

from poi_radio.protocol import RadioMessage


@dataclass(frozen=True)
class BufferedMessage:
    seq: int
    sender: str
    message: RadioMessage

    @property
    def identifier(self) -> str:
        return self.message.identifier

    @property
    def block_number(self) -> int:
        return self.message.block_number

    @property
    def content(self) -> str:
        return self.message.content


class IngestionBuffer:
    """
    Validated inbound messages waiting for the next comparison pass.

    The relay only appends; the scheduler snapshots and drops. Every operation
    holds the lock for an in-memory step only. When `max_messages` is reached
    the oldest entries are evicted.
    """

    def __init__(self, max_messages: int = 10_000) -> None:
        self.max_messages = max(1, int(max_messages))
        self._lock = threading.Lock()
        self._entries: Deque[BufferedMessage] = deque()
        self._next_seq = 1
        self.evicted = 0

    def deliver(self, sender: str, message: RadioMessage) -> BufferedMessage:
        with self._lock:
            entry = BufferedMessage(seq=self._next_seq, sender=sender, message=message)
            self._next_seq += 1
            self._entries.append(entry)
            overflow = len(self._entries) - self.max_messages
            for _ in range(max(0, overflow)):
                self._entries.popleft()
            self.evicted += max(0, overflow)
        if overflow > 0:
            bt.logging.warning(f"Ingestion buffer full ({self.max_messages}); evicted {overflow} oldest message(s)")
        return entry

    def snapshot(self) -> List[BufferedMessage]:
        with self._lock:
            return list(self._entries)

    def drop(self, predicate: Callable[[BufferedMessage], bool]) -> int:
        """Remove every entry matching `predicate`; returns how many were removed."""
        with self._lock:
            kept = [e for e in self._entries if not predicate(e)]
            removed = len(self._entries) - len(kept)
            self._entries = deque(kept)
        return removed

    def clear(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
