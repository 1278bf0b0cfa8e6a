from __future__ import annotations

from typing import List, Sequence

import bittensor as bt
import requests

from poi_radio.p2p.signing import message_id, sign_message


class TransportError(RuntimeError):
    """No configured peer accepted a published message."""


class GossipClient:
    def __init__(
        self,
        peer_urls: Sequence[str],
        keypair: bt.Keypair,
        *,
        radio_name: str = "poi-radio",
        timeout_s: float = 5.0,
    ) -> None:
        self.peer_urls = [u.rstrip("/") for u in peer_urls if u]
        self.keypair = keypair
        self.radio_name = radio_name
        self.timeout_s = timeout_s

    @property
    def address(self) -> str:
        return self.keypair.ss58_address

    def publish(self, identifier: str, network_name: str, block_number: int, claimed_value: str) -> str:
        msg = sign_message(
            self.keypair,
            identifier=identifier,
            network=network_name,
            block_number=block_number,
            content=claimed_value,
            radio_name=self.radio_name,
        )
        body = msg.model_dump()

        delivered = 0
        errors: List[str] = []
        for url in self.peer_urls:
            try:
                requests.post(f"{url}/messages", json=body, timeout=self.timeout_s).raise_for_status()
                delivered += 1
            except requests.RequestException as exc:
                bt.logging.debug(f"Peer {url} rejected message for {identifier}@{block_number}: {exc}")
                errors.append(f"{url}: {exc}")

        if self.peer_urls and not delivered:
            raise TransportError(f"No peer accepted the message ({'; '.join(errors)})")
        return message_id(msg)
