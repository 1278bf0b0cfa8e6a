"""Wire schema for messages exchanged between POI radios.

Keep message types here so the relay, the gossip client and tests share one
definition:

  from poi_radio.protocol import RadioMessage
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


class RadioMessage(BaseModel):
    message_schema: Literal["poi_radio_message_v0"] = "poi_radio_message_v0"

    # Radios sharing a relay only consume messages carrying their own name.
    radio_name: str = "poi-radio"

    # Subgraph deployment (IPFS hash) the POI is about.
    identifier: str
    network: str
    block_number: int = Field(ge=0)
    # The claimed POI.
    content: str

    # Sender identity (ss58 address of the radio's signing key).
    sender: str
    # Unix timestamp at signing time; receivers reject stale nonces.
    nonce: int

    # Signature over the canonicalized payload (all fields except signature).
    signature: str

    def signing_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"signature"})


class DeliveryReceipt(BaseModel):
    ok: bool = True
    accepted: bool
    reason: str = ""
    seq: Optional[int] = None
