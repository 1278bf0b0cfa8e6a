import time
from typing import Iterable

import bittensor as bt
from fastapi import FastAPI, HTTPException

from poi_radio import __version__
from poi_radio.p2p.buffer import IngestionBuffer
from poi_radio.p2p.signing import IdentityRecoveryError, recover_sender
from poi_radio.protocol import DeliveryReceipt, RadioMessage


def create_app(
    buffer: IngestionBuffer,
    *,
    own_address: str,
    topics: Iterable[str] = (),
    radio_name: str = "poi-radio",
    max_message_age_s: int = 120,
) -> FastAPI:
    """
    Inbound side of the transport bridge.

    Only validated messages reach the buffer: the sender must be recoverable
    from the signature, the nonce fresh, and the message addressed to this
    radio. An empty `topics` accepts every subgraph.
    """
    topic_set = set(topics)
    app = FastAPI(title="poi-radio relay", version=__version__)

    @app.get("/healthz")
    def healthz():
        return {
            "ok": True,
            "radio_name": radio_name,
            "sender": own_address,
            "topics": sorted(topic_set),
            "buffered": len(buffer),
        }

    @app.post("/messages", response_model=DeliveryReceipt)
    def receive(message: RadioMessage):
        try:
            sender = recover_sender(message)
        except IdentityRecoveryError as exc:
            bt.logging.error(f"Dropping message for {message.identifier}@{message.block_number}: {exc}")
            raise HTTPException(status_code=401, detail="Invalid signature")

        now = int(time.time())
        if abs(now - message.nonce) > max_message_age_s:
            bt.logging.debug(f"Dropping stale message from {sender} (nonce={message.nonce}, now={now})")
            raise HTTPException(status_code=400, detail="Bad timestamp")

        if message.radio_name != radio_name:
            return DeliveryReceipt(accepted=False, reason="other_radio")
        if sender == own_address:
            return DeliveryReceipt(accepted=False, reason="self")
        if topic_set and message.identifier not in topic_set:
            return DeliveryReceipt(accepted=False, reason="unsubscribed_topic")

        entry = buffer.deliver(sender, message)
        bt.logging.trace(f"Buffered message #{entry.seq} from {sender} for {message.identifier}@{message.block_number}")
        return DeliveryReceipt(accepted=True, seq=entry.seq)

    return app
