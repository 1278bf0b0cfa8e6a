from __future__ import annotations

import hashlib
import json
import time
from typing import Any, Dict, Optional

import bittensor as bt

from poi_radio.protocol import RadioMessage


class IdentityRecoveryError(ValueError):
    """The message signature does not belong to the claimed sender."""


def canon_json(obj: Dict[str, Any]) -> bytes:
    # Stable canonical encoding for signing/verifying.
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True).encode("utf-8")


def sign_payload(payload: Dict[str, Any], *, keypair: bt.Keypair) -> str:
    sig = keypair.sign(canon_json(payload))
    return sig.hex()


def verify_payload(payload: Dict[str, Any], *, ss58_address: str, signature_hex: str) -> bool:
    try:
        sig = bytes.fromhex(signature_hex)
        kp = bt.Keypair(ss58_address=ss58_address)
        return bool(kp.verify(canon_json(payload), sig))
    except Exception:
        return False


def sign_message(
    keypair: bt.Keypair,
    *,
    identifier: str,
    network: str,
    block_number: int,
    content: str,
    radio_name: str = "poi-radio",
    nonce: Optional[int] = None,
) -> RadioMessage:
    payload = {
        "message_schema": "poi_radio_message_v0",
        "radio_name": radio_name,
        "identifier": identifier,
        "network": network,
        "block_number": int(block_number),
        "content": content,
        "sender": keypair.ss58_address,
        "nonce": int(nonce if nonce is not None else time.time()),
    }
    return RadioMessage(**payload, signature=sign_payload(payload, keypair=keypair))


def recover_sender(message: RadioMessage) -> str:
    if not verify_payload(message.signing_payload(), ss58_address=message.sender, signature_hex=message.signature):
        raise IdentityRecoveryError(f"Invalid signature for claimed sender {message.sender!r}")
    return message.sender


def message_id(message: RadioMessage) -> str:
    return hashlib.sha256(canon_json(message.model_dump())).hexdigest()
