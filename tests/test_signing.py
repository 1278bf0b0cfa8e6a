import bittensor as bt
import pytest

from poi_radio.p2p.signing import (
    IdentityRecoveryError,
    message_id,
    recover_sender,
    sign_message,
    sign_payload,
    verify_payload,
)


def test_signing_roundtrip():
    kp = bt.Keypair.create_from_seed("01" * 32)
    payload = {"a": 1, "b": "two", "nested": {"x": True}}

    sig = sign_payload(payload, keypair=kp)
    assert isinstance(sig, str) and len(sig) > 0

    assert verify_payload(payload, ss58_address=kp.ss58_address, signature_hex=sig) is True
    assert verify_payload({"a": 2, "b": "two", "nested": {"x": True}}, ss58_address=kp.ss58_address, signature_hex=sig) is False


def test_verify_rejects_garbage_inputs():
    kp = bt.Keypair.create_from_seed("01" * 32)

    assert verify_payload({"a": 1}, ss58_address=kp.ss58_address, signature_hex="not-hex") is False
    assert verify_payload({"a": 1}, ss58_address="not-an-address", signature_hex="00") is False


def test_recover_sender_from_signed_message():
    kp = bt.Keypair.create_from_seed("02" * 32)
    msg = sign_message(kp, identifier="Qm1", network="mainnet", block_number=100, content="0xabc")

    assert msg.sender == kp.ss58_address
    assert recover_sender(msg) == kp.ss58_address


def test_recover_sender_rejects_tampered_message():
    kp = bt.Keypair.create_from_seed("02" * 32)
    other = bt.Keypair.create_from_seed("03" * 32)
    msg = sign_message(kp, identifier="Qm1", network="mainnet", block_number=100, content="0xabc")

    with pytest.raises(IdentityRecoveryError):
        recover_sender(msg.model_copy(update={"content": "0xdef"}))
    with pytest.raises(IdentityRecoveryError):
        recover_sender(msg.model_copy(update={"sender": other.ss58_address}))


def test_message_id_depends_on_content():
    kp = bt.Keypair.create_from_seed("02" * 32)
    a = sign_message(kp, identifier="Qm1", network="mainnet", block_number=100, content="0xabc", nonce=1)
    b = sign_message(kp, identifier="Qm1", network="mainnet", block_number=100, content="0xdef", nonce=1)

    assert message_id(a) == message_id(a.model_copy())
    assert message_id(a) != message_id(b)
    assert len(message_id(a)) == 64
