import pytest
from web3 import Web3

from ragbits_exchange.domain.errors import ProofRecordingFailedError
from ragbits_exchange.infrastructure.ledger.events import (
    QUERY_PROCESSED_SIGNATURE,
    event_topic,
    extract_proof_id,
    to_hex,
)

TOPIC = event_topic(QUERY_PROCESSED_SIGNATURE)
OTHER_TOPIC = event_topic("Transfer(address,address,uint256)")


def _uint_topic(value: int) -> bytes:
    return value.to_bytes(32, "big")


def test_event_topic_is_keccak_of_signature():
    assert TOPIC == "0x" + bytes(Web3.keccak(text=QUERY_PROCESSED_SIGNATURE)).hex()


def test_to_hex_normalizes_bytes_and_strings():
    assert to_hex(b"\x01\xab") == "0x01ab"
    assert to_hex("0xABCD") == "0xabcd"
    assert to_hex("abcd") == "0xabcd"


def test_extracts_id_from_first_matching_log():
    logs = [
        {"topics": [bytes.fromhex(OTHER_TOPIC[2:]), _uint_topic(1)]},
        {"topics": [bytes.fromhex(TOPIC[2:]), _uint_topic(42), _uint_topic(0)]},
        {"topics": [bytes.fromhex(TOPIC[2:]), _uint_topic(43)]},
    ]
    assert extract_proof_id(logs, TOPIC) == 42


def test_accepts_hex_string_topics():
    logs = [{"topics": [TOPIC.upper().replace("0X", "0x"), "0x" + "00" * 31 + "ff"]}]
    assert extract_proof_id(logs, TOPIC) == 255


def test_missing_event_fails_recording():
    with pytest.raises(ProofRecordingFailedError):
        extract_proof_id([{"topics": [OTHER_TOPIC]}, {"topics": []}, {}], TOPIC)


def test_event_without_id_topic_fails_recording():
    with pytest.raises(ProofRecordingFailedError):
        extract_proof_id([{"topics": [TOPIC]}], TOPIC)
