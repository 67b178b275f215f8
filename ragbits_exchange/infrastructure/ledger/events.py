"""Decoding of the proof id assigned by the ledger.

``recordProof`` returns nothing usable to an off-chain caller; the id is only
observable in the ``QueryProcessed`` event of the transaction receipt.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from importlib import import_module
from typing import Any

from ragbits_exchange.domain.errors import ProofRecordingFailedError

QUERY_PROCESSED_SIGNATURE = "QueryProcessed(uint256,address,bytes32)"


def event_topic(signature: str) -> str:
    """keccak256 of an event signature as 0x-prefixed lower-case hex."""
    web3 = import_module("web3")
    return to_hex(web3.Web3.keccak(text=signature))


def to_hex(value: Any) -> str:
    """Normalize a topic (bytes, HexBytes or hex string) to 0x-prefixed lower-case hex."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value).lower()
    return text if text.startswith("0x") else "0x" + text


def extract_proof_id(logs: Iterable[Mapping[str, Any]], topic: str) -> int:
    """Proof id from the first log whose topic0 is ``topic``.

    The first indexed argument (topic1) carries the id as a big-endian hex
    integer.

    Raises:
        ProofRecordingFailedError: no matching event, or it lacks the id topic
    """
    wanted = to_hex(topic)
    for log in logs:
        topics = list(log.get("topics") or [])
        if not topics or to_hex(topics[0]) != wanted:
            continue
        if len(topics) < 2:
            raise ProofRecordingFailedError("QueryProcessed event carries no proof id topic")
        return int(to_hex(topics[1]), 16)
    raise ProofRecordingFailedError("no QueryProcessed event in transaction receipt")
