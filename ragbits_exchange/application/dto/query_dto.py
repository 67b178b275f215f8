# ragbits_exchange/application/dto/query_dto.py
from __future__ import annotations

from dataclasses import dataclass

from ragbits_exchange.domain.models import Citation


@dataclass(frozen=True)
class QueryRequest:
    """
    DTO for one paid query.

    - query: user question (non-empty)
    - dataset_hash: root hash of an existing, active dataset
    - user_address: account whose deposited balance pays for the chunks
    """

    query: str
    dataset_hash: str
    user_address: str


@dataclass(frozen=True)
class ProofSummary:
    """Proof recorded for an answer. ``cost`` is in wei."""

    proof_id: int
    answer_hash: str
    dataset_hash: str
    chunks_used: int
    cost: int
    model: str
    tokens_used: int
    timestamp: int  # ms, the instant committed to by answer_hash


@dataclass(frozen=True)
class PaidAnswer:
    """Complete paid answer with citations and its on-chain proof."""

    answer: str
    citations: list[Citation]
    proof: ProofSummary
