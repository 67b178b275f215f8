"""Mapping of use-case results to HTTP status, headers and JSON bodies.

Why: The only place that knows status codes; use cases return typed errors.
"""

from dataclasses import dataclass, field
from typing import Any

from ragbits_exchange.application.dto.query_dto import PaidAnswer
from ragbits_exchange.domain.errors import (
    DatasetInactiveError,
    InsufficientBalanceError,
    NoRelevantDataError,
    NotFoundError,
    ValidationError,
)
from ragbits_exchange.domain.services.amounts import format_ether
from ragbits_exchange.domain.types import Result


@dataclass(frozen=True)
class HttpOutcome:
    status_code: int
    body: Any
    headers: dict[str, str] = field(default_factory=dict)


def paid_answer_body(answer: PaidAnswer) -> dict[str, Any]:
    proof = answer.proof
    return {
        "answer": answer.answer,
        "citations": [
            {"chunkId": c.chunk_id, "excerpt": c.excerpt, "score": c.score}
            for c in answer.citations
        ],
        "proof": {
            "id": proof.proof_id,
            "answerHash": proof.answer_hash,
            "datasetHash": proof.dataset_hash,
            "chunksUsed": proof.chunks_used,
            "cost": format_ether(proof.cost),
            "model": proof.model,
            "tokensUsed": proof.tokens_used,
            "timestamp": proof.timestamp,
        },
    }


def payment_required(err: InsufficientBalanceError) -> HttpOutcome:
    required = format_ether(err.required)
    balance = format_ether(err.balance)
    return HttpOutcome(
        status_code=402,
        body={"error": "Insufficient balance", "required": required, "balance": balance},
        headers={
            "X-Payment-Required": "true",
            "X-Payment-Contract": err.contract_address,
            "X-Required-Amount": required,
            "X-Current-Balance": balance,
            "X-Chunks-Count": str(err.chunks_count),
        },
    )


def error_outcome(err: BaseException) -> HttpOutcome:
    if isinstance(err, InsufficientBalanceError):
        return payment_required(err)
    if isinstance(err, DatasetInactiveError):
        return HttpOutcome(400, {"error": "Dataset not active"})
    if isinstance(err, ValidationError):
        return HttpOutcome(400, {"error": str(err)})
    if isinstance(err, NoRelevantDataError):
        return HttpOutcome(404, {"error": "No relevant information found"})
    if isinstance(err, NotFoundError):
        return HttpOutcome(404, {"error": str(err)})
    return HttpOutcome(500, {"error": str(err) or type(err).__name__})


def query_outcome(result: Result[PaidAnswer, Any]) -> HttpOutcome:
    if result.ok and result.value is not None:
        return HttpOutcome(200, paid_answer_body(result.value))
    assert result.error is not None
    return error_outcome(result.error)
