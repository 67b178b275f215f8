# ragbits_exchange/application/use_cases/process_paid_query.py
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any

from ragbits_exchange.application.dto.query_dto import PaidAnswer, ProofSummary, QueryRequest
from ragbits_exchange.application.ports.clock_port import ClockPort
from ragbits_exchange.application.ports.ledger_port import LedgerPort
from ragbits_exchange.application.ports.telemetry_port import TelemetryPort
from ragbits_exchange.application.services.answer_synthesizer import AnswerSynthesizer
from ragbits_exchange.application.services.dataset_storage import DatasetStorage
from ragbits_exchange.domain.errors import (
    DatasetInactiveError,
    DomainError,
    InsufficientBalanceError,
    LedgerError,
    NoRelevantDataError,
    ProofRecordingFailedError,
    StorageUnavailableError,
    ValidationError,
)
from ragbits_exchange.domain.models import Citation, ScoredChunk
from ragbits_exchange.domain.services.identifiers import is_account_address, is_root_hash
from ragbits_exchange.domain.types import Result

logger = logging.getLogger(__name__)

EXCERPT_CHARS = 150


class QueryStage(str, Enum):
    VALIDATION = "validation"
    BALANCE_CHECK = "balance_check"
    DATASET_CHECK = "dataset_check"
    RETRIEVAL = "retrieval"
    PAYMENT_GATE = "payment_gate"
    SYNTHESIS = "synthesis"
    PROOF_RECORDING = "proof_recording"
    DONE = "done"


# Error kind for unexpected (non-domain) exceptions escaping a stage.
_STAGE_FAILURES: dict[QueryStage, type[DomainError]] = {
    QueryStage.BALANCE_CHECK: LedgerError,
    QueryStage.DATASET_CHECK: LedgerError,
    QueryStage.RETRIEVAL: StorageUnavailableError,
    QueryStage.PROOF_RECORDING: ProofRecordingFailedError,
}


def make_excerpt(text: str) -> str:
    return text[:EXCERPT_CHARS] + "..."


class ProcessPaidQuery:
    """
    Application Use-Case for one paid query:
    balance -> dataset -> retrieval -> payment gate -> synthesis -> proof.

    Each stage runs once; the first failure ends the pipeline and is returned
    as a typed error in ``Result``. Balance sufficiency is a point-in-time
    admission check, not a reservation: the ledger debits at proof recording,
    and the balance may change in between (concurrent queries, withdrawals).
    A submitted proof is never retracted.
    """

    def __init__(
        self,
        ledger: LedgerPort,
        storage: DatasetStorage,
        synthesizer: AnswerSynthesizer,
        clock: ClockPort,
        telemetry: TelemetryPort | None = None,
        max_chunks: int = 5,
    ) -> None:
        self.ledger = ledger
        self.storage = storage
        self.synthesizer = synthesizer
        self.clock = clock
        self.telemetry = telemetry
        self.max_chunks = max_chunks

    def execute(self, req: QueryRequest) -> Result[PaidAnswer, DomainError]:
        started = time.perf_counter()

        # 1) Validate
        try:
            self._validate(req)
        except ValidationError as ex:
            return self._fail(QueryStage.VALIDATION, ex, started)

        # 2) Balance (point-in-time read, no reservation)
        try:
            balance = self.ledger.get_balance(req.user_address)
        except Exception as ex:
            return self._fail(QueryStage.BALANCE_CHECK, ex, started)

        # 3) Dataset descriptor
        try:
            info = self.ledger.get_dataset_info(req.dataset_hash)
        except Exception as ex:
            return self._fail(QueryStage.DATASET_CHECK, ex, started)
        if not info.active:
            return self._fail(
                QueryStage.DATASET_CHECK, DatasetInactiveError("Dataset not active"), started
            )
        # Descriptor root is canonical (lower-case hex); the request may differ in case.
        dataset_hash = info.root_hash

        # 4) Retrieval
        try:
            chunks = self.storage.search(dataset_hash, req.query, self.max_chunks)
        except Exception as ex:
            return self._fail(QueryStage.RETRIEVAL, ex, started)
        if not chunks:
            return self._fail(
                QueryStage.RETRIEVAL, NoRelevantDataError("No relevant information found"), started
            )

        # 5) Payment gate
        cost = len(chunks) * info.price_per_chunk
        if balance < cost:
            err = InsufficientBalanceError(
                required=cost,
                balance=balance,
                chunks_count=len(chunks),
                contract_address=self.ledger.contract_address,
            )
            return self._fail(QueryStage.PAYMENT_GATE, err, started)

        # 6) Synthesis; the timestamp is captured once and reused below
        synthesized = self.synthesizer.synthesize(req.query, chunks)
        timestamp_ms = self.clock.now_ms()
        answer_hash = self.synthesizer.proof_hash(
            synthesized.answer, chunks, synthesized.model, timestamp_ms
        )

        # 7) Proof recording (single attempt, never retried)
        try:
            proof_id = self.ledger.record_proof(
                answer_hash,
                dataset_hash,
                [c.id for c in chunks],
                req.user_address,
                synthesized.model,
            )
        except Exception as ex:
            return self._fail(QueryStage.PROOF_RECORDING, ex, started)

        logger.info(
            "Recorded proof %s for %s on %s (%d chunks, cost %d wei)",
            proof_id,
            req.user_address,
            dataset_hash,
            len(chunks),
            cost,
        )
        self._record_outcome("success", QueryStage.DONE, started)
        return Result.success(
            PaidAnswer(
                answer=synthesized.answer,
                citations=self._citations(chunks),
                proof=ProofSummary(
                    proof_id=proof_id,
                    answer_hash=answer_hash,
                    dataset_hash=dataset_hash,
                    chunks_used=len(chunks),
                    cost=cost,
                    model=synthesized.model,
                    tokens_used=synthesized.tokens_used,
                    timestamp=timestamp_ms,
                ),
            )
        )

    @staticmethod
    def _validate(req: QueryRequest) -> None:
        if not req.query or not req.query.strip():
            raise ValidationError("query must not be empty")
        if not is_root_hash(req.dataset_hash):
            raise ValidationError("datasetHash must be a 0x-prefixed 32-byte hex string")
        if not is_account_address(req.user_address):
            raise ValidationError("userAddress must be a 0x-prefixed 20-byte hex address")

    @staticmethod
    def _citations(chunks: list[ScoredChunk]) -> list[Citation]:
        return [
            Citation(chunk_id=c.id, excerpt=make_excerpt(c.text), score=c.score) for c in chunks
        ]

    def _fail(
        self, stage: QueryStage, ex: Exception, started: float
    ) -> Result[PaidAnswer, DomainError]:
        if isinstance(ex, DomainError):
            err = ex
            logger.info("Query stopped at %s: %s: %s", stage.value, type(err).__name__, err)
        else:
            kind = _STAGE_FAILURES.get(stage, DomainError)
            err = kind(f"{stage.value} failed: {ex}")
            logger.error("Query failed at %s: %s", stage.value, ex, exc_info=ex)
        self._record_outcome(type(err).__name__, stage, started)
        return Result.failure(err)

    def _record_outcome(self, outcome: str, stage: QueryStage, started: float) -> None:
        if self.telemetry is None:
            return
        tags: dict[str, Any] = {"outcome": outcome, "stage": stage.value}
        self.telemetry.incr("ragbits.queries.total", tags)
        self.telemetry.observe(
            "ragbits.query.latency_ms", (time.perf_counter() - started) * 1000.0, tags
        )
