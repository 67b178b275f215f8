"""Tests for the ProcessPaidQuery use case."""

import pytest
from fakes import (
    CONTRACT,
    DATASET_TEXT,
    FIXED_NOW_MS,
    PRICE,
    QUERY,
    ROOT,
    USER,
    FakeClock,
    FakeContentStore,
    FakeLedger,
    FakeLLM,
    FakeTelemetry,
    sha_root,
)

from ragbits_exchange.application.dto.query_dto import QueryRequest
from ragbits_exchange.application.services.answer_synthesizer import AnswerSynthesizer
from ragbits_exchange.application.services.dataset_storage import DatasetStorage
from ragbits_exchange.application.use_cases.process_paid_query import (
    ProcessPaidQuery,
    make_excerpt,
)
from ragbits_exchange.domain.errors import (
    DatasetInactiveError,
    DatasetNotFoundError,
    GatewayTimeoutError,
    InsufficientBalanceError,
    LedgerError,
    NoRelevantDataError,
    ProofRecordingFailedError,
    StorageUnavailableError,
    ValidationError,
)
from ragbits_exchange.domain.services.proof_hashing import answer_hash


@pytest.fixture
def ledger() -> FakeLedger:
    ledger = FakeLedger(balance=10**18)
    ledger.add_dataset()
    return ledger


@pytest.fixture
def store() -> FakeContentStore:
    store = FakeContentStore()
    store.objects[ROOT] = DATASET_TEXT.encode("utf-8")
    return store


@pytest.fixture
def telemetry() -> FakeTelemetry:
    return FakeTelemetry()


def make_use_case(ledger, store, llm=None, telemetry=None) -> ProcessPaidQuery:
    return ProcessPaidQuery(
        ledger=ledger,
        storage=DatasetStorage(store),
        synthesizer=AnswerSynthesizer(llm=llm),
        clock=FakeClock(),
        telemetry=telemetry,
    )


def ask(uc: ProcessPaidQuery, query: str = QUERY, dataset: str = ROOT, user: str = USER):
    return uc.execute(QueryRequest(query=query, dataset_hash=dataset, user_address=user))


class TestSuccess:
    def test_fallback_answer_with_proof(self, ledger, store) -> None:
        result = ask(make_use_case(ledger, store))

        assert result.ok and result.value is not None
        paid = result.value
        assert paid.answer == (
            "Solar panels convert sunlight into electricity. "
            "Batteries store electricity for later use."
        )
        assert [(c.chunk_id, c.score) for c in paid.citations] == [(0, 3), (2, 2)]
        assert paid.citations[0].excerpt == make_excerpt(
            "Solar panels convert sunlight into electricity. Panels degrade slowly over time."
        )
        assert paid.proof.proof_id == 7
        assert paid.proof.chunks_used == 2
        assert paid.proof.cost == 2 * PRICE
        assert paid.proof.model == "fallback"
        assert paid.proof.tokens_used == 0

    def test_proof_hash_is_reproducible_from_returned_timestamp(self, ledger, store) -> None:
        paid = ask(make_use_case(ledger, store)).value
        assert paid is not None
        assert paid.proof.timestamp == FIXED_NOW_MS
        assert paid.proof.answer_hash == answer_hash(
            paid.answer, [0, 2], "fallback", FIXED_NOW_MS
        )

    def test_recorded_proof_matches_response(self, ledger, store) -> None:
        paid = ask(make_use_case(ledger, store)).value
        assert paid is not None
        [recorded] = ledger.recorded
        assert recorded == {
            "answer_hash": paid.proof.answer_hash,
            "dataset_hash": ROOT,
            "chunk_ids": [0, 2],
            "user": USER,
            "model_used": "fallback",
        }

    def test_remote_model_is_committed_to(self, ledger, store) -> None:
        paid = ask(make_use_case(ledger, store, llm=FakeLLM())).value
        assert paid is not None
        assert paid.proof.model == "test-llm"
        assert paid.proof.tokens_used == 42
        assert ledger.recorded[0]["model_used"] == "test-llm"

    def test_inference_outage_still_answers(self, ledger, store) -> None:
        llm = FakeLLM(error=TimeoutError("inference timed out"))
        result = ask(make_use_case(ledger, store, llm=llm))
        assert result.ok and result.value is not None
        assert result.value.proof.model == "fallback"

    def test_balance_exactly_equal_to_cost_is_admitted(self, ledger, store) -> None:
        ledger.balance = 2 * PRICE
        assert ask(make_use_case(ledger, store)).ok

    def test_success_is_counted(self, ledger, store, telemetry) -> None:
        ask(make_use_case(ledger, store, telemetry=telemetry))
        assert telemetry.counters == [
            ("ragbits.queries.total", {"outcome": "success", "stage": "done"})
        ]
        assert telemetry.observations[0][0] == "ragbits.query.latency_ms"


class TestRejections:
    def test_insufficient_balance_is_a_payment_challenge(self, ledger, store) -> None:
        ledger.balance = 2 * PRICE - 1
        result = ask(make_use_case(ledger, store))

        assert not result.ok
        err = result.error
        assert isinstance(err, InsufficientBalanceError)
        assert err.required == 2 * PRICE
        assert err.balance == 2 * PRICE - 1
        assert err.chunks_count == 2
        assert err.contract_address == CONTRACT
        assert ledger.recorded == []

    def test_inactive_dataset(self, ledger, store) -> None:
        ledger.add_dataset(active=False)
        result = ask(make_use_case(ledger, store))
        assert isinstance(result.error, DatasetInactiveError)
        assert store.gets == 0
        assert ledger.recorded == []

    def test_unregistered_dataset(self, ledger, store) -> None:
        result = ask(make_use_case(ledger, store), dataset="0x" + "ee" * 32)
        assert isinstance(result.error, DatasetNotFoundError)

    def test_no_relevant_chunks(self, ledger, store) -> None:
        llm = FakeLLM()
        result = ask(make_use_case(ledger, store, llm=llm), query="quantum chromodynamics")
        assert isinstance(result.error, NoRelevantDataError)
        assert llm.calls == []
        assert ledger.recorded == []

    @pytest.mark.parametrize(
        "query, dataset, user",
        [
            ("   ", ROOT, USER),
            (QUERY, "not-a-hash", USER),
            (QUERY, ROOT, "0x1234"),
        ],
    )
    def test_validation(self, ledger, store, query, dataset, user) -> None:
        result = ask(make_use_case(ledger, store), query=query, dataset=dataset, user=user)
        assert isinstance(result.error, ValidationError)

    def test_rejection_is_counted_with_stage(self, ledger, store, telemetry) -> None:
        ledger.balance = 0
        ask(make_use_case(ledger, store, telemetry=telemetry))
        assert telemetry.counters == [
            (
                "ragbits.queries.total",
                {"outcome": "InsufficientBalanceError", "stage": "payment_gate"},
            )
        ]


class TestGatewayFailures:
    def test_unexpected_balance_failure_is_ledger_error(self, ledger, store) -> None:
        ledger.balance_error = ConnectionError("rpc down")
        result = ask(make_use_case(ledger, store))
        assert isinstance(result.error, LedgerError)
        assert "rpc down" in str(result.error)

    def test_storage_failure(self, ledger, store) -> None:
        store.get_error = OSError("disk full")
        result = ask(make_use_case(ledger, store))
        assert isinstance(result.error, StorageUnavailableError)

    def test_storage_timeout_keeps_its_type(self, ledger, store) -> None:
        store.get_error = GatewayTimeoutError(gateway="storage", timeout_s=60)
        result = ask(make_use_case(ledger, store))
        assert isinstance(result.error, GatewayTimeoutError)

    def test_proof_recording_failure_returns_no_answer(self, ledger, store) -> None:
        ledger.record_error = RuntimeError("execution reverted: not authorized")
        result = ask(make_use_case(ledger, store))
        assert not result.ok and result.value is None
        assert isinstance(result.error, ProofRecordingFailedError)

    def test_receipt_timeout_reports_pending_transaction(self, ledger, store) -> None:
        ledger.record_error = GatewayTimeoutError(
            gateway="ledger", timeout_s=120, tx_hash="0xfeed"
        )
        result = ask(make_use_case(ledger, store))
        assert isinstance(result.error, GatewayTimeoutError)
        assert result.error.tx_hash == "0xfeed"


class TestSmallDataset:
    TEXT = b"cats are great\n\ndogs are loyal"

    @pytest.fixture
    def cats_root(self, ledger, store) -> str:
        root = sha_root(self.TEXT)
        store.objects[root] = self.TEXT
        ledger.add_dataset(root_hash=root, total=2)
        return root

    def test_only_matching_chunk_is_paid_for(self, ledger, store, cats_root) -> None:
        result = ask(make_use_case(ledger, store), query="tell me about cats", dataset=cats_root)

        assert result.ok and result.value is not None
        assert [(c.chunk_id, c.score) for c in result.value.citations] == [(0, 1)]
        assert result.value.proof.cost == PRICE
        assert ledger.recorded[0]["chunk_ids"] == [0]

    def test_empty_balance_is_challenged_for_one_chunk(self, ledger, store, cats_root) -> None:
        ledger.balance = 0
        result = ask(make_use_case(ledger, store), query="tell me about cats", dataset=cats_root)

        err = result.error
        assert isinstance(err, InsufficientBalanceError)
        assert err.chunks_count == 1
        assert err.required == PRICE
        assert ledger.recorded == []


class TestDatasetHashCase:
    def test_upper_case_hash_resolves_to_uploaded_dataset(self, ledger, tmp_path) -> None:
        path = tmp_path / "energy.txt"
        path.write_text(DATASET_TEXT, encoding="utf-8")
        store = FakeContentStore()
        storage = DatasetStorage(store)
        storage.upload(path, "ipfs://energy")
        upper = "0x" + ROOT[2:].upper()
        assert upper != ROOT
        # The ledger matches bytes32 keys regardless of hex case.
        ledger.datasets[upper] = ledger.datasets[ROOT]
        uc = ProcessPaidQuery(
            ledger=ledger,
            storage=storage,
            synthesizer=AnswerSynthesizer(),
            clock=FakeClock(),
        )

        result = ask(uc, dataset=upper)

        assert result.ok and result.value is not None
        assert store.gets == 0
        assert result.value.proof.dataset_hash == ROOT
        assert ledger.recorded[0]["dataset_hash"] == ROOT
