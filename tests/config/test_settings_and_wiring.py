"""Tests for settings and the composition root.

The composition root is the ONLY place that:
1. Reads environment variables (via AppSettings)
2. Instantiates concrete infrastructure adapters
3. Wires dependencies into use cases
"""

import logging

import pytest
from fakes import CONTRACT, FakeClock, FakeContentStore, FakeLedger, FakeLLM

from ragbits_exchange.application.ports import ContentStorePort, LedgerPort
from ragbits_exchange.application.use_cases.process_paid_query import ProcessPaidQuery
from ragbits_exchange.application.use_cases.publish_dataset import PublishDataset
from ragbits_exchange.config.compose import Container, build_container
from ragbits_exchange.config.logging_setup import configure_logging
from ragbits_exchange.config.settings import AppSettings
from ragbits_exchange.domain.errors import LedgerError
from ragbits_exchange.infrastructure.storage.in_memory_store import InMemoryContentStore
from ragbits_exchange.infrastructure.telemetry.noop_telemetry import NoopTelemetry


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in (
            "STORAGE_BACKEND",
            "PORT",
            "LLM_ENABLED",
            "QUERY_MAX_CHUNKS",
            "UPLOAD_MAX_BYTES",
            "TELEMETRY_ENABLED",
        ):
            monkeypatch.delenv(name, raising=False)
        s = AppSettings()
        assert s.storage_backend == "indexer"
        assert s.port == 3000
        assert s.llm_enabled is True
        assert s.query_max_chunks == 5
        assert s.upload_max_bytes == 10 * 1024 * 1024
        assert s.telemetry_enabled is False

    def test_environment_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("STORAGE_BACKEND", "MEMORY")
        monkeypatch.setenv("LLM_ENABLED", "false")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        s = AppSettings()
        assert s.storage_backend == "memory"
        assert s.llm_enabled is False
        assert s.port == 8080
        assert s.log_level == "DEBUG"

    def test_settings_are_frozen(self) -> None:
        with pytest.raises(AttributeError):
            AppSettings().port = 1  # type: ignore[misc]


class TestContainer:
    def test_memory_backend_builds_in_memory_store(self, monkeypatch) -> None:
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        store = build_container().get_content_store()
        assert isinstance(store, InMemoryContentStore)
        assert isinstance(store, ContentStorePort)

    def test_unknown_backend_is_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("STORAGE_BACKEND", "floppy")
        with pytest.raises(ValueError, match="floppy"):
            build_container().get_content_store()

    def test_ledger_requires_contract_address(self, monkeypatch) -> None:
        monkeypatch.setenv("CONTRACT_ADDRESS", "")
        with pytest.raises(LedgerError):
            build_container().get_ledger()

    def test_disabled_llm_means_fallback_only(self, monkeypatch) -> None:
        monkeypatch.setenv("LLM_ENABLED", "false")
        c = build_container()
        assert c.get_llm() is None
        assert c.get_synthesizer().llm is None

    def test_telemetry_defaults_to_noop(self, monkeypatch) -> None:
        monkeypatch.setenv("TELEMETRY_ENABLED", "false")
        assert isinstance(build_container().get_telemetry(), NoopTelemetry)

    def test_explicit_adapters_take_precedence(self) -> None:
        ledger, store, llm = FakeLedger(), FakeContentStore(), FakeLLM()
        c = Container(AppSettings(), ledger=ledger, content_store=store, llm=llm, clock=FakeClock())

        assert isinstance(ledger, LedgerPort)
        uc = c.get_query_use_case()
        assert isinstance(uc, ProcessPaidQuery)
        assert uc.ledger is ledger
        assert uc.storage.store is store
        assert uc.synthesizer.llm is llm
        assert c.contract_address == CONTRACT

    def test_dataset_storage_is_shared_between_use_cases(self) -> None:
        c = Container(AppSettings(), ledger=FakeLedger(), content_store=FakeContentStore())
        publish = c.get_publish_use_case()
        query = c.get_query_use_case()
        assert isinstance(publish, PublishDataset)
        assert publish.storage is query.storage
        assert publish.contract_address == CONTRACT

    def test_query_use_case_uses_configured_chunk_limit(self, monkeypatch) -> None:
        monkeypatch.setenv("QUERY_MAX_CHUNKS", "3")
        c = Container(AppSettings(), ledger=FakeLedger(), content_store=FakeContentStore())
        assert c.get_query_use_case().max_chunks == 3


def test_configure_logging_sets_levels() -> None:
    configure_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    configure_logging("INFO")
    assert logging.getLogger().level == logging.INFO
