"""Dependency injection container with environment-driven wiring.

Why: Single place choosing adapters; application and domain stay pure.
"""

from typing import TYPE_CHECKING

from ragbits_exchange.application.ports import (
    ClockPort,
    ContentStorePort,
    LedgerPort,
    LLMPort,
    TelemetryPort,
)
from ragbits_exchange.application.services.answer_synthesizer import AnswerSynthesizer
from ragbits_exchange.application.services.dataset_storage import DatasetStorage
from ragbits_exchange.config.settings import AppSettings
from ragbits_exchange.domain.errors import LedgerError

if TYPE_CHECKING:
    from ragbits_exchange.application.use_cases.process_paid_query import ProcessPaidQuery
    from ragbits_exchange.application.use_cases.publish_dataset import PublishDataset


class Container:
    """Dependency injection container for application components.

    Responsibilities:
    1. Read settings (via AppSettings)
    2. Choose adapters based on settings (storage_backend, llm_enabled, ...)
    3. Inject dependencies into use cases

    Adapters are built lazily and memoized; the DatasetStorage (and with it
    the chunk cache) is shared by every request served by this container.
    Explicit adapters passed to the constructor take precedence.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        ledger: LedgerPort | None = None,
        content_store: ContentStorePort | None = None,
        llm: LLMPort | None = None,
        clock: ClockPort | None = None,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self.settings = settings or AppSettings()
        self._ledger = ledger
        self._content_store = content_store
        self._llm = llm
        self._clock = clock
        self._telemetry = telemetry
        self._dataset_storage: DatasetStorage | None = None
        self._synthesizer: AnswerSynthesizer | None = None

    # ===== Adapters =====

    def get_ledger(self) -> LedgerPort:
        if self._ledger is None:
            self._ledger = self._build_ledger()
        return self._ledger

    def get_content_store(self) -> ContentStorePort:
        if self._content_store is None:
            self._content_store = self._build_content_store()
        return self._content_store

    def get_llm(self) -> LLMPort | None:
        """Inference adapter, or None when disabled (extractive answers only)."""
        if self._llm is None and self.settings.llm_enabled:
            self._llm = self._build_llm()
        return self._llm

    def get_clock(self) -> ClockPort:
        if self._clock is None:
            from ragbits_exchange.infrastructure.time.system_clock import SystemClock

            self._clock = SystemClock()
        return self._clock

    def get_telemetry(self) -> TelemetryPort:
        if self._telemetry is None:
            self._telemetry = self._build_telemetry()
        return self._telemetry

    # ===== Services =====

    def get_dataset_storage(self) -> DatasetStorage:
        if self._dataset_storage is None:
            self._dataset_storage = DatasetStorage(
                store=self.get_content_store(),
                replicate_uploads=self.settings.storage_upload_enabled,
            )
        return self._dataset_storage

    def get_synthesizer(self) -> AnswerSynthesizer:
        if self._synthesizer is None:
            self._synthesizer = AnswerSynthesizer(
                llm=self.get_llm(),
                max_tokens=self.settings.llm_max_tokens,
                temperature=self.settings.llm_temperature,
            )
        return self._synthesizer

    # ===== Use Cases =====

    def get_query_use_case(self) -> "ProcessPaidQuery":
        from ragbits_exchange.application.use_cases.process_paid_query import ProcessPaidQuery

        return ProcessPaidQuery(
            ledger=self.get_ledger(),
            storage=self.get_dataset_storage(),
            synthesizer=self.get_synthesizer(),
            clock=self.get_clock(),
            telemetry=self.get_telemetry(),
            max_chunks=self.settings.query_max_chunks,
        )

    def get_publish_use_case(self) -> "PublishDataset":
        from ragbits_exchange.application.use_cases.publish_dataset import PublishDataset

        return PublishDataset(
            storage=self.get_dataset_storage(),
            contract_address=self.contract_address,
        )

    @property
    def contract_address(self) -> str:
        if self._ledger is not None:
            return self._ledger.contract_address
        return self.settings.contract_address

    # ===== Private Builder Methods =====

    def _build_ledger(self) -> LedgerPort:
        if not self.settings.contract_address:
            raise LedgerError("CONTRACT_ADDRESS is not configured")

        from ragbits_exchange.infrastructure.ledger.web3_ledger_adapter import (
            LedgerConfig,
            Web3LedgerAdapter,
        )

        cfg = LedgerConfig(
            rpc_url=self.settings.rpc_url,
            contract_address=self.settings.contract_address,
            private_key=self.settings.private_key,
            rpc_timeout_s=self.settings.ledger_timeout_s,
            receipt_timeout_s=self.settings.receipt_timeout_s,
        )
        return Web3LedgerAdapter(cfg)

    def _build_content_store(self) -> ContentStorePort:
        """Build content store based on settings.storage_backend.

        Supports: indexer | minio | memory
        """
        backend = self.settings.storage_backend

        if backend == "indexer":
            from ragbits_exchange.infrastructure.storage.indexer_http_store import (
                IndexerConfig,
                IndexerHttpContentStore,
            )

            return IndexerHttpContentStore(
                IndexerConfig(
                    base_url=self.settings.indexer_url,
                    timeout_s=self.settings.storage_timeout_s,
                    api_key=self.settings.indexer_api_key or None,
                )
            )
        elif backend == "minio":
            from ragbits_exchange.infrastructure.storage.minio_content_store import (
                MinioConfig,
                MinioContentStore,
            )

            return MinioContentStore(
                MinioConfig(
                    endpoint=self.settings.minio_endpoint,
                    access_key=self.settings.minio_access_key,
                    secret_key=self.settings.minio_secret_key,
                    bucket_name=self.settings.minio_bucket,
                    secure=self.settings.minio_secure,
                )
            )
        elif backend == "memory":
            from ragbits_exchange.infrastructure.storage.in_memory_store import (
                InMemoryContentStore,
            )

            return InMemoryContentStore()
        else:
            raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")

    def _build_llm(self) -> LLMPort:
        from ragbits_exchange.infrastructure.llm.openai_compatible_adapter import (
            OpenAICompatibleAdapter,
        )

        return OpenAICompatibleAdapter(
            base_url=self.settings.llm_base_url,
            api_key=self.settings.llm_api_key,
            model=self.settings.llm_model,
            timeout_s=self.settings.llm_timeout_s,
        )

    def _build_telemetry(self) -> TelemetryPort:
        if not self.settings.telemetry_enabled:
            from ragbits_exchange.infrastructure.telemetry.noop_telemetry import NoopTelemetry

            return NoopTelemetry()

        from ragbits_exchange.infrastructure.telemetry.otel_adapter import (
            OpenTelemetryAdapter,
            OtelConfig,
        )

        return OpenTelemetryAdapter(
            OtelConfig(
                otlp_endpoint=self.settings.otlp_endpoint or None,
                environment=self.settings.telemetry_environment,
            )
        )


def build_container(settings: AppSettings | None = None) -> Container:
    """Build dependency injection container with settings.

    Example:
        container = build_container()
        result = container.get_query_use_case().execute(request)
    """
    return Container(settings)
