"""Application settings with environment-driven configuration.

Why: Single place reading the environment; everything else receives settings
     through the composition root.
"""

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    All other layers receive settings via dependency injection.
    """

    # ===== Ledger =====
    rpc_url: str = field(
        default_factory=lambda: os.getenv("RPC_URL", "https://evmrpc-testnet.0g.ai/")
    )
    contract_address: str = field(default_factory=lambda: os.getenv("CONTRACT_ADDRESS", ""))
    private_key: str = field(default_factory=lambda: os.getenv("PRIVATE_KEY", ""))
    ledger_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("LEDGER_TIMEOUT_S", "30"))
    )
    receipt_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("RECEIPT_TIMEOUT_S", "120"))
    )
    network_name: str = field(default_factory=lambda: os.getenv("NETWORK_NAME", "0G Testnet"))

    # ===== Storage =====
    storage_backend: str = field(
        default_factory=lambda: os.getenv("STORAGE_BACKEND", "indexer").lower()
    )
    # Supported: "indexer" | "minio" | "memory" (local dev)

    indexer_url: str = field(
        default_factory=lambda: os.getenv(
            "STORAGE_INDEXER_URL", "https://indexer-storage-testnet-standard.0g.ai"
        )
    )
    indexer_api_key: str = field(default_factory=lambda: os.getenv("STORAGE_INDEXER_KEY", ""))
    storage_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("STORAGE_TIMEOUT_S", "60"))
    )
    storage_upload_enabled: bool = field(
        default_factory=lambda: _env_bool("STORAGE_UPLOAD_ENABLED", "true")
    )

    minio_endpoint: str = field(
        default_factory=lambda: os.getenv("MINIO_ENDPOINT", "localhost:9000")
    )
    minio_access_key: str = field(default_factory=lambda: os.getenv("MINIO_ACCESS_KEY", ""))
    minio_secret_key: str = field(default_factory=lambda: os.getenv("MINIO_SECRET_KEY", ""))
    minio_bucket: str = field(default_factory=lambda: os.getenv("MINIO_BUCKET", "ragbits-datasets"))
    minio_secure: bool = field(default_factory=lambda: _env_bool("MINIO_SECURE", "true"))

    # ===== Inference =====
    llm_enabled: bool = field(default_factory=lambda: _env_bool("LLM_ENABLED", "true"))
    llm_base_url: str = field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "https://compute-api-testnet.0g.ai/v1")
    )
    llm_api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", "EMPTY"))
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "0g-llm-7b"))
    llm_timeout_s: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT_S", "30")))
    llm_max_tokens: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "500")))
    llm_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.3"))
    )

    # ===== Query =====
    query_max_chunks: int = field(
        default_factory=lambda: int(os.getenv("QUERY_MAX_CHUNKS", "5"))
    )
    upload_max_bytes: int = field(
        default_factory=lambda: int(os.getenv("UPLOAD_MAX_BYTES", str(10 * 1024 * 1024)))
    )

    # ===== HTTP / Logging =====
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # ===== Telemetry =====
    telemetry_enabled: bool = field(
        default_factory=lambda: _env_bool("TELEMETRY_ENABLED", "false")
    )
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    # Empty string = no OTLP export

    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )
