"""MinIO (S3-compatible) content store keyed by Merkle root hash.

Why: Self-hosted alternative to the storage network. Objects are stored under
     their root hash, so the bucket is content-addressed like the network.
"""

from dataclasses import dataclass
from importlib import import_module
from pathlib import Path
from typing import Any

from ragbits_exchange.application.ports.content_store_port import ContentStorePort
from ragbits_exchange.domain.errors import DatasetNotFoundError, StorageUnavailableError
from ragbits_exchange.infrastructure.storage.merkle import file_merkle_root

_MISSING_CODES = {"NoSuchKey", "NoSuchObject"}


@dataclass
class MinioConfig:
    """Configuration for MinIO client."""

    endpoint: str
    access_key: str
    secret_key: str
    bucket_name: str = "ragbits-datasets"
    secure: bool = True
    region: str | None = None
    key_prefix: str = "datasets/"


class MinioContentStore(ContentStorePort):
    """MinIO adapter implementing the content-store port.

    Features:
    - Object key = ``key_prefix + root_hash``
    - Root hash kept in object metadata for audits
    - Automatic bucket creation
    """

    def __init__(self, cfg: MinioConfig) -> None:
        """Initialize MinIO content store.

        Raises:
            StorageUnavailableError: If MinIO initialization fails
        """
        self._cfg = cfg
        self._client = self._init_client(cfg)
        self._ensure_bucket()

    def _init_client(self, cfg: MinioConfig) -> Any:
        try:
            minio = import_module("minio")
            return minio.Minio(
                cfg.endpoint,
                access_key=cfg.access_key,
                secret_key=cfg.secret_key,
                secure=cfg.secure,
                region=cfg.region,
            )
        except Exception as ex:
            raise StorageUnavailableError(f"MinIO init failed: {ex}") from ex

    def _ensure_bucket(self) -> None:
        try:
            if not self._client.bucket_exists(self._cfg.bucket_name):
                self._client.make_bucket(self._cfg.bucket_name, location=self._cfg.region)
        except Exception as ex:
            raise StorageUnavailableError(f"Bucket creation failed: {ex}") from ex

    def _key(self, root_hash: str) -> str:
        return f"{self._cfg.key_prefix}{root_hash}"

    def compute_root(self, path: Path) -> str:
        return file_merkle_root(path)

    def put(self, root_hash: str, path: Path) -> None:
        try:
            self._client.fput_object(
                self._cfg.bucket_name,
                self._key(root_hash),
                str(path),
                content_type="text/plain; charset=utf-8",
                metadata={"root-hash": root_hash},
            )
        except Exception as ex:
            raise StorageUnavailableError(f"put {root_hash} failed: {ex}") from ex

    def get(self, root_hash: str, dest: Path) -> None:
        try:
            self._client.fget_object(self._cfg.bucket_name, self._key(root_hash), str(dest))
        except Exception as ex:
            if getattr(ex, "code", None) in _MISSING_CODES:
                raise DatasetNotFoundError(f"no stored object for root hash {root_hash}") from ex
            raise StorageUnavailableError(f"get {root_hash} failed: {ex}") from ex
