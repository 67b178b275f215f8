"""Storage-network indexer adapter (HTTP).

Downloads objects by root hash from the indexer's file gateway and uploads
file content for replication.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import import_module
from pathlib import Path
from typing import Any

from ragbits_exchange.application.ports.content_store_port import ContentStorePort
from ragbits_exchange.domain.errors import (
    DatasetNotFoundError,
    GatewayTimeoutError,
    StorageUnavailableError,
)
from ragbits_exchange.infrastructure.storage.merkle import file_merkle_root

logger = logging.getLogger(__name__)


@dataclass
class IndexerConfig:
    """Configuration for the storage indexer client."""

    base_url: str  # e.g. "https://indexer-storage-testnet-standard.0g.ai"
    timeout_s: float = 30.0
    api_key: str | None = None


class IndexerHttpContentStore(ContentStorePort):
    """Content store backed by a storage-network indexer.

    - ``GET  {base_url}/file?root=<root_hash>`` streams the object
    - ``POST {base_url}/file?root=<root_hash>`` uploads it (multipart ``file``)
    """

    def __init__(self, cfg: IndexerConfig) -> None:
        self._cfg = cfg
        self._httpx: Any = self._init_httpx()
        headers = {"Authorization": f"Bearer {cfg.api_key}"} if cfg.api_key else {}
        self._client = self._httpx.Client(
            base_url=cfg.base_url.rstrip("/"), timeout=cfg.timeout_s, headers=headers
        )

    @staticmethod
    def _init_httpx() -> Any:
        try:
            return import_module("httpx")
        except Exception as ex:
            raise StorageUnavailableError(f"httpx init failed: {ex}") from ex

    def compute_root(self, path: Path) -> str:
        return file_merkle_root(path)

    def put(self, root_hash: str, path: Path) -> None:
        try:
            with Path(path).open("rb") as fh:
                resp = self._client.post(
                    "/file", params={"root": root_hash}, files={"file": (Path(path).name, fh)}
                )
            resp.raise_for_status()
        except self._httpx.TimeoutException as ex:
            raise GatewayTimeoutError(gateway="storage", timeout_s=self._cfg.timeout_s) from ex
        except (self._httpx.HTTPError, OSError) as ex:
            raise StorageUnavailableError(f"upload of {root_hash} failed: {ex}") from ex
        logger.info("Replicated %s to %s", root_hash, self._cfg.base_url)

    def get(self, root_hash: str, dest: Path) -> None:
        try:
            with self._client.stream("GET", "/file", params={"root": root_hash}) as resp:
                if resp.status_code == 404:
                    raise DatasetNotFoundError(f"no stored object for root hash {root_hash}")
                resp.raise_for_status()
                with Path(dest).open("wb") as out:
                    for block in resp.iter_bytes():
                        out.write(block)
        except self._httpx.TimeoutException as ex:
            raise GatewayTimeoutError(gateway="storage", timeout_s=self._cfg.timeout_s) from ex
        except (self._httpx.HTTPError, OSError) as ex:
            raise StorageUnavailableError(f"download of {root_hash} failed: {ex}") from ex

    def close(self) -> None:
        self._client.close()
