"""In-process content store for local development and tests."""

from __future__ import annotations

import threading
from pathlib import Path

from ragbits_exchange.application.ports.content_store_port import ContentStorePort
from ragbits_exchange.domain.errors import DatasetNotFoundError
from ragbits_exchange.infrastructure.storage.merkle import file_merkle_root


class InMemoryContentStore(ContentStorePort):
    """Keeps uploaded bytes in a dict keyed by root hash. Lost on restart."""

    def __init__(self) -> None:
        self._objects: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def compute_root(self, path: Path) -> str:
        return file_merkle_root(path)

    def put(self, root_hash: str, path: Path) -> None:
        data = Path(path).read_bytes()
        with self._lock:
            self._objects[root_hash] = data

    def get(self, root_hash: str, dest: Path) -> None:
        with self._lock:
            data = self._objects.get(root_hash)
        if data is None:
            raise DatasetNotFoundError(f"no stored object for root hash {root_hash}")
        Path(dest).write_bytes(data)
