"""Storage gateway: dataset upload and cached, content-addressed chunk retrieval."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ragbits_exchange.application.dto.publish_dto import UploadReceipt
from ragbits_exchange.application.ports.content_store_port import ContentStorePort
from ragbits_exchange.application.services.chunk_cache import ChunkCache
from ragbits_exchange.domain.errors import DomainError, StorageUnavailableError, ValidationError
from ragbits_exchange.domain.models import CachedDataset, Chunk, ScoredChunk
from ragbits_exchange.domain.services.chunking import chunk_content
from ragbits_exchange.domain.services.relevance_scoring import score_chunks, top_chunks

logger = logging.getLogger(__name__)


class DatasetStorage:
    """
    Uploads dataset files to content-addressed storage and serves their chunks.

    Chunks are re-derived from raw content, so a dataset downloaded from the
    network chunks exactly like it did on upload. Fetched datasets are kept in
    ``cache`` for the lifetime of the process.
    """

    def __init__(
        self,
        store: ContentStorePort,
        cache: ChunkCache | None = None,
        replicate_uploads: bool = True,
    ) -> None:
        self.store = store
        self.cache = cache if cache is not None else ChunkCache()
        self.replicate_uploads = replicate_uploads

    def upload(self, file_path: Path, metadata: str) -> UploadReceipt:
        """Address, chunk, optionally replicate and cache a dataset file.

        Raises:
            ValidationError: the file holds no text chunks
            StorageUnavailableError: content could not be read, addressed or uploaded
        """
        path = Path(file_path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as ex:
            raise StorageUnavailableError(f"cannot read dataset file: {ex}") from ex

        chunks = chunk_content(content)
        if not chunks:
            raise ValidationError("dataset contains no text chunks")

        root_hash = self._compute_root(path)

        if self.replicate_uploads:
            self.store.put(root_hash, path)

        self.cache.put(
            CachedDataset(root_hash=root_hash, chunks=tuple(chunks), metadata=metadata)
        )
        logger.info("Uploaded dataset %s (%d chunks)", root_hash, len(chunks))
        return UploadReceipt(root_hash=root_hash, total_chunks=len(chunks))

    def fetch_chunks(self, root_hash: str) -> list[Chunk]:
        """Chunks for ``root_hash``, downloading and caching on first use.

        Raises:
            DatasetNotFoundError: the store has no object for ``root_hash``
            StorageUnavailableError: download or decoding failed
            GatewayTimeoutError: download timed out
        """
        cached = self.cache.get(root_hash)
        if cached is not None:
            return list(cached.chunks)

        logger.info("Dataset %s not cached, downloading", root_hash)
        with tempfile.TemporaryDirectory(prefix="ragbits-") as tmp:
            dest = Path(tmp) / f"{root_hash}.txt"
            self.store.get(root_hash, dest)
            try:
                content = dest.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as ex:
                raise StorageUnavailableError(f"cannot read downloaded dataset: {ex}") from ex

        chunks = chunk_content(content)
        self.cache.put(CachedDataset(root_hash=root_hash, chunks=tuple(chunks)))
        return chunks

    def search(self, root_hash: str, query: str, max_chunks: int = 5) -> list[ScoredChunk]:
        """Top ``max_chunks`` chunks of the dataset ranked against ``query``."""
        return top_chunks(score_chunks(self.fetch_chunks(root_hash), query), max_chunks)

    def cached_datasets(self) -> list[CachedDataset]:
        return list(self.cache)

    def _compute_root(self, path: Path) -> str:
        try:
            return self.store.compute_root(path)
        except DomainError:
            raise
        except Exception as ex:
            raise StorageUnavailableError(f"merkle root computation failed: {ex}") from ex
