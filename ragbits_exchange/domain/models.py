# ragbits_exchange/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Chunk:
    """
    Immutable unit of dataset text, individually addressable and priced.

    - id:            zero-based position within the dataset (order-significant)
    - text:          trimmed, non-empty paragraph text
    - content_hash:  sha256 hex digest of ``text`` (integrity, not uniqueness)
    """

    id: int
    text: str
    content_hash: str


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk with the relevance score it received for one query."""

    chunk: Chunk
    score: int

    @property
    def id(self) -> int:
        return self.chunk.id

    @property
    def text(self) -> str:
        return self.chunk.text


@dataclass(frozen=True)
class DatasetInfo:
    """Dataset descriptor as registered on the ledger. Amounts in wei."""

    root_hash: str
    publisher: str
    metadata: str
    price_per_chunk: int
    total_chunks: int
    active: bool


@dataclass(frozen=True)
class CachedDataset:
    """Chunked dataset content held in the process-local cache.

    ``metadata`` is only known for datasets uploaded through this process.
    """

    root_hash: str
    chunks: tuple[Chunk, ...]
    metadata: str | None = None


@dataclass(frozen=True)
class Proof:
    """On-ledger record binding an answer digest to the chunks that produced it."""

    proof_id: int
    answer_hash: str
    dataset_hash: str
    chunk_ids: tuple[int, ...]
    user: str
    amount_paid: int
    model_used: str
    timestamp: int


@dataclass(frozen=True)
class Citation:
    """Citation of a chunk used to answer a query."""

    chunk_id: int
    excerpt: str
    score: int
