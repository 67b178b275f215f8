from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PublishRequest:
    """Dataset upload; ``price_per_chunk`` is an ether amount as entered by the publisher."""

    file_path: Path
    publisher_address: str
    metadata: str
    price_per_chunk: str


@dataclass(frozen=True)
class UploadReceipt:
    root_hash: str
    total_chunks: int


@dataclass(frozen=True)
class PublishReceipt:
    """What the publisher submits to ``publishDataset`` from their own wallet."""

    root_hash: str
    total_chunks: int
    metadata: str
    price_per_chunk_wei: int
    contract_address: str

    def ledger_params(self) -> dict[str, str | int]:
        return {
            "rootHash": self.root_hash,
            "metadataURI": self.metadata,
            "pricePerChunk": str(self.price_per_chunk_wei),
            "totalChunks": self.total_chunks,
        }
