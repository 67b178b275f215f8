from __future__ import annotations

from collections.abc import Iterator

from ragbits_exchange.domain.models import CachedDataset


class ChunkCache:
    """Process-local mapping from root hash to chunked dataset.

    Unbounded, content-addressed, never invalidated: a root hash names
    immutable content, so an entry cannot go stale. Concurrent writers for
    the same root hash store identical chunks; last write wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CachedDataset] = {}

    def get(self, root_hash: str) -> CachedDataset | None:
        return self._entries.get(root_hash)

    def put(self, dataset: CachedDataset) -> None:
        self._entries[dataset.root_hash] = dataset

    def __contains__(self, root_hash: object) -> bool:
        return root_hash in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CachedDataset]:
        return iter(list(self._entries.values()))
