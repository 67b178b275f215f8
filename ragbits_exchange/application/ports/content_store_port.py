"""Content-addressed storage port."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentStorePort(Protocol):
    """Remote store keyed by Merkle root hash."""

    def compute_root(self, path: Path) -> str:
        """Merkle root of the file content ("0x" + 64 hex).

        Raises StorageUnavailableError if the content cannot be addressed.
        """
        ...

    def put(self, root_hash: str, path: Path) -> None:
        """Upload file content under its root hash."""
        ...

    def get(self, root_hash: str, dest: Path) -> None:
        """Download the object for ``root_hash`` into ``dest``.

        Raises:
            DatasetNotFoundError: no object stored under ``root_hash``
            StorageUnavailableError: transport failure
            GatewayTimeoutError: download exceeded the timeout
        """
        ...
