"""Merkle root over file content (content addressing for the storage network)."""

from __future__ import annotations

from importlib import import_module
from pathlib import Path

from ragbits_exchange.domain.errors import StorageUnavailableError

SEGMENT_BYTES = 256


def _keccak(data: bytes) -> bytes:
    web3 = import_module("web3")
    return bytes(web3.Web3.keccak(data))


def merkle_root(data: bytes) -> str:
    """Root of a keccak256 Merkle tree over 256-byte segments.

    - Last segment is zero-padded to full size
    - Odd level: duplicate last hash
    - Pairwise combine until a single root remains
    """
    if not data:
        raise StorageUnavailableError("cannot address empty content")

    leaves = []
    for offset in range(0, len(data), SEGMENT_BYTES):
        segment = data[offset : offset + SEGMENT_BYTES].ljust(SEGMENT_BYTES, b"\x00")
        leaves.append(_keccak(segment))

    level = leaves
    while len(level) > 1:
        if len(level) % 2:
            level.append(level[-1])
        level = [_keccak(level[i] + level[i + 1]) for i in range(0, len(level), 2)]

    return "0x" + level[0].hex()


def file_merkle_root(path: Path) -> str:
    try:
        data = Path(path).read_bytes()
    except OSError as ex:
        raise StorageUnavailableError(f"cannot read {path}: {ex}") from ex
    return merkle_root(data)
