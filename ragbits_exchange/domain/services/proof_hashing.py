from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence


def answer_hash(answer: str, chunk_ids: Sequence[int], model: str, timestamp_ms: int) -> str:
    """Digest committing an answer to its chunks, model and generation instant.

    The timestamp makes this a nonce-bound commitment: it is reproducible only
    with the exact ``timestamp_ms`` captured when the answer was produced, so
    callers capture it once and reuse it for every downstream record.
    """
    payload = json.dumps(
        {
            "answer": answer,
            "chunkIds": list(chunk_ids),
            "timestamp": timestamp_ms,
            "model": model,
        },
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return "0x" + hashlib.sha256(payload.encode("utf-8")).hexdigest()
