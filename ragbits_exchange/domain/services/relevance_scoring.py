from __future__ import annotations

import re
from collections.abc import Sequence

from ragbits_exchange.domain.models import Chunk, ScoredChunk

MIN_TOKEN_LEN = 3  # tokens must be longer than two characters

_NON_WORD = re.compile(r"\W+")


def tokenize_query(query: str) -> list[str]:
    """Lower-case query tokens longer than two characters, de-duplicated in order."""
    seen: dict[str, None] = {}
    for token in _NON_WORD.split(query.lower()):
        if len(token) >= MIN_TOKEN_LEN:
            seen.setdefault(token, None)
    return list(seen)


def count_token_hits(text: str, tokens: Sequence[str]) -> int:
    """Number of tokens occurring as a substring of ``text`` (case-insensitive)."""
    lowered = text.lower()
    return sum(1 for token in tokens if token in lowered)


def score_chunks(chunks: Sequence[Chunk], query: str) -> list[ScoredChunk]:
    """Keyword relevance: distinct query tokens found in each chunk.

    Chunks scoring 0 are dropped. Order is descending score, ties broken by
    ascending chunk id, so the ranking is a stable total order.
    """
    tokens = tokenize_query(query)
    if not tokens:
        return []
    scored = [ScoredChunk(chunk=c, score=count_token_hits(c.text, tokens)) for c in chunks]
    ranked = [s for s in scored if s.score > 0]
    ranked.sort(key=lambda s: (-s.score, s.chunk.id))
    return ranked


def top_chunks(scored: Sequence[ScoredChunk], max_chunks: int = 5) -> list[ScoredChunk]:
    if max_chunks <= 0:
        return []
    return list(scored[:max_chunks])
