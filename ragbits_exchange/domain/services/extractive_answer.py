# Pure domain service: deterministic, never raises for well-typed input.
from __future__ import annotations

from collections.abc import Sequence

from ragbits_exchange.domain.models import ScoredChunk
from ragbits_exchange.domain.services.chunking import split_into_sentences
from ragbits_exchange.domain.services.relevance_scoring import count_token_hits, tokenize_query

NO_RELEVANT_INFORMATION = "No relevant information found in the dataset."

MIN_SENTENCE_HITS = 2
MAX_SENTENCES = 3


def extractive_answer(query: str, chunks: Sequence[ScoredChunk]) -> str:
    """Answer by quoting sentences that mention at least two query tokens.

    Sentences keep chunk-then-sentence order; the first three are joined.
    """
    tokens = tokenize_query(query)
    picked: list[str] = []
    for sc in chunks:
        for sentence in split_into_sentences(sc.text):
            if count_token_hits(sentence, tokens) >= MIN_SENTENCE_HITS:
                picked.append(sentence)
    if not picked:
        return NO_RELEVANT_INFORMATION
    return ". ".join(picked[:MAX_SENTENCES]) + "."
