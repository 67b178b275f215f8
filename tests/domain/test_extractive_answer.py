from ragbits_exchange.domain.models import Chunk, ScoredChunk
from ragbits_exchange.domain.services.extractive_answer import (
    NO_RELEVANT_INFORMATION,
    extractive_answer,
)


def _scored(*texts: str) -> list[ScoredChunk]:
    return [
        ScoredChunk(chunk=Chunk(id=i, text=t, content_hash=""), score=1)
        for i, t in enumerate(texts)
    ]


def test_picks_sentences_with_two_token_hits_in_order():
    chunks = _scored(
        "Solar panels convert sunlight into electricity. Panels degrade slowly.",
        "Batteries store electricity for later use. Lithium dominates.",
    )
    answer = extractive_answer("How do solar panels store electricity?", chunks)
    assert answer == (
        "Solar panels convert sunlight into electricity. Batteries store electricity for later use."
    )


def test_caps_at_three_sentences():
    chunks = _scored("solar wind one. solar wind two! solar wind three? solar wind four.")
    answer = extractive_answer("solar wind", chunks)
    assert answer == "solar wind one. solar wind two. solar wind three."


def test_single_hit_sentences_do_not_qualify():
    chunks = _scored("Only solar here. Only wind there.")
    assert extractive_answer("solar wind", chunks) == NO_RELEVANT_INFORMATION


def test_no_chunks_gives_fixed_message():
    assert extractive_answer("anything at all", []) == NO_RELEVANT_INFORMATION
