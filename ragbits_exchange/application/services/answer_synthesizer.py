# ragbits_exchange/application/services/answer_synthesizer.py
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ragbits_exchange.application.ports.llm_port import ChatMessage, LLMPort
from ragbits_exchange.domain.errors import InferenceUnavailableError
from ragbits_exchange.domain.models import ScoredChunk
from ragbits_exchange.domain.services.extractive_answer import extractive_answer
from ragbits_exchange.domain.services.proof_hashing import answer_hash

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = "Answer based on the provided context. Be accurate and cite chunk IDs."
FALLBACK_MODEL = "fallback"


@dataclass(frozen=True)
class RemoteAnswer:
    """Answer produced by the inference backend."""

    answer: str
    model: str
    tokens_used: int


@dataclass(frozen=True)
class FallbackAnswer:
    """Answer produced locally by sentence extraction."""

    answer: str
    model: str = FALLBACK_MODEL
    tokens_used: int = 0


SynthesizedAnswer = RemoteAnswer | FallbackAnswer


def build_context(chunks: Sequence[ScoredChunk]) -> str:
    return "\n\n".join(f"[Chunk {c.id}]: {c.text}" for c in chunks)


class AnswerSynthesizer:
    """
    Produces an answer from a query and its relevant chunks.

    The remote backend is optional. Any remote failure is absorbed here and
    answered by the extractive fallback, so ``synthesize`` never raises
    InferenceUnavailableError to its caller.
    """

    def __init__(
        self,
        llm: LLMPort | None = None,
        max_tokens: int = 500,
        temperature: float = 0.3,
    ) -> None:
        self.llm = llm
        self.max_tokens = max_tokens
        self.temperature = temperature

    def synthesize(self, query: str, chunks: Sequence[ScoredChunk]) -> SynthesizedAnswer:
        if self.llm is None:
            return self.fallback(query, chunks)
        try:
            return self._remote(query, chunks)
        except Exception as ex:  # noqa: BLE001
            logger.warning("Inference unavailable, using extractive fallback: %s", ex)
            return self.fallback(query, chunks)

    def fallback(self, query: str, chunks: Sequence[ScoredChunk]) -> FallbackAnswer:
        return FallbackAnswer(answer=extractive_answer(query, chunks))

    def proof_hash(
        self, answer: str, chunks: Sequence[ScoredChunk], model: str, timestamp_ms: int
    ) -> str:
        return answer_hash(answer, [c.id for c in chunks], model, timestamp_ms)

    def _remote(self, query: str, chunks: Sequence[ScoredChunk]) -> RemoteAnswer:
        assert self.llm is not None
        messages = [
            ChatMessage(role="system", content=SYSTEM_INSTRUCTION),
            ChatMessage(
                role="user", content=f"Context:\n{build_context(chunks)}\n\nQuestion: {query}"
            ),
        ]
        resp = self.llm.chat(messages, temperature=self.temperature, max_tokens=self.max_tokens)
        if not resp.text or not resp.text.strip():
            raise InferenceUnavailableError("empty completion")
        return RemoteAnswer(
            answer=resp.text, model=self.llm.model, tokens_used=resp.usage_tokens or 0
        )
