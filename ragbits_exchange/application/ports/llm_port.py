from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "system" | "user" | "assistant"
    content: str


@dataclass(frozen=True)
class LLMResponse:
    text: str
    finish_reason: str = "stop"
    usage_tokens: int | None = None


@runtime_checkable
class LLMPort(Protocol):
    model: str

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.3, max_tokens: int = 500
    ) -> LLMResponse:
        """Single chat completion.

        Raises:
            InferenceUnavailableError: transport failure, timeout or malformed response
        """
        ...
