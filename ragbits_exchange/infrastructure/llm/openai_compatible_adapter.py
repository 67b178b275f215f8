from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any, cast

from ragbits_exchange.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from ragbits_exchange.domain.errors import InferenceUnavailableError


@dataclass
class OpenAICompatibleAdapter(LLMPort):
    """Chat completions against an OpenAI-compatible inference endpoint."""

    base_url: str  # e.g. "https://compute-api-testnet.0g.ai/v1"
    api_key: str = "EMPTY"
    model: str = "0g-llm-7b"
    timeout_s: float = 30.0

    def __post_init__(self) -> None:
        # Defer import of OpenAI to chat() to avoid hard dependency in tests
        self._client: Any | None = None

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.3, max_tokens: int = 500
    ) -> LLMResponse:
        try:
            if self._client is None:
                module = import_module("openai")
                OpenAI = module.OpenAI
                self._client = OpenAI(
                    base_url=self.base_url,
                    api_key=self.api_key,
                    timeout=self.timeout_s,
                    max_retries=0,
                )
            assert self._client is not None
            payload: Any = [m.__dict__ for m in messages]
            resp: Any = self._client.chat.completions.create(
                model=self.model,
                messages=cast(Any, payload),
                temperature=temperature,
                max_tokens=max_tokens,
            )
            choice = resp.choices[0]
            usage = getattr(resp, "usage", None)
            return LLMResponse(
                text=choice.message.content or "",
                finish_reason=choice.finish_reason or "stop",
                usage_tokens=getattr(usage, "total_tokens", None),
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise InferenceUnavailableError(f"inference call failed: {ex}") from ex
