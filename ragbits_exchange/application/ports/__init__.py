"""Application ports package.

Re-exports all ports so adapters and use cases import from one place.
"""

from ragbits_exchange.application.ports.clock_port import ClockPort
from ragbits_exchange.application.ports.content_store_port import ContentStorePort
from ragbits_exchange.application.ports.ledger_port import LedgerPort
from ragbits_exchange.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from ragbits_exchange.application.ports.telemetry_port import TelemetryPort

__all__ = [
    "ClockPort",
    "ContentStorePort",
    "LedgerPort",
    "LLMPort",
    "ChatMessage",
    "LLMResponse",
    "TelemetryPort",
]
