from typing import Any

from ragbits_exchange.application.ports import TelemetryPort


class NoopTelemetry(TelemetryPort):
    """Telemetry sink used when metrics are disabled."""

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        pass

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        pass
