"""Metrics sink for the paid-query pipeline."""

from typing import Any, Protocol


class TelemetryPort(Protocol):
    """Counters and histograms emitted by the use cases.

    The query pipeline emits ``ragbits.queries.total`` once per request and
    ``ragbits.query.latency_ms`` with the same ``outcome``/``stage`` tags.
    """

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        """Add one to the counter ``name``."""
        ...

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """Record ``value`` (milliseconds for latency) in the histogram ``name``."""
        ...
