"""Wall clock used for proof timestamps outside tests."""

from __future__ import annotations

from datetime import UTC, datetime

from ...application.ports.clock_port import ClockPort


class SystemClock(ClockPort):
    """UTC wall clock; ``now_ms()`` is the value committed to in proof hashes."""

    def now(self) -> datetime:  # pragma: no cover - trivial
        return datetime.now(UTC)
