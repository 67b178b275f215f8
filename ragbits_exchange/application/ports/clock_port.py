from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Source of the instant a proof hash commits to."""

    @abstractmethod
    def now(self) -> datetime:
        """Return current UTC datetime."""
        ...

    def now_ms(self) -> int:
        """Milliseconds since the Unix epoch."""
        return int(self.now().timestamp() * 1000)
