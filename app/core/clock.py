"""Injectable time source.

Services receive a ``Clock`` instead of calling ``datetime.now()`` so that
validation timestamps and detection timestamps are reproducible in tests.
Timestamps are naive UTC, matching the ``DateTime`` columns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """Abstract clock interface."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a naive UTC datetime."""
        ...


class SystemClock(Clock):
    """Production clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class FixedClock(Clock):
    """Test clock that always returns the same instant."""

    def __init__(self, fixed: datetime) -> None:
        self._now = fixed

    def now(self) -> datetime:
        return self._now
