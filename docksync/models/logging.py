"""
Progress event models for docksync.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class LogLevel(Enum):
    """Severity of a progress event as shown to the user."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class LogEvent:
    """
    One entry of a run's progress log.

    ``sequence`` orders events; ``timestamp`` is for display only.
    """

    sequence: int
    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        return f"[{self.timestamp.strftime('%H:%M:%S')}] {self.level.value.upper():<7} {self.message}"


__all__ = [
    "LogLevel",
    "LogEvent",
]
