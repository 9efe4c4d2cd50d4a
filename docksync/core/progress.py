"""
Append-only progress log rendered by callers while a run executes.
"""

import threading
from typing import Callable, Iterator, List, Tuple

from ..models.logging import LogEvent, LogLevel
from ..infrastructure.logger import logger


Subscriber = Callable[[LogEvent], None]

_MIRROR_LEVELS = {
    LogLevel.INFO: logger.info,
    LogLevel.SUCCESS: logger.info,
    LogLevel.ERROR: logger.error,
}


class ProgressLog:
    """
    Ordered, sequence-numbered stream of progress events.

    Events are never mutated or removed. Appends are serialized so that
    concurrent writers (fanned-out downloads) still get unique, gapless
    sequence numbers. A subscriber that raises is logged and skipped.
    """

    def __init__(self) -> None:
        self._events: List[LogEvent] = []
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def append(self, level: LogLevel, message: str) -> LogEvent:
        with self._lock:
            event = LogEvent(sequence=len(self._events) + 1, level=level, message=message)
            self._events.append(event)
            subscribers = list(self._subscribers)

        _MIRROR_LEVELS[level](message)
        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Progress subscriber {callback!r} failed on event {event.sequence}: {e}")
        return event

    def info(self, message: str) -> LogEvent:
        return self.append(LogLevel.INFO, message)

    def success(self, message: str) -> LogEvent:
        return self.append(LogLevel.SUCCESS, message)

    def error(self, message: str) -> LogEvent:
        return self.append(LogLevel.ERROR, message)

    def subscribe(self, callback: Subscriber, replay: bool = False) -> None:
        """
        Register a callback invoked for every new event.

        Args:
            callback: Receives each appended LogEvent
            replay: Also deliver the events appended so far
        """
        with self._lock:
            self._subscribers.append(callback)
            backlog = list(self._events) if replay else []
        for event in backlog:
            callback(event)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    @property
    def events(self) -> Tuple[LogEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def errors(self) -> Tuple[LogEvent, ...]:
        return tuple(event for event in self.events if event.level is LogLevel.ERROR)

    def messages(self) -> List[str]:
        return [event.message for event in self.events]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[LogEvent]:
        return iter(self.events)


__all__ = [
    "ProgressLog",
]
