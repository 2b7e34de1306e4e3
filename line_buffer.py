# File: line_buffer.py
"""
line_buffer.py

Provides LineBuffer, the bounded in-memory store behind a log view.
Keeps the last `capacity` lines; older lines fall off the front.

The reader thread of a stream session appends while the hosting view takes
snapshots, so access goes through a lock. Each restart advances the buffer's
epoch; a session that delivers with an old epoch is refused.
"""
import logging
import threading
from collections import deque
from typing import Callable, List

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10000


class LineBuffer:
    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._lines = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._epoch = 0
        self._listeners: List[Callable[[], None]] = []

    @property
    def epoch(self) -> int:
        return self._epoch

    def __len__(self):
        with self._lock:
            return len(self._lines)

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a callback fired after every mutation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self):
        for listener in list(self._listeners):
            listener()

    def append(self, line: str) -> None:
        with self._lock:
            self._lines.append(str(line))
        self._notify()

    def append_if_current(self, epoch: int, line: str) -> bool:
        """
        Append only if `epoch` is still the buffer's epoch.
        Returns False (and leaves the buffer untouched) for stale deliveries.
        """
        with self._lock:
            if epoch != self._epoch:
                logger.debug("Discarding line from stale epoch %d (current %d)", epoch, self._epoch)
                return False
            self._lines.append(str(line))
        self._notify()
        return True

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
        self._notify()

    def advance_epoch(self) -> int:
        """Clear the buffer and start a new epoch. Returns the new epoch."""
        with self._lock:
            self._lines.clear()
            self._epoch += 1
            epoch = self._epoch
        self._notify()
        return epoch

    def snapshot(self) -> List[str]:
        """Return a list copy of the buffered lines, oldest first."""
        with self._lock:
            return list(self._lines)
