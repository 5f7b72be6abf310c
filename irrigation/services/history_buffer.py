import collections
import threading
from typing import Callable, Deque, List, Optional

from irrigation.models.reading import Reading

DEFAULT_CAPACITY = 50
DEFAULT_LIMIT = 20


class HistoryBuffer:
    """Bounded FIFO of the most recent readings, oldest first."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._lock = threading.Lock()
        # deque drops the oldest entry once maxlen is exceeded
        self._items: Deque[Reading] = collections.deque(maxlen=capacity)

    def append(self, reading: Reading) -> None:
        with self._lock:
            self._items.append(reading)

    def record(self, build: Callable[[], Reading]) -> Reading:
        """Builds the reading (stamping it) and appends it while holding the lock."""
        with self._lock:
            reading = build()
            self._items.append(reading)
        return reading

    def read(self, limit: int = DEFAULT_LIMIT) -> List[Reading]:
        if limit <= 0:
            return []
        with self._lock:
            items = list(self._items)
        return items[-limit:]

    def latest(self) -> Optional[Reading]:
        with self._lock:
            return self._items[-1] if self._items else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
