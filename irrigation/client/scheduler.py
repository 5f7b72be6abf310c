"""Single repeating timer used by the dashboard poller."""

import threading
from typing import Callable, Optional


class PollScheduler:
    """Repeating timer with exactly one armed timer at any moment.

    ``arm(period)`` always cancels the previous timer before starting a new
    one, and a timer that fires after being superseded does nothing. After a
    tick runs, the scheduler re-arms itself with the same period.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self._callback = callback
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._period: Optional[float] = None
        # bumped on every arm/cancel so stale timers can recognise themselves
        self._generation = 0

    @property
    def period(self) -> Optional[float]:
        return self._period

    @property
    def armed(self) -> bool:
        return self._timer is not None

    def arm(self, period: float) -> None:
        with self._lock:
            self._cancel_locked()
            self._period = period
            self._start_locked(self._generation)

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()
            self._period = None

    def _cancel_locked(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _start_locked(self, generation: int) -> None:
        timer = self._timer_factory(self._period, self._fire, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _fire(self, generation: int) -> None:
        # A cancel or re-arm that lands after this check does not interrupt the
        # tick already in progress: at most one stale callback runs, and it is
        # never re-armed.
        if not self._current(generation):
            return
        try:
            self._callback()
        finally:
            with self._lock:
                if generation == self._generation:
                    self._start_locked(generation)
