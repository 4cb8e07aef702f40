"""
scheduling.py - Deferred callbacks for the local opponent's thinking delay

The engine only needs to "run this later, maybe cancel it". ThreadingScheduler
does that with threading.Timer. ManualScheduler keeps a virtual clock that the
host advances explicitly, which suits terminal loops and tests.
"""

import heapq
import itertools
import threading
from typing import Callable, List, Tuple


class ScheduledCall:
    """Handle returned by a scheduler; cancel() prevents the callback from running."""

    def __init__(self, callback: Callable[[], None]):
        self._callback = callback
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> None:
        self._cancelled = True

    def run(self) -> None:
        if not self.pending:
            return
        self._done = True
        self._callback()


class Scheduler:
    """Interface for running a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        raise NotImplementedError


class ThreadingScheduler(Scheduler):
    """Runs callbacks on threading.Timer threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = _TimerCall(callback)
        timer = threading.Timer(max(delay, 0.0), call.run)
        timer.daemon = True
        call.timer = timer
        timer.start()
        return call


class _TimerCall(ScheduledCall):
    timer = None

    def cancel(self) -> None:
        super().cancel()
        if self.timer is not None:
            self.timer.cancel()


class ManualScheduler(Scheduler):
    """
    A scheduler driven by an explicit virtual clock.

    Nothing runs until advance() or run_all() is called; callbacks then run on
    the calling thread in due-time order.
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(callback)
        heapq.heappush(self._queue, (self.now + max(delay, 0.0), next(self._counter), call))
        return call

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, call in self._queue if call.pending)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and run every callback that became due.

        Returns:
            Number of callbacks that ran
        """
        deadline = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, call = heapq.heappop(self._queue)
            self.now = due
            if call.pending:
                call.run()
                ran += 1
        self.now = deadline
        return ran

    def run_all(self) -> int:
        """Run callbacks until the queue is empty, including ones scheduled meanwhile."""
        ran = 0
        while self._queue:
            due, _, call = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if call.pending:
                call.run()
                ran += 1
        return ran
