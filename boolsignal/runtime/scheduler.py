# boolsignal/runtime/scheduler.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import heapq
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Set, Tuple

from boolsignal.core.errors import SchedulingError, ValidationError
from boolsignal.runtime.concurrency import get_lock, with_lock

logger = logging.getLogger(__name__)


class ScheduledHandle:
    """
    A callback registered with a scheduler. Cancelling a handle guarantees the
    callback will not start afterwards; a callback that already started is
    not interrupted.
    """

    def __init__(self, action: Callable[[], None], due: float, on_cancel: Optional[Callable[[], None]] = None) -> None:
        """
        :param action: Zero-argument callable to run when due.
        :param due: Scheduler time at which the action runs.
        :param on_cancel: Optional hook invoked once on the first cancel().
        """
        self._action = action
        self._due = due
        self._on_cancel = on_cancel
        self._cancelled = False
        self._lock = get_lock()

    @property
    def due(self) -> float:
        """Scheduler time at which the action is due."""
        return self._due

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with with_lock(self._lock):
            if self._cancelled:
                return
            self._cancelled = True
            hook, self._on_cancel = self._on_cancel, None
        if hook is not None:
            hook()

    def run(self) -> None:
        """
        Invoke the action unless the handle was cancelled.
        """
        if self._cancelled:
            return
        self._action()


class Scheduler(ABC):
    """
    Source of time for the timed operators. A scheduler reports the current
    time and runs cancellable callbacks after a delay.
    """

    @abstractmethod
    def now(self) -> float:
        """
        Current time, in seconds.
        """

    @abstractmethod
    def schedule(self, delay: float, action: Callable[[], None]) -> ScheduledHandle:
        """
        Run `action` once, `delay` seconds from now. Negative delays are treated
        as zero.

        :param delay: Delay in seconds.
        :param action: Zero-argument callable.
        :return: Handle that can cancel the pending action.
        """


class VirtualTimeScheduler(Scheduler):
    """
    Deterministic scheduler whose clock only moves when told to. Work is ordered
    by due time and, for equal due times, by registration order, so a callback
    always runs after the event that registered it.
    """

    def __init__(self, initial_time: float = 0.0) -> None:
        self._clock = float(initial_time)
        self._counter = 0
        self._heap: List[Tuple[float, int, ScheduledHandle]] = []
        self._cancelled = 0
        self._advancing = False

    def now(self) -> float:
        return self._clock

    def schedule(self, delay: float, action: Callable[[], None]) -> ScheduledHandle:
        if not callable(action):
            raise ValidationError("action must be callable", "action", action)
        due = self._clock + max(0.0, float(delay))
        handle = ScheduledHandle(action, due, on_cancel=self._on_cancel)
        heapq.heappush(self._heap, (due, self._counter, handle))
        self._counter += 1
        return handle

    def _on_cancel(self) -> None:
        self._cancelled += 1
        # rebuild once cancelled entries make up more than half the heap
        if self._cancelled * 2 > len(self._heap):
            self._heap = [entry for entry in self._heap if not entry[2].cancelled]
            heapq.heapify(self._heap)
            self._cancelled = 0

    @property
    def queued(self) -> int:
        """Number of heap entries, including cancelled ones not yet pruned."""
        return len(self._heap)

    @property
    def pending(self) -> int:
        """Number of scheduled actions that have not run or been cancelled."""
        return sum(1 for _, _, handle in self._heap if not handle.cancelled)

    def advance_by(self, delta: float) -> None:
        """
        Move the clock forward by `delta`, running every action that becomes due.

        :param delta: Non-negative amount of virtual time.
        """
        if delta < 0:
            raise ValidationError("Cannot move virtual time backwards", "delta", delta)
        self.advance_to(self._clock + delta)

    def advance_to(self, target: float) -> None:
        """
        Move the clock to `target`, running every action due at or before it.
        Actions scheduled while advancing run too if they fall due in time.
        """
        if target < self._clock:
            raise ValidationError("Cannot move virtual time backwards", "target", target)
        if self._advancing:
            raise SchedulingError("Virtual time is already being advanced", reason="reentrant advance")

        self._advancing = True
        try:
            while self._heap and self._heap[0][0] <= target:
                due, _, handle = heapq.heappop(self._heap)
                if handle.cancelled:
                    self._cancelled -= 1
                    continue
                self._clock = due
                handle.run()
            self._clock = target
        finally:
            self._advancing = False

    def run(self) -> None:
        """
        Run every pending action, moving the clock to the last due time.
        """
        while self._heap:
            self.advance_to(max(self._clock, self._heap[0][0]))


class ThreadingScheduler(Scheduler):
    """
    Wall-clock scheduler backed by `threading.Timer`. Callbacks run on timer
    threads; operators serialise them against source events themselves.
    """

    def __init__(self, daemon: bool = True) -> None:
        """
        :param daemon: Whether timer threads are daemon threads.
        """
        self._daemon = daemon
        self._lock = get_lock()
        self._timers: Set[threading.Timer] = set()
        self._shutdown = False

    def now(self) -> float:
        return time.monotonic()

    def schedule(self, delay: float, action: Callable[[], None]) -> ScheduledHandle:
        if not callable(action):
            raise ValidationError("action must be callable", "action", action)
        delay = max(0.0, float(delay))

        with with_lock(self._lock):
            if self._shutdown:
                raise SchedulingError("Scheduler has been shut down", delay=delay, reason="shutdown")

            handle = ScheduledHandle(action, self.now() + delay, on_cancel=lambda: self._cancel(timer))
            timer = threading.Timer(delay, lambda: self._invoke(handle, timer))
            timer.daemon = self._daemon
            self._timers.add(timer)
        timer.start()
        return handle

    def _invoke(self, handle: ScheduledHandle, timer: threading.Timer) -> None:
        try:
            handle.run()
        except Exception:
            logger.exception("Scheduled callback failed")
        finally:
            self._forget(timer)

    def _cancel(self, timer: threading.Timer) -> None:
        timer.cancel()
        self._forget(timer)

    def _forget(self, timer: threading.Timer) -> None:
        with with_lock(self._lock):
            self._timers.discard(timer)

    @property
    def active(self) -> int:
        """Number of timers that have not fired or been cancelled."""
        with with_lock(self._lock):
            return len(self._timers)

    def shutdown(self) -> None:
        """
        Cancel every outstanding timer and refuse new work.
        """
        with with_lock(self._lock):
            self._shutdown = True
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        logger.debug("ThreadingScheduler shut down, %d timers cancelled", len(timers))
