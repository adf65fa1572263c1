# boolsignal/runtime/async_support.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

from boolsignal.core.errors import SchedulingError, ValidationError
from boolsignal.runtime.concurrency import get_lock, with_lock
from boolsignal.runtime.scheduler import ScheduledHandle, Scheduler

logger = logging.getLogger(__name__)


class AsyncIOScheduler(Scheduler):
    """
    Scheduler that runs callbacks on an asyncio event loop via `call_later`.
    Callbacks always run on the loop's thread; scheduling from another thread
    is handed over with `call_soon_threadsafe`.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        :param loop: Loop to run on. Defaults to the loop running when the
                     first callback is scheduled.
        """
        self._loop = loop
        self._lock = get_lock()
        self._timers: Dict[ScheduledHandle, Optional[asyncio.TimerHandle]] = {}
        self._closed = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as error:
                raise SchedulingError("No running event loop to schedule on", reason="no loop") from error
        return self._loop

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False

    def now(self) -> float:
        return self.loop.time()

    def schedule(self, delay: float, action: Callable[[], None]) -> ScheduledHandle:
        if not callable(action):
            raise ValidationError("action must be callable", "action", action)
        delay = max(0.0, float(delay))
        loop = self.loop

        with with_lock(self._lock):
            if self._closed or loop.is_closed():
                raise SchedulingError("Scheduler has been shut down", delay=delay, reason="shutdown")
            handle = ScheduledHandle(action, loop.time() + delay, on_cancel=lambda: self._cancel(handle))
            self._timers[handle] = None

        if self._on_loop_thread():
            self._arm(handle, delay)
        else:
            loop.call_soon_threadsafe(self._arm, handle, delay)
        return handle

    def _arm(self, handle: ScheduledHandle, delay: float) -> None:
        with with_lock(self._lock):
            if handle not in self._timers:
                return
            self._timers[handle] = self.loop.call_later(delay, self._invoke, handle)

    def _invoke(self, handle: ScheduledHandle) -> None:
        with with_lock(self._lock):
            self._timers.pop(handle, None)
        try:
            handle.run()
        except Exception:
            logger.exception("Scheduled callback failed")

    def _cancel(self, handle: ScheduledHandle) -> None:
        with with_lock(self._lock):
            timer = self._timers.pop(handle, None)
        if timer is None:
            return
        if self._on_loop_thread():
            timer.cancel()
        else:
            self.loop.call_soon_threadsafe(timer.cancel)

    @property
    def active(self) -> int:
        """Number of callbacks that have not run or been cancelled."""
        with with_lock(self._lock):
            return len(self._timers)

    def shutdown(self) -> None:
        """
        Cancel every pending callback and refuse new work.
        """
        with with_lock(self._lock):
            self._closed = True
            handles = list(self._timers)
        for handle in handles:
            handle.cancel()
        logger.debug("AsyncIOScheduler shut down, %d callbacks cancelled", len(handles))
