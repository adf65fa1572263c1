# boolsignal/runtime/timers.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from boolsignal.core.signals import CompositeSubscription, Signal, Subscription
from boolsignal.core.validations import require_flag, require_scheduler, require_signal, to_seconds
from boolsignal.interfaces.protocols import ScheduledHandleProtocol, SchedulerProtocol
from boolsignal.interfaces.types import Duration
from boolsignal.runtime.concurrency import get_subscription_lock, with_lock

logger = logging.getLogger(__name__)

_UNSET = object()


class _PendingCallback:
    """
    Internal single-slot holder for one scheduled callback. Scheduling always
    cancels the previous callback first, and a callback that was already in
    flight when it was superseded is recognised by its generation and ignored.
    """

    def __init__(self, scheduler: SchedulerProtocol, lock) -> None:
        self._scheduler = scheduler
        self._lock = lock
        self._handle: Optional[ScheduledHandleProtocol] = None
        self._generation = 0
        self._disposed = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float, action: Callable[[], None]) -> None:
        self.cancel()
        if self._disposed:
            return
        self._generation += 1
        generation = self._generation
        self._handle = self._scheduler.schedule(delay, lambda: self._fire(generation, action))

    def _fire(self, generation: int, action: Callable[[], None]) -> None:
        with with_lock(self._lock):
            if self._disposed or generation != self._generation:
                return
            self._handle = None
            action()

    def cancel(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            self._generation += 1
            handle.cancel()

    def dispose(self) -> None:
        self._disposed = True
        self.cancel()


class DelayTimer:
    """
    Per-subscription "armed" state driven by a trigger.

    The timer starts idle. A true trigger arms it and schedules the disarm
    after `duration`. While armed, a true that follows a false restarts the
    countdown; a true that repeats the previous true restarts it only when
    `reset_on_repeat_trigger` is set. A false trigger never disarms: only the
    elapsed duration does, after which `on_disarm` is called.

    Not thread-safe on its own; the owner must call `trigger` while holding the
    `lock` it passed in. Disarm callbacks take the same lock.
    """

    def __init__(
        self,
        scheduler: SchedulerProtocol,
        duration: float,
        reset_on_repeat_trigger: bool,
        on_disarm: Callable[[], None],
        lock,
    ) -> None:
        self._duration = duration
        self._reset_on_repeat_trigger = reset_on_repeat_trigger
        self._on_disarm = on_disarm
        self._pending = _PendingCallback(scheduler, lock)
        self._armed = False
        self._last_trigger: Optional[bool] = None

    @property
    def armed(self) -> bool:
        return self._armed

    def trigger(self, value: bool) -> bool:
        """
        Feed one trigger value.

        :return: True if this call moved the timer from idle to armed.
        """
        previous, self._last_trigger = self._last_trigger, value
        if not value:
            return False

        if not self._armed:
            self._armed = True
            self._restart()
            logger.debug("Delay timer armed for %ss", self._duration)
            return True

        if previous is not True or self._reset_on_repeat_trigger:
            self._restart()
            logger.debug("Delay timer restarted for %ss", self._duration)
        return False

    def _restart(self) -> None:
        self._pending.schedule(self._duration, self._disarm)

    def _disarm(self) -> None:
        self._armed = False
        logger.debug("Delay timer elapsed")
        self._on_disarm()

    def dispose(self) -> None:
        self._pending.dispose()


class Debouncer:
    """
    Per-subscription delayed echo of a value stream.

    Each value schedules its own release `duration` later, cancelling the
    release still pending. A value equal to the previous raw value leaves the
    pending release alone unless `reset_on_repeat_value` is set, in which case
    it restarts the wait.

    Same locking contract as `DelayTimer`.
    """

    def __init__(
        self,
        scheduler: SchedulerProtocol,
        duration: float,
        reset_on_repeat_value: bool,
        on_release: Callable[[bool], None],
        lock,
    ) -> None:
        self._duration = duration
        self._reset_on_repeat_value = reset_on_repeat_value
        self._on_release = on_release
        self._pending = _PendingCallback(scheduler, lock)
        self._last: Any = _UNSET

    @property
    def pending(self) -> bool:
        return self._pending.pending

    def push(self, value: bool) -> None:
        previous, self._last = self._last, value
        if previous is not _UNSET and previous == value and not self._reset_on_repeat_value:
            return
        self._pending.schedule(self._duration, lambda: self._on_release(value))
        logger.debug("Debounce release of %s scheduled in %ss", value, self._duration)

    def dispose(self) -> None:
        self._pending.dispose()


class TimedSubscription:
    """
    Base for the per-subscription state of every timed operator.

    Source notifications and timer callbacks are serialised on one reentrant
    lock. A terminal notification from the source tears the timers down before
    it is forwarded, so nothing scheduled can surface afterwards.
    """

    def __init__(self, observer: Any) -> None:
        self._observer = observer
        self._lock = get_subscription_lock()
        self._last_emitted: Any = _UNSET
        self._terminated = False

    def on_next(self, value: Any) -> None:
        with with_lock(self._lock):
            if self._terminated:
                return
            self._on_source(bool(value))

    def on_error(self, error: Exception) -> None:
        with with_lock(self._lock):
            if not self._terminate():
                return
            self._observer.on_error(error)

    def on_completed(self) -> None:
        with with_lock(self._lock):
            if not self._terminate():
                return
            self._observer.on_completed()

    def dispose(self) -> None:
        with with_lock(self._lock):
            self._terminate()

    def _terminate(self) -> bool:
        if self._terminated:
            return False
        self._terminated = True
        self._teardown()
        logger.debug("%s torn down", type(self).__name__)
        return True

    def _emit(self, value: bool, distinct: bool) -> None:
        if distinct and self._last_emitted is not _UNSET and self._last_emitted == value:
            return
        self._last_emitted = value
        self._observer.on_next(value)

    def _on_source(self, value: bool) -> None:
        raise NotImplementedError()

    def _teardown(self) -> None:
        raise NotImplementedError()


def timed_signal(source: Signal, factory: Callable[[Any], TimedSubscription]) -> Signal:
    """
    Wrap `source` so that each subscription gets a fresh state object from
    `factory` subscribed once to the source.
    """

    def _subscribe(observer):
        state = factory(observer)
        upstream = source.subscribe(state.on_next, state.on_error, state.on_completed)
        return CompositeSubscription(upstream, Subscription(state.dispose))

    return Signal(_subscribe)


class _DelayTimerSubscription(TimedSubscription):
    def __init__(self, observer: Any, scheduler: SchedulerProtocol, duration: float, reset: bool) -> None:
        super().__init__(observer)
        self._timer = DelayTimer(scheduler, duration, reset, lambda: self._emit(False, True), self._lock)
        self._emit(False, True)

    def _on_source(self, value: bool) -> None:
        if self._timer.trigger(value):
            self._emit(True, True)

    def _teardown(self) -> None:
        self._timer.dispose()


class _DebounceSubscription(TimedSubscription):
    def __init__(self, observer: Any, scheduler: SchedulerProtocol, duration: float, reset: bool) -> None:
        super().__init__(observer)
        self._debouncer = Debouncer(scheduler, duration, reset, lambda value: self._emit(value, False), self._lock)

    def _on_source(self, value: bool) -> None:
        self._debouncer.push(value)

    def _teardown(self) -> None:
        self._debouncer.dispose()


def delay_timer(
    trigger: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    reset_on_repeat_trigger: bool = False,
) -> Signal:
    """
    The "armed" signal of a `DelayTimer`: false on subscribe, true when the
    trigger arms it, false again once `duration` elapses.

    :param trigger: Boolean signal; true values arm the timer.
    :param duration: Seconds or timedelta. Zero or less echoes the trigger.
    :param scheduler: Time source.
    :param reset_on_repeat_trigger: Restart the countdown on repeated trues.
    """
    require_signal(trigger, "trigger")
    require_scheduler(scheduler)
    require_flag(reset_on_repeat_trigger, "reset_on_repeat_trigger")
    seconds = to_seconds(duration)
    if seconds <= 0:
        return trigger
    return timed_signal(
        trigger,
        lambda observer: _DelayTimerSubscription(observer, scheduler, seconds, reset_on_repeat_trigger),
    )


def debounce(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    reset_on_repeat_value: bool = False,
) -> Signal:
    """
    Delayed echo of `source`: a value is emitted `duration` after it arrived,
    unless a different value (or, with `reset_on_repeat_value`, any value)
    arrived in the meantime.

    :param source: Boolean signal.
    :param duration: Seconds or timedelta. Zero or less echoes immediately.
    :param scheduler: Time source.
    :param reset_on_repeat_value: Restart the wait on repeated values.
    """
    require_signal(source)
    require_scheduler(scheduler)
    require_flag(reset_on_repeat_value, "reset_on_repeat_value")
    seconds = to_seconds(duration)
    if seconds <= 0:
        return source
    return timed_signal(
        source,
        lambda observer: _DebounceSubscription(observer, scheduler, seconds, reset_on_repeat_value),
    )
