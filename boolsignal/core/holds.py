# boolsignal/core/holds.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Timed hysteresis operators over boolean signals.

Only the true-side operators hold state; each false-side operator is the
true-side one wrapped in negation on both ends. Every operator returns its
input unchanged when the duration is zero or negative.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from boolsignal.core.logic import not_
from boolsignal.core.signals import Signal
from boolsignal.core.validations import (
    coerce_distinctness,
    require_flag,
    require_scheduler,
    require_signal,
    to_seconds,
)
from boolsignal.interfaces.protocols import SchedulerProtocol
from boolsignal.interfaces.types import Change, Duration, OperatorDistinctness
from boolsignal.runtime.timers import Debouncer, DelayTimer, TimedSubscription, timed_signal

DistinctnessArg = Union[OperatorDistinctness, bool]


class _TimerGatedSubscription(TimedSubscription):
    """
    Shared state of the minimum-hold and maximum-hold operators: the latest
    source value and a `DelayTimer` armed by it. Every change is fed to
    `_combine` tagged with where it came from.
    """

    def __init__(
        self,
        observer: Any,
        scheduler: SchedulerProtocol,
        duration: float,
        distinctness: OperatorDistinctness,
        reset_on_repeat_true: bool,
    ) -> None:
        super().__init__(observer)
        self._distinctness = distinctness
        self._source_value: Optional[bool] = None
        self._timer = DelayTimer(
            scheduler,
            duration,
            reset_on_repeat_true,
            lambda: self._combine(Change.TIMER),
            self._lock,
        )

    def _on_source(self, value: bool) -> None:
        repeated = self._source_value == value
        self._source_value = value
        # the timer sees every raw value; INPUT only filters what is combined
        self._timer.trigger(value)
        if repeated and self._distinctness is OperatorDistinctness.INPUT:
            return
        self._combine(Change.SOURCE)

    def _publish(self, value: bool) -> None:
        self._emit(value, distinct=self._distinctness is OperatorDistinctness.OUTPUT)

    def _combine(self, change: Change) -> None:
        raise NotImplementedError()

    def _teardown(self) -> None:
        self._timer.dispose()


class _MinimumHold(_TimerGatedSubscription):
    def _combine(self, change: Change) -> None:
        value = self._source_value
        if change is Change.SOURCE:
            # a false is held back while the timer runs
            if value or not self._timer.armed:
                self._publish(value)
        elif not value:
            self._publish(False)


class _MaximumHold(_TimerGatedSubscription):
    def _combine(self, change: Change) -> None:
        value = self._source_value
        if change is Change.SOURCE:
            self._publish(value)
        elif value:
            self._publish(False)


class _TrailingHold(TimedSubscription):
    """
    Trues pass immediately, falses are released by a `Debouncer`. The first
    value passes immediately whatever it is.
    """

    def __init__(self, observer: Any, scheduler: SchedulerProtocol, duration: float, reset_on_repeat_false: bool) -> None:
        super().__init__(observer)
        self._started = False
        self._debouncer = Debouncer(scheduler, duration, reset_on_repeat_false, self._on_release, self._lock)

    def _on_source(self, value: bool) -> None:
        if not self._started:
            self._started = True
            self._emit(value, distinct=True)
            return
        if value:
            self._emit(True, distinct=True)
        self._debouncer.push(value)

    def _on_release(self, value: bool) -> None:
        if not value:
            self._emit(False, distinct=True)

    def _teardown(self) -> None:
        self._debouncer.dispose()


class _LeadingHold(TimedSubscription):
    """
    Falses pass immediately, trues are released by a `Debouncer`. An initial
    true yields an immediate false.
    """

    def __init__(self, observer: Any, scheduler: SchedulerProtocol, duration: float, reset_on_repeat_true: bool) -> None:
        super().__init__(observer)
        self._started = False
        self._debouncer = Debouncer(scheduler, duration, reset_on_repeat_true, self._on_release, self._lock)

    def _on_source(self, value: bool) -> None:
        if not self._started:
            self._started = True
            if value:
                self._emit(False, distinct=True)
        if not value:
            self._emit(False, distinct=True)
        self._debouncer.push(value)

    def _on_release(self, value: bool) -> None:
        if value:
            self._emit(True, distinct=True)

    def _teardown(self) -> None:
        self._debouncer.dispose()


def true_for_at_least(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT,
    reset_on_repeat_true: bool = False,
) -> Signal:
    """
    Once `source` reports true, report true for at least `duration`. A false
    arriving earlier is released when the duration has elapsed, unless the
    source is true again by then. Several falses during the hold surface as
    one.

    :param source: Boolean signal.
    :param duration: Seconds or timedelta; zero or less returns `source`.
    :param scheduler: Time source.
    :param distinctness: OperatorDistinctness, or a bool (True is OUTPUT,
        False is NOT_DISTINCT).
    :param reset_on_repeat_true: A repeated true restarts the hold.
    """
    require_signal(source)
    require_scheduler(scheduler)
    policy = coerce_distinctness(distinctness)
    require_flag(reset_on_repeat_true, "reset_on_repeat_true")
    seconds = to_seconds(duration)
    if seconds <= 0:
        return source
    return timed_signal(
        source,
        lambda observer: _MinimumHold(observer, scheduler, seconds, policy, reset_on_repeat_true),
    )


def false_for_at_least(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT,
    reset_on_repeat_false: bool = False,
) -> Signal:
    """
    Once `source` reports false, report false for at least `duration`.
    Mirror of `true_for_at_least`.
    """
    return not_(true_for_at_least(not_(source), duration, scheduler, distinctness, reset_on_repeat_false))


def limit_true_duration(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT,
    reset_on_repeat_true: bool = False,
) -> Signal:
    """
    Follow `source`, but force a false once it has been true for `duration`
    without reporting false itself. A false from the source always passes
    immediately.

    :param source: Boolean signal.
    :param duration: Seconds or timedelta; zero or less returns `source`.
    :param scheduler: Time source.
    :param distinctness: OperatorDistinctness, or a bool (True is OUTPUT,
        False is NOT_DISTINCT). With OUTPUT the source's own false after a
        forced false is collapsed.
    :param reset_on_repeat_true: A repeated true restarts the countdown.
    """
    require_signal(source)
    require_scheduler(scheduler)
    policy = coerce_distinctness(distinctness)
    require_flag(reset_on_repeat_true, "reset_on_repeat_true")
    seconds = to_seconds(duration)
    if seconds <= 0:
        return source
    return timed_signal(
        source,
        lambda observer: _MaximumHold(observer, scheduler, seconds, policy, reset_on_repeat_true),
    )


def limit_false_duration(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT,
    reset_on_repeat_false: bool = False,
) -> Signal:
    """
    Follow `source`, but force a true once it has been false for `duration`.
    Mirror of `limit_true_duration`.
    """
    return not_(limit_true_duration(not_(source), duration, scheduler, distinctness, reset_on_repeat_false))


def persist_true_for(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    reset_on_repeat_false: bool = False,
) -> Signal:
    """
    Keep reporting true for `duration` after `source` turns false. A true
    passes immediately; a false is dropped if the source turns true again
    within `duration`. The result never repeats a value.

    :param reset_on_repeat_false: A repeated false restarts the hold.
    """
    require_signal(source)
    require_scheduler(scheduler)
    require_flag(reset_on_repeat_false, "reset_on_repeat_false")
    seconds = to_seconds(duration)
    if seconds <= 0:
        return source
    return timed_signal(
        source,
        lambda observer: _TrailingHold(observer, scheduler, seconds, reset_on_repeat_false),
    )


def persist_false_for(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    reset_on_repeat_true: bool = False,
) -> Signal:
    """
    Keep reporting false for `duration` after `source` turns true.
    Mirror of `persist_true_for`.
    """
    return not_(persist_true_for(not_(source), duration, scheduler, reset_on_repeat_true))


def when_true_for(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    reset_on_repeat_true: bool = False,
) -> Signal:
    """
    Report true only after `source` has been true for `duration`. A false
    passes immediately; an initial true is reported as false until confirmed.
    The result never repeats a value.

    :param reset_on_repeat_true: A repeated true restarts the wait.
    """
    require_signal(source)
    require_scheduler(scheduler)
    require_flag(reset_on_repeat_true, "reset_on_repeat_true")
    seconds = to_seconds(duration)
    if seconds <= 0:
        return source
    return timed_signal(
        source,
        lambda observer: _LeadingHold(observer, scheduler, seconds, reset_on_repeat_true),
    )


def when_false_for(
    source: Signal,
    duration: Duration,
    scheduler: SchedulerProtocol,
    reset_on_repeat_false: bool = False,
) -> Signal:
    """
    Report false only after `source` has been false for `duration`.
    Mirror of `when_true_for`.
    """
    return not_(when_true_for(not_(source), duration, scheduler, reset_on_repeat_false))
