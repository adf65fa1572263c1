# boolsignal/core/signals.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Sequence, Union

from boolsignal.core.errors import ValidationError
from boolsignal.interfaces.protocols import DisposableProtocol, ObserverProtocol
from boolsignal.interfaces.types import CompletedHandler, ErrorHandler
from boolsignal.runtime.concurrency import get_lock, get_subscription_lock, with_lock

if TYPE_CHECKING:
    from boolsignal.interfaces.types import Duration, OperatorDistinctness
    from boolsignal.runtime.scheduler import Scheduler

logger = logging.getLogger(__name__)

_UNSET = object()


class Subscription:
    """
    Handle returned by `Signal.subscribe`. Disposing it detaches the subscriber
    and tears down every resource (including pending timers) owned by the
    subscription.
    """

    def __init__(self, dispose_action: Optional[Callable[[], None]] = None) -> None:
        self._dispose_action = dispose_action
        self._disposed = False
        self._lock = get_lock()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        with with_lock(self._lock):
            if self._disposed:
                return
            self._disposed = True
            action, self._dispose_action = self._dispose_action, None
        if action is not None:
            action()

    @staticmethod
    def empty() -> "Subscription":
        """A subscription with nothing to release."""
        return Subscription()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()


class CompositeSubscription(Subscription):
    """
    Disposes a group of subscriptions together. Items added after disposal are
    disposed immediately.
    """

    def __init__(self, *subscriptions: Subscription) -> None:
        super().__init__(self._dispose_all)
        self._items: List[Subscription] = list(subscriptions)

    def add(self, subscription: Subscription) -> None:
        with with_lock(self._lock):
            if not self._disposed:
                self._items.append(subscription)
                return
        subscription.dispose()

    def _dispose_all(self) -> None:
        items, self._items = self._items, []
        for item in items:
            item.dispose()


def _as_subscription(result: Any) -> Subscription:
    if result is None:
        return Subscription.empty()
    if isinstance(result, Subscription):
        return result
    if callable(result):
        return Subscription(result)
    if isinstance(result, DisposableProtocol):
        return Subscription(result.dispose)
    raise ValidationError("subscribe function returned an unsupported value", "result", result)


class Observer:
    """
    Callback bundle receiving a signal's notifications. Missing `on_next` and
    `on_completed` handlers are no-ops; a missing `on_error` handler logs the
    error and re-raises it to whoever pushed it.
    """

    def __init__(
        self,
        on_next: Optional[Callable[[Any], None]] = None,
        on_error: Optional[ErrorHandler] = None,
        on_completed: Optional[CompletedHandler] = None,
    ) -> None:
        self._on_next = on_next
        self._on_error = on_error
        self._on_completed = on_completed

    def on_next(self, value: Any) -> None:
        if self._on_next is not None:
            self._on_next(value)

    def on_error(self, error: Exception) -> None:
        if self._on_error is not None:
            self._on_error(error)
            return
        logger.error("Unhandled error in signal: %s", error)
        raise error

    def on_completed(self) -> None:
        if self._on_completed is not None:
            self._on_completed()


class _AutoDetachObserver:
    """
    Internal observer placed between a signal and its subscriber. Enforces the
    notification grammar (no value after a terminal, at most one terminal) and
    disposes the upstream subscription once a terminal has been delivered.
    """

    def __init__(self, observer: ObserverProtocol) -> None:
        self._observer = observer
        self._upstream: Optional[Subscription] = None
        self._stopped = False
        self._disposed = False
        self._lock = get_lock()

    def set_upstream(self, subscription: Subscription) -> None:
        with with_lock(self._lock):
            if not self._disposed:
                self._upstream = subscription
                return
        subscription.dispose()

    def on_next(self, value: Any) -> None:
        if self._stopped:
            return
        self._observer.on_next(value)

    def on_error(self, error: Exception) -> None:
        if not self._stop():
            return
        try:
            self._observer.on_error(error)
        finally:
            self.dispose()

    def on_completed(self) -> None:
        if not self._stop():
            return
        try:
            self._observer.on_completed()
        finally:
            self.dispose()

    def _stop(self) -> bool:
        with with_lock(self._lock):
            if self._stopped:
                return False
            self._stopped = True
            return True

    def dispose(self) -> None:
        with with_lock(self._lock):
            self._stopped = True
            if self._disposed:
                return
            self._disposed = True
            upstream, self._upstream = self._upstream, None
        if upstream is not None:
            upstream.dispose()


SubscribeFunction = Callable[[Any], Any]


class Signal:
    """
    Push-based sequence of values terminated by at most one of completion or
    error. A signal is cold: every subscription runs `subscribe_function` again
    and owns the state that creates. Use `share()` to multicast one upstream
    subscription.
    """

    def __init__(self, subscribe_function: SubscribeFunction) -> None:
        """
        :param subscribe_function: Called with an observer for every subscription.
            May return a Subscription, a zero-argument dispose callable, or None.
        """
        if not callable(subscribe_function):
            raise ValidationError("subscribe_function must be callable", "subscribe_function", subscribe_function)
        self._subscribe_function = subscribe_function

    def subscribe(
        self,
        on_next: Any = None,
        on_error: Optional[ErrorHandler] = None,
        on_completed: Optional[CompletedHandler] = None,
    ) -> Subscription:
        """
        Start receiving notifications.

        :param on_next: Value callback, or an observer object with on_next,
            on_error and on_completed methods.
        :param on_error: Error callback.
        :param on_completed: Completion callback.
        :return: Subscription whose dispose() detaches and releases resources.
        """
        if on_next is not None and not callable(on_next) and isinstance(on_next, ObserverProtocol):
            observer = on_next
        else:
            observer = Observer(on_next, on_error, on_completed)

        sink = _AutoDetachObserver(observer)
        sink.set_upstream(_as_subscription(self._subscribe_function(sink)))
        return Subscription(sink.dispose)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def map(self, selector: Callable[[Any], Any]) -> "Signal":
        """Transform every value with `selector`."""
        source = self

        def _subscribe(observer):
            return source.subscribe(lambda value: observer.on_next(selector(value)), observer.on_error, observer.on_completed)

        return Signal(_subscribe)

    def filter(self, predicate: Callable[[Any], bool]) -> "Signal":
        """Only pass values for which `predicate` is true."""
        source = self

        def _subscribe(observer):
            def _on_next(value):
                if predicate(value):
                    observer.on_next(value)

            return source.subscribe(_on_next, observer.on_error, observer.on_completed)

        return Signal(_subscribe)

    def distinct_until_changed(self) -> "Signal":
        """Drop values equal to the value immediately before them."""
        source = self

        def _subscribe(observer):
            last = _UNSET

            def _on_next(value):
                nonlocal last
                if last is not _UNSET and last == value:
                    return
                last = value
                observer.on_next(value)

            return source.subscribe(_on_next, observer.on_error, observer.on_completed)

        return Signal(_subscribe)

    def skip(self, count: int) -> "Signal":
        """Drop the first `count` values."""
        source = self

        def _subscribe(observer):
            remaining = count

            def _on_next(value):
                nonlocal remaining
                if remaining > 0:
                    remaining -= 1
                    return
                observer.on_next(value)

            return source.subscribe(_on_next, observer.on_error, observer.on_completed)

        return Signal(_subscribe)

    def take(self, count: int) -> "Signal":
        """Pass the first `count` values, then complete."""
        source = self

        def _subscribe(observer):
            if count <= 0:
                observer.on_completed()
                return None
            remaining = count

            def _on_next(value):
                nonlocal remaining
                if remaining <= 0:
                    return
                remaining -= 1
                observer.on_next(value)
                if remaining == 0:
                    observer.on_completed()

            return source.subscribe(_on_next, observer.on_error, observer.on_completed)

        return Signal(_subscribe)

    def start_with(self, *values: Any) -> "Signal":
        """Emit `values` on subscribe, before anything from this signal."""
        source = self

        def _subscribe(observer):
            for value in values:
                observer.on_next(value)
            return source.subscribe(observer)

        return Signal(_subscribe)

    def merge(self, *others: "Signal") -> "Signal":
        """Interleave this signal with `others`."""
        return merge(self, *others)

    def share(self) -> "Signal":
        """
        Multicast one upstream subscription to every current subscriber. The
        upstream subscription is made by the first subscriber and released when
        the last one disposes.
        """
        return _RefCountSignal(self)

    # ------------------------------------------------------------------
    # Boolean operators
    # ------------------------------------------------------------------

    def not_(self) -> "Signal":
        from boolsignal.core.logic import not_

        return not_(self)

    def and_(self, *others: "Signal", distinctness: Union["OperatorDistinctness", bool] = True) -> "Signal":
        from boolsignal.core.logic import and_

        return and_(self, *others, distinctness=distinctness)

    def or_(self, *others: "Signal", distinctness: Union["OperatorDistinctness", bool] = True) -> "Signal":
        from boolsignal.core.logic import or_

        return or_(self, *others, distinctness=distinctness)

    def xor(self, other: "Signal", distinctness: Union["OperatorDistinctness", bool] = True) -> "Signal":
        from boolsignal.core.logic import xor

        return xor(self, other, distinctness=distinctness)

    def subscribe_true(self, action: Callable[[], None]) -> Subscription:
        from boolsignal.core.logic import subscribe_true

        return subscribe_true(self, action)

    def subscribe_false(self, action: Callable[[], None]) -> Subscription:
        from boolsignal.core.logic import subscribe_false

        return subscribe_false(self, action)

    def subscribe_true_false(self, true_action: Callable[[], None], false_action: Callable[[], None]) -> Subscription:
        from boolsignal.core.logic import subscribe_true_false

        return subscribe_true_false(self, true_action, false_action)

    # ------------------------------------------------------------------
    # Timed operators
    # ------------------------------------------------------------------

    def true_for_at_least(self, duration: "Duration", scheduler: "Scheduler", **options: Any) -> "Signal":
        from boolsignal.core.holds import true_for_at_least

        return true_for_at_least(self, duration, scheduler, **options)

    def false_for_at_least(self, duration: "Duration", scheduler: "Scheduler", **options: Any) -> "Signal":
        from boolsignal.core.holds import false_for_at_least

        return false_for_at_least(self, duration, scheduler, **options)

    def limit_true_duration(self, duration: "Duration", scheduler: "Scheduler", **options: Any) -> "Signal":
        from boolsignal.core.holds import limit_true_duration

        return limit_true_duration(self, duration, scheduler, **options)

    def limit_false_duration(self, duration: "Duration", scheduler: "Scheduler", **options: Any) -> "Signal":
        from boolsignal.core.holds import limit_false_duration

        return limit_false_duration(self, duration, scheduler, **options)

    def persist_true_for(self, duration: "Duration", scheduler: "Scheduler", **options: Any) -> "Signal":
        from boolsignal.core.holds import persist_true_for

        return persist_true_for(self, duration, scheduler, **options)

    def persist_false_for(self, duration: "Duration", scheduler: "Scheduler", **options: Any) -> "Signal":
        from boolsignal.core.holds import persist_false_for

        return persist_false_for(self, duration, scheduler, **options)

    def when_true_for(self, duration: "Duration", scheduler: "Scheduler", **options: Any) -> "Signal":
        from boolsignal.core.holds import when_true_for

        return when_true_for(self, duration, scheduler, **options)

    def when_false_for(self, duration: "Duration", scheduler: "Scheduler", **options: Any) -> "Signal":
        from boolsignal.core.holds import when_false_for

        return when_false_for(self, duration, scheduler, **options)


class Subject(Signal):
    """
    A signal that is also an observer: values pushed with on_next are delivered
    to every current subscriber in subscription order. Once terminated, late
    subscribers receive the terminal notification immediately and further
    pushes are ignored.
    """

    def __init__(self) -> None:
        super().__init__(self._subscribe_core)
        self._observers: List[Any] = []
        self._lock = get_lock()
        self._stopped = False
        self._error: Optional[Exception] = None

    @property
    def has_observers(self) -> bool:
        with with_lock(self._lock):
            return bool(self._observers)

    def _subscribe_core(self, observer: Any) -> Optional[Callable[[], None]]:
        with with_lock(self._lock):
            if not self._stopped:
                self._observers.append(observer)
                return lambda: self._remove(observer)
            error = self._error
        if error is not None:
            observer.on_error(error)
        else:
            observer.on_completed()
        return None

    def _remove(self, observer: Any) -> None:
        with with_lock(self._lock):
            if observer in self._observers:
                self._observers.remove(observer)

    def _snapshot(self, terminate: bool = False, error: Optional[Exception] = None) -> Sequence[Any]:
        with with_lock(self._lock):
            if self._stopped:
                return ()
            observers = list(self._observers)
            if terminate:
                self._stopped = True
                self._error = error
                self._observers.clear()
            return observers

    def on_next(self, value: Any) -> None:
        for observer in self._snapshot():
            observer.on_next(value)

    def on_error(self, error: Exception) -> None:
        for observer in self._snapshot(terminate=True, error=error):
            observer.on_error(error)

    def on_completed(self) -> None:
        for observer in self._snapshot(terminate=True):
            observer.on_completed()


class BehaviorSubject(Subject):
    """
    Subject that remembers its latest value and replays it to each new
    subscriber, so a fresh subscription starts from the current state.
    """

    def __init__(self, value: Any) -> None:
        super().__init__()
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    def _subscribe_core(self, observer: Any) -> Optional[Callable[[], None]]:
        with with_lock(self._lock):
            stopped = self._stopped
            value = self._value
        if not stopped:
            observer.on_next(value)
        return super()._subscribe_core(observer)

    def on_next(self, value: Any) -> None:
        with with_lock(self._lock):
            if self._stopped:
                return
            self._value = value
        super().on_next(value)


class _RefCountSignal(Signal):
    """
    Internal multicast wrapper used by `Signal.share()`.
    """

    def __init__(self, source: Signal) -> None:
        super().__init__(self._subscribe_core)
        self._source = source
        self._lock = get_lock()
        self._subject: Optional[Subject] = None
        self._connection: Optional[Subscription] = None
        self._count = 0

    def _subscribe_core(self, observer: Any) -> Callable[[], None]:
        with with_lock(self._lock):
            connect = self._subject is None
            if connect:
                self._subject = Subject()
            subject = self._subject
            self._count += 1

        inner = subject.subscribe(observer)
        if connect:
            connection = self._source.subscribe(subject)
            with with_lock(self._lock):
                if self._subject is subject:
                    self._connection = connection
                    connection = None
            if connection is not None:
                connection.dispose()

        def _dispose() -> None:
            inner.dispose()
            with with_lock(self._lock):
                if self._subject is not subject:
                    return
                self._count -= 1
                if self._count > 0:
                    return
                connection, self._connection = self._connection, None
                self._subject = None
            if connection is not None:
                connection.dispose()

        return _dispose


def create(subscribe_function: SubscribeFunction) -> Signal:
    """Build a signal from a subscribe function."""
    return Signal(subscribe_function)


def of(*values: Any) -> Signal:
    """A signal that emits `values` synchronously and completes."""
    return from_iterable(values)


def from_iterable(values: Iterable[Any]) -> Signal:
    """A signal that emits every item of `values` synchronously and completes."""
    items = list(values)

    def _subscribe(observer):
        for value in items:
            observer.on_next(value)
        observer.on_completed()

    return Signal(_subscribe)


def empty() -> Signal:
    """A signal that completes immediately."""
    return Signal(lambda observer: observer.on_completed())


def never() -> Signal:
    """A signal that never emits and never terminates."""
    return Signal(lambda observer: None)


def throw(error: Exception) -> Signal:
    """A signal that fails immediately with `error`."""
    return Signal(lambda observer: observer.on_error(error))


def merge(*signals: Signal) -> Signal:
    """
    Interleave several signals. Completes after every input completed; an error
    from any input terminates the result immediately.
    """
    for index, signal in enumerate(signals):
        if not isinstance(signal, Signal):
            raise ValidationError("merge expects Signal instances", f"signals[{index}]", signal)

    def _subscribe(observer):
        lock = get_subscription_lock()
        remaining = len(signals)
        group = CompositeSubscription()

        def _on_next(value):
            with with_lock(lock):
                observer.on_next(value)

        def _on_error(error):
            with with_lock(lock):
                observer.on_error(error)

        def _on_completed():
            nonlocal remaining
            with with_lock(lock):
                remaining -= 1
                if remaining == 0:
                    observer.on_completed()

        if not signals:
            observer.on_completed()
            return group
        for signal in signals:
            group.add(signal.subscribe(_on_next, _on_error, _on_completed))
        return group

    return Signal(_subscribe)


def combine_latest(signals: Sequence[Signal], combiner: Callable[[List[Any]], Any]) -> Signal:
    """
    Emit `combiner(latest_values)` every time any input emits, once each input
    has produced at least one value. Completes after every input completed; an
    error from any input terminates the result immediately.
    """
    signals = list(signals)
    for index, signal in enumerate(signals):
        if not isinstance(signal, Signal):
            raise ValidationError("combine_latest expects Signal instances", f"signals[{index}]", signal)

    def _subscribe(observer):
        lock = get_subscription_lock()
        values: List[Any] = [_UNSET] * len(signals)
        remaining = len(signals)
        group = CompositeSubscription()

        def _on_next_at(index):
            def _on_next(value):
                with with_lock(lock):
                    values[index] = value
                    if any(item is _UNSET for item in values):
                        return
                    observer.on_next(combiner(list(values)))

            return _on_next

        def _on_error(error):
            with with_lock(lock):
                observer.on_error(error)

        def _on_completed():
            nonlocal remaining
            with with_lock(lock):
                remaining -= 1
                if remaining == 0:
                    observer.on_completed()

        if not signals:
            observer.on_completed()
            return group
        for index, signal in enumerate(signals):
            group.add(signal.subscribe(_on_next_at(index), _on_error, _on_completed))
        return group

    return Signal(_subscribe)
