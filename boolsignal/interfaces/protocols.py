# boolsignal/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class DisposableProtocol(Protocol):
    """
    Anything that releases a resource when disposed.

    Runtime Invariants:
    - dispose() is idempotent.
    """

    def dispose(self) -> None: ...


@runtime_checkable
class ObserverProtocol(Protocol):
    """
    Receiver of a signal's notifications.

    Runtime Invariants:
    - on_next is never called after on_error or on_completed.
    - At most one of on_error / on_completed is called.
    """

    def on_next(self, value: Any) -> None: ...

    def on_error(self, error: Exception) -> None: ...

    def on_completed(self) -> None: ...


@runtime_checkable
class ScheduledHandleProtocol(Protocol):
    """
    A pending delayed callback.

    Runtime Invariants:
    - After cancel() returns, the callback will not start.
    """

    def cancel(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


@runtime_checkable
class SchedulerProtocol(Protocol):
    """
    Time source able to run a callback after a delay.

    Methods:
        now(): Current time in seconds (virtual or real).
        schedule(delay, action): Run action after delay seconds; returns a handle.

    Runtime Invariants:
    - Callbacks scheduled for the same due time run in registration order.
    """

    def now(self) -> float: ...

    def schedule(self, delay: float, action: Callable[[], None]) -> ScheduledHandleProtocol: ...
