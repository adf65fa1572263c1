# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from typing import Any, List, Optional, Tuple

import pytest

from boolsignal.core.signals import Signal, Subject, Subscription
from boolsignal.runtime.scheduler import VirtualTimeScheduler


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "stress: mark test as a stress test")
    config.addinivalue_line("markers", "property: mark test as a property-based test")


class Recorder:
    """
    Subscribes to a signal and records every notification together with the
    scheduler time it arrived at.
    """

    def __init__(self, scheduler: VirtualTimeScheduler) -> None:
        self._scheduler = scheduler
        self.events: List[Tuple[float, Any]] = []
        self.error: Optional[Exception] = None
        self.completed = False
        self.completed_at: Optional[float] = None
        self.subscription: Optional[Subscription] = None

    @property
    def values(self) -> List[Any]:
        return [value for _, value in self.events]

    def on_next(self, value: Any) -> None:
        self.events.append((self._scheduler.now(), value))

    def on_error(self, error: Exception) -> None:
        self.error = error

    def on_completed(self) -> None:
        self.completed = True
        self.completed_at = self._scheduler.now()

    def attach(self, signal: Signal) -> "Recorder":
        self.subscription = signal.subscribe(self)
        return self


@pytest.fixture
def scheduler() -> VirtualTimeScheduler:
    """A virtual-time scheduler starting at zero."""
    return VirtualTimeScheduler()


@pytest.fixture
def subject() -> Subject:
    """A fresh subject to push source values through."""
    return Subject()


@pytest.fixture
def record(scheduler):
    """Return a function that subscribes a Recorder to a signal."""

    def _record(signal: Signal) -> Recorder:
        return Recorder(scheduler).attach(signal)

    return _record


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Cleanup any remaining threads after each test
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive() and thread.daemon:
            thread.join(timeout=1.0)
