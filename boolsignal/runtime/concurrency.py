# boolsignal/runtime/concurrency.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class _LockFactory:
    """
    Internal factory for the locks that guard per-subscription state.
    """

    def create_lock(self) -> threading.Lock:
        """
        Return a new plain lock.
        """
        return threading.Lock()

    def create_reentrant_lock(self) -> threading.RLock:
        """
        Return a new reentrant lock. Operator state uses these, because a value
        pushed downstream may synchronously feed back into the same operator.
        """
        return threading.RLock()


def get_lock() -> threading.Lock:
    """
    Provide a new lock instance to be used for synchronization.
    """
    return _LockFactory().create_lock()


def get_subscription_lock() -> threading.RLock:
    """
    Provide the lock that serialises source events and timer callbacks of a
    single subscription.
    """
    return _LockFactory().create_reentrant_lock()


@contextmanager
def with_lock(lock) -> Iterator[None]:
    """
    A convenience context manager that acquires the given lock upon entry and
    releases it upon exit.
    """
    lock.acquire()
    try:
        yield
    finally:
        lock.release()
