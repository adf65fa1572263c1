# boolsignal/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from datetime import timedelta
from enum import Enum, auto
from typing import Callable, Union

Duration = Union[int, float, timedelta]


class OperatorDistinctness(Enum):
    """
    Where repeated equal values are suppressed.

    OUTPUT: a result equal to the previously emitted result is dropped.
    INPUT: consecutive equal source values are dropped before combining, but
        equal consecutive results may still be emitted.
    NOT_DISTINCT: nothing is dropped.
    """

    OUTPUT = auto()
    INPUT = auto()
    NOT_DISTINCT = auto()


class Change(Enum):
    """Origin of a combined event inside a timed operator."""

    SOURCE = auto()
    TIMER = auto()


# Callback Types
ErrorHandler = Callable[[Exception], None]
CompletedHandler = Callable[[], None]
Action = Callable[[], None]
