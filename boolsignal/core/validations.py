# boolsignal/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import math
from datetime import timedelta
from numbers import Real
from typing import Any, Union

from boolsignal.core.errors import ValidationError
from boolsignal.core.signals import Signal
from boolsignal.interfaces.protocols import SchedulerProtocol
from boolsignal.interfaces.types import Duration, OperatorDistinctness


class Validator:
    """
    Checks operator arguments at call time so that mistakes surface
    synchronously, before anything is subscribed.
    """

    def __init__(self) -> None:
        self._rules = _DefaultValidationRules

    def validate_signal(self, value: Any, argument: str = "source") -> Signal:
        """
        :raises ValidationError: If `value` is not a Signal.
        """
        return self._rules.validate_signal(value, argument)

    def validate_scheduler(self, value: Any, argument: str = "scheduler") -> SchedulerProtocol:
        """
        :raises ValidationError: If `value` does not provide now() and schedule().
        """
        return self._rules.validate_scheduler(value, argument)

    def validate_action(self, value: Any, argument: str = "action") -> Any:
        """
        :raises ValidationError: If `value` is not callable.
        """
        return self._rules.validate_action(value, argument)

    def validate_flag(self, value: Any, argument: str) -> bool:
        """
        :raises ValidationError: If `value` is not a bool.
        """
        return self._rules.validate_flag(value, argument)


class _DefaultValidationRules:
    """
    Built-in argument rules shared by every operator.
    """

    @staticmethod
    def validate_signal(value: Any, argument: str) -> Signal:
        if value is None:
            raise ValidationError(f"{argument} must not be None", argument, value)
        if not isinstance(value, Signal):
            raise ValidationError(f"{argument} must be a Signal, got {type(value).__name__}", argument, value)
        return value

    @staticmethod
    def validate_scheduler(value: Any, argument: str) -> SchedulerProtocol:
        if value is None:
            raise ValidationError(f"{argument} must not be None", argument, value)
        if not isinstance(value, SchedulerProtocol):
            raise ValidationError(f"{argument} must provide now() and schedule()", argument, value)
        return value

    @staticmethod
    def validate_action(value: Any, argument: str) -> Any:
        if value is None or not callable(value):
            raise ValidationError(f"{argument} must be callable", argument, value)
        return value

    @staticmethod
    def validate_flag(value: Any, argument: str) -> bool:
        if not isinstance(value, bool):
            raise ValidationError(f"{argument} must be a bool", argument, value)
        return value


_validator = Validator()


def require_signal(value: Any, argument: str = "source") -> Signal:
    return _validator.validate_signal(value, argument)


def require_scheduler(value: Any, argument: str = "scheduler") -> SchedulerProtocol:
    return _validator.validate_scheduler(value, argument)


def require_action(value: Any, argument: str = "action") -> Any:
    return _validator.validate_action(value, argument)


def require_flag(value: Any, argument: str) -> bool:
    return _validator.validate_flag(value, argument)


def to_seconds(duration: Duration, argument: str = "duration") -> float:
    """
    Normalise a duration to seconds. Numbers are taken as seconds; a
    `timedelta` is converted. Zero and negative values are returned as-is,
    the operators treat them as pass-through.

    :raises ValidationError: For None, bools, non-numeric and non-finite values.
    """
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    if isinstance(duration, bool) or not isinstance(duration, Real):
        raise ValidationError(f"{argument} must be a number of seconds or a timedelta", argument, duration)
    seconds = float(duration)
    if not math.isfinite(seconds):
        raise ValidationError(f"{argument} must be finite", argument, duration)
    return seconds


def coerce_distinctness(value: Union[OperatorDistinctness, bool], argument: str = "distinctness") -> OperatorDistinctness:
    """
    Accept an OperatorDistinctness, or a bool where True means OUTPUT and
    False means NOT_DISTINCT.
    """
    if isinstance(value, OperatorDistinctness):
        return value
    if isinstance(value, bool):
        return OperatorDistinctness.OUTPUT if value else OperatorDistinctness.NOT_DISTINCT
    raise ValidationError(f"{argument} must be an OperatorDistinctness or a bool", argument, value)
