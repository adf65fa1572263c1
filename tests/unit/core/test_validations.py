# tests/unit/core/test_validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from datetime import timedelta

import pytest

from boolsignal.core.errors import ValidationError
from boolsignal.core.signals import Subject
from boolsignal.core.validations import (
    Validator,
    coerce_distinctness,
    require_action,
    require_flag,
    require_scheduler,
    require_signal,
    to_seconds,
)
from boolsignal.interfaces.types import OperatorDistinctness


@pytest.fixture
def validator():
    return Validator()


def test_validate_signal(validator, subject):
    assert validator.validate_signal(subject) is subject
    with pytest.raises(ValidationError) as excinfo:
        validator.validate_signal(None)
    assert excinfo.value.argument == "source"
    with pytest.raises(ValidationError):
        validator.validate_signal([True, False], "trigger")


def test_validate_scheduler(validator, scheduler):
    assert validator.validate_scheduler(scheduler) is scheduler
    with pytest.raises(ValidationError):
        validator.validate_scheduler(None)
    with pytest.raises(ValidationError):
        validator.validate_scheduler(object())


def test_scheduler_duck_typing(validator):
    class MinimalScheduler:
        def now(self):
            return 0.0

        def schedule(self, delay, action):
            return None

    sched = MinimalScheduler()
    assert validator.validate_scheduler(sched) is sched


def test_validate_action(validator):
    action = lambda: None  # noqa: E731
    assert validator.validate_action(action) is action
    with pytest.raises(ValidationError):
        validator.validate_action(None)
    with pytest.raises(ValidationError):
        validator.validate_action("run")


@pytest.mark.parametrize("value", [1, 0, None, "true"])
def test_validate_flag_rejects_non_bool(validator, value):
    with pytest.raises(ValidationError):
        validator.validate_flag(value, "reset_on_repeat_true")


def test_module_helpers(subject, scheduler):
    assert require_signal(subject) is subject
    assert require_scheduler(scheduler) is scheduler
    assert require_flag(True, "flag") is True
    with pytest.raises(ValidationError):
        require_action(42)


@pytest.mark.parametrize(
    "duration, expected",
    [
        (2, 2.0),
        (0.5, 0.5),
        (timedelta(seconds=3), 3.0),
        (timedelta(milliseconds=250), 0.25),
        (0, 0.0),
        (-1, -1.0),
    ],
)
def test_to_seconds(duration, expected):
    assert to_seconds(duration) == pytest.approx(expected)


@pytest.mark.parametrize("duration", [None, True, "2", [2], float("nan"), float("inf"), float("-inf")])
def test_to_seconds_rejects(duration):
    with pytest.raises(ValidationError) as excinfo:
        to_seconds(duration)
    assert excinfo.value.argument == "duration"


@pytest.mark.parametrize(
    "value, expected",
    [
        (OperatorDistinctness.INPUT, OperatorDistinctness.INPUT),
        (OperatorDistinctness.NOT_DISTINCT, OperatorDistinctness.NOT_DISTINCT),
        (True, OperatorDistinctness.OUTPUT),
        (False, OperatorDistinctness.NOT_DISTINCT),
    ],
)
def test_coerce_distinctness(value, expected):
    assert coerce_distinctness(value) is expected


def test_coerce_distinctness_rejects():
    with pytest.raises(ValidationError):
        coerce_distinctness("OUTPUT")
    with pytest.raises(ValidationError):
        coerce_distinctness(None)
