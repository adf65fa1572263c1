# tests/unit/core/test_holds_maximum.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from boolsignal.core.errors import ValidationError
from boolsignal.core.holds import limit_false_duration, limit_true_duration
from boolsignal.interfaces.types import OperatorDistinctness

DISTINCT_AND_RESET = [(distinct, reset) for distinct in (True, False) for reset in (True, False)]

# -----------------------------------------------------------------------------
# INITIAL VALUE
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("distinct, reset", DISTINCT_AND_RESET)
@pytest.mark.parametrize("initial", [True, False])
def test_initial_value_passes_immediately(subject, scheduler, record, distinct, reset, initial):
    rec = record(limit_true_duration(subject, 60, scheduler, distinct, reset))
    subject.on_next(initial)
    assert rec.values == [initial]


@pytest.mark.parametrize("reset", [True, False])
@pytest.mark.parametrize("initial", [True, False])
def test_initial_value_distinct(subject, scheduler, record, reset, initial):
    rec = record(limit_true_duration(subject, 60, scheduler, reset_on_repeat_true=reset))
    subject.on_next(initial)
    subject.on_next(initial)
    assert rec.values == [initial]


@pytest.mark.parametrize("reset", [True, False])
@pytest.mark.parametrize("initial", [True, False])
def test_initial_value_not_distinct(subject, scheduler, record, reset, initial):
    rec = record(limit_true_duration(subject, 60, scheduler, distinctness=False, reset_on_repeat_true=reset))
    subject.on_next(initial)
    subject.on_next(initial)
    assert rec.values == [initial, initial]


# -----------------------------------------------------------------------------
# FORCED FALSE
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("distinct, reset", DISTINCT_AND_RESET)
def test_false_after_duration(subject, scheduler, record, distinct, reset):
    rec = record(limit_true_duration(subject, 2, scheduler, distinct, reset))
    subject.on_next(True)
    assert rec.values == [True]
    scheduler.advance_by(1)
    assert rec.values == [True]
    scheduler.advance_by(1)
    assert rec.events == [(0.0, True), (2.0, False)]
    scheduler.advance_by(10)
    assert len(rec.events) == 2


@pytest.mark.parametrize("distinct, reset", DISTINCT_AND_RESET)
def test_false_after_duration_repeats(subject, scheduler, record, distinct, reset):
    rec = record(limit_true_duration(subject, 2, scheduler, distinct, reset))
    subject.on_next(True)
    scheduler.advance_by(2)
    assert rec.values[-1] is False

    subject.on_next(False)
    subject.on_next(True)
    assert rec.values[-1] is True
    scheduler.advance_by(1)
    assert rec.values[-1] is True
    scheduler.advance_by(1)
    assert rec.events[-1] == (4.0, False)


@pytest.mark.parametrize("distinct, reset", DISTINCT_AND_RESET)
def test_false_is_immediate(subject, scheduler, record, distinct, reset):
    rec = record(limit_true_duration(subject, 2, scheduler, distinct, reset))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_next(False)
    assert rec.events[-1] == (1.0, False)


def test_no_forced_false_when_source_already_false(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler, OperatorDistinctness.NOT_DISTINCT))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_next(False)
    scheduler.advance_by(5)
    assert rec.values == [True, False]


def test_repeated_true_after_expiry_rearms(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler))
    subject.on_next(True)
    scheduler.advance_by(3)
    subject.on_next(True)
    scheduler.advance_by(2)
    assert rec.events == [(0.0, True), (2.0, False), (3.0, True), (5.0, False)]


# -----------------------------------------------------------------------------
# RESET POLICY AND DISTINCTNESS
# -----------------------------------------------------------------------------


def test_timer_not_reset_on_repeated_true_distinct(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_next(True)
    assert rec.values == [True]

    scheduler.advance_by(1)
    assert rec.values == [True, False]

    subject.on_next(False)
    assert rec.values == [True, False]


def test_timer_not_reset_on_repeated_true_not_distinct(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler, distinctness=False))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_next(True)
    assert rec.values == [True, True]

    scheduler.advance_by(1)
    assert rec.values == [True, True, False]

    subject.on_next(False)
    assert rec.values == [True, True, False, False]


def test_timer_reset_on_repeated_true_distinct(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler, reset_on_repeat_true=True))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_next(True)
    assert rec.values == [True]

    scheduler.advance_by(1)
    assert rec.values == [True]

    scheduler.advance_by(1)
    assert rec.events == [(0.0, True), (3.0, False)]

    subject.on_next(False)
    assert rec.values == [True, False]


def test_timer_reset_on_repeated_true_not_distinct(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler, distinctness=False, reset_on_repeat_true=True))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_next(True)
    assert rec.values == [True, True]

    scheduler.advance_by(1)
    assert rec.values == [True, True]

    scheduler.advance_by(1)
    assert rec.values == [True, True, False]

    subject.on_next(False)
    assert rec.values == [True, True, False, False]


def test_input_distinctness_repeat_true_extends_deadline_with_reset(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler, OperatorDistinctness.INPUT, reset_on_repeat_true=True))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_next(True)
    scheduler.advance_by(1)
    assert rec.events == [(0.0, True)]

    scheduler.advance_by(1)
    assert rec.events == [(0.0, True), (3.0, False)]


def test_input_distinctness_repeat_true_keeps_deadline_without_reset(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler, OperatorDistinctness.INPUT))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_next(True)
    scheduler.advance_by(1)
    assert rec.events == [(0.0, True), (2.0, False)]


def test_input_distinctness_may_repeat_results(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler, OperatorDistinctness.INPUT))
    subject.on_next(True)
    scheduler.advance_by(2)
    subject.on_next(False)
    subject.on_next(False)
    assert rec.events == [(0.0, True), (2.0, False), (2.0, False)]


# -----------------------------------------------------------------------------
# TERMINATION AND ARGUMENTS
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("distinct, reset", DISTINCT_AND_RESET)
def test_completion_is_immediate(subject, scheduler, record, distinct, reset):
    rec = record(limit_true_duration(subject, 2, scheduler, distinct, reset))
    subject.on_next(True)
    scheduler.advance_by(1)
    subject.on_completed()
    assert rec.completed_at == 1.0
    scheduler.advance_by(5)
    assert rec.values == [True]


@pytest.mark.parametrize("distinct, reset", DISTINCT_AND_RESET)
def test_error_is_immediate(subject, scheduler, record, distinct, reset):
    rec = record(limit_true_duration(subject, 2, scheduler, distinct, reset))
    subject.on_next(True)
    scheduler.advance_by(1)
    error = RuntimeError("This is a test")
    subject.on_error(error)
    assert rec.error is error
    scheduler.advance_by(5)
    assert rec.values == [True]


def test_non_positive_duration_returns_source(subject, scheduler):
    assert limit_true_duration(subject, 0, scheduler) is subject
    assert limit_true_duration(subject, -0.5, scheduler) is subject


def test_invalid_arguments_raise_at_call_time(subject, scheduler):
    with pytest.raises(ValidationError):
        limit_true_duration(subject, "2", scheduler)
    with pytest.raises(ValidationError):
        limit_true_duration(subject, 2, object())
    with pytest.raises(ValidationError):
        limit_false_duration(None, 2, scheduler)


# -----------------------------------------------------------------------------
# FALSE-SIDE MIRROR
# -----------------------------------------------------------------------------


def test_limit_false_duration_forces_true(subject, scheduler, record):
    rec = record(limit_false_duration(subject, 2, scheduler))
    subject.on_next(False)
    scheduler.advance_by(2)
    assert rec.events == [(0.0, False), (2.0, True)]
    subject.on_next(True)
    assert rec.values == [False, True]


def test_limit_false_duration_true_is_immediate(subject, scheduler, record):
    rec = record(limit_false_duration(subject, 2, scheduler, reset_on_repeat_false=True))
    subject.on_next(False)
    scheduler.advance_by(1)
    subject.on_next(False)
    scheduler.advance_by(1.5)
    subject.on_next(True)
    assert rec.events == [(0.0, False), (2.5, True)]


def test_limit_fluent_forms(subject, scheduler, record):
    true_side = record(subject.limit_true_duration(2, scheduler))
    false_side = record(subject.limit_false_duration(2, scheduler))
    subject.on_next(True)
    scheduler.advance_by(2)
    assert true_side.values == [True, False]
    assert false_side.values == [True]


def test_repeated_resets_do_not_accumulate_scheduled_work(subject, scheduler, record):
    rec = record(limit_true_duration(subject, 2, scheduler, reset_on_repeat_true=True))
    for _ in range(1000):
        subject.on_next(True)
    assert scheduler.pending == 1
    assert scheduler.queued <= 2

    scheduler.advance_by(2)
    assert rec.events == [(0.0, True), (2.0, False)]
