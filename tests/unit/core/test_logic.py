# tests/unit/core/test_logic.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import List
from unittest.mock import MagicMock

import pytest

from boolsignal.core.errors import ValidationError
from boolsignal.core.logic import (
    and_,
    nand,
    nor,
    not_,
    or_,
    subscribe_false,
    subscribe_true,
    subscribe_true_false,
    xnor,
    xor,
)
from boolsignal.core.signals import Subject, of
from boolsignal.interfaces.types import OperatorDistinctness

# -----------------------------------------------------------------------------
# FIXTURES
# -----------------------------------------------------------------------------


@pytest.fixture
def left() -> Subject:
    return Subject()


@pytest.fixture
def right() -> Subject:
    return Subject()


def collect(signal) -> List[bool]:
    values: List[bool] = []
    signal.subscribe(values.append)
    return values


# -----------------------------------------------------------------------------
# NEGATION
# -----------------------------------------------------------------------------


def test_not_inverts_without_distinctness():
    assert collect(not_(of(True, True, False))) == [False, False, True]


def test_not_fluent():
    assert collect(of(False).not_()) == [True]


def test_not_rejects_non_signal():
    with pytest.raises(ValidationError):
        not_(True)


# -----------------------------------------------------------------------------
# AND / OR
# -----------------------------------------------------------------------------


def test_and_waits_for_every_input(left, right):
    values = collect(and_(left, right))
    left.on_next(True)
    assert values == []
    right.on_next(True)
    assert values == [True]


def test_and_output_distinct(left, right):
    values = collect(and_(left, right))
    left.on_next(True)
    right.on_next(False)
    left.on_next(True)
    right.on_next(True)
    assert values == [False, True]


def test_and_not_distinct(left, right):
    values = collect(and_(left, right, distinctness=OperatorDistinctness.NOT_DISTINCT))
    left.on_next(True)
    right.on_next(False)
    left.on_next(True)
    right.on_next(True)
    assert values == [False, False, True]


def test_and_bool_distinctness(left, right):
    values = collect(and_(left, right, distinctness=False))
    left.on_next(False)
    right.on_next(False)
    right.on_next(True)
    assert values == [False, False]


def test_and_input_distinct(left, right):
    values = collect(and_(left, right, distinctness=OperatorDistinctness.INPUT))
    left.on_next(True)
    right.on_next(False)
    left.on_next(True)  # repeated input, dropped
    left.on_next(False)  # new input, equal result still emitted
    right.on_next(True)
    assert values == [False, False, False]


def test_and_accepts_iterable_and_many_inputs():
    values = collect(and_([of(True), of(True), of(False)]))
    assert values == [False]


def test_or(left, right):
    values = collect(or_(left, right))
    left.on_next(False)
    right.on_next(False)
    right.on_next(True)
    left.on_next(True)
    assert values == [False, True]


def test_combinator_needs_two_inputs(left):
    with pytest.raises(ValidationError):
        and_(left)
    with pytest.raises(ValidationError):
        or_([])
    with pytest.raises(ValidationError):
        and_(left, "nope")


def test_fluent_and_or(left, right):
    conjunction = collect(left.and_(right))
    disjunction = collect(left.or_(right))
    left.on_next(True)
    right.on_next(False)
    assert conjunction == [False]
    assert disjunction == [True]


# -----------------------------------------------------------------------------
# XOR AND NEGATED COMBINATORS
# -----------------------------------------------------------------------------


def test_xor(left, right):
    values = collect(xor(left, right))
    left.on_next(True)
    right.on_next(True)
    right.on_next(False)
    assert values == [False, True]


def test_fluent_xor(left, right):
    values = collect(left.xor(right))
    left.on_next(True)
    right.on_next(False)
    assert values == [True]


@pytest.mark.parametrize(
    "operator, inputs, expected",
    [
        (nand, (True, True), False),
        (nand, (True, False), True),
        (nor, (False, False), True),
        (nor, (True, False), False),
        (xnor, (True, True), True),
        (xnor, (False, True), False),
    ],
)
def test_negated_combinators(operator, inputs, expected):
    assert collect(operator(of(inputs[0]), of(inputs[1]))) == [expected]


# -----------------------------------------------------------------------------
# SUBSCRIBE HELPERS
# -----------------------------------------------------------------------------


def test_subscribe_true():
    action = MagicMock()
    subscribe_true(of(True, False, True), action)
    assert action.call_count == 2


def test_subscribe_false():
    action = MagicMock()
    subscribe_false(of(True, False, False), action)
    assert action.call_count == 2


def test_subscribe_true_false():
    on_true, on_false = MagicMock(), MagicMock()
    subscribe_true_false(of(True, False, True), on_true, on_false)
    assert on_true.call_count == 2
    assert on_false.call_count == 1


def test_subscribe_helpers_validate(left):
    with pytest.raises(ValidationError):
        subscribe_true(left, None)
    with pytest.raises(ValidationError):
        subscribe_true_false(left, lambda: None, "nope")
    with pytest.raises(ValidationError):
        subscribe_false(None, lambda: None)


def test_subscribe_helper_dispose_stops_actions(left):
    action = MagicMock()
    subscription = left.subscribe_true(action)
    left.on_next(True)
    subscription.dispose()
    left.on_next(True)
    action.assert_called_once()


def test_fluent_subscribe_false_and_true_false(left):
    on_false = MagicMock()
    on_true = MagicMock()
    left.subscribe_false(on_false)
    left.subscribe_true_false(on_true, on_false)
    left.on_next(False)
    left.on_next(True)
    assert on_false.call_count == 2
    on_true.assert_called_once()
