# boolsignal/core/logic.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Memoryless boolean combinators and subscription helpers.

The combinators work on the latest value of each input: nothing is emitted
until every input has produced a value, and from then on each input event
produces one result (subject to the distinctness policy).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Callable, List, Sequence, Union

from boolsignal.core.errors import ValidationError
from boolsignal.core.signals import Signal, Subscription, combine_latest
from boolsignal.core.validations import coerce_distinctness, require_action, require_signal
from boolsignal.interfaces.types import Action, OperatorDistinctness

DistinctnessArg = Union[OperatorDistinctness, bool]


def not_(source: Signal) -> Signal:
    """
    Invert every value of `source`. No distinctness is applied.
    """
    require_signal(source)
    return source.map(lambda value: not value)


def _flatten(sources: Sequence[Any]) -> List[Signal]:
    # and_(a, b, c) and and_([a, b, c]) are both accepted
    if len(sources) == 1 and not isinstance(sources[0], Signal) and isinstance(sources[0], Iterable):
        sources = list(sources[0])
    return [require_signal(source, f"sources[{index}]") for index, source in enumerate(sources)]


def _combine(
    name: str,
    sources: Sequence[Any],
    combiner: Callable[[List[bool]], bool],
    distinctness: DistinctnessArg,
) -> Signal:
    signals = _flatten(sources)
    if len(signals) < 2:
        raise ValidationError(f"{name} needs at least two signals", "sources", len(signals))
    policy = coerce_distinctness(distinctness)

    if policy is OperatorDistinctness.INPUT:
        signals = [signal.distinct_until_changed() for signal in signals]

    result = combine_latest(signals, combiner)

    if policy is OperatorDistinctness.OUTPUT:
        result = result.distinct_until_changed()
    return result


def and_(*sources: Any, distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT) -> Signal:
    """
    True while every input is true.

    :param sources: Two or more signals, or one iterable of signals.
    :param distinctness: OUTPUT collapses repeated results; INPUT ignores
        repeated values per input but may repeat results; NOT_DISTINCT emits
        one result per input event.
    """
    return _combine("and_", sources, all, distinctness)


def or_(*sources: Any, distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT) -> Signal:
    """
    True while any input is true. See `and_` for the arguments.
    """
    return _combine("or_", sources, any, distinctness)


def nand(*sources: Any, distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT) -> Signal:
    """Negation of `and_`."""
    return not_(and_(*sources, distinctness=distinctness))


def nor(*sources: Any, distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT) -> Signal:
    """Negation of `or_`."""
    return not_(or_(*sources, distinctness=distinctness))


def xor(first: Signal, second: Signal, distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT) -> Signal:
    """
    True while exactly one of the two inputs is true.
    """
    require_signal(first, "first")
    require_signal(second, "second")
    return _combine("xor", (first, second), lambda values: values[0] != values[1], distinctness)


def xnor(first: Signal, second: Signal, distinctness: DistinctnessArg = OperatorDistinctness.OUTPUT) -> Signal:
    """Negation of `xor`."""
    return not_(xor(first, second, distinctness=distinctness))


def subscribe_true(signal: Signal, action: Action) -> Subscription:
    """
    Call `action` every time `signal` emits true.
    """
    require_signal(signal, "signal")
    require_action(action)
    return signal.subscribe(lambda value: action() if value else None)


def subscribe_false(signal: Signal, action: Action) -> Subscription:
    """
    Call `action` every time `signal` emits false.
    """
    require_signal(signal, "signal")
    require_action(action)
    return signal.subscribe(lambda value: None if value else action())


def subscribe_true_false(
    signal: Signal,
    true_action: Action,
    false_action: Action,
) -> Subscription:
    """
    Call `true_action` on true and `false_action` on false.
    """
    require_signal(signal, "signal")
    require_action(true_action, "true_action")
    require_action(false_action, "false_action")

    def _on_next(value: bool) -> None:
        if value:
            true_action()
            return
        false_action()

    return signal.subscribe(_on_next)
