"""boolsignal: timed hysteresis operators over push-based boolean signals

Each operator turns a boolean signal into a derived boolean signal whose
transitions are delayed, held, extended or suppressed by elapsed time:

    - true_for_at_least / false_for_at_least: minimum hold
    - limit_true_duration / limit_false_duration: maximum hold
    - persist_true_for / persist_false_for: trailing hold (debounce release)
    - when_true_for / when_false_for: leading hold (debounce confirm)

Time comes from an injected scheduler. VirtualTimeScheduler makes every
operator deterministic under test; ThreadingScheduler and AsyncIOScheduler
drive them in real time.

Thread Safety:
    - Each subscription serialises its source events and timer callbacks
    - No state is shared between subscriptions

Error Handling:
    - Invalid arguments raise ValidationError at call time
    - Upstream errors and completion pass through immediately and cancel timers
"""

from boolsignal.core.errors import BoolSignalError, SchedulingError, ValidationError
from boolsignal.core.holds import (
    false_for_at_least,
    limit_false_duration,
    limit_true_duration,
    persist_false_for,
    persist_true_for,
    true_for_at_least,
    when_false_for,
    when_true_for,
)
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
from boolsignal.core.signals import (
    BehaviorSubject,
    CompositeSubscription,
    Observer,
    Signal,
    Subject,
    Subscription,
    combine_latest,
    create,
    empty,
    from_iterable,
    merge,
    never,
    of,
    throw,
)
from boolsignal.interfaces.types import OperatorDistinctness
from boolsignal.runtime.async_support import AsyncIOScheduler
from boolsignal.runtime.scheduler import ScheduledHandle, Scheduler, ThreadingScheduler, VirtualTimeScheduler
from boolsignal.runtime.timers import debounce, delay_timer

__version__ = "0.1.0"

__all__ = [
    "AsyncIOScheduler",
    "BehaviorSubject",
    "BoolSignalError",
    "CompositeSubscription",
    "Observer",
    "OperatorDistinctness",
    "ScheduledHandle",
    "Scheduler",
    "SchedulingError",
    "Signal",
    "Subject",
    "Subscription",
    "ThreadingScheduler",
    "ValidationError",
    "VirtualTimeScheduler",
    "and_",
    "combine_latest",
    "create",
    "debounce",
    "delay_timer",
    "empty",
    "false_for_at_least",
    "from_iterable",
    "limit_false_duration",
    "limit_true_duration",
    "merge",
    "nand",
    "never",
    "nor",
    "not_",
    "of",
    "or_",
    "persist_false_for",
    "persist_true_for",
    "subscribe_false",
    "subscribe_true",
    "subscribe_true_false",
    "throw",
    "true_for_at_least",
    "when_false_for",
    "when_true_for",
    "xnor",
    "xor",
]
