"""
Core package: the signal abstraction, argument validation, the memoryless
boolean combinators and the timed hysteresis operators.

Submodules are imported directly (``boolsignal.core.holds``); the package
itself re-exports nothing so that the runtime package can depend on
``boolsignal.core.signals`` without import cycles.
"""
