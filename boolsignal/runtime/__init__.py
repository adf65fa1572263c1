"""
Runtime package: schedulers, per-subscription timers and locking helpers.

Design Patterns:
- Strategy Pattern for schedulers (virtual time, threads, asyncio)
- Command Pattern for scheduled, cancellable callbacks
"""
