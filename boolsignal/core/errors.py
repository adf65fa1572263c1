# boolsignal/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, Optional


class BoolSignalError(Exception):
    """
    Base exception class for errors raised by the boolean signal library.

    :param message: Human readable description of the failure.
    :param details: Optional mapping with context (argument names, values).
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ValidationError(BoolSignalError, ValueError):
    """
    Raised synchronously when an operator is built with invalid arguments,
    before anything has been subscribed.
    """

    def __init__(self, message: str, argument: Optional[str] = None, value: Any = None) -> None:
        details = {}
        if argument is not None:
            details = {"argument": argument, "value": value}
        super().__init__(message, details)
        self.argument = argument
        self.value = value


class SchedulingError(BoolSignalError):
    """
    Raised when a scheduler cannot accept more work, e.g. after shutdown.
    """

    def __init__(self, message: str, delay: Optional[float] = None, reason: Optional[str] = None) -> None:
        details: Dict[str, Any] = {}
        if delay is not None:
            details["delay"] = delay
        if reason is not None:
            details["reason"] = reason
        super().__init__(message, details)
        self.delay = delay
        self.reason = reason
