# flowstate/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from flowstate.core.results import TransitionResult


class StateMachineError(Exception):
    """
    Base exception class for errors raised by the flowstate library.

    :param message: Human readable description of the failure.
    :param details: Optional structured data describing the failure.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(StateMachineError):
    """
    Raised when a machine or scenario is assembled inconsistently. Only ever
    raised while building, never while firing events.
    """


class InvalidTransitionError(StateMachineError):
    """
    Raised by ``StateMachine.fire_or_raise`` when an event cannot be resolved
    to a transition. The failed result is kept on the exception.
    """

    def __init__(self, message: str, result: "TransitionResult") -> None:
        super().__init__(message, {"state": result.state, "reason": result.reason})
        self.result = result


class ValidationError(StateMachineError):
    """
    Raised when a caller asks for validation errors to be treated as fatal.
    """


class ScenarioAssertionError(StateMachineError, AssertionError):
    """
    Raised by the scenario harness when an expectation does not hold.
    """
