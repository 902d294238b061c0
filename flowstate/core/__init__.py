# flowstate/core/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Core package: rule model, transition engine, validator and builder.
"""

# Import order matters to avoid circular dependencies
from .errors import (
    ConfigurationError,
    InvalidTransitionError,
    ScenarioAssertionError,
    StateMachineError,
    ValidationError,
)
from .results import DebugInfo, DebugReason, StateMachineInfo, TransitionInfo, TransitionResult, ValidationResult
from .guards import Guard, GuardCondition, always, as_guard, when
from .actions import Action, TransitionEffect, as_action
from .rules import AutoTransition, Ignore, Internal, Permit, PermitReentry, StateDefinition, TransitionRule
from .hooks import HookManager, StateMachineListener
from .engine import ErrorHandler, TransitionEngine
from .validation import ValidationContext, ValidationRule, ValidationSeverity, Validator
from .state_machine import StateMachine
from .machine_builder import MachineBuilder, StateConfiguration

__all__ = [
    # Errors
    "StateMachineError",
    "ConfigurationError",
    "InvalidTransitionError",
    "ValidationError",
    "ScenarioAssertionError",
    # Results and snapshots
    "DebugInfo",
    "DebugReason",
    "StateMachineInfo",
    "TransitionInfo",
    "TransitionResult",
    "ValidationResult",
    # Contracts
    "Guard",
    "GuardCondition",
    "always",
    "when",
    "as_guard",
    "Action",
    "TransitionEffect",
    "as_action",
    "ErrorHandler",
    # Rule model
    "TransitionRule",
    "Permit",
    "PermitReentry",
    "Ignore",
    "Internal",
    "AutoTransition",
    "StateDefinition",
    # Engine and machine
    "HookManager",
    "StateMachineListener",
    "TransitionEngine",
    "StateMachine",
    "MachineBuilder",
    "StateConfiguration",
    # Validation
    "Validator",
    "ValidationContext",
    "ValidationRule",
    "ValidationSeverity",
]
