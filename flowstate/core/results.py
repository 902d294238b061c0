# flowstate/core/results.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, FrozenSet, Generic, Optional, Tuple

from flowstate.core.errors import ValidationError
from flowstate.interfaces.types import E, S


@dataclass(frozen=True)
class TransitionInfo(Generic[S, E]):
    """
    A single edge of the machine, and the value handed to guards and actions.

    ``to_state`` is ``None`` while the guard of an Ignore or Internal rule is
    evaluated, and ``event`` is ``None`` for auto-transitions.
    """

    from_state: S
    to_state: Optional[S]
    event: Optional[E]


class DebugReason(Enum):
    """Why a ``fire`` call ended the way it did."""

    TRANSITION_COMPLETED = auto()
    EVENT_IGNORED = auto()
    INTERNAL_TRANSITION = auto()
    STATE_NOT_FOUND_IN_CONFIGURATION = auto()
    TRANSITION_ATTEMPTED_FROM_FINAL_STATE = auto()
    NO_APPLICABLE_TRANSITION_FOUND = auto()
    AUTO_TRANSITION_CYCLE_DETECTED = auto()
    EXCEPTION_DURING_TRANSITION = auto()
    ERROR_IN_ERROR_HANDLER = auto()


@dataclass(frozen=True)
class DebugInfo(Generic[S, E]):
    """
    The single diagnostic trace entry produced by one ``fire`` call.

    Attributes:
        state: State the call started from
        event: Event that was fired
        reason: Machine-readable outcome code
        timestamp: When the entry was created
        context: Optional free-text detail, e.g. the events available in the state
    """

    state: Optional[S]
    event: Optional[E]
    reason: DebugReason
    timestamp: datetime = field(default_factory=datetime.now)
    context: Optional[str] = None

    @classmethod
    def of(
        cls, state: Optional[S], event: Optional[E], reason: DebugReason, context: Optional[str] = None
    ) -> "DebugInfo[S, E]":
        return cls(state=state, event=event, reason=reason, context=context)

    def __str__(self) -> str:
        text = f"[{self.timestamp.isoformat()}] State: {self.state}, Event: {self.event}, Reason: {self.reason.name}"
        if self.context is not None:
            text += f", Context: {self.context}"
        return text


@dataclass(frozen=True)
class TransitionResult(Generic[S]):
    """
    Outcome of a ``fire_with_result`` call.

    ``was_transitioned`` is True when a Permit, PermitReentry or Internal rule
    ran, or when an error handler routed the machine to a different state.
    Ignored events are successful but not transitions.
    """

    state: S
    was_transitioned: bool
    reason: str
    debug_info: Optional[DebugInfo] = None

    @classmethod
    def success(cls, state: S, debug_info: Optional[DebugInfo] = None) -> "TransitionResult[S]":
        return cls(state, True, "Transition successful", debug_info)

    @classmethod
    def ignored(cls, state: S, reason: str, debug_info: Optional[DebugInfo] = None) -> "TransitionResult[S]":
        return cls(state, False, reason, debug_info)

    @classmethod
    def failed(cls, state: S, reason: str, debug_info: Optional[DebugInfo] = None) -> "TransitionResult[S]":
        return cls(state, False, reason, debug_info)

    @property
    def succeeded(self) -> bool:
        """True unless the debug trace records a resolution failure or an error."""
        if self.debug_info is None:
            return self.was_transitioned
        return self.debug_info.reason in _SUCCESS_REASONS

    @property
    def has_debug_info(self) -> bool:
        return self.debug_info is not None


_SUCCESS_REASONS = frozenset(
    {DebugReason.TRANSITION_COMPLETED, DebugReason.EVENT_IGNORED, DebugReason.INTERNAL_TRANSITION}
)


@dataclass(frozen=True)
class StateMachineInfo(Generic[S, E]):
    """
    Immutable description of a configured machine, used by the validator and
    by the diagram generators.

    Auto-transitions are listed as transitions whose event is ``None``;
    re-entry rules are listed as self loops.
    """

    initial_state: S
    states: FrozenSet[S]
    events: FrozenSet[E]
    transitions: FrozenSet[TransitionInfo[S, E]]
    final_states: FrozenSet[S] = frozenset()


@dataclass(frozen=True)
class ValidationResult:
    """
    Findings of a validation pass. Warnings never make a machine invalid.
    """

    is_valid: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @classmethod
    def from_findings(cls, errors: Any, warnings: Any = ()) -> "ValidationResult":
        errors = tuple(errors)
        return cls(is_valid=not errors, errors=errors, warnings=tuple(warnings))

    def raise_for_errors(self) -> None:
        """
        :raises ValidationError: If any error was found.
        """
        if self.errors:
            raise ValidationError("\n".join(self.errors), {"errors": list(self.errors)})
