# flowstate/core/rules.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Transition rules and per-state rule tables.

Rules are plain immutable data. The engine dispatches on the rule type with a
``match`` statement; there is no behaviour on the rules themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, Optional, Tuple, Union

from flowstate.core.actions import Action
from flowstate.core.guards import Guard
from flowstate.interfaces.types import E, EventID, S


@dataclass(frozen=True)
class Permit(Generic[S, E]):
    """Ordinary transition to ``target`` on ``event``."""

    event: E
    target: S
    guard: Optional[Guard] = None


@dataclass(frozen=True)
class PermitReentry(Generic[E]):
    """Self transition: exit and entry actions run, the state is unchanged."""

    event: E
    guard: Optional[Guard] = None


@dataclass(frozen=True)
class Ignore(Generic[E]):
    """The event is accepted and nothing happens."""

    event: E
    guard: Optional[Guard] = None


@dataclass(frozen=True)
class Internal(Generic[E]):
    """Runs ``action`` without leaving the state."""

    event: E
    action: Action
    guard: Optional[Guard] = None


@dataclass(frozen=True)
class AutoTransition(Generic[S]):
    """Attempted right after the owning state is entered, without an event."""

    target: S
    guard: Optional[Guard] = None


TransitionRule = Union[Permit, PermitReentry, Ignore, Internal, AutoTransition]

EventRule = Union[Permit, PermitReentry, Ignore, Internal]


def rule_event(rule: TransitionRule) -> Optional[EventID]:
    """The event a rule reacts to, ``None`` for auto-transitions."""
    if isinstance(rule, AutoTransition):
        return None
    return rule.event


def rule_target(rule: TransitionRule, source: Any) -> Optional[Any]:
    """The state a rule leads to, ``None`` when it never changes state."""
    match rule:
        case Permit(target=target) | AutoTransition(target=target):
            return target
        case PermitReentry():
            return source
        case _:
            return None


@dataclass(frozen=True)
class StateDefinition(Generic[S, E]):
    """
    Immutable rule table for one state.

    ``rules`` keeps registration order, which decides between rules whose
    guards pass at the same time.
    """

    state: S
    rules: Tuple[TransitionRule, ...] = ()
    entry_actions: Tuple[Action, ...] = ()
    exit_actions: Tuple[Action, ...] = ()
    is_final: bool = False
    _by_event: Any = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index = {}
        for rule in self.rules:
            if isinstance(rule, AutoTransition):
                continue
            index.setdefault(rule.event, []).append(rule)
        object.__setattr__(
            self, "_by_event", MappingProxyType({event: tuple(rules) for event, rules in index.items()})
        )

    def rules_for(self, event: Any) -> Tuple[EventRule, ...]:
        """Rules registered for ``event``, in registration order."""
        try:
            return self._by_event.get(event, ())
        except TypeError:
            # unhashable event
            return ()

    @property
    def events(self) -> Tuple[Any, ...]:
        """Events with at least one rule, in first-registration order."""
        return tuple(self._by_event)

    @property
    def auto_transitions(self) -> Tuple[AutoTransition, ...]:
        return tuple(rule for rule in self.rules if isinstance(rule, AutoTransition))

    @property
    def live_rules(self) -> Tuple[TransitionRule, ...]:
        """Rules that would change state or run an action if they were selected."""
        return tuple(rule for rule in self.rules if isinstance(rule, (Permit, Internal, AutoTransition)))
