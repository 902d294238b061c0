# flowstate/core/machine_builder.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional

from flowstate.core.actions import Action, as_action
from flowstate.core.engine import ErrorHandler, as_error_handler
from flowstate.core.errors import ConfigurationError
from flowstate.core.guards import Guard, as_guard
from flowstate.core.rules import (
    AutoTransition,
    Ignore,
    Internal,
    Permit,
    PermitReentry,
    StateDefinition,
    TransitionRule,
)
from flowstate.core.state_machine import StateMachine
from flowstate.interfaces.types import C, E, S


@dataclass
class _StateDraft:
    """Mutable per-state configuration, frozen into a StateDefinition on build."""

    state: Any
    rules: List[TransitionRule] = field(default_factory=list)
    entry_actions: List[Action] = field(default_factory=list)
    exit_actions: List[Action] = field(default_factory=list)
    is_final: bool = False

    def freeze(self) -> StateDefinition:
        return StateDefinition(
            state=self.state,
            rules=tuple(self.rules),
            entry_actions=tuple(self.entry_actions),
            exit_actions=tuple(self.exit_actions),
            is_final=self.is_final,
        )


def _optional_guard(guard: Any) -> Optional[Guard]:
    return None if guard is None else as_guard(guard)


class StateConfiguration(Generic[S, E, C]):
    """
    Chainable configuration of a single state. Obtained from
    ``MachineBuilder.configure``; ``and_()`` returns to the builder.

    Rules registered for the same event are tried in registration order.
    """

    def __init__(self, builder: "MachineBuilder[S, E, C]", draft: _StateDraft) -> None:
        self._builder = builder
        self._draft = draft

    @property
    def state(self) -> S:
        return self._draft.state

    def permit(self, event: E, target: S) -> "StateConfiguration[S, E, C]":
        return self.permit_if(event, target, None)

    def permit_if(self, event: E, target: S, guard: Any) -> "StateConfiguration[S, E, C]":
        if target is None:
            raise ConfigurationError(f"Transition target for event '{event}' in state '{self.state}' is None")
        self._draft.rules.append(Permit(event, target, _optional_guard(guard)))
        return self

    def permit_reentry(self, event: E) -> "StateConfiguration[S, E, C]":
        return self.permit_reentry_if(event, None)

    def permit_reentry_if(self, event: E, guard: Any) -> "StateConfiguration[S, E, C]":
        self._draft.rules.append(PermitReentry(event, _optional_guard(guard)))
        return self

    def ignore(self, event: E) -> "StateConfiguration[S, E, C]":
        return self.ignore_if(event, None)

    def ignore_if(self, event: E, guard: Any) -> "StateConfiguration[S, E, C]":
        self._draft.rules.append(Ignore(event, _optional_guard(guard)))
        return self

    def internal(self, event: E, action: Any) -> "StateConfiguration[S, E, C]":
        return self.internal_if(event, action, None)

    def internal_if(self, event: E, action: Any, guard: Any) -> "StateConfiguration[S, E, C]":
        self._draft.rules.append(Internal(event, as_action(action), _optional_guard(guard)))
        return self

    def auto_transition(self, target: S) -> "StateConfiguration[S, E, C]":
        return self.auto_transition_if(target, None)

    def auto_transition_if(self, target: S, guard: Any) -> "StateConfiguration[S, E, C]":
        if target is None:
            raise ConfigurationError(f"Auto-transition target in state '{self.state}' is None")
        self._draft.rules.append(AutoTransition(target, _optional_guard(guard)))
        return self

    def on_entry(self, action: Any) -> "StateConfiguration[S, E, C]":
        self._draft.entry_actions.append(as_action(action))
        return self

    def on_exit(self, action: Any) -> "StateConfiguration[S, E, C]":
        self._draft.exit_actions.append(as_action(action))
        return self

    def as_final(self) -> "StateConfiguration[S, E, C]":
        self._draft.is_final = True
        return self

    def and_(self) -> "MachineBuilder[S, E, C]":
        return self._builder


class MachineBuilder(Generic[S, E, C]):
    """
    Assembles a machine configuration and freezes it into a StateMachine.

    The builder is mutable and not meant to be shared; the machine it builds
    is immutable and unaffected by later changes to the builder.

    Example:
        machine = (
            MachineBuilder()
            .initial_state("CREATED")
            .configure("CREATED").permit("PAY", "PAID").and_()
            .configure("PAID").as_final().and_()
            .build()
        )
    """

    def __init__(self) -> None:
        self._initial_state: Optional[S] = None
        self._drafts: Dict[S, _StateDraft] = {}
        self._global_entry_actions: List[Action] = []
        self._global_exit_actions: List[Action] = []
        self._global_transition_actions: List[Action] = []
        self._error_handler: Optional[ErrorHandler] = None
        self._listeners: List[Any] = []

    def initial_state(self, state: S) -> "MachineBuilder[S, E, C]":
        self._initial_state = state
        return self

    def configure(self, state: S) -> StateConfiguration[S, E, C]:
        """
        Start (or continue) configuring ``state``.

        :raises ConfigurationError: If ``state`` is None.
        """
        if state is None:
            raise ConfigurationError("Cannot configure a None state")
        draft = self._drafts.get(state)
        if draft is None:
            draft = self._drafts[state] = _StateDraft(state)
        return StateConfiguration(self, draft)

    def on_any_entry(self, action: Any) -> "MachineBuilder[S, E, C]":
        self._global_entry_actions.append(as_action(action))
        return self

    def on_any_exit(self, action: Any) -> "MachineBuilder[S, E, C]":
        self._global_exit_actions.append(as_action(action))
        return self

    def on_any_transition(self, action: Any) -> "MachineBuilder[S, E, C]":
        self._global_transition_actions.append(as_action(action))
        return self

    def on_error(self, handler: Any) -> "MachineBuilder[S, E, C]":
        self._error_handler = as_error_handler(handler)
        return self

    def add_listener(self, listener: Any) -> "MachineBuilder[S, E, C]":
        self._listeners.append(listener)
        return self

    def build(self) -> StateMachine[S, E, C]:
        """
        Freeze the configuration.

        :raises ConfigurationError: If no initial state was given.
        """
        if self._initial_state is None:
            raise ConfigurationError("Initial state must be specified")
        return StateMachine(
            self._initial_state,
            {state: draft.freeze() for state, draft in self._drafts.items()},
            global_entry_actions=self._global_entry_actions,
            global_exit_actions=self._global_exit_actions,
            global_transition_actions=self._global_transition_actions,
            error_handler=self._error_handler,
            listeners=self._listeners,
        )
