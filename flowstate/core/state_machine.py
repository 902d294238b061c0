# flowstate/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Generic, Iterable, Mapping, Optional

from flowstate.core.actions import Action
from flowstate.core.engine import ErrorHandler, TransitionEngine
from flowstate.core.errors import ConfigurationError, InvalidTransitionError
from flowstate.core.hooks import HookManager
from flowstate.core.results import StateMachineInfo, TransitionInfo, TransitionResult, ValidationResult
from flowstate.core.rules import AutoTransition, StateDefinition, rule_event, rule_target
from flowstate.core.validation import Validator
from flowstate.interfaces.types import C, E, S


class StateMachine(Generic[S, E, C]):
    """
    An immutable, shareable state machine. The machine never stores a current
    state: callers thread the state value and their context through each call.

    Usually produced by ``MachineBuilder.build()``.

    :param initial_state: The state new workflows start in.
    :param definitions: Rule table per configured state.
    :param global_entry_actions: Run on entering any state, before the state's own entry actions.
    :param global_exit_actions: Run on leaving any state, after the state's own exit actions.
    :param global_transition_actions: Run between exit and entry of every transition.
    :param error_handler: Optional recovery for guard and action failures.
    :param listeners: Observers notified about every ``fire`` call.
    """

    def __init__(
        self,
        initial_state: S,
        definitions: Mapping[S, StateDefinition[S, E]],
        global_entry_actions: Iterable[Action] = (),
        global_exit_actions: Iterable[Action] = (),
        global_transition_actions: Iterable[Action] = (),
        error_handler: Optional[ErrorHandler] = None,
        listeners: Iterable[Any] = (),
    ) -> None:
        if initial_state is None:
            raise ConfigurationError("Initial state must be specified")

        self._initial_state = initial_state
        self._definitions: Mapping[S, StateDefinition[S, E]] = MappingProxyType(_with_implicit_targets(definitions))
        self._hooks = HookManager(listeners)
        self._engine: TransitionEngine[S, E, C] = TransitionEngine(
            self._definitions,
            global_entry_actions=tuple(global_entry_actions),
            global_exit_actions=tuple(global_exit_actions),
            global_transition_actions=tuple(global_transition_actions),
            error_handler=error_handler,
            hooks=self._hooks,
        )
        self._info = self._describe()

    @property
    def initial_state(self) -> S:
        return self._initial_state

    @property
    def definitions(self) -> Mapping[S, StateDefinition[S, E]]:
        """Read-only view of the rule tables."""
        return self._definitions

    def definition(self, state: S) -> Optional[StateDefinition[S, E]]:
        return self._engine.definition_of(state)

    def fire(self, state: S, event: E, context: C) -> S:
        """Return the state after firing ``event``; ``state`` itself if nothing applied."""
        return self._engine.fire(state, event, context)

    def fire_with_result(self, state: S, event: E, context: C) -> TransitionResult[S]:
        return self._engine.fire_with_result(state, event, context)

    def fire_or_raise(self, state: S, event: E, context: C) -> S:
        """
        Like ``fire`` but treats an unresolved event as an error.

        :raises InvalidTransitionError: If no rule applied or the chain failed.
        """
        result = self._engine.fire_with_result(state, event, context)
        if not result.succeeded:
            raise InvalidTransitionError(result.reason, result)
        return result.state

    def can_fire(self, state: S, event: E, context: C) -> bool:
        return self._engine.can_fire(state, event, context)

    def is_final_state(self, state: S) -> bool:
        return self._engine.is_final_state(state)

    def get_info(self) -> StateMachineInfo[S, E]:
        return self._info

    def validate(self, validator: Optional[Validator] = None) -> ValidationResult:
        """Validate this machine's rule graph with the default or a custom validator."""
        return (validator or Validator()).validate(self._info, self._definitions)

    def _describe(self) -> StateMachineInfo[S, E]:
        events = set()
        transitions = set()
        for state, definition in self._definitions.items():
            for rule in definition.rules:
                if not isinstance(rule, AutoTransition):
                    events.add(rule.event)
                target = rule_target(rule, state)
                if target is not None:
                    transitions.add(TransitionInfo(state, target, rule_event(rule)))
        return StateMachineInfo(
            initial_state=self._initial_state,
            states=frozenset(self._definitions),
            events=frozenset(events),
            transitions=frozenset(transitions),
            final_states=frozenset(s for s, d in self._definitions.items() if d.is_final),
        )

    def __repr__(self) -> str:
        return f"StateMachine(initial_state={self._initial_state!r}, states={len(self._definitions)})"


def _with_implicit_targets(definitions: Mapping[Any, StateDefinition]) -> Dict[Any, StateDefinition]:
    """Give every state referenced only as a target an empty definition."""
    frozen = dict(definitions)
    for state, definition in definitions.items():
        for rule in definition.rules:
            target = rule_target(rule, state)
            if target is not None and target not in frozen:
                frozen[target] = StateDefinition(target)
    return frozen
