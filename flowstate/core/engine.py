# flowstate/core/engine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Transition resolution.

One ``fire`` call runs to completion on the caller's thread. The engine holds
only frozen configuration; everything mutable lives on the call stack or in
the caller's context object, so one engine can serve any number of threads.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

from flowstate.core.actions import Action, run_actions
from flowstate.core.errors import ConfigurationError
from flowstate.core.guards import evaluate_guard
from flowstate.core.hooks import HookManager
from flowstate.core.results import DebugInfo, DebugReason, TransitionInfo, TransitionResult
from flowstate.core.rules import (
    AutoTransition,
    EventRule,
    Ignore,
    Internal,
    Permit,
    PermitReentry,
    StateDefinition,
    rule_target,
)
from flowstate.interfaces.types import C, E, ErrorHandlerFunc, S

logger = logging.getLogger(__name__)


@runtime_checkable
class ErrorHandler(Protocol):
    """
    Recovers from a guard or action failure. The returned state becomes the
    state reported by the ``fire`` call.
    """

    def handle(self, state: Any, event: Any, context: Any, error: Exception) -> Any: ...


class _CallableErrorHandler:
    def __init__(self, handler: ErrorHandlerFunc) -> None:
        self._handler = handler

    def handle(self, state: Any, event: Any, context: Any, error: Exception) -> Any:
        return self._handler(state, event, context, error)


def as_error_handler(handler: Any) -> ErrorHandler:
    """
    Adapt ``handler`` to the ErrorHandler protocol.

    :raises ConfigurationError: If ``handler`` is neither callable nor defines ``handle``.
    """
    if isinstance(handler, ErrorHandler):
        return handler
    if callable(handler):
        return _CallableErrorHandler(handler)
    raise ConfigurationError(f"Error handler must be callable or define handle(), got {type(handler).__name__}")


class TransitionEngine(Generic[S, E, C]):
    """
    Resolves and executes ``fire`` calls against a frozen rule table.

    Resolution order:
    1. a final state rejects every event
    2. an unconfigured state rejects every event
    3. the first rule for the event whose guard passes is selected
    4. the rule is executed (ignore, internal, re-entry or permit)
    5. auto-transitions of the newly entered state are followed until none
       applies, failing if a state would be entered twice
    """

    def __init__(
        self,
        definitions: Mapping[S, StateDefinition[S, E]],
        global_entry_actions: Tuple[Action, ...] = (),
        global_exit_actions: Tuple[Action, ...] = (),
        global_transition_actions: Tuple[Action, ...] = (),
        error_handler: Optional[ErrorHandler] = None,
        hooks: Optional[HookManager] = None,
    ) -> None:
        self._definitions = definitions
        self._global_entry_actions = global_entry_actions
        self._global_exit_actions = global_exit_actions
        self._global_transition_actions = global_transition_actions
        self._error_handler = error_handler
        self._hooks = hooks or HookManager()

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def fire(self, state: S, event: E, context: C) -> S:
        """Fire ``event`` and return the resulting state, unchanged on failure."""
        return self.fire_with_result(state, event, context).state

    def fire_with_result(self, state: S, event: E, context: C) -> TransitionResult[S]:
        """
        Fire ``event`` and return the full outcome.

        Resolution failures are reported in the result. A guard or action that
        raises is passed to the error handler; without one the exception
        propagates after listeners have been told.
        """
        try:
            result = self._resolve(state, event, context)
        except Exception as error:
            self._hooks.transition_failed(state, event, context, error)
            debug_info = DebugInfo.of(
                state,
                event,
                DebugReason.EXCEPTION_DURING_TRANSITION,
                f"Exception type: {type(error).__name__}, Message: {error}",
            )
            if self._error_handler is None:
                self._hooks.fired(debug_info)
                raise
            result = self._recover(state, event, context, error, debug_info)

        self._hooks.fired(result.debug_info)
        return result

    def can_fire(self, state: S, event: E, context: C) -> bool:
        """
        Dry run: True if a rule would be selected. Guards are evaluated but no
        action runs. Never raises.
        """
        if state is None or event is None:
            return False
        definition = self.definition_of(state)
        if definition is None or definition.is_final:
            return False
        try:
            return self._select_rule(definition, state, event, context) is not None
        except Exception:
            logger.debug("Guard failed during can_fire(%r, %r)", state, event, exc_info=True)
            return False

    def is_final_state(self, state: S) -> bool:
        definition = self.definition_of(state)
        return definition is not None and definition.is_final

    def definition_of(self, state: Any) -> Optional[StateDefinition[S, E]]:
        if state is None:
            return None
        try:
            return self._definitions.get(state)
        except TypeError:
            # unhashable state
            return None

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _resolve(self, state: S, event: E, context: C) -> TransitionResult[S]:
        definition = self.definition_of(state)

        if definition is not None and definition.is_final:
            return TransitionResult.failed(
                state,
                f"Cannot transition from final state: {state}",
                DebugInfo.of(
                    state,
                    event,
                    DebugReason.TRANSITION_ATTEMPTED_FROM_FINAL_STATE,
                    "Final states do not allow transitions",
                ),
            )

        if definition is None:
            available = ", ".join(str(s) for s in self._definitions)
            return TransitionResult.failed(
                state,
                f"No configuration for state: {state}",
                DebugInfo.of(
                    state, event, DebugReason.STATE_NOT_FOUND_IN_CONFIGURATION, f"Available states: {available}"
                ),
            )

        rule = None if event is None else self._select_rule(definition, state, event, context)
        if rule is None:
            available = ", ".join(str(e) for e in definition.events) or "none"
            return TransitionResult.failed(
                state,
                f"No transition configured for event '{event}' in state '{state}'",
                DebugInfo.of(
                    state,
                    event,
                    DebugReason.NO_APPLICABLE_TRANSITION_FOUND,
                    f"Available events in this state: {available}",
                ),
            )

        logger.debug("Selected %s for event %r in state %r", type(rule).__name__, event, state)

        match rule:
            case Ignore():
                return TransitionResult.ignored(
                    state, "Event ignored", DebugInfo.of(state, event, DebugReason.EVENT_IGNORED)
                )
            case Internal(action=action):
                action.apply(TransitionInfo(state, state, event), context)
                return TransitionResult(
                    state,
                    True,
                    "Internal transition executed",
                    DebugInfo.of(state, event, DebugReason.INTERNAL_TRANSITION),
                )
            case PermitReentry():
                return self._transition(state, state, event, context)
            case Permit(target=target):
                return self._transition(state, target, event, context)
            case _:
                raise TypeError(f"Unknown transition rule: {rule!r}")

    def _select_rule(
        self, definition: StateDefinition[S, E], state: S, event: E, context: C
    ) -> Optional[EventRule]:
        for rule in definition.rules_for(event):
            if evaluate_guard(rule.guard, TransitionInfo(state, rule_target(rule, state), event), context):
                return rule
        return None

    def _transition(self, source: S, target: S, event: E, context: C) -> TransitionResult[S]:
        self._execute(source, target, event, context)
        final_state, cycle = self._follow_auto_transitions(target, context)
        if cycle is not None:
            path = " -> ".join(str(s) for s in cycle)
            logger.debug("Auto-transition cycle after %r --%r--> %r: %s", source, event, target, path)
            return TransitionResult.failed(
                source,
                f"Auto-transition cycle detected: {path}",
                DebugInfo.of(
                    source,
                    event,
                    DebugReason.AUTO_TRANSITION_CYCLE_DETECTED,
                    f"Chain stopped in state {final_state}",
                ),
            )
        return TransitionResult.success(
            final_state, DebugInfo.of(source, event, DebugReason.TRANSITION_COMPLETED, f"Entered {final_state}")
        )

    def _execute(self, source: S, target: S, event: Optional[E], context: C) -> None:
        """Exit source, run the transition actions, enter target."""
        transition = TransitionInfo(source, target, event)
        source_definition = self.definition_of(source)
        target_definition = self.definition_of(target)

        self._hooks.state_exited(source, event, context)
        if source_definition is not None:
            run_actions(source_definition.exit_actions, transition, context)
        run_actions(self._global_exit_actions, transition, context)

        run_actions(self._global_transition_actions, transition, context)
        self._hooks.transitioned(source, target, event, context)

        run_actions(self._global_entry_actions, transition, context)
        if target_definition is not None:
            run_actions(target_definition.entry_actions, transition, context)
        self._hooks.state_entered(target, event, context)

    def _follow_auto_transitions(self, state: S, context: C) -> Tuple[S, Optional[List[S]]]:
        """
        Take auto-transitions from ``state`` until none applies.

        Returns the state reached and, when the chain would enter a state it
        already visited, the cycle path ending in that state. The
        cycle-closing transition is not executed.
        """
        path: List[S] = [state]
        visited = {state}
        current = state
        while True:
            rule = self._select_auto_transition(current, context)
            if rule is None:
                return current, None
            if rule.target in visited:
                return current, path + [rule.target]
            logger.debug("Auto-transition %r -> %r", current, rule.target)
            self._execute(current, rule.target, None, context)
            current = rule.target
            path.append(current)
            visited.add(current)

    def _select_auto_transition(self, state: S, context: C) -> Optional[AutoTransition]:
        definition = self.definition_of(state)
        if definition is None or definition.is_final:
            return None
        for rule in definition.auto_transitions:
            if evaluate_guard(rule.guard, TransitionInfo(state, rule.target, None), context):
                return rule
        return None

    # -------------------------------------------------------------------------
    # Error recovery
    # -------------------------------------------------------------------------

    def _recover(
        self, state: S, event: E, context: C, error: Exception, debug_info: DebugInfo
    ) -> TransitionResult[S]:
        logger.warning("Error while firing %r in state %r, delegating to error handler", event, state, exc_info=error)
        try:
            recovered = self._error_handler.handle(state, event, context, error)
        except Exception as handler_error:
            logger.warning("Error handler failed for %r in state %r", event, state, exc_info=True)
            return TransitionResult.failed(
                state,
                f"Error in error handler: {handler_error}",
                DebugInfo.of(
                    state,
                    event,
                    DebugReason.ERROR_IN_ERROR_HANDLER,
                    f"Handler exception: {type(handler_error).__name__} - {handler_error}",
                ),
            )
        return TransitionResult(recovered, recovered != state, f"Error handled: {error}", debug_info)
