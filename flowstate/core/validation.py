# flowstate/core/validation.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from flowstate.core.guards import is_unconditional
from flowstate.core.results import StateMachineInfo, ValidationResult
from flowstate.core.rules import StateDefinition


class ValidationSeverity(Enum):
    """
    Severity of a validation finding. Only errors make a machine invalid.
    """

    ERROR = "error"
    WARNING = "warning"


class ValidationContext:
    """
    Context object passed to validation rules.

    Attributes:
        info: Snapshot of the machine being validated
        definitions: Frozen rule tables, or None when only a snapshot is available
        errors: Errors collected so far
        warnings: Warnings collected so far
    """

    def __init__(self, info: StateMachineInfo, definitions: Optional[Mapping[Any, StateDefinition]] = None) -> None:
        self.info = info
        self.definitions = definitions
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def add_finding(self, severity: ValidationSeverity, message: str) -> None:
        if severity is ValidationSeverity.ERROR:
            self.errors.append(message)
        else:
            self.warnings.append(message)

    def sorted_states(self) -> List[Any]:
        """Declared states in a stable order, so repeated runs report identically."""
        return sorted(self.info.states, key=str)


@dataclass(frozen=True)
class ValidationRule:
    """
    Immutable container for a validation rule.

    Attributes:
        name: Unique identifier for the rule
        check: Callable inspecting the context and returning finding messages
        severity: Severity of every finding the rule reports
        description: Human-readable description of what the rule checks
    """

    name: str
    check: Callable[[ValidationContext], List[str]]
    severity: ValidationSeverity
    description: str


class Validator:
    """
    Static analysis of a configured machine. Findings are returned, never
    raised.

    Default rules, applied in this order:
    1. the initial state is declared
    2. every transition endpoint is declared
    3. every declared state is reachable from the initial state
    4. final states have no rule that could change state or run an action
    5. no two provably unconditional rules compete for the same event

    Example:
        validator = Validator()
        validator.add_rule(
            "no_self_loops",
            lambda ctx: [f"{t.from_state} loops" for t in ctx.info.transitions if t.from_state == t.to_state],
            ValidationSeverity.WARNING,
            "Self loops are discouraged",
        )
        result = validator.validate(machine.get_info())
    """

    def __init__(self) -> None:
        self._rules: Dict[str, ValidationRule] = {}
        self._register_default_rules()

    @property
    def rules(self) -> List[ValidationRule]:
        return list(self._rules.values())

    def add_rule(
        self,
        name: str,
        check: Callable[[ValidationContext], List[str]],
        severity: ValidationSeverity,
        description: str,
    ) -> None:
        """
        Add a custom validation rule, run after the rules already registered.

        :raises TypeError: If severity is not a ValidationSeverity.
        :raises ValueError: If a rule with the same name exists.
        """
        if not isinstance(severity, ValidationSeverity):
            raise TypeError(f"severity must be a ValidationSeverity enum value, got {type(severity)}")
        if name in self._rules:
            raise ValueError(f"Validation rule '{name}' is already registered")
        self._rules[name] = ValidationRule(name, check, severity, description)

    def validate(
        self, info: StateMachineInfo, definitions: Optional[Mapping[Any, StateDefinition]] = None
    ) -> ValidationResult:
        """
        Run every rule against ``info``. Without ``definitions`` the
        final-state check only sees the snapshot's transitions, and the
        ambiguity check is skipped.
        """
        context = ValidationContext(info, definitions)
        for rule in self._rules.values():
            for message in rule.check(context):
                context.add_finding(rule.severity, message)
        return ValidationResult.from_findings(context.errors, context.warnings)

    def _register_default_rules(self) -> None:
        self.add_rule(
            "initial_state_declared",
            _check_initial_state,
            ValidationSeverity.ERROR,
            "The initial state must be a declared state",
        )
        self.add_rule(
            "transition_endpoints_declared",
            _check_transition_endpoints,
            ValidationSeverity.ERROR,
            "Every transition must start and end in declared states",
        )
        self.add_rule(
            "states_reachable",
            _check_reachability,
            ValidationSeverity.ERROR,
            "Every declared state must be reachable from the initial state",
        )
        self.add_rule(
            "final_states_without_rules",
            _check_dead_final_rules,
            ValidationSeverity.WARNING,
            "Rules on final states can never run",
        )
        self.add_rule(
            "unambiguous_rules",
            _check_ambiguous_rules,
            ValidationSeverity.WARNING,
            "Only the first of several unconditional rules for an event can run",
        )


def _check_initial_state(context: ValidationContext) -> List[str]:
    info = context.info
    if info.initial_state is None:
        return ["Initial state is not specified"]
    if info.initial_state not in info.states:
        return [f"Initial state '{info.initial_state}' is not configured"]
    return []


def _check_transition_endpoints(context: ValidationContext) -> List[str]:
    states = context.info.states
    messages = []
    for transition in sorted(context.info.transitions, key=str):
        for endpoint in (transition.from_state, transition.to_state):
            if endpoint not in states:
                messages.append(
                    f"Transition '{transition.from_state}' --{transition.event}--> '{transition.to_state}' "
                    f"references undeclared state '{endpoint}'"
                )
    return messages


def _check_reachability(context: ValidationContext) -> List[str]:
    info = context.info
    if info.initial_state not in info.states:
        return []

    edges: Dict[Any, Set[Any]] = {}
    for transition in info.transitions:
        edges.setdefault(transition.from_state, set()).add(transition.to_state)

    reachable = {info.initial_state}
    queue = deque([info.initial_state])
    while queue:
        current = queue.popleft()
        for target in edges.get(current, ()):
            if target not in reachable:
                reachable.add(target)
                queue.append(target)

    return [
        f"State '{state}' is not reachable from initial state '{info.initial_state}'"
        for state in context.sorted_states()
        if state not in reachable
    ]


def _check_dead_final_rules(context: ValidationContext) -> List[str]:
    if context.definitions is None:
        return _check_dead_final_transitions(context.info)
    messages = []
    for state in context.sorted_states():
        definition = context.definitions.get(state)
        if definition is None or not definition.is_final:
            continue
        live = definition.live_rules
        if live:
            kinds = ", ".join(sorted({type(rule).__name__ for rule in live}))
            messages.append(f"Final state '{state}' has {len(live)} rule(s) that can never run ({kinds})")
    return messages


def _check_dead_final_transitions(info: StateMachineInfo) -> List[str]:
    """Snapshot-only variant: internal rules are invisible, re-entry self loops are harmless."""
    outgoing: Dict[Any, int] = {}
    for transition in info.transitions:
        if transition.from_state in info.final_states and transition.to_state != transition.from_state:
            outgoing[transition.from_state] = outgoing.get(transition.from_state, 0) + 1
    return [
        f"Final state '{state}' has {outgoing[state]} outgoing transition(s) that can never run"
        for state in sorted(outgoing, key=str)
    ]


def _check_ambiguous_rules(context: ValidationContext) -> List[str]:
    if context.definitions is None:
        return []
    messages = []
    for state in context.sorted_states():
        definition = context.definitions.get(state)
        if definition is None:
            continue
        for event in definition.events:
            unconditional = [rule for rule in definition.rules_for(event) if is_unconditional(rule.guard)]
            if len(unconditional) > 1:
                messages.append(
                    f"State '{state}' has {len(unconditional)} unconditional rules for event '{event}'; "
                    "only the first can ever be selected"
                )
        autos = [rule for rule in definition.auto_transitions if is_unconditional(rule.guard)]
        if len(autos) > 1:
            messages.append(
                f"State '{state}' has {len(autos)} unconditional auto-transitions; only the first can ever be taken"
            )
    return messages
