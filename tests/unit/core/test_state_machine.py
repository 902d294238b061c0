# tests/unit/core/test_state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import dataclasses

import pytest

from flowstate.core.errors import ConfigurationError, InvalidTransitionError
from flowstate.core.machine_builder import MachineBuilder
from flowstate.core.results import DebugReason, TransitionInfo
from flowstate.core.rules import Permit, StateDefinition
from flowstate.core.state_machine import StateMachine


def test_requires_initial_state():
    with pytest.raises(ConfigurationError):
        StateMachine(None, {})


def test_direct_construction():
    machine = StateMachine("A", {"A": StateDefinition("A", rules=(Permit("go", "B"),))})
    assert machine.initial_state == "A"
    assert machine.fire("A", "go", None) == "B"
    assert "initial_state='A'" in repr(machine)


def test_get_info(order_machine):
    info = order_machine.get_info()

    assert info.initial_state == "CREATED"
    assert info.states == {"CREATED", "PAID", "SHIPPED", "DELIVERED", "CANCELLED"}
    assert info.events == {"PAY", "SHIP", "DELIVER", "CANCEL"}
    assert info.final_states == {"DELIVERED", "CANCELLED"}
    assert TransitionInfo("CREATED", "PAID", "PAY") in info.transitions
    assert TransitionInfo("PAID", "CANCELLED", "CANCEL") in info.transitions
    assert len(info.transitions) == 5


def test_get_info_is_cached(order_machine):
    assert order_machine.get_info() is order_machine.get_info()


def test_get_info_rule_kinds():
    machine = (
        MachineBuilder()
        .initial_state("A")
        .configure("A")
        .permit_reentry("again")
        .ignore("noise")
        .internal("tick", lambda t, c: None)
        .auto_transition("B")
        .and_()
        .build()
    )
    info = machine.get_info()

    assert info.events == {"again", "noise", "tick"}
    assert info.transitions == {TransitionInfo("A", "A", "again"), TransitionInfo("A", "B", None)}


def test_target_only_states_are_declared():
    machine = MachineBuilder().initial_state("A").configure("A").permit("go", "B").and_().build()

    assert "B" in machine.get_info().states
    assert machine.definition("B") == StateDefinition("B")
    assert machine.is_final_state("B") is False

    assert machine.fire("A", "go", None) == "B"
    result = machine.fire_with_result("B", "go", None)
    assert result.debug_info.reason is DebugReason.NO_APPLICABLE_TRANSITION_FOUND


def test_initial_state_is_not_declared_implicitly():
    machine = MachineBuilder().initial_state("A").configure("B").and_().build()
    assert "A" not in machine.get_info().states
    assert machine.definition("A") is None


def test_definitions_are_read_only(order_machine):
    with pytest.raises(TypeError):
        order_machine.definitions["NEW"] = StateDefinition("NEW")
    with pytest.raises(dataclasses.FrozenInstanceError):
        order_machine.definition("CREATED").is_final = True


def test_builder_changes_after_build_do_not_leak():
    builder = MachineBuilder().initial_state("A")
    builder.configure("A").permit("go", "B")
    machine = builder.build()

    builder.configure("A").permit("other", "C").as_final()
    builder.on_any_entry(lambda t, c: c.append("entered"))

    context = []
    assert machine.fire("A", "other", context) == "A"
    assert machine.fire("A", "go", context) == "B"
    assert context == []
    assert "C" not in machine.get_info().states


def test_fire_or_raise(order_machine, order):
    assert order_machine.fire_or_raise("CREATED", "PAY", order) == "PAID"

    with pytest.raises(InvalidTransitionError) as exc_info:
        order_machine.fire_or_raise("CREATED", "DELIVER", order)
    assert exc_info.value.result.state == "CREATED"
    assert exc_info.value.result.debug_info.reason is DebugReason.NO_APPLICABLE_TRANSITION_FOUND


def test_fire_or_raise_accepts_ignored_events():
    machine = MachineBuilder().initial_state("A").configure("A").ignore("noise").and_().build()
    assert machine.fire_or_raise("A", "noise", None) == "A"


def test_machine_is_reusable_across_contexts(order_machine, order):
    other = type(order)(order_id="order-2")

    state = order_machine.fire("CREATED", "PAY", order)
    order_machine.fire(state, "SHIP", order)
    order_machine.fire("CREATED", "PAY", other)

    assert order.history == ["paid", "shipped"]
    assert other.history == ["paid"]
    assert order.paid and other.paid
