# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from dataclasses import dataclass, field
from typing import Any, List

import pytest

from flowstate import MachineBuilder


class Recorder:
    """Collects labels from actions, guards and listeners in call order."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def action(self, label: str):
        def _action(transition, context):
            with self._lock:
                self.calls.append(label)

        return _action

    def guard(self, label: str, result: bool = True):
        def _guard(transition, context):
            with self._lock:
                self.calls.append(label)
            return result

        return _guard


class RecordingListener:
    """Listener implementing every hook."""

    def __init__(self) -> None:
        self.events: List[Any] = []
        self.fired: List[Any] = []
        self.errors: List[Exception] = []

    def on_state_exit(self, state, event, context):
        self.events.append(("exit", state, event))

    def on_transition(self, from_state, to_state, event, context):
        self.events.append(("transition", from_state, to_state, event))

    def on_state_entry(self, state, event, context):
        self.events.append(("entry", state, event))

    def on_transition_error(self, state, event, context, error):
        self.errors.append(error)

    def on_fire(self, debug_info):
        self.fired.append(debug_info)


@dataclass
class Order:
    order_id: str = "order-1"
    history: List[str] = field(default_factory=list)
    paid: bool = False


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def order() -> Order:
    return Order()


@pytest.fixture
def builder() -> MachineBuilder:
    return MachineBuilder()


@pytest.fixture
def order_machine():
    """CREATED -> PAID -> SHIPPED -> DELIVERED, with CANCELLED reachable early."""

    def _record(label):
        def _action(transition, context):
            context.history.append(label)

        return _action

    def _mark_paid(transition, context):
        context.paid = True

    return (
        MachineBuilder()
        .initial_state("CREATED")
        .configure("CREATED")
        .permit("PAY", "PAID")
        .permit("CANCEL", "CANCELLED")
        .and_()
        .configure("PAID")
        .on_entry(_mark_paid)
        .on_entry(_record("paid"))
        .permit("SHIP", "SHIPPED")
        .permit("CANCEL", "CANCELLED")
        .and_()
        .configure("SHIPPED")
        .on_entry(_record("shipped"))
        .permit("DELIVER", "DELIVERED")
        .and_()
        .configure("DELIVERED")
        .on_entry(_record("delivered"))
        .as_final()
        .and_()
        .configure("CANCELLED")
        .as_final()
        .and_()
        .build()
    )


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Cleanup any remaining threads after each test
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive():
            thread.join(timeout=1.0)
