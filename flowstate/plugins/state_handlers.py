# flowstate/plugins/state_handlers.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Generic, List, Protocol, runtime_checkable

from flowstate.core.errors import ConfigurationError
from flowstate.core.machine_builder import MachineBuilder, StateConfiguration
from flowstate.interfaces.types import C, E, S


@runtime_checkable
class StateHandler(Protocol):
    """
    Configures the rules of one state, so that large machines can be split
    into one small class per state.
    """

    state: Any

    def configure(self, configuration: StateConfiguration) -> StateConfiguration: ...


class StateHandlerRegistry(Generic[S, E, C]):
    """
    Collects state handlers and applies them to a builder in registration order.
    """

    def __init__(self) -> None:
        self._handlers: List[StateHandler] = []

    def register(self, handler: StateHandler) -> "StateHandlerRegistry[S, E, C]":
        """
        :raises ConfigurationError: If a handler for the same state is already registered.
        """
        if any(existing.state == handler.state for existing in self._handlers):
            raise ConfigurationError(f"A handler for state '{handler.state}' is already registered")
        self._handlers.append(handler)
        return self

    def apply_to(self, builder: MachineBuilder[S, E, C], initial_state: S) -> MachineBuilder[S, E, C]:
        builder.initial_state(initial_state)
        for handler in self._handlers:
            handler.configure(builder.configure(handler.state))
        return builder

    def __len__(self) -> int:
        return len(self._handlers)

    def clear(self) -> None:
        self._handlers.clear()
