# flowstate/diagram/base.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, List, Optional

from flowstate.core.results import StateMachineInfo, TransitionInfo
from flowstate.core.state_machine import StateMachine

logger = logging.getLogger(__name__)


class DiagramFormat(Enum):
    MERMAID = "mermaid"
    PLANTUML = "plantuml"


class DiagramGenerator(ABC):
    """
    Renders a machine's introspection snapshot as diagram source text.

    Output is deterministic: states and transitions are emitted sorted by
    their rendered names.
    """

    @property
    @abstractmethod
    def format(self) -> DiagramFormat: ...

    @abstractmethod
    def generate(self, machine: StateMachine, title: Optional[str] = None) -> str:
        """Render every transition of ``machine``."""

    @abstractmethod
    def generate_detailed(self, machine: StateMachine, title: Optional[str] = None) -> str:
        """Render the diagram together with state, event and transition counts."""

    @abstractmethod
    def generate_for_event(self, machine: StateMachine, event: Any, title: Optional[str] = None) -> str:
        """Render only the transitions triggered by ``event``."""

    def log_diagram(self, machine: StateMachine, title: Optional[str] = None) -> str:
        """Log the diagram at INFO and return it."""
        diagram = self.generate(machine, title)
        logger.info("%s diagram%s:\n%s", self.format.value, f" '{title}'" if title else "", diagram)
        return diagram

    def state_name(self, state: Any) -> str:
        return "NULL" if state is None else str(state)

    def event_name(self, event: Any) -> str:
        if event is None:
            return "auto"
        return str(event).replace('"', "'").replace("\n", " ").replace("\r", " ")

    def sorted_transitions(self, info: StateMachineInfo) -> List[TransitionInfo]:
        return sorted(
            info.transitions,
            key=lambda t: (self.state_name(t.from_state), self.state_name(t.to_state), self.event_name(t.event)),
        )

    def sorted_states(self, states: Any) -> List[Any]:
        return sorted(states, key=self.state_name)


def diagram_generator(fmt: DiagramFormat) -> DiagramGenerator:
    """Create the generator for ``fmt``."""
    from flowstate.diagram.mermaid import MermaidDiagramGenerator
    from flowstate.diagram.plantuml import PlantUMLDiagramGenerator

    generators = {
        DiagramFormat.MERMAID: MermaidDiagramGenerator,
        DiagramFormat.PLANTUML: PlantUMLDiagramGenerator,
    }
    try:
        return generators[DiagramFormat(fmt)]()
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported diagram format: {fmt!r}") from None
