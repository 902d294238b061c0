# flowstate/diagram/mermaid.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional

from flowstate.core.results import TransitionInfo
from flowstate.core.state_machine import StateMachine
from flowstate.diagram.base import DiagramFormat, DiagramGenerator

_UNSAFE_STATE_CHARS = re.compile(r"[ \-.()\[\]]")


class MermaidDiagramGenerator(DiagramGenerator):
    """Renders ``stateDiagram-v2`` Mermaid source."""

    @property
    def format(self) -> DiagramFormat:
        return DiagramFormat.MERMAID

    def state_name(self, state: Any) -> str:
        if state is None:
            return "NULL"
        name = _UNSAFE_STATE_CHARS.sub("_", str(state))
        if not re.match(r"^[A-Za-z_]", name):
            name = "State_" + name
        return name

    def generate(self, machine: StateMachine, title: Optional[str] = None) -> str:
        info = machine.get_info()
        lines = self._header(title)
        lines.append("stateDiagram-v2")
        lines.extend(self._body(info.initial_state, self.sorted_transitions(info), info.final_states))

        if info.final_states:
            lines.append("")
            lines.append("    %% Styling")
            lines.append("    classDef initialState fill:#e1f5fe,stroke:#01579b,stroke-width:2px")
            lines.append(f"    class {self.state_name(info.initial_state)} initialState")
            lines.append("    classDef finalState fill:#e8f5e8,stroke:#2e7d32,stroke-width:2px")
            finals = ",".join(self.state_name(s) for s in self.sorted_states(info.final_states))
            lines.append(f"    class {finals} finalState")
        return "\n".join(lines) + "\n"

    def generate_detailed(self, machine: StateMachine, title: Optional[str] = None) -> str:
        info = machine.get_info()
        heading = f"{title or 'State Machine Diagram'} ({len(info.states)} states, {len(info.transitions)} transitions)"
        finals = ", ".join(str(s) for s in self.sorted_states(info.final_states))
        lines = self._header(heading)
        lines.append(self.generate(machine).rstrip("\n"))
        lines.append("")
        lines.append("    %% State Machine Information:")
        lines.append(f"    %% Initial State: {info.initial_state}")
        lines.append(f"    %% Total States: {len(info.states)}")
        lines.append(f"    %% Total Events: {len(info.events)}")
        lines.append(f"    %% Total Transitions: {len(info.transitions)}")
        lines.append(f"    %% Final States: [{finals}]")
        return "\n".join(lines) + "\n"

    def generate_for_event(self, machine: StateMachine, event: Any, title: Optional[str] = None) -> str:
        info = machine.get_info()
        selected = [t for t in self.sorted_transitions(info) if t.event == event]
        lines = self._header(f"{title or 'State Machine'} - Event: {event}")
        lines.append("stateDiagram-v2")
        lines.extend(self._body(info.initial_state, selected, info.final_states))
        lines.append("")
        lines.append(f"    %% Showing only transitions for event: {event}")
        lines.append(f"    %% Total transitions for this event: {len(selected)}")
        return "\n".join(lines) + "\n"

    def _header(self, title: Optional[str]) -> List[str]:
        if not title or not title.strip():
            return []
        return ["---", f"title: {title}", "---"]

    def _body(self, initial_state: Any, transitions: Iterable[TransitionInfo], final_states: Any) -> List[str]:
        lines = [f"    [*] --> {self.state_name(initial_state)}"]
        for t in transitions:
            lines.append(
                f"    {self.state_name(t.from_state)} --> {self.state_name(t.to_state)} : {self.event_name(t.event)}"
            )
        for state in self.sorted_states(final_states):
            lines.append(f"    {self.state_name(state)} --> [*]")
        return lines
