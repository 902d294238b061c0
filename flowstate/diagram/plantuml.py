# flowstate/diagram/plantuml.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from flowstate.core.results import StateMachineInfo, TransitionInfo
from flowstate.core.state_machine import StateMachine
from flowstate.diagram.base import DiagramFormat, DiagramGenerator

_ERROR_MARKERS = ("ERROR", "FAIL", "REJECT")


class PlantUMLDiagramGenerator(DiagramGenerator):
    """
    Renders PlantUML state diagrams. Non-final states whose name mentions an
    error, failure or rejection get the ``<<Error>>`` stereotype.
    """

    @property
    def format(self) -> DiagramFormat:
        return DiagramFormat.PLANTUML

    def state_name(self, state: Any) -> str:
        if state is None:
            return "NULL"
        return str(state).replace("\\", "_").replace('"', "'").replace("\n", "_").replace("\r", "_")

    def event_name(self, event: Any) -> str:
        return super().event_name(event).replace("\\", "_")

    def generate(self, machine: StateMachine, title: Optional[str] = None) -> str:
        info = machine.get_info()
        lines = ["@startuml"]
        if title and title.strip():
            lines.append(f"title {title}")
        lines.extend(self._skin(highlight=False))
        lines.append(f"state {self.state_name(info.initial_state)} <<Initial>>")
        for state in self.sorted_states(info.final_states):
            lines.append(f"state {self.state_name(state)} <<Final>>")
        for state in self.sorted_states(info.states):
            name = str(state).upper()
            if state not in info.final_states and any(marker in name for marker in _ERROR_MARKERS):
                lines.append(f"state {self.state_name(state)} <<Error>>")
        lines.append("")
        lines.extend(self._edges(info, self.sorted_transitions(info)))
        lines.append("")
        lines.append("@enduml")
        return "\n".join(lines) + "\n"

    def generate_detailed(self, machine: StateMachine, title: Optional[str] = None) -> str:
        info = machine.get_info()
        counts = f"({len(info.states)} states, {len(info.transitions)} transitions)"
        heading = f"{title or 'State Machine Diagram'}\\n{counts}"
        lines = [self.generate(machine, heading).rstrip("\n")]
        lines.append("")
        lines.append("note top")
        lines.append("**State Machine Information**")
        lines.append(f"* Initial State: {info.initial_state}")
        lines.append(f"* Total States: {len(info.states)}")
        lines.append(f"* Total Events: {len(info.events)}")
        lines.append(f"* Total Transitions: {len(info.transitions)}")
        lines.append(f"* Final States: {len(info.final_states)}")
        lines.append("end note")
        return "\n".join(lines) + "\n"

    def generate_for_event(self, machine: StateMachine, event: Any, title: Optional[str] = None) -> str:
        info = machine.get_info()
        selected = [t for t in self.sorted_transitions(info) if t.event == event]
        lines = ["@startuml", f"title {title or 'State Machine'}\\nEvent: {event}"]
        lines.extend(self._skin(highlight=True))
        lines.append(f"state {self.state_name(info.initial_state)} <<Initial>>")
        for state in self.sorted_states(info.final_states):
            lines.append(f"state {self.state_name(state)} <<Final>>")
        involved = {t.from_state for t in selected} | {t.to_state for t in selected}
        for state in self.sorted_states(involved):
            if state not in info.final_states and state != info.initial_state:
                lines.append(f"state {self.state_name(state)} <<Highlighted>>")
        lines.append("")
        lines.extend(self._edges(info, selected))
        lines.append("")
        lines.append("note bottom")
        lines.append(f"Showing only transitions for event: **{event}**")
        lines.append(f"Total transitions for this event: {len(selected)}")
        lines.append("end note")
        lines.append("")
        lines.append("@enduml")
        return "\n".join(lines) + "\n"

    def _skin(self, highlight: bool) -> List[str]:
        lines = ["!theme plain", "skinparam state {"]
        lines.append("  BackgroundColor<<Final>> LightGreen")
        lines.append("  BackgroundColor<<Initial>> LightBlue")
        if highlight:
            lines.append("  BackgroundColor<<Highlighted>> Yellow")
        else:
            lines.append("  BackgroundColor<<Error>> LightCoral")
            lines.append("  BorderColor<<Final>> DarkGreen")
            lines.append("  BorderColor<<Initial>> DarkBlue")
            lines.append("  BorderColor<<Error>> DarkRed")
            lines.append("  FontStyle<<Final>> bold")
            lines.append("  FontStyle<<Initial>> bold")
        lines.append("}")
        lines.append("")
        return lines

    def _edges(self, info: StateMachineInfo, transitions: Iterable[TransitionInfo]) -> List[str]:
        lines = [f"[*] --> {self.state_name(info.initial_state)}"]
        for t in transitions:
            lines.append(
                f"{self.state_name(t.from_state)} --> {self.state_name(t.to_state)} : {self.event_name(t.event)}"
            )
        for state in self.sorted_states(info.final_states):
            lines.append(f"{self.state_name(state)} --> [*]")
        return lines
