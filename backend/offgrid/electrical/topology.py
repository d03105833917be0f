"""Per-call index over a design snapshot.

Built fresh for every public call and discarded afterwards; it is the
only place lookups by id happen, so traversals stay O(degree).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from offgrid.schemas.design import Component, DesignSnapshot, Wire


@dataclass
class Topology:
    components: dict[str, Component]
    wires: list[Wire]
    system_voltage: float
    _incident: dict[str, list[Wire]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        incident: dict[str, list[Wire]] = defaultdict(list)
        for wire in self.wires:
            incident[wire.from_component_id].append(wire)
            if wire.to_component_id != wire.from_component_id:
                incident[wire.to_component_id].append(wire)
        self._incident = dict(incident)

    @classmethod
    def from_snapshot(cls, snapshot: DesignSnapshot) -> "Topology":
        return cls.build(snapshot.components, snapshot.wires, snapshot.system_voltage)

    @classmethod
    def build(
        cls, components: list[Component], wires: list[Wire], system_voltage: float
    ) -> "Topology":
        # Later duplicates win, matching what the editor displays.
        return cls({c.id: c for c in components}, list(wires), system_voltage)

    def component(self, component_id: str) -> Component | None:
        return self.components.get(component_id)

    def wires_at(self, component_id: str) -> list[Wire]:
        return self._incident.get(component_id, [])

    def endpoints(self, wire: Wire) -> tuple[Component | None, Component | None]:
        return self.component(wire.from_component_id), self.component(wire.to_component_id)
