from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from offgrid.schemas.base import CamelModel


class WirePolarity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    HOT = "hot"
    NEUTRAL = "neutral"
    GROUND = "ground"


class ConductorMaterial(str, Enum):
    COPPER = "copper"
    ALUMINUM = "aluminum"


class Component(CamelModel):
    id: str
    type: str  # key into the device registry
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    properties: dict[str, Any] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.name or self.id


class Wire(CamelModel):
    id: str
    from_component_id: str
    to_component_id: str
    from_terminal: str
    to_terminal: str
    polarity: WirePolarity = WirePolarity.POSITIVE
    length: float | None = None  # feet, one way
    gauge: str | None = None  # AWG, e.g. "10 AWG" or "1/0"
    current: float | None = None  # explicit override, amps per wire
    conductor_material: ConductorMaterial = ConductorMaterial.COPPER

    def other_end(self, component_id: str) -> str:
        if self.from_component_id == component_id:
            return self.to_component_id
        return self.from_component_id

    def terminal_at(self, component_id: str) -> str:
        if self.from_component_id == component_id:
            return self.from_terminal
        return self.to_terminal


class DesignSnapshot(CamelModel):
    components: list[Component] = Field(default_factory=list)
    wires: list[Wire] = Field(default_factory=list)
    system_voltage: float = Field(default=12.0, gt=0)
