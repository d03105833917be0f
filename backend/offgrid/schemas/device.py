from __future__ import annotations

from enum import Enum

from pydantic import Field

from offgrid.schemas.base import CamelModel


class PolarityClass(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    GROUND = "ground"
    AC_IN = "ac-in"
    AC_OUT = "ac-out"
    PV_POSITIVE = "pv-positive"
    PV_NEGATIVE = "pv-negative"
    DATA = "data"

    @property
    def is_ac(self) -> bool:
        return self in (PolarityClass.AC_IN, PolarityClass.AC_OUT)

    @property
    def is_pv(self) -> bool:
        return self in (PolarityClass.PV_POSITIVE, PolarityClass.PV_NEGATIVE)

    @property
    def is_dc(self) -> bool:
        return self in (PolarityClass.POSITIVE, PolarityClass.NEGATIVE)


class DeviceCategory(str, Enum):
    SOURCE = "source"
    LOAD = "load"
    STORAGE = "storage"
    DISTRIBUTION = "distribution"
    CONTROL = "control"


class TerminalDefinition(CamelModel):
    id: str
    polarity_class: PolarityClass
    label: str = ""
    mandatory: bool = False
    description: str | None = None

    model_config = {"frozen": True}


class DeviceDefinition(CamelModel):
    type: str
    name: str
    description: str = ""
    category: DeviceCategory
    terminals: tuple[TerminalDefinition, ...] = ()
    wiring_rules: tuple[str, ...] = ()
    usage_notes: str = ""
    width: float = Field(default=120, description="Canvas footprint width (px)")
    height: float = Field(default=100, description="Canvas footprint height (px)")

    model_config = {"frozen": True}

    def terminal(self, terminal_id: str) -> TerminalDefinition | None:
        for terminal in self.terminals:
            if terminal.id == terminal_id:
                return terminal
        return None

    @property
    def mandatory_terminals(self) -> list[TerminalDefinition]:
        return [t for t in self.terminals if t.mandatory]
