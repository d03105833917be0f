from __future__ import annotations

from enum import Enum

from pydantic import Field

from offgrid.schemas.base import CamelModel
from offgrid.schemas.design import ConductorMaterial


class InsulationRating(str, Enum):
    C60 = "60C"
    C75 = "75C"
    C90 = "90C"


class SizingStatus(str, Enum):
    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


class CurrentBasis(str, Enum):
    """Which inference branch produced a wire's current."""

    OVERRIDE = "override"
    INVERTER_DC = "inverter-dc"
    SOLAR = "solar"
    CHARGER = "charger"
    LOAD = "load"
    PANEL = "panel"
    BUS_NET = "bus-net"
    DOWNSTREAM = "downstream"
    DEFAULT = "default"


class WireSizingRequest(CamelModel):
    current: float = Field(..., ge=0, description="Amps carried by one conductor")
    length: float = Field(..., ge=0, description="One-way run length in feet")
    voltage: float = Field(..., gt=0, description="Circuit voltage")
    temperature_c: float = 30.0
    conductor_material: ConductorMaterial = ConductorMaterial.COPPER
    insulation_type: InsulationRating = InsulationRating.C75
    bundling_factor: float = Field(default=1.0, gt=0, le=1.0)
    max_voltage_drop: float = Field(default=3.0, gt=0, le=100)
    current_gauge: str | None = None


class WireCalculation(CamelModel):
    current: float
    length: float
    voltage: float
    temperature_c: float
    conductor_material: ConductorMaterial
    insulation_type: InsulationRating
    bundling_factor: float
    max_voltage_drop: float
    recommended_gauge: str
    actual_voltage_drop: float
    voltage_drop_percent: float
    derated_ampacity: float
    status: SizingStatus
    message: str = ""


class CurrentEstimate(CamelModel):
    wire_id: str
    total_current: float = Field(ge=0)
    per_wire_current: float = Field(ge=0)
    parallel_count: int = Field(default=1, ge=1)
    basis: CurrentBasis
