from __future__ import annotations

from pydantic import Field

from offgrid.schemas.base import CamelModel
from offgrid.schemas.design import Component


class LoadRequest(CamelModel):
    components: list[Component] = Field(default_factory=list)
    system_voltage: float = Field(default=12.0, gt=0)


class LoadRequirements(CamelModel):
    dc_loads: float
    ac_loads: float
    total_power: float
    peak_power: float
    average_power: float
    battery_capacity_required: float
    inverter_size_required: float
    charging_power_required: float


class SunScenario(CamelModel):
    low: float
    medium: float
    high: float


class OptionalSunScenario(CamelModel):
    low: float | None = None
    medium: float | None = None
    high: float | None = None


class RuntimeEstimate(CamelModel):
    battery_runtime_hours: float
    daily_consumption_wh: float
    daily_production_wh: SunScenario
    net_daily_energy_wh: SunScenario
    autonomy_days: OptionalSunScenario
    solar_charging_time_hours: SunScenario
    shore_power_charging_time_hours: float | None = None
