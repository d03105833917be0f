"""System-level energy budget: load totals, battery/inverter sizing, runtime.

Rough planning figures for the properties panel, not simulation: fixed
duty cycle, fixed sun hours, charge from 50% state of charge.
"""

from __future__ import annotations

import logging

from offgrid.devices.registry import is_battery, is_load, is_solar_panel
from offgrid.electrical.defaults import DEFAULT_SYSTEM_VOLTAGE
from offgrid.electrical.properties import (
    BatteryProperties,
    ChargerProperties,
    LoadProperties,
    SolarPanelProperties,
    positive,
    read_properties,
)
from offgrid.schemas.design import Component
from offgrid.schemas.load import (
    LoadRequirements,
    OptionalSunScenario,
    RuntimeEstimate,
    SunScenario,
)

logger = logging.getLogger(__name__)

PEAK_FACTOR = 1.25
DUTY_CYCLE = 0.7
SIZING_DOD = 0.5
SOLAR_HOURS_FOR_RECHARGE = 5.0
INVERTER_HEADROOM = 1.25

# Usable depth of discharge by chemistry, percent
BATTERY_SAFE_DOD = {
    "lifepo4": 80.0,
    "lithium": 80.0,
    "agm": 50.0,
    "gel": 50.0,
    "fla": 50.0,
}
DEFAULT_BATTERY_TYPE = "LiFePO4"
SOLAR_EFFICIENCY = 0.85
SUN_HOURS = {"low": 2.0, "medium": 4.0, "high": 6.0}
CHARGE_FROM_SOC = 0.5
DEFAULT_DAILY_HOURS = 24.0
NO_LOAD_RUNTIME_HOURS = 9999.0


def _watts(component: Component) -> float:
    if is_solar_panel(component):
        return positive(read_properties(component, SolarPanelProperties).watts) or 0.0
    return positive(read_properties(component, LoadProperties).watts) or 0.0


def calculate_load_requirements(
    components: list[Component], system_voltage: float
) -> LoadRequirements:
    system_voltage = system_voltage if system_voltage > 0 else DEFAULT_SYSTEM_VOLTAGE
    dc_loads = sum(_watts(c) for c in components if c.type == "dc-load")
    ac_loads = sum(_watts(c) for c in components if c.type == "ac-load")

    total = dc_loads + ac_loads
    average = total * DUTY_CYCLE
    daily_wh = average * 24
    return LoadRequirements(
        dc_loads=dc_loads,
        ac_loads=ac_loads,
        total_power=total,
        peak_power=total * PEAK_FACTOR,
        average_power=average,
        battery_capacity_required=daily_wh / system_voltage / SIZING_DOD,
        inverter_size_required=ac_loads * INVERTER_HEADROOM,
        charging_power_required=daily_wh / SOLAR_HOURS_FOR_RECHARGE,
    )


def _safe_dod(props: BatteryProperties) -> float:
    if props.safe_dod is not None and props.safe_dod > 0:
        return props.safe_dod
    chemistry = (props.battery_type or DEFAULT_BATTERY_TYPE).lower()
    return BATTERY_SAFE_DOD.get(chemistry, BATTERY_SAFE_DOD["lifepo4"])


def calculate_runtime_estimates(
    components: list[Component], system_voltage: float
) -> RuntimeEstimate:
    system_voltage = system_voltage if system_voltage > 0 else DEFAULT_SYSTEM_VOLTAGE
    daily_wh = 0.0
    for comp in components:
        if not is_load(comp):
            continue
        props = read_properties(comp, LoadProperties)
        hours = props.daily_hours if props.daily_hours is not None else DEFAULT_DAILY_HOURS
        daily_wh += (positive(props.watts) or 0.0) * max(0.0, hours)

    capacity_ah = usable_wh = 0.0
    battery_voltage = system_voltage
    for comp in components:
        if not is_battery(comp):
            continue
        props = read_properties(comp, BatteryProperties)
        ah = positive(props.capacity) or 0.0
        volts = positive(props.voltage) or system_voltage
        capacity_ah += ah
        usable_wh += ah * volts * _safe_dod(props) / 100
        if volts != system_voltage:
            battery_voltage = volts

    average_watts = daily_wh / 24
    runtime = usable_wh / average_watts if average_watts > 0 else NO_LOAD_RUNTIME_HOURS

    panel_watts = sum(_watts(c) for c in components if is_solar_panel(c))
    mppt_watts = 0.0
    for comp in components:
        if comp.type != "mppt":
            continue
        props = read_properties(comp, ChargerProperties)
        mppt_watts += (positive(props.amps) or 0.0) * (positive(props.voltage) or system_voltage)
    # No controller, nothing harvested.
    harvest = min(panel_watts, mppt_watts) if mppt_watts > 0 else 0.0

    production = {k: harvest * h * SOLAR_EFFICIENCY for k, h in SUN_HOURS.items()}
    net = {k: production[k] - daily_wh for k in SUN_HOURS}
    autonomy = {
        k: (usable_wh / daily_wh if net[k] > 0 and daily_wh > 0 else None)
        for k in SUN_HOURS
    }

    energy_needed = capacity_ah * battery_voltage * (1 - CHARGE_FROM_SOC)
    solar_hours = {
        k: (energy_needed / (harvest * SOLAR_EFFICIENCY * h) * 24 if harvest > 0 else 0.0)
        for k, h in SUN_HOURS.items()
    }

    shore_hours = None
    charger = next(
        (c for c in components if c.type in ("blue-smart-charger", "orion-dc-dc")), None
    )
    has_shore = any(c.type == "shore-power" for c in components)
    if charger is not None and has_shore and energy_needed > 0:
        props = read_properties(charger, ChargerProperties)
        charger_watts = (positive(props.amps) or 0.0) * (positive(props.voltage) or system_voltage)
        if charger_watts > 0:
            shore_hours = energy_needed / charger_watts

    logger.debug("Runtime estimate: %.0fWh/day, %.0fWh usable, %.1fh runtime",
                 daily_wh, usable_wh, runtime)
    return RuntimeEstimate(
        battery_runtime_hours=runtime,
        daily_consumption_wh=daily_wh,
        daily_production_wh=SunScenario(**production),
        net_daily_energy_wh=SunScenario(**net),
        autonomy_days=OptionalSunScenario(**autonomy),
        solar_charging_time_hours=SunScenario(**solar_hours),
        shore_power_charging_time_hours=shore_hours,
    )
