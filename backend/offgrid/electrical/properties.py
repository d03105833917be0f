"""Typed views over the loosely-typed ``Component.properties`` bag.

Device catalogs evolve, so components arrive with arbitrary string-keyed
values ("watts": 120, "voltage": "12V", "powerRating": null ...). Each
device family gets a small record with explicit optional fields; values
that cannot be read as numbers become ``None`` and the caller falls back
to the constants in :mod:`offgrid.electrical.defaults`. Unknown keys stay
in the component's own bag and are simply ignored here.
"""

from __future__ import annotations

import math
import re
from typing import Annotated, Any, TypeVar

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from offgrid.electrical.defaults import (
    ACCEPTED_AC_VOLTAGES,
    DEFAULT_AC_VOLTAGE,
    DEFAULT_INVERTER_EFFICIENCY,
)
from offgrid.schemas.design import Component

# A whole number with an optional unit suffix: "120", "12.8 V", "1e3", "30A".
_NUMBER_WITH_UNIT = re.compile(
    r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)\s*[A-Za-z%°]*\s*$"
)
_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _NUMBER_WITH_UNIT.match(_THOUSANDS_SEPARATOR.sub("", value))
        if match is None:
            return None
        number = float(match.group(1))
        return number if math.isfinite(number) else None
    return None


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


Number = Annotated[float | None, BeforeValidator(_to_number)]
Text = Annotated[str | None, BeforeValidator(_to_text)]


def positive(value: float | None) -> float | None:
    """Treat zero and negative figures as "not declared"."""
    return value if value is not None and value > 0 else None


class PropertyRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LoadProperties(PropertyRecord):
    watts: Number = Field(default=None, validation_alias=AliasChoices("watts", "power"))
    amps: Number = Field(default=None, validation_alias=AliasChoices("amps", "current"))
    voltage: Number = None
    ac_voltage: Number = Field(
        default=None, validation_alias=AliasChoices("acVoltage", "ac_voltage")
    )
    daily_hours: Number = Field(
        default=None, validation_alias=AliasChoices("dailyHours", "daily_hours")
    )

    def resolved_ac_voltage(self) -> float:
        """acVoltage, then voltage, if it is a real mains voltage; else 120 V."""
        for candidate in (self.ac_voltage, self.voltage):
            if candidate in ACCEPTED_AC_VOLTAGES:
                return float(candidate)
        return DEFAULT_AC_VOLTAGE


class BatteryProperties(PropertyRecord):
    voltage: Number = None
    capacity: Number = Field(
        default=None, validation_alias=AliasChoices("capacity", "capacityAh", "ah")
    )
    battery_type: Text = Field(
        default=None, validation_alias=AliasChoices("batteryType", "battery_type")
    )
    safe_dod: Number = Field(
        default=None, validation_alias=AliasChoices("safeDOD", "safe_dod")
    )


class SolarPanelProperties(PropertyRecord):
    watts: Number = Field(default=None, validation_alias=AliasChoices("watts", "power"))
    voltage: Number = Field(
        default=None, validation_alias=AliasChoices("vmp", "Vmp", "voltage")
    )


class ChargerProperties(PropertyRecord):
    amps: Number = Field(
        default=None, validation_alias=AliasChoices("amps", "current", "maxCurrent")
    )
    voltage: Number = None


class InverterProperties(PropertyRecord):
    rated_watts: Number = Field(
        default=None, validation_alias=AliasChoices("powerRating", "watts", "power")
    )
    efficiency: Number = None

    def resolved_efficiency(self) -> float:
        eff = positive(self.efficiency)
        if eff is None:
            return DEFAULT_INVERTER_EFFICIENCY
        # Accept both 0.9 and 90
        if eff > 1:
            eff = eff / 100
        return eff if 0 < eff <= 1 else DEFAULT_INVERTER_EFFICIENCY


R = TypeVar("R", bound=PropertyRecord)


def read_properties(component: Component, record: type[R]) -> R:
    return record.model_validate(component.properties or {})


def declared_voltage(component: Component) -> float | None:
    """The component's own ``voltage`` property, if it has a usable one."""
    return positive(_to_number((component.properties or {}).get("voltage")))
