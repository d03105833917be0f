"""Default run lengths (feet) for a wire whose length was never entered.

Typical RV/boat installations: battery-side runs are short, roof-to-
controller solar runs are long. First matching pair wins.
"""

from __future__ import annotations

from offgrid.devices.registry import INVERTER_TYPES, LOAD_TYPES
from offgrid.electrical.defaults import DEFAULT_WIRE_LENGTH_FT
from offgrid.schemas.design import Component

_CHARGERS = frozenset({"blue-smart-charger", "orion-dc-dc"})


def _is_bus(t: str) -> bool:
    return "busbar" in t


def default_wire_length(
    from_component: Component | None, to_component: Component | None
) -> float:
    if from_component is None or to_component is None:
        return DEFAULT_WIRE_LENGTH_FT

    types = {from_component.type, to_component.type}
    any_bus = any(_is_bus(t) for t in types)

    if "battery" in types:
        if "fuse" in types:
            return 2.0
        if "smartshunt" in types:
            return 3.0
        if any_bus:
            return 5.0
        return 8.0

    if "solar-panel" in types:
        return 25.0 if "mppt" in types else 15.0

    if "fuse" in types:
        return 10.0 if any_bus else 5.0

    if any_bus:
        return 10.0 if types & (LOAD_TYPES | INVERTER_TYPES) else 8.0

    if "mppt" in types:
        return 10.0

    if types & LOAD_TYPES:
        return 5.0 if types & INVERTER_TYPES else 8.0

    if types & INVERTER_TYPES:
        return 10.0

    if types & _CHARGERS:
        return 10.0

    if "smartshunt" in types:
        return 5.0

    return DEFAULT_WIRE_LENGTH_FT
