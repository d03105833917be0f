"""Device Registry — read-only lookup over the device catalog.

Populated once at import time and never mutated afterwards, so concurrent
readers need no locking. Both the connection rules (terminal → polarity
class) and the current inference engine (device families) read from here.
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from offgrid.devices.catalog import DEVICE_DEFINITIONS
from offgrid.schemas.design import Component
from offgrid.schemas.device import DeviceDefinition, PolarityClass, TerminalDefinition

logger = logging.getLogger(__name__)

_REGISTRY = MappingProxyType(dict(DEVICE_DEFINITIONS))


# ─── Device families ───

INVERTER_TYPES = frozenset({"inverter", "multiplus", "phoenix-inverter"})
CHARGER_TYPES = frozenset({"mppt", "blue-smart-charger", "orion-dc-dc"})
BUS_BAR_TYPES = frozenset({"busbar-positive", "busbar-negative"})
DC_PANEL_TYPES = frozenset({"dc-panel", "breaker-panel"})
AC_PANEL_TYPES = frozenset({"ac-panel"})
PANEL_TYPES = DC_PANEL_TYPES | AC_PANEL_TYPES
LOAD_TYPES = frozenset({"dc-load", "ac-load"})
INLINE_TYPES = frozenset({"fuse", "switch", "smartshunt"})
# Only these may be wired positive-to-negative (series strings).
CHAINABLE_TYPES = frozenset({"battery", "solar-panel"})


def get_device(device_type: str) -> DeviceDefinition | None:
    return _REGISTRY.get(device_type)


def list_devices() -> list[DeviceDefinition]:
    return list(_REGISTRY.values())


def get_terminal(device_type: str, terminal_id: str) -> TerminalDefinition | None:
    device = _REGISTRY.get(device_type)
    if device is None:
        return None
    return device.terminal(terminal_id)


def terminal_class(component: Component, terminal_id: str) -> PolarityClass | None:
    """Polarity class of a component's terminal, or None when unknown."""
    terminal = get_terminal(component.type, terminal_id)
    if terminal is None:
        logger.debug(
            "No terminal %r on %s (%s)", terminal_id, component.id, component.type
        )
        return None
    return terminal.polarity_class


def is_inverter(component: Component | None) -> bool:
    return component is not None and component.type in INVERTER_TYPES


def is_charger(component: Component | None) -> bool:
    return component is not None and component.type in CHARGER_TYPES


def is_bus_bar(component: Component | None) -> bool:
    return component is not None and component.type in BUS_BAR_TYPES


def is_panel(component: Component | None) -> bool:
    return component is not None and component.type in PANEL_TYPES


def is_ac_panel(component: Component | None) -> bool:
    return component is not None and component.type in AC_PANEL_TYPES


def is_load(component: Component | None) -> bool:
    return component is not None and component.type in LOAD_TYPES


def is_inline(component: Component | None) -> bool:
    return component is not None and component.type in INLINE_TYPES


def is_battery(component: Component | None) -> bool:
    return component is not None and component.type == "battery"


def is_solar_panel(component: Component | None) -> bool:
    return component is not None and component.type == "solar-panel"
