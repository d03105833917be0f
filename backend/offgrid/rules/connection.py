"""Connection Rule Engine — terminal-pair checks run before a wire exists.

Each rule is a plain function ``(from_comp, from_terminal, to_comp,
to_terminal) -> ConnectionResult``. Rules run in the fixed order of
``CONNECTION_RULES``; the first failure is returned as-is. Accumulating
findings across wires is the design validator's job, not this module's.

Unknown device types or terminal ids never block a connection: the
engine answers "valid" so custom devices stay usable.
"""

from __future__ import annotations

import logging
from typing import Callable

from offgrid.devices.registry import CHAINABLE_TYPES, get_device, terminal_class
from offgrid.electrical.defaults import STANDARD_SYSTEM_VOLTAGES, VOLTAGE_TOLERANCE
from offgrid.electrical.properties import declared_voltage
from offgrid.schemas.design import Component
from offgrid.schemas.device import PolarityClass
from offgrid.schemas.validation import ConnectionResult, ValidationSeverity

logger = logging.getLogger(__name__)

ConnectionRule = Callable[[Component, str, Component, str], ConnectionResult]

_OK = ConnectionResult(valid=True)


def _reject(rule_id: str, message: str) -> ConnectionResult:
    return ConnectionResult(
        valid=False,
        message=message,
        severity=ValidationSeverity.ERROR,
        rule_id=rule_id,
    )


def _series_allowed(from_comp: Component, to_comp: Component) -> bool:
    """Only identical chainable devices (batteries, panels) may go + to -."""
    return from_comp.type == to_comp.type and from_comp.type in CHAINABLE_TYPES


# ═══════════════════════════════════════════════════════════
# Rule 1: Polarity Match
# ═══════════════════════════════════════════════════════════


def check_polarity_match(
    from_comp: Component,
    from_terminal: str,
    to_comp: Component,
    to_terminal: str,
) -> ConnectionResult:
    """Positive to positive, negative to negative, AC in to AC out,
    PV to matching PV, ground to ground, data to data."""
    rule = "polarity-match"
    a = terminal_class(from_comp, from_terminal)
    b = terminal_class(to_comp, to_terminal)
    if a is None or b is None:
        return _OK

    if PolarityClass.DATA in (a, b):
        if a == b:
            return _OK
        return _reject(rule, "Cannot connect a data port to a power terminal")

    if PolarityClass.GROUND in (a, b):
        if a == b:
            return _OK
        return _reject(rule, "Must connect Ground to Ground")

    if a.is_ac != b.is_ac:
        return _reject(rule, "Cannot connect AC to DC")

    if a.is_ac:
        if a == b == PolarityClass.AC_IN:
            return _reject(rule, "Cannot connect Input to Input")
        if a == b == PolarityClass.AC_OUT:
            return _reject(rule, "Cannot connect Output to Output")
        return _OK

    if a.is_pv != b.is_pv:
        return _reject(
            rule, "PV terminals must connect to PV terminals (route through a charge controller)"
        )

    if a != b:
        if _series_allowed(from_comp, to_comp):
            return _OK
        if a.is_pv:
            return _reject(rule, "PV Polarity Mismatch (+ to -)")
        return _reject(rule, "DC Polarity Mismatch (+ to -)")

    return _OK


# ═══════════════════════════════════════════════════════════
# Rule 2: Voltage Compatibility
# ═══════════════════════════════════════════════════════════


def check_voltage_compatibility(
    from_comp: Component,
    from_terminal: str,
    to_comp: Component,
    to_terminal: str,
) -> ConnectionResult:
    """Two different canonical system voltages (12/24/48) may not meet.

    Small differences (nominal vs loaded battery voltage) and
    non-canonical voltages such as a panel's Vmp are accepted.
    """
    v1 = declared_voltage(from_comp)
    v2 = declared_voltage(to_comp)
    if v1 is None or v2 is None:
        return _OK

    if abs(v1 - v2) <= VOLTAGE_TOLERANCE:
        return _OK

    if v1 in STANDARD_SYSTEM_VOLTAGES and v2 in STANDARD_SYSTEM_VOLTAGES:
        return _reject(
            "voltage-match", f"Voltage Mismatch: {v1:g}V vs {v2:g}V"
        )
    return _OK


# Registry of connection rules, evaluated in order
CONNECTION_RULES: list[ConnectionRule] = [
    check_polarity_match,
    check_voltage_compatibility,
]


def validate_connection(
    from_comp: Component,
    from_terminal: str,
    to_comp: Component,
    to_terminal: str,
    rules: list[ConnectionRule] | None = None,
) -> ConnectionResult:
    """Decide whether a wire may join two terminals.

    Returns the first failing rule's result, or a valid result.
    """
    if get_device(from_comp.type) is None or get_device(to_comp.type) is None:
        logger.debug(
            "Skipping connection rules for unregistered type(s): %s, %s",
            from_comp.type,
            to_comp.type,
        )
        return _OK

    for rule in rules if rules is not None else CONNECTION_RULES:
        result = rule(from_comp, from_terminal, to_comp, to_terminal)
        if not result.valid:
            return result
    return _OK
