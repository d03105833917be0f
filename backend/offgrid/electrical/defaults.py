"""Documented fallback values for the electrical engine.

Whenever a component omits a property, or a wire omits its length, the
engine substitutes the value here instead of failing. Nothing outside this
module should hard-code these numbers.
"""

# ─── System ───

DEFAULT_SYSTEM_VOLTAGE = 12.0
STANDARD_SYSTEM_VOLTAGES = frozenset({12.0, 24.0, 48.0})
# 12.0 vs 12.8 (nominal vs loaded) must never be flagged.
VOLTAGE_TOLERANCE = 5.0

# ─── AC side ───

DEFAULT_AC_VOLTAGE = 120.0
ACCEPTED_AC_VOLTAGES = frozenset({110.0, 120.0, 220.0, 230.0})

# ─── Inverters ───

DEFAULT_INVERTER_EFFICIENCY = 0.875
# No AC load found: assume 80% of nameplate.
INVERTER_FALLBACK_UTILIZATION = 0.8

# ─── Solar ───

# Vmp defaults to 1.5× system voltage.
SOLAR_VMP_FACTOR = 1.5
# A declared panel voltage within 20% of system voltage is treated as a
# mistaken system-voltage entry.
SOLAR_VMP_MISTAKE_BAND = 0.2

# ─── Chargers (rated output amps) ───

DEFAULT_CHARGER_AMPS = {
    "mppt": 30.0,
    "blue-smart-charger": 15.0,
    "orion-dc-dc": 30.0,
}
FALLBACK_CHARGER_AMPS = 30.0

# ─── Wires ───

# Placeholder when the topology says nothing about a wire.
DEFAULT_WIRE_CURRENT = 10.0
DEFAULT_WIRE_LENGTH_FT = 10.0
DEFAULT_TEMPERATURE_C = 30.0
DEFAULT_BUNDLING_FACTOR = 1.0
DEFAULT_MAX_VOLTAGE_DROP_PERCENT = 3.0  # ABYC
NEAR_LIMIT_RATIO = 0.9

# ─── Layout (canvas px) ───

CANVAS_WIDTH = 2000.0
CANVAS_HEIGHT = 1500.0
CANVAS_EDGE_MARGIN = 50.0
MIN_COMPONENT_DISTANCE = 150.0
MAX_COMPONENT_COUNT = 30
