"""Wire Sizing Engine — smallest code-table gauge meeting ampacity and drop.

Ampacities follow NEC Table 310.16 (60/75/90 °C columns), resistances are
ohms per 1000 ft. Voltage drop always counts the round trip (supply and
return conductor), so a 10 ft run is 20 ft of copper.

All quantities are per physical conductor: callers dividing a parallel
run's current must pass the per-wire share, never the group total.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from offgrid.electrical.defaults import (
    DEFAULT_BUNDLING_FACTOR,
    DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
    DEFAULT_TEMPERATURE_C,
    NEAR_LIMIT_RATIO,
)
from offgrid.schemas.design import ConductorMaterial
from offgrid.schemas.sizing import InsulationRating, SizingStatus, WireCalculation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConductorSpec:
    resistance: float  # ohms / 1000 ft
    ampacity_60c: float
    ampacity_75c: float
    ampacity_90c: float

    def ampacity(self, insulation: InsulationRating) -> float:
        if insulation == InsulationRating.C60:
            return self.ampacity_60c
        if insulation == InsulationRating.C90:
            return self.ampacity_90c
        return self.ampacity_75c


# Smallest conductor first. Ordering is by cross-section, not string value.
GAUGE_ORDER: tuple[str, ...] = (
    "18", "16", "14", "12", "10", "8", "6", "4", "2", "1",
    "1/0", "2/0", "3/0", "4/0",
)
_GAUGE_RANK = {gauge: rank for rank, gauge in enumerate(GAUGE_ORDER)}

COPPER_TABLE: dict[str, ConductorSpec] = {
    "18": ConductorSpec(6.385, 14, 14, 14),
    "16": ConductorSpec(4.016, 18, 18, 18),
    "14": ConductorSpec(2.525, 20, 20, 25),
    "12": ConductorSpec(1.588, 25, 25, 30),
    "10": ConductorSpec(0.9989, 30, 35, 40),
    "8": ConductorSpec(0.6282, 40, 50, 55),
    "6": ConductorSpec(0.3951, 55, 65, 75),
    "4": ConductorSpec(0.2485, 70, 85, 95),
    "2": ConductorSpec(0.1563, 95, 115, 130),
    "1": ConductorSpec(0.1240, 110, 130, 145),
    "1/0": ConductorSpec(0.0983, 125, 150, 170),
    "2/0": ConductorSpec(0.0779, 145, 175, 195),
    "3/0": ConductorSpec(0.0618, 165, 200, 225),
    "4/0": ConductorSpec(0.0490, 195, 230, 260),
}

# Aluminium is ~61% of copper's conductivity.
ALUMINUM_RESISTANCE_FACTOR = 1.64

_ALUMINUM_AMPACITY: dict[str, tuple[float, float, float]] = {
    "18": (10, 10, 10),
    "16": (13, 13, 13),
    "14": (15, 15, 20),
    "12": (15, 20, 25),
    "10": (25, 30, 35),
    "8": (35, 40, 45),
    "6": (40, 50, 55),
    "4": (55, 65, 75),
    "2": (75, 90, 100),
    "1": (85, 100, 115),
    "1/0": (100, 120, 135),
    "2/0": (115, 135, 150),
    "3/0": (130, 155, 175),
    "4/0": (150, 180, 205),
}

ALUMINUM_TABLE: dict[str, ConductorSpec] = {
    gauge: ConductorSpec(
        COPPER_TABLE[gauge].resistance * ALUMINUM_RESISTANCE_FACTOR, *amps
    )
    for gauge, amps in _ALUMINUM_AMPACITY.items()
}

CONDUCTOR_TABLES = {
    ConductorMaterial.COPPER: COPPER_TABLE,
    ConductorMaterial.ALUMINUM: ALUMINUM_TABLE,
}

# NEC 310.15(B)(2)(a) ambient correction, upper bound °C → factor
_TEMPERATURE_DERATING: tuple[tuple[float, float], ...] = (
    (25, 1.08),
    (30, 1.00),
    (35, 0.91),
    (40, 0.82),
    (45, 0.71),
    (50, 0.58),
)
_HOT_AMBIENT_FACTOR = 0.41


def temperature_derating(temperature_c: float) -> float:
    for upper, factor in _TEMPERATURE_DERATING:
        if temperature_c <= upper:
            return factor
    return _HOT_AMBIENT_FACTOR


_AWG_SUFFIX = re.compile(r"(\s*AWG)+\s*$", re.IGNORECASE)


def normalize_gauge(gauge: str | None) -> str | None:
    """Canonical table key for a gauge string, or None if unrecognised.

    Accepts "10", "10 AWG", "10 AWG AWG", "1/0 AWG" and the "1\\0"
    typo the editor occasionally stores.
    """
    if gauge is None:
        return None
    key = _AWG_SUFFIX.sub("", str(gauge).strip()).replace("\\", "/").strip()
    key = key.replace(" ", "")
    return key if key in _GAUGE_RANK else None


def gauge_rank(gauge: str | None) -> int | None:
    key = normalize_gauge(gauge)
    return None if key is None else _GAUGE_RANK[key]


def conductor_spec(
    gauge: str, material: ConductorMaterial = ConductorMaterial.COPPER
) -> ConductorSpec | None:
    key = normalize_gauge(gauge)
    if key is None:
        return None
    return CONDUCTOR_TABLES[ConductorMaterial(material)][key]


def derated_ampacity(
    gauge: str,
    insulation: InsulationRating = InsulationRating.C75,
    temperature_c: float = DEFAULT_TEMPERATURE_C,
    bundling_factor: float = DEFAULT_BUNDLING_FACTOR,
    material: ConductorMaterial = ConductorMaterial.COPPER,
) -> float:
    """Table ampacity × temperature factor × bundling factor (0 if unknown)."""
    spec = conductor_spec(gauge, material)
    if spec is None:
        return 0.0
    base = spec.ampacity(InsulationRating(insulation))
    return base * temperature_derating(temperature_c) * bundling_factor


def voltage_drop(
    current: float,
    length: float,
    gauge: str,
    material: ConductorMaterial = ConductorMaterial.COPPER,
) -> float:
    """Round-trip drop in volts: 2 × I × R/ft × L."""
    spec = conductor_spec(gauge, material)
    if spec is None:
        return 0.0
    return 2 * current * (spec.resistance / 1000) * length


def size_wire(
    current: float,
    length: float,
    voltage: float,
    temperature_c: float = DEFAULT_TEMPERATURE_C,
    material: ConductorMaterial = ConductorMaterial.COPPER,
    insulation: InsulationRating = InsulationRating.C75,
    bundling_factor: float = DEFAULT_BUNDLING_FACTOR,
    max_voltage_drop: float = DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
    floor_gauge: str | None = None,
) -> WireCalculation:
    """Recommend the smallest gauge satisfying both limits.

    ``floor_gauge`` is the conductor already installed: candidates thinner
    than it are skipped, so the result never downgrades a wire. When even
    4/0 fails, the result is ``error`` and the message names the failed
    limit(s) and the margin.
    """
    material = ConductorMaterial(material)
    insulation = InsulationRating(insulation)
    table = CONDUCTOR_TABLES[material]

    def _result(gauge: str, drop: float, drop_pct: float, ampacity: float,
                status: SizingStatus, message: str) -> WireCalculation:
        return WireCalculation(
            current=current,
            length=length,
            voltage=voltage,
            temperature_c=temperature_c,
            conductor_material=material,
            insulation_type=insulation,
            bundling_factor=bundling_factor,
            max_voltage_drop=max_voltage_drop,
            recommended_gauge=f"{gauge} AWG",
            actual_voltage_drop=drop,
            voltage_drop_percent=drop_pct,
            derated_ampacity=ampacity,
            status=status,
            message=message,
        )

    if voltage <= 0:
        return _result(
            GAUGE_ORDER[-1], 0.0, 0.0, 0.0, SizingStatus.ERROR,
            f"Invalid circuit voltage ({voltage}V); cannot compute voltage drop.",
        )

    floor_rank = 0
    if floor_gauge:
        rank = gauge_rank(floor_gauge)
        if rank is None:
            logger.warning("Ignoring unrecognised floor gauge %r", floor_gauge)
        else:
            floor_rank = rank

    max_drop_volts = voltage * max_voltage_drop / 100
    derating = temperature_derating(temperature_c) * bundling_factor

    drop = drop_pct = ampacity = 0.0
    for gauge in GAUGE_ORDER[floor_rank:]:
        spec = table[gauge]
        drop = 2 * current * (spec.resistance / 1000) * length
        drop_pct = drop / voltage * 100
        ampacity = spec.ampacity(insulation) * derating

        if drop <= max_drop_volts and current <= ampacity:
            near_limit = (
                drop_pct > max_voltage_drop * NEAR_LIMIT_RATIO
                or current > ampacity * NEAR_LIMIT_RATIO
            )
            if near_limit:
                return _result(
                    gauge, drop, drop_pct, ampacity, SizingStatus.WARNING,
                    "Wire size is near maximum capacity. Consider larger gauge.",
                )
            return _result(
                gauge, drop, drop_pct, ampacity, SizingStatus.VALID,
                "Wire size meets ABYC/NEC standards.",
            )

    # Nothing up to 4/0 works; report against the largest conductor.
    failures = []
    if drop > max_drop_volts:
        failures.append(
            f"Voltage drop ({drop_pct:.1f}%) exceeds {max_voltage_drop:g}% limit "
            f"by {drop_pct - max_voltage_drop:.1f} points even at 4/0 AWG. "
            "Run may be too long."
        )
    if current > ampacity:
        failures.append(
            f"Current ({current:.1f}A) exceeds maximum ampacity ({ampacity:.0f}A) "
            f"by {current - ampacity:.1f}A. Reduce current or use parallel runs."
        )
    return _result(
        GAUGE_ORDER[-1], drop, drop_pct, ampacity, SizingStatus.ERROR,
        " ".join(failures),
    )
