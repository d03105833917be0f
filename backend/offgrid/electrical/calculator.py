"""Per-wire sizing: current inference followed by gauge selection."""

from __future__ import annotations

from offgrid.electrical.current import estimate_wire_current, wire_voltage
from offgrid.electrical.defaults import (
    DEFAULT_BUNDLING_FACTOR,
    DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
    DEFAULT_TEMPERATURE_C,
)
from offgrid.electrical.lengths import default_wire_length
from offgrid.electrical.properties import positive
from offgrid.electrical.sizing import normalize_gauge, size_wire
from offgrid.electrical.topology import Topology
from offgrid.schemas.design import DesignSnapshot, Wire
from offgrid.schemas.sizing import CurrentEstimate, InsulationRating, WireCalculation


def effective_length(wire: Wire, topo: Topology) -> float:
    """Entered length, or the default run for this component pair."""
    length = positive(wire.length)
    if length is not None:
        return length
    return default_wire_length(*topo.endpoints(wire))


def calculate_wire(
    wire: Wire,
    snapshot: DesignSnapshot,
    temperature_c: float = DEFAULT_TEMPERATURE_C,
    insulation: InsulationRating = InsulationRating.C75,
    bundling_factor: float = DEFAULT_BUNDLING_FACTOR,
    max_voltage_drop: float = DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
    topo: Topology | None = None,
    estimate: CurrentEstimate | None = None,
) -> WireCalculation:
    """Size one physical conductor.

    Uses the per-wire share of the run's current, the wire's own material,
    and its installed gauge as the floor.
    """
    topo = topo or Topology.from_snapshot(snapshot)
    estimate = estimate or estimate_wire_current(wire, topo)
    return size_wire(
        current=estimate.per_wire_current,
        length=effective_length(wire, topo),
        voltage=wire_voltage(wire, topo),
        temperature_c=temperature_c,
        material=wire.conductor_material,
        insulation=insulation,
        bundling_factor=bundling_factor,
        max_voltage_drop=max_voltage_drop,
        floor_gauge=normalize_gauge(wire.gauge),
    )


def calculate_wires(
    snapshot: DesignSnapshot,
    temperature_c: float = DEFAULT_TEMPERATURE_C,
    max_voltage_drop: float = DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
) -> dict[str, WireCalculation]:
    topo = Topology.from_snapshot(snapshot)
    return {
        wire.id: calculate_wire(
            wire,
            snapshot,
            temperature_c=temperature_c,
            max_voltage_drop=max_voltage_drop,
            topo=topo,
        )
        for wire in snapshot.wires
    }
