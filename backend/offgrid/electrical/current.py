"""Current Inference Engine — how many amps each wire must carry.

Walks the component/wire graph outward from a wire's endpoints. Branches
are tried in a fixed order, each modelling a different physical
situation:

  1. explicit per-wire override on the wire
  2. DC side of an inverter      → AC load watts / efficiency / Vsys
  3. solar panel endpoint         → panel watts / Vmp
  4. charger DC output            → charger's rated amps
  5. load endpoint                → watts / load voltage
  6. distribution panel           → sum of the panel's downstream loads
  7. battery feed of a bus bar    → bus net current (loads − chargers, ≥ 0)
  8. otherwise                    → 10 A placeholder (bus bars: downstream)

Every traversal carries its own ``visited`` set created by the public
entry point, so cyclic topologies (ring buses, looped panels) terminate,
and nothing is shared between calls. DC walks only follow
positive/negative wires; AC walks only follow hot/neutral wires.

The bus net current is floored at zero: surplus charging current never
shows up as reverse current on the battery feed. This is a modelling
simplification, not a physical result.
"""

from __future__ import annotations

import logging

from offgrid.devices.registry import (
    DC_PANEL_TYPES,
    get_device,
    is_ac_panel,
    is_battery,
    is_bus_bar,
    is_charger,
    is_inline,
    is_inverter,
    is_load,
    is_panel,
    is_solar_panel,
    terminal_class,
)
from offgrid.electrical.defaults import (
    DEFAULT_AC_VOLTAGE,
    DEFAULT_CHARGER_AMPS,
    DEFAULT_WIRE_CURRENT,
    DEFAULT_SYSTEM_VOLTAGE,
    FALLBACK_CHARGER_AMPS,
    INVERTER_FALLBACK_UTILIZATION,
    SOLAR_VMP_FACTOR,
    SOLAR_VMP_MISTAKE_BAND,
)
from offgrid.electrical.parallel import parallel_count, per_wire_share
from offgrid.electrical.properties import (
    ChargerProperties,
    InverterProperties,
    LoadProperties,
    SolarPanelProperties,
    positive,
    read_properties,
)
from offgrid.electrical.topology import Topology
from offgrid.schemas.design import Component, DesignSnapshot, Wire, WirePolarity
from offgrid.schemas.device import DeviceCategory, PolarityClass
from offgrid.schemas.sizing import CurrentBasis, CurrentEstimate

logger = logging.getLogger(__name__)

_DC_POLARITIES = (WirePolarity.POSITIVE, WirePolarity.NEGATIVE)
_AC_POLARITIES = (WirePolarity.HOT, WirePolarity.NEUTRAL)


# ─── Per-device figures ───


def load_current(load: Component, fallback_voltage: float) -> float | None:
    """Amps drawn by a load, or None if it declares neither watts nor amps."""
    props = read_properties(load, LoadProperties)
    if load.type == "ac-load":
        voltage = props.resolved_ac_voltage()
    else:
        voltage = positive(props.voltage) or fallback_voltage
    watts = positive(props.watts)
    if watts is not None and voltage > 0:
        return watts / voltage
    return positive(props.amps)


def load_watts(load: Component, fallback_voltage: float) -> float:
    props = read_properties(load, LoadProperties)
    watts = positive(props.watts)
    if watts is not None:
        return watts
    amps = positive(props.amps)
    if amps is None:
        return 0.0
    if load.type == "ac-load":
        return amps * props.resolved_ac_voltage()
    return amps * (positive(props.voltage) or fallback_voltage)


def charger_amps(charger: Component) -> float:
    rated = positive(read_properties(charger, ChargerProperties).amps)
    if rated is not None:
        return rated
    return DEFAULT_CHARGER_AMPS.get(charger.type, FALLBACK_CHARGER_AMPS)


def panel_vmp(panel: Component, system_voltage: float) -> float:
    """Maximum-power voltage of a solar panel.

    A declared voltage within 20% of the system voltage is taken to be the
    system voltage typed into the wrong field and replaced by the default.
    """
    declared = positive(read_properties(panel, SolarPanelProperties).voltage)
    if declared is not None and declared > system_voltage * (1 + SOLAR_VMP_MISTAKE_BAND):
        return declared
    return system_voltage * SOLAR_VMP_FACTOR


def solar_current(panel: Component, system_voltage: float) -> float | None:
    watts = positive(read_properties(panel, SolarPanelProperties).watts)
    if watts is None:
        return None
    return watts / panel_vmp(panel, system_voltage)


# ─── AC side ───


def _is_hot(wire: Wire, component_id: str) -> bool:
    if wire.polarity == WirePolarity.HOT:
        return True
    terminal = wire.terminal_at(component_id).lower()
    return "hot" in terminal or "line" in terminal


def _ac_wires(component: Component, topo: Topology) -> list[Wire]:
    wires = []
    for wire in topo.wires_at(component.id):
        cls = terminal_class(component, wire.terminal_at(component.id))
        if (cls is not None and cls.is_ac) or (cls is None and wire.polarity in _AC_POLARITIES):
            wires.append(wire)
    return wires


def _ac_watts(component_id: str, topo: Topology, visited: set[str]) -> float:
    if component_id in visited:
        return 0.0
    visited.add(component_id)
    comp = topo.component(component_id)
    if comp is None:
        return 0.0

    if comp.type == "ac-load":
        return load_watts(comp, DEFAULT_AC_VOLTAGE)

    if is_ac_panel(comp):
        total = 0.0
        for wire in topo.wires_at(comp.id):
            if _is_hot(wire, comp.id):
                total += _ac_watts(wire.other_end(comp.id), topo, visited)
        return total

    # Pass-through AC gear: the first branch with load behind it wins.
    for wire in _ac_wires(comp, topo):
        watts = _ac_watts(wire.other_end(comp.id), topo, visited)
        if watts > 0:
            return watts
    return 0.0


def inverter_ac_watts(inverter: Component, topo: Topology) -> float:
    """AC load wattage reachable from the inverter's AC outputs."""
    visited = {inverter.id}
    total = 0.0
    for wire in topo.wires_at(inverter.id):
        if terminal_class(inverter, wire.terminal_at(inverter.id)) != PolarityClass.AC_OUT:
            continue
        total += _ac_watts(wire.other_end(inverter.id), topo, visited)
    return total


def inverter_dc_current(inverter: Component, topo: Topology) -> float:
    """DC input amps: AC load / efficiency / Vsys, or 80% of nameplate."""
    props = read_properties(inverter, InverterProperties)
    voltage = topo.system_voltage
    ac_watts = inverter_ac_watts(inverter, topo)
    if ac_watts > 0:
        return ac_watts / props.resolved_efficiency() / voltage
    rated = positive(props.rated_watts) or 0.0
    logger.debug("No AC load behind %s; assuming %.0f%% of %.0fW rating",
                 inverter.id, INVERTER_FALLBACK_UTILIZATION * 100, rated)
    return rated * INVERTER_FALLBACK_UTILIZATION / voltage


def _ac_panel_demand(panel: Component, topo: Topology, visited: set[str]) -> float:
    """Amps behind an AC panel's hot load circuits."""
    total = 0.0
    for wire in topo.wires_at(panel.id):
        if wire.terminal_at(panel.id).startswith("main") or not _is_hot(wire, panel.id):
            continue
        total += _ac_demand(wire.other_end(panel.id), topo, visited)
    return total


def _ac_demand(component_id: str, topo: Topology, visited: set[str]) -> float:
    if component_id in visited:
        return 0.0
    visited.add(component_id)
    comp = topo.component(component_id)
    if comp is None:
        return 0.0
    if comp.type == "ac-load":
        return load_current(comp, DEFAULT_AC_VOLTAGE) or 0.0
    if is_ac_panel(comp):
        return _ac_panel_demand(comp, topo, visited)
    return 0.0


# ─── DC side ───


def _dc_wires(component_id: str, topo: Topology) -> list[Wire]:
    return [w for w in topo.wires_at(component_id) if w.polarity in _DC_POLARITIES]


def _dc_panel_demand(panel: Component, topo: Topology, visited: set[str]) -> float:
    """Amps behind a DC panel's positive load circuits (feed excluded)."""
    total = 0.0
    for wire in topo.wires_at(panel.id):
        if wire.polarity != WirePolarity.POSITIVE:
            continue
        if wire.terminal_at(panel.id).startswith("main"):
            continue
        demand, _ = _dc_flow(wire.other_end(panel.id), topo, visited)
        total += demand
    return total


def _declared_draw(component: Component, voltage: float) -> float:
    """Own consumption of monitoring gear and unknown devices, if declared."""
    device = get_device(component.type)
    if device is not None and device.category in (DeviceCategory.SOURCE, DeviceCategory.STORAGE):
        return 0.0
    return load_current(component, voltage) or 0.0


def _dc_flow(component_id: str, topo: Topology, visited: set[str]) -> tuple[float, float]:
    """(demand, supply) in amps on the DC side behind ``component_id``.

    Batteries end a branch with no contribution: a bus bar's net current
    is what its battery feed carries, so the battery itself is excluded.
    """
    if component_id in visited:
        return 0.0, 0.0
    visited.add(component_id)
    comp = topo.component(component_id)
    if comp is None or is_battery(comp):
        return 0.0, 0.0

    voltage = topo.system_voltage
    if is_charger(comp):
        return 0.0, charger_amps(comp)
    if is_inverter(comp):
        return inverter_dc_current(comp, topo), 0.0
    if comp.type == "dc-load":
        return load_current(comp, voltage) or 0.0, 0.0
    if comp.type == "ac-load" or is_ac_panel(comp):
        return 0.0, 0.0
    if comp.type in DC_PANEL_TYPES:
        return _dc_panel_demand(comp, topo, visited), 0.0
    if is_inline(comp) or is_bus_bar(comp):
        demand = supply = 0.0
        for wire in _dc_wires(comp.id, topo):
            d, s = _dc_flow(wire.other_end(comp.id), topo, visited)
            demand += d
            supply += s
        return demand, supply
    return _declared_draw(comp, voltage), 0.0


def bus_net_current(bus: Component, topo: Topology) -> float:
    """Loads on the bus minus chargers on the bus, floored at zero."""
    visited = {bus.id}
    demand = supply = 0.0
    for wire in _dc_wires(bus.id, topo):
        d, s = _dc_flow(wire.other_end(bus.id), topo, visited)
        demand += d
        supply += s
    net = max(0.0, demand - supply)
    logger.debug("Bus %s: demand=%.2fA supply=%.2fA net=%.2fA", bus.id, demand, supply, net)
    return net


def _chain_ends(start_id: str, topo: Topology, visited: set[str]) -> list[Component]:
    """Non-inline components reached by walking through fuses/switches/shunts."""
    if start_id in visited:
        return []
    visited.add(start_id)
    comp = topo.component(start_id)
    if comp is None:
        return []
    if not is_inline(comp):
        return [comp]
    ends: list[Component] = []
    for wire in _dc_wires(comp.id, topo):
        ends.extend(_chain_ends(wire.other_end(comp.id), topo, visited))
    return ends


def _downstream(component_id: str, topo: Topology, upstream_id: str) -> float:
    demand, _ = _dc_flow(component_id, topo, {upstream_id})
    return demand


# ─── Wire-level inference ───


def _dc_terminal(component: Component, wire: Wire) -> bool:
    cls = terminal_class(component, wire.terminal_at(component.id))
    return cls is None or cls.is_dc


def _infer(wire: Wire, topo: Topology) -> tuple[float, CurrentBasis]:
    override = positive(wire.current)
    if override is not None:
        return override, CurrentBasis.OVERRIDE

    src, dst = topo.endpoints(wire)
    ends = [c for c in (src, dst) if c is not None]
    voltage = topo.system_voltage

    for comp in ends:
        if is_inverter(comp):
            cls = terminal_class(comp, wire.terminal_at(comp.id))
            if cls is not None and cls.is_dc:
                return inverter_dc_current(comp, topo), CurrentBasis.INVERTER_DC

    for comp in ends:
        if is_solar_panel(comp):
            amps = solar_current(comp, voltage)
            if amps is not None:
                return amps, CurrentBasis.SOLAR

    for comp in ends:
        if is_charger(comp) and _dc_terminal(comp, wire):
            return charger_amps(comp), CurrentBasis.CHARGER

    for comp in (dst, src):
        if is_load(comp):
            amps = load_current(comp, voltage)
            if amps is not None:
                return amps, CurrentBasis.LOAD

    panel = dst if is_panel(dst) else src if is_panel(src) else None
    if panel is not None:
        other = src if panel is dst else dst
        terminal = wire.terminal_at(panel.id)
        feeds_panel = terminal.startswith("main") or (
            panel is dst and terminal_class(panel, terminal) is None
        )
        if feeds_panel:
            visited = {other.id} if other is not None else set()
            if is_ac_panel(panel):
                amps = _ac_panel_demand(panel, topo, visited)
            else:
                amps = _dc_panel_demand(panel, topo, visited)
            return amps, CurrentBasis.PANEL
        if other is not None:
            # Branch circuit leaving the panel: whatever sits behind it.
            if is_ac_panel(panel):
                amps = _ac_demand(other.id, topo, {panel.id})
            else:
                amps = _downstream(other.id, topo, panel.id)
            return amps, CurrentBasis.PANEL

    bus = next((c for c in ends if is_bus_bar(c)), None)
    if bus is not None and len(ends) == 2:
        other = dst if bus is src else src
        if is_battery(other):
            return bus_net_current(bus, topo), CurrentBasis.BUS_NET
        if is_inline(other):
            reached = _chain_ends(other.id, topo, {bus.id})
            if any(is_battery(c) for c in reached) or not reached:
                return bus_net_current(bus, topo), CurrentBasis.BUS_NET
        return _downstream(other.id, topo, bus.id), CurrentBasis.DOWNSTREAM

    battery = next((c for c in ends if is_battery(c)), None)
    if battery is not None and len(ends) == 2:
        other = dst if battery is src else src
        if is_inline(other):
            reached = _chain_ends(other.id, topo, {battery.id})
            feed_bus = next((c for c in reached if is_bus_bar(c)), None)
            if feed_bus is not None:
                return bus_net_current(feed_bus, topo), CurrentBasis.BUS_NET
            amps = _downstream(other.id, topo, battery.id)
            if amps > 0:
                return amps, CurrentBasis.DOWNSTREAM

    if bus is not None:
        return 0.0, CurrentBasis.DOWNSTREAM
    return DEFAULT_WIRE_CURRENT, CurrentBasis.DEFAULT


def estimate_current(
    wire: Wire,
    components: list[Component],
    wires: list[Wire],
    system_voltage: float,
) -> float:
    """Total amps on the wire's logical run (not divided across parallels)."""
    if system_voltage <= 0:
        logger.warning("Non-positive system voltage %r; using %sV", system_voltage,
                       DEFAULT_SYSTEM_VOLTAGE)
        system_voltage = DEFAULT_SYSTEM_VOLTAGE
    topo = Topology.build(components, wires, system_voltage)
    return estimate_wire_current(wire, topo).total_current


def estimate_wire_current(wire: Wire, topo: Topology) -> CurrentEstimate:
    """Total and per-conductor current for one wire.

    An explicit ``wire.current`` is the amps on that physical conductor;
    every inferred figure is the total for the run and is divided evenly
    across the parallel group.
    """
    amps, basis = _infer(wire, topo)
    amps = max(0.0, amps)
    count = parallel_count(wire, topo.wires)
    if basis == CurrentBasis.OVERRIDE:
        per_wire, total = amps, amps * count
    else:
        per_wire, total = per_wire_share(amps, count), amps
    logger.debug("Wire %s: %.2fA total, %.2fA per wire (x%d) via %s",
                 wire.id, total, per_wire, count, basis.value)
    return CurrentEstimate(
        wire_id=wire.id,
        total_current=total,
        per_wire_current=per_wire,
        parallel_count=count,
        basis=basis,
    )


def estimate_all(snapshot: DesignSnapshot) -> list[CurrentEstimate]:
    topo = Topology.from_snapshot(snapshot)
    return [estimate_wire_current(w, topo) for w in snapshot.wires]


# ─── Circuit voltage per wire ───


def is_ac_wire(wire: Wire, topo: Topology) -> bool:
    if wire.polarity in _AC_POLARITIES:
        return True
    for comp in topo.endpoints(wire):
        if comp is None:
            continue
        if comp.type == "ac-load" or is_ac_panel(comp):
            return True
        cls = terminal_class(comp, wire.terminal_at(comp.id))
        if cls is not None and cls.is_ac:
            return True
    return False


def is_pv_wire(wire: Wire, topo: Topology) -> bool:
    for comp in topo.endpoints(wire):
        if comp is None:
            continue
        cls = terminal_class(comp, wire.terminal_at(comp.id))
        if cls is not None and cls.is_pv:
            return True
    return False


def wire_voltage(wire: Wire, topo: Topology) -> float:
    """Voltage the wire's drop is measured against.

    AC wires use the connected AC load's voltage (120 V otherwise), PV
    wires the panel's Vmp, everything else the DC system voltage.
    """
    ends = [c for c in topo.endpoints(wire) if c is not None]
    if is_ac_wire(wire, topo):
        for comp in ends:
            if comp.type == "ac-load":
                return read_properties(comp, LoadProperties).resolved_ac_voltage()
        return DEFAULT_AC_VOLTAGE
    if is_pv_wire(wire, topo):
        panel = next((c for c in ends if is_solar_panel(c)), None)
        if panel is not None:
            return panel_vmp(panel, topo.system_voltage)
        return topo.system_voltage * SOLAR_VMP_FACTOR
    return topo.system_voltage
