"""Design Validator — rule-based checks over a full design snapshot.

Pure Python, no I/O, fully unit-testable. Every check is a plain function
taking a ``DesignContext`` and returning its issues; checks run in the
order of ``ALL_CHECKS`` and never raise on malformed content (a broken
wire is reported, the rest of the design is still checked).

Check groups:
  - electrical   connection rules, shunt placement, bus bars, batteries,
                 MPPT inputs, Cerbo data, voltages, power capacity
  - wire-sizing  inferred current vs. installed gauge, voltage drop
  - terminal     dangling references, unknown terminals, mandatory terminals
  - layout       overlap, spacing, canvas bounds, orphans
  - ai-quality   completeness heuristics for generated designs

Input:  DesignSnapshot (components, wires, system voltage)
Output: ValidationResult with valid flag, 0..100 score, issues, metrics
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from offgrid.devices.registry import (
    CHAINABLE_TYPES,
    INVERTER_TYPES,
    get_device,
    is_bus_bar,
    is_inverter,
    is_solar_panel,
    terminal_class,
)
from offgrid.electrical.calculator import calculate_wire
from offgrid.electrical.current import estimate_wire_current, inverter_ac_watts
from offgrid.electrical.defaults import (
    CANVAS_EDGE_MARGIN,
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
    DEFAULT_TEMPERATURE_C,
    MAX_COMPONENT_COUNT,
    MIN_COMPONENT_DISTANCE,
    VOLTAGE_TOLERANCE,
)
from offgrid.electrical.properties import (
    BatteryProperties,
    InverterProperties,
    LoadProperties,
    SolarPanelProperties,
    declared_voltage,
    positive,
    read_properties,
)
from offgrid.electrical.sizing import gauge_rank, normalize_gauge
from offgrid.electrical.topology import Topology
from offgrid.rules.connection import validate_connection
from offgrid.schemas.design import Component, DesignSnapshot, Wire, WirePolarity
from offgrid.schemas.device import PolarityClass
from offgrid.schemas.sizing import CurrentEstimate, SizingStatus, WireCalculation
from offgrid.schemas.validation import (
    IssueCategory,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
)
from offgrid.validation.scoring import (
    design_metrics,
    distance,
    footprint,
    overlaps,
    quality_score,
)

logger = logging.getLogger(__name__)

E = ValidationSeverity.ERROR
W = ValidationSeverity.WARNING
I = ValidationSeverity.INFO  # noqa: E741


# ─── Internal Helpers ───


@dataclass
class DesignContext:
    """Everything a check needs, computed once per validation pass."""

    snapshot: DesignSnapshot
    topo: Topology
    temperature_c: float = DEFAULT_TEMPERATURE_C
    max_voltage_drop: float = DEFAULT_MAX_VOLTAGE_DROP_PERCENT
    _estimates: dict[str, CurrentEstimate] = field(default_factory=dict, repr=False)
    _calculations: dict[str, WireCalculation] = field(default_factory=dict, repr=False)

    @classmethod
    def build(
        cls,
        snapshot: DesignSnapshot,
        temperature_c: float = DEFAULT_TEMPERATURE_C,
        max_voltage_drop: float = DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
    ) -> "DesignContext":
        return cls(snapshot, Topology.from_snapshot(snapshot), temperature_c, max_voltage_drop)

    @property
    def components(self) -> list[Component]:
        return self.snapshot.components

    @property
    def wires(self) -> list[Wire]:
        return self.snapshot.wires

    @property
    def system_voltage(self) -> float:
        return self.snapshot.system_voltage

    def name(self, component_id: str) -> str:
        comp = self.topo.component(component_id)
        return comp.label if comp is not None else component_id

    def of_type(self, *types: str) -> list[Component]:
        return [c for c in self.components if c.type in types]

    def estimate(self, wire: Wire) -> CurrentEstimate:
        if wire.id not in self._estimates:
            self._estimates[wire.id] = estimate_wire_current(wire, self.topo)
        return self._estimates[wire.id]

    def calculation(self, wire: Wire) -> WireCalculation:
        if wire.id not in self._calculations:
            self._calculations[wire.id] = calculate_wire(
                wire,
                self.snapshot,
                temperature_c=self.temperature_c,
                max_voltage_drop=self.max_voltage_drop,
                topo=self.topo,
                estimate=self.estimate(wire),
            )
        return self._calculations[wire.id]

    def connected_terminals(self, component_id: str) -> set[str]:
        return {w.terminal_at(component_id) for w in self.topo.wires_at(component_id)}


def _issue(
    code: str,
    severity: ValidationSeverity,
    category: IssueCategory,
    message: str,
    suggestion: str | None = None,
    component_ids: list[str] | None = None,
    wire_ids: list[str] | None = None,
) -> ValidationIssue:
    return ValidationIssue(
        code=code,
        severity=severity,
        category=category,
        message=message,
        suggestion=suggestion,
        component_ids=component_ids or [],
        wire_ids=wire_ids or [],
    )


def _reference_voltage(ctx: DesignContext) -> float:
    for battery in ctx.of_type("battery"):
        voltage = declared_voltage(battery)
        if voltage is not None:
            return voltage
    return ctx.system_voltage


def _current_label(estimate: CurrentEstimate) -> str:
    if estimate.parallel_count > 1:
        return (
            f"{estimate.per_wire_current:.1f}A per wire "
            f"({estimate.total_current:.1f}A total across "
            f"{estimate.parallel_count} parallel wires)"
        )
    return f"{estimate.per_wire_current:.1f}A"


# ═══════════════════════════════════════════════════════════
# Electrical 1: Connection Rules (re-run on the finished design)
# ═══════════════════════════════════════════════════════════


def check_connection_rules(ctx: DesignContext) -> list[ValidationIssue]:
    """Terminal pairs must still pass the connection rules; property edits
    after a wire was drawn can break them."""
    issues: list[ValidationIssue] = []
    for wire in ctx.wires:
        src, dst = ctx.topo.endpoints(wire)
        if src is None or dst is None:
            continue
        result = validate_connection(src, wire.from_terminal, dst, wire.to_terminal)
        if not result.valid:
            issues.append(
                _issue(
                    "E_CONNECTION_RULE",
                    E,
                    IssueCategory.ELECTRICAL,
                    f"{ctx.name(src.id)} ({wire.from_terminal}) → "
                    f"{ctx.name(dst.id)} ({wire.to_terminal}): {result.message}",
                    suggestion="Reconnect the wire between compatible terminals",
                    component_ids=[src.id, dst.id],
                    wire_ids=[wire.id],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Electrical 2: Wire Polarity vs Terminal Class
# ═══════════════════════════════════════════════════════════

_POLARITY_FITS: dict[PolarityClass, tuple[WirePolarity, ...]] = {
    PolarityClass.POSITIVE: (WirePolarity.POSITIVE,),
    PolarityClass.PV_POSITIVE: (WirePolarity.POSITIVE,),
    PolarityClass.NEGATIVE: (WirePolarity.NEGATIVE,),
    PolarityClass.PV_NEGATIVE: (WirePolarity.NEGATIVE,),
    PolarityClass.GROUND: (WirePolarity.GROUND,),
    PolarityClass.AC_IN: (WirePolarity.HOT, WirePolarity.NEUTRAL),
    PolarityClass.AC_OUT: (WirePolarity.HOT, WirePolarity.NEUTRAL),
}


def check_wire_polarity(ctx: DesignContext) -> list[ValidationIssue]:
    """A wire's declared polarity must fit the terminals at both ends.

    Series links between identical chainable devices are exempt, the same
    allowance the connection rules make.
    """
    issues: list[ValidationIssue] = []
    for wire in ctx.wires:
        src, dst = ctx.topo.endpoints(wire)
        if src is None or dst is None:
            continue
        if src.type == dst.type and src.type in CHAINABLE_TYPES:
            continue
        for comp in (src, dst):
            terminal = wire.terminal_at(comp.id)
            cls = terminal_class(comp, terminal)
            fits = _POLARITY_FITS.get(cls) if cls is not None else None
            if fits is None or wire.polarity in fits:
                continue
            issues.append(
                _issue(
                    "W_WIRE_POLARITY",
                    W,
                    IssueCategory.TERMINAL,
                    f"Wire marked {wire.polarity.value} lands on {ctx.name(comp.id)} "
                    f"terminal '{terminal}' ({cls.value})",
                    suggestion=f"Set the wire polarity to {fits[0].value}",
                    component_ids=[comp.id],
                    wire_ids=[wire.id],
                )
            )
            break
    return issues


# ═══════════════════════════════════════════════════════════
# Electrical 3: SmartShunt Placement
# ═══════════════════════════════════════════════════════════


def check_smartshunt_placement(ctx: DesignContext) -> list[ValidationIssue]:
    """The shunt sits between battery negative and everything else."""
    issues: list[ValidationIssue] = []
    shunts = ctx.of_type("smartshunt")
    if not shunts:
        return issues

    batteries = ctx.of_type("battery")
    if not batteries:
        return [
            _issue(
                "E_SHUNT_NO_BATTERY",
                E,
                IssueCategory.ELECTRICAL,
                "SmartShunt present but no battery found",
                suggestion="Add a battery or remove the SmartShunt",
                component_ids=[s.id for s in shunts],
            )
        ]

    battery_ids = {b.id for b in batteries}
    for shunt in shunts:
        in_path = any(
            wire.other_end(shunt.id) in battery_ids
            and wire.terminal_at(shunt.id) == "battery-minus"
            and wire.polarity == WirePolarity.NEGATIVE
            for wire in ctx.topo.wires_at(shunt.id)
        )
        if not in_path:
            issues.append(
                _issue(
                    "E_SHUNT_PLACEMENT",
                    E,
                    IssueCategory.ELECTRICAL,
                    f'SmartShunt "{shunt.label}" is not in the battery negative path',
                    suggestion="Connect battery negative to the SmartShunt 'battery-minus' terminal",
                    component_ids=[shunt.id],
                )
            )

    bypassing = sorted({
        wire.other_end(battery.id)
        for battery in batteries
        for wire in ctx.topo.wires_at(battery.id)
        if wire.polarity == WirePolarity.NEGATIVE
        and (other := ctx.topo.component(wire.other_end(battery.id))) is not None
        and (other.type == "dc-load" or other.type in INVERTER_TYPES)
    })
    if bypassing:
        issues.append(
            _issue(
                "W_SHUNT_BYPASS",
                W,
                IssueCategory.ELECTRICAL,
                f"{len(bypassing)} load(s) connected directly to battery negative, "
                "bypassing SmartShunt",
                suggestion="Connect loads to the SmartShunt 'system-minus' side for "
                "accurate current monitoring",
                component_ids=bypassing,
            )
        )
    return issues


# ═══════════════════════════════════════════════════════════
# Electrical 4: Bus Bar Polarity
# ═══════════════════════════════════════════════════════════


def check_bus_bar_polarity(ctx: DesignContext) -> list[ValidationIssue]:
    """One polarity per bus bar, and never AC and DC on the same bar."""
    issues: list[ValidationIssue] = []
    for bus in ctx.components:
        if not is_bus_bar(bus):
            continue
        wires = ctx.topo.wires_at(bus.id)
        polarities = {w.polarity for w in wires if w.polarity != WirePolarity.GROUND}
        if len(polarities) > 1:
            names = ", ".join(sorted(p.value for p in polarities))
            issues.append(
                _issue(
                    "E_BUS_MIXED_POLARITY",
                    E,
                    IssueCategory.ELECTRICAL,
                    f'Bus bar "{bus.label}" has mixed polarities ({names})',
                    suggestion="Use separate bus bars for positive and negative connections",
                    component_ids=[bus.id],
                )
            )
        has_ac = any(p in (WirePolarity.HOT, WirePolarity.NEUTRAL) for p in polarities)
        has_dc = any(p in (WirePolarity.POSITIVE, WirePolarity.NEGATIVE) for p in polarities)
        if has_ac and has_dc:
            issues.append(
                _issue(
                    "E_BUS_AC_DC",
                    E,
                    IssueCategory.ELECTRICAL,
                    f'Bus bar "{bus.label}" mixes AC and DC connections',
                    suggestion="Use separate bus bars for AC and DC circuits",
                    component_ids=[bus.id],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Electrical 5: Battery Connections
# ═══════════════════════════════════════════════════════════


def check_battery_connections(ctx: DesignContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for battery in ctx.of_type("battery"):
        terminals = ctx.connected_terminals(battery.id)
        if "positive" not in terminals or "negative" not in terminals:
            issues.append(
                _issue(
                    "E_BATTERY_INCOMPLETE",
                    E,
                    IssueCategory.ELECTRICAL,
                    f'Battery "{battery.label}" is not fully connected',
                    suggestion="Connect both positive and negative terminals",
                    component_ids=[battery.id],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Electrical 6: MPPT Solar Input
# ═══════════════════════════════════════════════════════════


def check_mppt_solar_input(ctx: DesignContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for mppt in ctx.of_type("mppt"):
        pv_wires = [
            w for w in ctx.topo.wires_at(mppt.id)
            if w.terminal_at(mppt.id) in ("pv-positive", "pv-negative")
        ]
        terminals = {w.terminal_at(mppt.id) for w in pv_wires}
        from_panel = any(
            is_solar_panel(ctx.topo.component(w.other_end(mppt.id))) for w in pv_wires
        )
        if terminals != {"pv-positive", "pv-negative"} or not from_panel:
            issues.append(
                _issue(
                    "E_MPPT_NO_SOLAR",
                    E,
                    IssueCategory.ELECTRICAL,
                    f'MPPT "{mppt.label}" is missing solar panel connection',
                    suggestion="Connect solar panel 'positive' to MPPT 'pv-positive' and "
                    "panel 'negative' to MPPT 'pv-negative'",
                    component_ids=[mppt.id],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Electrical 7: Cerbo GX Data Links
# ═══════════════════════════════════════════════════════════


def check_cerbo_data(ctx: DesignContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for cerbo in ctx.of_type("cerbo"):
        linked = any(
            terminal_class(cerbo, w.terminal_at(cerbo.id)) == PolarityClass.DATA
            for w in ctx.topo.wires_at(cerbo.id)
        )
        if not linked:
            issues.append(
                _issue(
                    "W_CERBO_NO_DATA",
                    W,
                    IssueCategory.ELECTRICAL,
                    "Cerbo GX present but no data connections found",
                    suggestion="Connect monitoring devices (BMV, SmartShunt, MPPT) to the "
                    "Cerbo via VE.Direct or VE.Bus",
                    component_ids=[cerbo.id],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Electrical 8: Component Voltage vs System Voltage
# ═══════════════════════════════════════════════════════════

# Own voltage is legitimately different from the DC bus.
_NOT_ON_DC_BUS = frozenset({"battery", "solar-panel", "ac-load", "ac-panel", "shore-power"})


def check_voltage_mismatches(ctx: DesignContext) -> list[ValidationIssue]:
    reference = _reference_voltage(ctx)
    mismatched = [
        comp
        for comp in ctx.components
        if comp.type not in _NOT_ON_DC_BUS
        and (v := declared_voltage(comp)) is not None
        and abs(v - reference) > VOLTAGE_TOLERANCE
    ]
    if not mismatched:
        return []
    names = ", ".join(f"{c.label} ({declared_voltage(c):g}V)" for c in mismatched)
    return [
        _issue(
            "E_VOLTAGE_MISMATCH",
            E,
            IssueCategory.ELECTRICAL,
            f"{len(mismatched)} component(s) have voltage mismatch: {names}",
            suggestion=f"All DC components should match system voltage ({reference:g}V). "
            f"Update component properties to {reference:g}V or adjust system voltage.",
            component_ids=[c.id for c in mismatched],
        )
    ]


# ═══════════════════════════════════════════════════════════
# Electrical 9: AC/DC Separation Reminder
# ═══════════════════════════════════════════════════════════


def check_ac_dc_separation(ctx: DesignContext) -> list[ValidationIssue]:
    has_ac = any(c.type == "ac-load" or is_inverter(c) for c in ctx.components)
    has_dc = any(c.type in ("dc-load", "battery") for c in ctx.components)
    has_bus = any(is_bus_bar(c) for c in ctx.components)
    if not (has_ac and has_dc and has_bus):
        return []
    names = [c.name.lower() for c in ctx.components]
    labelled = any("ac" in n for n in names) and any("dc" in n for n in names)
    if labelled:
        return []
    return [
        _issue(
            "I_AC_DC_SEPARATION",
            I,
            IssueCategory.ELECTRICAL,
            "System has both AC and DC components - ensure proper separation",
            suggestion="Use clearly labelled bus bars, e.g. 'DC Positive Bus' and "
            "'DC Negative Bus', and keep AC wiring on the AC panel",
        )
    ]


# ═══════════════════════════════════════════════════════════
# Electrical 10: Power Capacity
# ═══════════════════════════════════════════════════════════


def _watts(comp: Component) -> float:
    if is_solar_panel(comp):
        return positive(read_properties(comp, SolarPanelProperties).watts) or 0.0
    return positive(read_properties(comp, LoadProperties).watts) or 0.0


def check_power_capacity(ctx: DesignContext) -> list[ValidationIssue]:
    """Battery energy vs DC load, inverter rating vs AC load, solar vs
    recommended charge rate."""
    issues: list[ValidationIssue] = []
    voltage = _reference_voltage(ctx)
    batteries = ctx.of_type("battery")
    dc_loads = ctx.of_type("dc-load")
    ac_loads = ctx.of_type("ac-load")
    panels = ctx.of_type("solar-panel")
    total_dc = sum(_watts(c) for c in dc_loads)
    total_ac = sum(_watts(c) for c in ac_loads)
    total_solar = sum(_watts(c) for c in panels)
    capacity_ah = sum(
        positive(read_properties(b, BatteryProperties).capacity) or 0.0 for b in batteries
    )

    if batteries and total_dc > 0:
        battery_wh = capacity_ah * voltage
        usable_wh = battery_wh * 0.5
        hours = usable_wh / total_dc
        if hours < 1:
            issues.append(
                _issue(
                    "E_DC_LOAD_EXCEEDS_BATTERY",
                    E,
                    IssueCategory.ELECTRICAL,
                    f"DC loads ({total_dc:g}W) exceed usable battery capacity "
                    f"({usable_wh:.0f}Wh usable from {battery_wh:.0f}Wh total)",
                    suggestion="Reduce DC loads or increase battery capacity. Current battery "
                    f"provides {hours:.1f} hours at full load.",
                    component_ids=[c.id for c in dc_loads],
                )
            )
        elif hours < 4:
            issues.append(
                _issue(
                    "W_DC_LOAD_RUNTIME",
                    W,
                    IssueCategory.ELECTRICAL,
                    f"DC loads ({total_dc:g}W) will drain battery quickly "
                    f"({hours:.1f} hours at full load)",
                    suggestion="Consider increasing battery capacity or reducing loads",
                    component_ids=[c.id for c in dc_loads],
                )
            )

    inverters = [c for c in ctx.components if is_inverter(c)]
    if inverters and total_ac > 0:
        rating = sum(
            positive(read_properties(inv, InverterProperties).rated_watts) or 0.0
            for inv in inverters
        )
        if rating > 0 and total_ac > rating:
            issues.append(
                _issue(
                    "E_AC_LOAD_EXCEEDS_INVERTER",
                    E,
                    IssueCategory.ELECTRICAL,
                    f"AC loads ({total_ac:g}W) exceed inverter capacity ({rating:g}W)",
                    suggestion=f"Reduce AC loads or increase inverter capacity. Need "
                    f"{total_ac:g}W, have {rating:g}W.",
                    component_ids=[c.id for c in ac_loads] + [c.id for c in inverters],
                )
            )
        elif rating > 0 and total_ac > rating * 0.8:
            issues.append(
                _issue(
                    "W_AC_LOAD_NEAR_INVERTER",
                    W,
                    IssueCategory.ELECTRICAL,
                    f"AC loads ({total_ac:g}W) are {total_ac / rating * 100:.0f}% of "
                    "inverter capacity",
                    suggestion="Consider a larger inverter for safety margin or reduce peak loads",
                    component_ids=[c.id for c in ac_loads],
                )
            )
    elif total_ac > 0:
        issues.append(
            _issue(
                "E_AC_WITHOUT_INVERTER",
                E,
                IssueCategory.ELECTRICAL,
                f"AC loads ({total_ac:g}W) present but no inverter found",
                suggestion="Add an inverter to power AC loads",
                component_ids=[c.id for c in ac_loads],
            )
        )

    if batteries and total_solar > 0:
        chemistry = (read_properties(batteries[0], BatteryProperties).battery_type or "").lower()
        charge_rate = 0.2 if ("lifepo4" in chemistry or "lithium" in chemistry) else 0.1
        recommended = capacity_ah * charge_rate * voltage
        if total_solar < recommended * 0.5:
            issues.append(
                _issue(
                    "W_SOLAR_UNDERSIZED",
                    W,
                    IssueCategory.ELECTRICAL,
                    f"Solar panel output ({total_solar:g}W) may be insufficient for "
                    "battery charging",
                    suggestion=f"Recommended: {recommended:.0f}W solar for {capacity_ah:g}Ah "
                    f"battery. Current: {total_solar:g}W.",
                    component_ids=[c.id for c in panels],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Wire Sizing
# ═══════════════════════════════════════════════════════════


def check_wire_sizing(ctx: DesignContext) -> list[ValidationIssue]:
    """Inferred current against the installed (or missing) gauge.

    Ampacity tables are per conductor, so messages lead with the per-wire
    share and show the run total for parallel groups.
    """
    issues: list[ValidationIssue] = []
    for wire in ctx.wires:
        src, dst = ctx.topo.endpoints(wire)
        if src is None or dst is None:
            continue
        route = f"{ctx.name(src.id)} → {ctx.name(dst.id)}"
        ends = [src.id, dst.id]

        if wire.gauge and normalize_gauge(wire.gauge) is None:
            logger.warning("Wire %s has unrecognised gauge %r", wire.id, wire.gauge)
            issues.append(
                _issue(
                    "W_GAUGE_UNKNOWN",
                    W,
                    IssueCategory.WIRE_SIZING,
                    f"Wire {route} has unknown gauge: {wire.gauge}",
                    suggestion='Use a standard gauge format (e.g. "10 AWG", "1/0 AWG")',
                    component_ids=ends,
                    wire_ids=[wire.id],
                )
            )
            continue

        estimate = ctx.estimate(wire)
        calc = ctx.calculation(wire)
        current = _current_label(estimate)

        if calc.status == SizingStatus.ERROR:
            issues.append(
                _issue(
                    "E_WIRE_INFEASIBLE",
                    E,
                    IssueCategory.WIRE_SIZING,
                    f"Wire {route} carrying {current}: {calc.message}",
                    suggestion="Shorten the run, raise the system voltage, or split the "
                    "run into more parallel conductors",
                    component_ids=ends,
                    wire_ids=[wire.id],
                )
            )
            continue

        if not wire.gauge:
            issues.append(
                _issue(
                    "I_GAUGE_MISSING",
                    I,
                    IssueCategory.WIRE_SIZING,
                    f"Wire {route} has no gauge specified ({current})",
                    suggestion=f"Use {calc.recommended_gauge}",
                    component_ids=ends,
                    wire_ids=[wire.id],
                )
            )
        elif gauge_rank(calc.recommended_gauge) > gauge_rank(wire.gauge):
            issues.append(
                _issue(
                    "E_GAUGE_UNDERSIZED",
                    E,
                    IssueCategory.WIRE_SIZING,
                    f"Wire gauge {wire.gauge} insufficient for {current} on {route} "
                    f"over {calc.length:g}ft",
                    suggestion=f"Use {calc.recommended_gauge} or larger",
                    component_ids=ends,
                    wire_ids=[wire.id],
                )
            )
            continue

        if calc.status == SizingStatus.WARNING:
            issues.append(
                _issue(
                    "W_WIRE_NEAR_LIMIT",
                    W,
                    IssueCategory.WIRE_SIZING,
                    f"Wire {route} at {calc.recommended_gauge} is near its limit: "
                    f"{current} of {calc.derated_ampacity:.0f}A, "
                    f"{calc.voltage_drop_percent:.1f}% drop",
                    suggestion="Consider the next larger gauge for safety margin",
                    component_ids=ends,
                    wire_ids=[wire.id],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Terminal 1: Wire References
# ═══════════════════════════════════════════════════════════


def check_wire_references(ctx: DesignContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for wire in ctx.wires:
        src, dst = ctx.topo.endpoints(wire)
        if src is None or dst is None:
            missing = [
                cid for cid, c in ((wire.from_component_id, src), (wire.to_component_id, dst))
                if c is None
            ]
            issues.append(
                _issue(
                    "E_WIRE_DANGLING",
                    E,
                    IssueCategory.TERMINAL,
                    f"Wire connects to non-existent component(s): {', '.join(missing)}",
                    suggestion="Remove the wire or fix its component references",
                    wire_ids=[wire.id],
                )
            )
            continue

        if src.id == dst.id:
            issues.append(
                _issue(
                    "E_WIRE_SELF_LOOP",
                    E,
                    IssueCategory.TERMINAL,
                    f'Wire connects "{src.label}" to itself',
                    suggestion="Connect the wire to a different component",
                    component_ids=[src.id],
                    wire_ids=[wire.id],
                )
            )

        for comp, terminal in ((src, wire.from_terminal), (dst, wire.to_terminal)):
            device = get_device(comp.type)
            if device is None or device.terminal(terminal) is not None:
                continue
            valid = ", ".join(t.id for t in device.terminals)
            issues.append(
                _issue(
                    "E_TERMINAL_UNKNOWN",
                    E,
                    IssueCategory.TERMINAL,
                    f'Invalid terminal "{terminal}" on {comp.type} "{comp.label}"',
                    suggestion=f"Valid terminals: {valid}",
                    component_ids=[comp.id],
                    wire_ids=[wire.id],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Terminal 2: Mandatory Terminals
# ═══════════════════════════════════════════════════════════

# Cannot work at all with a terminal left open.
_STRICT_TYPES = frozenset({"battery", "dc-load", "solar-panel", "ac-load"})


def check_mandatory_terminals(ctx: DesignContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for comp in ctx.components:
        device = get_device(comp.type)
        if device is None:
            continue
        connected = ctx.connected_terminals(comp.id)
        # Orphans are reported once by the layout check.
        if not connected:
            continue
        missing = [t for t in device.mandatory_terminals if t.id not in connected]
        if not missing:
            continue
        strict = comp.type in _STRICT_TYPES
        labels = ", ".join(f"{t.label or t.id} ({t.id})" for t in missing)
        issues.append(
            _issue(
                "E_TERMINAL_UNCONNECTED" if strict else "W_TERMINAL_UNCONNECTED",
                E if strict else W,
                IssueCategory.TERMINAL,
                f'{comp.type} "{comp.label}" is missing connection(s): {labels}',
                suggestion=f"Connect {', '.join(t.id for t in missing)}",
                component_ids=[comp.id],
            )
        )
    return issues


# ═══════════════════════════════════════════════════════════
# Layout 1: Overlap and Spacing
# ═══════════════════════════════════════════════════════════


def check_layout_spacing(ctx: DesignContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    comps = ctx.components
    for i, a in enumerate(comps):
        for b in comps[i + 1:]:
            if overlaps(a, b):
                issues.append(
                    _issue(
                        "E_LAYOUT_OVERLAP",
                        E,
                        IssueCategory.LAYOUT,
                        f'Components "{a.label}" and "{b.label}" overlap',
                        suggestion="Move components apart by at least 50px",
                        component_ids=[a.id, b.id],
                    )
                )
            elif distance(a, b) < MIN_COMPONENT_DISTANCE:
                issues.append(
                    _issue(
                        "W_LAYOUT_CLOSE",
                        W,
                        IssueCategory.LAYOUT,
                        f'Components "{a.label}" and "{b.label}" are very close',
                        suggestion="Increase spacing for better readability",
                        component_ids=[a.id, b.id],
                    )
                )
    return issues


# ═══════════════════════════════════════════════════════════
# Layout 2: Canvas Bounds
# ═══════════════════════════════════════════════════════════


def check_canvas_bounds(ctx: DesignContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for comp in ctx.components:
        size = footprint(comp)
        if size is None:
            continue
        if comp.x < CANVAS_EDGE_MARGIN or comp.y < CANVAS_EDGE_MARGIN:
            issues.append(
                _issue(
                    "W_LAYOUT_EDGE",
                    W,
                    IssueCategory.LAYOUT,
                    f'Component "{comp.label}" too close to canvas edge',
                    suggestion=f"Move component at least {CANVAS_EDGE_MARGIN:g}px from edges",
                    component_ids=[comp.id],
                )
            )
        if (
            comp.x + size[0] > CANVAS_WIDTH - CANVAS_EDGE_MARGIN
            or comp.y + size[1] > CANVAS_HEIGHT - CANVAS_EDGE_MARGIN
        ):
            issues.append(
                _issue(
                    "W_LAYOUT_BOUNDS",
                    W,
                    IssueCategory.LAYOUT,
                    f'Component "{comp.label}" near or beyond canvas boundary',
                    suggestion=f"Keep components within the {CANVAS_WIDTH:g}×"
                    f"{CANVAS_HEIGHT:g}px canvas",
                    component_ids=[comp.id],
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Layout 3: Orphans
# ═══════════════════════════════════════════════════════════


def check_orphans(ctx: DesignContext) -> list[ValidationIssue]:
    orphans = [c.id for c in ctx.components if not ctx.topo.wires_at(c.id)]
    if not orphans:
        return []
    return [
        _issue(
            "W_ORPHAN_COMPONENTS",
            W,
            IssueCategory.LAYOUT,
            f"{len(orphans)} component(s) not connected to any wires",
            suggestion="Wire all components or remove unused ones",
            component_ids=orphans,
        )
    ]


# ═══════════════════════════════════════════════════════════
# AI Quality: Completeness Heuristics
# ═══════════════════════════════════════════════════════════

_LOAD_EXAMPLES = {
    "dc-load": "LED Lights: 30W, Refrigerator: 100W, Water Pump: 60W",
    "ac-load": "Microwave: 1200W, Coffee Maker: 1000W, AC Outlets: 1500W",
}


def check_design_completeness(ctx: DesignContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    comps = ctx.components
    if not comps:
        return [
            _issue(
                "E_EMPTY_DESIGN",
                E,
                IssueCategory.AI_QUALITY,
                "No components in design",
                suggestion="Add components to create a functional system",
            )
        ]
    if len(comps) > MAX_COMPONENT_COUNT:
        issues.append(
            _issue(
                "W_TOO_MANY_COMPONENTS",
                W,
                IssueCategory.AI_QUALITY,
                f"Very complex design with {len(comps)} components",
                suggestion="Consider breaking into multiple subsystems",
            )
        )

    for comp in comps:
        if comp.type not in _LOAD_EXAMPLES:
            continue
        props = read_properties(comp, LoadProperties)
        if positive(props.watts) is None and positive(props.amps) is None:
            kind = "DC" if comp.type == "dc-load" else "AC"
            issues.append(
                _issue(
                    "E_LOAD_NO_WATTS",
                    E,
                    IssueCategory.AI_QUALITY,
                    f'{kind} load "{comp.label}" missing required watts value',
                    suggestion='Add properties: {"watts": <realistic value>}. '
                    f"Examples: {_LOAD_EXAMPLES[comp.type]}",
                    component_ids=[comp.id],
                )
            )

    no_capacity = [
        c.id for c in ctx.of_type("battery")
        if positive(read_properties(c, BatteryProperties).capacity) is None
    ]
    if no_capacity:
        issues.append(
            _issue(
                "W_BATTERY_NO_CAPACITY",
                W,
                IssueCategory.AI_QUALITY,
                f"{len(no_capacity)} battery(ies) missing capacity property",
                suggestion='Add properties: {"voltage": 12, "capacity": 400} to batteries',
                component_ids=no_capacity,
            )
        )

    no_watts = [
        c.id for c in ctx.of_type("solar-panel")
        if positive(read_properties(c, SolarPanelProperties).watts) is None
    ]
    if no_watts:
        issues.append(
            _issue(
                "W_SOLAR_NO_WATTS",
                W,
                IssueCategory.AI_QUALITY,
                f"{len(no_watts)} solar panel(s) missing watts property",
                suggestion='Add properties: {"watts": 300} to solar panels',
                component_ids=no_watts,
            )
        )

    unrated = [
        c.id for c in comps
        if is_inverter(c)
        and positive(read_properties(c, InverterProperties).rated_watts) is None
        and inverter_ac_watts(c, ctx.topo) == 0
    ]
    if unrated:
        issues.append(
            _issue(
                "W_INVERTER_NO_RATING",
                W,
                IssueCategory.AI_QUALITY,
                f"{len(unrated)} inverter(s) have neither a power rating nor AC loads; "
                "DC input current cannot be estimated",
                suggestion='Add properties: {"powerRating": 3000} or wire AC loads to the output',
                component_ids=unrated,
            )
        )

    if len(ctx.wires) < len(comps):
        issues.append(
            _issue(
                "W_FEW_WIRES",
                W,
                IssueCategory.AI_QUALITY,
                "Fewer wires than components - design may be incomplete",
                suggestion="Ensure all components are properly wired",
            )
        )
    return issues


# ═══════════════════════════════════════════════════════════
# Runner
# ═══════════════════════════════════════════════════════════

DesignCheck = Callable[[DesignContext], list[ValidationIssue]]

ALL_CHECKS: list[DesignCheck] = [
    check_connection_rules,
    check_wire_polarity,
    check_smartshunt_placement,
    check_bus_bar_polarity,
    check_battery_connections,
    check_mppt_solar_input,
    check_cerbo_data,
    check_voltage_mismatches,
    check_ac_dc_separation,
    check_power_capacity,
    check_wire_sizing,
    check_wire_references,
    check_mandatory_terminals,
    check_layout_spacing,
    check_canvas_bounds,
    check_orphans,
    check_design_completeness,
]


def validate_design(
    snapshot: DesignSnapshot,
    checks: list[DesignCheck] | None = None,
    temperature_c: float = DEFAULT_TEMPERATURE_C,
    max_voltage_drop: float = DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
) -> ValidationResult:
    """Run all (or selected) checks on a design snapshot.

    Args:
        snapshot: Components, wires and system voltage to validate.
        checks: Optional subset of check functions. Defaults to ALL_CHECKS.
        temperature_c: Ambient temperature for ampacity derating.
        max_voltage_drop: Allowed voltage drop, percent.

    Returns:
        ValidationResult; ``valid`` is False iff any error-severity issue.
    """
    ctx = DesignContext.build(snapshot, temperature_c, max_voltage_drop)
    issues: list[ValidationIssue] = []
    for check in checks if checks is not None else ALL_CHECKS:
        issues.extend(check(ctx))

    errors = sum(1 for i in issues if i.severity == E)
    score = quality_score(issues)
    logger.info(
        "Validated design: %d components, %d wires, score=%.1f, errors=%d, warnings=%d",
        len(snapshot.components),
        len(snapshot.wires),
        score,
        errors,
        sum(1 for i in issues if i.severity == W),
    )
    return ValidationResult(
        valid=errors == 0,
        score=score,
        issues=issues,
        metrics=design_metrics(snapshot, issues),
    )
