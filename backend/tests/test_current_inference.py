"""Unit tests for the Current Inference Engine."""

import pytest

from offgrid.electrical.current import (
    estimate_all,
    estimate_current,
    estimate_wire_current,
    panel_vmp,
    wire_voltage,
)
from offgrid.electrical.parallel import parallel_count, parallel_groups
from offgrid.electrical.topology import Topology
from offgrid.schemas.design import Component, DesignSnapshot, Wire, WirePolarity
from offgrid.schemas.sizing import CurrentBasis


# ─── Fixtures ───


def _comp(comp_id: str, comp_type: str, **props) -> Component:
    return Component(id=comp_id, type=comp_type, properties=props)


def _wire(
    wire_id: str,
    src: str,
    src_terminal: str,
    dst: str,
    dst_terminal: str,
    polarity: WirePolarity = WirePolarity.POSITIVE,
    **kwargs,
) -> Wire:
    return Wire(
        id=wire_id,
        from_component_id=src,
        from_terminal=src_terminal,
        to_component_id=dst,
        to_terminal=dst_terminal,
        polarity=polarity,
        **kwargs,
    )


def _estimate(wire: Wire, components: list[Component], wires: list[Wire], voltage: float = 12):
    topo = Topology.build(components, wires, voltage)
    return estimate_wire_current(wire, topo)


def _inverter_system(ac_watts: float, dc_runs: int = 1):
    """Battery feeding an inverter over ``dc_runs`` parallel wires."""
    components = [
        _comp("bat", "battery", voltage=12, capacity=400),
        _comp("inv", "multiplus"),
        _comp("micro", "ac-load", watts=ac_watts),
    ]
    wires = [
        _wire(f"dc{n}", "bat", "positive", "inv", "dc-positive")
        for n in range(dc_runs)
    ]
    wires.append(_wire("ac", "inv", "ac-out-hot", "micro", "hot", WirePolarity.HOT))
    return components, wires


def _bus_system(load_watts: float, charger: bool = True):
    """Battery → positive bus, MPPT and one DC load on the bus."""
    components = [
        _comp("bat", "battery", voltage=12),
        _comp("bus", "busbar-positive"),
        _comp("load", "dc-load", watts=load_watts),
    ]
    wires = [
        _wire("feed", "bat", "positive", "bus", "main"),
        _wire("to-load", "bus", "pos-2", "load", "positive"),
    ]
    if charger:
        components.append(_comp("mppt", "mppt"))
        wires.append(_wire("charge", "mppt", "batt-positive", "bus", "pos-1"))
    return components, wires


# ═══════════════════════════════════════════════════════════
# Direct branches
# ═══════════════════════════════════════════════════════════


class TestSimpleLoad:
    def test_120w_load_at_12v_draws_10a(self):
        components = [
            _comp("bat", "battery", voltage=12, capacity=100),
            _comp("load", "dc-load", watts=120),
        ]
        wire = _wire("w1", "bat", "positive", "load", "positive", length=10)
        assert estimate_current(wire, components, [wire], 12) == pytest.approx(10.0)
        assert _estimate(wire, components, [wire]).basis == CurrentBasis.LOAD

    def test_load_declared_amps(self):
        components = [_comp("bat", "battery"), _comp("pump", "dc-load", amps=7)]
        wire = _wire("w1", "bat", "positive", "pump", "positive")
        assert estimate_current(wire, components, [wire], 12) == pytest.approx(7.0)

    def test_load_uses_own_voltage(self):
        components = [_comp("bat", "battery"), _comp("load", "dc-load", watts=240, voltage=24)]
        wire = _wire("w1", "bat", "positive", "load", "positive")
        assert estimate_current(wire, components, [wire], 12) == pytest.approx(10.0)

    def test_ac_load_defaults_to_120v(self):
        components = [_comp("inv", "inverter"), _comp("kettle", "ac-load", watts=1200)]
        wire = _wire("w1", "inv", "ac-out-hot", "kettle", "hot", WirePolarity.HOT)
        assert estimate_current(wire, components, [wire], 12) == pytest.approx(10.0)

    def test_ac_load_declared_230v(self):
        components = [
            _comp("inv", "inverter"),
            _comp("kettle", "ac-load", watts=2300, acVoltage=230),
        ]
        wire = _wire("w1", "inv", "ac-out-hot", "kettle", "hot", WirePolarity.HOT)
        assert estimate_current(wire, components, [wire], 12) == pytest.approx(10.0)


class TestOverride:
    def test_explicit_current_wins(self):
        components = [_comp("bat", "battery"), _comp("load", "dc-load", watts=120)]
        wire = _wire("w1", "bat", "positive", "load", "positive", current=42)
        est = _estimate(wire, components, [wire])
        assert est.total_current == pytest.approx(42.0)
        assert est.basis == CurrentBasis.OVERRIDE

    def test_zero_override_is_ignored(self):
        components = [_comp("bat", "battery"), _comp("load", "dc-load", watts=120)]
        wire = _wire("w1", "bat", "positive", "load", "positive", current=0)
        assert _estimate(wire, components, [wire]).basis == CurrentBasis.LOAD


class TestInverter:
    def test_dc_current_from_ac_load(self):
        components, wires = _inverter_system(1620)
        est = _estimate(wires[0], components, wires)
        assert est.basis == CurrentBasis.INVERTER_DC
        assert est.total_current == pytest.approx(1620 / 0.875 / 12)

    def test_declared_efficiency(self):
        components, wires = _inverter_system(1200)
        components[1] = _comp("inv", "multiplus", efficiency=90)
        est = _estimate(wires[0], components, wires)
        assert est.total_current == pytest.approx(1200 / 0.9 / 12)

    def test_ac_loads_through_panel_are_summed(self):
        components = [
            _comp("bat", "battery"),
            _comp("inv", "inverter"),
            _comp("panel", "ac-panel"),
            _comp("micro", "ac-load", watts=1200),
            _comp("tv", "ac-load", watts=600),
        ]
        wires = [
            _wire("dc", "bat", "positive", "inv", "dc-positive"),
            _wire("main", "inv", "ac-out-hot", "panel", "main-in-hot", WirePolarity.HOT),
            _wire("b1", "panel", "load-1-hot", "micro", "hot", WirePolarity.HOT),
            _wire("b2", "panel", "load-2-hot", "tv", "hot", WirePolarity.HOT),
        ]
        est = _estimate(wires[0], components, wires)
        assert est.total_current == pytest.approx(1800 / 0.875 / 12)
        # Panel feed carries the AC amps of both branches.
        feed = _estimate(wires[1], components, wires)
        assert feed.basis == CurrentBasis.PANEL
        assert feed.total_current == pytest.approx(15.0)

    def test_falls_back_to_rating(self):
        components = [_comp("bat", "battery"), _comp("inv", "inverter", powerRating=3000)]
        wire = _wire("dc", "bat", "positive", "inv", "dc-positive")
        est = _estimate(wire, components, [wire])
        assert est.total_current == pytest.approx(3000 * 0.8 / 12)

    def test_ac_cycle_terminates(self):
        components = [
            _comp("bat", "battery"),
            _comp("inv", "inverter"),
            _comp("p1", "ac-panel"),
            _comp("p2", "ac-panel"),
            _comp("tv", "ac-load", watts=240),
        ]
        wires = [
            _wire("dc", "bat", "positive", "inv", "dc-positive"),
            _wire("a", "inv", "ac-out-hot", "p1", "main-in-hot", WirePolarity.HOT),
            _wire("b", "p1", "load-1-hot", "p2", "main-in-hot", WirePolarity.HOT),
            _wire("c", "p2", "load-1-hot", "p1", "load-2-hot", WirePolarity.HOT),
            _wire("d", "p2", "load-2-hot", "tv", "hot", WirePolarity.HOT),
        ]
        est = _estimate(wires[0], components, wires)
        assert est.total_current == pytest.approx(240 / 0.875 / 12)


class TestSources:
    def test_solar_uses_default_vmp(self):
        components = [_comp("pv", "solar-panel", watts=300), _comp("mppt", "mppt")]
        wire = _wire("w", "pv", "positive", "mppt", "pv-positive")
        est = _estimate(wire, components, [wire])
        assert est.basis == CurrentBasis.SOLAR
        assert est.total_current == pytest.approx(300 / 18)

    def test_solar_mistaken_system_voltage_replaced(self):
        panel = _comp("pv", "solar-panel", watts=300, voltage=12.5)
        assert panel_vmp(panel, 12) == pytest.approx(18.0)

    def test_solar_declared_vmp(self):
        panel = _comp("pv", "solar-panel", watts=300, voltage=36)
        components = [panel, _comp("mppt", "mppt")]
        wire = _wire("w", "pv", "positive", "mppt", "pv-positive")
        assert _estimate(wire, components, [wire]).total_current == pytest.approx(300 / 36)

    def test_charger_rated_output(self):
        components = [_comp("chg", "blue-smart-charger", amps=25), _comp("bat", "battery")]
        wire = _wire("w", "chg", "dc-positive", "bat", "positive")
        est = _estimate(wire, components, [wire])
        assert est.basis == CurrentBasis.CHARGER
        assert est.total_current == pytest.approx(25.0)

    def test_charger_default_output(self):
        components = [_comp("chg", "blue-smart-charger"), _comp("bat", "battery")]
        wire = _wire("w", "chg", "dc-positive", "bat", "positive")
        assert _estimate(wire, components, [wire]).total_current == pytest.approx(15.0)


class TestDistributionPanel:
    def test_panel_feed_sums_branch_loads(self):
        components = [
            _comp("bus", "busbar-positive"),
            _comp("panel", "dc-panel"),
            _comp("lights", "dc-load", watts=60),
            _comp("pump", "dc-load", watts=120),
        ]
        wires = [
            _wire("feed", "bus", "pos-1", "panel", "main-in-pos"),
            _wire("l1", "panel", "load-1-pos", "lights", "positive"),
            _wire("l2", "panel", "load-2-pos", "pump", "positive"),
        ]
        est = _estimate(wires[0], components, wires)
        assert est.basis == CurrentBasis.PANEL
        assert est.total_current == pytest.approx(15.0)
        assert _estimate(wires[1], components, wires).total_current == pytest.approx(5.0)


# ═══════════════════════════════════════════════════════════
# Bus bar net current
# ═══════════════════════════════════════════════════════════


class TestBusNetCurrent:
    def test_charging_surplus_floors_at_zero(self):
        components, wires = _bus_system(load_watts=240)
        est = _estimate(wires[0], components, wires)
        assert est.basis == CurrentBasis.BUS_NET
        assert est.total_current == 0.0

    def test_deficit_is_drawn_from_battery(self):
        components, wires = _bus_system(load_watts=480)
        assert _estimate(wires[0], components, wires).total_current == pytest.approx(10.0)

    def test_without_charger_battery_carries_full_load(self):
        components, wires = _bus_system(load_watts=240, charger=False)
        assert _estimate(wires[0], components, wires).total_current == pytest.approx(20.0)

    def test_charger_wire_keeps_rated_output(self):
        components, wires = _bus_system(load_watts=240)
        assert _estimate(wires[2], components, wires).total_current == pytest.approx(30.0)

    def test_battery_fuse_bus_chain(self):
        components = [
            _comp("bat", "battery"),
            _comp("fuse", "fuse"),
            _comp("bus", "busbar-positive"),
            _comp("load", "dc-load", watts=240),
        ]
        wires = [
            _wire("w1", "bat", "positive", "fuse", "in"),
            _wire("w2", "fuse", "out", "bus", "main"),
            _wire("w3", "bus", "pos-1", "load", "positive"),
        ]
        for wire in wires[:2]:
            est = _estimate(wire, components, wires)
            assert est.basis == CurrentBasis.BUS_NET
            assert est.total_current == pytest.approx(20.0)

    def test_ring_bus_terminates(self):
        components = [
            _comp("bat", "battery"),
            _comp("a", "busbar-positive"),
            _comp("b", "busbar-positive"),
            _comp("load", "dc-load", watts=240),
        ]
        wires = [
            _wire("feed", "bat", "positive", "a", "main"),
            _wire("ab", "a", "pos-1", "b", "pos-1"),
            _wire("ba", "b", "pos-2", "a", "pos-2"),
            _wire("out", "b", "pos-3", "load", "positive"),
        ]
        assert _estimate(wires[0], components, wires).total_current == pytest.approx(20.0)

    def test_negative_bus_mirrors_positive(self):
        components = [
            _comp("bat", "battery"),
            _comp("neg", "busbar-negative"),
            _comp("load", "dc-load", watts=120),
        ]
        wires = [
            _wire("ret", "load", "negative", "neg", "neg-1", WirePolarity.NEGATIVE),
            _wire("feed", "neg", "main", "bat", "negative", WirePolarity.NEGATIVE),
        ]
        assert _estimate(wires[1], components, wires).total_current == pytest.approx(10.0)


# ═══════════════════════════════════════════════════════════
# Parallel wires
# ═══════════════════════════════════════════════════════════


class TestParallelWires:
    def test_two_wires_split_inverter_current(self):
        components, wires = _inverter_system(1620, dc_runs=2)
        first = _estimate(wires[0], components, wires)
        second = _estimate(wires[1], components, wires)
        assert first.parallel_count == 2
        assert first.per_wire_current == pytest.approx(154.3 / 2, abs=0.01)
        assert first.total_current == pytest.approx(1620 / 0.875 / 12)
        assert first.per_wire_current + second.per_wire_current == pytest.approx(
            first.total_current
        )

    @pytest.mark.parametrize("count", [1, 2, 3, 4])
    def test_per_wire_is_total_over_n(self, count):
        components, wires = _inverter_system(1000, dc_runs=count)
        est = _estimate(wires[0], components, wires)
        assert est.per_wire_current == pytest.approx(est.total_current / count)

    def test_override_is_per_conductor(self):
        components, wires = _inverter_system(1000, dc_runs=2)
        wires[0] = wires[0].model_copy(update={"current": 50})
        est = _estimate(wires[0], components, wires)
        assert est.per_wire_current == pytest.approx(50.0)
        assert est.total_current == pytest.approx(100.0)

    def test_direction_does_not_matter_but_polarity_does(self):
        wires = [
            _wire("a", "bat", "positive", "inv", "dc-positive"),
            _wire("b", "inv", "dc-positive", "bat", "positive"),
            _wire("c", "bat", "negative", "inv", "dc-negative", WirePolarity.NEGATIVE),
        ]
        assert parallel_count(wires[0], wires) == 2
        assert parallel_count(wires[2], wires) == 1
        assert len(parallel_groups(wires)) == 2


# ═══════════════════════════════════════════════════════════
# Defaults and robustness
# ═══════════════════════════════════════════════════════════


class TestDefaults:
    def test_unrecognised_pair_gets_placeholder(self):
        components = [_comp("a", "custom-widget"), _comp("b", "custom-gadget")]
        wire = _wire("w", "a", "x", "b", "y")
        est = _estimate(wire, components, [wire])
        assert est.basis == CurrentBasis.DEFAULT
        assert est.total_current == pytest.approx(10.0)

    def test_dangling_wire_does_not_raise(self):
        wire = _wire("w", "ghost", "positive", "phantom", "positive")
        assert estimate_current(wire, [], [wire], 12) == pytest.approx(10.0)

    def test_bus_with_nothing_behind_it_carries_nothing(self):
        components = [_comp("bus", "busbar-positive"), _comp("gx", "cerbo")]
        wire = _wire("w", "bus", "pos-1", "gx", "power-positive")
        assert _estimate(wire, components, [wire]).total_current == 0.0

    def test_non_positive_system_voltage_uses_default(self):
        components = [_comp("bat", "battery"), _comp("inv", "inverter", powerRating=1200)]
        wire = _wire("dc", "bat", "positive", "inv", "dc-positive")
        assert estimate_current(wire, components, [wire], 0) == pytest.approx(80.0)

    def test_unparseable_properties_fall_back(self):
        components = [_comp("bat", "battery"), _comp("load", "dc-load", watts="lots")]
        wire = _wire("w", "bat", "positive", "load", "positive")
        assert estimate_current(wire, components, [wire], 12) >= 0

    def test_estimate_all_covers_every_wire(self):
        components, wires = _bus_system(load_watts=240)
        snapshot = DesignSnapshot(components=components, wires=wires, system_voltage=12)
        assert [e.wire_id for e in estimate_all(snapshot)] == [w.id for w in wires]


class TestWireVoltage:
    def test_ac_wire_uses_load_voltage(self):
        components, wires = _inverter_system(1000)
        topo = Topology.build(components, wires, 12)
        assert wire_voltage(wires[-1], topo) == 120.0
        assert wire_voltage(wires[0], topo) == 12.0

    def test_pv_wire_uses_vmp(self):
        components = [_comp("pv", "solar-panel", watts=300, voltage=40), _comp("m", "mppt")]
        wire = _wire("w", "pv", "positive", "m", "pv-positive")
        topo = Topology.build(components, [wire], 12)
        assert wire_voltage(wire, topo) == 40.0
