"""Unit tests for the Design Validator."""

import pytest

from offgrid.devices.registry import CHAINABLE_TYPES
from offgrid.rules.connection import validate_connection
from offgrid.schemas.design import Component, DesignSnapshot, Wire, WirePolarity
from offgrid.schemas.validation import (
    IssueCategory,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
)
from offgrid.validation.engine import (
    check_battery_connections,
    check_bus_bar_polarity,
    check_canvas_bounds,
    check_cerbo_data,
    check_connection_rules,
    check_design_completeness,
    check_layout_spacing,
    check_mandatory_terminals,
    check_mppt_solar_input,
    check_power_capacity,
    check_smartshunt_placement,
    check_wire_polarity,
    check_wire_references,
    validate_design,
)
from offgrid.validation.scoring import quality_score


# ─── Fixtures ───


def _comp(comp_id: str, comp_type: str, x: float = 0, y: float = 0, **props) -> Component:
    return Component(id=comp_id, type=comp_type, name=comp_id, x=x, y=y, properties=props)


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


def _design(components, wires=(), voltage: float = 12) -> DesignSnapshot:
    return DesignSnapshot(components=list(components), wires=list(wires), system_voltage=voltage)


def _codes(result: ValidationResult) -> list[str]:
    return [i.code for i in result.issues]


def _run(design: DesignSnapshot, *checks) -> list[str]:
    return _codes(validate_design(design, checks=list(checks)))


def _wire_by_id(design: DesignSnapshot, wire_id: str) -> Wire:
    return next(w for w in design.wires if w.id == wire_id)


def _comp_by_id(design: DesignSnapshot, comp_id: str) -> Component:
    return next(c for c in design.components if c.id == comp_id)


# ═══════════════════════════════════════════════════════════
# Full pass
# ═══════════════════════════════════════════════════════════


class TestCleanDesign:
    def test_no_issues_full_score(self, clean_design):
        result = validate_design(clean_design)
        assert result.issues == []
        assert result.valid is True
        assert result.score == 100.0

    def test_metrics(self, clean_design):
        metrics = validate_design(clean_design).metrics
        assert metrics.component_count == 4
        assert metrics.wire_count == 4
        assert metrics.overlapping_components == 0
        assert metrics.wire_gauge_issues == 0

    def test_idempotent(self, clean_design):
        clean_design.wires[1].gauge = "18 AWG"
        first = validate_design(clean_design)
        second = validate_design(clean_design)
        assert first.score == second.score
        assert first.model_dump() == second.model_dump()

    def test_input_not_mutated(self, clean_design):
        before = clean_design.model_dump()
        validate_design(clean_design)
        assert clean_design.model_dump() == before

    def test_empty_check_list(self, clean_design):
        result = validate_design(clean_design, checks=[])
        assert result.valid and result.score == 100.0

    def test_empty_design_is_invalid(self):
        result = validate_design(_design([]))
        assert _codes(result) == ["E_EMPTY_DESIGN"]
        assert result.valid is False

    def test_garbage_never_raises(self):
        design = _design(
            [
                _comp("x", "flux-capacitor", watts="lots"),
                _comp("load", "dc-load", watts=None, voltage="twelve"),
                _comp("bus", "busbar-positive"),
            ],
            [
                _wire("w1", "x", "??", "ghost", "positive", gauge="???"),
                _wire("w2", "bus", "pos-1", "bus", "pos-2", current=-5),
                _wire("w3", "bus", "pos-3", "load", "positive", length=-1),
            ],
        )
        result = validate_design(design)
        assert isinstance(result, ValidationResult)
        assert result.valid is False


# ═══════════════════════════════════════════════════════════
# Wire sizing
# ═══════════════════════════════════════════════════════════


class TestWireSizing:
    def test_undersized_gauge_is_error(self, clean_design):
        _wire_by_id(clean_design, "w2").gauge = "18 AWG"
        result = validate_design(clean_design)
        issue = next(i for i in result.issues if i.code == "E_GAUGE_UNDERSIZED")
        assert issue.severity == ValidationSeverity.ERROR
        assert issue.category == IssueCategory.WIRE_SIZING
        assert issue.wire_ids == ["w2"]
        assert issue.wire_id == "w2"
        assert issue.suggestion == "Use 12 AWG or larger"
        assert result.valid is False

    def test_missing_gauge_is_info_with_recommendation(self, clean_design):
        _wire_by_id(clean_design, "w2").gauge = None
        result = validate_design(clean_design)
        assert _codes(result) == ["I_GAUGE_MISSING"]
        assert result.issues[0].suggestion == "Use 12 AWG"
        assert result.valid is True
        assert result.score < 100

    def test_missing_gauge_near_limit_also_warns(self, clean_design):
        # 276 W at 12 V is 23 A; 12 AWG (25 A) is the smallest fit, above 90% of its rating.
        _comp_by_id(clean_design, "load").properties["watts"] = 276
        w2 = _wire_by_id(clean_design, "w2")
        w2.gauge = None
        w2.length = 1
        on_w2 = [
            (i.code, i.severity)
            for i in validate_design(clean_design).issues
            if i.wire_ids == ["w2"]
        ]
        assert on_w2 == [
            ("I_GAUGE_MISSING", ValidationSeverity.INFO),
            ("W_WIRE_NEAR_LIMIT", ValidationSeverity.WARNING),
        ]

    def test_unknown_gauge_is_warning(self, clean_design):
        _wire_by_id(clean_design, "w2").gauge = "banana"
        assert _codes(validate_design(clean_design)) == ["W_GAUGE_UNKNOWN"]

    def test_infeasible_run_is_error(self, clean_design):
        _comp_by_id(clean_design, "load").properties["watts"] = 6000
        _wire_by_id(clean_design, "w2").length = 200
        assert "E_WIRE_INFEASIBLE" in _codes(validate_design(clean_design))

    def test_parallel_messages_show_per_wire_and_total(self, clean_design):
        _comp_by_id(clean_design, "load").properties["watts"] = 240
        w2 = _wire_by_id(clean_design, "w2")
        w2.gauge = "18 AWG"
        clean_design.wires.append(w2.model_copy(update={"id": "w2b"}))
        result = validate_design(clean_design)
        issue = next(
            i for i in result.issues if i.code == "E_GAUGE_UNDERSIZED" and i.wire_ids == ["w2"]
        )
        assert "10.0A per wire" in issue.message
        assert "20.0A total across 2 parallel wires" in issue.message

    def test_parallel_runs_sized_per_conductor(self, clean_design):
        # 20 A split over two 12 AWG conductors is fine; one would need 10 AWG.
        _comp_by_id(clean_design, "load").properties["watts"] = 240
        w2 = _wire_by_id(clean_design, "w2")
        w2.gauge = "12 AWG"
        clean_design.wires.append(w2.model_copy(update={"id": "w2b"}))
        undersized = [
            i.wire_ids for i in validate_design(clean_design).issues
            if i.code == "E_GAUGE_UNDERSIZED"
        ]
        assert ["w2"] not in undersized
        assert ["w2b"] not in undersized


# ═══════════════════════════════════════════════════════════
# Electrical
# ═══════════════════════════════════════════════════════════


class TestElectricalChecks:
    def test_connection_rules_rerun(self, clean_design):
        w3 = _wire_by_id(clean_design, "w3")
        w3.to_component_id, w3.to_terminal = "bus", "pos-2"
        result = validate_design(clean_design)
        issue = next(i for i in result.issues if i.code == "E_CONNECTION_RULE")
        assert "DC Polarity Mismatch" in issue.message
        assert issue.category == IssueCategory.ELECTRICAL

    def test_voltage_mismatch(self, clean_design):
        _comp_by_id(clean_design, "load").properties["voltage"] = 24
        issues = [i for i in validate_design(clean_design).issues if i.code == "E_VOLTAGE_MISMATCH"]
        assert len(issues) == 1
        assert issues[0].component_ids == ["load"]

    def test_nominal_battery_voltage_tolerated(self, clean_design):
        _comp_by_id(clean_design, "bat").properties["voltage"] = 12.8
        assert "E_VOLTAGE_MISMATCH" not in _codes(validate_design(clean_design))

    def test_wire_polarity_must_fit_terminals(self, clean_design):
        _wire_by_id(clean_design, "w2").polarity = WirePolarity.NEGATIVE
        assert _run(clean_design, check_wire_polarity) == ["W_WIRE_POLARITY"]

    @pytest.mark.parametrize("device_type", sorted(CHAINABLE_TYPES))
    def test_series_links_agree_with_connection_rules(self, device_type):
        a, b = _comp("a", device_type), _comp("b", device_type)
        design = _design([a, b], [_wire("s", "a", "positive", "b", "negative")])
        assert validate_connection(a, "positive", b, "negative").valid
        assert _run(design, check_wire_polarity) == []
        assert _run(design, check_connection_rules) == []

    def test_series_link_between_other_devices_warns(self):
        design = _design(
            [_comp("a", "dc-load"), _comp("b", "dc-load")],
            [_wire("s", "a", "positive", "b", "negative")],
        )
        assert _run(design, check_wire_polarity) == ["W_WIRE_POLARITY"]


class TestSmartShunt:
    def test_shunt_without_battery(self):
        assert _run(_design([_comp("sh", "smartshunt")]), check_smartshunt_placement) == [
            "E_SHUNT_NO_BATTERY"
        ]

    def test_shunt_in_negative_path(self):
        design = _design(
            [_comp("bat", "battery"), _comp("sh", "smartshunt")],
            [_wire("n", "bat", "negative", "sh", "battery-minus", WirePolarity.NEGATIVE)],
        )
        assert _run(design, check_smartshunt_placement) == []

    def test_load_bypassing_shunt(self):
        design = _design(
            [_comp("bat", "battery"), _comp("sh", "smartshunt"), _comp("load", "dc-load")],
            [_wire("n", "bat", "negative", "load", "negative", WirePolarity.NEGATIVE)],
        )
        result = validate_design(design, checks=[check_smartshunt_placement])
        assert _codes(result) == ["E_SHUNT_PLACEMENT", "W_SHUNT_BYPASS"]
        assert result.issues[1].component_ids == ["load"]


class TestBusBars:
    def test_mixed_polarity(self):
        design = _design(
            [_comp("bus", "busbar-positive"), _comp("a", "dc-load"), _comp("b", "dc-load")],
            [
                _wire("p", "bus", "pos-1", "a", "positive"),
                _wire("n", "bus", "pos-2", "b", "negative", WirePolarity.NEGATIVE),
            ],
        )
        assert _run(design, check_bus_bar_polarity) == ["E_BUS_MIXED_POLARITY"]

    def test_ac_mixed_with_dc(self):
        design = _design(
            [_comp("bus", "busbar-positive"), _comp("a", "dc-load"), _comp("tv", "ac-load")],
            [
                _wire("p", "bus", "pos-1", "a", "positive"),
                _wire("h", "bus", "pos-2", "tv", "hot", WirePolarity.HOT),
            ],
        )
        assert _run(design, check_bus_bar_polarity) == ["E_BUS_MIXED_POLARITY", "E_BUS_AC_DC"]


class TestDeviceWiring:
    def test_battery_needs_both_terminals(self):
        design = _design(
            [_comp("bat", "battery"), _comp("load", "dc-load")],
            [_wire("p", "bat", "positive", "load", "positive")],
        )
        assert _run(design, check_battery_connections) == ["E_BATTERY_INCOMPLETE"]

    def test_mppt_without_panel(self):
        design = _design(
            [_comp("m", "mppt"), _comp("bat", "battery")],
            [_wire("c", "m", "batt-positive", "bat", "positive")],
        )
        assert _run(design, check_mppt_solar_input) == ["E_MPPT_NO_SOLAR"]

    def test_mppt_with_panel(self):
        design = _design(
            [_comp("m", "mppt"), _comp("pv", "solar-panel", watts=300)],
            [
                _wire("p", "pv", "positive", "m", "pv-positive"),
                _wire("n", "pv", "negative", "m", "pv-negative", WirePolarity.NEGATIVE),
            ],
        )
        assert _run(design, check_mppt_solar_input) == []

    def test_cerbo_without_data(self):
        design = _design(
            [_comp("gx", "cerbo"), _comp("sh", "smartshunt")],
            [_wire("p", "gx", "power-negative", "sh", "system-minus", WirePolarity.NEGATIVE)],
        )
        assert _run(design, check_cerbo_data) == ["W_CERBO_NO_DATA"]
        design.wires.append(_wire("d", "gx", "ve-direct", "sh", "data"))
        assert _run(design, check_cerbo_data) == []


class TestPowerCapacity:
    def test_ac_load_without_inverter(self):
        design = _design([_comp("micro", "ac-load", watts=1000)])
        assert _run(design, check_power_capacity) == ["E_AC_WITHOUT_INVERTER"]

    @pytest.mark.parametrize(
        "ac_watts,expected",
        [(1200, ["E_AC_LOAD_EXCEEDS_INVERTER"]), (900, ["W_AC_LOAD_NEAR_INVERTER"]), (500, [])],
    )
    def test_inverter_capacity(self, ac_watts, expected):
        design = _design(
            [_comp("inv", "inverter", powerRating=1000), _comp("micro", "ac-load", watts=ac_watts)]
        )
        assert _run(design, check_power_capacity) == expected

    def test_unrated_inverter_skips_capacity(self):
        design = _design([_comp("inv", "inverter"), _comp("micro", "ac-load", watts=1200)])
        assert _run(design, check_power_capacity) == []

    @pytest.mark.parametrize(
        "capacity,expected",
        [(20, ["E_DC_LOAD_EXCEEDS_BATTERY"]), (100, ["W_DC_LOAD_RUNTIME"]), (400, [])],
    )
    def test_battery_vs_dc_load(self, capacity, expected):
        design = _design(
            [
                _comp("bat", "battery", voltage=12, capacity=capacity),
                _comp("heater", "dc-load", watts=240),
            ]
        )
        assert _run(design, check_power_capacity) == expected

    def test_undersized_solar(self):
        design = _design(
            [
                _comp("bat", "battery", voltage=12, capacity=200, batteryType="LiFePO4"),
                _comp("pv", "solar-panel", watts=100),
            ]
        )
        assert _run(design, check_power_capacity) == ["W_SOLAR_UNDERSIZED"]
        design.components[1].properties["watts"] = 300
        assert _run(design, check_power_capacity) == []


# ═══════════════════════════════════════════════════════════
# Terminals
# ═══════════════════════════════════════════════════════════


class TestTerminalChecks:
    def test_dangling_wire(self):
        design = _design(
            [_comp("bat", "battery")], [_wire("w", "bat", "positive", "ghost", "positive")]
        )
        result = validate_design(design, checks=[check_wire_references])
        assert _codes(result) == ["E_WIRE_DANGLING"]
        assert "ghost" in result.issues[0].message

    def test_self_loop(self):
        design = _design(
            [_comp("bus", "busbar-positive")], [_wire("w", "bus", "pos-1", "bus", "pos-2")]
        )
        assert _run(design, check_wire_references) == ["E_WIRE_SELF_LOOP"]

    def test_unknown_terminal(self):
        design = _design(
            [_comp("bat", "battery"), _comp("load", "dc-load")],
            [_wire("w", "bat", "aux", "load", "positive")],
        )
        result = validate_design(design, checks=[check_wire_references])
        assert _codes(result) == ["E_TERMINAL_UNKNOWN"]
        assert "positive, negative" in result.issues[0].suggestion

    def test_unconnected_mandatory_terminal(self):
        design = _design(
            [_comp("load", "dc-load"), _comp("m", "mppt"), _comp("bus", "busbar-positive")],
            [
                _wire("a", "bus", "pos-1", "load", "positive"),
                _wire("b", "m", "batt-positive", "bus", "pos-2"),
            ],
        )
        result = validate_design(design, checks=[check_mandatory_terminals])
        by_comp = {i.component_ids[0]: i for i in result.issues}
        assert by_comp["load"].code == "E_TERMINAL_UNCONNECTED"
        assert by_comp["m"].code == "W_TERMINAL_UNCONNECTED"
        assert "bus" not in by_comp

    def test_orphans_not_double_reported(self):
        design = _design([_comp("load", "dc-load")])
        assert _run(design, check_mandatory_terminals) == []


# ═══════════════════════════════════════════════════════════
# Layout
# ═══════════════════════════════════════════════════════════


class TestLayout:
    def test_overlap(self):
        design = _design([_comp("a", "dc-load", 100, 100), _comp("b", "dc-load", 120, 110)])
        assert _run(design, check_layout_spacing) == ["E_LAYOUT_OVERLAP"]

    def test_too_close(self):
        design = _design([_comp("a", "dc-load", 100, 100), _comp("b", "dc-load", 100, 240)])
        assert _run(design, check_layout_spacing) == ["W_LAYOUT_CLOSE"]

    def test_well_spaced(self):
        design = _design([_comp("a", "dc-load", 100, 100), _comp("b", "dc-load", 500, 100)])
        assert _run(design, check_layout_spacing) == []

    def test_canvas_edges(self):
        design = _design(
            [_comp("a", "dc-load", 10, 400), _comp("b", "dc-load", 1900, 400)]
        )
        assert _run(design, check_canvas_bounds) == ["W_LAYOUT_EDGE", "W_LAYOUT_BOUNDS"]

    def test_orphan_component(self, clean_design):
        clean_design.components.append(_comp("spare", "dc-load", 1200, 600, watts=10))
        result = validate_design(clean_design)
        assert "W_ORPHAN_COMPONENTS" in _codes(result)
        assert result.score < 100


# ═══════════════════════════════════════════════════════════
# Completeness
# ═══════════════════════════════════════════════════════════


class TestCompleteness:
    def test_too_many_components(self):
        design = _design([_comp(f"l{n}", "dc-load", watts=10) for n in range(31)])
        assert "W_TOO_MANY_COMPONENTS" in _run(design, check_design_completeness)

    def test_missing_properties(self):
        design = _design(
            [
                _comp("load", "dc-load"),
                _comp("tv", "ac-load"),
                _comp("bat", "battery"),
                _comp("pv", "solar-panel"),
                _comp("inv", "inverter"),
            ]
        )
        codes = _run(design, check_design_completeness)
        assert codes.count("E_LOAD_NO_WATTS") == 2
        for code in (
            "W_BATTERY_NO_CAPACITY",
            "W_SOLAR_NO_WATTS",
            "W_INVERTER_NO_RATING",
            "W_FEW_WIRES",
        ):
            assert code in codes

    def test_load_with_amps_is_complete(self):
        design = _design([_comp("pump", "dc-load", amps=5)])
        assert "E_LOAD_NO_WATTS" not in _run(design, check_design_completeness)


# ═══════════════════════════════════════════════════════════
# Scoring
# ═══════════════════════════════════════════════════════════


def _issue(severity: ValidationSeverity, category=IssueCategory.LAYOUT) -> ValidationIssue:
    return ValidationIssue(severity=severity, category=category, message="x")


class TestScoring:
    def test_no_issues_is_perfect(self):
        assert quality_score([]) == 100.0

    def test_one_warning_barely_moves(self):
        assert quality_score([_issue(ValidationSeverity.WARNING)]) >= 95

    def test_many_errors_reach_zero(self):
        assert quality_score([_issue(ValidationSeverity.ERROR)] * 12) == 0.0

    def test_severity_ordering(self):
        error = quality_score([_issue(ValidationSeverity.ERROR)])
        warning = quality_score([_issue(ValidationSeverity.WARNING)])
        info = quality_score([_issue(ValidationSeverity.INFO)])
        assert error < warning < info

    def test_electrical_issues_weigh_more(self):
        layout = quality_score([_issue(ValidationSeverity.ERROR)])
        electrical = quality_score([_issue(ValidationSeverity.ERROR, IssueCategory.ELECTRICAL)])
        assert electrical < layout

    @pytest.mark.parametrize(
        "base",
        [
            [],
            [ValidationSeverity.WARNING],
            [ValidationSeverity.ERROR, ValidationSeverity.INFO],
            [ValidationSeverity.ERROR] * 5 + [ValidationSeverity.WARNING] * 3,
        ],
    )
    def test_monotonic(self, base):
        issues = [_issue(s) for s in base]
        for severity in ValidationSeverity:
            added = quality_score(issues + [_issue(severity)])
            assert added <= quality_score(issues)
        for n in range(len(issues)):
            removed = quality_score(issues[:n] + issues[n + 1:])
            assert removed >= quality_score(issues)
