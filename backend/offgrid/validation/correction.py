"""Design Correction — automatic fixes for wire-sizing issues.

Sets the recommended gauge on wires the validator flagged as undersized or
missing a gauge. Works on a deep copy; the caller's design is untouched.
Sizing uses the same temperature and voltage-drop limit as the validation
pass being corrected.
"""

from __future__ import annotations

import logging
from copy import deepcopy

from offgrid.electrical.calculator import calculate_wire
from offgrid.electrical.defaults import (
    DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
    DEFAULT_TEMPERATURE_C,
)
from offgrid.electrical.sizing import gauge_rank
from offgrid.schemas.design import DesignSnapshot, Wire
from offgrid.schemas.sizing import SizingStatus
from offgrid.schemas.validation import ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)


class CorrectionResult:
    def __init__(self, corrected_design: DesignSnapshot, corrections: list[str]):
        self.corrected_design = corrected_design
        self.corrections = corrections


def _set_recommended_gauge(
    design: DesignSnapshot,
    issue: ValidationIssue,
    temperature_c: float,
    max_voltage_drop: float,
) -> list[str]:
    """Upsize (or fill in) the gauge on every wire the issue names."""
    corrections = []
    wires: dict[str, Wire] = {w.id: w for w in design.wires}
    for wire_id in issue.wire_ids:
        wire = wires.get(wire_id)
        if wire is None:
            continue
        calc = calculate_wire(
            wire,
            design,
            temperature_c=temperature_c,
            max_voltage_drop=max_voltage_drop,
        )
        if calc.status == SizingStatus.ERROR:
            logger.debug("No feasible gauge for wire %s; leaving it unchanged", wire_id)
            continue
        installed = gauge_rank(wire.gauge)
        if installed is not None and gauge_rank(calc.recommended_gauge) <= installed:
            continue
        previous = wire.gauge
        wire.gauge = calc.recommended_gauge
        if previous:
            corrections.append(f"Upsized wire {wire_id} from {previous} to {wire.gauge}")
        else:
            corrections.append(f"Set wire {wire_id} gauge to {wire.gauge}")
    return corrections


FIXERS = {
    "E_GAUGE_UNDERSIZED": _set_recommended_gauge,
    "I_GAUGE_MISSING": _set_recommended_gauge,
}


def correct_design(
    design: DesignSnapshot,
    validation: ValidationResult,
    temperature_c: float = DEFAULT_TEMPERATURE_C,
    max_voltage_drop: float = DEFAULT_MAX_VOLTAGE_DROP_PERCENT,
) -> CorrectionResult:
    """Apply automatic corrections for the fixable issues in ``validation``.

    ``temperature_c`` and ``max_voltage_drop`` must match the values the
    design was validated with.
    """
    corrected = deepcopy(design)
    all_corrections: list[str] = []

    for issue in validation.issues:
        fixer = FIXERS.get(issue.code)
        if fixer:
            all_corrections.extend(fixer(corrected, issue, temperature_c, max_voltage_drop))

    logger.info("Applied %d correction(s)", len(all_corrections))
    return CorrectionResult(
        corrected_design=corrected,
        corrections=all_corrections,
    )
