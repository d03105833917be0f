"""Quality score and informational metrics for a validation pass.

The score only looks at the issue list. Each issue deducts a weight by
severity (electrical issues count 1.5×); the deduction for a severity
grows by 10% per additional issue of that severity, so a couple of minor
warnings barely register while a pile of errors drives the score to 0.
Adding an issue can only lower the score.
"""

from __future__ import annotations

import math
from collections import defaultdict

from offgrid.devices.registry import get_device
from offgrid.electrical.defaults import CANVAS_EDGE_MARGIN, MIN_COMPONENT_DISTANCE
from offgrid.schemas.design import Component, DesignSnapshot
from offgrid.schemas.validation import (
    DesignMetrics,
    IssueCategory,
    ValidationIssue,
    ValidationSeverity,
)

SEVERITY_WEIGHTS = {
    ValidationSeverity.ERROR: 10.0,
    ValidationSeverity.WARNING: 3.0,
    ValidationSeverity.INFO: 1.0,
}
CATEGORY_MULTIPLIERS = {IssueCategory.ELECTRICAL: 1.5}
ESCALATION_PER_ISSUE = 0.1


def issue_weight(issue: ValidationIssue) -> float:
    return SEVERITY_WEIGHTS[issue.severity] * CATEGORY_MULTIPLIERS.get(issue.category, 1.0)


def quality_score(issues: list[ValidationIssue]) -> float:
    by_severity: dict[ValidationSeverity, list[float]] = defaultdict(list)
    for issue in issues:
        by_severity[issue.severity].append(issue_weight(issue))

    deduction = 0.0
    for weights in by_severity.values():
        escalation = 1 + ESCALATION_PER_ISSUE * (len(weights) - 1)
        deduction += sum(weights) * escalation

    return round(max(0.0, 100.0 - deduction), 1)


# ─── Metrics ───


def footprint(component: Component) -> tuple[float, float] | None:
    device = get_device(component.type)
    if device is None:
        return None
    return device.width, device.height


def overlaps(a: Component, b: Component) -> bool:
    fa, fb = footprint(a), footprint(b)
    if fa is None or fb is None:
        return False
    return not (
        a.x + fa[0] < b.x
        or a.x > b.x + fb[0]
        or a.y + fa[1] < b.y
        or a.y > b.y + fb[1]
    )


def distance(a: Component, b: Component) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def _pairs(components: list[Component]):
    for i, a in enumerate(components):
        for b in components[i + 1:]:
            yield a, b


def average_spacing(components: list[Component]) -> float:
    distances = [distance(a, b) for a, b in _pairs(components)]
    return sum(distances) / len(distances) if distances else 0.0


def count_overlaps(components: list[Component]) -> int:
    return sum(1 for a, b in _pairs(components) if overlaps(a, b))


def layout_efficiency(components: list[Component]) -> float:
    score = 100.0
    score -= count_overlaps(components) * 20
    score -= sum(
        1 for c in components if c.x < CANVAS_EDGE_MARGIN or c.y < CANVAS_EDGE_MARGIN
    ) * 5
    spacing = average_spacing(components)
    if len(components) > 1:
        if spacing < MIN_COMPONENT_DISTANCE:
            score -= 20
        if spacing > 500:
            score -= 10
    return max(0.0, min(100.0, score))


def design_metrics(snapshot: DesignSnapshot, issues: list[ValidationIssue]) -> DesignMetrics:
    components = snapshot.components
    return DesignMetrics(
        component_count=len(components),
        wire_count=len(snapshot.wires),
        avg_component_spacing=average_spacing(components),
        overlapping_components=count_overlaps(components),
        invalid_terminal_connections=sum(
            1 for i in issues if i.category == IssueCategory.TERMINAL
        ),
        wire_gauge_issues=sum(1 for i in issues if i.category == IssueCategory.WIRE_SIZING),
        electrical_rule_violations=sum(
            1
            for i in issues
            if i.category == IssueCategory.ELECTRICAL
            and i.severity == ValidationSeverity.ERROR
        ),
        layout_efficiency=layout_efficiency(components),
    )
