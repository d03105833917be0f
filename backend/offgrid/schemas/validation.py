from __future__ import annotations

from enum import Enum

from pydantic import Field, computed_field

from offgrid.schemas.base import CamelModel
from offgrid.schemas.design import Component


class ValidationSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class IssueCategory(str, Enum):
    ELECTRICAL = "electrical"
    WIRE_SIZING = "wire-sizing"
    LAYOUT = "layout"
    TERMINAL = "terminal"
    AI_QUALITY = "ai-quality"


class ValidationIssue(CamelModel):
    code: str | None = None
    severity: ValidationSeverity
    category: IssueCategory
    message: str
    suggestion: str | None = None
    component_ids: list[str] = Field(default_factory=list)
    wire_ids: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def wire_id(self) -> str | None:
        """First referenced wire, kept for callers that expect a single id."""
        return self.wire_ids[0] if self.wire_ids else None


class ConnectionResult(CamelModel):
    valid: bool
    message: str | None = None
    severity: ValidationSeverity | None = None
    rule_id: str | None = None


class DesignMetrics(CamelModel):
    component_count: int = 0
    wire_count: int = 0
    avg_component_spacing: float = 0.0
    overlapping_components: int = 0
    invalid_terminal_connections: int = 0
    wire_gauge_issues: int = 0
    electrical_rule_violations: int = 0
    layout_efficiency: float = 100.0


class ValidationResult(CamelModel):
    valid: bool
    score: float = Field(ge=0, le=100)
    issues: list[ValidationIssue] = Field(default_factory=list)
    metrics: DesignMetrics = Field(default_factory=DesignMetrics)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]


class ConnectionRequest(CamelModel):
    from_component: Component
    from_terminal: str
    to_component: Component
    to_terminal: str
