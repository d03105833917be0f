from __future__ import annotations

from pydantic import Field

from offgrid.schemas.base import CamelModel
from offgrid.schemas.design import DesignSnapshot
from offgrid.schemas.validation import ValidationResult


class IterationRecord(CamelModel):
    iteration: int
    score: float
    error_count: int
    warning_count: int
    corrections: list[str] = Field(default_factory=list)


class IterationOutcome(CamelModel):
    design: DesignSnapshot | None = None
    validation: ValidationResult | None = None
    iterations: list[IterationRecord] = Field(default_factory=list)
    final_iteration: int = 0
    achieved_quality_threshold: bool = False


class CorrectionResponse(CamelModel):
    design: DesignSnapshot
    corrections: list[str] = Field(default_factory=list)
    validation: ValidationResult
