"""Iterative design generation.

Runs a caller-supplied generator in a loop:
  Generate → Validate → (Correct) → Feedback → Generate ...

Keeps the best-scoring design seen so far and stops as soon as one meets
the quality threshold. All per-run state lives in this function's locals.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from offgrid.config import get_settings
from offgrid.schemas.design import DesignSnapshot
from offgrid.schemas.iteration import IterationOutcome, IterationRecord
from offgrid.schemas.validation import ValidationResult
from offgrid.validation.correction import correct_design
from offgrid.validation.engine import validate_design

logger = logging.getLogger(__name__)

# (feedback, system_voltage) -> design; feedback is "" on the first call.
DesignGenerator = Callable[[str, float], "DesignSnapshot | dict[str, Any]"]


def build_feedback(validation: ValidationResult) -> str:
    """Summarise a validation pass for the next generation attempt."""
    errors = ", ".join(i.message for i in validation.errors)
    warnings = ", ".join(i.message for i in validation.warnings)
    suggestions = ", ".join(i.suggestion for i in validation.issues if i.suggestion)
    return (
        f"PREVIOUS ITERATION FEEDBACK (Score: {validation.score:g}/100):\n"
        f"- Errors: {errors}\n"
        f"- Warnings: {warnings}\n"
        f"- Suggestions: {suggestions}\n"
        "\n"
        "Please address these issues in your next design."
    )


def _as_snapshot(design: DesignSnapshot | dict[str, Any], system_voltage: float) -> DesignSnapshot:
    if not isinstance(design, DesignSnapshot):
        design = DesignSnapshot.model_validate(design)
    return design.model_copy(update={"system_voltage": system_voltage})


def run_design_iterations(
    generate: DesignGenerator,
    system_voltage: float | None = None,
    min_quality_score: float | None = None,
    max_iterations: int | None = None,
    auto_correct: bool = False,
) -> IterationOutcome:
    """Generate, validate and refine a design until it scores well enough.

    Args:
        generate: Produces a design from feedback text and system voltage.
        system_voltage: DC system voltage every design is validated against.
            Defaults to the configured system voltage.
        min_quality_score: Stop once a design reaches this score. Defaults to
            the configured threshold.
        max_iterations: Upper bound on generator calls. Defaults to the
            configured limit.
        auto_correct: Apply gauge corrections before scoring each design.

    Returns:
        The best design, its validation, and the per-iteration history.
    """
    settings = get_settings()
    if system_voltage is None:
        system_voltage = settings.default_system_voltage
    if min_quality_score is None:
        min_quality_score = settings.min_quality_score
    if max_iterations is None:
        max_iterations = settings.max_iterations

    best: DesignSnapshot | None = None
    best_validation: ValidationResult | None = None
    history: list[IterationRecord] = []
    iteration = 0

    for iteration in range(1, max(1, max_iterations) + 1):
        feedback = build_feedback(best_validation) if best_validation is not None else ""
        design = _as_snapshot(generate(feedback, system_voltage), system_voltage)
        validation = validate_design(design)

        corrections: list[str] = []
        if auto_correct:
            fixed = correct_design(design, validation)
            if fixed.corrections:
                design = fixed.corrected_design
                corrections = fixed.corrections
                validation = validate_design(design)

        history.append(
            IterationRecord(
                iteration=iteration,
                score=validation.score,
                error_count=len(validation.errors),
                warning_count=len(validation.warnings),
                corrections=corrections,
            )
        )
        logger.info(
            "Iteration %d/%d: score=%.1f, errors=%d, warnings=%d",
            iteration,
            max_iterations,
            validation.score,
            len(validation.errors),
            len(validation.warnings),
        )

        if best_validation is None or validation.score > best_validation.score:
            best, best_validation = design, validation

        if validation.score >= min_quality_score:
            logger.info("Quality threshold %.0f reached at iteration %d",
                        min_quality_score, iteration)
            break

    return IterationOutcome(
        design=best,
        validation=best_validation,
        iterations=history,
        final_iteration=iteration,
        achieved_quality_threshold=(
            best_validation is not None and best_validation.score >= min_quality_score
        ),
    )
