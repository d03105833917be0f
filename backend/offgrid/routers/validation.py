"""Validation router — design validation, connection checks, auto-correction."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from offgrid.config import Settings, get_settings
from offgrid.rules.connection import validate_connection
from offgrid.schemas.design import DesignSnapshot
from offgrid.schemas.iteration import CorrectionResponse
from offgrid.schemas.validation import ConnectionRequest, ConnectionResult, ValidationResult
from offgrid.validation.correction import correct_design as run_correction
from offgrid.validation.engine import validate_design as run_validation

router = APIRouter()


@router.post("/validate-design", response_model=ValidationResult)
async def validate_design(
    snapshot: DesignSnapshot, settings: Settings = Depends(get_settings)
):
    """Validate a full design. Stateless."""
    return run_validation(
        snapshot,
        temperature_c=settings.ambient_temperature_c,
        max_voltage_drop=settings.max_voltage_drop_percent,
    )


@router.post("/validate-connection", response_model=ConnectionResult)
async def check_connection(request: ConnectionRequest):
    """Check a proposed wire before the editor creates it."""
    return validate_connection(
        request.from_component,
        request.from_terminal,
        request.to_component,
        request.to_terminal,
    )


@router.post("/correct-design", response_model=CorrectionResponse)
async def correct_design(
    snapshot: DesignSnapshot, settings: Settings = Depends(get_settings)
):
    """Apply gauge corrections and return the re-validated design."""
    options = {
        "temperature_c": settings.ambient_temperature_c,
        "max_voltage_drop": settings.max_voltage_drop_percent,
    }
    result = run_correction(snapshot, run_validation(snapshot, **options), **options)
    return CorrectionResponse(
        design=result.corrected_design,
        corrections=result.corrections,
        validation=run_validation(result.corrected_design, **options),
    )
