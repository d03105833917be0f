"""Sizing router — stateless wire, load and runtime calculators."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from offgrid.config import Settings, get_settings
from offgrid.electrical.calculator import calculate_wires
from offgrid.electrical.current import estimate_all
from offgrid.electrical.loads import calculate_load_requirements, calculate_runtime_estimates
from offgrid.electrical.sizing import size_wire
from offgrid.schemas.design import DesignSnapshot
from offgrid.schemas.load import LoadRequest, LoadRequirements, RuntimeEstimate
from offgrid.schemas.sizing import CurrentEstimate, WireCalculation, WireSizingRequest

router = APIRouter()


@router.post("/calculate-wire", response_model=WireCalculation)
async def calculate_wire_size(request: WireSizingRequest):
    """Recommend a gauge for one conductor."""
    return size_wire(
        current=request.current,
        length=request.length,
        voltage=request.voltage,
        temperature_c=request.temperature_c,
        material=request.conductor_material,
        insulation=request.insulation_type,
        bundling_factor=request.bundling_factor,
        max_voltage_drop=request.max_voltage_drop,
        floor_gauge=request.current_gauge,
    )


@router.post("/calculate-load", response_model=LoadRequirements)
async def calculate_load(request: LoadRequest):
    return calculate_load_requirements(request.components, request.system_voltage)


@router.post("/runtime-estimates", response_model=RuntimeEstimate)
async def runtime_estimates(request: LoadRequest):
    return calculate_runtime_estimates(request.components, request.system_voltage)


@router.post("/wire-currents", response_model=list[CurrentEstimate])
async def wire_currents(snapshot: DesignSnapshot):
    """Inferred current for every wire, in wire order."""
    return estimate_all(snapshot)


@router.post("/wire-calculations", response_model=dict[str, WireCalculation])
async def wire_calculations(
    snapshot: DesignSnapshot, settings: Settings = Depends(get_settings)
):
    """Sizing result per wire id, as cached by the editor for display."""
    return calculate_wires(
        snapshot,
        temperature_c=settings.ambient_temperature_c,
        max_voltage_drop=settings.max_voltage_drop_percent,
    )
