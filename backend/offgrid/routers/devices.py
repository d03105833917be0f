"""Device catalog router — read-only registry lookups."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from offgrid.devices.registry import get_device, list_devices
from offgrid.schemas.device import DeviceDefinition

router = APIRouter()


@router.get("", response_model=list[DeviceDefinition])
async def list_all_devices():
    """Return every device type the editor can place."""
    return list_devices()


@router.get("/{device_type}", response_model=DeviceDefinition)
async def get_device_definition(device_type: str):
    """Return one device definition with its terminals."""
    device = get_device(device_type)
    if device is None:
        raise HTTPException(status_code=404, detail=f"Unknown device type: {device_type}")
    return device
