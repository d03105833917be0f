from offgrid.schemas.design import Component, Wire, DesignSnapshot
from offgrid.schemas.device import DeviceDefinition, TerminalDefinition
from offgrid.schemas.sizing import WireCalculation, CurrentEstimate
from offgrid.schemas.validation import ValidationResult, ValidationIssue
from offgrid.schemas.load import LoadRequirements, RuntimeEstimate

__all__ = [
    "Component",
    "Wire",
    "DesignSnapshot",
    "DeviceDefinition",
    "TerminalDefinition",
    "WireCalculation",
    "CurrentEstimate",
    "ValidationResult",
    "ValidationIssue",
    "LoadRequirements",
    "RuntimeEstimate",
]
