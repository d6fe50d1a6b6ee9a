"""
modules/validation package — caller-side guards before scheduling.
"""
from modules.validation.ingestion_validator import (
    ValidationResult,
    ensure_trip_request,
    validate_overnight_stays,
    validate_poi,
    validate_trip_request,
)

__all__ = [
    "ValidationResult",
    "ensure_trip_request",
    "validate_overnight_stays",
    "validate_poi",
    "validate_trip_request",
]
