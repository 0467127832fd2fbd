"""
Structural validation of raw usage data.

Checks shape and types only. Problems are reported, never raised, so the
caller decides whether to abort.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping

from .records import RecordShape, detect_shape


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one raw input."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def validate_data(data: Any) -> ValidationResult:
    """Validate raw usage data in either accepted shape.

    The external shape (a daily list and/or a totals object) only has its
    containers checked. The canonical shape needs a numeric totalCost and
    object-typed byModel/byDay when present. Errors accumulate; there are no
    range or cross-field checks, so a negative cost is valid.

    Args:
        data: Parsed JSON value

    Returns:
        ValidationResult with every error found
    """
    if data is None or not isinstance(data, Mapping):
        return ValidationResult(is_valid=False, errors=["Data must be an object"])

    errors = []

    if detect_shape(data) == RecordShape.EXTERNAL:
        if data.get("daily") and not isinstance(data["daily"], list):
            errors.append("daily must be an array")
        if data.get("totals") and not isinstance(data["totals"], Mapping):
            errors.append("totals must be an object")
    else:
        total_cost = data.get("totalCost")
        if not isinstance(total_cost, (int, float)) or isinstance(total_cost, bool):
            errors.append("totalCost must be a number")
        if data.get("byModel") and not isinstance(data["byModel"], Mapping):
            errors.append("byModel must be an object")
        if data.get("byDay") and not isinstance(data["byDay"], Mapping):
            errors.append("byDay must be an object")

    return ValidationResult(is_valid=not errors, errors=errors)
