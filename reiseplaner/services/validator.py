"""
Plan Validator - Checks candidate plans against the itinerary schema.
Reports every violation at once instead of stopping at the first.
"""
from pydantic import BaseModel, Field, ValidationError
from typing import Any
import logging

from ..models.itinerary import Itinerary

logger = logging.getLogger(__name__)


class Violation(BaseModel):
    """A single broken schema constraint."""
    path: str = Field(..., description="JSON pointer to the offending value, e.g. '/tagesplan/0/datum'")
    message: str = Field(..., description="What is wrong")
    code: str = Field(..., description="Machine readable error type, e.g. 'missing'")


class ValidationReport(BaseModel):
    """Outcome of validating one candidate."""
    valid: bool
    violations: list[Violation] = Field(default_factory=list)


def _pointer(loc: tuple) -> str:
    if not loc:
        return "/"
    return "/" + "/".join(str(part).replace("~", "~0").replace("/", "~1") for part in loc)


def _to_violation(error: dict) -> Violation:
    code = error["type"]
    message = error["msg"]
    if code == "missing":
        message = f"must have required property '{error['loc'][-1]}'"
    return Violation(path=_pointer(error["loc"]), message=message, code=code)


def validate_plan(candidate: Any) -> ValidationReport:
    """
    Validate a parsed plan document.

    Never raises for JSON-shaped input and never modifies the candidate.

    Returns:
        ValidationReport; ``violations`` is non-empty whenever ``valid`` is False
    """
    try:
        Itinerary.model_validate(candidate)
    except ValidationError as e:
        violations = [_to_violation(err) for err in e.errors(include_url=False)]
        logger.info(f"Plan failed validation with {len(violations)} violation(s)")
        return ValidationReport(valid=False, violations=violations)
    return ValidationReport(valid=True)
