"""
Errors raised while producing a travel plan.
Each error knows how it is reported to the caller.
"""
from typing import Optional


class PlanningError(Exception):
    """Base class for failures of a single plan request."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": self.message}


class EmptyGenerationError(PlanningError):
    """The generative backend returned nothing usable."""

    def __init__(self, message: str = "Generative backend returned no content"):
        super().__init__(message)


class MalformedGenerationError(PlanningError):
    """The backend returned text that is not a JSON document."""

    def __init__(self, detail: str, raw_text: Optional[str] = None):
        super().__init__(f"Failed to parse generated plan as JSON: {detail}")
        self.detail = detail
        self.raw_text = raw_text

    def to_response(self) -> dict:
        return {"error": self.message, "details": [{"message": self.detail}]}


class SchemaViolationError(PlanningError):
    """The generated document does not satisfy the itinerary schema."""
    status_code = 400

    def __init__(self, violations: list):
        super().__init__("Invalid travel plan")
        self.violations = violations

    def to_response(self) -> dict:
        return {
            "error": self.message,
            "details": [v.model_dump() for v in self.violations],
        }


class PersistenceError(PlanningError):
    """Storing a plan failed. Logged only, never reported to the caller."""
