"""
Travel request - Raw form input submitted by the user.
Nothing here is validated; unknown keys are kept as they arrive.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional


class TravelRequest(BaseModel):
    """User input collected by the planning form."""
    model_config = ConfigDict(extra="allow")

    ziel: Optional[Any] = Field(None, description="Destination or list of destinations")
    abflughafen: Optional[Any] = Field(None, description="Departure airport")
    reisezeitraum: Optional[Any] = Field(None, description="Travel period, e.g. '10.05.2026 - 15.05.2026'")
    budget: Optional[Any] = Field(None, description="Budget tier")
    personen: Optional[Any] = Field(None, description="Number of travelers")
    interessen: Optional[Any] = Field(None, description="Interests")
    reisestil: Optional[Any] = Field(None, description="Travel style")
    unterkunft: Optional[Any] = Field(None, description="Accommodation preference")
    besondereWuensche: Optional[Any] = Field(None, description="Special requests")

    def to_payload(self) -> dict:
        """Return the input as submitted, including unknown keys."""
        return self.model_dump(exclude_unset=True)
