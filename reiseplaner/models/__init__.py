"""Data models for the travel plan service."""
from .itinerary import (
    Itinerary,
    Accommodation,
    DayPlan,
    Activity,
    PremiumRecommendation,
    BudgetTier,
    ITINERARY_SCHEMA,
    DATE_PATTERN,
    DATE_RANGE_PATTERN,
)
from .request import TravelRequest

__all__ = [
    "Itinerary",
    "Accommodation",
    "DayPlan",
    "Activity",
    "PremiumRecommendation",
    "BudgetTier",
    "ITINERARY_SCHEMA",
    "DATE_PATTERN",
    "DATE_RANGE_PATTERN",
    "TravelRequest",
]
