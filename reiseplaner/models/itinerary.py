"""
Itinerary models - The structured contract for generated travel plans.

The wire format uses the German field names of the public API. The contract
exists twice: as a plain JSON-Schema document (``ITINERARY_SCHEMA``) that any
JSON-Schema validator can evaluate, and as pydantic models used by the
service's own validator. Tests keep both in sync.
"""
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, Strict
from pydantic_core import PydanticCustomError
from typing import Annotated, Optional
from urllib.parse import urlsplit
from enum import Enum
import re


DATE_PATTERN = r"^\d{2}\.\d{2}\.\d{4}$"
DATE_RANGE_PATTERN = r"^\d{2}\.\d{2}\.\d{4} - \d{2}\.\d{2}\.\d{4}$"


class BudgetTier(str, Enum):
    """Budget tiers accepted in a plan."""
    LOW = "niedrig"
    MEDIUM = "mittel"
    HIGH = "hoch"
    LUXURY = "luxus"


def _check_uri(value: str) -> str:
    parts = urlsplit(value)
    if not parts.scheme or not (parts.netloc or parts.path):
        raise ValueError("must be an absolute URI")
    return value


def _ascii_pattern(pattern: str):
    # \d must only match 0-9, as in the published JSON Schema
    def check(value: str) -> str:
        if not re.fullmatch(pattern, value, flags=re.ASCII):
            raise PydanticCustomError(
                "string_pattern_mismatch",
                "String should match pattern '{pattern}'",
                {"pattern": pattern},
            )
        return value
    return check


def _whole_number(value):
    # JSON Schema "integer" includes 1.0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


Text = Annotated[str, Strict()]
Uri = Annotated[str, Strict(), AfterValidator(_check_uri)]
PlanDate = Annotated[str, Strict(), AfterValidator(_ascii_pattern(DATE_PATTERN))]
PlanDateRange = Annotated[str, Strict(), AfterValidator(_ascii_pattern(DATE_RANGE_PATTERN))]
WholeNumber = Annotated[int, Strict(), BeforeValidator(_whole_number)]


class _WireModel(BaseModel):
    # Unknown keys (restaurant notes, enrichment data, ...) are allowed
    model_config = ConfigDict(extra="allow")


class Accommodation(_WireModel):
    """Suggested place to stay."""
    name: Text = Field(..., alias="vorschlag")
    price_per_night: Text = Field(..., alias="preisProNacht")
    affiliate_link: Uri = Field(..., alias="affiliateLink")


class Activity(_WireModel):
    """A single activity within a day."""
    title: Text = Field(..., alias="titel")
    description: Text = Field(..., alias="beschreibung")
    affiliate_link: Uri = Field(default=None, alias="affiliateLink")


class DayPlan(_WireModel):
    """Plan for a single day."""
    day_number: WholeNumber = Field(..., alias="tag")
    date: PlanDate = Field(..., alias="datum")
    description: Text = Field(..., alias="beschreibung")
    activities: list[Activity] = Field(..., alias="aktivitaeten")
    restaurant: Text = Field(default=None)
    remark: Text = Field(default=None, alias="bemerkung")


class PremiumRecommendation(_WireModel):
    """Paid upsell offered with the plan."""
    description: Text = Field(..., alias="beschreibung")
    price: Text = Field(..., alias="preis")
    book_now_link: Uri = Field(..., alias="jetztBuchenLink")


class Itinerary(_WireModel):
    """Complete travel plan as returned to the caller."""
    destinations: list[Text] = Field(..., min_length=1, alias="reiseziele")
    date_range: PlanDateRange = Field(..., alias="reisezeitraum")
    traveler_count: WholeNumber = Field(..., ge=1, alias="personen")
    budget: BudgetTier
    accommodation: Accommodation = Field(..., alias="unterkunft")
    day_plans: list[DayPlan] = Field(..., alias="tagesplan")
    # Optional keys default to None without accepting an explicit null
    tips: list[Text] = Field(default=None, alias="tipps")
    premium_recommendation: PremiumRecommendation = Field(default=None, alias="premiumEmpfehlung")


# JSON Schema for plan validation (library independent, draft 2020-12)
ITINERARY_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Reiseplan",
    "type": "object",
    "required": ["reiseziele", "reisezeitraum", "personen", "budget", "unterkunft", "tagesplan"],
    "properties": {
        "reiseziele": {"type": "array", "items": {"type": "string"}, "minItems": 1},
        "reisezeitraum": {"type": "string", "pattern": DATE_RANGE_PATTERN},
        "personen": {"type": "integer", "minimum": 1},
        "budget": {"type": "string", "enum": [tier.value for tier in BudgetTier]},
        "unterkunft": {
            "type": "object",
            "required": ["vorschlag", "preisProNacht", "affiliateLink"],
            "properties": {
                "vorschlag": {"type": "string"},
                "preisProNacht": {"type": "string"},
                "affiliateLink": {"type": "string", "format": "uri"},
            },
        },
        "tagesplan": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["tag", "datum", "beschreibung", "aktivitaeten"],
                "properties": {
                    "tag": {"type": "integer"},
                    "datum": {"type": "string", "pattern": DATE_PATTERN},
                    "beschreibung": {"type": "string"},
                    "aktivitaeten": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["titel", "beschreibung"],
                            "properties": {
                                "titel": {"type": "string"},
                                "beschreibung": {"type": "string"},
                                "affiliateLink": {"type": "string", "format": "uri"},
                            },
                        },
                    },
                    "restaurant": {"type": "string"},
                    "bemerkung": {"type": "string"},
                },
            },
        },
        "tipps": {"type": "array", "items": {"type": "string"}},
        "premiumEmpfehlung": {
            "type": "object",
            "required": ["beschreibung", "preis", "jetztBuchenLink"],
            "properties": {
                "beschreibung": {"type": "string"},
                "preis": {"type": "string"},
                "jetztBuchenLink": {"type": "string", "format": "uri"},
            },
        },
    },
}
