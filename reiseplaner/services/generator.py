"""
Plan Generator - Produces candidate travel plans.

Two interchangeable strategies share one interface: the model-backed
generator asks the language model and parses its answer, the fallback
generator builds a small plan from the request alone. Neither validates;
that is the orchestrator's job.
"""
from datetime import datetime, timedelta
from typing import Any, Optional, Protocol
import asyncio
import json
import logging
import re

from .errors import EmptyGenerationError, MalformedGenerationError
from .llm_client import GenerativeBackend
from .prompts import build_prompts
from ..models.itinerary import BudgetTier, DATE_RANGE_PATTERN
from ..models.request import TravelRequest

logger = logging.getLogger(__name__)


class PlanGenerator(Protocol):
    """Strategy producing an unvalidated plan document."""
    name: str

    async def generate(self, request: TravelRequest) -> Any:
        ...


_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_TRAILING_COMMA_RE = re.compile(r",\s*([\]}])")


def _repair_candidates(text: str):
    """Yield cleaned-up variants of a model answer, most faithful first."""
    cleaned = text.strip()

    match = _FENCE_RE.search(cleaned)
    if match:
        cleaned = match.group(1).strip()
        yield cleaned

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start:end + 1]
        yield cleaned

    # Trailing commas before a closing bracket
    fixed = _TRAILING_COMMA_RE.sub(r"\1", cleaned)
    if fixed != cleaned:
        yield fixed

    # Typographic double quotes used as JSON delimiters
    quoted = re.sub(r"[“”]", '"', fixed)
    if quoted != fixed:
        yield quoted


def parse_plan_text(text: str) -> Any:
    """
    Parse a model answer into a JSON document.

    Tries the raw text first, then the content of a markdown code block, the
    outermost ``{...}`` slice and a couple of common syntax repairs.

    Raises:
        MalformedGenerationError: no variant parses. Carries the error of the
            first (unrepaired) attempt.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        first_error = e
    except RecursionError:
        raise MalformedGenerationError("maximum nesting depth exceeded", raw_text=text)

    for candidate in _repair_candidates(text):
        try:
            document = json.loads(candidate)
        except (json.JSONDecodeError, RecursionError):
            continue
        logger.info("Parsed model output after cleanup")
        return document

    raise MalformedGenerationError(str(first_error), raw_text=text)


class ModelPlanGenerator:
    """Generates plans with the configured language model."""
    name = "model"

    def __init__(self, backend: GenerativeBackend, timeout: Optional[float] = None):
        self.backend = backend
        self.timeout = timeout

    async def generate(self, request: TravelRequest) -> Any:
        """
        Ask the backend for a plan and parse the answer.

        No retries happen here.

        Raises:
            EmptyGenerationError: no text came back (including timeouts)
            MalformedGenerationError: the text is not JSON
        """
        prompts = build_prompts(request)
        try:
            text = await asyncio.wait_for(
                self.backend.complete(prompts.system, prompts.user),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Plan generation timed out after {self.timeout}s")
            raise EmptyGenerationError(f"Generative backend did not answer within {self.timeout}s")

        if text is None or not text.strip():
            raise EmptyGenerationError()
        return parse_plan_text(text)


# Placeholder content used when no model is available
DEFAULT_DESTINATION = "Paris"
DEFAULT_DATE_RANGE = "01.01.2026 - 05.01.2026"
DEFAULT_TRAVELERS = 2
MAX_FALLBACK_DAYS = 14

ENGLISH_BUDGET_NAMES = {
    "low": BudgetTier.LOW,
    "medium": BudgetTier.MEDIUM,
    "high": BudgetTier.HIGH,
    "luxury": BudgetTier.LUXURY,
}


class FallbackPlanGenerator:
    """
    Builds a plan without a language model.

    Uses whatever the request provides and fills everything else with fixed
    placeholder content. The result always satisfies the itinerary schema.
    """
    name = "fallback"

    async def generate(self, request: TravelRequest) -> dict:
        return self.build(request)

    def build(self, request: TravelRequest) -> dict:
        destinations = self._destinations(request.ziel)
        date_range = self._date_range(request.reisezeitraum)
        return {
            "reiseziele": destinations,
            "reisezeitraum": date_range,
            "personen": self._travelers(request.personen),
            "budget": self._budget(request.budget),
            "unterkunft": {
                "vorschlag": "Hotel Demo",
                "preisProNacht": "100€",
                "affiliateLink": "https://booking.com/demo",
            },
            "tagesplan": self._day_plans(date_range, destinations),
            "tipps": ["Vergessen Sie bequeme Schuhe nicht."],
            "premiumEmpfehlung": {
                "beschreibung": "Concierge-Service für persönliche Beratung & Echtzeitpreise",
                "preis": "29€",
                "jetztBuchenLink": "https://deinservice.com/upgrade",
            },
        }

    def _destinations(self, value) -> list[str]:
        if isinstance(value, (list, tuple)):
            items = [str(v).strip() for v in value if v is not None]
        elif isinstance(value, str):
            items = [part.strip() for part in value.split(",")]
        elif value is not None and not isinstance(value, (dict, bool)):
            items = [str(value)]
        else:
            items = []
        items = [item for item in items if item]
        return items or [DEFAULT_DESTINATION]

    def _date_range(self, value) -> str:
        if isinstance(value, str) and re.fullmatch(DATE_RANGE_PATTERN, value.strip(), flags=re.ASCII):
            return value.strip()
        return DEFAULT_DATE_RANGE

    def _travelers(self, value) -> int:
        if isinstance(value, bool):
            return DEFAULT_TRAVELERS
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        elif isinstance(value, str) and value.strip().isdecimal():
            try:
                value = int(value.strip())
            except ValueError:
                # Beyond the interpreter's digit limit
                return DEFAULT_TRAVELERS
        if isinstance(value, int) and value >= 1:
            return value
        return DEFAULT_TRAVELERS

    def _budget(self, value) -> str:
        if isinstance(value, str):
            key = value.strip().lower()
            for tier in BudgetTier:
                if tier.value == key:
                    return tier.value
            if key in ENGLISH_BUDGET_NAMES:
                return ENGLISH_BUDGET_NAMES[key].value
        return BudgetTier.MEDIUM.value

    def _dates(self, date_range: str) -> list[str]:
        """One date string per travel day, in order."""
        first, last = date_range.split(" - ")
        try:
            start = datetime.strptime(first, "%d.%m.%Y")
            end = datetime.strptime(last, "%d.%m.%Y")
        except ValueError:
            return [first]
        if end < start:
            return [first]
        count = min((end - start).days + 1, MAX_FALLBACK_DAYS)
        days = (start + timedelta(days=i) for i in range(count))
        return [f"{d.day:02d}.{d.month:02d}.{d.year:04d}" for d in days]

    def _day_plans(self, date_range: str, destinations: list[str]) -> list[dict]:
        dates = self._dates(date_range)
        days = []
        for index, date in enumerate(dates):
            place = destinations[index % len(destinations)]
            if index == 0:
                description = "Ankunft und erster Spaziergang durch die Stadt."
                activity = {
                    "titel": "Stadtbesichtigung",
                    "beschreibung": "Erkunden Sie die Altstadt und genießen Sie lokale Spezialitäten.",
                    "affiliateLink": "https://viator.com/demo-tour",
                }
                remark = "Leichtes Programm am Ankunftstag."
            elif index == len(dates) - 1:
                description = "Letzter Bummel und Abreise."
                activity = {
                    "titel": "Souvenirs und Abschied",
                    "beschreibung": f"Ein letzter Spaziergang durch {place} vor der Heimreise.",
                }
                remark = "Check-out rechtzeitig einplanen."
            else:
                description = f"Freier Tag zum Entdecken von {place}."
                activity = {
                    "titel": "Geführte Tour",
                    "beschreibung": f"Die wichtigsten Sehenswürdigkeiten von {place} mit lokalem Guide.",
                    "affiliateLink": "https://viator.com/demo-tour",
                }
                remark = "Tickets am besten vorab buchen."
            days.append({
                "tag": index + 1,
                "datum": date,
                "beschreibung": description,
                "aktivitaeten": [activity],
                "restaurant": "Demo Restaurant",
                "bemerkung": remark,
            })
        return days
