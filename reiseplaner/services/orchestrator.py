"""
Plan Orchestrator - Runs one plan request from input to response.

Generating -> Validating -> (Rejected | Enriching -> Persisting -> Done).
Every request is a single pass; nothing is retried.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import asyncio
import logging

from .enrichment import PartnerTagResolver, PlanEnricher
from .errors import (
    EmptyGenerationError,
    MalformedGenerationError,
    PersistenceError,
    PlanningError,
    SchemaViolationError,
)
from .generator import FallbackPlanGenerator, ModelPlanGenerator, PlanGenerator
from .llm_client import LLMClient
from .persistence import PlanStore, build_plan_store
from .validator import validate_plan
from ..config import Settings, backend_configured, get_llm_config, settings
from ..models.request import TravelRequest

logger = logging.getLogger(__name__)


class PlanStatus(str, Enum):
    """Terminal state of a plan request."""
    DONE = "done"
    REJECTED = "rejected"  # Generated plan broke the schema
    GENERATION_FAILED = "generation_failed"  # No usable model output


@dataclass
class PlanOutcome:
    """Result handed to the HTTP layer."""
    status: PlanStatus
    itinerary: Optional[dict] = None
    error: Optional[PlanningError] = None

    @property
    def ok(self) -> bool:
        return self.status == PlanStatus.DONE


class PlanOrchestrator:
    """
    Sequences generation, validation, enrichment and persistence.

    All collaborators are passed in, so tests can swap any of them.
    """

    def __init__(
        self,
        generator: PlanGenerator,
        enricher: Optional[PlanEnricher] = None,
        store: Optional[PlanStore] = None,
        persist_timeout: Optional[float] = 5.0,
    ):
        self.generator = generator
        self.enricher = enricher or PlanEnricher()
        self.store = store
        self.persist_timeout = persist_timeout

    async def create_plan(self, request: TravelRequest) -> PlanOutcome:
        """Produce a validated, enriched plan for one request."""
        logger.info(f"Generating plan with {self.generator.name} generator")
        try:
            candidate = await self.generator.generate(request)
        except (EmptyGenerationError, MalformedGenerationError) as e:
            logger.error(f"Plan generation failed: {e.message}")
            return PlanOutcome(PlanStatus.GENERATION_FAILED, error=e)
        except Exception as e:
            logger.exception("Unexpected error while generating plan")
            return PlanOutcome(PlanStatus.GENERATION_FAILED, error=PlanningError(f"Plan generation failed: {e}"))

        report = validate_plan(candidate)
        if not report.valid:
            for violation in report.violations:
                logger.warning(f"Schema violation at {violation.path}: {violation.message}")
            return PlanOutcome(PlanStatus.REJECTED, error=SchemaViolationError(report.violations))

        plan = await self._enrich(candidate)
        await self._persist(request.to_payload(), plan)
        return PlanOutcome(PlanStatus.DONE, itinerary=plan)

    async def _enrich(self, plan: dict) -> dict:
        try:
            enriched = await self.enricher.enrich(plan)
        except Exception:
            logger.exception("Enrichment failed, returning plan without enrichment")
            return plan
        if not validate_plan(enriched).valid:
            logger.error("Enrichment produced an invalid plan, returning plan without enrichment")
            return plan
        return enriched

    async def _persist(self, request: dict, plan: dict) -> None:
        if self.store is None:
            return
        try:
            await asyncio.wait_for(self.store.save(request, plan), timeout=self.persist_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Storing plan in {self.store.name} timed out after {self.persist_timeout}s")
        except PersistenceError as e:
            logger.error(f"Storing plan failed: {e.message}")
        except Exception:
            logger.exception(f"Unexpected error while storing plan in {self.store.name}")

    async def aclose(self) -> None:
        """Release backend and store connections."""
        if self.store is not None:
            await self.store.aclose()
        backend = getattr(self.generator, "backend", None)
        if backend is not None and hasattr(backend, "aclose"):
            await backend.aclose()


def build_orchestrator(config: Settings = settings) -> PlanOrchestrator:
    """Wire an orchestrator from settings."""
    if backend_configured(config):
        generator = ModelPlanGenerator(
            LLMClient(get_llm_config(config)),
            timeout=config.llm_timeout_seconds,
        )
    else:
        logger.warning("LLM API key not set. Using fallback travel plan generator.")
        generator = FallbackPlanGenerator()

    resolver = None
    if config.affiliate_partner_id:
        resolver = PartnerTagResolver(config.affiliate_partner_id, config.affiliate_param)

    return PlanOrchestrator(
        generator=generator,
        enricher=PlanEnricher(resolver),
        store=build_plan_store(config),
        persist_timeout=config.persistence_timeout_seconds,
    )


# Global orchestrator instance
orchestrator: Optional[PlanOrchestrator] = None


def get_orchestrator() -> PlanOrchestrator:
    """Get or create the global orchestrator."""
    global orchestrator
    if orchestrator is None:
        orchestrator = build_orchestrator()
    return orchestrator
