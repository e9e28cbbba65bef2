"""Services for the travel plan pipeline."""
from .errors import (
    PlanningError,
    EmptyGenerationError,
    MalformedGenerationError,
    SchemaViolationError,
    PersistenceError,
)
from .prompts import build_prompts, build_user_prompt, get_system_prompt
from .llm_client import LLMClient
from .generator import FallbackPlanGenerator, ModelPlanGenerator, parse_plan_text
from .validator import validate_plan
from .enrichment import PlanEnricher, PartnerTagResolver
from .persistence import SupabasePlanStore, SQLitePlanStore, build_plan_store
from .orchestrator import PlanOrchestrator, PlanOutcome, PlanStatus, get_orchestrator

__all__ = [
    "PlanningError",
    "EmptyGenerationError",
    "MalformedGenerationError",
    "SchemaViolationError",
    "PersistenceError",
    "build_prompts",
    "build_user_prompt",
    "get_system_prompt",
    "LLMClient",
    "FallbackPlanGenerator",
    "ModelPlanGenerator",
    "parse_plan_text",
    "validate_plan",
    "PlanEnricher",
    "PartnerTagResolver",
    "SupabasePlanStore",
    "SQLitePlanStore",
    "build_plan_store",
    "PlanOrchestrator",
    "PlanOutcome",
    "PlanStatus",
    "get_orchestrator",
]
