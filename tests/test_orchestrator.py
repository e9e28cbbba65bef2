"""Tests for the plan orchestrator."""
import logging

import pytest

from reiseplaner.config import Settings
from reiseplaner.models.request import TravelRequest
from reiseplaner.services.enrichment import PartnerTagResolver, PlanEnricher
from reiseplaner.services.errors import (
    EmptyGenerationError,
    MalformedGenerationError,
    PlanningError,
    SchemaViolationError,
)
from reiseplaner.services.generator import FallbackPlanGenerator, ModelPlanGenerator
from reiseplaner.services.orchestrator import PlanOrchestrator, PlanStatus, build_orchestrator
from reiseplaner.services.persistence import SQLitePlanStore, SupabasePlanStore
from tests.fakes import FailingStore, FakeBackend, RecordingStore, SlowStore, make_plan


ROME_REQUEST = {
    "ziel": "Rome",
    "reisezeitraum": "10.05.2026 - 15.05.2026",
    "budget": "hoch",
    "personen": 4,
}


class BrokenEnricher:
    async def enrich(self, plan: dict) -> dict:
        raise RuntimeError("enrichment exploded")


class ExplodingGenerator:
    name = "exploding"

    async def generate(self, request: TravelRequest):
        raise RuntimeError("generator exploded")


class DestructiveEnricher:
    async def enrich(self, plan: dict) -> dict:
        return {"enriched": True}


class TestPlanOrchestrator:
    """Test the request state machine."""

    @pytest.mark.asyncio
    async def test_fallback_done(self):
        orchestrator = PlanOrchestrator(FallbackPlanGenerator())

        outcome = await orchestrator.create_plan(TravelRequest.model_validate(ROME_REQUEST))

        assert outcome.status == PlanStatus.DONE
        assert outcome.ok
        assert outcome.error is None
        plan = outcome.itinerary
        assert plan["reiseziele"] == ["Rome"]
        assert plan["reisezeitraum"] == "10.05.2026 - 15.05.2026"
        assert plan["personen"] == 4
        assert plan["budget"] == "hoch"
        assert plan["enriched"] is True

    @pytest.mark.asyncio
    async def test_malformed_output_fails_generation(self):
        store = RecordingStore()
        orchestrator = PlanOrchestrator(ModelPlanGenerator(FakeBackend("not json")), store=store)

        outcome = await orchestrator.create_plan(TravelRequest(ziel="Rom"))

        assert outcome.status == PlanStatus.GENERATION_FAILED
        assert isinstance(outcome.error, MalformedGenerationError)
        assert outcome.error.status_code == 500
        assert outcome.itinerary is None
        assert store.saved == []

    @pytest.mark.asyncio
    async def test_empty_output_fails_generation(self):
        orchestrator = PlanOrchestrator(ModelPlanGenerator(FakeBackend(None)))

        outcome = await orchestrator.create_plan(TravelRequest(ziel="Rom"))

        assert outcome.status == PlanStatus.GENERATION_FAILED
        assert isinstance(outcome.error, EmptyGenerationError)

    @pytest.mark.asyncio
    async def test_unexpected_generator_error_fails_generation(self, caplog):
        store = RecordingStore()
        orchestrator = PlanOrchestrator(ExplodingGenerator(), store=store)

        with caplog.at_level(logging.ERROR):
            outcome = await orchestrator.create_plan(TravelRequest(ziel="Rom"))

        assert outcome.status == PlanStatus.GENERATION_FAILED
        assert isinstance(outcome.error, PlanningError)
        assert outcome.error.status_code == 500
        assert "generator exploded" in outcome.error.message
        assert "Unexpected error while generating plan" in caplog.text
        assert store.saved == []

    @pytest.mark.asyncio
    async def test_missing_accommodation_rejected(self):
        plan = make_plan()
        del plan["unterkunft"]
        store = RecordingStore()
        orchestrator = PlanOrchestrator(ModelPlanGenerator(FakeBackend.returning_plan(plan)), store=store)

        outcome = await orchestrator.create_plan(TravelRequest(ziel="Paris"))

        assert outcome.status == PlanStatus.REJECTED
        assert outcome.itinerary is None
        assert isinstance(outcome.error, SchemaViolationError)
        assert outcome.error.status_code == 400
        assert [v.path for v in outcome.error.violations] == ["/unterkunft"]
        assert store.saved == []

    @pytest.mark.asyncio
    async def test_model_plan_keeps_day_order(self):
        plan = make_plan()
        plan["tagesplan"].reverse()
        orchestrator = PlanOrchestrator(ModelPlanGenerator(FakeBackend.returning_plan(plan)))

        outcome = await orchestrator.create_plan(TravelRequest(ziel="Paris"))

        assert outcome.ok
        assert [day["tag"] for day in outcome.itinerary["tagesplan"]] == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_request_and_plan_are_persisted(self):
        store = RecordingStore()
        orchestrator = PlanOrchestrator(FallbackPlanGenerator(), store=store)
        request = TravelRequest.model_validate({**ROME_REQUEST, "newsletter": "ja"})

        outcome = await orchestrator.create_plan(request)

        assert len(store.saved) == 1
        saved_request, saved_plan = store.saved[0]
        assert saved_request == {**ROME_REQUEST, "newsletter": "ja"}
        assert saved_plan == outcome.itinerary

    @pytest.mark.asyncio
    async def test_persistence_failure_does_not_change_outcome(self, caplog):
        request = TravelRequest.model_validate(ROME_REQUEST)
        working = PlanOrchestrator(FallbackPlanGenerator(), store=RecordingStore())
        failing_store = FailingStore()
        failing = PlanOrchestrator(FallbackPlanGenerator(), store=failing_store)

        expected = await working.create_plan(request)
        with caplog.at_level(logging.ERROR):
            outcome = await failing.create_plan(request)

        assert failing_store.attempts == 1
        assert outcome.status == expected.status == PlanStatus.DONE
        assert outcome.itinerary == expected.itinerary
        assert "database unavailable" in caplog.text

    @pytest.mark.asyncio
    async def test_slow_persistence_is_bounded(self, caplog):
        orchestrator = PlanOrchestrator(FallbackPlanGenerator(), store=SlowStore(), persist_timeout=0.01)

        with caplog.at_level(logging.ERROR):
            outcome = await orchestrator.create_plan(TravelRequest(ziel="Rom"))

        assert outcome.ok
        assert "timed out" in caplog.text

    @pytest.mark.asyncio
    async def test_enrichment_failure_keeps_valid_plan(self):
        plan = make_plan()
        orchestrator = PlanOrchestrator(
            ModelPlanGenerator(FakeBackend.returning_plan(plan)),
            enricher=BrokenEnricher(),
        )

        outcome = await orchestrator.create_plan(TravelRequest())

        assert outcome.ok
        assert outcome.itinerary == plan

    @pytest.mark.asyncio
    async def test_invalid_enrichment_result_is_discarded(self):
        plan = make_plan()
        orchestrator = PlanOrchestrator(
            ModelPlanGenerator(FakeBackend.returning_plan(plan)),
            enricher=DestructiveEnricher(),
        )

        outcome = await orchestrator.create_plan(TravelRequest())

        assert outcome.ok
        assert outcome.itinerary == plan


class TestBuildOrchestrator:
    """Test wiring from settings."""

    @pytest.mark.asyncio
    async def test_no_credentials(self):
        orchestrator = build_orchestrator(Settings(llm_api_key="", supabase_url="", plan_db_path=""))

        assert isinstance(orchestrator.generator, FallbackPlanGenerator)
        assert orchestrator.store is None
        assert orchestrator.enricher.resolver is None
        await orchestrator.aclose()

    @pytest.mark.asyncio
    async def test_api_key_selects_model(self):
        config = Settings(llm_api_key="sk-test", llm_timeout_seconds=12, supabase_url="", plan_db_path="")

        orchestrator = build_orchestrator(config)

        assert isinstance(orchestrator.generator, ModelPlanGenerator)
        assert orchestrator.generator.timeout == 12
        assert orchestrator.generator.backend.model == "gpt-4-turbo"
        await orchestrator.aclose()

    @pytest.mark.asyncio
    async def test_sqlite_store(self, tmp_path):
        config = Settings(llm_api_key="", supabase_url="", plan_db_path=str(tmp_path / "plans.db"))

        orchestrator = build_orchestrator(config)

        assert isinstance(orchestrator.store, SQLitePlanStore)
        await orchestrator.aclose()

    @pytest.mark.asyncio
    async def test_supabase_store_and_affiliate_tagging(self):
        config = Settings(
            llm_api_key="",
            supabase_url="https://example.supabase.co",
            supabase_service_key="service-key",
            affiliate_partner_id="partner42",
        )

        orchestrator = build_orchestrator(config)

        assert isinstance(orchestrator.store, SupabasePlanStore)
        assert isinstance(orchestrator.enricher, PlanEnricher)
        assert isinstance(orchestrator.enricher.resolver, PartnerTagResolver)
        await orchestrator.aclose()
