"""
API Routes for the travel plan service.
"""
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from typing import Any

from ..models.itinerary import ITINERARY_SCHEMA
from ..models.request import TravelRequest
from ..services.orchestrator import PlanOrchestrator, get_orchestrator


router = APIRouter(prefix="/api", tags=["travel-planner"])


@router.post("/plan")
async def create_plan(
    payload: dict[str, Any] = Body(...),
    orchestrator: PlanOrchestrator = Depends(get_orchestrator),
):
    """Generate a new travel plan from the submitted form data."""
    request = TravelRequest.model_validate(payload)
    outcome = await orchestrator.create_plan(request)

    if outcome.ok:
        return outcome.itinerary

    return JSONResponse(
        status_code=outcome.error.status_code,
        content=outcome.error.to_response(),
    )


@router.get("/schema")
async def get_schema():
    """Return the JSON Schema every plan must satisfy."""
    return ITINERARY_SCHEMA
