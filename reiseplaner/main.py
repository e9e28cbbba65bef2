"""
FastAPI Application Entry Point.
"""
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import settings, init_logging
from .services import orchestrator as orchestrator_module
from .services.orchestrator import PlanOrchestrator, get_orchestrator


init_logging()

# Create FastAPI app
app = FastAPI(
    title="Reiseplaner",
    description="AI travel planner with schema-validated itineraries",
    version="1.0.0"
)

# Add CORS middleware
allow_origins = (
    [o.strip() for o in settings.cors_allow_origins.split(",")]
    if settings.cors_allow_origins != "*"
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


@app.get("/health")
async def health_check(orchestrator: PlanOrchestrator = Depends(get_orchestrator)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "generator": orchestrator.generator.name,
        "persistence": orchestrator.store.name if orchestrator.store else None,
    }


@app.on_event("shutdown")
async def _on_shutdown():
    if orchestrator_module.orchestrator is not None:
        await orchestrator_module.orchestrator.aclose()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "reiseplaner.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
