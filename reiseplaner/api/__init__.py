"""HTTP API for the travel plan service."""
from .routes import router

__all__ = ["router"]
