"""Reiseplaner - AI travel plans validated against a fixed itinerary schema."""

__version__ = "1.0.0"
