"""Skylar weather companion: forecast aggregation, freshness caching, AI assistant."""

__version__ = "0.1.0"
