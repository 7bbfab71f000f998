"""
Dependencies - Progressive Profile Engine
progressive_profile/core/dependencies.py

Cached singletons for callers that embed the engine (API routes, workers).
"""

from functools import lru_cache

from progressive_profile.consolidation.profile_consolidator import ProfileConsolidator
from progressive_profile.consolidation.weighting_table import WeightingTable
from progressive_profile.repositories.base import ProfileStore
from progressive_profile.repositories.redis_store import RedisProfileStore
from progressive_profile.services.profile_service import ProgressiveProfileService


@lru_cache()
def get_weighting_table() -> WeightingTable:
    """Get cached WeightingTable instance."""
    return WeightingTable.default()


@lru_cache()
def get_consolidator() -> ProfileConsolidator:
    """Get cached ProfileConsolidator instance."""
    return ProfileConsolidator(table=get_weighting_table())


@lru_cache()
def get_profile_store() -> ProfileStore:
    """Get cached RedisProfileStore instance."""
    return RedisProfileStore()


@lru_cache()
def get_profile_service() -> ProgressiveProfileService:
    """Get cached ProgressiveProfileService instance."""
    return ProgressiveProfileService(store=get_profile_store(), consolidator=get_consolidator())


def reset_dependencies() -> None:
    """Drop cached instances (tests, or after settings change)."""
    for factory in (get_weighting_table, get_consolidator, get_profile_store, get_profile_service):
        factory.cache_clear()
