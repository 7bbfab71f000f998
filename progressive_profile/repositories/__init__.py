"""
Repositories Package - Progressive Profile Engine
progressive_profile/repositories/__init__.py

Persistence layer for consolidated profiles.
"""

from progressive_profile.repositories.base import ProfileStore
from progressive_profile.repositories.memory_store import InMemoryProfileStore
from progressive_profile.repositories.redis_store import RedisProfileStore

__all__ = [
    "ProfileStore",
    "InMemoryProfileStore",
    "RedisProfileStore",
]
