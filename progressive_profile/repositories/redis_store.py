"""
Redis Profile Store - Progressive Profile Engine
progressive_profile/repositories/redis_store.py

Production ProfileStore. Profiles are stored as JSON under
"{prefix}:{profile_id}" with a child-name index under
"{prefix}:child:{name}". Writes run in a WATCH/MULTI transaction so a
concurrent writer surfaces as StaleProfileVersion.

Every Redis failure is raised as DatabaseConnectionException and every
unreadable stored profile as CorruptProfileException.
"""

from typing import Optional

import redis
import structlog
from pydantic import ValidationError

from progressive_profile.config import settings
from progressive_profile.core.exceptions import (
    CorruptProfileException,
    DatabaseConnectionException,
    StaleProfileVersion,
)
from progressive_profile.models.profile import ConsolidatedProfile
from progressive_profile.repositories.base import ProfileStore

logger = structlog.get_logger(__name__)


class RedisProfileStore(ProfileStore):
    """ProfileStore backed by Redis with optimistic transactions."""

    def __init__(self, url: Optional[str] = None, key_prefix: Optional[str] = None):
        self.client = redis.from_url(
            url or settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
        )
        self.key_prefix = key_prefix or settings.REDIS_KEY_PREFIX

    def _profile_key(self, profile_id: str) -> str:
        return f"{self.key_prefix}:{profile_id}"

    def _child_index_key(self, child_name: str) -> str:
        return f"{self.key_prefix}:child:{self.child_key(child_name)}"

    @staticmethod
    def _unavailable(operation: str, error: redis.RedisError) -> DatabaseConnectionException:
        logger.error("profile_store_unavailable", operation=operation, error=str(error))
        return DatabaseConnectionException(f"Redis {operation} failed: {error}")

    @staticmethod
    def _parse(key: str, data: Optional[str]) -> Optional[ConsolidatedProfile]:
        if not data:
            return None
        try:
            return ConsolidatedProfile.model_validate_json(data)
        except ValidationError as e:
            logger.error("corrupt_profile_data", key=key, errors=e.error_count())
            raise CorruptProfileException(key, str(e))

    def load(self, profile_id: str) -> Optional[ConsolidatedProfile]:
        key = self._profile_key(profile_id)
        try:
            data = self.client.get(key)
        except redis.RedisError as e:
            raise self._unavailable("load", e)
        return self._parse(key, data)

    def save(self, profile: ConsolidatedProfile) -> ConsolidatedProfile:
        key = self._profile_key(profile.id)
        index_key = self._child_index_key(profile.child_name)

        try:
            with self.client.pipeline() as pipe:
                pipe.watch(key, index_key)
                stored = self._parse(key, pipe.get(key))
                self.check_version(profile, stored, pipe.get(index_key))

                pipe.multi()
                pipe.set(key, profile.model_dump_json())
                pipe.set(index_key, profile.id)
                pipe.execute()
        except redis.WatchError:
            logger.warning("stale_profile_version", profile_id=profile.id, reason="concurrent_write")
            raise StaleProfileVersion(profile.id, profile.version - 1, None)
        except redis.RedisError as e:
            raise self._unavailable("save", e)

        logger.debug("profile_saved", profile_id=profile.id, version=profile.version)
        return profile

    def find_by_child_name(self, child_name: str) -> Optional[ConsolidatedProfile]:
        try:
            profile_id = self.client.get(self._child_index_key(child_name))
        except redis.RedisError as e:
            raise self._unavailable("find_by_child_name", e)
        if not profile_id:
            return None
        return self.load(profile_id)

    def delete(self, profile_id: str) -> None:
        """Remove a profile and its child-name index entry."""
        profile = self.load(profile_id)
        if profile is None:
            return
        try:
            self.client.delete(self._profile_key(profile_id), self._child_index_key(profile.child_name))
        except redis.RedisError as e:
            raise self._unavailable("delete", e)
