"""
Base Repository - Progressive Profile Engine
progressive_profile/repositories/base.py

ProfileStore interface and the version check every implementation shares.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from progressive_profile.core.exceptions import StaleProfileVersion
from progressive_profile.models.profile import ConsolidatedProfile

logger = structlog.get_logger(__name__)


class ProfileStore(ABC):
    """
    Persistence contract for consolidated profiles.

    save() enforces optimistic concurrency: a profile at version N is
    accepted only when the stored copy is at N - 1 (or absent, for N = 1).
    """

    @abstractmethod
    def load(self, profile_id: str) -> Optional[ConsolidatedProfile]:
        """Return the stored profile, or None."""

    @abstractmethod
    def save(self, profile: ConsolidatedProfile) -> ConsolidatedProfile:
        """Persist a profile, rejecting stale versions with StaleProfileVersion."""

    @abstractmethod
    def find_by_child_name(self, child_name: str) -> Optional[ConsolidatedProfile]:
        """Return the profile of a child looked up by name, or None."""

    @staticmethod
    def child_key(child_name: str) -> str:
        """Case- and whitespace-insensitive index key for a child's name."""
        return " ".join(child_name.split()).lower()

    @staticmethod
    def check_version(
        profile: ConsolidatedProfile,
        stored: Optional[ConsolidatedProfile],
        indexed_id: Optional[str] = None,
    ) -> None:
        """
        Raise StaleProfileVersion unless ``profile`` directly follows ``stored``.

        Args:
            profile: Profile about to be written.
            stored: Copy currently persisted under profile.id, if any.
            indexed_id: Profile id currently indexed for the same child name.
        """
        expected = profile.version - 1
        actual = stored.version if stored is not None else 0

        # A second brand-new profile for a child who already has one
        if profile.version == 1 and indexed_id is not None and indexed_id != profile.id:
            actual = 1

        if actual != expected:
            logger.warning(
                "stale_profile_version",
                profile_id=profile.id,
                expected_version=expected,
                actual_version=actual,
            )
            raise StaleProfileVersion(profile.id, expected, actual)
