"""
Profile Service - Progressive Profile Engine
progressive_profile/services/profile_service.py

Load -> consolidate -> save for one submitted assessment:

  1. Resolve the profile (by id, else by child name)
  2. ProfileConsolidator.consolidate()
  3. ProfileStore.save() (version-checked)
  4. On StaleProfileVersion: reload and retry, up to MAX_SAVE_RETRIES
  5. Return a ConsolidationOutcome; engine and store errors become
     ErrorResponse values instead of propagating

Submissions for the same profile are serialized per key with a
threading.Lock; the store's version check covers writers in other
processes.
"""

import threading
import weakref
from datetime import datetime, timezone
from typing import Optional, Union

import structlog

from progressive_profile.config import settings
from progressive_profile.consolidation.profile_consolidator import ProfileConsolidator
from progressive_profile.core.exceptions import (
    EntityNotFoundException,
    ProfileEngineException,
    RepositoryException,
    StaleProfileVersion,
)
from progressive_profile.models.assessment import Assessment
from progressive_profile.models.profile import (
    ConsolidatedProfile,
    ConsolidationOutcome,
    ContributionSummary,
    ErrorResponse,
)
from progressive_profile.repositories.base import ProfileStore

logger = structlog.get_logger(__name__)


class ProgressiveProfileService:
    """Consolidate submitted assessments into stored profiles."""

    def __init__(
        self,
        store: ProfileStore,
        consolidator: Optional[ProfileConsolidator] = None,
        max_retries: Optional[int] = None,
    ):
        self.store = store
        self.consolidator = consolidator or ProfileConsolidator()
        self.max_retries = settings.MAX_SAVE_RETRIES if max_retries is None else max_retries
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(
        self,
        assessment: Assessment,
        profile_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> ConsolidationOutcome:
        """
        Merge one assessment into the child's stored profile.

        Args:
            assessment: The submitted assessment.
            profile_id: Target profile; falls back to
                        assessment.existing_profile_id, then to the child's name.
            expected_version: Pin the version the caller last read. A pinned
                              submission is never retried on conflict.

        Returns:
            ConsolidationOutcome with the saved profile and a contribution
            summary, or with ``error`` set.
        """
        target_id = profile_id or assessment.existing_profile_id
        lock_key = target_id or f"child:{ProfileStore.child_key(assessment.child_name)}"

        try:
            with self._lock_for(lock_key):
                return self._submit_locked(assessment, target_id, expected_version)
        except (ProfileEngineException, RepositoryException) as e:
            logger.warning(
                "submission_rejected",
                assessment_id=assessment.id,
                error_code=e.error_code,
                error=str(e),
            )
            return ConsolidationOutcome(error=self._error_response(e))

    def get_profile(self, profile_id: str) -> ConsolidatedProfile:
        """Load a profile or raise EntityNotFoundException."""
        profile = self.store.load(profile_id)
        if profile is None:
            raise EntityNotFoundException("ConsolidatedProfile", profile_id)
        return profile

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            # Entries vanish once no submission holds the lock.
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def _resolve(self, assessment: Assessment, target_id: Optional[str]) -> Optional[ConsolidatedProfile]:
        if target_id:
            return self.get_profile(target_id)
        return self.store.find_by_child_name(assessment.child_name)

    def _submit_locked(
        self,
        assessment: Assessment,
        target_id: Optional[str],
        expected_version: Optional[int],
    ) -> ConsolidationOutcome:
        attempt = 0
        while True:
            existing = self._resolve(assessment, target_id)
            try:
                profile = self.consolidator.consolidate(existing, assessment, expected_version)
                saved = self.store.save(profile)
            except StaleProfileVersion:
                if expected_version is not None or attempt >= self.max_retries:
                    raise
                attempt += 1
                logger.info(
                    "retrying_stale_save",
                    assessment_id=assessment.id,
                    attempt=attempt,
                    max_retries=self.max_retries,
                )
                continue

            return ConsolidationOutcome(
                profile=saved,
                is_new_profile=existing is None,
                contribution=self._contribution(saved),
            )

    @staticmethod
    def _contribution(profile: ConsolidatedProfile) -> ContributionSummary:
        source = profile.data_sources[-1]
        return ContributionSummary(
            quiz_type=source.quiz_type,
            respondent_type=source.respondent_type,
            weight=source.base_weight,
            confidence_boost=source.confidence_contribution,
            new_confidence=profile.confidence_percentage,
            new_completeness=profile.completeness_percentage,
        )

    @staticmethod
    def _error_response(error: Union[ProfileEngineException, RepositoryException]) -> ErrorResponse:
        details = getattr(error, "details", None)
        if details is None and isinstance(error, EntityNotFoundException):
            details = {"entity_type": error.entity_type, "entity_id": error.entity_id}
        return ErrorResponse(
            error_code=error.error_code,
            message=str(error),
            http_status=error.http_status,
            details=details or None,
            timestamp=datetime.now(timezone.utc),
        )
