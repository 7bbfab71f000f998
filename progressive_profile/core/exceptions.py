"""
Custom Exceptions - Progressive Profile Engine
progressive_profile/core/exceptions.py

Engine errors (rejected assessments, concurrent writes) and repository errors.
Each engine error carries a machine-readable error_code and the HTTP status
the calling API should surface.
"""

from typing import Any, Dict, Optional


class ProfileEngineException(Exception):
    """Base exception for consolidation failures."""

    error_code: str = "PROFILE_ENGINE_ERROR"
    http_status: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class EmptyAssessment(ProfileEngineException):
    """Assessment carries no skill scores."""

    error_code = "EMPTY_ASSESSMENT"
    http_status = 422

    def __init__(self, assessment_id: str):
        self.assessment_id = assessment_id
        super().__init__(
            f"Assessment {assessment_id} has no skill scores",
            details={"assessment_id": assessment_id},
        )


class OutOfRangeScore(ProfileEngineException):
    """Skill score outside the native range of its scoring version."""

    error_code = "OUT_OF_RANGE_SCORE"
    http_status = 422

    def __init__(self, skill: Optional[str], value: Any, version: str, native_max: Any):
        self.skill = skill
        self.value = value
        self.version = version
        self.native_max = native_max
        label = f"'{skill}' " if skill else ""
        super().__init__(
            f"Score {label}{value} is outside [0, {native_max}] for {version}",
            details={
                "skill": skill,
                "value": str(value),
                "scoring_version": version,
                "native_max": str(native_max),
            },
        )


class StaleProfileVersion(ProfileEngineException):
    """Profile changed since the caller read it; reload and retry."""

    error_code = "STALE_PROFILE_VERSION"
    http_status = 409

    def __init__(self, profile_id: str, expected_version: Optional[int], actual_version: Optional[int]):
        self.profile_id = profile_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Profile {profile_id} is at version {actual_version}, expected {expected_version}",
            details={
                "profile_id": profile_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )


class RepositoryException(Exception):
    """Base exception for profile store operations."""

    error_code: str = "REPOSITORY_ERROR"
    http_status: int = 500


class EntityNotFoundException(RepositoryException):
    """Entity not found in the store."""

    error_code = "ENTITY_NOT_FOUND"
    http_status = 404

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class DatabaseConnectionException(RepositoryException):
    """Store connection failure."""

    error_code = "DATABASE_CONNECTION_ERROR"
    http_status = 503

    def __init__(self, message: str = "Profile store connection failed"):
        self.message = message
        super().__init__(message)


class CorruptProfileException(RepositoryException):
    """Stored profile data could not be parsed."""

    error_code = "CORRUPT_PROFILE_DATA"
    http_status = 500

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Stored profile at {key} is unreadable: {reason}")
