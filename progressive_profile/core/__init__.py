"""
Core Package - Progressive Profile Engine
progressive_profile/core/__init__.py

Core infrastructure: exceptions, logging. Wiring lives in
progressive_profile.core.dependencies (import it directly).
"""

from progressive_profile.core.exceptions import (
    CorruptProfileException,
    DatabaseConnectionException,
    EmptyAssessment,
    EntityNotFoundException,
    OutOfRangeScore,
    ProfileEngineException,
    RepositoryException,
    StaleProfileVersion,
)
from progressive_profile.core.logging import configure_logging

__all__ = [
    # Exceptions
    "CorruptProfileException",
    "DatabaseConnectionException",
    "EmptyAssessment",
    "EntityNotFoundException",
    "OutOfRangeScore",
    "ProfileEngineException",
    "RepositoryException",
    "StaleProfileVersion",
    # Logging
    "configure_logging",
]
