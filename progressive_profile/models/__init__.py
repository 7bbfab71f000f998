"""
Models Package - Progressive Profile Engine
progressive_profile/models/__init__.py

Pydantic models for assessments, consolidated profiles and results.
"""

from progressive_profile.models.assessment import Assessment
from progressive_profile.models.enumerations import (
    CLP2_SKILLS,
    EXPECTED_CONTEXTS,
    LEGACY_SKILLS,
    ConfidenceLevel,
    ConflictSignificance,
    RespondentType,
    ScoringVersion,
)
from progressive_profile.models.profile import (
    ConflictFlag,
    ConsolidatedProfile,
    ConsolidationAnalysis,
    ConsolidationOutcome,
    ContributionSummary,
    ContextualRecommendations,
    DataSource,
    ErrorResponse,
    SkillAccumulator,
    SourceCount,
)

__all__ = [
    "Assessment",
    "CLP2_SKILLS",
    "EXPECTED_CONTEXTS",
    "LEGACY_SKILLS",
    "ConfidenceLevel",
    "ConflictSignificance",
    "RespondentType",
    "ScoringVersion",
    "ConflictFlag",
    "ConsolidatedProfile",
    "ConsolidationAnalysis",
    "ConsolidationOutcome",
    "ContributionSummary",
    "ContextualRecommendations",
    "DataSource",
    "ErrorResponse",
    "SkillAccumulator",
    "SourceCount",
]
