from pydantic import BaseModel, Field, model_validator
from uuid import uuid4
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from progressive_profile.models.enumerations import (
    ConfidenceLevel,
    ConflictSignificance,
    RespondentType,
    ScoringVersion,
)


class SkillAccumulator(BaseModel):
    """Merge state of one skill: normalized value plus the weight behind it."""

    value: Decimal = Field(..., ge=0, le=1, description="Score on the normalized [0, 1] scale")
    accumulated_weight: Decimal = Field(..., gt=0, description="Sum of contributing weights")


class DataSource(BaseModel):
    """One assessment's contribution to a profile."""

    assessment_id: str
    quiz_type: str
    respondent_type: RespondentType
    respondent_name: Optional[str] = None
    contributed_at: datetime
    scoring_version: ScoringVersion
    base_weight: float = Field(..., gt=0)
    confidence_contribution: float = Field(..., ge=0, description="Confidence points this source added")
    answer_completeness: float = Field(default=1.0, ge=0, le=1)
    is_current: bool = Field(default=True, description="Latest contribution of its respondent type")


class ConflictFlag(BaseModel):
    """Two respondent types scored the same skill very differently."""

    skill: str
    differential: float = Field(..., ge=0, le=1, description="Absolute difference on the normalized scale")
    significance: ConflictSignificance
    sources: List[RespondentType] = Field(..., min_length=2, max_length=2)
    recommendation: Optional[str] = None


class ConsolidatedProfile(BaseModel):
    """
    The evolving aggregate of every assessment for one child.

    Owned by the profile consolidator; persisted by a ProfileStore.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    child_name: str = Field(..., min_length=1)
    age_group: Optional[str] = None

    scoring_version: ScoringVersion = Field(
        ...,
        description="Version of the newest contributing assessment; CLP2 once any CLP2 arrives"
    )

    consolidated_scores: Dict[str, float] = Field(
        default_factory=dict,
        description=(
            "Skill -> score on the profile's native scale, quantized to 0.01 (ROUND_HALF_UP). "
            "Single-source skills are rounded the same way; skill_state keeps the exact value"
        )
    )
    skill_state: Dict[str, SkillAccumulator] = Field(default_factory=dict)
    respondent_snapshots: Dict[RespondentType, Dict[str, SkillAccumulator]] = Field(
        default_factory=dict,
        description="Per-respondent-type merged scores (normalized), input to conflict detection"
    )

    confidence_percentage: float = Field(default=0.0, ge=0, le=100)
    completeness_percentage: float = Field(default=0.0, ge=0, le=100)

    total_assessments: int = Field(default=0, ge=0)
    parent_assessments: int = Field(default=0, ge=0)
    teacher_assessments: int = Field(default=0, ge=0)
    other_assessments: int = Field(default=0, ge=0)

    data_sources: List[DataSource] = Field(default_factory=list)
    conflicts: List[ConflictFlag] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    growth_areas: List[str] = Field(default_factory=list)
    personality_label: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = Field(default=1, ge=1, description="Optimistic-concurrency counter")

    @model_validator(mode="after")
    def validate_assessment_counts(self):
        """total_assessments must equal the per-respondent counters."""
        per_type = self.parent_assessments + self.teacher_assessments + self.other_assessments
        if self.total_assessments != per_type:
            raise ValueError(
                f"total_assessments ({self.total_assessments}) must equal "
                f"parent + teacher + other ({per_type})"
            )
        return self

    def count_for(self, respondent_type: RespondentType) -> int:
        """Assessments received so far from one respondent type."""
        return {
            RespondentType.PARENT: self.parent_assessments,
            RespondentType.TEACHER: self.teacher_assessments,
            RespondentType.OTHER: self.other_assessments,
        }[respondent_type]


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    http_status: int = Field(default=500, description="Status the calling API should return")
    details: Optional[dict] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error occurrence timestamp")


class ContributionSummary(BaseModel):
    """What one submission changed on its profile."""

    quiz_type: str
    respondent_type: RespondentType
    weight: float
    confidence_boost: float
    new_confidence: float
    new_completeness: float


class ConsolidationOutcome(BaseModel):
    """Typed result of a submission: a profile, or an error, never both."""

    profile: Optional[ConsolidatedProfile] = None
    is_new_profile: bool = False
    contribution: Optional[ContributionSummary] = None
    error: Optional[ErrorResponse] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceCount(BaseModel):
    respondent_type: RespondentType
    count: int


class ContextualRecommendations(BaseModel):
    """Support suggestions built from the top strength and top growth area."""

    home_activities: List[str]
    classroom_strategies: List[str]
    general_support: List[str]


class ConsolidationAnalysis(BaseModel):
    """Read-only status report over a consolidated profile."""

    profile_id: str
    confidence_level: ConfidenceLevel
    completeness_percentage: float
    data_sources: List[SourceCount]
    missing_contexts: List[str]
    unassessed_skills: List[str]
    high_conflicts: List[str]
    strengths: List[str]
    recommendations: List[str]
    contextual_recommendations: ContextualRecommendations
