from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import uuid4
from datetime import datetime, timezone
from typing import Dict, Optional

import structlog

from progressive_profile.models.enumerations import RespondentType, ScoringVersion

logger = structlog.get_logger(__name__)


class Assessment(BaseModel):
    """
    One submitted assessment of a child, already scored per skill.

    Immutable once built; the engine never modifies an assessment.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique assessment identifier"
    )

    child_name: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Name of the assessed child"
    )

    age_group: str = Field(
        default="5+",
        description="Age band the questionnaire was drawn from (3-4, 4-5, 5+, ...)"
    )

    quiz_type: str = Field(
        ...,
        min_length=1,
        description="Assessment instrument (parent_home, teacher_classroom, general, ...)"
    )

    respondent_type: RespondentType = Field(
        ...,
        description="Who answered: parent, teacher or other"
    )

    respondent_name: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Display name of the respondent"
    )

    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Submission timestamp (UTC)"
    )

    scoring_version: ScoringVersion = Field(
        default=ScoringVersion.CLP2,
        description="Scale the skill scores are expressed on"
    )

    skill_scores: Dict[str, float] = Field(
        default_factory=dict,
        description="Skill name -> score on the scoring version's native scale"
    )

    completeness_of_answers: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Fraction of expected questions that were answered"
    )

    personality_label: Optional[str] = Field(
        default=None,
        description="Label derived from scores by the external labelling step"
    )

    existing_profile_id: Optional[str] = Field(
        default=None,
        description="Profile this assessment should be merged into, when known"
    )

    @field_validator("respondent_type", mode="before")
    @classmethod
    def coerce_unknown_respondent(cls, v):
        """Unrecognized respondent types count as 'other' instead of blocking ingestion."""
        if isinstance(v, RespondentType):
            return v
        if v is None or not str(v).strip():
            raise ValueError("respondent_type is required")
        value = str(v).strip().lower()
        try:
            return RespondentType(value)
        except ValueError:
            logger.warning("unknown_respondent_type", respondent_type=v, fallback=RespondentType.OTHER.value)
            return RespondentType.OTHER

    @field_validator("scoring_version", mode="before")
    @classmethod
    def parse_scoring_version(cls, v):
        if isinstance(v, ScoringVersion):
            return v
        return ScoringVersion(v)

    @field_validator("skill_scores")
    @classmethod
    def strip_skill_names(cls, v: Dict[str, float]) -> Dict[str, float]:
        cleaned = {}
        for skill, score in v.items():
            name = skill.strip()
            if not name:
                raise ValueError("Skill names must not be blank")
            cleaned[name] = score
        return cleaned
