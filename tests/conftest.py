# tests/conftest.py

"""
Pytest Fixtures - Shared engine components and assessment data

SCENARIO REFERENCE (Legacy 0-5 scale):
- Aligned:     parent {Communication 4.5, Collaboration 5.0, Math 2.5}
               teacher {Communication 3.8, Collaboration 4.8, Math 2.2}
- Conflicting: parent Confidence 5.0 vs teacher Confidence 2.0
"""

import pytest

from progressive_profile.consolidation.completeness_estimator import CompletenessEstimator
from progressive_profile.consolidation.confidence_estimator import ConfidenceEstimator
from progressive_profile.consolidation.conflict_detector import ConflictDetector
from progressive_profile.consolidation.profile_consolidator import ProfileConsolidator
from progressive_profile.consolidation.scale_normalizer import ScaleNormalizer
from progressive_profile.consolidation.score_merger import ScoreMerger
from progressive_profile.consolidation.weighting_table import WeightingTable
from progressive_profile.models.assessment import Assessment
from progressive_profile.models.enumerations import RespondentType, ScoringVersion
from progressive_profile.repositories.memory_store import InMemoryProfileStore
from progressive_profile.services.profile_service import ProgressiveProfileService


# =============================================================================
# ENGINE COMPONENT FIXTURES
# =============================================================================

@pytest.fixture
def normalizer():
    return ScaleNormalizer()


@pytest.fixture
def weighting_table():
    """Bundled weighting table (parent_home, teacher_classroom, general)."""
    return WeightingTable.default()


@pytest.fixture
def merger(normalizer):
    return ScoreMerger(normalizer)


@pytest.fixture
def confidence_estimator(weighting_table):
    return ConfidenceEstimator(weighting_table)


@pytest.fixture
def completeness_estimator():
    return CompletenessEstimator()


@pytest.fixture
def conflict_detector():
    return ConflictDetector()


@pytest.fixture
def consolidator(weighting_table):
    return ProfileConsolidator(table=weighting_table)


# =============================================================================
# PERSISTENCE & SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def store():
    """Fresh in-memory store per test."""
    return InMemoryProfileStore()


@pytest.fixture
def service(store, consolidator):
    return ProgressiveProfileService(store=store, consolidator=consolidator)


# =============================================================================
# ASSESSMENT FIXTURES
# =============================================================================

@pytest.fixture
def make_assessment():
    """Factory for assessments with parent_home / CLP2 defaults."""

    def _make(**overrides):
        data = {
            "child_name": "Maya Chen",
            "quiz_type": "parent_home",
            "respondent_type": RespondentType.PARENT,
            "respondent_name": "Li Chen",
            "scoring_version": ScoringVersion.CLP2,
            "skill_scores": {"Communication": 2.5, "Math": 1.5},
        }
        data.update(overrides)
        return Assessment(**data)

    return _make


@pytest.fixture
def parent_aligned(make_assessment):
    """Parent half of the aligned scenario."""
    return make_assessment(
        scoring_version=ScoringVersion.LEGACY,
        skill_scores={"Communication": 4.5, "Collaboration": 5.0, "Math": 2.5},
    )


@pytest.fixture
def teacher_aligned(make_assessment):
    """Teacher half of the aligned scenario."""
    return make_assessment(
        quiz_type="teacher_classroom",
        respondent_type=RespondentType.TEACHER,
        respondent_name="Ms. Alvarez",
        scoring_version=ScoringVersion.LEGACY,
        skill_scores={"Communication": 3.8, "Collaboration": 4.8, "Math": 2.2},
    )


@pytest.fixture
def parent_confident(make_assessment):
    return make_assessment(
        scoring_version=ScoringVersion.LEGACY,
        skill_scores={"Confidence": 5.0},
    )


@pytest.fixture
def teacher_hesitant(make_assessment):
    return make_assessment(
        quiz_type="teacher_classroom",
        respondent_type=RespondentType.TEACHER,
        respondent_name="Ms. Alvarez",
        scoring_version=ScoringVersion.LEGACY,
        skill_scores={"Confidence": 2.0},
    )
