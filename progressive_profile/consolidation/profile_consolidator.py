"""
consolidation/profile_consolidator.py - Profile Consolidator

Merges one assessment into a child's consolidated profile.

Class: ProfileConsolidator
Method: consolidate(existing, incoming, expected_version=None) -> ConsolidatedProfile

Steps:
  1.  Reject empty assessments (EmptyAssessment)
  2.  Normalize every score, all or nothing (OutOfRangeScore)
  3.  Check the caller's expected version (StaleProfileVersion)
  4.  WeightingTable -> base weight / confidence boost
  5.  ScoreMerger -> consolidated state and per-respondent snapshot
  6.  ConflictDetector.measure_agreement -> agreement with other contexts
  7.  ConfidenceEstimator -> confidence
  8.  Counters and data_sources
  9.  CompletenessEstimator -> completeness
  10. ConflictDetector -> conflicts over all snapshots
  11. Strengths / growth areas / recommendations
  12. Build a fresh profile with version + 1

The input profile is never modified; callers may keep reading it while a
consolidation is in progress.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

import structlog

from progressive_profile.config import settings
from progressive_profile.consolidation.analysis import next_assessment_recommendations
from progressive_profile.consolidation.completeness_estimator import CompletenessEstimator
from progressive_profile.consolidation.confidence_estimator import ConfidenceEstimator
from progressive_profile.consolidation.conflict_detector import ConflictDetector
from progressive_profile.consolidation.scale_normalizer import ScaleNormalizer
from progressive_profile.consolidation.score_merger import ScoreMerger, SkillState
from progressive_profile.consolidation.weighting_table import WeightingTable
from progressive_profile.core.exceptions import EmptyAssessment, StaleProfileVersion
from progressive_profile.models.assessment import Assessment
from progressive_profile.models.enumerations import RespondentType, ScoringVersion
from progressive_profile.models.profile import ConsolidatedProfile, DataSource

logger = structlog.get_logger(__name__)

COUNTER_FIELDS = {
    RespondentType.PARENT: "parent_assessments",
    RespondentType.TEACHER: "teacher_assessments",
    RespondentType.OTHER: "other_assessments",
}


def rank_skills(state: SkillState, count: int) -> Tuple[List[str], List[str]]:
    """
    Top and bottom skills of a consolidated state.

    Both lists hold min(count, max(1, skills // 2)) entries so they never
    overlap; a single skill is a strength and leaves growth_areas empty.
    Growth areas are ordered weakest first.

    Examples:
        >>> from decimal import Decimal
        >>> from progressive_profile.models.profile import SkillAccumulator
        >>> acc = lambda v: SkillAccumulator(value=Decimal(v), accumulated_weight=Decimal("1"))
        >>> rank_skills({"Math": acc("0.2"), "Content": acc("0.9"), "Literacy": acc("0.5")}, 3)
        (['Content'], ['Math'])
    """
    if not state:
        return [], []
    ranked = sorted(state, key=lambda skill: (-state[skill].value, skill))
    n = min(count, max(1, len(ranked) // 2))
    strengths = ranked[:n]
    growth_areas = [s for s in reversed(ranked[len(ranked) - n:]) if s not in strengths]
    return strengths, growth_areas


class ProfileConsolidator:
    """Fold assessments, one at a time, into a consolidated profile."""

    def __init__(
        self,
        table: Optional[WeightingTable] = None,
        normalizer: Optional[ScaleNormalizer] = None,
        merger: Optional[ScoreMerger] = None,
        confidence: Optional[ConfidenceEstimator] = None,
        completeness: Optional[CompletenessEstimator] = None,
        detector: Optional[ConflictDetector] = None,
        strengths_count: Optional[int] = None,
    ):
        self.table = table or WeightingTable.default()
        self.normalizer = normalizer or ScaleNormalizer()
        self.merger = merger or ScoreMerger(self.normalizer)
        self.confidence = confidence or ConfidenceEstimator(self.table)
        self.completeness = completeness or CompletenessEstimator()
        self.detector = detector or ConflictDetector()
        self.strengths_count = strengths_count or settings.STRENGTHS_COUNT

    def consolidate(
        self,
        existing: Optional[ConsolidatedProfile],
        incoming: Assessment,
        expected_version: Optional[int] = None,
    ) -> ConsolidatedProfile:
        """
        Merge one assessment into a profile.

        Args:
            existing: Current profile, or None to start a new one.
            incoming: The submitted assessment.
            expected_version: Version the caller believes ``existing`` is at.

        Returns:
            A new ConsolidatedProfile; ``existing`` is left untouched.

        Raises:
            EmptyAssessment: no skill scores.
            OutOfRangeScore: any score outside its version's native range.
            StaleProfileVersion: ``existing`` is not at ``expected_version``.
        """
        # 1-2. Validate everything before touching any state
        if not incoming.skill_scores:
            raise EmptyAssessment(incoming.id)
        normalized = self.normalizer.normalize_scores(incoming.skill_scores, incoming.scoring_version)

        # 3. Optimistic concurrency
        if expected_version is not None:
            actual = existing.version if existing is not None else None
            if actual != expected_version:
                logger.warning(
                    "stale_profile_version",
                    profile_id=existing.id if existing is not None else incoming.existing_profile_id,
                    expected_version=expected_version,
                    actual_version=actual,
                )
                raise StaleProfileVersion(
                    existing.id if existing is not None else (incoming.existing_profile_id or ""),
                    expected_version,
                    actual,
                )

        is_new = existing is None
        respondent = incoming.respondent_type
        now = datetime.now(timezone.utc)

        # 4. Weights
        weight = self.table.weight_of(incoming.quiz_type, respondent)

        # 5. Merge scores
        prior_state = {} if is_new else existing.skill_state
        prior_snapshots: Dict[RespondentType, SkillState] = {} if is_new else existing.respondent_snapshots

        skill_state = self.merger.merge(prior_state, normalized, weight.base_weight)
        snapshots = {t: dict(s) for t, s in prior_snapshots.items()}
        snapshots[respondent] = self.merger.merge(prior_snapshots.get(respondent), normalized, weight.base_weight)

        if is_new or incoming.scoring_version == ScoringVersion.CLP2:
            scoring_version = incoming.scoring_version
        else:
            # A Legacy assessment never reverts a CLP2 profile
            scoring_version = existing.scoring_version

        # 6-7. Confidence
        same_type_count = 0 if is_new else existing.count_for(respondent)
        agreement = self.detector.measure_agreement(normalized, respondent, prior_snapshots)
        confidence = self.confidence.next_confidence(
            current=0 if is_new else existing.confidence_percentage,
            respondent_type=respondent,
            quiz_type=incoming.quiz_type,
            same_type_count=same_type_count,
            agreement=agreement.agreement if agreement else None,
            conflict_ratio=agreement.conflict_ratio if agreement else 0,
        )

        # 8. Counters and sources
        counters = {
            field: 0 if is_new else getattr(existing, field)
            for field in COUNTER_FIELDS.values()
        }
        counters[COUNTER_FIELDS[respondent]] += 1

        data_sources = [] if is_new else [
            ds.model_copy(update={"is_current": False}) if ds.respondent_type == respondent else ds.model_copy()
            for ds in existing.data_sources
        ]
        data_sources.append(DataSource(
            assessment_id=incoming.id,
            quiz_type=incoming.quiz_type,
            respondent_type=respondent,
            respondent_name=incoming.respondent_name,
            contributed_at=incoming.submitted_at,
            scoring_version=incoming.scoring_version,
            base_weight=float(weight.base_weight),
            confidence_contribution=float(confidence.delta),
            answer_completeness=incoming.completeness_of_answers,
            is_current=True,
        ))

        # 9. Completeness
        completeness = self.completeness.completeness(
            [ds.respondent_type for ds in data_sources],
            [ds.answer_completeness for ds in data_sources],
        )

        # 10-11. Derived fields
        conflicts = self.detector.detect_conflicts(snapshots)
        strengths, growth_areas = rank_skills(skill_state, self.strengths_count)

        profile = ConsolidatedProfile(
            id=(incoming.existing_profile_id or str(uuid4())) if is_new else existing.id,
            child_name=incoming.child_name if is_new else existing.child_name,
            age_group=incoming.age_group,
            scoring_version=scoring_version,
            consolidated_scores=self.merger.to_native(skill_state, scoring_version),
            skill_state=skill_state,
            respondent_snapshots=snapshots,
            confidence_percentage=float(confidence.confidence),
            completeness_percentage=completeness,
            total_assessments=sum(counters.values()),
            data_sources=data_sources,
            conflicts=conflicts,
            strengths=strengths,
            growth_areas=growth_areas,
            personality_label=incoming.personality_label or (None if is_new else existing.personality_label),
            created_at=now if is_new else existing.created_at,
            updated_at=now,
            version=1 if is_new else existing.version + 1,
            **counters,
        )
        # 12. Recommendations depend on the finished counters
        profile.recommendations = next_assessment_recommendations(profile)

        logger.info(
            "profile_consolidated",
            profile_id=profile.id,
            is_new_profile=is_new,
            respondent_type=respondent.value,
            quiz_type=incoming.quiz_type,
            scoring_version=scoring_version.value,
            confidence=profile.confidence_percentage,
            completeness=profile.completeness_percentage,
            total_assessments=profile.total_assessments,
            conflicts=len(conflicts),
            version=profile.version,
        )
        return profile
