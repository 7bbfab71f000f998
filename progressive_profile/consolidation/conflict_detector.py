"""
consolidation/conflict_detector.py - Conflict Detector

Flags skills that different respondent types scored very differently.
Read-only: scores are compared, never changed.

Classification on the normalized [0, 1] scale (differential = |a − b|):
    differential > HIGH   (0.4, two Legacy points)  -> high
    differential > MEDIUM (0.2, one Legacy point)   -> medium
    otherwise                                       -> low, not reported

When three respondent types share a skill, the most divergent pair is the
one reported.
"""

from dataclasses import dataclass
from decimal import Decimal
from itertools import combinations
from typing import Dict, List, Mapping, Optional, Union

import structlog

from progressive_profile.config import settings
from progressive_profile.consolidation.utils import clamp, mean
from progressive_profile.models.enumerations import ConflictSignificance, RespondentType
from progressive_profile.models.profile import ConflictFlag, SkillAccumulator

logger = structlog.get_logger(__name__)

ScoreLike = Union[Decimal, float, SkillAccumulator]

CONTEXT_LABELS: Dict[RespondentType, str] = {
    RespondentType.PARENT: "home",
    RespondentType.TEACHER: "school",
    RespondentType.OTHER: "other",
}

SIGNIFICANCE_ORDER = {
    ConflictSignificance.HIGH: 0,
    ConflictSignificance.MEDIUM: 1,
    ConflictSignificance.LOW: 2,
}


@dataclass
class AgreementResult:
    """Output of ConflictDetector.measure_agreement()."""
    agreement: Decimal        # [0, 1], 1 = identical scores
    conflict_ratio: Decimal   # share of compared pairs above the high threshold
    mean_differential: Decimal
    compared: int             # (skill, other respondent type) pairs compared


def _value(score: ScoreLike) -> Decimal:
    if isinstance(score, SkillAccumulator):
        return score.value
    return Decimal(str(score))


class ConflictDetector:
    """Compare per-respondent-type scores and annotate disagreements."""

    def __init__(
        self,
        medium_threshold: Optional[float] = None,
        high_threshold: Optional[float] = None,
    ):
        self.medium_threshold = Decimal(str(
            settings.CONFLICT_MEDIUM_THRESHOLD if medium_threshold is None else medium_threshold
        ))
        self.high_threshold = Decimal(str(
            settings.CONFLICT_HIGH_THRESHOLD if high_threshold is None else high_threshold
        ))
        if self.medium_threshold >= self.high_threshold:
            raise ValueError("medium_threshold must be below high_threshold")

    def classify(self, differential: Union[Decimal, float]) -> ConflictSignificance:
        """
        Examples:
            >>> ConflictDetector().classify(0.6)
            <ConflictSignificance.HIGH: 'high'>
        """
        diff = Decimal(str(differential))
        if diff > self.high_threshold:
            return ConflictSignificance.HIGH
        if diff > self.medium_threshold:
            return ConflictSignificance.MEDIUM
        return ConflictSignificance.LOW

    @staticmethod
    def recommendation_for(
        skill: str,
        significance: ConflictSignificance,
        sources: List[RespondentType],
    ) -> Optional[str]:
        if significance == ConflictSignificance.LOW:
            return None
        if set(sources) == {RespondentType.PARENT, RespondentType.TEACHER}:
            contexts = "home and school behavior"
        else:
            contexts = " and ".join(f"{CONTEXT_LABELS[s]} reports" for s in sources)
        if significance == ConflictSignificance.HIGH:
            return f"Significant differences between {contexts} noted for {skill}"
        return f"Some variation between {contexts} observed for {skill}"

    def detect_conflicts(
        self,
        scores_by_type: Mapping[RespondentType, Mapping[str, ScoreLike]],
    ) -> List[ConflictFlag]:
        """
        Flag skills whose scores differ across respondent types.

        Args:
            scores_by_type: Respondent type -> skill -> normalized score
                            (Decimal/float in [0, 1] or a SkillAccumulator).

        Returns:
            Medium and high flags, high first, then by differential descending.
        """
        types = [t for t in RespondentType if scores_by_type.get(t)]
        skills = sorted({skill for t in types for skill in scores_by_type[t]})

        flags: List[ConflictFlag] = []
        for skill in skills:
            present = [t for t in types if skill in scores_by_type[t]]
            if len(present) < 2:
                continue

            worst_pair = None
            worst_diff = Decimal("-1")
            for a, b in combinations(present, 2):
                diff = abs(_value(scores_by_type[a][skill]) - _value(scores_by_type[b][skill]))
                if diff > worst_diff:
                    worst_pair, worst_diff = [a, b], diff

            significance = self.classify(worst_diff)
            if significance == ConflictSignificance.LOW:
                continue

            flags.append(ConflictFlag(
                skill=skill,
                differential=float(clamp(worst_diff, Decimal("0"), Decimal("1")).quantize(Decimal("0.0001"))),
                significance=significance,
                sources=worst_pair,
                recommendation=self.recommendation_for(skill, significance, worst_pair),
            ))

        flags.sort(key=lambda f: (SIGNIFICANCE_ORDER[f.significance], -f.differential, f.skill))

        logger.info(
            "conflicts_detected",
            respondent_types=[t.value for t in types],
            skills_compared=len(skills),
            high=sum(1 for f in flags if f.significance == ConflictSignificance.HIGH),
            medium=sum(1 for f in flags if f.significance == ConflictSignificance.MEDIUM),
        )
        return flags

    def measure_agreement(
        self,
        incoming: Mapping[str, ScoreLike],
        respondent_type: RespondentType,
        snapshots: Mapping[RespondentType, Mapping[str, ScoreLike]],
    ) -> Optional[AgreementResult]:
        """
        How closely incoming scores match the other respondent types.

        Formula:
            agreement      = clamp(1 − mean_differential / HIGH, 0, 1)
            conflict_ratio = pairs with differential > HIGH / pairs compared

        Returns None when no skill overlaps another respondent type.

        Examples:
            >>> det = ConflictDetector()
            >>> result = det.measure_agreement(
            ...     {"Math": Decimal("0.5")},
            ...     RespondentType.TEACHER,
            ...     {RespondentType.PARENT: {"Math": Decimal("0.42")}},
            ... )
            >>> result.agreement
            Decimal('0.8')
        """
        diffs: List[Decimal] = []
        for other_type, other_scores in snapshots.items():
            if other_type == respondent_type:
                continue
            for skill, score in incoming.items():
                if skill in other_scores:
                    diffs.append(abs(_value(score) - _value(other_scores[skill])))

        if not diffs:
            return None

        mean_diff = mean(diffs)
        agreement = clamp(Decimal("1") - mean_diff / self.high_threshold, Decimal("0"), Decimal("1"))
        in_conflict = sum(1 for d in diffs if d > self.high_threshold)
        return AgreementResult(
            agreement=agreement,
            conflict_ratio=Decimal(in_conflict) / Decimal(len(diffs)),
            mean_differential=mean_diff,
            compared=len(diffs),
        )
