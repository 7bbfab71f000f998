"""
consolidation/completeness_estimator.py - Completeness Estimator

How much of the child's world the profile covers.

Formula:
    quality(t) = mean(completeness_of_answers of type t's assessments)
    tiers      = SINGLE, FULL - SINGLE, EXTRA_BONUS   (first, second, third context)
    result     = round(min(100, Σ tier_i × quality_i))

Qualities are sorted best first, so the largest tier goes to the
best-answered context. Adding a respondent type never lowers the result;
a partially answered assessment only discounts the tier its type earns.

"other" counts as a context but parent + teacher alone already reach FULL.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

import structlog

from progressive_profile.config import settings
from progressive_profile.consolidation.utils import clamp, mean
from progressive_profile.models.enumerations import RespondentType

logger = structlog.get_logger(__name__)


class CompletenessEstimator:
    """Blend context coverage with answer quality into a 0-100 percentage."""

    def __init__(
        self,
        single_context: Optional[float] = None,
        full_context: Optional[float] = None,
        extra_context_bonus: Optional[float] = None,
    ):
        self.single_context = Decimal(str(
            settings.COMPLETENESS_SINGLE_CONTEXT if single_context is None else single_context
        ))
        self.full_context = Decimal(str(
            settings.COMPLETENESS_FULL_CONTEXT if full_context is None else full_context
        ))
        self.extra_context_bonus = Decimal(str(
            settings.COMPLETENESS_EXTRA_CONTEXT_BONUS if extra_context_bonus is None else extra_context_bonus
        ))

    def context_points(self, context_count: int) -> Decimal:
        if context_count <= 0:
            return Decimal("0")
        if context_count == 1:
            return self.single_context
        if context_count == 2:
            return self.full_context
        return self.full_context + self.extra_context_bonus

    def tiers(self) -> List[Decimal]:
        """Points added by the first, second and third distinct context."""
        return [
            self.single_context,
            self.full_context - self.single_context,
            self.extra_context_bonus,
        ]

    def completeness(
        self,
        respondent_types: Iterable[RespondentType],
        answer_completeness: Iterable[float],
    ) -> float:
        """
        Completeness percentage for a profile.

        Args:
            respondent_types: Respondent type of each contributing assessment.
            answer_completeness: completeness_of_answers of the same
                                 assessments, in the same order.

        Raises:
            ValueError: If the two sequences differ in length.

        Examples:
            >>> est = CompletenessEstimator()
            >>> est.completeness([RespondentType.PARENT], [1.0])
            60.0
            >>> est.completeness([RespondentType.PARENT, RespondentType.TEACHER], [1.0, 1.0])
            90.0
            >>> est.completeness([RespondentType.PARENT], [0.4])
            24.0
        """
        types = [RespondentType(t) for t in respondent_types]
        qualities = [clamp(Decimal(str(q)), Decimal("0"), Decimal("1")) for q in answer_completeness]
        if len(types) != len(qualities):
            raise ValueError("respondent_types and answer_completeness must have same length")

        by_type: Dict[RespondentType, List[Decimal]] = {}
        for respondent_type, quality in zip(types, qualities):
            by_type.setdefault(respondent_type, []).append(quality)

        ranked = sorted((mean(values) for values in by_type.values()), reverse=True)
        raw = sum((tier * quality for tier, quality in zip(self.tiers(), ranked)), Decimal("0"))
        result = min(Decimal("100"), raw).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

        logger.debug(
            "completeness_calculated",
            contexts=sorted(t.value for t in by_type),
            context_points=float(self.context_points(len(by_type))),
            context_quality=[float(q) for q in ranked],
            completeness=float(result),
        )
        return float(result)
