"""
consolidation/confidence_estimator.py - Confidence Estimator

Advances a profile's confidence percentage by one assessment.

Formula:
    raw       = confidence_boost(quiz_type, respondent_type)
    diminish  = 1 / (n + 1)         n = prior assessments of the same respondent type
    damping   = 1 − CONFLICT_DAMPING × conflict_ratio
    bonus     = CORROBORATION_BONUS × agreement     (first assessment of a type only)
    effective = raw × diminish × damping + bonus
    next      = min(100, current + effective)

Every term is non-negative, so confidence never decreases. Without an
agreement measurement the formula reduces to raw × diminish.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

import structlog

from progressive_profile.config import settings
from progressive_profile.consolidation.utils import clamp
from progressive_profile.consolidation.weighting_table import WeightingTable
from progressive_profile.models.enumerations import RespondentType

logger = structlog.get_logger(__name__)

ONE = Decimal("1")
HUNDRED = Decimal("100")


def diminish_factor(same_type_count: int) -> Decimal:
    """
    Share of the raw boost granted to the (n+1)-th assessment of one type.

    Examples:
        >>> diminish_factor(0)
        Decimal('1')
        >>> diminish_factor(1)
        Decimal('0.5')
    """
    if same_type_count < 0:
        raise ValueError(f"same_type_count must be >= 0, got {same_type_count}")
    return ONE / Decimal(same_type_count + 1)


@dataclass
class ConfidenceResult:
    """Output of ConfidenceEstimator.next_confidence()."""
    confidence: Decimal        # [0, 100] quantized to 0.01
    previous: Decimal
    raw_boost: Decimal         # table boost before any adjustment
    effective_boost: Decimal   # boost actually applied, before the 100 cap
    diminish: Decimal
    corroboration: Decimal     # agreement bonus included in effective_boost
    is_fallback: bool          # quiz type missing from the weighting table

    @property
    def delta(self) -> Decimal:
        return self.confidence - self.previous


class ConfidenceEstimator:
    """Accumulate confidence with diminishing returns per respondent type."""

    def __init__(
        self,
        table: Optional[WeightingTable] = None,
        corroboration_bonus: Optional[float] = None,
        conflict_damping: Optional[float] = None,
    ):
        self.table = table or WeightingTable.default()
        self.corroboration_bonus = Decimal(str(
            settings.CORROBORATION_BONUS if corroboration_bonus is None else corroboration_bonus
        ))
        self.conflict_damping = Decimal(str(
            settings.CONFLICT_DAMPING if conflict_damping is None else conflict_damping
        ))

    def next_confidence(
        self,
        current: Union[float, Decimal],
        respondent_type: RespondentType,
        quiz_type: str,
        same_type_count: int,
        agreement: Optional[Union[float, Decimal]] = None,
        conflict_ratio: Union[float, Decimal] = 0,
    ) -> ConfidenceResult:
        """
        Confidence after one more assessment.

        Args:
            current: Confidence before this assessment, in [0, 100].
            respondent_type: Who answered the incoming assessment.
            quiz_type: Instrument of the incoming assessment.
            same_type_count: Assessments of this respondent type already merged.
            agreement: Cross-context agreement in [0, 1], when the incoming
                       scores overlap another respondent type.
            conflict_ratio: Share of overlapping skills in high conflict.

        Examples:
            >>> est = ConfidenceEstimator()
            >>> est.next_confidence(0, RespondentType.PARENT, "parent_home", 0).confidence
            Decimal('30.00')
        """
        previous = clamp(Decimal(str(current)), Decimal("0"), HUNDRED)
        weight = self.table.weight_of(quiz_type, respondent_type)
        raw = weight.confidence_boost
        diminish = diminish_factor(same_type_count)

        ratio = clamp(Decimal(str(conflict_ratio)), Decimal("0"), ONE)
        damping = ONE - self.conflict_damping * ratio

        corroboration = Decimal("0")
        if agreement is not None and same_type_count == 0:
            corroboration = self.corroboration_bonus * clamp(Decimal(str(agreement)), Decimal("0"), ONE)

        effective = raw * diminish * damping + corroboration
        confidence = min(HUNDRED, previous + effective).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        # Rounding must not take back what the caller already had
        confidence = max(confidence, previous)

        logger.info(
            "confidence_calculated",
            respondent_type=getattr(respondent_type, "value", respondent_type),
            quiz_type=quiz_type,
            same_type_count=same_type_count,
            previous=float(previous),
            raw_boost=float(raw),
            effective_boost=float(effective),
            corroboration=float(corroboration),
            confidence=float(confidence),
        )

        return ConfidenceResult(
            confidence=confidence,
            previous=previous,
            raw_boost=raw,
            effective_boost=effective,
            diminish=diminish,
            corroboration=corroboration,
            is_fallback=weight.is_fallback,
        )
