# tests/test_confidence_estimator.py
"""
Confidence Estimator Tests
Boosts, diminishing returns, cross-context agreement and the 100 cap.
"""

from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from progressive_profile.consolidation.confidence_estimator import (
    ConfidenceEstimator,
    diminish_factor,
)
from progressive_profile.models.enumerations import RespondentType

PARENT = RespondentType.PARENT
TEACHER = RespondentType.TEACHER


class TestDiminishFactor:

    @pytest.mark.parametrize("count,expected", [
        (0, Decimal("1")),
        (1, Decimal("0.5")),
        (3, Decimal("0.25")),
    ])
    def test_values(self, count, expected):
        assert diminish_factor(count) == expected

    def test_strictly_decreasing(self):
        factors = [diminish_factor(n) for n in range(6)]
        assert all(a > b for a, b in zip(factors, factors[1:]))

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            diminish_factor(-1)


class TestNextConfidence:
    """ConfidenceEstimator.next_confidence()."""

    def test_first_assessment_gets_full_boost(self, confidence_estimator):
        result = confidence_estimator.next_confidence(0, PARENT, "parent_home", 0)
        assert result.confidence == Decimal("30")
        assert result.raw_boost == Decimal("30")
        assert result.delta == Decimal("30")

    def test_repeats_of_same_type_shrink(self, confidence_estimator):
        """Parent deltas: 30, then 15, then 10."""
        current = Decimal("0")
        deltas = []
        for count in range(3):
            result = confidence_estimator.next_confidence(current, PARENT, "parent_home", count)
            deltas.append(result.delta)
            current = result.confidence

        assert deltas == [Decimal("30"), Decimal("15"), Decimal("10")]
        assert current == Decimal("55")

    def test_new_type_gets_full_boost(self, confidence_estimator):
        result = confidence_estimator.next_confidence(30, TEACHER, "teacher_classroom", 0)
        assert result.confidence == Decimal("70")

    def test_agreement_adds_corroboration_bonus(self, confidence_estimator):
        """Agreement 0.8 on a first teacher assessment: 30 + 40 + 16."""
        result = confidence_estimator.next_confidence(30, TEACHER, "teacher_classroom", 0, agreement=0.8)
        assert result.corroboration == Decimal("16.0")
        assert result.confidence == Decimal("86")

    def test_agreement_ignored_for_repeat_assessments(self, confidence_estimator):
        result = confidence_estimator.next_confidence(70, TEACHER, "teacher_classroom", 1, agreement=1.0)
        assert result.corroboration == Decimal("0")
        assert result.confidence == Decimal("90")

    def test_conflict_damps_boost(self, confidence_estimator):
        """All overlapping skills in high conflict halve the teacher boost."""
        result = confidence_estimator.next_confidence(
            30, TEACHER, "teacher_classroom", 0, agreement=0, conflict_ratio=1,
        )
        assert result.confidence == Decimal("50")

    def test_capped_at_100(self, confidence_estimator):
        result = confidence_estimator.next_confidence(95, TEACHER, "general", 0, agreement=1)
        assert result.confidence == Decimal("100")

    def test_never_decreases(self, confidence_estimator):
        result = confidence_estimator.next_confidence(
            42.5, PARENT, "parent_home", 9, agreement=0, conflict_ratio=1,
        )
        assert result.confidence >= Decimal("42.5")

    def test_unknown_quiz_type_uses_default_boost(self, confidence_estimator):
        result = confidence_estimator.next_confidence(0, RespondentType.OTHER, "summer_camp", 0)
        assert result.confidence == Decimal("25")
        assert result.is_fallback is True

    def test_custom_bonus_and_damping(self, weighting_table):
        estimator = ConfidenceEstimator(weighting_table, corroboration_bonus=0, conflict_damping=0)
        result = estimator.next_confidence(
            30, TEACHER, "teacher_classroom", 0, agreement=1, conflict_ratio=1,
        )
        assert result.confidence == Decimal("70")

    def test_logs_confidence_calculated(self, confidence_estimator):
        with capture_logs() as logs:
            confidence_estimator.next_confidence(0, PARENT, "parent_home", 0)
        event = next(e for e in logs if e["event"] == "confidence_calculated")
        assert event["confidence"] == 30.0
        assert event["respondent_type"] == "parent"
