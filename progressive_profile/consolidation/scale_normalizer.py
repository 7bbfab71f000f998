"""
consolidation/scale_normalizer.py - Scale Normalizer

Maps a skill score from its native scale onto the shared [0, 1] comparison
scale and back.

Native scales:
    Legacy  0-5
    CLP2    0-3   (supersedes Legacy)

Formula:
    normalized = score / native_max
    native     = normalized × native_max
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Mapping, Optional, Union

from progressive_profile.core.exceptions import OutOfRangeScore
from progressive_profile.models.enumerations import ScoringVersion

Number = Union[int, float, Decimal]

NATIVE_MAX: Dict[ScoringVersion, Decimal] = {
    ScoringVersion.LEGACY: Decimal("5"),
    ScoringVersion.CLP2: Decimal("3"),
}

DISPLAY_PLACES = Decimal("0.01")


class ScaleNormalizer:
    """Convert skill scores between native scales and [0, 1]."""

    def native_max(self, version: ScoringVersion) -> Decimal:
        return NATIVE_MAX[ScoringVersion(version)]

    def normalize(
        self,
        score: Number,
        version: ScoringVersion,
        skill: Optional[str] = None,
    ) -> Decimal:
        """
        Map a native score onto [0, 1].

        Raises:
            OutOfRangeScore: score is NaN/infinite or outside [0, native_max].

        Examples:
            >>> ScaleNormalizer().normalize(4.0, ScoringVersion.LEGACY)
            Decimal('0.8')
        """
        version = ScoringVersion(version)
        max_val = NATIVE_MAX[version]
        if isinstance(score, bool) or (isinstance(score, float) and not math.isfinite(score)):
            raise OutOfRangeScore(skill, score, version.value, max_val)

        score_d = Decimal(str(score))
        if not score_d.is_finite() or score_d < 0 or score_d > max_val:
            raise OutOfRangeScore(skill, score, version.value, max_val)

        return score_d / max_val

    def denormalize(self, score01: Number, version: ScoringVersion) -> Decimal:
        """
        Map a [0, 1] score back onto the version's native scale.

        Examples:
            >>> ScaleNormalizer().denormalize(Decimal("0.8"), ScoringVersion.LEGACY)
            Decimal('4.0')
        """
        version = ScoringVersion(version)
        value = Decimal(str(score01))
        if not value.is_finite() or value < 0 or value > 1:
            raise OutOfRangeScore(None, score01, "normalized", Decimal("1"))
        return value * NATIVE_MAX[version]

    def to_display(self, score01: Number, version: ScoringVersion) -> float:
        """
        Native-scale score rounded to two places, as stored on profiles.

        Applies to single-source skills too: an input of 2.345 displays as
        2.35 while the exact normalized value stays in skill_state.
        """
        native = self.denormalize(score01, version)
        return float(native.quantize(DISPLAY_PLACES, rounding=ROUND_HALF_UP))

    def normalize_scores(
        self,
        scores: Mapping[str, Number],
        version: ScoringVersion,
    ) -> Dict[str, Decimal]:
        """
        Normalize a whole score set, all or nothing.

        Any out-of-range value rejects the entire set before anything is returned.
        """
        return {
            skill: self.normalize(value, version, skill=skill)
            for skill, value in scores.items()
        }
