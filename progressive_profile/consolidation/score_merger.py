"""
consolidation/score_merger.py - Score Merger

Weighted-average combination of skill-score sets on the normalized [0, 1]
scale.

For each skill in the union of existing and incoming:
    both present:
        value  = (v_e × w_e + v_i × w_i) / (w_e + w_i)
        weight = w_e + w_i
    one present:
        value and weight copied from that side unchanged

Merging on [0, 1] keeps Legacy (0-5) and CLP2 (0-3) contributions
comparable; native values are produced only for display.
"""

from decimal import Decimal
from typing import Dict, Mapping, Optional

import structlog

from progressive_profile.consolidation.scale_normalizer import Number, ScaleNormalizer
from progressive_profile.consolidation.utils import clamp, weighted_mean
from progressive_profile.models.enumerations import ScoringVersion
from progressive_profile.models.profile import SkillAccumulator

logger = structlog.get_logger(__name__)

SkillState = Dict[str, SkillAccumulator]


class ScoreMerger:
    """Merge incoming normalized scores into accumulated skill state."""

    def __init__(self, normalizer: Optional[ScaleNormalizer] = None):
        self.normalizer = normalizer or ScaleNormalizer()

    def merge(
        self,
        existing: Optional[Mapping[str, SkillAccumulator]],
        incoming: Mapping[str, Decimal],
        incoming_weight: Decimal,
    ) -> SkillState:
        """
        Merge one normalized score set into the existing state.

        Args:
            existing: Accumulated state per skill, or None/empty for a first merge.
            incoming: Skill -> normalized score in [0, 1].
            incoming_weight: Base weight of the incoming source (> 0).

        Returns:
            A new state dict; ``existing`` is not modified.

        Examples:
            >>> merger = ScoreMerger()
            >>> first = merger.merge(None, {"Communication": Decimal("0.8")}, Decimal("0.6"))
            >>> merged = merger.merge(first, {"Communication": Decimal("0.6")}, Decimal("0.8"))
            >>> round(float(merged["Communication"].value) * 5, 2)
            3.43
        """
        weight = Decimal(str(incoming_weight))
        if weight <= 0:
            raise ValueError(f"incoming_weight must be > 0, got {incoming_weight}")

        existing = existing or {}
        merged: SkillState = {}
        averaged = 0

        for skill in list(existing) + [s for s in incoming if s not in existing]:
            current = existing.get(skill)
            new_value = incoming.get(skill)

            if current is not None and new_value is not None:
                value = weighted_mean(
                    [current.value, Decimal(new_value)],
                    [current.accumulated_weight, weight],
                )
                merged[skill] = SkillAccumulator(
                    value=clamp(value, Decimal("0"), Decimal("1")),
                    accumulated_weight=current.accumulated_weight + weight,
                )
                averaged += 1
            elif current is not None:
                merged[skill] = current.model_copy()
            else:
                merged[skill] = SkillAccumulator(
                    value=Decimal(new_value),
                    accumulated_weight=weight,
                )

        logger.debug(
            "scores_merged",
            incoming_skills=len(incoming),
            averaged_skills=averaged,
            total_skills=len(merged),
            incoming_weight=float(weight),
        )
        return merged

    def merge_native(
        self,
        existing: Optional[Mapping[str, SkillAccumulator]],
        incoming: Mapping[str, Number],
        version: ScoringVersion,
        incoming_weight: Decimal,
    ) -> SkillState:
        """Normalize native-scale scores (all or nothing), then merge."""
        normalized = self.normalizer.normalize_scores(incoming, version)
        return self.merge(existing, normalized, incoming_weight)

    def to_native(self, state: Mapping[str, SkillAccumulator], version: ScoringVersion) -> Dict[str, float]:
        """Display scores on the version's native scale, two decimal places."""
        return {
            skill: self.normalizer.to_display(acc.value, version)
            for skill, acc in state.items()
        }
