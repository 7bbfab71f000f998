"""
consolidation/weighting_table.py - Respondent Weighting Table

Pure lookup: (quiz_type, respondent_type) -> base weight and confidence boost.

The table is configuration data (weighting_table.json, or the file named by
WEIGHTING_TABLE_PATH) so new quiz types are added without code changes.
Lookup order:
    1. exact (quiz_type, respondent_type) entry
    2. quiz_type entry with respondent_type = null
    3. DEFAULT_BASE_WEIGHT / DEFAULT_CONFIDENCE_BOOST, with a warning
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import structlog
from pydantic import BaseModel, Field

from progressive_profile.config import settings
from progressive_profile.models.enumerations import RespondentType

logger = structlog.get_logger(__name__)

BUNDLED_TABLE_PATH = Path(__file__).with_name("weighting_table.json")


class WeightEntry(BaseModel):
    quiz_type: str = Field(..., min_length=1)
    respondent_type: Optional[RespondentType] = None
    base_weight: float = Field(..., gt=0, le=1)
    confidence_boost: float = Field(..., ge=0, le=100)


class WeightingTableConfig(BaseModel):
    version: str
    entries: List[WeightEntry] = Field(default_factory=list)


@dataclass
class RespondentWeight:
    """Output of WeightingTable.weight_of()."""
    base_weight: Decimal
    confidence_boost: Decimal
    is_fallback: bool = False


class WeightingTable:
    """Static weight/boost lookup with a documented fallback for unknown quiz types."""

    def __init__(
        self,
        config: WeightingTableConfig,
        default_weight: Optional[float] = None,
        default_boost: Optional[float] = None,
    ):
        self.version = config.version
        self.default_weight = Decimal(str(
            settings.DEFAULT_BASE_WEIGHT if default_weight is None else default_weight
        ))
        self.default_boost = Decimal(str(
            settings.DEFAULT_CONFIDENCE_BOOST if default_boost is None else default_boost
        ))
        self._entries: Dict[Tuple[str, Optional[RespondentType]], WeightEntry] = {
            (entry.quiz_type.lower(), entry.respondent_type): entry
            for entry in config.entries
        }

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> "WeightingTable":
        """Load a table from a JSON file."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(WeightingTableConfig.model_validate(raw), **kwargs)

    @classmethod
    def default(cls) -> "WeightingTable":
        """Table named by WEIGHTING_TABLE_PATH, else the bundled one."""
        return cls.from_file(settings.WEIGHTING_TABLE_PATH or BUNDLED_TABLE_PATH)

    @property
    def quiz_types(self) -> List[str]:
        return sorted({quiz_type for quiz_type, _ in self._entries})

    def weight_of(
        self,
        quiz_type: str,
        respondent_type: Union[RespondentType, str],
    ) -> RespondentWeight:
        """
        Look up the weight and confidence boost for one assessment.

        Never fails: unknown quiz types (and unknown respondent types) fall
        back to the defaults with a logged warning.

        Examples:
            >>> table = WeightingTable.default()
            >>> table.weight_of("teacher_classroom", "teacher").base_weight
            Decimal('0.8')
        """
        respondent = self._coerce_respondent(respondent_type)
        key = quiz_type.strip().lower()

        entry = self._entries.get((key, respondent)) or self._entries.get((key, None))
        if entry is None:
            logger.warning(
                "unknown_quiz_type",
                quiz_type=quiz_type,
                respondent_type=respondent.value,
                fallback_weight=float(self.default_weight),
                fallback_boost=float(self.default_boost),
                table_version=self.version,
            )
            return RespondentWeight(
                base_weight=self.default_weight,
                confidence_boost=self.default_boost,
                is_fallback=True,
            )

        return RespondentWeight(
            base_weight=Decimal(str(entry.base_weight)),
            confidence_boost=Decimal(str(entry.confidence_boost)),
        )

    @staticmethod
    def _coerce_respondent(respondent_type: Union[RespondentType, str]) -> RespondentType:
        if isinstance(respondent_type, RespondentType):
            return respondent_type
        try:
            return RespondentType(str(respondent_type).strip().lower())
        except ValueError:
            logger.warning(
                "unknown_respondent_type",
                respondent_type=respondent_type,
                fallback=RespondentType.OTHER.value,
            )
            return RespondentType.OTHER
