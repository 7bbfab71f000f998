from enum import Enum
from typing import List


class ScoringVersion(str, Enum):
    CLP2 = "CLP2"      # 0-3 scale, 8 skills
    LEGACY = "Legacy"  # 0-5 scale, 6 skills

    @classmethod
    def _missing_(cls, value):
        # Stored rows and older clients spell it "CLP 2.0"
        if isinstance(value, str) and value.replace(" ", "").upper() in ("CLP2.0", "CLP2"):
            return cls.CLP2
        if isinstance(value, str) and value.lower() == "legacy":
            return cls.LEGACY
        return None


class RespondentType(str, Enum):
    PARENT = "parent"
    TEACHER = "teacher"
    OTHER = "other"


class ConflictSignificance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ConfidenceLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Contexts a complete profile is expected to cover
EXPECTED_CONTEXTS: List[RespondentType] = [RespondentType.PARENT, RespondentType.TEACHER]

CLP2_SKILLS: List[str] = [
    "Communication",
    "Collaboration",
    "Content",
    "Critical Thinking",
    "Creative Innovation",
    "Confidence",
    "Literacy",
    "Math",
]

LEGACY_SKILLS: List[str] = CLP2_SKILLS[:6]
