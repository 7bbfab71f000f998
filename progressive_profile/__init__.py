"""
Progressive Profile Engine

Consolidates a child's skill assessments from parents, teachers and other
respondents into one evolving profile.
"""

from progressive_profile.consolidation.profile_consolidator import ProfileConsolidator
from progressive_profile.models import Assessment, ConsolidatedProfile, ConsolidationOutcome

__version__ = "1.0.0"

__all__ = [
    "Assessment",
    "ConsolidatedProfile",
    "ConsolidationOutcome",
    "ProfileConsolidator",
]
