"""
consolidation/analysis.py - Consolidation Analysis

Read-only reporting over a consolidated profile:
    - next-assessment recommendations stored on the profile
    - ConsolidationAnalyzer.analyze(): confidence level, source counts,
      missing contexts, unassessed skills, high conflicts
    - ConsolidationAnalyzer.contextual_recommendations(): home, classroom
      and general support ideas from the top strength and growth area
"""

from typing import List

from progressive_profile.models.enumerations import (
    CLP2_SKILLS,
    EXPECTED_CONTEXTS,
    ConfidenceLevel,
    ConflictSignificance,
    RespondentType,
)
from progressive_profile.models.profile import (
    ConsolidatedProfile,
    ConsolidationAnalysis,
    ContextualRecommendations,
    SourceCount,
)

# Quiz instrument that covers each expected context
MISSING_CONTEXT_QUIZ = {
    RespondentType.PARENT: "parent_home",
    RespondentType.TEACHER: "teacher_classroom",
}


def next_assessment_recommendations(profile: ConsolidatedProfile) -> List[str]:
    """Suggestions for the next assessment to collect for this child."""
    recommendations: List[str] = []
    if profile.parent_assessments == 0:
        recommendations.append("Consider adding a parent assessment for home behavior insights")
    if profile.teacher_assessments == 0:
        recommendations.append("Consider adding a teacher assessment for classroom behavior insights")
    if profile.total_assessments == 1:
        recommendations.append("Additional assessments will increase profile confidence and accuracy")
    if profile.completeness_percentage < 80:
        recommendations.append("Complete assessment or add context-specific assessments for fuller profile")
    return recommendations


class ConsolidationAnalyzer:
    """Summarize how well-supported a consolidated profile is."""

    HIGH_CONFIDENCE = 80
    MEDIUM_CONFIDENCE = 60
    DEVELOPING_COMPLETENESS = 70

    def confidence_level(self, confidence_percentage: float) -> ConfidenceLevel:
        if confidence_percentage >= self.HIGH_CONFIDENCE:
            return ConfidenceLevel.HIGH
        if confidence_percentage >= self.MEDIUM_CONFIDENCE:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    def contextual_recommendations(self, profile: ConsolidatedProfile) -> ContextualRecommendations:
        strength = profile.strengths[0] if profile.strengths else None
        growth = profile.growth_areas[0] if profile.growth_areas else None

        return ContextualRecommendations(
            home_activities=[
                f"Leverage {strength or 'their interests'} through engaging home activities",
                f"Support {growth or 'development'} with low-pressure home practice",
                "Create consistent learning routines that match their learning style",
            ],
            classroom_strategies=[
                f"Utilize {strength or 'their strengths'} in group activities and projects",
                f"Provide scaffolding for {growth or 'growing skills'} in classroom settings",
                "Consider seating and grouping that supports their learning profile",
            ],
            general_support=[
                "Celebrate progress and effort over perfection",
                "Provide multiple ways to demonstrate understanding",
                "Maintain open communication between home and school",
            ],
        )

    def analyze(self, profile: ConsolidatedProfile) -> ConsolidationAnalysis:
        """
        Build the status report for one profile.

        Confidence level: high >= 80, medium >= 60, else low. Missing
        contexts are named by the quiz that would fill them.
        """
        level = self.confidence_level(profile.confidence_percentage)

        missing = [
            MISSING_CONTEXT_QUIZ[respondent] for respondent in EXPECTED_CONTEXTS
            if profile.count_for(respondent) == 0
        ]
        unassessed = [s for s in CLP2_SKILLS if s not in profile.consolidated_scores]
        high_conflicts = [
            c.skill for c in profile.conflicts
            if c.significance == ConflictSignificance.HIGH
        ]

        recommendations: List[str] = []
        if level == ConfidenceLevel.LOW:
            recommendations.append("Add more assessment perspectives to increase profile confidence")
        if "parent_home" in missing:
            recommendations.append("Parent assessment would add valuable home behavior insights")
        if "teacher_classroom" in missing:
            recommendations.append("Teacher assessment would add professional classroom observations")
        if profile.completeness_percentage < self.DEVELOPING_COMPLETENESS:
            recommendations.append("Profile is still developing - additional assessments recommended")
        for conflict in profile.conflicts:
            if conflict.significance == ConflictSignificance.HIGH and conflict.recommendation:
                recommendations.append(conflict.recommendation)

        return ConsolidationAnalysis(
            profile_id=profile.id,
            confidence_level=level,
            completeness_percentage=profile.completeness_percentage,
            data_sources=[
                SourceCount(respondent_type=t, count=profile.count_for(t))
                for t in RespondentType
            ],
            missing_contexts=missing,
            unassessed_skills=unassessed,
            high_conflicts=high_conflicts,
            strengths=list(profile.strengths),
            recommendations=recommendations,
            contextual_recommendations=self.contextual_recommendations(profile),
        )
