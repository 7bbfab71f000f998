"""
Replay a file of assessments through the consolidation engine.
Uses an in-memory store, so nothing is persisted.

Usage:
    python -m progressive_profile.scripts.replay_assessments assessments.json
    python -m progressive_profile.scripts.replay_assessments assessments.json --format table

The file holds a JSON list of assessments (or {"assessments": [...]}).
Assessments for the same child are merged in file order.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

import structlog
from pydantic import ValidationError

from progressive_profile.consolidation.analysis import ConsolidationAnalyzer
from progressive_profile.core.logging import configure_logging
from progressive_profile.models.assessment import Assessment
from progressive_profile.models.profile import ConsolidatedProfile
from progressive_profile.repositories.memory_store import InMemoryProfileStore
from progressive_profile.services.profile_service import ProgressiveProfileService

logger = structlog.get_logger(__name__)


def load_assessments(path: Path) -> List[Assessment]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("assessments", [])
    return [Assessment.model_validate(item) for item in raw]


def replay(assessments: List[Assessment], service: ProgressiveProfileService) -> Dict[str, ConsolidatedProfile]:
    """Submit every assessment; return the final profile per profile id."""
    profiles: Dict[str, ConsolidatedProfile] = {}
    for assessment in assessments:
        outcome = service.submit(assessment)
        if not outcome.ok:
            logger.error(
                "replay_submission_failed",
                assessment_id=assessment.id,
                child_name=assessment.child_name,
                error_code=outcome.error.error_code,
                message=outcome.error.message,
            )
            continue
        profiles[outcome.profile.id] = outcome.profile
    return profiles


def render_table(profiles: List[ConsolidatedProfile], analyzer: ConsolidationAnalyzer) -> str:
    lines = []
    for profile in profiles:
        analysis = analyzer.analyze(profile)
        lines.append("=" * 70)
        lines.append(
            f"  {profile.child_name}  ({profile.scoring_version.value}, v{profile.version}, "
            f"{profile.total_assessments} assessments)"
        )
        lines.append(
            f"  Confidence {profile.confidence_percentage:>6.2f}%  ({analysis.confidence_level.value})   "
            f"Completeness {profile.completeness_percentage:>5.1f}%"
        )
        lines.append(f"  {'Skill':<22} {'Score':>6}")
        lines.append(f"  {'-' * 22} {'-' * 6}")
        for skill, score in sorted(profile.consolidated_scores.items(), key=lambda kv: -kv[1]):
            lines.append(f"  {skill:<22} {score:>6.2f}")
        lines.append(f"  Strengths:    {', '.join(profile.strengths) or '-'}")
        lines.append(f"  Growth areas: {', '.join(profile.growth_areas) or '-'}")
        for conflict in profile.conflicts:
            lines.append(f"  Conflict [{conflict.significance.value}] {conflict.skill}: {conflict.differential:.2f}")
        for recommendation in analysis.recommendations:
            lines.append(f"  * {recommendation}")
    lines.append("=" * 70)
    return "\n".join(lines)


def render_json(profiles: List[ConsolidatedProfile], analyzer: ConsolidationAnalyzer) -> str:
    payload = [
        {
            "profile": profile.model_dump(mode="json"),
            "analysis": analyzer.analyze(profile).model_dump(mode="json"),
        }
        for profile in profiles
    ]
    return json.dumps(payload, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Replay assessments into consolidated profiles")
    ap.add_argument("file", type=Path, help="JSON file with a list of assessments")
    ap.add_argument("--format", choices=["json", "table"], default="table", help="Output format")
    ap.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = ap.parse_args(argv)

    configure_logging(level=args.log_level, fmt="console")

    try:
        assessments = load_assessments(args.file)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("replay_input_invalid", file=str(args.file), error=str(e))
        return 2

    service = ProgressiveProfileService(store=InMemoryProfileStore())
    profiles = list(replay(assessments, service).values())

    analyzer = ConsolidationAnalyzer()
    if args.format == "json":
        print(render_json(profiles, analyzer))
    else:
        print(render_table(profiles, analyzer))

    return 0 if len(profiles) > 0 or not assessments else 1


if __name__ == "__main__":
    sys.exit(main())
