# tests/test_replay_cli.py
"""
Replay CLI Tests
progressive_profile.scripts.replay_assessments
"""

import json

import pytest
from structlog.testing import capture_logs

from progressive_profile.scripts import replay_assessments


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(replay_assessments, "configure_logging", lambda **kwargs: None)
    with capture_logs():
        yield


@pytest.fixture
def assessments_file(tmp_path):
    path = tmp_path / "assessments.json"
    path.write_text(json.dumps([
        {
            "child_name": "Maya Chen",
            "quiz_type": "parent_home",
            "respondent_type": "parent",
            "scoring_version": "Legacy",
            "skill_scores": {"Communication": 4.5, "Collaboration": 5.0, "Math": 2.5},
        },
        {
            "child_name": "Maya Chen",
            "quiz_type": "teacher_classroom",
            "respondent_type": "teacher",
            "scoring_version": "Legacy",
            "skill_scores": {"Communication": 3.8, "Collaboration": 4.8, "Math": 2.2},
        },
        {
            "child_name": "Sam Ortiz",
            "quiz_type": "general",
            "respondent_type": "other",
            "scoring_version": "CLP 2.0",
            "skill_scores": {"Literacy": 2},
        },
        {
            "child_name": "Sam Ortiz",
            "quiz_type": "general",
            "respondent_type": "other",
            "skill_scores": {},
        },
    ]))
    return path


class TestReplay:

    def test_json_output(self, assessments_file, capsys):
        assert replay_assessments.main([str(assessments_file), "--format", "json"]) == 0

        payload = json.loads(capsys.readouterr().out)
        by_child = {item["profile"]["child_name"]: item for item in payload}
        assert set(by_child) == {"Maya Chen", "Sam Ortiz"}

        maya = by_child["Maya Chen"]
        assert maya["profile"]["confidence_percentage"] == 86.0
        assert maya["profile"]["total_assessments"] == 2
        assert maya["analysis"]["confidence_level"] == "high"
        assert by_child["Sam Ortiz"]["profile"]["total_assessments"] == 1

    def test_table_output(self, assessments_file, capsys):
        assert replay_assessments.main([str(assessments_file)]) == 0

        out = capsys.readouterr().out
        assert "Maya Chen" in out
        assert "Collaboration" in out
        assert "Strengths:" in out

    def test_wrapped_list(self, tmp_path, capsys):
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"assessments": [
            {"child_name": "Ana", "quiz_type": "general", "respondent_type": "parent", "skill_scores": {"Math": 3}},
        ]}))
        assert replay_assessments.main([str(path), "--format", "json"]) == 0
        assert json.loads(capsys.readouterr().out)[0]["profile"]["consolidated_scores"] == {"Math": 3.0}

    def test_missing_file(self, tmp_path):
        assert replay_assessments.main([str(tmp_path / "missing.json")]) == 2

    def test_invalid_assessment(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"child_name": "", "quiz_type": "general", "respondent_type": "parent"}]))
        assert replay_assessments.main([str(path)]) == 2
