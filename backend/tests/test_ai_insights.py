import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.ai_insights import build_analysis_brief, generate_performance_analysis
from core.models import StudentRecord


def _sample_records():
    return [
        StudentRecord(name="Ama", subject_scores={"mathematics": 82}, total_raw_score=640,
                      average_score=64.0, position="1st"),
        StudentRecord(name="Kofi", subject_scores={"mathematics": 35}, total_raw_score=310,
                      average_score=31.0, position="2nd"),
        StudentRecord(name="Esi", subject_scores={"mathematics": 12}, total_raw_score=190,
                      average_score=19.0, position="3rd"),
    ]


def test_performance_analysis_deterministic_mode(monkeypatch):
    monkeypatch.setenv("AI_ENABLED", "false")
    result = generate_performance_analysis(_sample_records())

    assert result["mode"] == "deterministic"
    assert "analysis" in result and result["analysis"]
    assert result["insights"]
    assert result["recommendations"]


def test_performance_analysis_falls_back_without_key(monkeypatch):
    monkeypatch.setenv("AI_ENABLED", "true")
    monkeypatch.setenv("AI_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    result = generate_performance_analysis(_sample_records())

    assert result["mode"] == "deterministic_fallback"
    assert "OPENAI_API_KEY" in result["ai_error"]
    assert result["analysis"]


def test_performance_analysis_uses_model_text(monkeypatch):
    monkeypatch.setenv("AI_ENABLED", "true")
    monkeypatch.setattr(
        "core.ai_insights._call_openai_analysis", lambda brief: "Narrative from the model."
    )
    result = generate_performance_analysis(_sample_records())

    assert result["mode"] == "ai_openai"
    assert result["analysis"] == "Narrative from the model."
    # rule-based output still attached
    assert result["recommendations"]


def test_empty_cohort_skips_model(monkeypatch):
    monkeypatch.setenv("AI_ENABLED", "true")

    def _fail(brief):
        raise AssertionError("model should not be called")

    monkeypatch.setattr("core.ai_insights._call_openai_analysis", _fail)
    result = generate_performance_analysis([])
    assert result["mode"] == "deterministic"


def test_analysis_brief_contents():
    brief = build_analysis_brief(_sample_records())

    assert "Total Learners: 3" in brief
    assert "Top Performer: Ama" in brief
    assert "- Mathematics: Average 43.0, Highest 82.0" in brief
    assert "1. Ama - Total: 640, Average: 64.00, Position: 1st" in brief
    assert "Esi - Total: 190, Average: 19.00" in brief
