"""
ai_insights.py — Optional AI narrative on top of deterministic metrics.

Design:
- Never compute grades/ranks via AI.
- Always derive metrics from the deterministic aggregator and rule engine.
- Use AI only to explain and recommend in prose.
- Gracefully fall back to the executive summary when AI is disabled/unavailable.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

import httpx

from core.insights import generate_all_insights
from core.models import StudentRecord
from core.stats import compute_cohort_stats, compute_subject_stats, round_half_up

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an educational data analyst specializing in student performance analysis. "
    "Provide detailed, actionable insights for school management to make informed decisions. "
    "Be specific with numbers and percentages. Focus on practical, implementable recommendations."
)


def build_analysis_brief(records: List[StudentRecord]) -> str:
    """Plain-text data summary handed to the language model."""
    stats = compute_cohort_stats(records)
    subjects = compute_subject_stats(records)

    lines = [
        "LEARNER PERFORMANCE DATA ANALYSIS REQUEST",
        "",
        f"Total Learners: {stats.total_learners}",
        f"Class Average Score: {stats.average_score}%",
        f"Top Performer: {stats.top_performer}",
        f"Lowest Score: {stats.lowest_score}",
        "",
        "SUBJECT PERFORMANCE BREAKDOWN:",
    ]
    lines.extend(f"- {s.subject}: Average {s.average}, Highest {s.highest}" for s in subjects)

    ranked = sorted(records, key=lambda r: r.total_raw_score, reverse=True)
    lines += ["", "TOP STUDENTS:"]
    for idx, r in enumerate(ranked[:5], 1):
        lines.append(
            f"{idx}. {r.name} - Total: {r.total_raw_score}, "
            f"Average: {round_half_up(r.average_score, 2):.2f}, Position: {r.position}"
        )

    lines += ["", "BOTTOM PERFORMERS:"]
    for r in ranked[-3:]:
        lines.append(f"{r.name} - Total: {r.total_raw_score}, Average: {round_half_up(r.average_score, 2):.2f}")

    lines += [
        "",
        "Please provide a comprehensive analysis with:",
        "1. Overall Performance Summary (2-3 paragraphs)",
        "2. Subject-Specific Insights (identify strengths and weaknesses)",
        "3. Student Performance Patterns (top performers vs struggling students)",
        "4. Actionable Recommendations for Management (at least 5 specific recommendations)",
        "5. Areas of Concern (if any)",
        "6. Success Indicators (positive trends)",
    ]
    return "\n".join(lines)


def _deterministic_analysis(records: List[StudentRecord]) -> Dict[str, Any]:
    result = generate_all_insights(records)
    return {
        "mode": "deterministic",
        "analysis": result["executive_summary"],
        "insights": result["insights"],
        "recommendations": result["recommendations"],
    }


def _call_openai_analysis(brief: str) -> str:
    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    model = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
    timeout_s = float(os.getenv("AI_TIMEOUT_SECONDS", "20"))
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY is not set.")

    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": brief},
        ],
    }

    with httpx.Client(timeout=timeout_s) as client:
        res = client.post(
            "https://api.openai.com/v1/chat/completions",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
        )
        res.raise_for_status()
        data = res.json()

    text = (data["choices"][0]["message"]["content"] or "").strip()
    if not text:
        raise RuntimeError("Empty AI response.")
    return text


def generate_performance_analysis(records: List[StudentRecord]) -> Dict[str, Any]:
    """
    Public entrypoint for the class performance analysis.

    Behavior:
    - If AI is disabled/misconfigured/fails, return the deterministic summary.
    - If AI is enabled + configured, return AI prose with the rule-based
      insights and recommendations attached.
    """
    ai_enabled = os.getenv("AI_ENABLED", "false").strip().lower() in {"1", "true", "yes", "on"}
    provider = os.getenv("AI_PROVIDER", "openai").strip().lower()

    deterministic = _deterministic_analysis(records)
    if not ai_enabled or not records:
        return deterministic

    try:
        if provider != "openai":
            return deterministic
        analysis = _call_openai_analysis(build_analysis_brief(records))
        return {**deterministic, "mode": "ai_openai", "analysis": analysis}
    except (httpx.HTTPError, RuntimeError, KeyError, IndexError, ValueError) as exc:
        logger.warning("AI analysis failed, using deterministic summary: %s", exc)
        fallback = dict(deterministic)
        fallback["mode"] = "deterministic_fallback"
        fallback["ai_error"] = str(exc)
        return fallback
