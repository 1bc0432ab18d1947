"""
narrative.py — Template-based text generation for insights and recommendations.

Transforms rule results into the short sentences shown on the dashboard.
Uses f-string templates — zero AI dependency.
"""

from typing import Any, Dict, List

from core.stats import round_half_up


def fmt_number(value: float) -> str:
    """Render 45.0 as '45' and 45.5 as '45.5'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)


def join_subjects(subjects: List[str]) -> str:
    return ", ".join(subjects)


# ── Insight Narratives ──────────────────────────────────────────────

def narrate_strong_performance(average: float) -> str:
    return f"Class average: {fmt_number(average)}%. Solid academic foundation."


def narrate_moderate_performance(average: float) -> str:
    return f"Class average: {fmt_number(average)}%. Room for improvement."


def narrate_low_performance(average: float) -> str:
    return f"Class average: {fmt_number(average)}%. Immediate action needed."


def narrate_weak_subjects(subjects: List[str]) -> str:
    return f"{join_subjects(subjects)} below 30%. Need intervention."


def narrate_strong_subjects(subjects: List[str]) -> str:
    return f"{join_subjects(subjects)} above 40%. Share best practices."


def narrate_struggling_students(count: int, total: int) -> str:
    pct = round_half_up(count / total * 100, 1)
    return f"{pct:.1f}% ({count}/{total}) below 30%. Systemic intervention needed."


def narrate_high_achievers(count: int, total: int) -> str:
    pct = round_half_up(count / total * 100, 1)
    return f"{pct:.1f}% ({count}/{total}) above 40%. Effective learning outcomes."


def narrate_performance_gap(gap: float) -> str:
    return f"{round_half_up(gap, 1):.1f}% gap between top/bottom. Use differentiated instruction."


# ── Recommendation Narratives ───────────────────────────────────────

def narrate_remedial_action(subject: str) -> str:
    return f"Intensive remedial program for {subject}"


def narrate_remedial_rationale(average: float) -> str:
    return f"Average {fmt_number(average)}% critically low. Add teaching hours and tutoring."


def narrate_support_plans(count: int) -> str:
    return f"Create support plans for {count} struggling students"


def narrate_teaching_review(subjects: List[str]) -> str:
    return f"Review teaching methods for {join_subjects(subjects)}"


def narrate_resource_action(subjects: List[str]) -> str:
    return f"Add resources to {join_subjects(subjects)}"


def narrate_parent_conferences(count: int) -> str:
    return f"Parent-teacher conferences for {count} at-risk students"


def narrate_share_practices(subjects: List[str]) -> str:
    return f"Share teaching strategies from {join_subjects(subjects)}"


def narrate_peer_mentors(count: int) -> str:
    return f"{count} high achievers can mentor struggling peers."


# ── Executive Summary ──────────────────────────────────────────────

def generate_executive_summary(
    stats: Dict[str, Any],
    insights: List[Dict[str, Any]],
    recommendations: List[Dict[str, Any]],
) -> str:
    """Combine insights and recommendations into a short multi-paragraph summary."""
    total = stats.get("totalLearners", 0)
    if not total:
        return "No learner records were available for analysis."

    paragraphs = [
        f"{total} learner(s) were analysed. The class average is "
        f"{fmt_number(stats.get('averageScore', 0))}% and the top performer is "
        f"{stats.get('topPerformer', 'N/A')}."
    ]

    concerns = [i for i in insights if i.get("kind") in ("concern", "warning")]
    if concerns:
        titles = "; ".join(i["title"] for i in concerns[:3])
        paragraphs.append(f"Areas of concern: {titles}.")

    successes = [i for i in insights if i.get("kind") == "success"]
    if successes:
        titles = "; ".join(i["title"] for i in successes[:3])
        paragraphs.append(f"Encouraging developments: {titles}.")

    urgent = [r["action"] for r in recommendations if r.get("priority") == "high"]
    if urgent:
        paragraphs.append(f"Priority actions: {'; '.join(urgent[:3])}.")

    return "\n\n".join(paragraphs)
