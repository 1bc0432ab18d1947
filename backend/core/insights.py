"""
insights.py — Rule-based insight and recommendation engine.

Evaluates a fixed battery of threshold rules over the cohort summary,
the per-subject statistics and the individual learner records. Each rule
emits zero or one item (or one per matching subject). Rules are
independent: evaluation order only decides display order.

Insight kinds: success, warning, info, concern.
Recommendation priorities: high, medium, low.

Zero AI dependency — every insight is a deterministic threshold check.
"""

from typing import Any, Dict, List, Optional

from core.models import (
    CohortStats,
    Insight,
    InsightKind,
    Recommendation,
    RecommendationPriority,
    StudentRecord,
    SubjectStat,
)
from core.narrative import (
    generate_executive_summary,
    narrate_high_achievers,
    narrate_low_performance,
    narrate_moderate_performance,
    narrate_parent_conferences,
    narrate_peer_mentors,
    narrate_performance_gap,
    narrate_remedial_action,
    narrate_remedial_rationale,
    narrate_resource_action,
    narrate_share_practices,
    narrate_strong_performance,
    narrate_strong_subjects,
    narrate_struggling_students,
    narrate_support_plans,
    narrate_teaching_review,
    narrate_weak_subjects,
)
from core.stats import compute_cohort_stats, compute_subject_stats

# Rule thresholds (percent unless noted). Fixed constants of the rule set.
STRONG_AVERAGE = 40
MODERATE_AVERAGE = 30
WEAK_SUBJECT_AVERAGE = 30
STRONG_SUBJECT_AVERAGE = 40
STRUGGLING_AVERAGE = 30
STRUGGLING_RATIO = 0.3          # fraction of the cohort
HIGH_ACHIEVER_AVERAGE = 40
PERFORMANCE_GAP = 20            # points between best and worst learner
TEACHING_QUALITY_AVERAGE = 35
TEACHING_QUALITY_HIGHEST = 50
RESOURCE_GAP = 5                # points below the class average
AT_RISK_AVERAGE = 25
PEER_LEARNING_MIN_ACHIEVERS = 2

# Presentation hint only; rules never look at it.
INSIGHT_ICONS = {
    InsightKind.SUCCESS: "check-circle",
    InsightKind.WARNING: "alert-circle",
    InsightKind.INFO: "lightbulb",
    InsightKind.CONCERN: "trending-down",
}

KIND_ORDER = {
    InsightKind.CONCERN: 0,
    InsightKind.WARNING: 1,
    InsightKind.INFO: 2,
    InsightKind.SUCCESS: 3,
}

PRIORITY_ORDER = {
    RecommendationPriority.HIGH: 0,
    RecommendationPriority.MEDIUM: 1,
    RecommendationPriority.LOW: 2,
}


# ── Insight Rules ───────────────────────────────────────────────────

def _overall_band(stats: CohortStats) -> Insight:
    average = stats.average_score
    if average >= STRONG_AVERAGE:
        return Insight(InsightKind.SUCCESS, "Strong Performance", narrate_strong_performance(average))
    if average >= MODERATE_AVERAGE:
        return Insight(InsightKind.WARNING, "Moderate Performance", narrate_moderate_performance(average))
    return Insight(InsightKind.CONCERN, "Low Performance", narrate_low_performance(average))


def _weak_subjects(subjects: List[SubjectStat]) -> List[SubjectStat]:
    return [s for s in subjects if s.average < WEAK_SUBJECT_AVERAGE]


def _strong_subjects(subjects: List[SubjectStat]) -> List[SubjectStat]:
    return [s for s in subjects if s.average >= STRONG_SUBJECT_AVERAGE]


def _count(records: List[StudentRecord], predicate) -> int:
    return sum(1 for r in records if predicate(r.average_score))


def generate_insights(
    stats: CohortStats,
    subjects: List[SubjectStat],
    records: List[StudentRecord],
) -> List[Insight]:
    """Run the insight battery. Output is in rule order."""
    insights: List[Insight] = [_overall_band(stats)]
    total = len(records)

    # Subject statistics of an empty cohort carry no evidence.
    if total > 0:
        weak = _weak_subjects(subjects)
        if weak:
            insights.append(Insight(
                InsightKind.CONCERN, "Weak Subjects",
                narrate_weak_subjects([s.subject for s in weak]),
            ))

        strong = _strong_subjects(subjects)
        if strong:
            insights.append(Insight(
                InsightKind.SUCCESS, "Strong Subjects",
                narrate_strong_subjects([s.subject for s in strong]),
            ))

    struggling = _count(records, lambda avg: avg < STRUGGLING_AVERAGE)
    if total > 0 and struggling > STRUGGLING_RATIO * total:
        insights.append(Insight(
            InsightKind.CONCERN, "Many Struggling Students",
            narrate_struggling_students(struggling, total),
        ))

    achievers = _count(records, lambda avg: avg >= HIGH_ACHIEVER_AVERAGE)
    if achievers > 0:
        insights.append(Insight(
            InsightKind.SUCCESS, "High Achievers",
            narrate_high_achievers(achievers, total),
        ))

    if total > 0:
        averages = [r.average_score for r in records]
        gap = max(averages) - min(averages)
        if gap > PERFORMANCE_GAP:
            insights.append(Insight(
                InsightKind.WARNING, "Wide Performance Gap",
                narrate_performance_gap(gap),
            ))

    return insights


# ── Recommendation Rules ────────────────────────────────────────────

def generate_recommendations(
    stats: CohortStats,
    subjects: List[SubjectStat],
    records: List[StudentRecord],
) -> List[Recommendation]:
    """Run the recommendation battery. Output is in rule order."""
    recs: List[Recommendation] = []
    has_cohort = len(records) > 0

    if has_cohort:
        for subject in _weak_subjects(subjects):
            recs.append(Recommendation(
                RecommendationPriority.HIGH, "Academic Intervention",
                narrate_remedial_action(subject.subject),
                narrate_remedial_rationale(subject.average),
            ))

    struggling = _count(records, lambda avg: avg < STRUGGLING_AVERAGE)
    if struggling > 0:
        recs.append(Recommendation(
            RecommendationPriority.HIGH, "Student Support",
            narrate_support_plans(struggling),
            "Students below 30% need one-on-one attention and tailored strategies.",
        ))

    if has_cohort:
        # Low average and low ceiling points at delivery, not ability.
        low_ceiling = [
            s for s in subjects
            if s.average < TEACHING_QUALITY_AVERAGE and s.highest < TEACHING_QUALITY_HIGHEST
        ]
        if low_ceiling:
            recs.append(Recommendation(
                RecommendationPriority.HIGH, "Teaching Quality",
                narrate_teaching_review([s.subject for s in low_ceiling]),
                "Low averages + low highest scores suggest curriculum delivery issues.",
            ))

    recs.append(Recommendation(
        RecommendationPriority.MEDIUM, "Performance Monitoring",
        "Bi-weekly progress assessments",
        "Regular monitoring identifies struggling students early.",
    ))

    if has_cohort:
        # Strictly below: a subject exactly RESOURCE_GAP under the class average does not fire.
        lagging = [s for s in subjects if s.average < stats.average_score - RESOURCE_GAP]
        if lagging:
            recs.append(Recommendation(
                RecommendationPriority.MEDIUM, "Resource Allocation",
                narrate_resource_action([s.subject for s in lagging]),
                "Below-average subjects need more teaching materials and aids.",
            ))

    at_risk = _count(records, lambda avg: avg < AT_RISK_AVERAGE)
    if at_risk > 0:
        recs.append(Recommendation(
            RecommendationPriority.HIGH, "Parent Engagement",
            narrate_parent_conferences(at_risk),
            "Students below 25% need collaborative parent-teacher-counselor intervention.",
        ))

    if has_cohort:
        strong = _strong_subjects(subjects)
        if strong:
            recs.append(Recommendation(
                RecommendationPriority.LOW, "Best Practices",
                narrate_share_practices([s.subject for s in strong]),
                "High-performing subjects have practices that benefit other areas.",
            ))

    achievers = _count(records, lambda avg: avg >= HIGH_ACHIEVER_AVERAGE)
    if achievers >= PEER_LEARNING_MIN_ACHIEVERS:
        recs.append(Recommendation(
            RecommendationPriority.MEDIUM, "Peer Learning",
            "Peer tutoring program with top students",
            narrate_peer_mentors(achievers),
        ))

    return recs


# ── Ranking ─────────────────────────────────────────────────────────

def rank_insights(insights: List[Insight]) -> List[Insight]:
    """Concerns first, then warnings, info, successes; stable within a kind."""
    return sorted(insights, key=lambda i: KIND_ORDER[i.kind])


def prioritize(recommendations: List[Recommendation]) -> List[Recommendation]:
    """High, medium, low; stable within a priority."""
    return sorted(recommendations, key=lambda r: PRIORITY_ORDER[r.priority])


# ── Main Entry Point ───────────────────────────────────────────────

def generate_all_insights(
    records: List[StudentRecord],
    stats: Optional[CohortStats] = None,
    subjects: Optional[List[SubjectStat]] = None,
) -> Dict[str, Any]:
    """
    Generate all rule-based insights and recommendations.

    Returns:
        {
            "insights": [...],          # ranked insight dicts
            "recommendations": [...],   # prioritized recommendation dicts
            "summary": {                # counts by kind/priority
                "total_insights": int,
                "total_recommendations": int,
                "by_kind": {...},
                "by_priority": {...},
            },
            "executive_summary": str,
        }
    """
    if stats is None:
        stats = compute_cohort_stats(records)
    if subjects is None:
        subjects = compute_subject_stats(records)

    insights = rank_insights(generate_insights(stats, subjects, records))
    recommendations = prioritize(generate_recommendations(stats, subjects, records))

    insight_dicts = []
    for insight in insights:
        item = insight.to_dict()
        item["icon"] = INSIGHT_ICONS[insight.kind]
        insight_dicts.append(item)
    rec_dicts = [r.to_dict() for r in recommendations]

    by_kind: Dict[str, int] = {}
    for insight in insights:
        by_kind[insight.kind.value] = by_kind.get(insight.kind.value, 0) + 1
    by_priority: Dict[str, int] = {}
    for rec in recommendations:
        by_priority[rec.priority.value] = by_priority.get(rec.priority.value, 0) + 1

    return {
        "insights": insight_dicts,
        "recommendations": rec_dicts,
        "summary": {
            "total_insights": len(insights),
            "total_recommendations": len(recommendations),
            "by_kind": by_kind,
            "by_priority": by_priority,
        },
        "executive_summary": generate_executive_summary(
            stats.to_dict(), insight_dicts, rec_dicts
        ),
    }
