"""
Analyze routes — statistics, grading and insight endpoints.
"""

from typing import List

from fastapi import APIRouter, HTTPException

from core.ai_insights import generate_performance_analysis
from core.cleaner import normalize_rows, records_from_dicts
from core.grading import (
    get_all_grade_thresholds,
    letter_grade,
    ordinal_grade,
    qualitative_remark,
)
from core.insights import generate_all_insights
from core.models import StudentRecord
from core.stats import (
    compute_cohort_stats,
    compute_learner_report,
    compute_overview,
    compute_subject_stats,
)

router = APIRouter()


def records_from_payload(payload: dict) -> List[StudentRecord]:
    """
    Accept either normalized records ({"records": [...]}) or raw
    spreadsheet rows ({"rows": [...]}). An empty list is a valid cohort.
    """
    if "records" in payload and payload["records"] is not None:
        return records_from_dicts(payload["records"])
    if "rows" in payload and payload["rows"] is not None:
        return normalize_rows(payload["rows"])
    raise HTTPException(400, "No records or rows provided.")


@router.post("/overview")
async def overview(payload: dict):
    """Cohort stats, per-subject stats and the top-5 leaderboard."""
    return compute_overview(records_from_payload(payload))


@router.post("/subjects")
async def subjects(payload: dict):
    """Per-subject average and highest score, in curriculum order."""
    records = records_from_payload(payload)
    return {"subjects": [s.to_dict() for s in compute_subject_stats(records)]}


@router.post("/stats")
async def stats(payload: dict):
    """Class-wide summary."""
    return compute_cohort_stats(records_from_payload(payload)).to_dict()


@router.post("/insights")
async def insights(payload: dict):
    """Generate all rule-based insights and recommendations."""
    return generate_all_insights(records_from_payload(payload))


@router.post("/ai-analysis")
async def ai_analysis(payload: dict):
    """
    Narrative analysis for management.
    Uses the deterministic summary unless AI is enabled by env vars.
    """
    return generate_performance_analysis(records_from_payload(payload))


@router.post("/learner/{name}")
async def learner_report(name: str, payload: dict):
    """Report card data for one learner: scores, grades, remarks."""
    result = compute_learner_report(records_from_payload(payload), name)
    if result is None:
        raise HTTPException(404, f"Learner '{name}' not found.")
    return result


@router.get("/grade")
async def grade(score: float):
    """Grade a single score on all three scales."""
    return {
        "score": score,
        "letter": letter_grade(score),
        "ordinal": ordinal_grade(score),
        "remark": qualitative_remark(score),
    }


@router.get("/grade-scale")
async def grade_scale():
    """Return grade legends and report-card vocabularies."""
    return get_all_grade_thresholds()
