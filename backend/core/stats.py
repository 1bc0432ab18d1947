"""
stats.py — Cohort and per-subject aggregation.

Computes:
- Per-subject stats (mean over every record, maximum)
- Class-wide stats (learner count, mean average score, top performer, lowest total)
- Leaderboard (top learners by total raw score)
- Individual learner report (scores, grades, remarks)

Every function is total: an empty cohort yields zeroed stats, never an error.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from core.curriculum import SUBJECTS, Subject
from core.grading import subject_grades
from core.models import CohortStats, StudentRecord, SubjectStat

NO_TOP_PERFORMER = "N/A"


# ── Helpers ─────────────────────────────────────────────────────────

def _safe_float(val) -> float:
    """Convert to a plain float, 0.0 for NaN/inf/unparseable."""
    try:
        v = float(val)
        return 0.0 if (np.isnan(v) or np.isinf(v)) else v
    except (TypeError, ValueError):
        return 0.0


def round_half_up(value: float, places: int) -> float:
    """Round exact ties away from zero (45.125 -> 45.13), unlike round()."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def records_to_frame(records: List[StudentRecord], subjects: List[Subject] = SUBJECTS) -> pd.DataFrame:
    """One row per learner, input order preserved."""
    columns = ["name", "totalRawScore", "averageScore"] + [s.key for s in subjects]
    rows = [
        [r.name, r.total_raw_score, r.average_score] + [r.score(s.key) for s in subjects]
        for r in records
    ]
    df = pd.DataFrame(rows, columns=columns)
    numeric = columns[1:]
    df[numeric] = df[numeric].astype(float)
    return df


# ── Subject Statistics ──────────────────────────────────────────────

def compute_subject_stats(
    records: List[StudentRecord],
    subjects: List[Subject] = SUBJECTS,
) -> List[SubjectStat]:
    """
    Mean and maximum per subject, in curriculum order.

    The mean runs over every record, zeros included: once a record has
    passed normalization a zero is a score of zero, not missing data.
    """
    if not records:
        return [SubjectStat(subject=s.label) for s in subjects]

    df = records_to_frame(records, subjects)
    stats: List[SubjectStat] = []
    for s in subjects:
        scores = df[s.key]
        stats.append(SubjectStat(
            subject=s.label,
            average=round_half_up(_safe_float(scores.mean()), 2),
            highest=_safe_float(scores.max()),
        ))
    return stats


# ── Cohort Statistics ───────────────────────────────────────────────

def compute_cohort_stats(records: List[StudentRecord]) -> CohortStats:
    """Class-wide summary. Ties on the top total go to the first learner."""
    if not records:
        return CohortStats(
            total_learners=0,
            average_score=0.0,
            top_performer=NO_TOP_PERFORMER,
            lowest_score=0.0,
        )

    df = records_to_frame(records, subjects=[])
    # idxmax returns the first occurrence of the maximum.
    top_idx = df["totalRawScore"].idxmax()
    return CohortStats(
        total_learners=len(df),
        average_score=round_half_up(_safe_float(df["averageScore"].mean()), 2),
        top_performer=str(df.loc[top_idx, "name"]),
        lowest_score=_safe_float(df["totalRawScore"].min()),
    )


def top_learners(records: List[StudentRecord], limit: int = 5) -> List[Dict[str, Any]]:
    """Leaderboard by total raw score, stable on ties."""
    ranked = sorted(records, key=lambda r: r.total_raw_score, reverse=True)
    return [
        {
            "name": r.name,
            "position": r.position,
            "totalScore": r.total_raw_score,
            "averageScore": r.average_score,
        }
        for r in ranked[:limit]
    ]


def compute_overview(records: List[StudentRecord]) -> Dict[str, Any]:
    """Cohort stats, subject stats and leaderboard in one payload."""
    return {
        "stats": compute_cohort_stats(records).to_dict(),
        "subjects": [s.to_dict() for s in compute_subject_stats(records)],
        "top_learners": top_learners(records),
    }


# ── Learner Report ──────────────────────────────────────────────────

def compute_learner_report(
    records: List[StudentRecord],
    name: str,
    subjects: List[Subject] = SUBJECTS,
) -> Optional[Dict[str, Any]]:
    """
    Report card data for a single learner, matched by name (case-insensitive).
    Returns None if the learner is not in the cohort.
    """
    wanted = name.strip().lower()
    record = next((r for r in records if r.name.strip().lower() == wanted), None)
    if record is None:
        return None

    grades = subject_grades(record, subjects)
    cohort = compute_cohort_stats(records)
    subject_means = {
        s.key: stat.average
        for s, stat in zip(subjects, compute_subject_stats(records, subjects))
    }

    return {
        "name": record.name,
        "sn": record.sequence_number,
        "position": record.position,
        "total_raw_score": record.total_raw_score,
        "average_score": record.average_score,
        "total_aggregate": record.total_aggregate,
        "class_average": cohort.average_score,
        "class_size": cohort.total_learners,
        "teacher_remark": record.teacher_remark,
        "conduct": record.conduct,
        "interest": record.interest,
        "subjects": [
            {
                "key": s.key,
                "subject": s.label,
                "class_average": subject_means[s.key],
                **grades[s.key],
            }
            for s in subjects
        ],
    }
