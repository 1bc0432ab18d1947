"""
grading.py — Score → grade helpers.

Three scales over a 0-100 subject score, all sharing the same zero
sentinel (a score of 0 means "no score", never the lowest band):
  - letter grade   A-F            ("-" for no score)
  - ordinal grade  1-9, 1 = best  ("-" for no score)
  - qualitative remark            ("No Score" for no score)

Thresholds are inclusive lower bounds evaluated top-down.
"""

import math
import numbers
from typing import Any, Dict, List, Optional, Tuple, Union

from core.curriculum import SUBJECTS, Subject
from core.models import StudentRecord

NO_GRADE = "-"
NO_SCORE_REMARK = "No Score"

# (min_score, label) ordered high to low. The last band's min is exclusive
# (any positive score); every other min is inclusive.
LETTER_GRADES: List[Tuple[float, str]] = [
    (80.0, "A"),
    (70.0, "B"),
    (60.0, "C"),
    (50.0, "D"),
    (40.0, "E"),
    (0.0, "F"),
]

ORDINAL_GRADES: List[Tuple[float, int]] = [
    (80.0, 1),  # Highest
    (70.0, 2),  # Higher
    (60.0, 3),  # High
    (55.0, 4),  # High Average
    (50.0, 5),  # Average
    (45.0, 6),  # Low Average
    (40.0, 7),  # Low
    (35.0, 8),  # Lower
    (0.0, 9),   # Lowest
]

REMARKS: List[Tuple[float, str]] = [
    (80.0, "Excellent"),
    (70.0, "Very Good"),
    (60.0, "Good"),
    (50.0, "Average"),
    (40.0, "Below Average"),
    (0.0, "Needs Improvement"),
]

# Report-card vocabularies offered to class teachers.
TEACHER_REMARKS = [
    "Excellent performance, keep it up!",
    "Very good work, continue the effort.",
    "Good progress shown this term.",
    "Satisfactory work, can do better.",
    "Fair performance, needs improvement.",
    "Needs to work harder and be more focused.",
    "Requires extra attention in weak subjects.",
    "Good conduct and attitude towards learning.",
    "Excellent attitude but needs academic improvement.",
    "Shows great potential, keep working hard.",
    "Improve class participation and homework submission.",
    "Needs to improve attendance and punctuality.",
    "Outstanding performance in all subjects.",
    "Consistent effort throughout the term.",
    "More practice needed in core subjects.",
]

CONDUCT_OPTIONS = ["Excellent", "Very Good", "Good", "Satisfactory", "Fair", "Needs Improvement"]

INTEREST_OPTIONS = [
    "Sports", "Music", "Art", "Drama", "Reading",
    "Science", "Mathematics", "Technology", "Dance", "Leadership",
]


def _clamp_score(score: Any) -> float:
    """Clamp a numeric score to [0, 100]; anything but a finite number counts as 0."""
    if isinstance(score, bool) or not isinstance(score, numbers.Real):
        return 0.0
    value = float(score)
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return max(0.0, min(100.0, value))


def _band(score: Any, bands: List[Tuple[float, Any]], sentinel: Any) -> Any:
    value = _clamp_score(score)
    if value <= 0:
        return sentinel
    for min_score, label in bands[:-1]:
        if value >= min_score:
            return label
    return bands[-1][1]


def letter_grade(score: Any) -> str:
    """A (>=80), B, C, D, E (>=40), F (>0), '-' for no score."""
    return _band(score, LETTER_GRADES, NO_GRADE)


def ordinal_grade(score: Any) -> Union[int, str]:
    """1 (>=80) through 9 (>0); '-' for no score. Lower is better."""
    return _band(score, ORDINAL_GRADES, NO_GRADE)


def qualitative_remark(score: Any) -> str:
    """Excellent (>=80) down to Needs Improvement (>0); 'No Score' for 0."""
    return _band(score, REMARKS, NO_SCORE_REMARK)


def subject_remarks(record: StudentRecord, subjects: List[Subject] = SUBJECTS) -> Dict[str, str]:
    """Qualitative remark for every subject of one learner."""
    return {s.key: qualitative_remark(record.score(s.key)) for s in subjects}


def subject_grades(record: StudentRecord, subjects: List[Subject] = SUBJECTS) -> Dict[str, Dict[str, Any]]:
    """Letter, ordinal and remark for every subject of one learner."""
    grades: Dict[str, Dict[str, Any]] = {}
    for s in subjects:
        score = record.score(s.key)
        grades[s.key] = {
            "score": score,
            "letter": letter_grade(score),
            "ordinal": ordinal_grade(score),
            "remark": qualitative_remark(score),
        }
    return grades


def grade_legend(bands: List[Tuple[float, Any]]) -> List[Dict[str, Any]]:
    """Return a full grade scale (min/max per band) for legend/reference."""
    legend = []
    for idx, (min_score, label) in enumerate(bands):
        max_score: Optional[float] = 100.0 if idx == 0 else bands[idx - 1][0] - 0.01
        legend.append({
            "label": label,
            "min": min_score if idx < len(bands) - 1 else 0.01,
            "max": round(max_score, 2),
        })
    return legend


def get_all_grade_thresholds() -> Dict[str, Any]:
    """All three scales plus the report-card vocabularies."""
    return {
        "letter": grade_legend(LETTER_GRADES),
        "ordinal": grade_legend(ORDINAL_GRADES),
        "remark": grade_legend(REMARKS),
        "no_score": {"letter": NO_GRADE, "ordinal": NO_GRADE, "remark": NO_SCORE_REMARK},
        "teacher_remarks": TEACHER_REMARKS,
        "conduct_options": CONDUCT_OPTIONS,
        "interest_options": INTEREST_OPTIONS,
    }
