"""
models.py — Typed records flowing through the analytics pipeline.

Raw spreadsheet cells are untyped (`Cell`); everything after the normalizer
works on the frozen dataclasses below. `to_dict()` gives the JSON shape the
frontend consumes (camelCase keys).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

# A single spreadsheet cell as produced by the tabular reader.
Cell = Optional[Union[float, int, str]]


class InsightKind(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"
    CONCERN = "concern"


class RecommendationPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class StudentRecord:
    """One learner's scores for one assessment period."""

    name: str
    subject_scores: Dict[str, float]
    total_raw_score: float = 0.0
    average_score: float = 0.0
    total_aggregate: float = 0.0
    position: str = ""
    sequence_number: int = 0
    teacher_remark: str = ""
    conduct: str = ""
    interest: str = ""

    def score(self, subject_key: str) -> float:
        return self.subject_scores.get(subject_key, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "sn": self.sequence_number,
            "name": self.name,
        }
        data.update(self.subject_scores)
        data.update({
            "totalRawScore": self.total_raw_score,
            "averageScore": self.average_score,
            "totalAggregate": self.total_aggregate,
            "position": self.position,
            "teacherRemark": self.teacher_remark,
            "conduct": self.conduct,
            "interest": self.interest,
        })
        return data


@dataclass(frozen=True)
class SubjectStat:
    subject: str
    average: float = 0.0
    highest: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"subject": self.subject, "average": self.average, "highest": self.highest}


@dataclass(frozen=True)
class CohortStats:
    total_learners: int = 0
    average_score: float = 0.0
    top_performer: str = "N/A"
    lowest_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalLearners": self.total_learners,
            "averageScore": self.average_score,
            "topPerformer": self.top_performer,
            "lowestScore": self.lowest_score,
        }


@dataclass(frozen=True)
class Insight:
    kind: InsightKind
    title: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "title": self.title, "description": self.description}


@dataclass(frozen=True)
class Recommendation:
    priority: RecommendationPriority
    category: str
    action: str
    rationale: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priority": self.priority.value,
            "category": self.category,
            "action": self.action,
            "rationale": self.rationale,
        }

