"""
cleaner.py — Raw row → StudentRecord normalization.

Handles:
- Header alias resolution for the ten curriculum subjects
- Numeric coercion (unparseable / missing → 0)
- Text fields (name, position, remarks) with '' defaults
- Dropping blank rows and footer/summary rows (no name or total <= 0)
- Cleaning report generation
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from core.curriculum import FIELD_ALIASES, SUBJECTS, Subject
from core.models import Cell, StudentRecord
from core.parser import (
    find_header,
    lookup_number,
    parse_number,
    parse_text,
    resolve_number,
    resolve_text,
)

logger = logging.getLogger(__name__)


# ── Single Row ──────────────────────────────────────────────────────

def normalize_row(row: Dict[str, Cell], subjects: List[Subject] = SUBJECTS) -> StudentRecord:
    """Build a StudentRecord from one raw row. Never raises."""
    return StudentRecord(
        sequence_number=int(resolve_number(row, FIELD_ALIASES["sequenceNumber"])),
        name=resolve_text(row, FIELD_ALIASES["name"]),
        subject_scores={s.key: clamp_score(resolve_number(row, s.aliases)) for s in subjects},
        total_raw_score=resolve_number(row, FIELD_ALIASES["totalRawScore"]),
        average_score=resolve_number(row, FIELD_ALIASES["averageScore"]),
        total_aggregate=resolve_number(row, FIELD_ALIASES["totalAggregate"]),
        position=resolve_text(row, FIELD_ALIASES["position"]),
        teacher_remark=resolve_text(row, FIELD_ALIASES["teacherRemark"]),
        conduct=resolve_text(row, FIELD_ALIASES["conduct"]),
        interest=resolve_text(row, FIELD_ALIASES["interest"]),
    )


def clamp_score(score: float) -> float:
    """Subject scores live in [0, 100]."""
    return max(0.0, min(100.0, score))


def is_valid_record(record: StudentRecord) -> bool:
    """Retained records have a name and a strictly positive total."""
    return record.name != "" and record.total_raw_score > 0


# ── Batch ───────────────────────────────────────────────────────────

def normalize_rows(
    rows: List[Dict[str, Cell]],
    subjects: List[Subject] = SUBJECTS,
) -> List[StudentRecord]:
    """Normalize every row, then drop blank and footer rows."""
    candidates = [normalize_row(row, subjects) for row in rows]
    records = [r for r in candidates if is_valid_record(r)]
    if len(records) != len(candidates):
        logger.debug("Dropped %d row(s) without a name or total", len(candidates) - len(records))
    return records


def clean_rows(
    rows: List[Dict[str, Cell]],
    subjects: List[Subject] = SUBJECTS,
) -> Tuple[List[StudentRecord], Dict[str, Any]]:
    """
    Normalize rows and return (records, cleaning_report).
    """
    report: Dict[str, Any] = {
        "original_rows": len(rows),
        "steps": [],
        "warnings": [],
    }

    records: List[StudentRecord] = []
    zero_filled = 0
    for row in rows:
        record = normalize_row(row, subjects)
        if not is_valid_record(record):
            continue
        records.append(record)
        zero_filled += sum(1 for s in subjects if lookup_number(row, s.aliases) is None)
    report["steps"].append("Resolved subject columns through the header alias lists.")
    if zero_filled:
        report["steps"].append(f"Treated {zero_filled} missing or unparseable subject scores as 0.")

    columns = _columns(rows)
    missing = [s.label for s in subjects if find_header(columns, s.aliases) is None]
    if missing and rows:
        report["warnings"].append(
            f"No column found for: {', '.join(missing)}. Those subjects are scored as 0."
        )

    dropped = len(rows) - len(records)
    if dropped > 0:
        report["steps"].append(
            f"Removed {dropped} row(s) with no learner name or a non-positive total raw score."
        )
    else:
        report["steps"].append("No blank or summary rows found.")

    report["retained_rows"] = len(records)
    report["dropped_rows"] = dropped
    report["zero_filled_cells"] = zero_filled

    logger.info("Normalized %d row(s) into %d record(s)", len(rows), len(records))
    return records, report


def generate_cleaning_report(report: Dict) -> str:
    """Generate a human-readable cleaning report text."""
    lines = [
        "═══ Data Cleaning Report ═══",
        f"Rows read:     {report['original_rows']}",
        f"Rows retained: {report['retained_rows']}",
        "",
        "Steps performed:",
    ]
    for i, step in enumerate(report["steps"], 1):
        lines.append(f"  {i}. {step}")

    if report["warnings"]:
        lines.append("")
        lines.append("⚠ Warnings:")
        for w in report["warnings"]:
            lines.append(f"  • {w}")

    return "\n".join(lines)


# ── Serialized Records ──────────────────────────────────────────────

def record_from_dict(data: Dict[str, Any], subjects: List[Subject] = SUBJECTS) -> StudentRecord:
    """Rebuild a record from its to_dict() shape (e.g. a JSON payload)."""
    return StudentRecord(
        sequence_number=int(_number(data.get("sn"))),
        name=parse_text(data.get("name")),
        subject_scores={s.key: clamp_score(_number(data.get(s.key))) for s in subjects},
        total_raw_score=_number(data.get("totalRawScore")),
        average_score=_number(data.get("averageScore")),
        total_aggregate=_number(data.get("totalAggregate")),
        position=parse_text(data.get("position")),
        teacher_remark=parse_text(data.get("teacherRemark")),
        conduct=parse_text(data.get("conduct")),
        interest=parse_text(data.get("interest")),
    )


def records_from_dicts(
    items: List[Dict[str, Any]],
    subjects: List[Subject] = SUBJECTS,
) -> List[StudentRecord]:
    """Rebuild posted records, dropping any without a name or a positive total."""
    records = [record_from_dict(item, subjects) for item in items]
    return [r for r in records if is_valid_record(r)]


# ── Helpers ─────────────────────────────────────────────────────────

def _number(value: Any) -> float:
    number: Optional[float] = parse_number(value)
    return 0.0 if number is None else number


def _columns(rows: List[Dict[str, Cell]]) -> List[str]:
    seen: Dict[str, None] = {}
    for row in rows:
        for key in row.keys():
            seen.setdefault(key, None)
    return list(seen)
