"""
report_builder.py — Flattened learner export (Excel / CSV).

One row per learner: raw subject scores with their letter and ordinal
grades, then the summary fields. The subject columns keep the headers of
the original upload so an export can be re-imported unchanged.
"""

import logging
from typing import Any, Dict, List

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils.dataframe import dataframe_to_rows

from core.curriculum import SUBJECTS, Subject
from core.grading import letter_grade, ordinal_grade
from core.models import StudentRecord
from core.stats import round_half_up

logger = logging.getLogger(__name__)

AVERAGE_COLUMN = "Average Score (%)"


def export_columns(subjects: List[Subject] = SUBJECTS) -> List[str]:
    """Column order of every export."""
    columns = ["S/N", "Name"]
    for s in subjects:
        columns += [s.header, f"{s.header} Grade", f"{s.header} Ordinal"]
    columns += [
        "Total Raw Score",
        AVERAGE_COLUMN,
        "Total Aggregate",
        "Position",
        "Teacher Remark",
        "Conduct",
        "Interest",
    ]
    return columns


EXPORT_COLUMNS = export_columns()


def build_export_rows(
    records: List[StudentRecord],
    subjects: List[Subject] = SUBJECTS,
) -> List[Dict[str, Any]]:
    """Flatten records into export rows, keys in export_columns() order."""
    rows = []
    for r in records:
        row: Dict[str, Any] = {"S/N": r.sequence_number, "Name": r.name}
        for s in subjects:
            score = r.score(s.key)
            row[s.header] = score
            row[f"{s.header} Grade"] = letter_grade(score)
            row[f"{s.header} Ordinal"] = ordinal_grade(score)
        row.update({
            "Total Raw Score": r.total_raw_score,
            AVERAGE_COLUMN: f"{round_half_up(r.average_score, 2):.2f}",
            "Total Aggregate": r.total_aggregate,
            "Position": r.position,
            "Teacher Remark": r.teacher_remark,
            "Conduct": r.conduct,
            "Interest": r.interest,
        })
        rows.append(row)
    return rows


def export_frame(records: List[StudentRecord], subjects: List[Subject] = SUBJECTS) -> pd.DataFrame:
    return pd.DataFrame(build_export_rows(records, subjects), columns=export_columns(subjects))


# ═══════════════════════════════════════════════════════════════════
# CSV EXPORT
# ═══════════════════════════════════════════════════════════════════

def generate_csv_export(output_path: str, records: List[StudentRecord]):
    """Write the flattened export as CSV."""
    export_frame(records).to_csv(output_path, index=False)
    logger.info("Wrote CSV export with %d row(s) to %s", len(records), output_path)


# ═══════════════════════════════════════════════════════════════════
# EXCEL EXPORT
# ═══════════════════════════════════════════════════════════════════

def generate_excel_export(
    output_path: str,
    records: List[StudentRecord],
    school_name: str,
):
    """Export learners to Excel with a styled header and per-row average colouring."""
    df = export_frame(records)

    # Styling definitions
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="1a1a2e", end_color="1a1a2e", fill_type="solid")
    red_fill = PatternFill(start_color="fadbd8", end_color="fadbd8", fill_type="solid")
    green_fill = PatternFill(start_color="d5f5e3", end_color="d5f5e3", fill_type="solid")
    yellow_fill = PatternFill(start_color="fef9e7", end_color="fef9e7", fill_type="solid")
    thin_border = Border(
        left=Side(style="thin"), right=Side(style="thin"),
        top=Side(style="thin"), bottom=Side(style="thin"),
    )

    wb = Workbook()
    ws = wb.active
    ws.title = "Student Reports"
    ws.sheet_properties.tabColor = "1a1a2e"

    for row in dataframe_to_rows(df, index=False, header=True):
        ws.append(row)

    # Header row
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")
        cell.border = thin_border

    avg_col_idx = list(df.columns).index(AVERAGE_COLUMN) + 1

    # Borders and row colouring by average band (>=40 strong, >=30 moderate)
    for row in ws.iter_rows(min_row=2, max_row=ws.max_row):
        for cell in row:
            cell.border = thin_border
            cell.alignment = Alignment(horizontal="center")
        try:
            val = float(row[avg_col_idx - 1].value)
        except (TypeError, ValueError):
            continue
        fill = green_fill if val >= 40 else (yellow_fill if val >= 30 else red_fill)
        for cell in row:
            cell.fill = fill

    # Freeze header
    ws.freeze_panes = "A2"

    # Auto-width columns
    for col_cells in ws.columns:
        max_len = max(len(str(cell.value or "")) for cell in col_cells)
        ws.column_dimensions[col_cells[0].column_letter].width = min(max_len + 4, 40)

    wb.properties.title = f"{school_name} — Learner Reports"
    wb.save(output_path)
    logger.info("Wrote Excel export with %d row(s) to %s", len(records), output_path)
