"""
Report routes — Excel and CSV export endpoints.
"""

import logging
import os
import re
import uuid
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from core.report_builder import generate_csv_export, generate_excel_export
from routes.analyze import records_from_payload

logger = logging.getLogger(__name__)

router = APIRouter()

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "My School")
UPLOAD_DIR = Path(__file__).resolve().parent.parent / "uploads"
REPORTS_DIR = UPLOAD_DIR / "reports"
REPORTS_DIR.mkdir(parents=True, exist_ok=True)


def _safe_token(value: str, fallback: str = "item") -> str:
    """Create filesystem-safe token for filenames."""
    token = re.sub(r"[^A-Za-z0-9._-]+", "_", str(value)).strip("._-")
    return token or fallback


def _safe_unlink(path: str):
    """Delete the temporary report once the response has been sent."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove temporary report %s", path, exc_info=True)


@router.post("/excel")
async def excel_export(payload: dict):
    """Export learners (scores, grades, summary fields) as an .xlsx workbook."""
    records = records_from_payload(payload)
    school_name = payload.get("school_name") or SCHOOL_NAME
    output_path = REPORTS_DIR / f"learner_reports_{uuid.uuid4().hex[:8]}.xlsx"

    generate_excel_export(str(output_path), records, school_name)

    return FileResponse(
        str(output_path),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=f"{_safe_token(school_name, 'school')}_learner_reports.xlsx",
        background=BackgroundTask(_safe_unlink, str(output_path)),
    )


@router.post("/csv")
async def csv_export(payload: dict):
    """Export learners as CSV."""
    records = records_from_payload(payload)
    school_name = payload.get("school_name") or SCHOOL_NAME
    output_path = REPORTS_DIR / f"learner_reports_{uuid.uuid4().hex[:8]}.csv"

    generate_csv_export(str(output_path), records)

    return FileResponse(
        str(output_path),
        media_type="text/csv",
        filename=f"{_safe_token(school_name, 'school')}_learner_reports.csv",
        background=BackgroundTask(_safe_unlink, str(output_path)),
    )
