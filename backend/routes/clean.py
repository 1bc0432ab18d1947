"""
Clean routes — row normalization endpoints.
"""

from fastapi import APIRouter, HTTPException

from core.cleaner import clean_rows, generate_cleaning_report

router = APIRouter()


def _rows_from_payload(payload: dict) -> list:
    rows = payload.get("rows")
    if not rows:
        raise HTTPException(400, "No rows provided.")
    return rows


@router.post("/preview")
async def preview_cleaning(payload: dict):
    """
    Preview what normalization would do to the rows without storing anything.
    Expects: { "rows": [...raw spreadsheet rows...] }
    """
    records, report = clean_rows(_rows_from_payload(payload))
    return {
        "cleaning_report": report,
        "cleaning_report_text": generate_cleaning_report(report),
        "record_count": len(records),
        "preview": [r.to_dict() for r in records[:20]],
    }


@router.post("/apply")
async def apply_cleaning(payload: dict):
    """
    Normalize the rows and return every retained record.
    Expects: { "rows": [...raw spreadsheet rows...] }
    """
    records, report = clean_rows(_rows_from_payload(payload))
    return {
        "cleaning_report": report,
        "records": [r.to_dict() for r in records],
        "record_count": len(records),
    }
