"""
Upload routes — file upload, header mapping, normalization, and sample data loading.
"""

import logging
import os
import uuid
from pathlib import Path
from time import time

from fastapi import APIRouter, File, HTTPException, UploadFile

from core.cleaner import clean_rows
from core.parser import (
    SAMPLE_DATA_DIR,
    SUPPORTED_EXTENSIONS,
    IngestionError,
    parse_upload,
    dataframe_to_rows,
    suggest_column_mapping,
    validate_rows,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory record store: session_id → { records, filename, created_at, ... }
sessions: dict = {}
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(60 * 60)))  # 1 hour

# Keep upload path stable regardless of process working directory.
UPLOAD_DIR = Path(__file__).resolve().parent.parent / "uploads"
UPLOAD_DIR.mkdir(exist_ok=True)


def _purge_expired_sessions():
    now = time()
    expired = [
        sid for sid, s in sessions.items()
        if (now - float(s.get("created_at", now))) > SESSION_TTL_SECONDS
    ]
    for sid in expired:
        sessions.pop(sid, None)


def _ingest(file_path: Path, filename: str) -> dict:
    """Read, map, validate and normalize one spreadsheet; store the records."""
    sheets_data = parse_upload(str(file_path))
    first_sheet = list(sheets_data.keys())[0]
    df = sheets_data[first_sheet]
    rows = dataframe_to_rows(df)

    records, report = clean_rows(rows)

    session_id = str(uuid.uuid4())
    sessions[session_id] = {
        "records": [r.to_dict() for r in records],
        "filename": filename,
        "sheet": first_sheet,
        "created_at": time(),
    }

    return {
        "session_id": session_id,
        "filename": filename,
        "sheets": list(sheets_data.keys()),
        "sheet_row_counts": {k: len(v) for k, v in sheets_data.items()},
        "column_mapping": suggest_column_mapping(df.columns),
        "issues": validate_rows(rows),
        "cleaning_report": report,
        "records": sessions[session_id]["records"],
        "record_count": len(records),
    }


@router.post("/file")
async def upload_file(file: UploadFile = File(...)):
    """
    Upload a CSV, Excel, or ODS export of learner scores.
    Returns the header mapping, validation issues, cleaning report and records.
    """
    ext = Path(file.filename or "").suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise HTTPException(400, f"Unsupported file type: {ext}. Use CSV, Excel, or ODS.")

    _purge_expired_sessions()
    save_path = UPLOAD_DIR / f"{uuid.uuid4()}{ext}"

    try:
        with open(save_path, "wb") as f:
            while True:
                chunk = await file.read(1024 * 1024)
                if not chunk:
                    break
                f.write(chunk)
        return _ingest(save_path, file.filename)
    except IngestionError as exc:
        logger.warning("Upload rejected: %s", exc)
        raise HTTPException(422, str(exc))
    finally:
        save_path.unlink(missing_ok=True)


@router.post("/sample")
async def load_sample():
    """Load the bundled sample class export."""
    sample_path = SAMPLE_DATA_DIR / "sample_class.csv"
    if not sample_path.exists():
        raise HTTPException(404, "Sample data not found.")
    try:
        return _ingest(sample_path, sample_path.name)
    except IngestionError as exc:
        logger.error("Bundled sample could not be read", exc_info=True)
        raise HTTPException(500, str(exc))


@router.get("/session/{session_id}")
async def get_session(session_id: str):
    """Return the normalized records stored for an upload session."""
    _purge_expired_sessions()
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(404, f"Session '{session_id}' not found or expired.")
    return {
        "session_id": session_id,
        "filename": session["filename"],
        "records": session["records"],
        "record_count": len(session["records"]),
    }


@router.delete("/session/{session_id}")
async def delete_session(session_id: str):
    if sessions.pop(session_id, None) is None:
        raise HTTPException(404, f"Session '{session_id}' not found or expired.")
    return {"deleted": session_id}
