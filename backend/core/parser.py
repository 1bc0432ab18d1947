"""
parser.py — CSV, Excel, ODS ingestion and header resolution.

Supports:
- CSV files
- Excel (.xlsx, .xls) — first sheet or a named sheet
- ODS (OpenDocument Spreadsheet)
- Case-insensitive header alias resolution for every canonical field
- Column mapping suggestions and upload validation
"""

import logging
import math
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from core.curriculum import SUBJECTS, all_aliases
from core.models import Cell

logger = logging.getLogger(__name__)

SAMPLE_DATA_DIR = Path(__file__).parent.parent / "sample_data"

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls", ".ods")

# Leading number, the way spreadsheet tools coerce "85%" or "72 marks".
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class IngestionError(ValueError):
    """The uploaded file could not be read as a table at all."""

    def __init__(self, file_name: str, reason: str):
        super().__init__(f"Could not read '{file_name}': {reason}")
        self.file_name = file_name
        self.reason = reason


# ── File Reading ────────────────────────────────────────────────────

def parse_upload(file_path: str) -> Dict[str, pd.DataFrame]:
    """
    Parse an uploaded file and return a dict of {sheet_name: DataFrame}.
    For CSV files, returns {"Sheet1": df}.

    Raises IngestionError for unreadable, corrupt or unsupported files.
    """
    path = Path(file_path)
    ext = path.suffix.lower()

    if ext not in SUPPORTED_EXTENSIONS:
        raise IngestionError(path.name, f"unsupported file type '{ext}'")

    try:
        if ext == ".csv":
            df = pd.read_csv(file_path, dtype=str)
            sheets = {"Sheet1": df}
        else:
            engine = {".xlsx": "openpyxl", ".xls": "xlrd", ".ods": "odf"}[ext]
            xls = pd.ExcelFile(file_path, engine=engine)
            sheets = {}
            for sheet_name in xls.sheet_names:
                df = pd.read_excel(xls, sheet_name=sheet_name, dtype=str)
                # Skip empty sheets
                if not df.empty and len(df.columns) > 1:
                    sheets[sheet_name] = df
    except IngestionError:
        raise
    except Exception as exc:
        logger.warning("Reader failed for %s: %s", path.name, exc)
        raise IngestionError(path.name, str(exc)) from exc

    if not sheets:
        raise IngestionError(path.name, "no valid sheets found")

    logger.info(
        "Parsed %s: %d sheet(s), %s",
        path.name, len(sheets), {k: len(v) for k, v in sheets.items()},
    )
    return sheets


def dataframe_to_rows(df: pd.DataFrame) -> List[Dict[str, Cell]]:
    """Convert a sheet to row mappings; NaN cells become None."""
    cleaned = df.astype(object).where(pd.notna(df), None)
    return [
        {str(k): v for k, v in row.items()}
        for row in cleaned.to_dict(orient="records")
    ]


def read_rows(file_path: str, sheet: Optional[str] = None) -> List[Dict[str, Cell]]:
    """Read the first (or the named) sheet as a list of row mappings."""
    sheets = parse_upload(file_path)
    if sheet is None:
        sheet = next(iter(sheets))
    elif sheet not in sheets:
        raise IngestionError(Path(file_path).name, f"sheet '{sheet}' not found")
    return dataframe_to_rows(sheets[sheet])


# ── Cell Coercion ───────────────────────────────────────────────────

def parse_number(value: Cell) -> Optional[float]:
    """
    Interpret a cell as a number, or None when it is not one.

    Strings are parsed by their leading number ("85%" -> 85.0).
    Booleans, blanks, NaN and infinities are not numbers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value).strip())
        if not match:
            return None
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_text(value: Cell) -> str:
    """Interpret a cell as stripped text; blanks become ''."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


# ── Header Resolution ───────────────────────────────────────────────

def _header_index(row: Dict[str, Cell]) -> Dict[str, str]:
    """Map trimmed, lower-cased header -> original header (first wins)."""
    index: Dict[str, str] = {}
    for key in row.keys():
        index.setdefault(str(key).strip().lower(), key)
    return index


def lookup_number(row: Dict[str, Cell], aliases: Sequence[str]) -> Optional[float]:
    """
    Return the first alias value that is present and parses as a number.

    Aliases are tried in priority order, case-insensitively; a present but
    unparseable cell does not stop the search. None when nothing matches.
    """
    index = _header_index(row)
    for alias in aliases:
        key = index.get(str(alias).strip().lower())
        if key is None:
            continue
        number = parse_number(row[key])
        if number is not None:
            return number
    return None


def resolve_number(row: Dict[str, Cell], aliases: Sequence[str]) -> float:
    """Like lookup_number, but missing columns and bad cells degrade to 0."""
    number = lookup_number(row, aliases)
    return 0.0 if number is None else number


def resolve_text(row: Dict[str, Cell], aliases: Sequence[str]) -> str:
    """Return the first alias value that is present and non-blank, or ''."""
    index = _header_index(row)
    for alias in aliases:
        key = index.get(str(alias).strip().lower())
        if key is None:
            continue
        text = parse_text(row[key])
        if text:
            return text
    return ""


def find_header(columns: Iterable[str], aliases: Sequence[str]) -> Optional[str]:
    """Find the first actual header matching any alias (case-insensitive)."""
    cols_lower: Dict[str, str] = {}
    for c in columns:
        cols_lower.setdefault(str(c).strip().lower(), c)
    for alias in aliases:
        if alias.strip().lower() in cols_lower:
            return cols_lower[alias.strip().lower()]
    return None


# ── Mapping Suggestions & Validation ────────────────────────────────

def suggest_column_mapping(columns: Iterable[str]) -> Dict[str, Optional[str]]:
    """
    Suggest a mapping from canonical field names to actual column names.
    Returns: { canonical_field: actual_column_name_or_None }
    """
    columns = list(columns)
    return {
        field: find_header(columns, aliases)
        for field, aliases in all_aliases().items()
    }


def validate_rows(rows: List[Dict[str, Cell]]) -> List[Dict]:
    """
    Validate parsed rows and return a list of issues found.
    Issues never block ingestion; they explain what the normalizer will do.
    """
    issues: List[Dict] = []

    if not rows:
        issues.append({
            "type": "empty_data",
            "severity": "critical",
            "message": "The uploaded file contains no data rows.",
        })
        return issues

    columns: List[str] = []
    for row in rows:
        for key in row.keys():
            if key not in columns:
                columns.append(key)
    mapping = suggest_column_mapping(columns)

    for field in ("name", "totalRawScore"):
        if mapping.get(field) is None:
            issues.append({
                "type": "missing_column",
                "severity": "critical",
                "message": f"Required column '{field}' not found. "
                           f"Expected one of: {list(all_aliases()[field])}",
            })

    missing_subjects = [s.label for s in SUBJECTS if mapping.get(s.key) is None]
    if len(missing_subjects) == len(SUBJECTS):
        issues.append({
            "type": "no_subjects",
            "severity": "critical",
            "message": "No subject columns were recognised; every score will be 0.",
        })
    elif missing_subjects:
        issues.append({
            "type": "missing_subjects",
            "severity": "warning",
            "message": f"Subjects not found (scored as 0): {', '.join(missing_subjects)}.",
        })

    recognised = {v for v in mapping.values() if v}
    unknown = [c for c in columns if c not in recognised]
    if unknown:
        issues.append({
            "type": "unrecognised_columns",
            "severity": "info",
            "message": f"{len(unknown)} column(s) ignored: {unknown[:10]}",
        })

    return issues
