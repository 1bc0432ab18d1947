"""
Tests for core/parser.py — file ingestion, cell coercion, header alias resolution.
"""

import os
import sys
import pytest

# Ensure backend/ is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.curriculum import FIELD_ALIASES, SUBJECTS
from core.parser import (
    IngestionError,
    lookup_number,
    parse_number,
    parse_text,
    parse_upload,
    read_rows,
    resolve_number,
    resolve_text,
    suggest_column_mapping,
    validate_rows,
)

SAMPLE_CSV = os.path.join(os.path.dirname(__file__), "..", "sample_data", "sample_class.csv")
SCIENCE = next(s for s in SUBJECTS if s.key == "naturalScience")
CREATIVE_ARTS = next(s for s in SUBJECTS if s.key == "creativeArts")


class TestParseUpload:
    """Tests for reading spreadsheet files."""

    def test_csv_parse_returns_single_sheet(self):
        result = parse_upload(SAMPLE_CSV)
        assert list(result.keys()) == ["Sheet1"]

    def test_read_rows_keeps_every_row(self):
        rows = read_rows(SAMPLE_CSV)
        # 10 learners + a blank row + a footer row
        assert len(rows) == 12
        assert rows[0]["NAME OF LEARNER"] == "Ama Mensah"

    def test_blank_cells_become_none(self):
        rows = read_rows(SAMPLE_CSV)
        assert rows[-1]["NAME OF LEARNER"] is None

    def test_missing_file_raises_ingestion_error(self):
        with pytest.raises(IngestionError):
            parse_upload("nonexistent_file.csv")

    def test_unsupported_extension_raises(self, tmp_path):
        path = tmp_path / "scores.pdf"
        path.write_bytes(b"%PDF-1.4")
        with pytest.raises(IngestionError) as exc:
            parse_upload(str(path))
        assert "unsupported" in str(exc.value)

    def test_corrupt_workbook_raises(self, tmp_path):
        path = tmp_path / "scores.xlsx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(IngestionError):
            parse_upload(str(path))

    def test_ingestion_error_is_value_error(self):
        assert issubclass(IngestionError, ValueError)

    def test_unknown_sheet_raises(self):
        with pytest.raises(IngestionError):
            read_rows(SAMPLE_CSV, sheet="Term 3")

    def test_xlsx_round_trip(self, tmp_path):
        import pandas as pd

        path = tmp_path / "scores.xlsx"
        pd.DataFrame({
            "NAME OF LEARNER": ["Ama", "Kofi"],
            "MATHEMATICS": [85, 40],
            "TOTAL RAW SCORE": [85, 40],
        }).to_excel(path, index=False)
        rows = read_rows(str(path))
        assert len(rows) == 2
        assert parse_number(rows[0]["MATHEMATICS"]) == 85.0


class TestCellCoercion:
    """Tests for parse_number / parse_text."""

    @pytest.mark.parametrize("value,expected", [
        ("85", 85.0),
        (" 72.5 ", 72.5),
        ("85%", 85.0),
        (66, 66.0),
        (49.5, 49.5),
        ("-3", -3.0),
    ])
    def test_numbers(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "  ", float("nan"), "nan", True, float("inf")])
    def test_not_numbers(self, value):
        assert parse_number(value) is None

    def test_text_strips_whitespace(self):
        assert parse_text("  Ama Mensah ") == "Ama Mensah"

    def test_integral_float_text_has_no_decimal(self):
        assert parse_text(1.0) == "1"

    def test_blank_text(self):
        assert parse_text(None) == ""
        assert parse_text(float("nan")) == ""


class TestHeaderResolution:
    """Tests for alias-based header resolution."""

    def test_alias_resolves_science(self):
        row = {"NAME OF LEARNER": "Ama", "SCIENCE": "66"}
        assert resolve_number(row, SCIENCE.aliases) == 66.0

    def test_canonical_header_wins_over_alias(self):
        row = {"SCIENCE": "40", "NATURAL SCIENCE": "70"}
        assert resolve_number(row, SCIENCE.aliases) == 70.0

    def test_unparseable_alias_falls_through(self):
        row = {"NATURAL SCIENCE": "absent", "INTEGRATED SCIENCE": "58"}
        assert resolve_number(row, SCIENCE.aliases) == 58.0

    def test_case_and_whitespace_insensitive(self):
        row = {"  creative art ": "71"}
        assert resolve_number(row, CREATIVE_ARTS.aliases) == 71.0

    def test_missing_column_is_zero(self):
        assert resolve_number({"NAME": "Ama"}, SCIENCE.aliases) == 0.0
        assert lookup_number({"NAME": "Ama"}, SCIENCE.aliases) is None

    def test_unparseable_value_is_zero(self):
        assert resolve_number({"SCIENCE": "n/a"}, SCIENCE.aliases) == 0.0

    def test_resolve_text_skips_blank_alias(self):
        row = {"NAME OF LEARNER": "", "NAME": "Kofi"}
        assert resolve_text(row, FIELD_ALIASES["name"]) == "Kofi"


class TestSuggestColumnMapping:
    """Tests for column mapping suggestions."""

    def test_maps_aliased_headers(self):
        mapping = suggest_column_mapping(["NAME OF LEARNER", "SCIENCE", "TOTAL RAW SCORE"])
        assert mapping["name"] == "NAME OF LEARNER"
        assert mapping["naturalScience"] == "SCIENCE"
        assert mapping["totalRawScore"] == "TOTAL RAW SCORE"
        assert mapping["french"] is None

    def test_sample_maps_every_subject(self):
        rows = read_rows(SAMPLE_CSV)
        mapping = suggest_column_mapping(rows[0].keys())
        for s in SUBJECTS:
            assert mapping[s.key] is not None, s.key


class TestValidateRows:
    """Tests for upload validation issues."""

    def test_empty_rows_are_critical(self):
        issues = validate_rows([])
        assert issues[0]["type"] == "empty_data"

    def test_missing_name_column(self):
        issues = validate_rows([{"MATHEMATICS": "50", "TOTAL RAW SCORE": "50"}])
        types = {i["type"] for i in issues}
        assert "missing_column" in types
        assert "missing_subjects" in types

    def test_sample_has_no_critical_issues(self):
        issues = validate_rows(read_rows(SAMPLE_CSV))
        assert not [i for i in issues if i["severity"] == "critical"]
