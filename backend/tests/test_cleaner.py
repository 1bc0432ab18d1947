"""
Tests for core/cleaner.py — row normalization, validity filtering, cleaning report.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.cleaner import (
    clean_rows,
    generate_cleaning_report,
    normalize_row,
    normalize_rows,
    record_from_dict,
    records_from_dicts,
)
from core.curriculum import SUBJECT_KEYS
from core.parser import read_rows

SAMPLE_CSV = os.path.join(os.path.dirname(__file__), "..", "sample_data", "sample_class.csv")


@pytest.fixture
def sample_rows():
    return read_rows(SAMPLE_CSV)


class TestNormalizeRow:
    """Tests for single-row normalization."""

    def test_scenario_retained_record(self):
        records = normalize_rows([
            {"NAME OF LEARNER": "Ama", "MATHEMATICS": "85", "TOTAL RAW SCORE": "85"},
        ])
        assert len(records) == 1
        assert records[0].score("mathematics") == 85.0
        assert records[0].total_raw_score == 85.0

    def test_every_subject_present_and_zero_filled(self):
        record = normalize_row({"NAME OF LEARNER": "Ama", "MATHEMATICS": "85"})
        assert set(record.subject_scores) == set(SUBJECT_KEYS)
        assert record.score("french") == 0.0

    def test_alias_header_resolves_natural_science(self):
        record = normalize_row({"NAME OF LEARNER": "Ama", "SCIENCE": "66", "TOTAL RAW SCORE": "66"})
        assert record.score("naturalScience") == 66.0

    def test_text_defaults(self):
        record = normalize_row({})
        assert record.name == ""
        assert record.position == ""
        assert record.total_raw_score == 0.0
        assert record.sequence_number == 0

    def test_position_passed_through(self):
        record = normalize_row({"NAME": "Ama", "POSITION": "1st", "TOTAL RAW SCORE": 700})
        assert record.position == "1st"

    def test_subject_scores_clamped_to_percent_range(self):
        record = normalize_row({"NAME": "Ama", "MATHEMATICS": "120", "FRENCH": "-5"})
        assert record.score("mathematics") == 100.0
        assert record.score("french") == 0.0

    def test_record_is_immutable(self):
        record = normalize_row({"NAME": "Ama", "TOTAL RAW SCORE": 10})
        with pytest.raises(Exception):
            record.name = "Kofi"


class TestNormalizeRows:
    """Tests for the batch filter."""

    def test_empty_name_excluded(self):
        records = normalize_rows([
            {"NAME OF LEARNER": "", "MATHEMATICS": "70", "TOTAL RAW SCORE": "70"},
        ])
        assert records == []

    @pytest.mark.parametrize("total", ["0", "-10", "", None, "total"])
    def test_non_positive_total_excluded(self, total):
        records = normalize_rows([{"NAME OF LEARNER": "Kofi", "TOTAL RAW SCORE": total}])
        assert records == []

    def test_sample_drops_blank_and_footer_rows(self, sample_rows):
        records = normalize_rows(sample_rows)
        assert len(records) == 10
        assert all(r.name and r.total_raw_score > 0 for r in records)

    def test_input_order_preserved(self, sample_rows):
        records = normalize_rows(sample_rows)
        assert [r.sequence_number for r in records] == list(range(1, 11))

    def test_rerun_is_identical(self, sample_rows):
        assert normalize_rows(sample_rows) == normalize_rows(sample_rows)

    def test_malformed_rows_never_raise(self):
        rows = [{"NAME": object(), "TOTAL RAW SCORE": object()}, {}, {"": None}]
        assert normalize_rows(rows) == []


class TestCleanRows:
    """Tests for the cleaning report."""

    def test_returns_records_and_report(self, sample_rows):
        records, report = clean_rows(sample_rows)
        assert len(records) == 10
        assert report["original_rows"] == 12
        assert report["retained_rows"] == 10
        assert report["dropped_rows"] == 2

    def test_same_records_as_normalize_rows(self, sample_rows):
        records, _ = clean_rows(sample_rows)
        assert records == normalize_rows(sample_rows)

    def test_zero_filled_cells_counted(self):
        rows = [{"NAME": "Ama", "MATHEMATICS": "x", "ENGLISH LANGUAGE": "50", "TOTAL RAW SCORE": 50}]
        _, report = clean_rows(rows)
        # nine subjects missing or unparseable
        assert report["zero_filled_cells"] == 9
        assert report["warnings"]

    def test_text_report(self, sample_rows):
        _, report = clean_rows(sample_rows)
        text = generate_cleaning_report(report)
        assert "Rows retained: 10" in text


class TestRecordFromDict:
    """Tests for rebuilding records from their JSON shape."""

    def test_round_trip(self, sample_rows):
        records = normalize_rows(sample_rows)
        rebuilt = [record_from_dict(r.to_dict()) for r in records]
        assert rebuilt == records

    def test_posted_records_drop_blank_and_footer_rows(self):
        posted = [
            {"name": "", "totalRawScore": 900},
            {"name": "Ama", "totalRawScore": 0},
            {"name": "Kofi", "totalRawScore": 300},
        ]
        records = records_from_dicts(posted)
        assert [r.name for r in records] == ["Kofi"]
        assert all(r.name and r.total_raw_score > 0 for r in records)
