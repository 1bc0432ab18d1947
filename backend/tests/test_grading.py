"""
Tests for core/grading.py — letter, ordinal and remark scales.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.cleaner import normalize_row
from core.grading import (
    LETTER_GRADES,
    ORDINAL_GRADES,
    REMARKS,
    get_all_grade_thresholds,
    letter_grade,
    ordinal_grade,
    qualitative_remark,
    subject_grades,
    subject_remarks,
)

LETTERS = {label for _, label in LETTER_GRADES} | {"-"}
ORDINALS = {label for _, label in ORDINAL_GRADES} | {"-"}
REMARK_TEXTS = {label for _, label in REMARKS} | {"No Score"}

ALL_SCORES = [x / 2 for x in range(0, 201)]  # 0, 0.5, ... 100


class TestLetterGrade:

    @pytest.mark.parametrize("score,expected", [
        (100, "A"), (80, "A"), (79.99, "B"), (70, "B"), (60, "C"),
        (50, "D"), (40, "E"), (39.5, "F"), (0.5, "F"), (0, "-"),
    ])
    def test_bands(self, score, expected):
        assert letter_grade(score) == expected

    def test_scenario_a(self):
        assert letter_grade(85) == "A"


class TestOrdinalGrade:

    @pytest.mark.parametrize("score,expected", [
        (85, 1), (80, 1), (75, 2), (65, 3), (55, 4), (54.9, 5), (50, 5),
        (45, 6), (40, 7), (35, 8), (34, 9), (1, 9), (0, "-"),
    ])
    def test_bands(self, score, expected):
        assert ordinal_grade(score) == expected

    def test_monotonic(self):
        grades = [ordinal_grade(s) for s in ALL_SCORES if s > 0]
        # Higher scores never get a worse (larger) ordinal.
        for better, worse in zip(grades[1:], grades[:-1]):
            assert better <= worse


class TestQualitativeRemark:

    @pytest.mark.parametrize("score,expected", [
        (90, "Excellent"), (70, "Very Good"), (60, "Good"), (50, "Average"),
        (40, "Below Average"), (10, "Needs Improvement"), (0, "No Score"),
    ])
    def test_bands(self, score, expected):
        assert qualitative_remark(score) == expected


class TestSharedProperties:

    def test_values_from_fixed_enumerations(self):
        for s in ALL_SCORES:
            assert letter_grade(s) in LETTERS
            assert ordinal_grade(s) in ORDINALS
            assert qualitative_remark(s) in REMARK_TEXTS

    def test_zero_is_sentinel_everywhere(self):
        assert letter_grade(0) == "-"
        assert ordinal_grade(0) == "-"
        assert qualitative_remark(0) == "No Score"

    @pytest.mark.parametrize("value", [None, "abc", "85", float("nan"), float("inf"), float("-inf"), True, -5])
    def test_non_scores_are_sentinel(self, value):
        assert letter_grade(value) == "-"
        assert ordinal_grade(value) == "-"
        assert qualitative_remark(value) == "No Score"

    def test_above_range_is_clamped(self):
        assert letter_grade(120) == "A"
        assert ordinal_grade(120) == 1


class TestRecordHelpers:

    def test_subject_remarks(self):
        record = normalize_row({"NAME": "Ama", "MATHEMATICS": 85, "TOTAL RAW SCORE": 85})
        remarks = subject_remarks(record)
        assert remarks["mathematics"] == "Excellent"
        assert remarks["french"] == "No Score"

    def test_subject_grades(self):
        record = normalize_row({"NAME": "Ama", "HISTORY": 56, "TOTAL RAW SCORE": 56})
        grades = subject_grades(record)
        assert grades["history"] == {"score": 56.0, "letter": "D", "ordinal": 4, "remark": "Average"}

    def test_threshold_legend(self):
        legend = get_all_grade_thresholds()
        assert [b["label"] for b in legend["letter"]] == ["A", "B", "C", "D", "E", "F"]
        assert legend["ordinal"][0]["max"] == 100.0
        assert legend["no_score"]["remark"] == "No Score"
        assert len(legend["teacher_remarks"]) == 15
