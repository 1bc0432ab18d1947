"""
curriculum.py — Fixed ten-subject curriculum and header alias tables.

Source spreadsheets name their columns inconsistently ("SCIENCE" vs
"NATURAL SCIENCE" vs "INTEGRATED SCIENCE"), so every canonical field owns an
ordered alias list. The first alias that is present and parseable wins.

Bump HEADER_ALIASES_VERSION whenever an alias list changes.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

HEADER_ALIASES_VERSION = 1


@dataclass(frozen=True)
class Subject:
    key: str           # canonical record field
    label: str         # chart / statistics label
    header: str        # export column header
    aliases: Tuple[str, ...]


# Order is load-bearing: statistics and exports follow it.
SUBJECTS: List[Subject] = [
    Subject("englishLanguage", "English", "English Language",
            ("ENGLISH LANGUAGE", "ENGLISH")),
    Subject("mathematics", "Mathematics", "Mathematics",
            ("MATHEMATICS", "MATHS", "MATH")),
    Subject("naturalScience", "Science", "Natural Science",
            ("NATURAL SCIENCE", "SCIENCE", "INTEGRATED SCIENCE", "NS")),
    Subject("history", "History", "History",
            ("HISTORY",)),
    Subject("computing", "Computing", "Computing",
            ("COMPUTING", "ICT")),
    Subject("rme", "RME", "RME",
            ("RME", "RELIGIOUS AND MORAL EDUCATION")),
    Subject("creativeArts", "Creative Arts", "Creative Arts",
            ("CREATIVE ARTS", "CREATIVE ART", "ART", "VISUAL ARTS")),
    Subject("owop", "OWOP", "OWOP",
            ("OWOP", "OUR WORLD OUR PEOPLE")),
    Subject("ghanaianLanguage", "Ghanaian Language", "Ghanaian Language",
            ("GHANAIAN LANGUAGE", "GH LANGUAGE")),
    Subject("french", "French", "French",
            ("FRENCH",)),
]

SUBJECT_KEYS: List[str] = [s.key for s in SUBJECTS]

# Non-subject fields of a learner row.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "sequenceNumber": ("S/N", "SN", "NO", "NO."),
    "name": ("NAME OF LEARNER", "NAME", "LEARNER", "NAME OF STUDENT", "STUDENT NAME"),
    "totalRawScore": ("TOTAL RAW SCORE", "TOTAL SCORE", "TOTAL"),
    "averageScore": ("AVERAGE SCORE", "AVERAGE SCORE (%)", "AVERAGE"),
    "totalAggregate": ("TOTAL AGGREGATE", "AGGREGATE"),
    "position": ("POSITION", "POS"),
    "teacherRemark": ("TEACHER REMARK", "TEACHER'S REMARK", "CLASS TEACHER REMARK"),
    "conduct": ("CONDUCT",),
    "interest": ("INTEREST",),
}


def all_aliases(subjects: List[Subject] = SUBJECTS) -> Dict[str, Tuple[str, ...]]:
    """Alias table for every canonical field, subjects first."""
    table: Dict[str, Tuple[str, ...]] = {s.key: s.aliases for s in subjects}
    table.update(FIELD_ALIASES)
    return table
