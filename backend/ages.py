# Age at visit and age-band resolution
from __future__ import annotations

import re
from datetime import date
from typing import List, Optional, Tuple

MIN_VALID_AGE = 0
MAX_VALID_AGE = 120  # exclusive

UNKNOWN_AGE_BAND = "unknown"

# (label, min, max) inclusive bounds; None means open-ended
AGE_BANDS: List[Tuple[str, Optional[int], Optional[int]]] = [
    ("<20", None, 19),
    ("20-29", 20, 29),
    ("30-39", 30, 39),
    ("40-49", 40, 49),
    ("50-59", 50, 59),
    ("60-69", 60, 69),
    ("70-79", 70, 79),
    ("80+", 80, None),
]
AGE_BAND_LABELS = [label for label, _, _ in AGE_BANDS] + [UNKNOWN_AGE_BAND]


DATE_PREFIX = re.compile(r'(\d{4})[-/](\d{1,2})[-/](\d{1,2})')


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Y-M-D (or Y/M/D) prefix, zero padding optional -> date; None when missing or invalid."""
    if not value:
        return None
    match = DATE_PREFIX.match(value.strip())
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def calculate_age(birth_iso: Optional[str], visit_iso: Optional[str]) -> Optional[int]:
    """Whole years at the visit date, or None when either date is unusable or age is out of range."""
    birth = parse_iso_date(birth_iso)
    visit = parse_iso_date(visit_iso)
    if birth is None or visit is None:
        return None

    age = visit.year - birth.year
    if (visit.month, visit.day) < (birth.month, birth.day):
        age -= 1

    if MIN_VALID_AGE <= age < MAX_VALID_AGE:
        return age
    return None


def resolve_age_band(age: Optional[int]) -> str:
    if age is None:
        return UNKNOWN_AGE_BAND
    for label, low, high in AGE_BANDS:
        if (low is None or age >= low) and (high is None or age <= high):
            return label
    return UNKNOWN_AGE_BAND
