# Visit analytics data models - records, categories and monthly summaries
from __future__ import annotations

from typing import Dict, Optional
from dataclasses import dataclass, field
import re
import unicodedata

# Visit types as labelled by the source system
FIRST_VISIT = "first-visit"
FOLLOW_UP = "follow-up"
UNKNOWN_VISIT = "unknown"

# Derived categories (mutually exclusive, exhaustive)
PURE_FIRST = "pureFirst"
RETURNING_FIRST = "returningFirst"
REVISIT = "revisit"
UNKNOWN_CATEGORY = "unknown"
CATEGORIES = (PURE_FIRST, RETURNING_FIRST, REVISIT, UNKNOWN_CATEGORY)

ALL_DEPARTMENTS = "all"
UNASSIGNED_DEPARTMENT = "unassigned"


@dataclass(frozen=True)
class VisitRecord:
    """One visit row supplied by the ingestion layer"""
    dateIso: str  # YYYY-MM-DD
    visitType: str = UNKNOWN_VISIT
    patientNumber: Optional[int] = None
    birthDateIso: Optional[str] = None
    department: Optional[str] = None
    patientNameNormalized: Optional[str] = None
    patientAddress: Optional[str] = None  # carried through, never read here
    monthKey: str = ""  # YYYY-MM, derived from dateIso when empty

    def __post_init__(self):
        if not self.monthKey:
            object.__setattr__(self, "monthKey", self.dateIso[:7])


@dataclass(frozen=True)
class ClassifiedVisitRecord(VisitRecord):
    """VisitRecord plus exactly one category"""
    category: str = UNKNOWN_CATEGORY

    @classmethod
    def from_record(cls, record: VisitRecord, category: str) -> "ClassifiedVisitRecord":
        return cls(
            dateIso=record.dateIso,
            visitType=record.visitType,
            patientNumber=record.patientNumber,
            birthDateIso=record.birthDateIso,
            department=record.department,
            patientNameNormalized=record.patientNameNormalized,
            patientAddress=record.patientAddress,
            monthKey=record.monthKey,
            category=category,
        )


@dataclass
class MonthlyStat:
    """Per-month rollup consumed by KPI cards and charts"""
    month: str
    totalPatients: int = 0
    pureFirstVisits: int = 0
    returningFirstVisits: int = 0
    revisitCount: int = 0
    endoscopyCount: int = 0
    averageAge: Optional[float] = None


@dataclass
class AgeBandStat:
    """Per-month head count per age band"""
    month: str
    total: int = 0
    ageBands: Dict[str, int] = field(default_factory=dict)


@dataclass
class DepartmentStat:
    """Category breakdown for one department label"""
    department: str
    total: int = 0
    pureFirst: int = 0
    returningFirst: int = 0
    revisit: int = 0
    averageAge: Optional[float] = None
    pureRate: float = 0.0
    returningRate: float = 0.0
    revisitRate: float = 0.0


def _collapse(value: str) -> str:
    normalized = unicodedata.normalize("NFKC", value).strip().casefold()
    return re.sub(r'\s+', ' ', normalized)  # Collapse multiple spaces


KATAKANA_TO_HIRAGANA_OFFSET = 0x60


def _to_hiragana(value: str) -> str:
    return re.sub(r'[ァ-ヶ]', lambda m: chr(ord(m.group()) - KATAKANA_TO_HIRAGANA_OFFSET), value)


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Matching form of a patient name: NFKC, drop ruby/reading in parentheses,
    casefold, katakana -> hiragana, and no whitespace at all
    ("ヤマダ　タロウ" and "やまだたろう" compare equal).
    """
    if not name:
        return None
    without_reading = re.sub(r'[（(][^）)]*[）)]', '', unicodedata.normalize("NFKC", name))
    normalized = re.sub(r'\s+', '', _to_hiragana(without_reading.casefold()))
    return normalized or None


def normalize_department(department: Optional[str]) -> str:
    """Normalized department text used for keyword matching ('' when absent)"""
    if not department:
        return ""
    return _collapse(department)


def department_label(department: Optional[str]) -> str:
    """Display label for grouping: trimmed text or 'unassigned'"""
    trimmed = (department or "").strip()
    return trimmed if trimmed else UNASSIGNED_DEPARTMENT
