# Identity resolution - patient keys, previous-month number window, cumulative seen memo
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Set

from ages import parse_iso_date
from models import VisitRecord, normalize_name


def normalize_birth_date(value: Optional[str]) -> Optional[str]:
    """Canonical YYYY-MM-DD when parseable, otherwise the trimmed text (None when blank)."""
    if not value or not value.strip():
        return None
    parsed = parse_iso_date(value)
    return parsed.isoformat() if parsed else value.strip()


def compute_identity_key(record: VisitRecord) -> Optional[str]:
    """
    Best-effort stable key for a patient.
    Priority: number > name+birth > name > birth. None when no signal is present.
    """
    if record.patientNumber is not None:
        return f"num:{record.patientNumber}"

    name = normalize_name(record.patientNameNormalized)
    birth = normalize_birth_date(record.birthDateIso)

    if name and birth:
        return f"name:{name}|birth:{birth}"
    if name:
        return f"name:{name}"
    if birth:
        return f"birth:{birth}"
    return None


@dataclass
class PreviousMonthWindow:
    """Patient numbers seen in the month immediately before the one being classified"""
    numbers: Set[int] = field(default_factory=set)
    maxNumber: Optional[int] = None

    @classmethod
    def from_records(cls, records: Iterable[VisitRecord]) -> "PreviousMonthWindow":
        numbers = {r.patientNumber for r in records if r.patientNumber is not None}
        return cls(numbers=numbers, maxNumber=max(numbers) if numbers else None)

    def is_pure_first(self, patient_number: Optional[int], window: int) -> bool:
        """Number-proximity heuristic for a first-visit candidate whose identity was already seen."""
        if patient_number is None:
            return self.maxNumber is None
        if self.maxNumber is None:
            return patient_number not in self.numbers
        if patient_number > self.maxNumber:
            return patient_number not in self.numbers
        if patient_number >= self.maxNumber - window:
            return patient_number not in self.numbers
        return False


@dataclass
class SeenPatientMemo:
    """
    Identity keys seen so far in one chronological replay.
    Owned by a single classification run and never reset between months.
    """
    keys: Set[str] = field(default_factory=set)

    def has_seen(self, key: Optional[str]) -> bool:
        return key is not None and key in self.keys

    def remember(self, key: Optional[str]) -> None:
        if key is not None:
            self.keys.add(key)

    def __len__(self) -> int:
        return len(self.keys)
