# Visit classification - month partitioning, department rules, first-visit reconciliation
from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from typing import DefaultDict, Dict, Iterable, List, Optional, Sequence, Tuple

from identity import PreviousMonthWindow, SeenPatientMemo, compute_identity_key
from models import (
    FIRST_VISIT,
    FOLLOW_UP,
    PURE_FIRST,
    RETURNING_FIRST,
    REVISIT,
    UNKNOWN_CATEGORY,
    ClassifiedVisitRecord,
    VisitRecord,
    normalize_department,
)
from settings import ClassifierConfig

logger = logging.getLogger(__name__)


def partition_by_month(records: Iterable[VisitRecord]) -> Tuple[List[str], Dict[str, List[VisitRecord]]]:
    """
    Group records by monthKey. Months are returned ascending; records inside a month
    are ordered by dateIso, same-day rows keep their input order (stable sort).
    """
    by_month: DefaultDict[str, List[VisitRecord]] = defaultdict(list)
    for record in records:
        by_month[record.monthKey].append(record)

    months = sorted(by_month.keys())
    ordered = {month: sorted(by_month[month], key=lambda r: r.dateIso) for month in months}
    return months, ordered


def matches_any(text: str, keywords: Sequence[str], whole_word: bool = False) -> bool:
    """Substring (or whole-word) match of normalized keywords against normalized text."""
    if not text:
        return False
    for keyword in keywords:
        needle = normalize_department(keyword)
        if not needle:
            continue
        if whole_word:
            if re.search(rf"(?<!\w){re.escape(needle)}(?!\w)", text):
                return True
        elif needle in text:
            return True
    return False


@dataclass(frozen=True)
class DepartmentFlags:
    """Department-derived signals for one record"""
    isPreventiveCare: bool = False
    isSelfPayTelemedicine: bool = False
    isForeignPatientSelfPay: bool = False

    @property
    def requiresReclassification(self) -> bool:
        """Departments known to mislabel first/follow-up visits"""
        return self.isSelfPayTelemedicine or self.isForeignPatientSelfPay


def get_department_flags(department: Optional[str], config: ClassifierConfig) -> DepartmentFlags:
    normalized = normalize_department(department)
    if not normalized:
        return DepartmentFlags()

    is_telemedicine = matches_any(normalized, config.telemedicineKeywords)
    is_self_pay = matches_any(normalized, config.selfPayKeywords) or matches_any(
        normalized, config.drugProgramMarkers, whole_word=True
    )
    return DepartmentFlags(
        isPreventiveCare=matches_any(normalized, config.preventiveCareKeywords),
        isSelfPayTelemedicine=is_telemedicine and is_self_pay,
        isForeignPatientSelfPay=matches_any(normalized, config.foreignPatientKeywords),
    )


def classify_visit(
    record: VisitRecord,
    has_seen_patient: bool,
    window: PreviousMonthWindow,
    config: ClassifierConfig,
) -> str:
    """
    Category for one record. Precedence:
    1. preventive-care department -> pureFirst
    2. first-visit label, or unreliable department with an unseen identity -> first candidate
       - unseen identity -> pureFirst
       - seen identity -> previous-month number proximity decides pure vs returning
    3. follow-up label -> revisit
    4. otherwise unknown
    """
    flags = get_department_flags(record.department, config)
    if flags.isPreventiveCare:
        return PURE_FIRST

    is_first_candidate = record.visitType == FIRST_VISIT or (
        flags.requiresReclassification and not has_seen_patient
    )

    if is_first_candidate:
        if not has_seen_patient:
            return PURE_FIRST
        if window.is_pure_first(record.patientNumber, config.numberWindow):
            return PURE_FIRST
        return RETURNING_FIRST

    if record.visitType == FOLLOW_UP:
        return REVISIT
    return UNKNOWN_CATEGORY


def classify_records(
    records: Iterable[VisitRecord],
    config: Optional[ClassifierConfig] = None,
) -> List[ClassifiedVisitRecord]:
    """
    Replay all months in chronological order and classify every record.
    The previous-month window is rebuilt per month; the seen memo accumulates for the whole run.
    Output is in per-month chronological order. Input is not mutated.
    """
    config = config or ClassifierConfig()
    months, by_month = partition_by_month(records)
    if not months:
        return []

    memo = SeenPatientMemo()
    classified: List[ClassifiedVisitRecord] = []

    for index, month in enumerate(months):
        previous_records = by_month[months[index - 1]] if index > 0 else []
        window = PreviousMonthWindow.from_records(previous_records)
        logger.debug(
            "Classifying %s: %d records, previous window size=%d max=%s, seen=%d",
            month, len(by_month[month]), len(window.numbers), window.maxNumber, len(memo),
        )

        for record in by_month[month]:
            key = compute_identity_key(record)
            category = classify_visit(record, memo.has_seen(key), window, config)
            memo.remember(key)
            classified.append(ClassifiedVisitRecord.from_record(record, category))

    return classified
