# Monthly aggregation - KPI rollups, age bands, department breakdown, period comparison
from __future__ import annotations

import math
from collections import Counter
from typing import Dict, Iterable, List, Optional

from ages import AGE_BAND_LABELS, calculate_age, resolve_age_band
from logic import matches_any
from models import (
    ALL_DEPARTMENTS,
    PURE_FIRST,
    RETURNING_FIRST,
    REVISIT,
    AgeBandStat,
    ClassifiedVisitRecord,
    DepartmentStat,
    MonthlyStat,
    VisitRecord,
    department_label,
    normalize_department,
)
from settings import ClassifierConfig

COMPARED_FIELDS = [
    "totalPatients",
    "pureFirstVisits",
    "returningFirstVisits",
    "revisitCount",
    "endoscopyCount",
]


def round_one_decimal(value: float) -> float:
    """One decimal, halves rounded toward +inf (41.25 -> 41.3, -6.25 -> -6.2)."""
    return math.floor(value * 10 + 0.5) / 10


def _rate(count: int, total: int) -> float:
    return round_one_decimal(count / total * 100) if total > 0 else 0.0


def aggregate_monthly(
    classified: Iterable[ClassifiedVisitRecord],
    config: Optional[ClassifierConfig] = None,
) -> List[MonthlyStat]:
    """
    Fold classified records into one MonthlyStat per month (ascending).
    averageAge is None when no record in the month yields a valid age.
    """
    config = config or ClassifierConfig()
    stats: Dict[str, MonthlyStat] = {}
    age_sums: Counter = Counter()
    age_counts: Counter = Counter()

    for record in classified:
        stat = stats.setdefault(record.monthKey, MonthlyStat(month=record.monthKey))
        stat.totalPatients += 1

        if record.category == PURE_FIRST:
            stat.pureFirstVisits += 1
        elif record.category == RETURNING_FIRST:
            stat.returningFirstVisits += 1
        elif record.category == REVISIT:
            stat.revisitCount += 1

        if matches_any(normalize_department(record.department), config.endoscopyKeywords):
            stat.endoscopyCount += 1

        age = calculate_age(record.birthDateIso, record.dateIso)
        if age is not None:
            age_sums[record.monthKey] += age
            age_counts[record.monthKey] += 1

    result = []
    for month in sorted(stats.keys()):
        stat = stats[month]
        if age_counts[month] > 0:
            stat.averageAge = round_one_decimal(age_sums[month] / age_counts[month])
        result.append(stat)
    return result


def get_department_list(records: Iterable[VisitRecord]) -> List[str]:
    """'all' first, then department labels by record count desc, ties by label."""
    counts = Counter(department_label(r.department) for r in records)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [ALL_DEPARTMENTS] + [label for label, _ in ordered]


def aggregate_by_age_band(records: Iterable[VisitRecord], department: str = ALL_DEPARTMENTS) -> List[AgeBandStat]:
    """Per-month head count per age band, optionally limited to one department label."""
    stats: Dict[str, AgeBandStat] = {}
    for record in records:
        if department != ALL_DEPARTMENTS and department_label(record.department) != department:
            continue
        stat = stats.get(record.monthKey)
        if stat is None:
            stat = AgeBandStat(month=record.monthKey, ageBands={label: 0 for label in AGE_BAND_LABELS})
            stats[record.monthKey] = stat
        stat.total += 1
        band = resolve_age_band(calculate_age(record.birthDateIso, record.dateIso))
        stat.ageBands[band] += 1

    return [stats[month] for month in sorted(stats.keys())]


def aggregate_by_department(classified: Iterable[ClassifiedVisitRecord]) -> List[DepartmentStat]:
    """Category counts, average age and rates per department label (largest first)."""
    stats: Dict[str, DepartmentStat] = {}
    age_sums: Counter = Counter()
    age_counts: Counter = Counter()

    for record in classified:
        label = department_label(record.department)
        stat = stats.setdefault(label, DepartmentStat(department=label))
        stat.total += 1
        if record.category == PURE_FIRST:
            stat.pureFirst += 1
        elif record.category == RETURNING_FIRST:
            stat.returningFirst += 1
        elif record.category == REVISIT:
            stat.revisit += 1

        age = calculate_age(record.birthDateIso, record.dateIso)
        if age is not None:
            age_sums[label] += age
            age_counts[label] += 1

    for label, stat in stats.items():
        if age_counts[label] > 0:
            stat.averageAge = round_one_decimal(age_sums[label] / age_counts[label])
        stat.pureRate = _rate(stat.pureFirst, stat.total)
        stat.returningRate = _rate(stat.returningFirst, stat.total)
        stat.revisitRate = _rate(stat.revisit, stat.total)

    return sorted(stats.values(), key=lambda s: (-s.total, s.department))


def month_over_month(current: int, previous: Optional[int]) -> Optional[Dict]:
    """Absolute and percentage change; None when there is no usable baseline."""
    if previous is None or previous == 0:
        return None
    diff = current - previous
    return {"value": diff, "percentage": round_one_decimal(diff / previous * 100)}


def compare_monthly_stats(latest: MonthlyStat, previous: Optional[MonthlyStat]) -> Dict[str, Optional[Dict]]:
    """month_over_month applied to every count field of two MonthlyStats."""
    return {
        name: month_over_month(getattr(latest, name), getattr(previous, name) if previous else None)
        for name in COMPARED_FIELDS
    }


def visit_rates(stat: MonthlyStat) -> Dict[str, Optional[float]]:
    """Share of each category in a month, as one-decimal percentages."""
    if stat.totalPatients == 0:
        return {"pureRate": None, "returningRate": None, "revisitRate": None}
    return {
        "pureRate": _rate(stat.pureFirstVisits, stat.totalPatients),
        "returningRate": _rate(stat.returningFirstVisits, stat.totalPatients),
        "revisitRate": _rate(stat.revisitCount, stat.totalPatients),
    }
