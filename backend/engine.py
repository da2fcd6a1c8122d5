# Engine entry point - row validation, classification + aggregation run, dashboard payload
from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, field_validator, model_validator

from aggregation import (
    aggregate_by_age_band,
    aggregate_by_department,
    aggregate_monthly,
    compare_monthly_stats,
    get_department_list,
    visit_rates,
)
from logic import classify_records
from models import (
    ALL_DEPARTMENTS,
    FIRST_VISIT,
    FOLLOW_UP,
    UNKNOWN_VISIT,
    ClassifiedVisitRecord,
    MonthlyStat,
    VisitRecord,
    normalize_name,
)
from settings import ClassifierConfig

logger = logging.getLogger(__name__)

VISIT_TYPE_SYNONYMS = {
    "first-visit": FIRST_VISIT,
    "first visit": FIRST_VISIT,
    "first": FIRST_VISIT,
    "new": FIRST_VISIT,
    "初診": FIRST_VISIT,
    "follow-up": FOLLOW_UP,
    "follow up": FOLLOW_UP,
    "followup": FOLLOW_UP,
    "revisit": FOLLOW_UP,
    "return": FOLLOW_UP,
    "再診": FOLLOW_UP,
}


# Upstream row model (ingestion hands over dicts; this is the typed boundary)
class VisitRecordPayload(BaseModel):
    dateIso: str
    visitType: str = UNKNOWN_VISIT
    patientNumber: Optional[int] = None
    birthDateIso: Optional[str] = None
    department: Optional[str] = None
    patientName: Optional[str] = None
    patientNameNormalized: Optional[str] = None
    patientAddress: Optional[str] = None

    @field_validator("dateIso")
    @classmethod
    def _date_present(cls, value: str) -> str:
        value = value.strip()
        if not re.match(r"^\d{4}[-/]\d{2}", value):
            raise ValueError("dateIso must start with YYYY-MM")
        return value.replace("/", "-")

    @field_validator("visitType", mode="before")
    @classmethod
    def _visit_type(cls, value: Any) -> str:
        if value is None:
            return UNKNOWN_VISIT
        return VISIT_TYPE_SYNONYMS.get(str(value).strip().lower(), UNKNOWN_VISIT)

    @field_validator("patientNumber", mode="before")
    @classmethod
    def _patient_number(cls, value: Any) -> Any:
        if value is None or isinstance(value, int):
            return value
        digits = re.sub(r"[^\d]", "", str(value))
        return int(digits) if digits else None

    @field_validator("birthDateIso", "department", "patientName", "patientNameNormalized", "patientAddress", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _fill_normalized_name(self) -> "VisitRecordPayload":
        if self.patientNameNormalized is None and self.patientName:
            self.patientNameNormalized = normalize_name(self.patientName)
        return self

    def to_record(self) -> VisitRecord:
        return VisitRecord(
            dateIso=self.dateIso,
            visitType=self.visitType,
            patientNumber=self.patientNumber,
            birthDateIso=self.birthDateIso,
            department=self.department,
            patientNameNormalized=self.patientNameNormalized,
            patientAddress=self.patientAddress,
        )


def parse_visit_rows(rows: Iterable[Dict[str, Any]]) -> List[VisitRecord]:
    """Validate ingestion rows into VisitRecords. Raises pydantic ValidationError on an unusable row."""
    return [VisitRecordPayload.model_validate(row).to_record() for row in rows]


def analyze_visits(
    records: Iterable[VisitRecord],
    config: Optional[ClassifierConfig] = None,
) -> Tuple[List[ClassifiedVisitRecord], List[MonthlyStat]]:
    """
    records -> (classified records in per-month chronological order, monthly stats ascending).
    Pure: the input is not mutated and all replay state lives in this call.
    """
    config = config or ClassifierConfig()
    records = list(records)
    classified = classify_records(records, config)
    stats = aggregate_monthly(classified, config)
    logger.info("Analyzed %d visit records across %d months", len(classified), len(stats))
    return classified, stats


def dataset_fingerprint(records: Iterable[VisitRecord], config: Optional[ClassifierConfig] = None) -> str:
    """Cache key for an analysis run: record fields in input order plus the config."""
    config = config or ClassifierConfig()
    digest = hashlib.sha1()
    digest.update(config.model_dump_json().encode("utf-8"))
    for record in records:
        digest.update(json.dumps(asdict(record), sort_keys=True, ensure_ascii=False).encode("utf-8"))
        digest.update(b"\n")
    return digest.hexdigest()


def build_dashboard_summary(
    records: Iterable[VisitRecord],
    config: Optional[ClassifierConfig] = None,
    department: str = ALL_DEPARTMENTS,
) -> Dict:
    """
    Everything the patient dashboard renders from one run:
    monthly stats, latest-month rates and month-over-month changes,
    department breakdown and the age-band series.
    """
    records = list(records)
    classified, stats = analyze_visits(records, config)

    latest = stats[-1] if stats else None
    previous = stats[-2] if len(stats) > 1 else None

    return {
        "classifiedCount": len(classified),
        "monthlyStats": [asdict(s) for s in stats],
        "latestMonth": latest.month if latest else None,
        "latestRates": visit_rates(latest) if latest else None,
        "monthOverMonth": compare_monthly_stats(latest, previous) if latest else None,
        "departments": [asdict(d) for d in aggregate_by_department(classified)],
        "departmentOptions": get_department_list(records),
        "ageBands": [asdict(a) for a in aggregate_by_age_band(records, department)],
    }
