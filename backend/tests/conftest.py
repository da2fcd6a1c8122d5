"""
Shared pytest fixtures for visit classification and aggregation tests.
"""
import pytest

from models import FIRST_VISIT, VisitRecord
from seed import seed_records
from settings import ClassifierConfig

SELF_PAY_TELEMEDICINE = "Telemedicine (Self-Pay)"


def make_record(date_iso: str, visit_type: str = FIRST_VISIT, patient_number=None, **kwargs) -> VisitRecord:
    """Helper: VisitRecord with the fields most tests care about as positionals."""
    return VisitRecord(dateIso=date_iso, visitType=visit_type, patientNumber=patient_number, **kwargs)


@pytest.fixture
def config():
    """Default keyword sets and a 200-number window."""
    return ClassifierConfig()


@pytest.fixture
def seeded_records():
    """Three-month seed history (2025-01..2025-03)."""
    return seed_records()


@pytest.fixture
def january_1_to_50():
    """
    2025-01 with patient numbers 1..50, all first visits with unique identities.
    Previous-month window for 2025-02 is {1..50}, max 50.
    """
    return [
        make_record(f"2025-01-{(n % 28) + 1:02d}", FIRST_VISIT, n)
        for n in range(1, 51)
    ]


@pytest.fixture(autouse=True)
def _clear_clinic_env(monkeypatch):
    """Keep local .env / shell overrides out of the tests."""
    for name in [
        "CLINIC_PREVENTIVE_KEYWORDS",
        "CLINIC_TELEMEDICINE_KEYWORDS",
        "CLINIC_SELF_PAY_KEYWORDS",
        "CLINIC_DRUG_PROGRAM_MARKERS",
        "CLINIC_FOREIGN_PATIENT_KEYWORDS",
        "CLINIC_ENDOSCOPY_KEYWORDS",
        "CLINIC_NUMBER_WINDOW",
    ]:
        monkeypatch.delenv(name, raising=False)
    yield
