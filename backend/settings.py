# Classifier configuration - keyword sets and proximity window, overridable from env
from __future__ import annotations

import os
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()  # Load .env so a clinic can override department keywords locally

DEFAULT_PREVENTIVE_CARE_KEYWORDS = ["health checkup", "executive physical", "vaccination"]
DEFAULT_TELEMEDICINE_KEYWORDS = ["telemedicine"]
DEFAULT_SELF_PAY_KEYWORDS = ["self-pay", "private"]
DEFAULT_DRUG_PROGRAM_MARKERS = ["aga", "ed"]
DEFAULT_FOREIGN_PATIENT_KEYWORDS = ["foreign", "overseas", "inbound"]
DEFAULT_ENDOSCOPY_KEYWORDS = ["endoscopy", "gastroscopy", "colonoscopy"]
DEFAULT_NUMBER_WINDOW = 200

ENV_KEYWORD_VARIABLES = {
    "preventiveCareKeywords": "CLINIC_PREVENTIVE_KEYWORDS",
    "telemedicineKeywords": "CLINIC_TELEMEDICINE_KEYWORDS",
    "selfPayKeywords": "CLINIC_SELF_PAY_KEYWORDS",
    "drugProgramMarkers": "CLINIC_DRUG_PROGRAM_MARKERS",
    "foreignPatientKeywords": "CLINIC_FOREIGN_PATIENT_KEYWORDS",
    "endoscopyKeywords": "CLINIC_ENDOSCOPY_KEYWORDS",
}


class ClassifierConfig(BaseModel):
    """Department keyword sets and the patient-number proximity window"""
    preventiveCareKeywords: List[str] = Field(default_factory=lambda: list(DEFAULT_PREVENTIVE_CARE_KEYWORDS))
    telemedicineKeywords: List[str] = Field(default_factory=lambda: list(DEFAULT_TELEMEDICINE_KEYWORDS))
    selfPayKeywords: List[str] = Field(default_factory=lambda: list(DEFAULT_SELF_PAY_KEYWORDS))
    # Short program codes, matched as whole words only
    drugProgramMarkers: List[str] = Field(default_factory=lambda: list(DEFAULT_DRUG_PROGRAM_MARKERS))
    foreignPatientKeywords: List[str] = Field(default_factory=lambda: list(DEFAULT_FOREIGN_PATIENT_KEYWORDS))
    endoscopyKeywords: List[str] = Field(default_factory=lambda: list(DEFAULT_ENDOSCOPY_KEYWORDS))
    numberWindow: int = Field(default=DEFAULT_NUMBER_WINDOW, ge=0)


def _env_list(name: str) -> Optional[List[str]]:
    """Comma-separated env var -> list; None when unset or blank."""
    raw = os.environ.get(name, "")
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or None


def load_config() -> ClassifierConfig:
    """Build config from defaults plus CLINIC_* environment overrides."""
    overrides = {}
    for field_name, env_name in ENV_KEYWORD_VARIABLES.items():
        values = _env_list(env_name)
        if values is not None:
            overrides[field_name] = values

    window = os.environ.get("CLINIC_NUMBER_WINDOW", "").strip()
    if window:
        overrides["numberWindow"] = window  # pydantic coerces and validates ge=0

    return ClassifierConfig(**overrides)
