# Seed data - small three-month visit history used by tests and local demos
from typing import List

from models import FIRST_VISIT, FOLLOW_UP, UNKNOWN_VISIT, VisitRecord


def seed_records() -> List[VisitRecord]:
    """
    Three months of visits exercising every classification path:
    - 2025-01: new patients 101-105, one endoscopy, one undated birth
    - 2025-02: follow-ups, a brand-new number, a relabelled first visit,
      a health checkup and a self-pay telemedicine patient
    - 2025-03: the telemedicine patient again (label unreliable), a foreign
      self-pay walk-in and an old-number first visit
    """
    return [
        # 2025-01
        VisitRecord(dateIso="2025-01-06", visitType=FIRST_VISIT, patientNumber=101,
                    birthDateIso="1980-04-12", department="General Medicine",
                    patientNameNormalized="john doe"),
        VisitRecord(dateIso="2025-01-06", visitType=FIRST_VISIT, patientNumber=102,
                    birthDateIso="1992-11-30", department="Internal Medicine",
                    patientNameNormalized="jane roe"),
        VisitRecord(dateIso="2025-01-15", visitType=FIRST_VISIT, patientNumber=103,
                    birthDateIso="1955-01-20", department="Endoscopy",
                    patientNameNormalized="mary major"),
        VisitRecord(dateIso="2025-01-20", visitType=FIRST_VISIT, patientNumber=104,
                    birthDateIso=None, department="General Medicine",
                    patientNameNormalized="richard miles"),
        VisitRecord(dateIso="2025-01-28", visitType=FIRST_VISIT, patientNumber=105,
                    birthDateIso="2010-07-01", department="Fever Clinic",
                    patientNameNormalized="sam smith"),
        # 2025-02
        VisitRecord(dateIso="2025-02-03", visitType=FOLLOW_UP, patientNumber=101,
                    birthDateIso="1980-04-12", department="General Medicine",
                    patientNameNormalized="john doe"),
        VisitRecord(dateIso="2025-02-05", visitType=FIRST_VISIT, patientNumber=106,
                    birthDateIso="1975-03-03", department="Internal Medicine",
                    patientNameNormalized="alex kim"),
        VisitRecord(dateIso="2025-02-10", visitType=FIRST_VISIT, patientNumber=102,
                    birthDateIso="1992-11-30", department="Internal Medicine",
                    patientNameNormalized="jane roe"),
        VisitRecord(dateIso="2025-02-12", visitType=UNKNOWN_VISIT, patientNumber=None,
                    birthDateIso="1968-09-09", department="Health Checkup (Course B)",
                    patientNameNormalized="pat lee"),
        VisitRecord(dateIso="2025-02-18", visitType=UNKNOWN_VISIT, patientNumber=None,
                    birthDateIso="1988-06-15", department="Telemedicine (Self-Pay)",
                    patientNameNormalized="chris wong"),
        # 2025-03
        VisitRecord(dateIso="2025-03-04", visitType=UNKNOWN_VISIT, patientNumber=None,
                    birthDateIso="1988-06-15", department="Telemedicine (Self-Pay)",
                    patientNameNormalized="chris wong"),
        VisitRecord(dateIso="2025-03-07", visitType=UNKNOWN_VISIT, patientNumber=None,
                    birthDateIso="1990-02-02", department="Foreign Patient Self-Pay",
                    patientNameNormalized="li wei"),
        VisitRecord(dateIso="2025-03-11", visitType=FOLLOW_UP, patientNumber=106,
                    birthDateIso="1975-03-03", department="Endoscopy",
                    patientNameNormalized="alex kim"),
        VisitRecord(dateIso="2025-03-19", visitType=FIRST_VISIT, patientNumber=101,
                    birthDateIso="1980-04-12", department="General Medicine",
                    patientNameNormalized="john doe"),
    ]
