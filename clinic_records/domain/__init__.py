"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Validated new-entity values and persisted entities
- interfaces.py: Repository contracts
- prescription_aggregation.py: Folding of join rows into prescriptions
"""

from .entities import (
    Doctor,
    Drug,
    DrugContentType,
    NewDoctor,
    NewDrug,
    NewPatient,
    NewPharmacist,
    NewPrescribedDrug,
    NewPrescription,
    NewPrescriptionFill,
    Patient,
    Pharmacist,
    PrescribedDrug,
    Prescription,
    PrescriptionDoctor,
    PrescriptionFill,
    PrescriptionPatient,
    PrescriptionType,
)
from .interfaces import (
    IDoctorReader,
    IDoctorRepository,
    IDoctorWriter,
    IDrugReader,
    IDrugRepository,
    IDrugWriter,
    IPatientReader,
    IPatientRepository,
    IPatientWriter,
    IPharmacistReader,
    IPharmacistRepository,
    IPharmacistWriter,
    IPrescriptionReader,
    IPrescriptionRepository,
    IPrescriptionWriter,
)
from .prescription_aggregation import PrescriptionRow, aggregate_prescriptions

__all__ = [
    # Domain entities
    "Doctor",
    "Drug",
    "DrugContentType",
    "NewDoctor",
    "NewDrug",
    "NewPatient",
    "NewPharmacist",
    "NewPrescribedDrug",
    "NewPrescription",
    "NewPrescriptionFill",
    "Patient",
    "Pharmacist",
    "PrescribedDrug",
    "Prescription",
    "PrescriptionDoctor",
    "PrescriptionFill",
    "PrescriptionPatient",
    "PrescriptionType",
    # Repository interfaces
    "IDoctorReader",
    "IDoctorRepository",
    "IDoctorWriter",
    "IDrugReader",
    "IDrugRepository",
    "IDrugWriter",
    "IPatientReader",
    "IPatientRepository",
    "IPatientWriter",
    "IPharmacistReader",
    "IPharmacistRepository",
    "IPharmacistWriter",
    "IPrescriptionReader",
    "IPrescriptionRepository",
    "IPrescriptionWriter",
    # Aggregation
    "PrescriptionRow",
    "aggregate_prescriptions",
]
