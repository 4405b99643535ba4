# Services package initialization
# This file makes the services directory a Python package
# and allows importing service modules

from .doctor_service import DoctorService
from .drug_service import DrugService
from .patient_service import PatientService
from .pharmacist_service import PharmacistService
from .prescription_service import PrescriptionService

__all__ = [
    "DoctorService",
    "DrugService",
    "PatientService",
    "PharmacistService",
    "PrescriptionService",
]
