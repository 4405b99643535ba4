from .doctor_repo import DoctorRepository
from .drug_repo import DrugRepository
from .patient_repo import PatientRepository
from .pharmacist_repo import PharmacistRepository
from .prescription_repo import PrescriptionRepository

__all__ = [
    "DoctorRepository",
    "DrugRepository",
    "PatientRepository",
    "PharmacistRepository",
    "PrescriptionRepository",
]
