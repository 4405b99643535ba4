import logging
from typing import List, Optional
from uuid import UUID

from clinic_records.core.exceptions import ValidationError
from clinic_records.core.validation import paginate
from clinic_records.domain.entities import NewPatient, Patient
from clinic_records.domain.interfaces import IPatientRepository

from .base_service import call_repository

logger = logging.getLogger(__name__)


class PatientService:
    """Application service for patient use-cases."""

    def __init__(self, repo: IPatientRepository) -> None:
        self.repo = repo

    async def create_patient(self, name: str, personal_id: str) -> Patient:
        try:
            new_patient = NewPatient.create(name, personal_id)
        except ValidationError as e:
            logger.warning(
                "Rejected patient",
                extra={"context": {"field": e.field, "error": e.message}},
            )
            raise
        patient = await call_repository("create_patient", self.repo.create(new_patient))
        logger.info("Patient created", extra={"context": {"patient_id": str(patient.id)}})
        return patient

    async def get_patient_by_id(self, patient_id: UUID) -> Patient:
        return await call_repository("get_patient_by_id", self.repo.get_by_id(patient_id))

    async def get_patients_with_pagination(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> List[Patient]:
        limit, offset = paginate(page, page_size)
        return await call_repository("list_patients", self.repo.list(limit, offset))
