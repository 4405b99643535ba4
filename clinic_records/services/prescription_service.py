"""
Prescription service for business logic following SOLID principles.

Prescriptions are assembled and validated here, then written as a whole by
the repository. Filling reads the aggregate first so the already-filled and
expiry rules are checked before anything is written.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from clinic_records.core.exceptions import ValidationError
from clinic_records.core.validation import paginate
from clinic_records.domain.entities import (
    NewPrescription,
    Prescription,
    PrescriptionFill,
    PrescriptionType,
)
from clinic_records.domain.interfaces import IPrescriptionRepository

from .base_service import call_repository

logger = logging.getLogger(__name__)


class PrescriptionService:
    """Application service for prescription use-cases."""

    def __init__(self, repo: IPrescriptionRepository) -> None:
        self.repo = repo

    async def create_prescription(
        self,
        doctor_id: UUID,
        patient_id: UUID,
        drugs: Iterable[Tuple[UUID, int]],
        start_date: Optional[datetime] = None,
        prescription_type: Optional[PrescriptionType] = None,
    ) -> Prescription:
        """
        Build, validate and persist a prescription.

        Args:
            doctor_id: Prescribing doctor
            patient_id: Patient the prescription is issued for
            drugs: (drug_id, quantity) pairs, one per line item
            start_date: Defaults to now (UTC)
            prescription_type: Defaults to regular

        Returns:
            The stored prescription aggregate

        Raises:
            ValidationError: empty, oversized or over-quantity prescription
            NotFoundError: doctor, patient or a drug does not exist
        """
        try:
            new_prescription = NewPrescription.create(
                doctor_id,
                patient_id,
                start_date=start_date,
                prescription_type=prescription_type,
            )
            for drug_id, quantity in drugs:
                new_prescription.add_drug(drug_id, quantity)
            new_prescription.validate()
        except ValidationError as e:
            logger.warning(
                "Rejected prescription",
                extra={
                    "context": {
                        "doctor_id": str(doctor_id),
                        "patient_id": str(patient_id),
                        "field": e.field,
                        "error": e.message,
                    }
                },
            )
            raise

        prescription = await call_repository(
            "create_prescription", self.repo.create(new_prescription)
        )
        logger.info(
            "Prescription issued",
            extra={
                "context": {
                    "prescription_id": str(prescription.id),
                    "code": prescription.code,
                    "prescription_type": prescription.prescription_type.value,
                }
            },
        )
        return prescription

    async def get_prescription_by_id(self, prescription_id: UUID) -> Prescription:
        return await call_repository(
            "get_prescription_by_id", self.repo.get_by_id(prescription_id)
        )

    async def get_prescriptions_with_pagination(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> List[Prescription]:
        limit, offset = paginate(page, page_size)
        return await call_repository("list_prescriptions", self.repo.list(limit, offset))

    async def fill_prescription(
        self,
        prescription_id: UUID,
        pharmacist_id: UUID,
        now: Optional[datetime] = None,
    ) -> PrescriptionFill:
        """
        Record that a pharmacist dispensed the prescription.

        Raises:
            NotFoundError: unknown prescription or pharmacist
            PrescriptionAlreadyFilledError: a fill already exists
            PrescriptionExpiredError: the prescription is past its end date
        """
        prescription = await self.get_prescription_by_id(prescription_id)
        try:
            new_fill = prescription.fill_with(pharmacist_id, now)
        except ValidationError as e:
            logger.warning(
                "Rejected prescription fill",
                extra={
                    "context": {"prescription_id": str(prescription_id), "error": e.message}
                },
            )
            raise
        fill = await call_repository("fill_prescription", self.repo.fill(new_fill))
        logger.info(
            "Prescription dispensed",
            extra={
                "context": {
                    "prescription_id": str(prescription_id),
                    "pharmacist_id": str(pharmacist_id),
                }
            },
        )
        return fill
