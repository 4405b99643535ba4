"""
Doctor service for business logic following SOLID principles.

Depends on the IDoctorRepository abstraction, not on SQLAlchemy.
"""

import logging
from typing import List, Optional
from uuid import UUID

from clinic_records.core.exceptions import ValidationError
from clinic_records.core.validation import paginate
from clinic_records.domain.entities import Doctor, NewDoctor
from clinic_records.domain.interfaces import IDoctorRepository

from .base_service import call_repository

logger = logging.getLogger(__name__)


class DoctorService:
    """Application service for doctor use-cases."""

    def __init__(self, repo: IDoctorRepository) -> None:
        self.repo = repo

    async def create_doctor(
        self, name: str, license_number: str, personal_id: str
    ) -> Doctor:
        """Validate and persist a new doctor.

        Raises:
            ValidationError: invalid name, license or identity number
            DuplicateError: license or identity number already registered
        """
        try:
            new_doctor = NewDoctor.create(name, license_number, personal_id)
        except ValidationError as e:
            logger.warning(
                "Rejected doctor", extra={"context": {"field": e.field, "error": e.message}}
            )
            raise
        doctor = await call_repository("create_doctor", self.repo.create(new_doctor))
        logger.info("Doctor created", extra={"context": {"doctor_id": str(doctor.id)}})
        return doctor

    async def get_doctor_by_id(self, doctor_id: UUID) -> Doctor:
        return await call_repository("get_doctor_by_id", self.repo.get_by_id(doctor_id))

    async def get_doctors_with_pagination(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> List[Doctor]:
        limit, offset = paginate(page, page_size)
        return await call_repository("list_doctors", self.repo.list(limit, offset))
