"""Patient repository implementation backed by SQLAlchemy."""

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_records.db.base import Patient as DbPatient
from clinic_records.domain.entities import NewPatient
from clinic_records.domain.entities import Patient as DomainPatient
from clinic_records.domain.interfaces import IPatientRepository
from clinic_records.utils.time_utils import as_utc

from .base_repository import BaseRepository


class PatientRepository(BaseRepository[DbPatient], IPatientRepository):
    """Repository for Patient persistence operations."""

    entity_name = "Patient"

    def __init__(self, db_session: AsyncSession) -> None:
        super().__init__(db_session, DbPatient)

    async def create(self, patient: NewPatient) -> DomainPatient:
        db_patient = DbPatient(
            id=patient.id, name=patient.name, personal_id=patient.personal_id
        )
        return self._to_domain(await self._add(db_patient, "create_patient"))

    async def get_by_id(self, patient_id: UUID) -> DomainPatient:
        return self._to_domain(await self._get_model(patient_id))

    async def list(self, limit: int, offset: int) -> List[DomainPatient]:
        return [self._to_domain(p) for p in await self._list_models(limit, offset)]

    def _to_domain(self, db_patient: DbPatient) -> DomainPatient:
        return DomainPatient(
            id=db_patient.id,
            name=db_patient.name,
            personal_id=db_patient.personal_id,
            created_at=as_utc(db_patient.created_at),
            updated_at=as_utc(db_patient.updated_at),
        )
