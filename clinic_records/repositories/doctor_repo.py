"""Doctor repository implementation backed by SQLAlchemy."""

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_records.db.base import Doctor as DbDoctor
from clinic_records.domain.entities import Doctor as DomainDoctor
from clinic_records.domain.entities import NewDoctor
from clinic_records.domain.interfaces import IDoctorRepository
from clinic_records.utils.time_utils import as_utc

from .base_repository import BaseRepository


class DoctorRepository(BaseRepository[DbDoctor], IDoctorRepository):
    """Repository for Doctor persistence operations."""

    entity_name = "Doctor"

    def __init__(self, db_session: AsyncSession) -> None:
        super().__init__(db_session, DbDoctor)

    async def create(self, doctor: NewDoctor) -> DomainDoctor:
        db_doctor = DbDoctor(
            id=doctor.id,
            name=doctor.name,
            license_number=doctor.license_number,
            personal_id=doctor.personal_id,
        )
        return self._to_domain(await self._add(db_doctor, "create_doctor"))

    async def get_by_id(self, doctor_id: UUID) -> DomainDoctor:
        return self._to_domain(await self._get_model(doctor_id))

    async def list(self, limit: int, offset: int) -> List[DomainDoctor]:
        return [self._to_domain(d) for d in await self._list_models(limit, offset)]

    def _to_domain(self, db_doctor: DbDoctor) -> DomainDoctor:
        return DomainDoctor(
            id=db_doctor.id,
            name=db_doctor.name,
            license_number=db_doctor.license_number,
            personal_id=db_doctor.personal_id,
            created_at=as_utc(db_doctor.created_at),
            updated_at=as_utc(db_doctor.updated_at),
        )
