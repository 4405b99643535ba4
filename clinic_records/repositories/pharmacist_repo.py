"""Pharmacist repository implementation backed by SQLAlchemy."""

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_records.db.base import Pharmacist as DbPharmacist
from clinic_records.domain.entities import NewPharmacist
from clinic_records.domain.entities import Pharmacist as DomainPharmacist
from clinic_records.domain.interfaces import IPharmacistRepository
from clinic_records.utils.time_utils import as_utc

from .base_repository import BaseRepository


class PharmacistRepository(BaseRepository[DbPharmacist], IPharmacistRepository):
    """Repository for Pharmacist persistence operations."""

    entity_name = "Pharmacist"

    def __init__(self, db_session: AsyncSession) -> None:
        super().__init__(db_session, DbPharmacist)

    async def create(self, pharmacist: NewPharmacist) -> DomainPharmacist:
        db_pharmacist = DbPharmacist(
            id=pharmacist.id, name=pharmacist.name, personal_id=pharmacist.personal_id
        )
        return self._to_domain(await self._add(db_pharmacist, "create_pharmacist"))

    async def get_by_id(self, pharmacist_id: UUID) -> DomainPharmacist:
        return self._to_domain(await self._get_model(pharmacist_id))

    async def list(self, limit: int, offset: int) -> List[DomainPharmacist]:
        return [self._to_domain(p) for p in await self._list_models(limit, offset)]

    def _to_domain(self, db_pharmacist: DbPharmacist) -> DomainPharmacist:
        return DomainPharmacist(
            id=db_pharmacist.id,
            name=db_pharmacist.name,
            personal_id=db_pharmacist.personal_id,
            created_at=as_utc(db_pharmacist.created_at),
            updated_at=as_utc(db_pharmacist.updated_at),
        )
