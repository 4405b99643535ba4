"""Drug repository implementation backed by SQLAlchemy."""

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_records.db.base import Drug as DbDrug
from clinic_records.domain.entities import Drug as DomainDrug
from clinic_records.domain.entities import DrugContentType, NewDrug
from clinic_records.domain.interfaces import IDrugRepository
from clinic_records.utils.time_utils import as_utc

from .base_repository import BaseRepository


class DrugRepository(BaseRepository[DbDrug], IDrugRepository):
    """Repository for Drug persistence operations."""

    entity_name = "Drug"

    def __init__(self, db_session: AsyncSession) -> None:
        super().__init__(db_session, DbDrug)

    async def create(self, drug: NewDrug) -> DomainDrug:
        db_drug = DbDrug(
            id=drug.id,
            name=drug.name,
            content_type=drug.content_type,
            pills_count=drug.pills_count,
            mg_per_pill=drug.mg_per_pill,
            ml_per_pill=drug.ml_per_pill,
            volume_ml=drug.volume_ml,
        )
        return self._to_domain(await self._add(db_drug, "create_drug"))

    async def get_by_id(self, drug_id: UUID) -> DomainDrug:
        return self._to_domain(await self._get_model(drug_id))

    async def list(self, limit: int, offset: int) -> List[DomainDrug]:
        return [self._to_domain(d) for d in await self._list_models(limit, offset)]

    def _to_domain(self, db_drug: DbDrug) -> DomainDrug:
        return DomainDrug(
            id=db_drug.id,
            name=db_drug.name,
            content_type=DrugContentType(db_drug.content_type),
            pills_count=db_drug.pills_count,
            mg_per_pill=db_drug.mg_per_pill,
            ml_per_pill=db_drug.ml_per_pill,
            volume_ml=db_drug.volume_ml,
            created_at=as_utc(db_drug.created_at),
            updated_at=as_utc(db_drug.updated_at),
        )
