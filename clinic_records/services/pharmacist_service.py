import logging
from typing import List, Optional
from uuid import UUID

from clinic_records.core.exceptions import ValidationError
from clinic_records.core.validation import paginate
from clinic_records.domain.entities import NewPharmacist, Pharmacist
from clinic_records.domain.interfaces import IPharmacistRepository

from .base_service import call_repository

logger = logging.getLogger(__name__)


class PharmacistService:
    """Application service for pharmacist use-cases."""

    def __init__(self, repo: IPharmacistRepository) -> None:
        self.repo = repo

    async def create_pharmacist(self, name: str, personal_id: str) -> Pharmacist:
        try:
            new_pharmacist = NewPharmacist.create(name, personal_id)
        except ValidationError as e:
            logger.warning(
                "Rejected pharmacist",
                extra={"context": {"field": e.field, "error": e.message}},
            )
            raise
        pharmacist = await call_repository(
            "create_pharmacist", self.repo.create(new_pharmacist)
        )
        logger.info(
            "Pharmacist created", extra={"context": {"pharmacist_id": str(pharmacist.id)}}
        )
        return pharmacist

    async def get_pharmacist_by_id(self, pharmacist_id: UUID) -> Pharmacist:
        return await call_repository(
            "get_pharmacist_by_id", self.repo.get_by_id(pharmacist_id)
        )

    async def get_pharmacists_with_pagination(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> List[Pharmacist]:
        limit, offset = paginate(page, page_size)
        return await call_repository("list_pharmacists", self.repo.list(limit, offset))
