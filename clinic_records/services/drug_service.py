import logging
from typing import List, Optional
from uuid import UUID

from clinic_records.core.exceptions import ValidationError
from clinic_records.core.validation import paginate
from clinic_records.domain.entities import Drug, DrugContentType, NewDrug
from clinic_records.domain.interfaces import IDrugRepository

from .base_service import call_repository

logger = logging.getLogger(__name__)


class DrugService:
    """Application service for drug catalogue use-cases."""

    def __init__(self, repo: IDrugRepository) -> None:
        self.repo = repo

    async def create_drug(
        self,
        name: str,
        content_type: DrugContentType,
        pills_count: Optional[int] = None,
        mg_per_pill: Optional[int] = None,
        ml_per_pill: Optional[int] = None,
        volume_ml: Optional[int] = None,
    ) -> Drug:
        """Validate the content-type attribute combination and persist the drug."""
        try:
            new_drug = NewDrug.create(
                name,
                content_type,
                pills_count=pills_count,
                mg_per_pill=mg_per_pill,
                ml_per_pill=ml_per_pill,
                volume_ml=volume_ml,
            )
        except ValidationError as e:
            logger.warning(
                "Rejected drug", extra={"context": {"field": e.field, "error": e.message}}
            )
            raise
        drug = await call_repository("create_drug", self.repo.create(new_drug))
        logger.info("Drug created", extra={"context": {"drug_id": str(drug.id)}})
        return drug

    async def get_drug_by_id(self, drug_id: UUID) -> Drug:
        return await call_repository("get_drug_by_id", self.repo.get_by_id(drug_id))

    async def get_drugs_with_pagination(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> List[Drug]:
        limit, offset = paginate(page, page_size)
        return await call_repository("list_drugs", self.repo.list(limit, offset))
