"""
Prescription repository implementation backed by SQLAlchemy.

Reads select a page of prescriptions first and only then join their line
items and fill, so ``limit``/``offset`` count prescriptions rather than
joined rows:

    (SELECT ... FROM prescriptions ORDER BY created_at LIMIT :limit OFFSET :offset)
    JOIN doctors  JOIN patients
    JOIN prescribed_drugs  LEFT JOIN prescription_fills

The flat rows are folded back into aggregates by
``clinic_records.domain.prescription_aggregation``.
"""

import logging
import time
from typing import Any, Iterable, List, NoReturn, Tuple
from uuid import UUID, uuid4

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_records.core.exceptions import (
    DuplicateError,
    NotFoundError,
    PrescriptionAlreadyFilledError,
)
from clinic_records.core.logging_config import log_performance
from clinic_records.db.base import Doctor as DbDoctor
from clinic_records.db.base import Drug as DbDrug
from clinic_records.db.base import Patient as DbPatient
from clinic_records.db.base import Pharmacist as DbPharmacist
from clinic_records.db.base import PrescribedDrug as DbPrescribedDrug
from clinic_records.db.base import Prescription as DbPrescription
from clinic_records.db.base import PrescriptionFill as DbPrescriptionFill
from clinic_records.domain.entities import NewPrescription, NewPrescriptionFill
from clinic_records.domain.entities import Prescription as DomainPrescription
from clinic_records.domain.entities import PrescriptionFill as DomainPrescriptionFill
from clinic_records.domain.interfaces import IPrescriptionRepository
from clinic_records.domain.prescription_aggregation import (
    PrescriptionRow,
    aggregate_prescriptions,
)
from clinic_records.utils.time_utils import as_utc

from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


def _joined_rows_query(prescriptions: Select) -> Select:
    """Join people, line items and the optional fill onto a prescription selection."""
    page = prescriptions.subquery("prescriptions_page")
    return (
        select(
            page.c.id.label("prescription_id"),
            page.c.doctor_id,
            page.c.patient_id,
            page.c.prescription_type,
            page.c.code,
            page.c.start_date,
            page.c.end_date,
            page.c.created_at,
            page.c.updated_at,
            DbPrescribedDrug.id.label("prescribed_drug_id"),
            DbPrescribedDrug.drug_id,
            DbPrescribedDrug.quantity,
            DbPrescribedDrug.created_at.label("prescribed_drug_created_at"),
            DbPrescribedDrug.updated_at.label("prescribed_drug_updated_at"),
            DbDoctor.name.label("doctor_name"),
            DbDoctor.personal_id.label("doctor_personal_id"),
            DbDoctor.license_number.label("doctor_license_number"),
            DbPatient.name.label("patient_name"),
            DbPatient.personal_id.label("patient_personal_id"),
            DbPrescriptionFill.id.label("fill_id"),
            DbPrescriptionFill.pharmacist_id.label("fill_pharmacist_id"),
            DbPrescriptionFill.created_at.label("fill_created_at"),
            DbPrescriptionFill.updated_at.label("fill_updated_at"),
        )
        .select_from(page)
        .join(DbDoctor, DbDoctor.id == page.c.doctor_id)
        .join(DbPatient, DbPatient.id == page.c.patient_id)
        # TODO: switch to an outer join if prescriptions without drugs become possible
        .join(DbPrescribedDrug, DbPrescribedDrug.prescription_id == page.c.id)
        .outerjoin(DbPrescriptionFill, DbPrescriptionFill.prescription_id == page.c.id)
        .order_by(
            page.c.created_at.asc(),
            page.c.id.asc(),
            DbPrescribedDrug.position.asc(),
        )
    )


def _to_row(result_row: Any) -> PrescriptionRow:
    m = result_row._mapping
    return PrescriptionRow(
        prescription_id=m["prescription_id"],
        doctor_id=m["doctor_id"],
        patient_id=m["patient_id"],
        prescription_type=m["prescription_type"],
        code=m["code"],
        start_date=as_utc(m["start_date"]),
        end_date=as_utc(m["end_date"]),
        created_at=as_utc(m["created_at"]),
        updated_at=as_utc(m["updated_at"]),
        prescribed_drug_id=m["prescribed_drug_id"],
        drug_id=m["drug_id"],
        quantity=m["quantity"],
        prescribed_drug_created_at=as_utc(m["prescribed_drug_created_at"]),
        prescribed_drug_updated_at=as_utc(m["prescribed_drug_updated_at"]),
        doctor_name=m["doctor_name"],
        doctor_personal_id=m["doctor_personal_id"],
        doctor_license_number=m["doctor_license_number"],
        patient_name=m["patient_name"],
        patient_personal_id=m["patient_personal_id"],
        fill_id=m["fill_id"],
        fill_pharmacist_id=m["fill_pharmacist_id"],
        fill_created_at=as_utc(m["fill_created_at"]),
        fill_updated_at=as_utc(m["fill_updated_at"]),
    )


class PrescriptionRepository(BaseRepository[DbPrescription], IPrescriptionRepository):
    """Repository for prescription aggregates and their fills."""

    entity_name = "Prescription"

    def __init__(self, db_session: AsyncSession) -> None:
        super().__init__(db_session, DbPrescription)

    async def create(self, prescription: NewPrescription) -> DomainPrescription:
        """Insert the header and every line item in one transaction."""
        db_prescription = DbPrescription(
            id=prescription.id,
            doctor_id=prescription.doctor_id,
            patient_id=prescription.patient_id,
            prescription_type=prescription.prescription_type,
            code=prescription.code,
            start_date=prescription.start_date,
            end_date=prescription.end_date,
            prescribed_drugs=[
                DbPrescribedDrug(
                    id=uuid4(),
                    drug_id=item.drug_id,
                    quantity=item.quantity,
                    position=position,
                )
                for position, item in enumerate(prescription.prescribed_drugs)
            ],
        )
        self.db.add(db_prescription)
        try:
            await self._commit("create_prescription")
        except NotFoundError as e:
            await self._raise_missing_reference(
                e,
                [
                    ("Doctor", DbDoctor, [prescription.doctor_id]),
                    ("Patient", DbPatient, [prescription.patient_id]),
                    ("Drug", DbDrug, [d.drug_id for d in prescription.prescribed_drugs]),
                ],
            )
        logger.info(
            "Prescription created",
            extra={
                "context": {
                    "prescription_id": str(prescription.id),
                    "drug_count": len(prescription.prescribed_drugs),
                }
            },
        )
        return await self.get_by_id(prescription.id)

    async def _raise_missing_reference(
        self,
        error: NotFoundError,
        references: Iterable[Tuple[str, Any, List[UUID]]],
    ) -> NoReturn:
        """Re-raise a foreign-key failure as the first referenced row that is absent."""
        for entity, model, ids in references:
            result = await self._execute(
                select(model.id).where(model.id.in_(ids)), "resolve_missing_reference"
            )
            existing = set(result.scalars().all())
            for entity_id in ids:
                if entity_id not in existing:
                    raise NotFoundError(entity, entity_id) from error
        raise error

    async def _fetch(self, prescriptions: Select, operation: str) -> List[DomainPrescription]:
        started = time.perf_counter()
        result = await self._execute(_joined_rows_query(prescriptions), operation)
        rows = [_to_row(r) for r in result.all()]
        aggregates = aggregate_prescriptions(rows)
        log_performance(
            operation,
            (time.perf_counter() - started) * 1000,
            row_count=len(rows),
            prescription_count=len(aggregates),
        )
        return aggregates

    async def get_by_id(self, prescription_id: UUID) -> DomainPrescription:
        aggregates = await self._fetch(
            select(DbPrescription).where(DbPrescription.id == prescription_id),
            "get_prescription_by_id",
        )
        if not aggregates:
            raise NotFoundError(self.entity_name, prescription_id)
        return aggregates[0]

    async def list(self, limit: int, offset: int) -> List[DomainPrescription]:
        page = (
            select(DbPrescription)
            .order_by(DbPrescription.created_at.asc(), DbPrescription.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch(page, "list_prescriptions")

    async def fill(self, prescription_fill: NewPrescriptionFill) -> DomainPrescriptionFill:
        db_fill = DbPrescriptionFill(
            id=prescription_fill.id,
            prescription_id=prescription_fill.prescription_id,
            pharmacist_id=prescription_fill.pharmacist_id,
        )
        try:
            db_fill = await self._add(db_fill, "fill_prescription")
        except DuplicateError as e:
            raise PrescriptionAlreadyFilledError(prescription_fill.prescription_id) from e
        except NotFoundError as e:
            await self._raise_missing_reference(
                e,
                [
                    ("Prescription", DbPrescription, [prescription_fill.prescription_id]),
                    ("Pharmacist", DbPharmacist, [prescription_fill.pharmacist_id]),
                ],
            )
        logger.info(
            "Prescription filled",
            extra={
                "context": {
                    "prescription_id": str(db_fill.prescription_id),
                    "pharmacist_id": str(db_fill.pharmacist_id),
                }
            },
        )
        return DomainPrescriptionFill(
            id=db_fill.id,
            prescription_id=db_fill.prescription_id,
            pharmacist_id=db_fill.pharmacist_id,
            created_at=as_utc(db_fill.created_at),
            updated_at=as_utc(db_fill.updated_at),
        )
