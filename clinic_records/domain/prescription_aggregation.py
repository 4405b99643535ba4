"""
Folding of flat prescription join rows into prescription aggregates.

The prescription queries return one row per prescribed drug, each row
repeating the prescription header, the doctor and patient details and the
(optional) fill columns:

    prescriptions page  JOIN doctors  JOIN patients
    JOIN prescribed_drugs  LEFT JOIN prescription_fills

This module turns that row stream back into one ``Prescription`` per
distinct prescription id, keeping first-encounter order. Rows for the same
prescription do not need to be adjacent.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from clinic_records.core.exceptions import RowContractError
from clinic_records.domain.entities import (
    PrescribedDrug,
    Prescription,
    PrescriptionDoctor,
    PrescriptionFill,
    PrescriptionPatient,
    PrescriptionType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrescriptionRow:
    """One row of the prescription × prescribed drug × optional fill join."""

    prescription_id: UUID
    doctor_id: UUID
    patient_id: UUID
    prescription_type: PrescriptionType
    code: str
    start_date: datetime
    end_date: datetime
    created_at: datetime
    updated_at: datetime
    prescribed_drug_id: UUID
    drug_id: UUID
    quantity: int
    prescribed_drug_created_at: datetime
    prescribed_drug_updated_at: datetime
    doctor_name: str
    doctor_personal_id: str
    doctor_license_number: str
    patient_name: str
    patient_personal_id: str
    fill_id: Optional[UUID] = None
    fill_pharmacist_id: Optional[UUID] = None
    fill_created_at: Optional[datetime] = None
    fill_updated_at: Optional[datetime] = None


def _prescribed_drug_from_row(row: PrescriptionRow) -> PrescribedDrug:
    return PrescribedDrug(
        id=row.prescribed_drug_id,
        prescription_id=row.prescription_id,
        drug_id=row.drug_id,
        quantity=row.quantity,
        created_at=row.prescribed_drug_created_at,
        updated_at=row.prescribed_drug_updated_at,
    )


def _fill_from_row(row: PrescriptionRow) -> Optional[PrescriptionFill]:
    if row.fill_id is None:
        return None
    if (
        row.fill_pharmacist_id is None
        or row.fill_created_at is None
        or row.fill_updated_at is None
    ):
        raise RowContractError(
            f"Fill {row.fill_id} of prescription {row.prescription_id} "
            "is missing pharmacist or timestamp columns"
        )
    return PrescriptionFill(
        id=row.fill_id,
        prescription_id=row.prescription_id,
        pharmacist_id=row.fill_pharmacist_id,
        created_at=row.fill_created_at,
        updated_at=row.fill_updated_at,
    )


class PrescriptionAggregator:
    """
    Accumulates prescription aggregates from join rows.

    Keeps an insertion-ordered list of aggregates plus an index by
    prescription id, so each row is placed in O(1).
    """

    def __init__(self) -> None:
        self._aggregates: List[Prescription] = []
        self._by_id: Dict[UUID, Prescription] = {}
        self._row_count = 0

    def add(self, row: PrescriptionRow) -> None:
        self._row_count += 1
        prescribed_drug = _prescribed_drug_from_row(row)
        aggregate = self._by_id.get(row.prescription_id)

        if aggregate is not None:
            aggregate.prescribed_drugs.append(prescribed_drug)
            fill = _fill_from_row(row)
            if fill is None:
                return
            if aggregate.fill is None:
                aggregate.fill = fill
            elif aggregate.fill.id != fill.id:
                raise RowContractError(
                    f"Rows of prescription {row.prescription_id} disagree on the fill: "
                    f"{aggregate.fill.id} vs {fill.id}"
                )
            return

        aggregate = Prescription(
            id=row.prescription_id,
            doctor_id=row.doctor_id,
            patient_id=row.patient_id,
            prescription_type=PrescriptionType(row.prescription_type),
            code=row.code,
            start_date=row.start_date,
            end_date=row.end_date,
            prescribed_drugs=[prescribed_drug],
            fill=_fill_from_row(row),
            created_at=row.created_at,
            updated_at=row.updated_at,
            doctor=PrescriptionDoctor(
                id=row.doctor_id,
                name=row.doctor_name,
                personal_id=row.doctor_personal_id,
                license_number=row.doctor_license_number,
            ),
            patient=PrescriptionPatient(
                id=row.patient_id,
                name=row.patient_name,
                personal_id=row.patient_personal_id,
            ),
        )
        self._by_id[row.prescription_id] = aggregate
        self._aggregates.append(aggregate)

    def extend(self, rows: Iterable[PrescriptionRow]) -> "PrescriptionAggregator":
        for row in rows:
            self.add(row)
        return self

    def results(self) -> List[Prescription]:
        """Aggregates in first-encounter order."""
        logger.debug(
            "Aggregated prescription rows",
            extra={
                "context": {
                    "row_count": self._row_count,
                    "prescription_count": len(self._aggregates),
                }
            },
        )
        return list(self._aggregates)


def aggregate_prescriptions(rows: Iterable[PrescriptionRow]) -> List[Prescription]:
    """Fold join rows into one aggregate per distinct prescription id."""
    return PrescriptionAggregator().extend(rows).results()
