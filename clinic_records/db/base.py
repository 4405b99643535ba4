from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_records.domain.entities import DrugContentType, PrescriptionType
from clinic_records.utils.time_utils import utcnow

from .session import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class Doctor(TimestampMixin, Base):
    __tablename__ = "doctors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    license_number: Mapped[str] = mapped_column(String(7), unique=True, nullable=False)
    personal_id: Mapped[str] = mapped_column(String(11), unique=True, nullable=False)


class Patient(TimestampMixin, Base):
    __tablename__ = "patients"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    personal_id: Mapped[str] = mapped_column(String(11), unique=True, nullable=False)


class Pharmacist(TimestampMixin, Base):
    __tablename__ = "pharmacists"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    personal_id: Mapped[str] = mapped_column(String(11), unique=True, nullable=False)


class Drug(TimestampMixin, Base):
    __tablename__ = "drugs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[DrugContentType] = mapped_column(
        Enum(
            DrugContentType,
            name="drug_content_type",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    pills_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    mg_per_pill: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ml_per_pill: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    volume_ml: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class Prescription(TimestampMixin, Base):
    __tablename__ = "prescriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("patients.id"), nullable=False, index=True
    )
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("doctors.id"), nullable=False, index=True
    )
    prescription_type: Mapped[PrescriptionType] = mapped_column(
        Enum(
            PrescriptionType,
            name="prescription_type",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    prescribed_drugs: Mapped[List["PrescribedDrug"]] = relationship(
        back_populates="prescription", cascade="all, delete-orphan"
    )


class PrescribedDrug(TimestampMixin, Base):
    __tablename__ = "prescribed_drugs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    prescription_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("prescriptions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    drug_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("drugs.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Order in which the drug was written on the prescription
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    prescription: Mapped[Prescription] = relationship(back_populates="prescribed_drugs")


class PrescriptionFill(TimestampMixin, Base):
    __tablename__ = "prescription_fills"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    prescription_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("prescriptions.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    pharmacist_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pharmacists.id"), nullable=False
    )
