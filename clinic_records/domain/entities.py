"""
Domain entities - Pure business logic, no framework dependencies.

Two families live here:
- ``New*`` values validate themselves on construction and are what
  repositories persist. Repositories never re-validate them.
- Persisted entities (Doctor, Patient, ..., Prescription) are what
  repositories return, hydrated from already-validated rows.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, FrozenSet, List, Optional
from uuid import UUID, uuid4

from clinic_records.core.exceptions import (
    DrugAttributesError,
    DuplicateDrugError,
    PrescriptionAlreadyFilledError,
    PrescriptionExpiredError,
    QuantityExceededError,
    TooManyDrugsError,
    ValidationError,
)
from clinic_records.core.validation import (
    validate_license_number,
    validate_name,
    validate_personal_id,
)
from clinic_records.utils.time_utils import as_utc, utcnow


class DrugContentType(str, Enum):
    SOLID_PILLS = "solid_pills"
    LIQUID_PILLS = "liquid_pills"
    BOTTLE_OF_LIQUID = "bottle_of_liquid"
    BOTTLE_OF_PILLS = "bottle_of_pills"


class PrescriptionType(str, Enum):
    REGULAR = "regular"
    FOR_ANTIBIOTICS = "for_antibiotics"
    FOR_IMMUNOLOGICAL_DRUGS = "for_immunological_drugs"
    FOR_CHRONIC_DISEASE_DRUGS = "for_chronic_disease_drugs"


DRUG_ATTRIBUTES = ("pills_count", "mg_per_pill", "ml_per_pill", "volume_ml")

# Exactly these attributes must be set for each content type; the rest must be None
REQUIRED_DRUG_ATTRIBUTES: Dict[DrugContentType, FrozenSet[str]] = {
    DrugContentType.SOLID_PILLS: frozenset({"pills_count", "mg_per_pill"}),
    DrugContentType.LIQUID_PILLS: frozenset({"pills_count", "ml_per_pill"}),
    DrugContentType.BOTTLE_OF_LIQUID: frozenset({"volume_ml"}),
    DrugContentType.BOTTLE_OF_PILLS: frozenset({"pills_count", "volume_ml"}),
}

MAX_PRESCRIBED_DRUGS = 10

# None means no per-drug limit
MAX_QUANTITY_PER_DRUG: Dict[PrescriptionType, Optional[int]] = {
    PrescriptionType.REGULAR: None,
    PrescriptionType.FOR_ANTIBIOTICS: 1,
    PrescriptionType.FOR_IMMUNOLOGICAL_DRUGS: 2,
    PrescriptionType.FOR_CHRONIC_DISEASE_DRUGS: 4,
}

DEFAULT_VALIDITY = timedelta(days=30)
CHRONIC_DISEASE_VALIDITY = timedelta(days=365)


def prescription_validity(prescription_type: PrescriptionType) -> timedelta:
    if prescription_type == PrescriptionType.FOR_CHRONIC_DISEASE_DRUGS:
        return CHRONIC_DISEASE_VALIDITY
    return DEFAULT_VALIDITY


def generate_prescription_code(prescription_id: UUID) -> str:
    """Human-presentable code derived from the prescription id, e.g. RX-1A2B-3C4D-5E6F."""
    digits = prescription_id.hex[:12].upper()
    return f"RX-{digits[0:4]}-{digits[4:8]}-{digits[8:12]}"


# ===========================
# People
# ===========================


@dataclass(frozen=True)
class NewDoctor:
    """A doctor ready to be persisted."""

    id: UUID
    name: str
    license_number: str
    personal_id: str

    def __post_init__(self):
        """Validate domain rules."""
        validate_name(self.name)
        validate_license_number(self.license_number)
        validate_personal_id(self.personal_id)

    @classmethod
    def create(cls, name: str, license_number: str, personal_id: str) -> "NewDoctor":
        return cls(
            id=uuid4(),
            name=name,
            license_number=license_number,
            personal_id=personal_id,
        )


@dataclass
class Doctor:
    id: UUID
    name: str
    license_number: str
    personal_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewPatient:
    """A patient ready to be persisted."""

    id: UUID
    name: str
    personal_id: str

    def __post_init__(self):
        """Validate domain rules."""
        validate_name(self.name)
        validate_personal_id(self.personal_id)

    @classmethod
    def create(cls, name: str, personal_id: str) -> "NewPatient":
        return cls(id=uuid4(), name=name, personal_id=personal_id)


@dataclass
class Patient:
    id: UUID
    name: str
    personal_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewPharmacist:
    """A pharmacist ready to be persisted."""

    id: UUID
    name: str
    personal_id: str

    def __post_init__(self):
        """Validate domain rules."""
        validate_name(self.name)
        validate_personal_id(self.personal_id)

    @classmethod
    def create(cls, name: str, personal_id: str) -> "NewPharmacist":
        return cls(id=uuid4(), name=name, personal_id=personal_id)


@dataclass
class Pharmacist:
    id: UUID
    name: str
    personal_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ===========================
# Drugs
# ===========================


@dataclass(frozen=True)
class NewDrug:
    """
    A drug ready to be persisted.

    The content type decides which of pills_count, mg_per_pill, ml_per_pill
    and volume_ml must be present; every other attribute must be None.
    """

    id: UUID
    name: str
    content_type: DrugContentType
    pills_count: Optional[int] = None
    mg_per_pill: Optional[int] = None
    ml_per_pill: Optional[int] = None
    volume_ml: Optional[int] = None

    def __post_init__(self):
        """Validate domain rules."""
        validate_name(self.name)
        try:
            content_type = DrugContentType(self.content_type)
        except ValueError as exc:
            raise ValidationError(
                f"Unknown drug content type: {self.content_type!r}", "content_type"
            ) from exc
        object.__setattr__(self, "content_type", content_type)

        required = REQUIRED_DRUG_ATTRIBUTES[content_type]
        missing = [a for a in DRUG_ATTRIBUTES if a in required and getattr(self, a) is None]
        forbidden = [
            a for a in DRUG_ATTRIBUTES if a not in required and getattr(self, a) is not None
        ]
        if missing:
            raise DrugAttributesError(
                f"Drug of type {content_type.value} requires: {', '.join(missing)}",
                missing[0],
            )
        if forbidden:
            raise DrugAttributesError(
                f"Drug of type {content_type.value} must not have: {', '.join(forbidden)}",
                forbidden[0],
            )
        for attribute in required:
            value = getattr(self, attribute)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise DrugAttributesError(
                    f"{attribute} must be a positive integer", attribute
                )

    @classmethod
    def create(
        cls,
        name: str,
        content_type: DrugContentType,
        pills_count: Optional[int] = None,
        mg_per_pill: Optional[int] = None,
        ml_per_pill: Optional[int] = None,
        volume_ml: Optional[int] = None,
    ) -> "NewDrug":
        return cls(
            id=uuid4(),
            name=name,
            content_type=content_type,
            pills_count=pills_count,
            mg_per_pill=mg_per_pill,
            ml_per_pill=ml_per_pill,
            volume_ml=volume_ml,
        )


@dataclass
class Drug:
    id: UUID
    name: str
    content_type: DrugContentType
    pills_count: Optional[int] = None
    mg_per_pill: Optional[int] = None
    ml_per_pill: Optional[int] = None
    volume_ml: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ===========================
# Prescriptions
# ===========================


@dataclass(frozen=True)
class NewPrescribedDrug:
    drug_id: UUID
    quantity: int


@dataclass
class NewPrescription:
    """
    A prescription being assembled before commit.

    Build it with ``create`` and then call ``add_drug`` for each line item;
    ``validate`` checks the whole prescription before it is written.
    """

    id: UUID
    doctor_id: UUID
    patient_id: UUID
    prescription_type: PrescriptionType
    code: str
    start_date: datetime
    end_date: datetime
    prescribed_drugs: List[NewPrescribedDrug] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        doctor_id: UUID,
        patient_id: UUID,
        start_date: Optional[datetime] = None,
        prescription_type: Optional[PrescriptionType] = None,
    ) -> "NewPrescription":
        prescription_id = uuid4()
        try:
            prescription_type = PrescriptionType(
                prescription_type or PrescriptionType.REGULAR
            )
        except ValueError as exc:
            raise ValidationError(
                f"Unknown prescription type: {prescription_type!r}", "prescription_type"
            ) from exc
        start = as_utc(start_date) or utcnow()
        return cls(
            id=prescription_id,
            doctor_id=doctor_id,
            patient_id=patient_id,
            prescription_type=prescription_type,
            code=generate_prescription_code(prescription_id),
            start_date=start,
            end_date=start + prescription_validity(prescription_type),
        )

    def _check_quantity(self, drug_id: UUID, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be a positive integer", "quantity")
        limit = MAX_QUANTITY_PER_DRUG[self.prescription_type]
        if limit is not None and quantity > limit:
            raise QuantityExceededError(drug_id, quantity, limit)

    def add_drug(self, drug_id: UUID, quantity: int) -> None:
        if len(self.prescribed_drugs) >= MAX_PRESCRIBED_DRUGS:
            raise TooManyDrugsError(MAX_PRESCRIBED_DRUGS)
        if any(d.drug_id == drug_id for d in self.prescribed_drugs):
            raise DuplicateDrugError(drug_id)
        self._check_quantity(drug_id, quantity)
        self.prescribed_drugs.append(NewPrescribedDrug(drug_id=drug_id, quantity=quantity))

    def validate(self) -> None:
        """Check the whole prescription; raises the first rule it breaks."""
        if not self.prescribed_drugs:
            raise ValidationError(
                "Prescription must contain at least one drug", "prescribed_drugs"
            )
        if len(self.prescribed_drugs) > MAX_PRESCRIBED_DRUGS:
            raise TooManyDrugsError(MAX_PRESCRIBED_DRUGS)
        seen = set()
        for prescribed_drug in self.prescribed_drugs:
            if prescribed_drug.drug_id in seen:
                raise DuplicateDrugError(prescribed_drug.drug_id)
            seen.add(prescribed_drug.drug_id)
            self._check_quantity(prescribed_drug.drug_id, prescribed_drug.quantity)
        if self.end_date <= self.start_date:
            raise ValidationError("End date must be after start date", "end_date")


@dataclass
class PrescribedDrug:
    id: UUID
    prescription_id: UUID
    drug_id: UUID
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewPrescriptionFill:
    id: UUID
    prescription_id: UUID
    pharmacist_id: UUID


@dataclass
class PrescriptionFill:
    id: UUID
    prescription_id: UUID
    pharmacist_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class PrescriptionDoctor:
    """The prescribing doctor as shown on a prescription."""

    id: UUID
    name: str
    personal_id: str
    license_number: str


@dataclass(frozen=True)
class PrescriptionPatient:
    """The patient as shown on a prescription."""

    id: UUID
    name: str
    personal_id: str


@dataclass
class Prescription:
    """
    Prescription aggregate: header, owned line items and the optional fill.

    Reads from the database also embed the doctor and patient details.
    """

    id: UUID
    doctor_id: UUID
    patient_id: UUID
    prescription_type: PrescriptionType
    code: str
    start_date: datetime
    end_date: datetime
    prescribed_drugs: List[PrescribedDrug] = field(default_factory=list)
    fill: Optional[PrescriptionFill] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    doctor: Optional[PrescriptionDoctor] = None
    patient: Optional[PrescriptionPatient] = None

    @property
    def is_filled(self) -> bool:
        return self.fill is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = as_utc(now) or utcnow()
        return now > as_utc(self.end_date)

    def fill_with(
        self, pharmacist_id: UUID, now: Optional[datetime] = None
    ) -> NewPrescriptionFill:
        """
        Produce the fill record for this prescription.

        Raises:
            PrescriptionAlreadyFilledError: a fill already exists
            PrescriptionExpiredError: now is past the end date
        """
        if self.fill is not None:
            raise PrescriptionAlreadyFilledError(self.id)
        if self.is_expired(now):
            raise PrescriptionExpiredError(self.id)
        return NewPrescriptionFill(
            id=uuid4(), prescription_id=self.id, pharmacist_id=pharmacist_id
        )
