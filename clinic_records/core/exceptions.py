"""
Custom exceptions for the clinic records system.

Centralized error taxonomy shared by entity constructors, repositories and
services:

- ValidationError: malformed or rule-violating input (never retried)
- NotFoundError: no row matches the requested id
- ConflictError: unique identity/license violations, double fills
- StorageError: any other persistence failure
"""

from typing import Any, Dict, Optional
from uuid import UUID


class ClinicRecordsError(Exception):
    """Base exception for all clinic records errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ClinicRecordsError):
    """Raised when input violates a format or business rule."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, details)
        self.field = field


class InvalidPersonalIdError(ValidationError):
    """Raised when a personal identity number fails validation."""

    def __init__(self, message: str, field: str = "personal_id"):
        super().__init__(message, field)


class InvalidLicenseNumberError(ValidationError):
    """Raised when a professional license number fails validation."""

    def __init__(self, message: str, field: str = "license_number"):
        super().__init__(message, field)


class PaginationError(ValidationError):
    """Raised when page or page_size is out of bounds."""

    def __init__(
        self,
        message: str = (
            "Invalid page or page_size: page must be at least 0 "
            "and page_size must be at least 1"
        ),
    ):
        super().__init__(message, "pagination")


class DrugAttributesError(ValidationError):
    """Raised when drug attributes do not match the declared content type."""


class QuantityExceededError(ValidationError):
    """Raised when a drug quantity exceeds the prescription type limit."""

    def __init__(self, drug_id: UUID, quantity: int, limit: int):
        super().__init__(
            f"Quantity {quantity} of drug {drug_id} exceeds the limit of {limit} "
            "for this prescription type",
            "quantity",
        )
        self.drug_id = drug_id
        self.quantity = quantity
        self.limit = limit


class TooManyDrugsError(ValidationError):
    """Raised when a prescription would exceed its line item cap."""

    def __init__(self, limit: int):
        super().__init__(
            f"Prescription cannot contain more than {limit} drugs", "prescribed_drugs"
        )
        self.limit = limit


class DuplicateDrugError(ValidationError):
    """Raised when the same drug is added twice to one prescription."""

    def __init__(self, drug_id: UUID):
        super().__init__(
            f"Drug {drug_id} is already on this prescription", "prescribed_drugs"
        )
        self.drug_id = drug_id


class PrescriptionExpiredError(ValidationError):
    """Raised when filling a prescription past its end date."""

    def __init__(self, prescription_id: UUID):
        super().__init__(f"Prescription {prescription_id} has expired", "end_date")
        self.prescription_id = prescription_id


class NotFoundError(ClinicRecordsError):
    """Raised when an entity id has no matching row."""

    def __init__(self, entity: str, entity_id: Any = None, message: Optional[str] = None):
        msg = message or f"{entity} with id {entity_id} not found"
        super().__init__(msg, {"entity": entity, "entity_id": str(entity_id)})
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(ClinicRecordsError):
    """Raised when a write conflicts with already committed state."""


class DuplicateError(ConflictError):
    """Raised on a unique identity or license number violation."""

    def __init__(self, entity: str, message: str):
        super().__init__(message, {"entity": entity})
        self.entity = entity


class PrescriptionAlreadyFilledError(ConflictError):
    """Raised when a prescription already has a fill."""

    def __init__(self, prescription_id: UUID):
        super().__init__(
            f"Prescription {prescription_id} has already been filled",
            {"prescription_id": str(prescription_id)},
        )
        self.prescription_id = prescription_id


class StorageError(ClinicRecordsError):
    """Raised when a persistence operation fails."""

    def __init__(self, operation: str, message: str):
        super().__init__(message, {"operation": operation})
        self.operation = operation


class RowContractError(StorageError):
    """Raised when a joined row violates the shape the aggregation expects."""

    def __init__(self, message: str):
        super().__init__("aggregate_prescriptions", message)
