"""
Abstract interfaces for repositories following Interface Segregation Principle.

These interfaces define contracts without implementation details, so
services receive their repository by injection and tests can substitute
in-memory doubles for the database-backed implementations.

Every ``list`` returns entities ordered by creation time ascending.
Implementations raise NotFoundError, DuplicateError or StorageError from
``clinic_records.core.exceptions``.
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from .entities import (
    Doctor,
    Drug,
    NewDoctor,
    NewDrug,
    NewPatient,
    NewPharmacist,
    NewPrescription,
    NewPrescriptionFill,
    Patient,
    Pharmacist,
    Prescription,
    PrescriptionFill,
)


class IDoctorReader(ABC):
    """Interface for doctor read operations."""

    @abstractmethod
    async def get_by_id(self, doctor_id: UUID) -> Doctor:
        """Get doctor by ID."""
        pass

    @abstractmethod
    async def list(self, limit: int, offset: int) -> List[Doctor]:
        """Get a page of doctors."""
        pass


class IDoctorWriter(ABC):
    """Interface for doctor write operations."""

    @abstractmethod
    async def create(self, doctor: NewDoctor) -> Doctor:
        """Persist a new doctor."""
        pass


class IDoctorRepository(IDoctorReader, IDoctorWriter):
    """Complete doctor repository interface."""

    pass


class IPatientReader(ABC):
    """Interface for patient read operations."""

    @abstractmethod
    async def get_by_id(self, patient_id: UUID) -> Patient:
        """Get patient by ID."""
        pass

    @abstractmethod
    async def list(self, limit: int, offset: int) -> List[Patient]:
        """Get a page of patients."""
        pass


class IPatientWriter(ABC):
    """Interface for patient write operations."""

    @abstractmethod
    async def create(self, patient: NewPatient) -> Patient:
        """Persist a new patient."""
        pass


class IPatientRepository(IPatientReader, IPatientWriter):
    """Complete patient repository interface."""

    pass


class IPharmacistReader(ABC):
    """Interface for pharmacist read operations."""

    @abstractmethod
    async def get_by_id(self, pharmacist_id: UUID) -> Pharmacist:
        """Get pharmacist by ID."""
        pass

    @abstractmethod
    async def list(self, limit: int, offset: int) -> List[Pharmacist]:
        """Get a page of pharmacists."""
        pass


class IPharmacistWriter(ABC):
    """Interface for pharmacist write operations."""

    @abstractmethod
    async def create(self, pharmacist: NewPharmacist) -> Pharmacist:
        """Persist a new pharmacist."""
        pass


class IPharmacistRepository(IPharmacistReader, IPharmacistWriter):
    """Complete pharmacist repository interface."""

    pass


class IDrugReader(ABC):
    """Interface for drug read operations."""

    @abstractmethod
    async def get_by_id(self, drug_id: UUID) -> Drug:
        """Get drug by ID."""
        pass

    @abstractmethod
    async def list(self, limit: int, offset: int) -> List[Drug]:
        """Get a page of drugs."""
        pass


class IDrugWriter(ABC):
    """Interface for drug write operations."""

    @abstractmethod
    async def create(self, drug: NewDrug) -> Drug:
        """Persist a new drug."""
        pass


class IDrugRepository(IDrugReader, IDrugWriter):
    """Complete drug repository interface."""

    pass


class IPrescriptionReader(ABC):
    """Interface for prescription read operations."""

    @abstractmethod
    async def get_by_id(self, prescription_id: UUID) -> Prescription:
        """Get a prescription aggregate by ID."""
        pass

    @abstractmethod
    async def list(self, limit: int, offset: int) -> List[Prescription]:
        """Get a page of prescription aggregates; limit/offset count prescriptions."""
        pass


class IPrescriptionWriter(ABC):
    """Interface for prescription write operations."""

    @abstractmethod
    async def create(self, prescription: NewPrescription) -> Prescription:
        """Persist a prescription and all its line items atomically."""
        pass

    @abstractmethod
    async def fill(self, prescription_fill: NewPrescriptionFill) -> PrescriptionFill:
        """Persist the fill of an existing prescription."""
        pass


class IPrescriptionRepository(IPrescriptionReader, IPrescriptionWriter):
    """Complete prescription repository interface."""

    pass
