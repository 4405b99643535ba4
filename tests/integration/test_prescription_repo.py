"""
Integration tests for the prescription repository: atomic creation,
aggregated reads, prescription-counted paging and fills.
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from clinic_records.core.exceptions import (
    NotFoundError,
    PrescriptionAlreadyFilledError,
)
from clinic_records.db.base import PrescribedDrug as DbPrescribedDrug
from clinic_records.db.base import Prescription as DbPrescription
from clinic_records.domain.entities import (
    DrugContentType,
    NewDoctor,
    NewDrug,
    NewPatient,
    NewPharmacist,
    NewPrescription,
    NewPrescriptionFill,
    PrescriptionType,
)
from clinic_records.repositories import (
    DoctorRepository,
    DrugRepository,
    PatientRepository,
    PharmacistRepository,
    PrescriptionRepository,
)
from clinic_records.services import PrescriptionService
from tests.config.test_config import TestData


@pytest.fixture
async def seeded(db_session):
    """A doctor, patient, pharmacist and three drugs already stored."""
    doctor = await DoctorRepository(db_session).create(
        NewDoctor.create(**TestData.VALID_DOCTOR)
    )
    patient = await PatientRepository(db_session).create(
        NewPatient.create(**TestData.VALID_PATIENT)
    )
    pharmacist = await PharmacistRepository(db_session).create(
        NewPharmacist.create(**TestData.VALID_PHARMACIST)
    )
    drug_repo = DrugRepository(db_session)
    drugs = [
        await drug_repo.create(
            NewDrug.create(f"Drug {i}", DrugContentType.SOLID_PILLS, pills_count=10, mg_per_pill=100)
        )
        for i in range(3)
    ]
    return {"doctor": doctor, "patient": patient, "pharmacist": pharmacist, "drugs": drugs}


def _new_prescription(seeded, items, prescription_type=PrescriptionType.REGULAR):
    prescription = NewPrescription.create(
        seeded["doctor"].id, seeded["patient"].id, prescription_type=prescription_type
    )
    for drug_id, quantity in items:
        prescription.add_drug(drug_id, quantity)
    prescription.validate()
    return prescription


async def _count(db_session, model) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.integration
@pytest.mark.repository
class TestCreatePrescription:
    async def test_round_trip(self, db_session, seeded):
        d1, d2 = seeded["drugs"][0].id, seeded["drugs"][1].id
        repo = PrescriptionRepository(db_session)
        new_prescription = _new_prescription(seeded, [(d1, 2), (d2, 3)])

        created = await repo.create(new_prescription)
        fetched = await repo.get_by_id(new_prescription.id)

        for prescription in (created, fetched):
            assert prescription.id == new_prescription.id
            assert prescription.doctor_id == seeded["doctor"].id
            assert prescription.patient_id == seeded["patient"].id
            assert prescription.code == new_prescription.code
            assert prescription.prescription_type is PrescriptionType.REGULAR
            assert prescription.fill is None
            assert {(d.drug_id, d.quantity) for d in prescription.prescribed_drugs} == {
                (d1, 2),
                (d2, 3),
            }
        assert fetched.end_date == new_prescription.end_date
        assert fetched.doctor.name == seeded["doctor"].name
        assert fetched.doctor.license_number == seeded["doctor"].license_number
        assert fetched.doctor.personal_id == seeded["doctor"].personal_id
        assert fetched.patient.id == seeded["patient"].id
        assert fetched.patient.name == seeded["patient"].name
        assert fetched.patient.personal_id == seeded["patient"].personal_id

    async def test_drugs_read_back_in_written_order(self, db_session, seeded):
        drug_repo = DrugRepository(db_session)
        extra = [
            await drug_repo.create(
                NewDrug.create(f"Extra {i}", DrugContentType.BOTTLE_OF_LIQUID, volume_ml=100)
            )
            for i in range(2)
        ]
        drug_ids = [
            extra[1].id,
            seeded["drugs"][2].id,
            extra[0].id,
            seeded["drugs"][0].id,
            seeded["drugs"][1].id,
        ]
        repo = PrescriptionRepository(db_session)
        new_prescription = _new_prescription(seeded, [(d, 1) for d in drug_ids])

        created = await repo.create(new_prescription)
        [listed] = await repo.list(10, 0)

        assert [d.drug_id for d in created.prescribed_drugs] == drug_ids
        assert [d.drug_id for d in listed.prescribed_drugs] == drug_ids

    async def test_unknown_drug_leaves_nothing_behind(self, db_session, seeded):
        repo = PrescriptionRepository(db_session)
        missing_drug_id = uuid4()
        new_prescription = _new_prescription(
            seeded, [(seeded["drugs"][0].id, 1), (missing_drug_id, 1)]
        )

        with pytest.raises(NotFoundError) as exc_info:
            await repo.create(new_prescription)

        assert exc_info.value.entity == "Drug"
        assert exc_info.value.entity_id == missing_drug_id

        assert await _count(db_session, DbPrescription) == 0
        assert await _count(db_session, DbPrescribedDrug) == 0
        with pytest.raises(NotFoundError):
            await repo.get_by_id(new_prescription.id)

    async def test_unknown_patient(self, db_session, seeded):
        patient_id = uuid4()
        prescription = NewPrescription.create(seeded["doctor"].id, patient_id)
        prescription.add_drug(seeded["drugs"][0].id, 1)

        with pytest.raises(NotFoundError) as exc_info:
            await PrescriptionRepository(db_session).create(prescription)

        assert exc_info.value.entity == "Patient"
        assert exc_info.value.entity_id == patient_id

    async def test_unknown_doctor(self, db_session, seeded):
        doctor_id = uuid4()
        prescription = NewPrescription.create(doctor_id, seeded["patient"].id)
        prescription.add_drug(seeded["drugs"][0].id, 1)

        with pytest.raises(NotFoundError) as exc_info:
            await PrescriptionRepository(db_session).create(prescription)

        assert exc_info.value.entity == "Doctor"
        assert exc_info.value.entity_id == doctor_id

    async def test_missing_prescription(self, db_session):
        with pytest.raises(NotFoundError):
            await PrescriptionRepository(db_session).get_by_id(uuid4())


@pytest.mark.integration
@pytest.mark.repository
class TestListPrescriptions:
    async def test_pages_count_prescriptions_not_rows(self, db_session, seeded):
        repo = PrescriptionRepository(db_session)
        drug_ids = [d.id for d in seeded["drugs"]]
        created = []
        for count in (3, 1, 2, 3):
            created.append(
                await repo.create(
                    _new_prescription(seeded, [(d, 1) for d in drug_ids[:count]])
                )
            )

        pages = [await repo.list(2, offset) for offset in (0, 2, 4)]

        assert [len(page) for page in pages] == [2, 2, 0]
        assert [p.id for page in pages for p in page] == [p.id for p in created]
        assert [len(p.prescribed_drugs) for p in pages[0] + pages[1]] == [3, 1, 2, 3]


@pytest.mark.integration
@pytest.mark.repository
class TestFillPrescription:
    async def test_fill_visible_on_reads(self, db_session, seeded):
        repo = PrescriptionRepository(db_session)
        prescription = await repo.create(
            _new_prescription(seeded, [(seeded["drugs"][0].id, 1), (seeded["drugs"][1].id, 1)])
        )

        fill = await repo.fill(prescription.fill_with(seeded["pharmacist"].id))
        fetched = await repo.get_by_id(prescription.id)

        assert fill.prescription_id == prescription.id
        assert fetched.is_filled
        assert fetched.fill.id == fill.id
        assert fetched.fill.pharmacist_id == seeded["pharmacist"].id
        assert len(fetched.prescribed_drugs) == 2

    async def test_second_fill_conflicts(self, db_session, seeded):
        repo = PrescriptionRepository(db_session)
        prescription = await repo.create(_new_prescription(seeded, [(seeded["drugs"][0].id, 1)]))
        await repo.fill(prescription.fill_with(seeded["pharmacist"].id))

        # Bypass the aggregate check to hit the unique constraint
        with pytest.raises(PrescriptionAlreadyFilledError):
            await repo.fill(
                NewPrescriptionFill(
                    id=uuid4(),
                    prescription_id=prescription.id,
                    pharmacist_id=seeded["pharmacist"].id,
                )
            )

    async def test_fill_of_missing_prescription(self, db_session, seeded):
        prescription_id = uuid4()
        with pytest.raises(NotFoundError) as exc_info:
            await PrescriptionRepository(db_session).fill(
                NewPrescriptionFill(
                    id=uuid4(),
                    prescription_id=prescription_id,
                    pharmacist_id=seeded["pharmacist"].id,
                )
            )

        assert exc_info.value.entity == "Prescription"
        assert exc_info.value.entity_id == prescription_id

    async def test_fill_by_unknown_pharmacist(self, db_session, seeded):
        repo = PrescriptionRepository(db_session)
        prescription = await repo.create(_new_prescription(seeded, [(seeded["drugs"][0].id, 1)]))
        pharmacist_id = uuid4()

        with pytest.raises(NotFoundError) as exc_info:
            await repo.fill(prescription.fill_with(pharmacist_id))

        assert exc_info.value.entity == "Pharmacist"
        assert exc_info.value.entity_id == pharmacist_id
        assert not (await repo.get_by_id(prescription.id)).is_filled


@pytest.mark.integration
@pytest.mark.services
class TestPrescriptionServiceWithDatabase:
    async def test_issue_and_fill(self, db_session, seeded):
        service = PrescriptionService(PrescriptionRepository(db_session))
        drug_id = seeded["drugs"][2].id

        prescription = await service.create_prescription(
            seeded["doctor"].id,
            seeded["patient"].id,
            [(drug_id, 4)],
            prescription_type=PrescriptionType.FOR_CHRONIC_DISEASE_DRUGS,
        )
        await service.fill_prescription(prescription.id, seeded["pharmacist"].id)

        with pytest.raises(PrescriptionAlreadyFilledError):
            await service.fill_prescription(prescription.id, seeded["pharmacist"].id)
        with pytest.raises(NotFoundError):
            await service.fill_prescription(uuid4(), seeded["pharmacist"].id)

        [listed] = await service.get_prescriptions_with_pagination(0, 10)
        assert listed.is_filled
        assert listed.prescription_type is PrescriptionType.FOR_CHRONIC_DISEASE_DRUGS

    async def test_fill_by_unknown_pharmacist_names_the_pharmacist(self, db_session, seeded):
        service = PrescriptionService(PrescriptionRepository(db_session))
        prescription = await service.create_prescription(
            seeded["doctor"].id, seeded["patient"].id, [(seeded["drugs"][0].id, 1)]
        )
        pharmacist_id = uuid4()

        with pytest.raises(NotFoundError) as exc_info:
            await service.fill_prescription(prescription.id, pharmacist_id)

        assert exc_info.value.entity == "Pharmacist"
        assert exc_info.value.entity_id == pharmacist_id
