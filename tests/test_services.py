"""Tests for the entity services over the local JSON store."""

from datetime import date, time, timedelta

import pytest
import pytest_asyncio

from carefhir.errors import ResourceNotFoundError, UpstreamError, ValidationFailedError
from carefhir.services import build_services

from factories import make_appointment, make_organization, make_patient, make_practitioner


class RecordingStore:
    """Store that records every call and fails them all."""

    def __init__(self):
        self.calls = []

    async def create(self, resource):
        self.calls.append(("create", resource.get("resourceType")))
        raise UpstreamError("FHIR server error 503: unavailable", 503)

    async def read(self, resource_type, resource_id):
        self.calls.append(("read", resource_type))
        raise UpstreamError("FHIR server error 503: unavailable", 503)

    async def update(self, resource):
        self.calls.append(("update", resource.get("resourceType")))
        raise UpstreamError("FHIR server error 503: unavailable", 503)

    async def delete(self, resource_type, resource_id):
        self.calls.append(("delete", resource_type))
        raise UpstreamError("FHIR server error 503: unavailable", 503)

    async def search(self, resource_type, params=None):
        self.calls.append(("search", resource_type))
        raise UpstreamError("FHIR server error 503: unavailable", 503)


async def _audit_descriptions(services) -> list[str]:
    return [e.description for e in await services.audit.get_all()]


class TestPatientService:
    @pytest.mark.asyncio
    async def test_create_and_find(self, services):
        created = await services.patients.create(make_patient(id="client-chosen"))

        assert created.id and created.id != "client-chosen"
        assert created.full_name == "Asha Rao"
        assert created.age is not None and created.age >= 30

        assert (await services.patients.get_by_id(created.id)) == created
        assert [p.id for p in await services.patients.search_by_name("asha")] == [created.id]
        assert [p.id for p in await services.patients.search_by_phone("9876543210")] == [created.id]
        assert await services.patients.search_by_phone("0000000000") == []

    @pytest.mark.asyncio
    async def test_create_is_audited(self, services):
        created = await services.patients.create(make_patient())

        events = await services.audit.search_by_resource_type("Patient")

        assert len(events) == 1
        assert events[0].action == "create"
        assert events[0].resource_id == created.id
        assert events[0].description == "Patient created successfully"

    @pytest.mark.asyncio
    async def test_list_all(self, services):
        await services.patients.create(make_patient())
        await services.patients.create(make_patient(first_name="Kiran", phone="9123456780"))

        names = sorted(p.first_name for p in await services.patients.list_all())

        assert names == ["Asha", "Kiran"]

    @pytest.mark.asyncio
    async def test_find_uses_most_specific_filter(self, services):
        asha = await services.patients.create(make_patient())
        await services.patients.create(make_patient(first_name="Kiran", phone="9123456780"))

        found = await services.patients.find(phone="9876543210", name="Kiran")

        assert [p.id for p in found] == [asha.id]

    @pytest.mark.asyncio
    async def test_update(self, services):
        created = await services.patients.create(make_patient())

        updated = await services.patients.update(
            created.id, created.model_copy(update={"id": "ignored", "phone": "9000000000"})
        )

        assert updated.id == created.id
        assert updated.phone == "9000000000"
        assert (await services.patients.get_by_id(created.id)).phone == "9000000000"
        assert "Patient updated successfully" in await _audit_descriptions(services)

    @pytest.mark.asyncio
    async def test_update_unknown_id_is_not_found(self, services, store):
        with pytest.raises(ResourceNotFoundError):
            await services.patients.update("missing", make_patient())

        assert await store.search("Patient") == []

    @pytest.mark.asyncio
    async def test_delete(self, services):
        created = await services.patients.create(make_patient())

        await services.patients.delete(created.id)

        with pytest.raises(ResourceNotFoundError):
            await services.patients.get_by_id(created.id)
        assert "Patient deleted" in await _audit_descriptions(services)

    @pytest.mark.asyncio
    async def test_delete_unknown_id_is_not_found(self, services):
        with pytest.raises(ResourceNotFoundError):
            await services.patients.delete("missing")

    @pytest.mark.asyncio
    async def test_find_full_name_absorbs_failures(self, services):
        assert await services.patients.find_full_name("missing") is None
        assert await services.patients.find_full_name(None) is None


class TestValidation:
    @pytest.mark.asyncio
    async def test_rejected_before_any_store_call(self, config):
        store = RecordingStore()
        services = build_services(config, store=store)

        with pytest.raises(ValidationFailedError) as exc_info:
            await services.patients.create(make_patient(phone="12345", pan_card="bad"))

        assert store.calls == []
        assert len(exc_info.value.errors) == 2

    @pytest.mark.asyncio
    async def test_update_rejected_before_existence_check(self, config):
        store = RecordingStore()
        services = build_services(config, store=store)

        with pytest.raises(ValidationFailedError):
            await services.organizations.update("O1", make_organization(type="Spaceport"))

        assert store.calls == []

    @pytest.mark.asyncio
    async def test_missing_required_fields_listed(self, services):
        with pytest.raises(ValidationFailedError) as exc_info:
            await services.practitioners.create(make_practitioner(specialization=None, department=""))

        assert "specialization is required" in exc_info.value.errors
        assert "department is required" in exc_info.value.errors

    @pytest.mark.asyncio
    async def test_appointment_in_past_rejected(self, services):
        with pytest.raises(ValidationFailedError, match="future"):
            await services.appointments.create(make_appointment("P1", "D1", date.today()))

    @pytest.mark.asyncio
    async def test_upstream_failure_propagates(self, config):
        services = build_services(config, store=RecordingStore())

        with pytest.raises(UpstreamError) as exc_info:
            await services.patients.get_by_id("P1")

        assert exc_info.value.status_code == 503


class TestPractitionerAndOrganizationSearch:
    @pytest.mark.asyncio
    async def test_search_by_specialization(self, services):
        cardio = await services.practitioners.create(make_practitioner())
        await services.practitioners.create(
            make_practitioner(first_name="Neha", specialization="Neurologist", phone="9111111111")
        )

        found = await services.practitioners.search_by_specialization("cardio")

        assert [p.id for p in found] == [cardio.id]
        assert found[0].full_name == "Dr. Vikram Mehta"

    @pytest.mark.asyncio
    async def test_search_practitioner_by_name(self, services):
        created = await services.practitioners.create(make_practitioner())

        assert [p.id for p in await services.practitioners.search_by_name("mehta")] == [created.id]

    @pytest.mark.asyncio
    async def test_search_by_type(self, services):
        hospital = await services.organizations.create(make_organization())
        await services.organizations.create(make_organization(name="Care Clinic", type="Clinic"))

        found = await services.organizations.search_by_type("hospital")

        assert [o.id for o in found] == [hospital.id]
        assert found[0].name == "City Hospital"

    @pytest.mark.asyncio
    async def test_search_organization_by_name(self, services):
        await services.organizations.create(make_organization())
        clinic = await services.organizations.create(make_organization(name="Care Clinic", type="Clinic"))

        assert [o.id for o in await services.organizations.search_by_name("care")] == [clinic.id]

    @pytest.mark.asyncio
    async def test_practitioner_organization_link(self, services):
        hospital = await services.organizations.create(make_organization())
        created = await services.practitioners.create(make_practitioner(organization_id=hospital.id))

        assert (await services.practitioners.get_by_id(created.id)).organization_id == hospital.id


@pytest_asyncio.fixture
async def people(services):
    patient = await services.patients.create(make_patient())
    practitioner = await services.practitioners.create(make_practitioner())
    return patient, practitioner


class TestAppointmentService:
    @pytest.mark.asyncio
    async def test_create_enriches_names(self, services, people, future_day):
        patient, practitioner = people

        created = await services.appointments.create(
            make_appointment(
                patient.id,
                practitioner.id,
                future_day,
                patient_name="Someone Else",
                practitioner_name="Dr. Nobody",
            )
        )

        assert created.patient_name == "Asha Rao"
        assert created.practitioner_name == "Dr. Vikram Mehta"
        assert created.appointment_date == future_day
        assert created.appointment_time == time(10, 30)

    @pytest.mark.asyncio
    async def test_enrichment_failure_is_not_fatal(self, services, future_day):
        created = await services.appointments.create(
            make_appointment("no-such-patient", "no-such-doctor", future_day, patient_name="Typed In")
        )

        assert created.id
        assert created.patient_id == "no-such-patient"
        assert created.patient_name is None
        assert created.practitioner_name is None

    @pytest.mark.asyncio
    async def test_update_keeps_names_when_lookup_fails(self, services, people, future_day):
        patient, practitioner = people
        created = await services.appointments.create(
            make_appointment(patient.id, practitioner.id, future_day)
        )
        await services.patients.delete(patient.id)

        updated = await services.appointments.update(
            created.id, created.model_copy(update={"comment": "Bring reports"})
        )

        assert updated.comment == "Bring reports"
        assert updated.patient_name == "Asha Rao"
        assert updated.practitioner_name == "Dr. Vikram Mehta"

    @pytest.mark.asyncio
    async def test_update_refreshes_names(self, services, people, future_day):
        patient, practitioner = people
        created = await services.appointments.create(
            make_appointment(patient.id, practitioner.id, future_day)
        )
        await services.patients.update(patient.id, patient.model_copy(update={"last_name": "Kulkarni"}))

        updated = await services.appointments.update(created.id, created)

        assert updated.patient_name == "Asha Kulkarni"

    @pytest.mark.asyncio
    async def test_searches(self, services, people, future_day):
        patient, practitioner = people
        other = await services.patients.create(make_patient(first_name="Kiran", phone="9123456780"))
        first = await services.appointments.create(
            make_appointment(patient.id, practitioner.id, future_day)
        )
        second = await services.appointments.create(
            make_appointment(other.id, practitioner.id, future_day, appointment_time=time(23, 30))
        )
        # midnight of the following day belongs to the next day
        await services.appointments.create(
            make_appointment(
                other.id,
                practitioner.id,
                future_day + timedelta(days=1),
                appointment_time=time(0, 0),
            )
        )

        by_patient = await services.appointments.get_by_patient(patient.id)
        by_practitioner = await services.appointments.get_by_practitioner(practitioner.id)
        by_date = await services.appointments.get_by_date(future_day)

        assert [a.id for a in by_patient] == [first.id]
        assert by_patient[0].patient_name == "Asha Rao"
        assert len(by_practitioner) == 3
        assert sorted(a.id for a in by_date) == sorted([first.id, second.id])

    @pytest.mark.asyncio
    async def test_read_fills_missing_names(self, services, store, people, future_day):
        patient, practitioner = people
        created = await services.appointments.create(
            make_appointment(patient.id, practitioner.id, future_day)
        )
        raw = await store.read("Appointment", created.id)
        for participant in raw["participant"]:
            participant["actor"].pop("display", None)
        await store.update(raw)

        fetched = await services.appointments.get_by_id(created.id)

        assert fetched.patient_name == "Asha Rao"
        assert fetched.practitioner_name == "Dr. Vikram Mehta"

    @pytest.mark.asyncio
    async def test_cancel(self, services, store, people, future_day):
        patient, practitioner = people
        created = await services.appointments.create(
            make_appointment(patient.id, practitioner.id, future_day)
        )

        cancelled = await services.appointments.cancel(created.id, "Travel")

        assert cancelled.status == "cancelled"
        assert cancelled.cancellation_reason == "Travel"
        assert (await store.read("Appointment", created.id))["status"] == "cancelled"
        assert "Appointment cancelled: Travel" in await _audit_descriptions(services)

    @pytest.mark.asyncio
    async def test_cancel_twice_is_allowed(self, services, people, future_day):
        patient, practitioner = people
        created = await services.appointments.create(
            make_appointment(patient.id, practitioner.id, future_day)
        )

        await services.appointments.cancel(created.id, "Travel")
        again = await services.appointments.cancel(created.id)

        assert again.status == "cancelled"
        assert again.cancellation_reason == "Travel"

    @pytest.mark.asyncio
    async def test_cancel_unknown_is_not_found(self, services):
        with pytest.raises(ResourceNotFoundError):
            await services.appointments.cancel("missing", "Travel")


class TestAuditIsBestEffort:
    @pytest.mark.asyncio
    async def test_audit_failure_does_not_fail_mutations(self, config, store):
        services = build_services(config, store=store, audit_store=RecordingStore())

        created = await services.patients.create(make_patient())
        await services.patients.update(created.id, created.model_copy(update={"city": "Mumbai"}))
        await services.patients.delete(created.id)

        assert await store.search("Patient") == []
        assert await store.search("AuditEvent") == []
