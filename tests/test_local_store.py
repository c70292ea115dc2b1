"""Tests for the local JSON FHIR store."""

import pytest

from carefhir.errors import ResourceNotFoundError
from carefhir.protocols import ResourceStore
from carefhir.store import FhirJsonStore


def _patient(family: str, given: str, phone: str) -> dict:
    return {
        "resourceType": "Patient",
        "name": [{"family": family, "given": [given], "text": f"{given} {family}"}],
        "telecom": [{"system": "phone", "value": phone}],
    }


def _appointment(start: str, patient: str) -> dict:
    return {
        "resourceType": "Appointment",
        "status": "booked",
        "start": start,
        "participant": [{"actor": {"reference": f"Patient/{patient}"}}],
    }


@pytest.fixture
def local_store(tmp_path) -> FhirJsonStore:
    return FhirJsonStore(tmp_path)


def test_implements_protocol(local_store):
    assert isinstance(local_store, ResourceStore)


class TestCrud:
    @pytest.mark.asyncio
    async def test_create_assigns_id_and_persists(self, local_store, tmp_path):
        created = await local_store.create({**_patient("Rao", "Asha", "9876543210"), "id": "ignored"})

        assert created["id"] != "ignored"
        assert (tmp_path / "Patient" / f"{created['id']}.json").exists()
        assert "lastUpdated" in created["meta"]
        assert await local_store.read("Patient", created["id"]) == created

    @pytest.mark.asyncio
    async def test_read_missing_raises(self, local_store):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await local_store.read("Patient", "nope")
        assert str(exc_info.value) == "Patient not found with ID: nope"

    @pytest.mark.asyncio
    async def test_update_replaces(self, local_store):
        created = await local_store.create(_patient("Rao", "Asha", "9876543210"))
        created["gender"] = "female"

        updated = await local_store.update(created)

        assert (await local_store.read("Patient", created["id"]))["gender"] == "female"
        assert updated["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, local_store):
        with pytest.raises(ResourceNotFoundError):
            await local_store.update({**_patient("Rao", "Asha", "1"), "id": "nope"})

    @pytest.mark.asyncio
    async def test_delete(self, local_store):
        created = await local_store.create(_patient("Rao", "Asha", "9876543210"))

        await local_store.delete("Patient", created["id"])

        with pytest.raises(ResourceNotFoundError):
            await local_store.read("Patient", created["id"])
        with pytest.raises(ResourceNotFoundError):
            await local_store.delete("Patient", created["id"])


class TestSearch:
    @pytest.mark.asyncio
    async def test_empty_kind(self, local_store):
        assert await local_store.search("Patient") == []

    @pytest.mark.asyncio
    async def test_name_and_telecom(self, local_store):
        await local_store.create(_patient("Rao", "Asha", "9876543210"))
        await local_store.create(_patient("Iyer", "Kiran", "9123456780"))

        by_name = await local_store.search("Patient", {"name": "asha"})
        by_phone = await local_store.search("Patient", {"telecom": "9123456780"})

        assert [p["name"][0]["family"] for p in by_name] == ["Rao"]
        assert [p["name"][0]["family"] for p in by_phone] == ["Iyer"]

    @pytest.mark.asyncio
    async def test_plain_string_name(self, local_store):
        await local_store.create({"resourceType": "Organization", "name": "City Hospital"})
        await local_store.create({"resourceType": "Organization", "name": "Care Clinic"})

        found = await local_store.search("Organization", {"name": "city"})

        assert [o["name"] for o in found] == ["City Hospital"]

    @pytest.mark.asyncio
    async def test_participant_reference(self, local_store):
        await local_store.create(_appointment("2030-01-15T10:30:00+05:30", "P1"))
        await local_store.create(_appointment("2030-01-15T11:30:00+05:30", "P2"))

        found = await local_store.search("Appointment", {"patient": "Patient/P2"})

        assert [a["start"] for a in found] == ["2030-01-15T11:30:00+05:30"]

    @pytest.mark.asyncio
    async def test_date_range_is_half_open(self, local_store):
        await local_store.create(_appointment("2030-01-15T00:00:00+05:30", "P1"))
        await local_store.create(_appointment("2030-01-15T23:59:00+05:30", "P1"))
        await local_store.create(_appointment("2030-01-16T00:00:00+05:30", "P1"))

        found = await local_store.search(
            "Appointment",
            {"date": ["ge2030-01-15T00:00:00+05:30", "lt2030-01-16T00:00:00+05:30"]},
        )

        assert sorted(a["start"] for a in found) == [
            "2030-01-15T00:00:00+05:30",
            "2030-01-15T23:59:00+05:30",
        ]

    @pytest.mark.asyncio
    async def test_sort_and_count(self, local_store):
        for day in ("2030-01-01", "2030-01-03", "2030-01-02"):
            await local_store.create(
                {
                    "resourceType": "AuditEvent",
                    "recorded": f"{day}T00:00:00+00:00",
                    "subtype": [{"code": "create"}],
                }
            )

        found = await local_store.search("AuditEvent", {"_sort": "-date", "_count": "2"})

        assert [e["recorded"][:10] for e in found] == ["2030-01-03", "2030-01-02"]

    @pytest.mark.asyncio
    async def test_subtype(self, local_store):
        await local_store.create({"resourceType": "AuditEvent", "subtype": [{"code": "create"}]})
        await local_store.create({"resourceType": "AuditEvent", "subtype": [{"code": "delete"}]})

        found = await local_store.search("AuditEvent", {"subtype": "delete"})

        assert [e["subtype"][0]["code"] for e in found] == ["delete"]
