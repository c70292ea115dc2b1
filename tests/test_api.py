"""Tests for the JSON API."""

import json
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from carefhir.api.main import create_app
from carefhir.config import get_config
from carefhir.errors import InvalidFilterError, UpstreamError
from carefhir.services import build_services, get_services

from factories import make_organization, make_patient, make_practitioner


class DownStore:
    """Store standing in for an unreachable FHIR server."""

    async def create(self, resource):
        raise UpstreamError("FHIR server unreachable: ConnectError")

    async def read(self, resource_type, resource_id):
        raise UpstreamError("FHIR server unreachable: ConnectError")

    async def update(self, resource):
        raise UpstreamError("FHIR server unreachable: ConnectError")

    async def delete(self, resource_type, resource_id):
        raise UpstreamError("FHIR server unreachable: ConnectError")

    async def search(self, resource_type, params=None):
        raise UpstreamError("FHIR server unreachable: ConnectError")


def _client_for(config, services) -> TestClient:
    app = create_app(config)
    app.dependency_overrides[get_services] = lambda: services
    app.dependency_overrides[get_config] = lambda: config
    return TestClient(app)


@pytest.fixture
def client(config, services):
    return _client_for(config, services)


def _body(record) -> dict:
    return record.model_dump(mode="json", exclude_none=True)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "store": "local", "version": "0.1.0"}


class TestPatientEndpoints:
    def test_crud(self, client):
        created = client.post("/api/patients", json=_body(make_patient()))
        assert created.status_code == 201
        patient = created.json()
        assert patient["full_name"] == "Asha Rao"
        assert patient["age"] >= 30

        fetched = client.get(f"/api/patients/{patient['id']}")
        assert fetched.status_code == 200
        assert fetched.json() == patient

        updated = client.put(f"/api/patients/{patient['id']}", json={**patient, "city": "Mumbai"})
        assert updated.status_code == 200
        assert updated.json()["city"] == "Mumbai"

        deleted = client.delete(f"/api/patients/{patient['id']}")
        assert deleted.status_code == 204
        assert client.get(f"/api/patients/{patient['id']}").status_code == 404

    def test_list_filters(self, client):
        client.post("/api/patients", json=_body(make_patient()))
        client.post("/api/patients", json=_body(make_patient(first_name="Kiran", phone="9123456780")))

        by_name = client.get("/api/patients", params={"name": "kiran"}).json()
        by_phone = client.get("/api/patients", params={"phone": "9876543210"}).json()
        everyone = client.get("/api/patients").json()

        assert [p["first_name"] for p in by_name] == ["Kiran"]
        assert [p["first_name"] for p in by_phone] == ["Asha"]
        assert len(everyone) == 2

    def test_not_found(self, client):
        response = client.get("/api/patients/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Patient not found with ID: missing"}

    def test_validation_failure(self, client):
        response = client.post("/api/patients", json=_body(make_patient(phone="123")))

        assert response.status_code == 422
        assert response.json()["errors"] == ["phone: phone number must be 10 digits"]

    def test_partial_birth_date_lists(self, client, config):
        folder = Path(config.fhir_data_dir) / "Patient"
        folder.mkdir(parents=True, exist_ok=True)
        (folder / "P-old.json").write_text(
            json.dumps({"resourceType": "Patient", "id": "P-old", "birthDate": "1990-05"}),
            encoding="utf-8",
        )

        listed = client.get("/api/patients")
        fetched = client.get("/api/patients/P-old")

        assert listed.status_code == 200
        assert [p["date_of_birth"] for p in listed.json()] == ["1990-05-01"]
        assert fetched.json()["date_of_birth"] == "1990-05-01"

    def test_update_missing(self, client):
        response = client.put("/api/patients/missing", json=_body(make_patient()))
        assert response.status_code == 404


class TestOtherEntityEndpoints:
    def test_practitioner_specialization_filter(self, client):
        client.post("/api/practitioners", json=_body(make_practitioner()))

        found = client.get("/api/practitioners", params={"specialization": "cardio"}).json()
        none = client.get("/api/practitioners", params={"specialization": "derma"}).json()

        assert [p["full_name"] for p in found] == ["Dr. Vikram Mehta"]
        assert none == []

    def test_organization_type_filter(self, client):
        client.post("/api/organizations", json=_body(make_organization()))
        client.post("/api/organizations", json=_body(make_organization(name="Care Clinic", type="Clinic")))

        found = client.get("/api/organizations", params={"type": "hospital"}).json()

        assert [o["name"] for o in found] == ["City Hospital"]


class TestAppointmentEndpoints:
    @pytest.fixture
    def booked(self, client, future_day):
        patient = client.post("/api/patients", json=_body(make_patient())).json()
        practitioner = client.post("/api/practitioners", json=_body(make_practitioner())).json()
        response = client.post(
            "/api/appointments",
            json={
                "patient_id": patient["id"],
                "practitioner_id": practitioner["id"],
                "appointment_date": future_day.isoformat(),
                "appointment_time": "10:30",
                "appointment_type": "Consultation",
                "status": "booked",
            },
        )
        assert response.status_code == 201
        return response.json()

    def test_create_enriches(self, booked, future_day):
        assert booked["patient_name"] == "Asha Rao"
        assert booked["practitioner_name"] == "Dr. Vikram Mehta"
        assert booked["appointment_datetime"] == f"{future_day.isoformat()} 10:30"

    def test_list_by_date(self, client, booked, future_day):
        same_day = client.get("/api/appointments", params={"date": future_day.isoformat()}).json()
        next_day = client.get(
            "/api/appointments", params={"date": (future_day + timedelta(days=1)).isoformat()}
        ).json()

        assert [a["id"] for a in same_day] == [booked["id"]]
        assert next_day == []

    def test_list_by_patient(self, client, booked):
        found = client.get("/api/appointments", params={"patient_id": booked["patient_id"]}).json()
        assert [a["id"] for a in found] == [booked["id"]]

    def test_cancel(self, client, booked):
        response = client.post(f"/api/appointments/{booked['id']}/cancel", json={"reason": "Travel"})

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancellation_reason"] == "Travel"

        again = client.post(f"/api/appointments/{booked['id']}/cancel")
        assert again.status_code == 200
        assert again.json()["status"] == "cancelled"

    def test_cancel_missing(self, client):
        assert client.post("/api/appointments/missing/cancel").status_code == 404


class TestAuditEndpoints:
    def test_list_and_get(self, client):
        patient = client.post("/api/patients", json=_body(make_patient())).json()
        client.delete(f"/api/patients/{patient['id']}")

        events = client.get("/api/audit").json()
        deletes = client.get("/api/audit", params={"action": "delete"}).json()

        assert [e["action"] for e in events] == ["delete", "create"]
        assert [e["resource_id"] for e in deletes] == [patient["id"]]

        event = client.get(f"/api/audit/{events[0]['id']}")
        assert event.status_code == 200
        assert event.json()["description"] == "Patient deleted"


def test_upstream_failure_is_bad_gateway(config):
    client = _client_for(config, build_services(config, store=DownStore()))

    response = client.get("/api/patients")

    assert response.status_code == 502
    assert "unreachable" in response.json()["detail"]


def test_only_filter_errors_are_bad_requests(config):
    app = create_app(config)

    @app.get("/bad-filter")
    async def bad_filter():
        raise InvalidFilterError("Unknown filter(s) for Patient: colour")

    @app.get("/broken")
    async def broken():
        raise ValueError("not a client mistake")

    client = TestClient(app, raise_server_exceptions=False)

    rejected = client.get("/bad-filter")
    assert rejected.status_code == 400
    assert rejected.json() == {"detail": "Unknown filter(s) for Patient: colour"}
    assert client.get("/broken").status_code == 500
