"""Patient <-> FHIR Patient mapping."""

from __future__ import annotations

from typing import Any

from ..schemas import PatientRecord
from .elements import (
    MARITAL_STATUS_SYSTEM,
    address,
    coded,
    contact_point,
    extension,
    first,
    gender_code,
    human_name,
    put,
    read_address,
    read_coded,
    read_date,
    read_extension,
    read_gender,
    read_name,
    read_telecom,
    read_text,
    telecom,
)


class PatientCodec:
    """Maps PatientRecord to and from a FHIR R4 Patient resource.

    Blood group and the two national IDs have no Patient slot and are stored
    as extensions. The emergency contact becomes ``contact[0]``.
    """

    resource_type = "Patient"

    def __init__(self, default_country: str = "IN"):
        self._country = default_country

    def encode(self, record: PatientRecord) -> dict[str, Any]:
        patient: dict[str, Any] = {"resourceType": self.resource_type}
        put(patient, "id", record.id)

        patient["name"] = [human_name(record.first_name, record.last_name, record.full_name)]
        put(patient, "gender", gender_code(record.gender))
        if record.date_of_birth is not None:
            patient["birthDate"] = record.date_of_birth.isoformat()

        put(
            patient,
            "telecom",
            telecom(
                contact_point("phone", record.phone, use="mobile"),
                contact_point("email", record.email),
            ),
        )

        addr = address(
            record.address, record.city, record.state, record.postal_code, self._country
        )
        if addr:
            patient["address"] = [addr]

        if record.marital_status:
            patient["maritalStatus"] = coded(
                MARITAL_STATUS_SYSTEM,
                record.marital_status.upper(),
                record.marital_status,
            )

        patient["active"] = record.active

        put(
            patient,
            "extension",
            [
                ext
                for ext in (
                    extension("blood-group", record.blood_group),
                    extension("pan-card", record.pan_card),
                    extension("aadhaar", record.aadhaar_number),
                )
                if ext is not None
            ],
        )

        contact = self._emergency_contact(record)
        if contact:
            patient["contact"] = [contact]

        return patient

    @staticmethod
    def _emergency_contact(record: PatientRecord) -> dict[str, Any] | None:
        if not any(
            (
                record.emergency_contact_name,
                record.emergency_contact_phone,
                record.emergency_contact_relation,
            )
        ):
            return None
        contact: dict[str, Any] = {}
        if record.emergency_contact_name:
            contact["name"] = {"text": record.emergency_contact_name}
        put(contact, "telecom", telecom(contact_point("phone", record.emergency_contact_phone)))
        if record.emergency_contact_relation:
            contact["relationship"] = [{"text": record.emergency_contact_relation}]
        return contact

    def decode(self, resource: dict[str, Any]) -> PatientRecord:
        first_name, last_name = read_name(resource)
        contact = first(resource, "contact") or {}

        return PatientRecord(
            id=resource.get("id"),
            first_name=first_name,
            last_name=last_name,
            date_of_birth=read_date(resource.get("birthDate")),
            gender=read_gender(resource),
            phone=read_telecom(resource, "phone"),
            email=read_telecom(resource, "email"),
            **read_address(resource),
            marital_status=read_coded(resource.get("maritalStatus")),
            blood_group=read_extension(resource, "blood-group"),
            pan_card=read_extension(resource, "pan-card"),
            aadhaar_number=read_extension(resource, "aadhaar"),
            emergency_contact_name=read_text(contact.get("name")),
            emergency_contact_phone=read_telecom(contact, "phone"),
            emergency_contact_relation=read_text(first(contact, "relationship")),
            active=resource.get("active", True),
        )
