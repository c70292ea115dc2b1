"""Practitioner <-> FHIR Practitioner mapping."""

from __future__ import annotations

from typing import Any

from ..schemas import PractitionerRecord
from .elements import (
    MEDICAL_COUNCIL_SYSTEM,
    contact_point,
    extension,
    first,
    gender_code,
    human_name,
    put,
    read_date,
    read_extension,
    read_gender,
    read_name,
    read_telecom,
    read_text,
    reference,
    split_reference,
    telecom,
)

NAME_PREFIX = "Dr."


class PractitionerCodec:
    """Maps PractitionerRecord to and from a FHIR R4 Practitioner resource.

    Qualifications and the registration number share ``qualification[0]``.
    Specialization, department, experience and the organization link are
    extensions.
    """

    resource_type = "Practitioner"

    def encode(self, record: PractitionerRecord) -> dict[str, Any]:
        practitioner: dict[str, Any] = {"resourceType": self.resource_type}
        put(practitioner, "id", record.id)

        practitioner["name"] = [
            human_name(record.first_name, record.last_name, record.full_name, prefix=NAME_PREFIX)
        ]
        put(practitioner, "gender", gender_code(record.gender))
        if record.date_of_birth is not None:
            practitioner["birthDate"] = record.date_of_birth.isoformat()

        put(
            practitioner,
            "telecom",
            telecom(
                contact_point("phone", record.phone),
                contact_point("email", record.email),
            ),
        )

        if record.qualifications or record.registration_number:
            qualification: dict[str, Any] = {}
            if record.qualifications:
                qualification["code"] = {"text": record.qualifications}
            if record.registration_number:
                qualification["identifier"] = [
                    {"system": MEDICAL_COUNCIL_SYSTEM, "value": record.registration_number}
                ]
            practitioner["qualification"] = [qualification]

        practitioner["active"] = record.active

        organization = None
        if record.organization_id:
            organization = extension(
                "organization",
                reference("Organization", record.organization_id),
                value_type="Reference",
            )
        put(
            practitioner,
            "extension",
            [
                ext
                for ext in (
                    extension("specialization", record.specialization),
                    extension("department", record.department),
                    extension("years-experience", record.years_of_experience, value_type="Integer"),
                    organization,
                )
                if ext is not None
            ],
        )

        return practitioner

    def decode(self, resource: dict[str, Any]) -> PractitionerRecord:
        first_name, last_name = read_name(resource)
        qualification = first(resource, "qualification") or {}
        identifier = first(qualification, "identifier") or {}
        org_ref = read_extension(resource, "organization", value_type="Reference") or {}
        _, organization_id = split_reference(org_ref.get("reference"))

        return PractitionerRecord(
            id=resource.get("id"),
            first_name=first_name,
            last_name=last_name,
            gender=read_gender(resource),
            date_of_birth=read_date(resource.get("birthDate")),
            specialization=read_extension(resource, "specialization"),
            registration_number=identifier.get("value"),
            phone=read_telecom(resource, "phone"),
            email=read_telecom(resource, "email"),
            qualifications=read_text(qualification.get("code")),
            years_of_experience=read_extension(resource, "years-experience", value_type="Integer"),
            department=read_extension(resource, "department"),
            organization_id=organization_id,
            active=resource.get("active", True),
        )
