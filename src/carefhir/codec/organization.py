"""Organization <-> FHIR Organization mapping."""

from __future__ import annotations

from typing import Any

from ..schemas import OrganizationRecord
from .elements import (
    ORGANIZATION_REGISTRATION_SYSTEM,
    ORGANIZATION_TYPE_SYSTEM,
    address,
    coded,
    contact_point,
    extension,
    first,
    put,
    read_address,
    read_coded,
    read_extension,
    read_telecom,
    telecom,
)


class OrganizationCodec:
    """Maps OrganizationRecord to and from a FHIR R4 Organization resource."""

    resource_type = "Organization"

    def __init__(self, default_country: str = "IN"):
        self._country = default_country

    def encode(self, record: OrganizationRecord) -> dict[str, Any]:
        organization: dict[str, Any] = {"resourceType": self.resource_type}
        put(organization, "id", record.id)
        put(organization, "name", record.name)

        if record.type:
            organization["type"] = [
                coded(
                    ORGANIZATION_TYPE_SYSTEM,
                    record.type.lower().replace(" ", "-"),
                    record.type,
                )
            ]

        put(
            organization,
            "telecom",
            telecom(
                contact_point("phone", record.phone),
                contact_point("email", record.email),
            ),
        )

        addr = address(
            record.address, record.city, record.state, record.postal_code, self._country
        )
        if addr:
            organization["address"] = [addr]

        organization["active"] = record.active

        if record.registration_number:
            organization["identifier"] = [
                {
                    "system": ORGANIZATION_REGISTRATION_SYSTEM,
                    "value": record.registration_number,
                }
            ]

        put(
            organization,
            "extension",
            [
                ext
                for ext in (
                    extension("website", record.website),
                    extension("description", record.description),
                )
                if ext is not None
            ],
        )

        return organization

    def decode(self, resource: dict[str, Any]) -> OrganizationRecord:
        identifier = first(resource, "identifier") or {}

        return OrganizationRecord(
            id=resource.get("id"),
            name=resource.get("name"),
            type=read_coded(first(resource, "type")),
            phone=read_telecom(resource, "phone"),
            email=read_telecom(resource, "email"),
            **read_address(resource),
            registration_number=identifier.get("value"),
            website=read_extension(resource, "website"),
            active=resource.get("active", True),
            description=read_extension(resource, "description"),
        )
