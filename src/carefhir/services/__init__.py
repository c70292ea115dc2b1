"""Entity services and their wiring.

Usage:
    from carefhir.services import build_services

    services = build_services(config)
    patient = await services.patients.create(PatientRecord(...))
"""

from __future__ import annotations

from dataclasses import dataclass

from ..audit import AuditRecorder
from ..codec import (
    AppointmentCodec,
    AuditEventCodec,
    OrganizationCodec,
    PatientCodec,
    PractitionerCodec,
)
from ..config import AppConfig, get_config
from ..protocols import ResourceStore
from ..queries import QueryTranslator
from ..store import create_store
from ..validation import (
    validate_appointment,
    validate_organization,
    validate_patient,
    validate_practitioner,
)
from .appointments import AppointmentService
from .base import EntityService
from .organizations import OrganizationService
from .patients import PatientService
from .practitioners import PractitionerService


@dataclass
class ServiceContainer:
    """One store, one audit trail and the four entity services sharing them."""

    store: ResourceStore
    audit: AuditRecorder
    patients: PatientService
    practitioners: PractitionerService
    organizations: OrganizationService
    appointments: AppointmentService


def build_services(
    config: AppConfig,
    store: ResourceStore | None = None,
    audit_store: ResourceStore | None = None,
) -> ServiceContainer:
    """Wire services from *config*.

    Args:
        config: Application configuration.
        store: Store override; defaults to the backend selected by *config*.
        audit_store: Store for audit events; defaults to *store*.
    """
    store = store or create_store(config)
    tz = config.local_timezone()
    queries = QueryTranslator(tz=tz, audit_page_size=config.audit_page_size)
    audit = AuditRecorder(
        audit_store or store,
        AuditEventCodec(config.audit_agent_name, config.audit_system_name),
        queries,
    )

    patients = PatientService(
        store, PatientCodec(config.default_country), audit, queries, validate_patient
    )
    practitioners = PractitionerService(
        store, PractitionerCodec(), audit, queries, validate_practitioner
    )
    organizations = OrganizationService(
        store, OrganizationCodec(config.default_country), audit, queries, validate_organization
    )
    appointments = AppointmentService(
        store,
        AppointmentCodec(tz),
        audit,
        queries,
        patients=patients,
        practitioners=practitioners,
        validator=validate_appointment,
    )

    return ServiceContainer(
        store=store,
        audit=audit,
        patients=patients,
        practitioners=practitioners,
        organizations=organizations,
        appointments=appointments,
    )


# Global services instance
_services: ServiceContainer | None = None


def get_services() -> ServiceContainer:
    """Get or create the global services instance."""
    global _services
    if _services is None:
        _services = build_services(get_config())
    return _services


__all__ = [
    "AppointmentService",
    "EntityService",
    "OrganizationService",
    "PatientService",
    "PractitionerService",
    "ServiceContainer",
    "build_services",
    "get_services",
]
