"""Flat record <-> FHIR R4 resource codecs.

One codec per resource kind, each providing ``encode(record) -> dict`` and
``decode(resource) -> record``.

Usage:
    from carefhir.codec import PatientCodec

    resource = PatientCodec().encode(record)
"""

from .appointment import AppointmentCodec
from .audit_event import AuditEventCodec
from .organization import OrganizationCodec
from .patient import PatientCodec
from .practitioner import PractitionerCodec

__all__ = [
    "AppointmentCodec",
    "AuditEventCodec",
    "OrganizationCodec",
    "PatientCodec",
    "PractitionerCodec",
]
