"""carefhir - Clinical entity management on a FHIR R4 store."""

from .errors import (
    CareFhirError,
    InvalidFilterError,
    ResourceNotFoundError,
    UpstreamError,
    ValidationFailedError,
)
from .schemas import (
    AppointmentRecord,
    AuditEventRecord,
    OrganizationRecord,
    PatientRecord,
    PractitionerRecord,
)


# Lazy imports so schemas and errors load without the service stack
def __getattr__(name: str):
    if name in ("ServiceContainer", "build_services", "get_services"):
        from . import services
        return getattr(services, name)
    elif name in ("AppConfig", "get_config"):
        from . import config
        return getattr(config, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AppConfig",
    "AppointmentRecord",
    "AuditEventRecord",
    "CareFhirError",
    "InvalidFilterError",
    "OrganizationRecord",
    "PatientRecord",
    "PractitionerRecord",
    "ResourceNotFoundError",
    "ServiceContainer",
    "UpstreamError",
    "ValidationFailedError",
    "build_services",
    "get_config",
    "get_services",
]
