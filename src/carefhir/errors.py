"""Error types that cross the service boundary."""

from __future__ import annotations


class CareFhirError(Exception):
    """Base class for carefhir errors."""


class ResourceNotFoundError(CareFhirError):
    """Raised when a requested FHIR resource does not exist in the store."""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found with ID: {resource_id}")


class ValidationFailedError(CareFhirError):
    """Raised when a flat record is rejected before any store call."""

    def __init__(self, resource_type: str, errors: list[str]):
        self.resource_type = resource_type
        self.errors = errors
        super().__init__(f"Invalid {resource_type}: " + "; ".join(errors))


class UpstreamError(CareFhirError):
    """Raised when the FHIR server is unreachable or rejects a request."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class InvalidFilterError(CareFhirError):
    """Raised when a listing filter names an unknown field or has an unusable value."""
