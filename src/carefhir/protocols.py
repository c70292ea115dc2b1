"""Protocol definitions for carefhir interfaces."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

RecordT = TypeVar("RecordT")

# FHIR search parameters; a list value repeats the parameter (date=ge..&date=lt..)
SearchParams = dict[str, str | list[str]]


@runtime_checkable
class ResourceStore(Protocol):
    """Protocol defining the interface for FHIR resource stores.

    Both the remote FhirClient and the local FhirJsonStore implement this
    interface, allowing them to be used interchangeably by the services.
    """

    async def create(self, resource: dict[str, Any]) -> dict[str, Any]:
        """Create a resource. Returns it with the store-assigned ``id``."""
        ...

    async def read(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        """Read one resource.

        Raises:
            ResourceNotFoundError: If no such resource exists.
        """
        ...

    async def update(self, resource: dict[str, Any]) -> dict[str, Any]:
        """Replace an existing resource (``resource["id"]`` is required)."""
        ...

    async def delete(self, resource_type: str, resource_id: str) -> None:
        """Delete a resource by type and id."""
        ...

    async def search(
        self,
        resource_type: str,
        params: SearchParams | None = None,
    ) -> list[dict[str, Any]]:
        """Search resources of one type. Returns matching resources in order."""
        ...


class ResourceCodec(Protocol[RecordT]):
    """Bidirectional mapping between a flat record and a FHIR resource."""

    resource_type: str

    def encode(self, record: RecordT) -> dict[str, Any]:
        """Build the FHIR resource dict for *record*."""
        ...

    def decode(self, resource: dict[str, Any]) -> RecordT:
        """Build a flat record from a FHIR resource dict."""
        ...
