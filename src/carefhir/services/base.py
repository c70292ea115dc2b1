"""Shared CRUD orchestration for one FHIR resource kind."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic

from ..audit import AuditRecorder
from ..protocols import RecordT, ResourceCodec, ResourceStore
from ..queries import QueryTranslator

logger = logging.getLogger(__name__)


class EntityService(Generic[RecordT]):
    """Create/read/update/delete/search for one kind of flat record.

    Each operation runs codec, store and audit steps in sequence:
    validate → encode → store call → decode → audit. Subclasses hook into
    :meth:`_before_write` and :meth:`_after_read` to enrich records.

    Args:
        store: FHIR resource store.
        codec: Flat record <-> FHIR resource mapping for this kind.
        audit: Best-effort audit trail.
        queries: Filter-to-search translation.
        validator: Write-side constraint check, raising ValidationFailedError.
    """

    def __init__(
        self,
        store: ResourceStore,
        codec: ResourceCodec[RecordT],
        audit: AuditRecorder,
        queries: QueryTranslator,
        validator: Callable[[RecordT], None] | None = None,
    ):
        self._store = store
        self._codec = codec
        self._audit = audit
        self._queries = queries
        self._validator = validator

    @property
    def resource_type(self) -> str:
        return self._codec.resource_type

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    async def _before_write(self, record: RecordT, creating: bool) -> RecordT:
        """Adjust a validated record right before it is encoded."""
        return record

    async def _after_read(self, record: RecordT) -> RecordT:
        """Adjust a record decoded from a read or a search."""
        return record

    def _validate(self, record: RecordT) -> None:
        if self._validator is not None:
            self._validator(record)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create(self, record: RecordT) -> RecordT:
        """Create a new resource. The store assigns the id."""
        logger.info("Creating %s", self.resource_type)
        record = record.model_copy(update={"id": None})
        self._validate(record)
        record = await self._before_write(record, creating=True)

        created = await self._store.create(self._codec.encode(record))
        result = self._codec.decode(created)

        await self._audit.emit(
            "create", self.resource_type, result.id, f"{self.resource_type} created successfully"
        )
        logger.info("%s created with ID: %s", self.resource_type, result.id)
        return result

    async def get_by_id(self, resource_id: str) -> RecordT:
        """Read one record. Raises ResourceNotFoundError when absent."""
        logger.info("Fetching %s ID: %s", self.resource_type, resource_id)
        resource = await self._store.read(self.resource_type, resource_id)
        return await self._after_read(self._codec.decode(resource))

    async def list_all(self) -> list[RecordT]:
        logger.info("Fetching all %s resources", self.resource_type)
        return await self.find()

    async def search(self, filter_name: str, value: Any) -> list[RecordT]:
        """List records matching one named filter."""
        logger.info("Searching %s by %s: %s", self.resource_type, filter_name, value)
        return await self.find(**{filter_name: value})

    async def find(self, **filters: Any) -> list[RecordT]:
        """List records, applying the most specific of the given filters."""
        plan = self._queries.plan(self.resource_type, **filters)
        resources = await self._store.search(self.resource_type, plan.params)
        records = plan.apply([self._codec.decode(r) for r in resources])
        logger.info("Found %d %s resources", len(records), self.resource_type)
        return [await self._after_read(r) for r in records]

    async def update(self, resource_id: str, record: RecordT) -> RecordT:
        """Replace an existing resource.

        The *resource_id* argument overrides any id in *record*. Raises
        ResourceNotFoundError if the resource does not exist.
        """
        logger.info("Updating %s ID: %s", self.resource_type, resource_id)
        record = record.model_copy(update={"id": resource_id})
        self._validate(record)
        # FHIR servers treat PUT on an unknown id as a create
        await self._store.read(self.resource_type, resource_id)
        record = await self._before_write(record, creating=False)

        updated = await self._store.update(self._codec.encode(record))
        result = self._codec.decode(updated)

        await self._audit.emit(
            "update", self.resource_type, resource_id, f"{self.resource_type} updated successfully"
        )
        logger.info("%s updated successfully: %s", self.resource_type, resource_id)
        return result

    async def delete(self, resource_id: str) -> None:
        logger.info("Deleting %s ID: %s", self.resource_type, resource_id)
        await self._store.delete(self.resource_type, resource_id)
        await self._audit.emit("delete", self.resource_type, resource_id, f"{self.resource_type} deleted")
        logger.info("%s deleted successfully: %s", self.resource_type, resource_id)
