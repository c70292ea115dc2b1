"""Audit trail for clinical record mutations.

Every create, update and delete writes a FHIR AuditEvent to the same store
as the clinical resources. Writing the event is best-effort: an audit gap
must never block or fail the mutation that triggered it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .codec.audit_event import AuditEventCodec
from .protocols import ResourceStore
from .queries import QueryTranslator
from .schemas import AuditEventRecord

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Emits and lists AuditEvent resources."""

    resource_type = "AuditEvent"

    def __init__(
        self,
        store: ResourceStore,
        codec: AuditEventCodec | None = None,
        queries: QueryTranslator | None = None,
    ):
        self._store = store
        self._codec = codec or AuditEventCodec()
        self._queries = queries or QueryTranslator()

    async def emit(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        description: str,
    ) -> None:
        """Record *action* on ``resource_type/resource_id``. Never raises."""
        logger.info("Creating audit event: %s on %s %s", action, resource_type, resource_id)
        try:
            event = self._codec.build(
                action,
                resource_type,
                resource_id,
                description,
                recorded=datetime.now(timezone.utc),
            )
            await self._store.create(event)
        except Exception:
            logger.warning(
                "Failed to create audit event for %s %s/%s",
                action,
                resource_type,
                resource_id,
                exc_info=True,
            )
            return
        logger.info("Audit event created successfully")

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def get_all(self) -> list[AuditEventRecord]:
        """Most recent audit events, newest first."""
        logger.info("Fetching all audit events")
        return await self.find()

    async def get_by_id(self, event_id: str) -> AuditEventRecord:
        logger.info("Fetching audit event ID: %s", event_id)
        return self._codec.decode(await self._store.read(self.resource_type, event_id))

    async def search_by_resource_type(self, resource_type: str) -> list[AuditEventRecord]:
        """Events about one resource kind, filtered from the most recent page."""
        logger.info("Searching audit events by resource type: %s", resource_type)
        return await self.find(resource_type=resource_type)

    async def search_by_action(self, action: str) -> list[AuditEventRecord]:
        logger.info("Searching audit events by action: %s", action)
        return await self.find(action=action)

    async def find(
        self,
        resource_type: str | None = None,
        action: str | None = None,
    ) -> list[AuditEventRecord]:
        """List audit events; ``resource_type`` wins over ``action`` when both are given."""
        plan = self._queries.plan(self.resource_type, resource_type=resource_type, action=action)
        resources = await self._store.search(self.resource_type, plan.params)
        events = plan.apply([self._codec.decode(r) for r in resources])
        logger.info("Found %d audit events", len(events))
        return events
