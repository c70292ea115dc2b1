"""Appointment service.

Appointments carry display copies of the patient's and practitioner's names.
Those copies are looked up from the sibling services whenever an appointment
is written, and filled in on reads when missing. Lookups are best-effort: a
failed lookup leaves the name as it was and never fails the operation.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable

from ..audit import AuditRecorder
from ..codec.appointment import AppointmentCodec
from ..protocols import ResourceStore
from ..queries import QueryTranslator
from ..schemas import AppointmentRecord
from .base import EntityService
from .patients import PatientService
from .practitioners import PractitionerService

logger = logging.getLogger(__name__)


class AppointmentService(EntityService[AppointmentRecord]):
    """CRUD, search and cancellation for appointments."""

    def __init__(
        self,
        store: ResourceStore,
        codec: AppointmentCodec,
        audit: AuditRecorder,
        queries: QueryTranslator,
        patients: PatientService,
        practitioners: PractitionerService,
        validator: Callable[[AppointmentRecord], None] | None = None,
    ):
        super().__init__(store, codec, audit, queries, validator)
        self._patients = patients
        self._practitioners = practitioners

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------

    async def _before_write(self, record: AppointmentRecord, creating: bool) -> AppointmentRecord:
        if creating:
            # names submitted by the caller are never stored as-is
            record = record.model_copy(update={"patient_name": None, "practitioner_name": None})
        return await self._enrich(record, only_missing=False)

    async def _after_read(self, record: AppointmentRecord) -> AppointmentRecord:
        return await self._enrich(record, only_missing=True)

    async def _enrich(self, record: AppointmentRecord, only_missing: bool) -> AppointmentRecord:
        updates: dict[str, Any] = {}

        if record.patient_id and not (only_missing and record.patient_name):
            name = await self._patients.find_full_name(record.patient_id)
            if name:
                updates["patient_name"] = name

        if record.practitioner_id and not (only_missing and record.practitioner_name):
            name = await self._practitioners.find_full_name(record.practitioner_id)
            if name:
                updates["practitioner_name"] = name

        return record.model_copy(update=updates) if updates else record

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------

    async def get_by_patient(self, patient_id: str) -> list[AppointmentRecord]:
        return await self.search("patient_id", patient_id)

    async def get_by_practitioner(self, practitioner_id: str) -> list[AppointmentRecord]:
        return await self.search("practitioner_id", practitioner_id)

    async def get_by_date(self, day: date) -> list[AppointmentRecord]:
        """Appointments starting on *day* (local calendar day)."""
        return await self.search("date", day)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    async def cancel(self, appointment_id: str, reason: str | None = None) -> AppointmentRecord:
        """Mark an appointment cancelled, keeping the record.

        Cancelling an already cancelled (or no-show) appointment is allowed;
        the last write wins.
        """
        logger.info("Cancelling appointment ID: %s", appointment_id)

        resource = await self._store.read(self.resource_type, appointment_id)
        resource["status"] = "cancelled"
        if reason:
            resource["cancelationReason"] = {"text": reason}

        updated = await self._store.update(resource)
        result = self._codec.decode(updated)

        description = f"Appointment cancelled: {reason}" if reason else "Appointment cancelled"
        await self._audit.emit("update", self.resource_type, appointment_id, description)

        logger.info("Appointment cancelled successfully: %s", appointment_id)
        return result
