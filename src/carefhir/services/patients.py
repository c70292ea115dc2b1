"""Patient service."""

from __future__ import annotations

import logging

from ..schemas import PatientRecord
from .base import EntityService

logger = logging.getLogger(__name__)


class PatientService(EntityService[PatientRecord]):
    """CRUD and search for patients."""

    async def search_by_name(self, name: str) -> list[PatientRecord]:
        return await self.search("name", name)

    async def search_by_phone(self, phone: str) -> list[PatientRecord]:
        return await self.search("phone", phone)

    async def find_full_name(self, patient_id: str | None) -> str | None:
        """Best-effort display name lookup. Returns None on any failure."""
        if not patient_id:
            return None
        try:
            patient = await self.get_by_id(patient_id)
        except Exception:
            logger.debug("Could not fetch patient name for ID: %s", patient_id, exc_info=True)
            return None
        return patient.full_name or None
