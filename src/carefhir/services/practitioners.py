"""Practitioner service."""

from __future__ import annotations

import logging

from ..schemas import PractitionerRecord
from .base import EntityService

logger = logging.getLogger(__name__)


class PractitionerService(EntityService[PractitionerRecord]):
    """CRUD and search for practitioners.

    Specialization lives in an extension, so searching by it fetches every
    practitioner and filters in memory.
    """

    async def search_by_name(self, name: str) -> list[PractitionerRecord]:
        return await self.search("name", name)

    async def search_by_specialization(self, specialization: str) -> list[PractitionerRecord]:
        return await self.search("specialization", specialization)

    async def find_full_name(self, practitioner_id: str | None) -> str | None:
        """Best-effort display name lookup ("Dr. ..."). Returns None on any failure."""
        if not practitioner_id:
            return None
        try:
            practitioner = await self.get_by_id(practitioner_id)
        except Exception:
            logger.debug(
                "Could not fetch practitioner name for ID: %s", practitioner_id, exc_info=True
            )
            return None
        return practitioner.full_name
