"""Organization service."""

from __future__ import annotations

from ..schemas import OrganizationRecord
from .base import EntityService


class OrganizationService(EntityService[OrganizationRecord]):
    """CRUD and search for organizations and departments."""

    async def search_by_name(self, name: str) -> list[OrganizationRecord]:
        return await self.search("name", name)

    async def search_by_type(self, org_type: str) -> list[OrganizationRecord]:
        """Case-insensitive substring match on the type, filtered in memory."""
        return await self.search("type", org_type)
