"""Organization endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...schemas import OrganizationRecord
from ...services import ServiceContainer, get_services

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.get("", response_model=list[OrganizationRecord])
async def list_organizations(
    id: str | None = Query(None, description="Exact organization ID"),
    type: str | None = Query(None, description="Type substring, e.g. hospital"),
    name: str | None = Query(None, description="Name substring"),
    services: ServiceContainer = Depends(get_services),
) -> list[OrganizationRecord]:
    return await services.organizations.find(id=id, type=type, name=name)


@router.post("", response_model=OrganizationRecord, status_code=201)
async def create_organization(
    record: OrganizationRecord,
    services: ServiceContainer = Depends(get_services),
) -> OrganizationRecord:
    return await services.organizations.create(record)


@router.get("/{organization_id}", response_model=OrganizationRecord)
async def get_organization(
    organization_id: str,
    services: ServiceContainer = Depends(get_services),
) -> OrganizationRecord:
    return await services.organizations.get_by_id(organization_id)


@router.put("/{organization_id}", response_model=OrganizationRecord)
async def update_organization(
    organization_id: str,
    record: OrganizationRecord,
    services: ServiceContainer = Depends(get_services),
) -> OrganizationRecord:
    return await services.organizations.update(organization_id, record)


@router.delete("/{organization_id}", status_code=204)
async def delete_organization(
    organization_id: str,
    services: ServiceContainer = Depends(get_services),
) -> None:
    await services.organizations.delete(organization_id)
