"""Practitioner endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...schemas import PractitionerRecord
from ...services import ServiceContainer, get_services

router = APIRouter(prefix="/practitioners", tags=["practitioners"])


@router.get("", response_model=list[PractitionerRecord])
async def list_practitioners(
    id: str | None = Query(None, description="Exact practitioner ID"),
    specialization: str | None = Query(None, description="Specialization substring"),
    name: str | None = Query(None, description="Name substring"),
    services: ServiceContainer = Depends(get_services),
) -> list[PractitionerRecord]:
    return await services.practitioners.find(id=id, specialization=specialization, name=name)


@router.post("", response_model=PractitionerRecord, status_code=201)
async def create_practitioner(
    record: PractitionerRecord,
    services: ServiceContainer = Depends(get_services),
) -> PractitionerRecord:
    return await services.practitioners.create(record)


@router.get("/{practitioner_id}", response_model=PractitionerRecord)
async def get_practitioner(
    practitioner_id: str,
    services: ServiceContainer = Depends(get_services),
) -> PractitionerRecord:
    return await services.practitioners.get_by_id(practitioner_id)


@router.put("/{practitioner_id}", response_model=PractitionerRecord)
async def update_practitioner(
    practitioner_id: str,
    record: PractitionerRecord,
    services: ServiceContainer = Depends(get_services),
) -> PractitionerRecord:
    return await services.practitioners.update(practitioner_id, record)


@router.delete("/{practitioner_id}", status_code=204)
async def delete_practitioner(
    practitioner_id: str,
    services: ServiceContainer = Depends(get_services),
) -> None:
    await services.practitioners.delete(practitioner_id)
