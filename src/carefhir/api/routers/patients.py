"""Patient endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...schemas import PatientRecord
from ...services import ServiceContainer, get_services

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("", response_model=list[PatientRecord])
async def list_patients(
    id: str | None = Query(None, description="Exact patient ID"),
    phone: str | None = Query(None, description="Exact phone number"),
    name: str | None = Query(None, description="Name substring"),
    services: ServiceContainer = Depends(get_services),
) -> list[PatientRecord]:
    """List patients. When several filters are given only the most specific applies."""
    return await services.patients.find(id=id, phone=phone, name=name)


@router.post("", response_model=PatientRecord, status_code=201)
async def create_patient(
    record: PatientRecord,
    services: ServiceContainer = Depends(get_services),
) -> PatientRecord:
    return await services.patients.create(record)


@router.get("/{patient_id}", response_model=PatientRecord)
async def get_patient(
    patient_id: str,
    services: ServiceContainer = Depends(get_services),
) -> PatientRecord:
    return await services.patients.get_by_id(patient_id)


@router.put("/{patient_id}", response_model=PatientRecord)
async def update_patient(
    patient_id: str,
    record: PatientRecord,
    services: ServiceContainer = Depends(get_services),
) -> PatientRecord:
    return await services.patients.update(patient_id, record)


@router.delete("/{patient_id}", status_code=204)
async def delete_patient(
    patient_id: str,
    services: ServiceContainer = Depends(get_services),
) -> None:
    await services.patients.delete(patient_id)
