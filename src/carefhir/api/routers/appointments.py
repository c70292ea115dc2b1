"""Appointment endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from ...schemas import AppointmentRecord
from ...services import ServiceContainer, get_services
from ..models import CancelAppointmentRequest

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("", response_model=list[AppointmentRecord])
async def list_appointments(
    id: str | None = Query(None, description="Exact appointment ID"),
    patient_id: str | None = Query(None, description="Appointments of one patient"),
    practitioner_id: str | None = Query(None, description="Appointments of one practitioner"),
    day: date | None = Query(None, alias="date", description="Local calendar day (YYYY-MM-DD)"),
    services: ServiceContainer = Depends(get_services),
) -> list[AppointmentRecord]:
    return await services.appointments.find(
        id=id,
        patient_id=patient_id,
        practitioner_id=practitioner_id,
        date=day,
    )


@router.post("", response_model=AppointmentRecord, status_code=201)
async def create_appointment(
    record: AppointmentRecord,
    services: ServiceContainer = Depends(get_services),
) -> AppointmentRecord:
    return await services.appointments.create(record)


@router.get("/{appointment_id}", response_model=AppointmentRecord)
async def get_appointment(
    appointment_id: str,
    services: ServiceContainer = Depends(get_services),
) -> AppointmentRecord:
    return await services.appointments.get_by_id(appointment_id)


@router.put("/{appointment_id}", response_model=AppointmentRecord)
async def update_appointment(
    appointment_id: str,
    record: AppointmentRecord,
    services: ServiceContainer = Depends(get_services),
) -> AppointmentRecord:
    return await services.appointments.update(appointment_id, record)


@router.post("/{appointment_id}/cancel", response_model=AppointmentRecord)
async def cancel_appointment(
    appointment_id: str,
    request: CancelAppointmentRequest | None = None,
    services: ServiceContainer = Depends(get_services),
) -> AppointmentRecord:
    """Cancel an appointment. The record is kept with status ``cancelled``."""
    reason = request.reason if request else None
    return await services.appointments.cancel(appointment_id, reason)


@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: str,
    services: ServiceContainer = Depends(get_services),
) -> None:
    await services.appointments.delete(appointment_id)
