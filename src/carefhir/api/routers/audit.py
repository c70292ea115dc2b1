"""Audit trail endpoints (read-only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...schemas import AuditEventRecord
from ...services import ServiceContainer, get_services

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=list[AuditEventRecord])
async def list_audit_events(
    resource_type: str | None = Query(None, description="e.g. Patient"),
    action: str | None = Query(None, description="create, update or delete"),
    services: ServiceContainer = Depends(get_services),
) -> list[AuditEventRecord]:
    """Most recent audit events, newest first."""
    return await services.audit.find(resource_type=resource_type, action=action)


@router.get("/{event_id}", response_model=AuditEventRecord)
async def get_audit_event(
    event_id: str,
    services: ServiceContainer = Depends(get_services),
) -> AuditEventRecord:
    return await services.audit.get_by_id(event_id)
