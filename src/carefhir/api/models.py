"""API request and response schemas.

Flat records from :mod:`carefhir.schemas` are used directly as request and
response bodies; only the payloads with no record counterpart live here.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CancelAppointmentRequest(BaseModel):
    """Request to cancel an appointment."""

    reason: str | None = Field(
        default=None,
        description="Optional cancellation reason",
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    store: str = Field(..., description="Configured store backend: remote or local")
    version: str
