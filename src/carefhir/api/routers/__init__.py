"""API routers."""

from .appointments import router as appointments_router
from .audit import router as audit_router
from .health import router as health_router
from .organizations import router as organizations_router
from .patients import router as patients_router
from .practitioners import router as practitioners_router

__all__ = [
    "appointments_router",
    "audit_router",
    "health_router",
    "organizations_router",
    "patients_router",
    "practitioners_router",
]
