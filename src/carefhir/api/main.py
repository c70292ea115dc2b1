"""FastAPI application factory for the carefhir API."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import AppConfig, get_config
from ..errors import (
    InvalidFilterError,
    ResourceNotFoundError,
    UpstreamError,
    ValidationFailedError,
)
from .routers import (
    appointments_router,
    audit_router,
    health_router,
    organizations_router,
    patients_router,
    practitioners_router,
)

logger = logging.getLogger(__name__)

load_dotenv()


# =============================================================================
# Error handlers
# =============================================================================


async def _not_found(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _validation_failed(request: Request, exc: ValidationFailedError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


async def _upstream(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("FHIR store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


async def _bad_filter(request: Request, exc: InvalidFilterError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Optional configuration. If None, loads from environment.

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = get_config()

    app = FastAPI(
        title="carefhir API",
        description="Patient, practitioner, organization and appointment records on FHIR R4",
        version="0.1.0",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ResourceNotFoundError, _not_found)
    app.add_exception_handler(ValidationFailedError, _validation_failed)
    app.add_exception_handler(UpstreamError, _upstream)
    app.add_exception_handler(InvalidFilterError, _bad_filter)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(patients_router, prefix="/api")
    app.include_router(practitioners_router, prefix="/api")
    app.include_router(organizations_router, prefix="/api")
    app.include_router(appointments_router, prefix="/api")
    app.include_router(audit_router, prefix="/api")

    return app


# Default app instance for uvicorn
app = create_app()


def main():
    """Entry point for the carefhir-serve command."""
    import uvicorn

    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "carefhir.api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    main()
