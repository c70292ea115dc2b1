"""FHIR resource stores.

- FhirClient: remote FHIR R4 server over HTTP
- FhirJsonStore: local JSON files, same interface

Usage:
    from carefhir.store import create_store

    store = create_store(get_config())
    patient = await store.read("Patient", "123")
"""

from __future__ import annotations

from ..config import AppConfig
from ..protocols import ResourceStore
from .client import FhirClient
from .local import FhirJsonStore


def create_store(config: AppConfig) -> ResourceStore:
    """Build the store backend selected by *config*."""
    if config.store_backend == "local":
        return FhirJsonStore(config.fhir_data_dir)
    if config.store_backend == "remote":
        return FhirClient(
            config.fhir_base_url,
            timeout=config.fhir_timeout,
            max_pages=config.fhir_max_pages,
            access_token=config.fhir_access_token,
            client_id=config.fhir_client_id,
            client_secret=config.fhir_client_secret,
            token_url=config.fhir_token_url,
        )
    raise ValueError(f"Unknown store backend: {config.store_backend!r} (expected 'remote' or 'local')")


__all__ = [
    "FhirClient",
    "FhirJsonStore",
    "create_store",
]
