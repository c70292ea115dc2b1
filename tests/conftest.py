"""Shared fixtures: a local JSON store on tmp_path and services wired to it."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from carefhir.config import AppConfig
from carefhir.services import build_services
from carefhir.store import FhirJsonStore


@pytest.fixture
def config(tmp_path) -> AppConfig:
    return AppConfig(
        store_backend="local",
        fhir_data_dir=str(tmp_path / "fhir"),
        timezone="Asia/Kolkata",
    )


@pytest.fixture
def store(config) -> FhirJsonStore:
    return FhirJsonStore(config.fhir_data_dir)


@pytest.fixture
def services(config, store):
    return build_services(config, store=store)


@pytest.fixture
def future_day() -> date:
    return date.today() + timedelta(days=7)
