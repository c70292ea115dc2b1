"""Write-side constraint checks for flat records.

Each ``validate_*`` function collects every problem with a record and raises
a single ValidationFailedError. Services call them before any store call on
create and update; records decoded from the store are never validated.
"""

from __future__ import annotations

import re
from datetime import date

from .errors import ValidationFailedError
from .schemas import (
    APPOINTMENT_STATUSES,
    GENDERS,
    ORGANIZATION_TYPES,
    AppointmentRecord,
    OrganizationRecord,
    PatientRecord,
    PractitionerRecord,
)

PHONE_RE = re.compile(r"^[0-9]{10}$")
POSTAL_CODE_RE = re.compile(r"^[0-9]{6}$")
PAN_RE = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
AADHAAR_RE = re.compile(r"^[0-9]{12}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class _Checker:
    """Accumulates error messages for one record."""

    def __init__(self, record: object):
        self.record = record
        self.errors: list[str] = []

    def _value(self, field: str):
        value = getattr(self.record, field)
        if isinstance(value, str):
            value = value.strip()
        return value

    def required(self, *fields: str) -> None:
        for field in fields:
            if self._value(field) in (None, ""):
                self.errors.append(f"{field} is required")

    def pattern(self, field: str, regex: re.Pattern, message: str) -> None:
        value = self._value(field)
        if value and not regex.match(value):
            self.errors.append(f"{field}: {message}")

    def max_length(self, field: str, limit: int) -> None:
        value = self._value(field)
        if value and len(value) > limit:
            self.errors.append(f"{field} must be at most {limit} characters")

    def one_of(self, field: str, allowed: tuple[str, ...], ignore_case: bool = True) -> None:
        value = self._value(field)
        if not value:
            return
        options = [a.lower() for a in allowed] if ignore_case else list(allowed)
        if (value.lower() if ignore_case else value) not in options:
            self.errors.append(f"{field} must be one of: {', '.join(allowed)}")

    def email(self) -> None:
        self.pattern("email", EMAIL_RE, "invalid email format")

    def raise_if_invalid(self, resource_type: str) -> None:
        if self.errors:
            raise ValidationFailedError(resource_type, self.errors)


def validate_patient(record: PatientRecord) -> None:
    check = _Checker(record)
    check.required("first_name", "last_name", "date_of_birth", "gender", "phone")
    check.max_length("first_name", 100)
    check.max_length("last_name", 100)
    if record.date_of_birth and record.date_of_birth > date.today():
        check.errors.append("date_of_birth must not be in the future")
    check.one_of("gender", GENDERS)
    check.pattern("phone", PHONE_RE, "phone number must be 10 digits")
    check.email()
    check.pattern("postal_code", POSTAL_CODE_RE, "postal code must be 6 digits")
    check.pattern("pan_card", PAN_RE, "invalid PAN format")
    check.pattern("aadhaar_number", AADHAAR_RE, "Aadhaar must be 12 digits")
    check.raise_if_invalid("Patient")


def validate_practitioner(record: PractitionerRecord) -> None:
    check = _Checker(record)
    check.required(
        "first_name",
        "last_name",
        "gender",
        "date_of_birth",
        "specialization",
        "registration_number",
        "phone",
        "department",
    )
    check.max_length("first_name", 100)
    check.max_length("last_name", 100)
    if record.date_of_birth and record.date_of_birth >= date.today():
        check.errors.append("date_of_birth must be in the past")
    check.one_of("gender", GENDERS)
    check.pattern("phone", PHONE_RE, "phone must be 10 digits")
    check.email()
    if record.years_of_experience is not None and record.years_of_experience < 0:
        check.errors.append("years_of_experience must not be negative")
    check.raise_if_invalid("Practitioner")


def validate_organization(record: OrganizationRecord) -> None:
    check = _Checker(record)
    check.required("name", "type", "phone")
    check.max_length("name", 200)
    check.one_of("type", ORGANIZATION_TYPES)
    check.pattern("phone", PHONE_RE, "phone must be 10 digits")
    check.email()
    check.pattern("postal_code", POSTAL_CODE_RE, "postal code must be 6 digits")
    check.raise_if_invalid("Organization")


def validate_appointment(record: AppointmentRecord) -> None:
    check = _Checker(record)
    check.required(
        "patient_id",
        "practitioner_id",
        "appointment_date",
        "appointment_time",
        "appointment_type",
        "status",
    )
    if record.appointment_date and record.appointment_date <= date.today():
        check.errors.append("appointment must be in future")
    check.one_of("status", APPOINTMENT_STATUSES)
    if record.duration_minutes is not None and record.duration_minutes <= 0:
        check.errors.append("duration_minutes must be positive")
    check.raise_if_invalid("Appointment")
