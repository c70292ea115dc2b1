"""Flat record models.

These are the application-facing representations of each clinical entity.
Every field is optional at the model level so that records decoded from the
FHIR store never fail on write-side constraints; required fields and formats
are enforced by :mod:`carefhir.validation` before create and update.
"""

from __future__ import annotations

from datetime import date, datetime, time

from pydantic import BaseModel, Field, computed_field

GENDERS = ("male", "female", "other")
APPOINTMENT_STATUSES = (
    "proposed",
    "pending",
    "booked",
    "arrived",
    "fulfilled",
    "cancelled",
    "noshow",
)
TERMINAL_APPOINTMENT_STATUSES = ("cancelled", "noshow")
ORGANIZATION_TYPES = ("Hospital", "Clinic", "Pharmacy", "Laboratory")
AUDIT_ACTIONS = ("create", "read", "update", "delete", "execute")

# Decoded value for enumerations the store holds but the app doesn't know
UNKNOWN = "unknown"


def _age_on(born: date | None, today: date | None = None) -> int | None:
    if born is None:
        return None
    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def _join_name(*parts: str | None) -> str:
    return " ".join(p for p in parts if p)


# =============================================================================
# Patient
# =============================================================================


class PatientRecord(BaseModel):
    """Patient demographics and contact details."""

    id: str | None = Field(None, description="Store-assigned resource ID")
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: date | None = None
    gender: str | None = Field(None, description="male, female or other")
    phone: str | None = Field(None, description="10-digit phone number")
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = Field(None, description="6-digit postal code")
    marital_status: str | None = Field(
        None,
        description="never_married, married, divorced or widowed",
    )
    blood_group: str | None = Field(None, description="A+, A-, B+, B-, O+, O-, AB+, AB-")
    pan_card: str | None = None
    aadhaar_number: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_relation: str | None = None
    active: bool = True

    @computed_field
    @property
    def full_name(self) -> str:
        return _join_name(self.first_name, self.last_name)

    @computed_field
    @property
    def age(self) -> int | None:
        return _age_on(self.date_of_birth)


# =============================================================================
# Practitioner
# =============================================================================


class PractitionerRecord(BaseModel):
    """Practitioner profile."""

    id: str | None = Field(None, description="Store-assigned resource ID")
    first_name: str | None = None
    last_name: str | None = None
    gender: str | None = None
    date_of_birth: date | None = None
    specialization: str | None = Field(
        None,
        description="General Practitioner, Cardiologist, etc.",
    )
    registration_number: str | None = Field(
        None,
        description="Medical council registration number",
    )
    phone: str | None = None
    email: str | None = None
    qualifications: str | None = Field(None, description="MBBS, MD, etc.")
    years_of_experience: int | None = None
    department: str | None = None
    organization_id: str | None = Field(
        None,
        description="ID of the Organization this practitioner works for",
    )
    active: bool = True

    @computed_field
    @property
    def full_name(self) -> str:
        return _join_name("Dr.", self.first_name, self.last_name)

    @computed_field
    @property
    def age(self) -> int | None:
        return _age_on(self.date_of_birth)


# =============================================================================
# Organization
# =============================================================================


class OrganizationRecord(BaseModel):
    """Hospital, clinic, pharmacy or laboratory."""

    id: str | None = Field(None, description="Store-assigned resource ID")
    name: str | None = None
    type: str | None = Field(None, description="Hospital, Clinic, Pharmacy or Laboratory")
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    registration_number: str | None = None
    website: str | None = None
    active: bool = True
    description: str | None = None


# =============================================================================
# Appointment
# =============================================================================


class AppointmentRecord(BaseModel):
    """Appointment between a patient and a practitioner.

    ``patient_name`` and ``practitioner_name`` are display copies filled in
    from the referenced entities; they are never treated as input.
    """

    id: str | None = Field(None, description="Store-assigned resource ID")
    patient_id: str | None = None
    practitioner_id: str | None = None
    appointment_date: date | None = None
    appointment_time: time | None = None
    appointment_type: str | None = Field(None, description="Consultation, Follow-up, Emergency")
    status: str | None = Field(None, description=", ".join(APPOINTMENT_STATUSES))
    reason_code: str | None = None
    reason_description: str | None = None
    specialty: str | None = None
    duration_minutes: int | None = 30
    comment: str | None = None
    cancellation_reason: str | None = None
    patient_name: str | None = None
    practitioner_name: str | None = None

    @computed_field
    @property
    def appointment_datetime(self) -> str:
        if self.appointment_date and self.appointment_time:
            return f"{self.appointment_date} {self.appointment_time.strftime('%H:%M')}"
        return ""


# =============================================================================
# Audit Event
# =============================================================================


class AuditEventRecord(BaseModel):
    """Audit trail entry read back from the store."""

    id: str | None = None
    action: str | None = Field(None, description=", ".join(AUDIT_ACTIONS))
    resource_type: str | None = None
    resource_id: str | None = None
    description: str | None = None
    recorded: datetime | None = None
    outcome: str | None = Field(None, description="success or failure")
    agent_name: str | None = None
    system_name: str | None = None
