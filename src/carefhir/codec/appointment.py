"""Appointment <-> FHIR Appointment mapping."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any

from ..schemas import APPOINTMENT_STATUSES, UNKNOWN, AppointmentRecord
from .elements import (
    APPOINTMENT_TYPE_SYSTEM,
    coded,
    first,
    put,
    read_coded,
    read_text,
    reference,
    split_reference,
    text_concept,
)


def localize(naive: datetime, tz: tzinfo | None) -> datetime:
    """Attach *tz* to a naive wall-clock datetime. None means the host's local timezone.

    A wall time that falls in a DST gap keeps the offset in force before the
    transition, so it names the instant that reads one gap later once the
    clocks have moved (02:30 on a spring-forward night decodes as 03:30).
    """
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def start_of_day(day: date, tz: tzinfo | None) -> datetime:
    return localize(datetime.combine(day, time.min), tz)


def _participant(resource_type: str, resource_id: str, display: str | None) -> dict[str, Any]:
    return {
        "actor": reference(resource_type, resource_id, display),
        "required": "required",
        "status": "accepted",
    }


class AppointmentCodec:
    """Maps AppointmentRecord to and from a FHIR R4 Appointment resource.

    The date and time pair becomes a single ``start`` instant in the local
    timezone; ``end`` is derived from the duration. The patient and the
    practitioner are participants whose actor references carry the cached
    display names.

    Args:
        tz: Timezone used for ``start``/``end``. ``None`` uses the host's
            local timezone at the moment of conversion.
    """

    resource_type = "Appointment"

    def __init__(self, tz: tzinfo | None = None):
        self._tz = tz

    def to_local(self, instant: datetime) -> datetime:
        """Convert an instant to local wall-clock time. Naive values are taken as local."""
        if instant.tzinfo is None:
            instant = localize(instant, self._tz)
        return instant.astimezone(self._tz)

    # -- mapping -------------------------------------------------------

    def encode(self, record: AppointmentRecord) -> dict[str, Any]:
        appointment: dict[str, Any] = {"resourceType": self.resource_type}
        put(appointment, "id", record.id)

        if record.status:
            appointment["status"] = record.status.lower()

        participants = []
        if record.patient_id:
            participants.append(_participant("Patient", record.patient_id, record.patient_name))
        if record.practitioner_id:
            participants.append(
                _participant("Practitioner", record.practitioner_id, record.practitioner_name)
            )
        put(appointment, "participant", participants)

        if record.appointment_date is not None and record.appointment_time is not None:
            wall_start = datetime.combine(record.appointment_date, record.appointment_time)
            appointment["start"] = localize(wall_start, self._tz).isoformat()
            if record.duration_minutes is not None:
                wall_end = wall_start + timedelta(minutes=record.duration_minutes)
                appointment["end"] = localize(wall_end, self._tz).isoformat()

        if record.duration_minutes is not None:
            appointment["minutesDuration"] = record.duration_minutes

        if record.appointment_type:
            appointment["appointmentType"] = coded(
                APPOINTMENT_TYPE_SYSTEM,
                record.appointment_type.upper(),
                record.appointment_type,
            )

        if record.reason_code:
            appointment["reasonCode"] = [text_concept(record.reason_code)]
        put(appointment, "description", record.reason_description)
        if record.specialty:
            appointment["specialty"] = [text_concept(record.specialty)]
        put(appointment, "comment", record.comment)
        put(appointment, "cancelationReason", text_concept(record.cancellation_reason))

        return appointment

    def decode(self, resource: dict[str, Any]) -> AppointmentRecord:
        fields: dict[str, Any] = {}

        for participant in resource.get("participant") or []:
            actor = participant.get("actor") if isinstance(participant, dict) else None
            if not isinstance(actor, dict):
                continue
            kind, actor_id = split_reference(actor.get("reference"))
            if kind == "Patient":
                fields["patient_id"] = actor_id
                fields["patient_name"] = actor.get("display")
            elif kind == "Practitioner":
                fields["practitioner_id"] = actor_id
                fields["practitioner_name"] = actor.get("display")

        start = resource.get("start")
        if start:
            local_start = self.to_local(datetime.fromisoformat(start))
            fields["appointment_date"] = local_start.date()
            fields["appointment_time"] = local_start.time()

        # Absent duration keeps the record default
        if resource.get("minutesDuration") is not None:
            fields["duration_minutes"] = resource["minutesDuration"]

        status = resource.get("status")
        if status is not None:
            status = status if status in APPOINTMENT_STATUSES else UNKNOWN

        return AppointmentRecord(
            id=resource.get("id"),
            status=status,
            appointment_type=read_coded(resource.get("appointmentType")),
            reason_code=read_text(first(resource, "reasonCode")),
            reason_description=resource.get("description"),
            specialty=read_text(first(resource, "specialty")),
            comment=resource.get("comment"),
            cancellation_reason=read_text(resource.get("cancelationReason")),
            **fields,
        )
