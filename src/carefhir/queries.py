"""Translation of named listing filters into store fetch plans.

Filters the FHIR server can evaluate become search parameters. Filters on
fields that live in extensions or codings the server can't search by
substring (organization type, practitioner specialization, audit resource
type) become a fetch of every resource of the kind plus an in-memory
predicate over the decoded records. ``FetchPlan.server_side`` tells the two
tiers apart.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from typing import Any, Callable

from .codec.appointment import start_of_day
from .errors import InvalidFilterError
from .protocols import SearchParams

Predicate = Callable[[Any], bool]

# Per kind, the filters it understands, most specific first
FILTER_PRECEDENCE: dict[str, tuple[str, ...]] = {
    "Patient": ("id", "phone", "name"),
    "Practitioner": ("id", "specialization", "name"),
    "Organization": ("id", "type", "name"),
    "Appointment": ("id", "patient_id", "practitioner_id", "date"),
    "AuditEvent": ("resource_type", "action"),
}


@dataclass(frozen=True)
class FetchPlan:
    """How to fetch one listing: a FHIR search, optionally post-filtered."""

    resource_type: str
    params: SearchParams = field(default_factory=dict)
    predicate: Predicate | None = None
    filter_name: str | None = None

    @property
    def server_side(self) -> bool:
        """True when the store does all the filtering."""
        return self.predicate is None

    def apply(self, records: list[Any]) -> list[Any]:
        """Run the client-side predicate, if any, over decoded records."""
        if self.predicate is None:
            return records
        return [r for r in records if self.predicate(r)]


def _contains(attr: str, needle: str) -> Predicate:
    needle = needle.lower()

    def predicate(record: Any) -> bool:
        value = getattr(record, attr, None)
        return value is not None and needle in value.lower()

    return predicate


def _equals_ignore_case(attr: str, expected: str) -> Predicate:
    expected = expected.lower()

    def predicate(record: Any) -> bool:
        value = getattr(record, attr, None)
        return value is not None and value.lower() == expected

    return predicate


class QueryTranslator:
    """Builds a FetchPlan for a kind and a set of named filters.

    Args:
        tz: Timezone whose calendar days bound date filters. ``None`` uses
            the host's local timezone.
        audit_page_size: Cap on audit event listings.
    """

    def __init__(self, tz: tzinfo | None = None, audit_page_size: int = 100):
        self._tz = tz
        self._audit_page_size = audit_page_size

    def plan(self, resource_type: str, /, **filters: Any) -> FetchPlan:
        """Pick the most specific non-empty filter and translate it.

        Only one filter is applied per call. With no filter the plan fetches
        every resource of the kind.

        Raises:
            InvalidFilterError: For a kind without listing support or a filter name
                the kind doesn't understand.
        """
        if resource_type not in FILTER_PRECEDENCE:
            raise InvalidFilterError(f"No listing support for {resource_type}")
        precedence = FILTER_PRECEDENCE[resource_type]
        unknown = set(filters) - set(precedence)
        if unknown:
            raise InvalidFilterError(
                f"Unknown filter(s) for {resource_type}: {', '.join(sorted(unknown))}"
            )

        for name in precedence:
            value = filters.get(name)
            if value is None or value == "":
                continue
            return self._translate(resource_type, name, value)

        return self._fetch_all(resource_type)

    def _fetch_all(self, resource_type: str) -> FetchPlan:
        return FetchPlan(resource_type, self._base_params(resource_type))

    def _base_params(self, resource_type: str) -> SearchParams:
        if resource_type == "AuditEvent":
            return {"_sort": "-date", "_count": str(self._audit_page_size)}
        return {}

    def _translate(self, resource_type: str, name: str, value: Any) -> FetchPlan:
        params = self._base_params(resource_type)

        if name == "id":
            params["_id"] = str(value)
        elif name == "name":
            params["name"] = str(value).strip()
        elif name == "phone":
            params["telecom"] = str(value).strip()
        elif name == "patient_id":
            params["patient"] = f"Patient/{value}"
        elif name == "practitioner_id":
            params["practitioner"] = f"Practitioner/{value}"
        elif name == "date":
            params["date"] = self.day_range(value)
        elif name == "action":
            params["subtype"] = str(value).lower()
        elif name in ("type", "specialization"):
            return FetchPlan(
                resource_type, params, _contains(name, str(value).strip()), filter_name=name
            )
        elif name == "resource_type":
            return FetchPlan(
                resource_type,
                params,
                _equals_ignore_case("resource_type", str(value).strip()),
                filter_name=name,
            )

        return FetchPlan(resource_type, params, filter_name=name)

    def day_range(self, day: date | str) -> list[str]:
        """Half-open ``[startOfDay, startOfNextDay)`` bounds for a local calendar day."""
        if isinstance(day, str):
            try:
                day = date.fromisoformat(day)
            except ValueError as e:
                raise InvalidFilterError(f"Invalid date filter: {day!r}") from e
        start = start_of_day(day, self._tz)
        end = start_of_day(day + timedelta(days=1), self._tz)
        return [f"ge{start.isoformat()}", f"lt{end.isoformat()}"]
