"""Builders and readers for shared FHIR R4 data types.

Small helpers for dates, HumanName, ContactPoint, Address, CodeableConcept,
Extension and Reference elements used by the per-resource codecs. Readers
never raise on missing or malformed sections; they return ``None``.
"""

from __future__ import annotations

from datetime import date
from typing import Any

EXTENSION_BASE = "http://healthcare.com/fhir/StructureDefinition"
MARITAL_STATUS_SYSTEM = "http://terminology.hl7.org/CodeSystem/v3-MaritalStatus"
APPOINTMENT_TYPE_SYSTEM = "http://terminology.hl7.org/CodeSystem/v2-0276"
ORGANIZATION_TYPE_SYSTEM = "http://terminology.hl7.org/CodeSystem/organization-type"
MEDICAL_COUNCIL_SYSTEM = "http://healthcare.com/fhir/medical-council"
ORGANIZATION_REGISTRATION_SYSTEM = "http://healthcare.com/fhir/organization-registration"

ADMINISTRATIVE_GENDERS = ("male", "female", "other", "unknown")


def first(resource: dict[str, Any], key: str) -> dict[str, Any] | None:
    """Return the first element of a repeatable section, if any."""
    items = resource.get(key)
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def put(resource: dict[str, Any], key: str, value: Any) -> None:
    """Set *key* only when *value* is present."""
    if value is not None and value != "" and value != [] and value != {}:
        resource[key] = value


# -- date --------------------------------------------------------------------


def read_date(value: str | None) -> date | None:
    """Read a FHIR ``date`` (YYYY, YYYY-MM or YYYY-MM-DD).

    Partial dates resolve to the first day of the period they name.
    """
    if not isinstance(value, str):
        return None
    parts = value[:10].split("-")
    try:
        year = int(parts[0])
        month = int(parts[1]) if len(parts) > 1 else 1
        day = int(parts[2]) if len(parts) > 2 else 1
        return date(year, month, day)
    except ValueError:
        return None


# -- HumanName ---------------------------------------------------------------


def human_name(
    first_name: str | None,
    last_name: str | None,
    text: str,
    prefix: str | None = None,
) -> dict[str, Any]:
    name: dict[str, Any] = {"use": "official"}
    put(name, "family", last_name)
    if first_name:
        name["given"] = [first_name]
    if prefix:
        name["prefix"] = [prefix]
    put(name, "text", text)
    return name


def read_name(resource: dict[str, Any]) -> tuple[str | None, str | None]:
    """Return (given, family) from the first HumanName."""
    name = first(resource, "name")
    if name is None:
        return None, None
    given = name.get("given") or []
    given_text = " ".join(g for g in given if g) or None
    return given_text, name.get("family")


# -- ContactPoint ------------------------------------------------------------


def contact_point(system: str, value: str | None, use: str | None = None) -> dict[str, Any] | None:
    if not value:
        return None
    point = {"system": system, "value": value}
    if use:
        point["use"] = use
    return point


def telecom(*points: dict[str, Any] | None) -> list[dict[str, Any]]:
    return [p for p in points if p is not None]


def read_telecom(element: dict[str, Any], system: str) -> str | None:
    """Return the first telecom value tagged with *system*.

    Entries with other systems, or without a system, are ignored.
    """
    for point in element.get("telecom") or []:
        if isinstance(point, dict) and point.get("system") == system:
            return point.get("value")
    return None


# -- Address -----------------------------------------------------------------


def address(
    line: str | None,
    city: str | None,
    state: str | None,
    postal_code: str | None,
    country: str,
) -> dict[str, Any] | None:
    if not any((line, city, state, postal_code)):
        return None
    result: dict[str, Any] = {}
    if line:
        result["line"] = [line]
    put(result, "city", city)
    put(result, "state", state)
    put(result, "postalCode", postal_code)
    result["country"] = country
    return result


def read_address(resource: dict[str, Any]) -> dict[str, str | None]:
    """Return line/city/state/postal_code from the first Address."""
    addr = first(resource, "address") or {}
    lines = addr.get("line") or []
    return {
        "address": lines[0] if lines else None,
        "city": addr.get("city"),
        "state": addr.get("state"),
        "postal_code": addr.get("postalCode"),
    }


# -- CodeableConcept ---------------------------------------------------------


def coded(system: str, code: str, display: str) -> dict[str, Any]:
    return {"coding": [{"system": system, "code": code, "display": display}]}


def text_concept(text: str | None) -> dict[str, Any] | None:
    return {"text": text} if text else None


def read_coded(concept: dict[str, Any] | None) -> str | None:
    """Return the display of the first coding, falling back to its lowercased code."""
    if not isinstance(concept, dict):
        return None
    coding = first(concept, "coding")
    if coding is None:
        return concept.get("text")
    if coding.get("display"):
        return coding["display"]
    code = coding.get("code")
    return code.lower() if code else None


def read_text(concept: dict[str, Any] | None) -> str | None:
    if isinstance(concept, dict):
        return concept.get("text")
    return None


# -- Enumerations ------------------------------------------------------------


def gender_code(value: str | None) -> str | None:
    if value is None:
        return None
    code = value.strip().lower()
    return code if code in ADMINISTRATIVE_GENDERS else "unknown"


def read_gender(resource: dict[str, Any]) -> str | None:
    value = resource.get("gender")
    if value is None:
        return None
    return value if value in ADMINISTRATIVE_GENDERS else "unknown"


# -- Extension ---------------------------------------------------------------


def extension_url(key: str) -> str:
    return f"{EXTENSION_BASE}/{key}"


def extension(key: str, value: Any, value_type: str = "String") -> dict[str, Any] | None:
    if value is None:
        return None
    return {"url": extension_url(key), f"value{value_type}": value}


def read_extension(resource: dict[str, Any], key: str, value_type: str = "String") -> Any:
    """Return the value of the extension whose URL is exactly the one for *key*."""
    url = extension_url(key)
    for ext in resource.get("extension") or []:
        if isinstance(ext, dict) and ext.get("url") == url:
            return ext.get(f"value{value_type}")
    return None


# -- Reference ---------------------------------------------------------------


def reference(resource_type: str, resource_id: str, display: str | None = None) -> dict[str, Any]:
    ref = {"reference": f"{resource_type}/{resource_id}"}
    put(ref, "display", display)
    return ref


def split_reference(ref: str | None) -> tuple[str | None, str | None]:
    """Split ``"Kind/id"`` into (kind, id). Absolute URLs keep their last two segments."""
    if not ref or "/" not in ref:
        return None, None
    parts = ref.rstrip("/").split("/")
    return parts[-2], parts[-1]
