"""Local JSON-based FHIR R4 store.

Stands in for a FHIR server during development and tests: reads and writes
FHIR R4 resources as JSON files under ``{data_dir}/{ResourceType}/{id}.json``
and understands the search parameters the query translator emits.
"""

from __future__ import annotations

import json
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..errors import ResourceNotFoundError
from ..protocols import SearchParams

# Resource field each date search parameter looks at
_DATE_FIELDS = {
    "Appointment": "start",
    "AuditEvent": "recorded",
}


class FhirJsonStore:
    """Local FHIR store backed by JSON files on disk.

    Same create/read/update/delete/search interface as FhirClient.
    """

    def __init__(self, data_dir: str | Path | None = None):
        if data_dir is None:
            data_dir = os.getenv("CAREFHIR_FHIR_DATA_DIR", "data/fhir")
        self._data_dir = Path(data_dir)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create(self, resource: dict[str, Any]) -> dict[str, Any]:
        """Write a new FHIR resource to disk.

        Assigns a UUID ``id`` (any id in the input is ignored) and returns
        the stored resource.
        """
        data = dict(resource)
        data["id"] = str(uuid.uuid4())
        return self._write(data)

    async def read(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        """Read a single resource file. Raises ResourceNotFoundError if missing."""
        file_path = self._path(resource_type, resource_id)
        if not file_path.exists():
            raise ResourceNotFoundError(resource_type, resource_id)
        return json.loads(file_path.read_text(encoding="utf-8"))

    async def update(self, resource: dict[str, Any]) -> dict[str, Any]:
        """Replace an existing resource. Raises ResourceNotFoundError if missing."""
        resource_type = resource["resourceType"]
        resource_id = resource.get("id") or ""
        if not self._path(resource_type, resource_id).exists():
            raise ResourceNotFoundError(resource_type, resource_id)
        return self._write(dict(resource))

    async def delete(self, resource_type: str, resource_id: str) -> None:
        """Delete a FHIR resource from disk. Raises ResourceNotFoundError if missing."""
        file_path = self._path(resource_type, resource_id)
        if not file_path.exists():
            raise ResourceNotFoundError(resource_type, resource_id)
        file_path.unlink()

    async def search(
        self,
        resource_type: str,
        params: SearchParams | None = None,
    ) -> list[dict[str, Any]]:
        """Search resources on disk.

        Recognised search parameters:
          _id, name, telecom, patient, practitioner, date (ge/gt/le/lt
          prefixes, repeatable), subtype, _sort, _count
        """
        params = params or {}
        resource_dir = self._data_dir / resource_type
        if not resource_dir.is_dir():
            return []

        resources: list[dict[str, Any]] = []
        for file_path in sorted(resource_dir.iterdir()):
            if not file_path.suffix == ".json":
                continue
            resource = json.loads(file_path.read_text(encoding="utf-8"))
            if self._matches(resource, params):
                resources.append(resource)

        # Sorting
        sort_key = params.get("_sort", "")
        if isinstance(sort_key, str) and sort_key:
            descending = sort_key.startswith("-")
            sort_field = sort_key.lstrip("-")
            if sort_field == "date":
                sort_field = _DATE_FIELDS.get(resource_type, "date")
            elif sort_field == "_lastUpdated":
                sort_field = "meta.lastUpdated"
            resources.sort(
                key=lambda r: self._get_nested(r, sort_field) or "",
                reverse=descending,
            )

        # Count limit
        count = params.get("_count")
        if isinstance(count, str):
            resources = resources[: int(count)]

        return resources

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path(self, resource_type: str, resource_id: str) -> Path:
        return self._data_dir / resource_type / f"{resource_id}.json"

    def _write(self, data: dict[str, Any]) -> dict[str, Any]:
        meta = dict(data.get("meta") or {})
        meta["lastUpdated"] = datetime.now(timezone.utc).isoformat()
        data["meta"] = meta

        dest = self._path(data["resourceType"], data["id"])
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return data

    def _matches(self, resource: dict[str, Any], params: SearchParams) -> bool:
        """Check whether *resource* matches all non-meta search params."""
        for key, value in params.items():
            values = value if isinstance(value, list) else [value]

            if key == "_id":
                if resource.get("id") != value:
                    return False

            elif key.startswith("_"):
                continue  # Skip _count, _sort, etc.

            elif key == "name":
                if not self._match_name(resource, value):
                    return False

            elif key == "telecom":
                if not any(t.get("value") == value for t in resource.get("telecom", [])):
                    return False

            elif key in ("patient", "practitioner"):
                if not self._match_participant(resource, key, value):
                    return False

            elif key == "date":
                field = _DATE_FIELDS.get(resource["resourceType"], "date")
                if not all(self._match_date(resource.get(field), v) for v in values):
                    return False

            elif key == "subtype":
                codes = {s.get("code") for s in resource.get("subtype", [])}
                if value not in codes:
                    return False

        return True

    # -- match helpers --------------------------------------------------

    @staticmethod
    def _match_name(resource: dict[str, Any], query: str) -> bool:
        """Case-insensitive partial match on HumanName parts or a plain ``name``."""
        query_lower = query.lower()
        name = resource.get("name")
        if isinstance(name, str):
            return query_lower in name.lower()
        for name_obj in name or []:
            family = (name_obj.get("family") or "").lower()
            givens = " ".join(name_obj.get("given", [])).lower()
            text = (name_obj.get("text") or "").lower()
            if query_lower in family or query_lower in givens or query_lower in text:
                return True
        return False

    @staticmethod
    def _match_participant(resource: dict[str, Any], param: str, value: str) -> bool:
        """Match an Appointment participant actor. Accepts ``Kind/id`` or a bare id."""
        kind = param.capitalize()
        expected = value if "/" in value else f"{kind}/{value}"
        for participant in resource.get("participant", []):
            if (participant.get("actor") or {}).get("reference") == expected:
                return True
        return False

    @staticmethod
    def _match_date(field_value: str | None, query: str) -> bool:
        """Compare an instant against a prefixed FHIR date (``ge2024-03-15T00:00:00+05:30``)."""
        if not field_value:
            return False
        prefix, raw = query[:2], query[2:]
        if prefix not in ("ge", "gt", "le", "lt", "eq"):
            prefix, raw = "eq", query
        actual = datetime.fromisoformat(field_value)
        bound = datetime.fromisoformat(raw)
        if actual.tzinfo is None:
            actual = actual.astimezone()
        if bound.tzinfo is None:
            bound = bound.astimezone()
        return {
            "ge": actual >= bound,
            "gt": actual > bound,
            "le": actual <= bound,
            "lt": actual < bound,
            "eq": actual == bound,
        }[prefix]

    @staticmethod
    def _get_nested(d: dict, dotted_key: str) -> str | None:
        """Retrieve a (possibly dotted) key from a dict."""
        parts = dotted_key.split(".")
        current: dict | str | None = d
        for part in parts:
            if isinstance(current, dict):
                current = current.get(part)
            else:
                return None
        return current if isinstance(current, str) else None
