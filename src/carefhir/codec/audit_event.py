"""FHIR AuditEvent construction and decoding."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ..schemas import AuditEventRecord
from .elements import first, split_reference

AUDIT_EVENT_TYPE_SYSTEM = "http://terminology.hl7.org/CodeSystem/audit-event-type"
RESTFUL_INTERACTION_SYSTEM = "http://hl7.org/fhir/restful-interaction"
SECURITY_ROLE_SYSTEM = "http://terminology.hl7.org/CodeSystem/extra-security-role-type"
SECURITY_SOURCE_SYSTEM = "http://terminology.hl7.org/CodeSystem/security-source-type"
RESOURCE_TYPES_SYSTEM = "http://hl7.org/fhir/resource-types"

# FHIR AuditEvent.action codes
ACTION_CODES = {
    "create": "C",
    "read": "R",
    "search": "R",
    "update": "U",
    "delete": "D",
}
ACTION_NAMES = {"C": "create", "R": "read", "U": "update", "D": "delete", "E": "execute"}

OUTCOME_SUCCESS = "0"


class AuditEventCodec:
    """Builds AuditEvent resources for mutations and decodes them for listing."""

    resource_type = "AuditEvent"

    def __init__(
        self,
        agent_name: str = "System User",
        system_name: str = "Patient Management System",
    ):
        self._agent_name = agent_name
        self._system_name = system_name

    def build(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        description: str,
        recorded: datetime,
    ) -> dict[str, Any]:
        """Build an AuditEvent recording a successful *action* on a resource."""
        action = action.lower()
        return {
            "resourceType": self.resource_type,
            "type": {
                "system": AUDIT_EVENT_TYPE_SYSTEM,
                "code": "rest",
                "display": "RESTful Operation",
            },
            "subtype": [
                {
                    "system": RESTFUL_INTERACTION_SYSTEM,
                    "code": action,
                    "display": action.capitalize(),
                }
            ],
            "action": ACTION_CODES.get(action, "E"),
            "recorded": recorded.isoformat(),
            "outcome": OUTCOME_SUCCESS,
            "outcomeDesc": description,
            "agent": [
                {
                    "type": {
                        "coding": [
                            {
                                "system": SECURITY_ROLE_SYSTEM,
                                "code": "humanuser",
                                "display": "Human User",
                            }
                        ]
                    },
                    "who": {"display": self._agent_name},
                    "requestor": True,
                }
            ],
            "source": {
                "observer": {"display": self._system_name},
                "type": [
                    {
                        "system": SECURITY_SOURCE_SYSTEM,
                        "code": "4",
                        "display": "Application Server",
                    }
                ],
            },
            "entity": [
                {
                    "what": {"reference": f"{resource_type}/{resource_id}"},
                    "type": {
                        "system": RESOURCE_TYPES_SYSTEM,
                        "code": resource_type,
                        "display": resource_type,
                    },
                }
            ],
        }

    def decode(self, resource: dict[str, Any]) -> AuditEventRecord:
        agent = first(resource, "agent") or {}
        source = resource.get("source") or {}
        entity = first(resource, "entity") or {}
        kind, entity_id = split_reference((entity.get("what") or {}).get("reference"))
        recorded = resource.get("recorded")
        outcome = resource.get("outcome")
        action = resource.get("action")

        return AuditEventRecord(
            id=resource.get("id"),
            action=ACTION_NAMES.get(action, action.lower() if action else None),
            resource_type=kind,
            resource_id=entity_id,
            description=resource.get("outcomeDesc"),
            recorded=datetime.fromisoformat(recorded) if recorded else None,
            outcome=None if outcome is None else ("success" if outcome == OUTCOME_SUCCESS else "failure"),
            agent_name=(agent.get("who") or {}).get("display"),
            system_name=(source.get("observer") or {}).get("display"),
        )
