"""Domain entity describing a single tracked user or system activity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

ACTION_VIEW: Final[str] = "VIEW"
ACTION_CLICK: Final[str] = "CLICK"
ACTION_SUBMIT: Final[str] = "SUBMIT"
ACTION_CREATE: Final[str] = "CREATE"
ACTION_UPDATE: Final[str] = "UPDATE"
ACTION_DELETE: Final[str] = "DELETE"
ACTION_READ: Final[str] = "READ"
ACTION_ERROR: Final[str] = "ERROR"
ACTION_LOGIN: Final[str] = "LOGIN"
ACTION_LOGOUT: Final[str] = "LOGOUT"

# Actions delivered without waiting for a full batch.
CRITICAL_ACTIONS: Final[frozenset[str]] = frozenset(
    {ACTION_CREATE, ACTION_DELETE, ACTION_ERROR, ACTION_LOGIN, ACTION_LOGOUT}
)

DATA_OPERATIONS: Final[frozenset[str]] = frozenset(
    {ACTION_CREATE, ACTION_UPDATE, ACTION_DELETE, ACTION_READ}
)

# Width of the action, resource and resource id columns on the collector.
MAX_FIELD_LENGTH: Final[int] = 100


def is_critical_action(action: str) -> bool:
    """Return ``True`` when ``action`` must bypass batching."""

    return action in CRITICAL_ACTIONS


@dataclass(frozen=True)
class ActivityEvent:
    """An activity captured by the tracker, waiting to be delivered."""

    action: str
    resource: str
    timestamp: str
    resource_id: str | None = None
    details: Any = None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON representation expected by the collector."""

        return {
            "action": self.action,
            "resource": self.resource,
            "resourceId": self.resource_id,
            "details": self.details,
            "timestamp": self.timestamp,
        }


__all__ = [
    "ACTION_CLICK",
    "ACTION_CREATE",
    "ACTION_DELETE",
    "ACTION_ERROR",
    "ACTION_LOGIN",
    "ACTION_LOGOUT",
    "ACTION_READ",
    "ACTION_SUBMIT",
    "ACTION_UPDATE",
    "ACTION_VIEW",
    "ActivityEvent",
    "CRITICAL_ACTIONS",
    "DATA_OPERATIONS",
    "MAX_FIELD_LENGTH",
    "is_critical_action",
]
