"""Domain entity representing a persisted activity record."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

AUDIT_STATUS_SUCCESS = "success"
AUDIT_STATUS_FAILED = "failed"
AUDIT_STATUS_ERROR = "error"


@dataclass
class AuditLog:
    """Activity received by the collector, enriched with request metadata."""

    id: int | None
    action: str
    resource: str
    resource_id: str | None
    details: Any
    ip_address: str
    user_agent: str | None
    status: str
    occurred_at: datetime | None
    created_at: datetime | None


@dataclass
class AuditLogFilters:
    """Criteria accepted when listing audit log entries."""

    action: str | None = None
    resource: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = 50
    offset: int = 0


__all__ = [
    "AUDIT_STATUS_ERROR",
    "AUDIT_STATUS_FAILED",
    "AUDIT_STATUS_SUCCESS",
    "AuditLog",
    "AuditLogFilters",
]
