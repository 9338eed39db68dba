"""Schemas for audit log endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuditLogRead(BaseModel):
    """Representation of an audit log entry returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    resource: str
    resource_id: str | None
    details: Any
    ip_address: str
    user_agent: str | None
    status: str
    occurred_at: datetime | None
    created_at: datetime | None


class AuditLogListRead(BaseModel):
    audit_logs: list[AuditLogRead]
    count: int
    page: int
    limit: int


class AuditAnalyticsRead(BaseModel):
    """Counts over the most recent audit entries."""

    model_config = ConfigDict(from_attributes=True)

    total_actions: int
    actions_by_type: dict[str, int] = Field(default_factory=dict)
    actions_by_resource: dict[str, int] = Field(default_factory=dict)
    recent_activity: list[AuditLogRead] = Field(default_factory=list)


class AuditLogExportRead(BaseModel):
    """Downloadable dump of the latest audit entries."""

    model_config = ConfigDict(from_attributes=True)

    export_date: datetime = Field(..., serialization_alias="exportDate")
    total_logs: int = Field(..., serialization_alias="totalLogs")
    logs: list[AuditLogRead] = Field(default_factory=list)


__all__ = [
    "AuditAnalyticsRead",
    "AuditLogExportRead",
    "AuditLogListRead",
    "AuditLogRead",
]
