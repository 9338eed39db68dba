"""Use cases for recording and inspecting audit log entries."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from bakery.domain.entities import (
    AUDIT_STATUS_SUCCESS,
    ActivityEvent,
    AuditLog,
    AuditLogFilters,
)
from bakery.infrastructure.activity import sanitize_details
from bakery.infrastructure.repositories import AuditLogRepository
from bakery.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

ANALYTICS_SAMPLE_SIZE = 1000
ANALYTICS_RECENT_COUNT = 10
EXPORT_LIMIT = 10_000


@dataclass
class AuditAnalytics:
    """Aggregated view over the most recent audit entries."""

    total_actions: int
    actions_by_type: dict[str, int] = field(default_factory=dict)
    actions_by_resource: dict[str, int] = field(default_factory=dict)
    recent_activity: list[AuditLog] = field(default_factory=list)


@dataclass
class AuditExport:
    """Snapshot of the latest audit entries prepared for download."""

    export_date: datetime
    logs: list[AuditLog] = field(default_factory=list)

    @property
    def total_logs(self) -> int:
        return len(self.logs)


def _parse_timestamp(value: str) -> datetime | None:
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def record_client_activities(
    session: Session,
    events: Sequence[ActivityEvent],
    *,
    ip_address: str,
    user_agent: str | None,
) -> list[AuditLog]:
    """Persist activities reported by a client, in the order they were sent."""

    entries = [
        AuditLog(
            id=None,
            action=event.action,
            resource=event.resource,
            resource_id=event.resource_id,
            details=sanitize_details(event.details),
            ip_address=ip_address,
            user_agent=user_agent,
            status=AUDIT_STATUS_SUCCESS,
            occurred_at=_parse_timestamp(event.timestamp),
            created_at=None,
        )
        for event in events
    ]
    if not entries:
        return []

    repository = AuditLogRepository(session)
    created = repository.create_many(entries)
    logger.info("Stored %s client activities from %s", len(created), ip_address)
    return created


def list_audit_logs(session: Session, filters: AuditLogFilters) -> list[AuditLog]:
    """Return audit log entries matching ``filters``, newest first."""

    repository = AuditLogRepository(session)
    return repository.list(filters)


def get_audit_log(session: Session, entry_id: int) -> AuditLog:
    """Return an audit log entry identified by ``entry_id`` or raise an error."""

    repository = AuditLogRepository(session)
    entry = repository.get(entry_id)
    if entry is None:
        raise ValueError("Audit log entry not found")
    return entry


def delete_audit_log(session: Session, entry_id: int) -> None:
    """Remove an audit log entry or raise an error if it does not exist."""

    repository = AuditLogRepository(session)
    if not repository.delete(entry_id):
        raise ValueError("Audit log entry not found")


def summarize_audit_logs(
    session: Session, *, sample_size: int = ANALYTICS_SAMPLE_SIZE
) -> AuditAnalytics:
    """Count the latest ``sample_size`` entries by action and resource."""

    repository = AuditLogRepository(session)
    entries = repository.list(AuditLogFilters(limit=sample_size))

    by_type = Counter(entry.action for entry in entries)
    by_resource = Counter(entry.resource for entry in entries)
    return AuditAnalytics(
        total_actions=len(entries),
        actions_by_type=dict(by_type),
        actions_by_resource=dict(by_resource),
        recent_activity=entries[:ANALYTICS_RECENT_COUNT],
    )


def export_audit_logs(session: Session, *, limit: int = EXPORT_LIMIT) -> AuditExport:
    """Return the latest ``limit`` audit entries, newest first."""

    repository = AuditLogRepository(session)
    entries = repository.list(AuditLogFilters(limit=limit))
    logger.info("Exporting %s audit log entries", len(entries))
    return AuditExport(export_date=now_in_app_timezone(), logs=entries)


__all__ = [
    "AuditAnalytics",
    "AuditExport",
    "delete_audit_log",
    "export_audit_logs",
    "get_audit_log",
    "list_audit_logs",
    "record_client_activities",
    "summarize_audit_logs",
]
