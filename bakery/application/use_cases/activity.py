"""Use cases feeding the recent activity panel."""

from __future__ import annotations

from sqlalchemy.orm import Session

from bakery.domain.entities import AuditLog, AuditLogFilters
from bakery.infrastructure.repositories import AuditLogRepository


def get_recent_activity(
    session: Session, *, limit: int = 20, action: str | None = None
) -> list[AuditLog]:
    """Return the newest recorded activities, optionally for one action."""

    repository = AuditLogRepository(session)
    return repository.list(AuditLogFilters(action=action, limit=limit))


__all__ = ["get_recent_activity"]
