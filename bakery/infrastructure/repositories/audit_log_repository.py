"""Persistence layer for audit log records."""

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from bakery.domain.entities import AuditLog, AuditLogFilters
from bakery.infrastructure.models import AuditLogModel
from bakery.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class AuditLogRepository:
    """Provide persistence helpers for :class:`AuditLog` entries."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create_many(self, entries: Sequence[AuditLog]) -> list[AuditLog]:
        """Insert ``entries`` in a single transaction, preserving their order."""

        models = []
        for entry in entries:
            model = AuditLogModel()
            self._apply_entity_to_model(model, entry)
            models.append(model)

        self.session.add_all(models)
        self.session.commit()
        for model in models:
            self.session.refresh(model)
        return [self._to_entity(model) for model in models]

    def get(self, entry_id: int) -> AuditLog | None:
        """Return an audit entry by its primary key, if present."""

        model = self.session.get(AuditLogModel, entry_id)
        if model is None:
            return None
        return self._to_entity(model)

    def list(self, filters: AuditLogFilters) -> list[AuditLog]:
        """Return the newest entries matching ``filters``."""

        query = self.session.query(AuditLogModel)
        if filters.action is not None:
            query = query.filter(AuditLogModel.action == filters.action)
        if filters.resource is not None:
            query = query.filter(AuditLogModel.resource == filters.resource)
        if filters.start_date is not None:
            query = query.filter(
                AuditLogModel.occurred_at >= ensure_app_naive_datetime(filters.start_date)
            )
        if filters.end_date is not None:
            query = query.filter(
                AuditLogModel.occurred_at <= ensure_app_naive_datetime(filters.end_date)
            )

        models: Iterable[AuditLogModel] = (
            query.order_by(AuditLogModel.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
            .all()
        )
        return [self._to_entity(model) for model in models]

    def delete(self, entry_id: int) -> bool:
        """Delete an audit entry by id.

        Returns ``True`` when a record was removed and ``False`` when the
        requested entry was not found.
        """

        model = self.session.get(AuditLogModel, entry_id)
        if model is None:
            return False

        self.session.delete(model)
        self.session.commit()
        return True

    @staticmethod
    def _to_entity(model: AuditLogModel) -> AuditLog:
        return AuditLog(
            id=model.id,
            action=model.action,
            resource=model.resource,
            resource_id=model.resource_id,
            details=model.details,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            status=model.status,
            occurred_at=ensure_app_timezone(model.occurred_at),
            created_at=ensure_app_timezone(model.created_at),
        )

    @staticmethod
    def _apply_entity_to_model(model: AuditLogModel, entry: AuditLog) -> None:
        model.action = entry.action
        model.resource = entry.resource
        model.resource_id = entry.resource_id
        model.details = entry.details
        model.ip_address = entry.ip_address
        model.user_agent = entry.user_agent
        model.status = entry.status
        model.occurred_at = ensure_app_naive_datetime(entry.occurred_at)
        model.created_at = (
            ensure_app_naive_datetime(entry.created_at)
            or ensure_app_naive_datetime(now_in_app_timezone())
        )


__all__ = ["AuditLogRepository"]
