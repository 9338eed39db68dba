"""SQLAlchemy model for activity records received by the collector."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

from bakery.domain.entities import AUDIT_STATUS_SUCCESS, MAX_FIELD_LENGTH
from bakery.infrastructure.database import Base
from bakery.utils import ensure_app_naive_datetime, now_in_app_timezone

_audit_json_type = JSONB().with_variant(JSON(), "sqlite")


def _now_naive():
    return ensure_app_naive_datetime(now_in_app_timezone())


class AuditLogModel(Base):
    """Database representation of audit events."""

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String(MAX_FIELD_LENGTH), nullable=False, index=True)
    resource = Column(String(MAX_FIELD_LENGTH), nullable=False, index=True)
    resource_id = Column(String(MAX_FIELD_LENGTH), nullable=True)
    details = Column(_audit_json_type, nullable=True)
    ip_address = Column(String(45), nullable=False)
    user_agent = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=AUDIT_STATUS_SUCCESS)
    occurred_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_naive)


__all__ = ["AuditLogModel"]
