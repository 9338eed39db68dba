"""ORM models used by the application infrastructure."""

from .audit_log import AuditLogModel

__all__ = ["AuditLogModel"]
