"""Repository implementations for infrastructure layer."""

from .audit_log_repository import AuditLogRepository

__all__ = ["AuditLogRepository"]
