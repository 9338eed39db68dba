"""Application use cases."""

from .activity import get_recent_activity
from .audit_logs import (
    AuditAnalytics,
    AuditExport,
    delete_audit_log,
    export_audit_logs,
    get_audit_log,
    list_audit_logs,
    record_client_activities,
    summarize_audit_logs,
)

__all__ = [
    "AuditAnalytics",
    "AuditExport",
    "delete_audit_log",
    "export_audit_logs",
    "get_audit_log",
    "get_recent_activity",
    "list_audit_logs",
    "record_client_activities",
    "summarize_audit_logs",
]
