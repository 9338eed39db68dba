"""Domain entities exposed by the application."""

from .activity_event import (
    ACTION_CLICK,
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_ERROR,
    ACTION_LOGIN,
    ACTION_LOGOUT,
    ACTION_READ,
    ACTION_SUBMIT,
    ACTION_UPDATE,
    ACTION_VIEW,
    CRITICAL_ACTIONS,
    DATA_OPERATIONS,
    MAX_FIELD_LENGTH,
    ActivityEvent,
    is_critical_action,
)
from .audit_log import (
    AUDIT_STATUS_ERROR,
    AUDIT_STATUS_FAILED,
    AUDIT_STATUS_SUCCESS,
    AuditLog,
    AuditLogFilters,
)

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
    "AUDIT_STATUS_ERROR",
    "AUDIT_STATUS_FAILED",
    "AUDIT_STATUS_SUCCESS",
    "AuditLog",
    "AuditLogFilters",
    "CRITICAL_ACTIONS",
    "DATA_OPERATIONS",
    "MAX_FIELD_LENGTH",
    "is_critical_action",
]
