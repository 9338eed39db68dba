from .activity import (
    ActivityBatchAccepted,
    ActivityBatchIn,
    ActivityEventIn,
    RecentActivityRead,
)
from .audit_log import (
    AuditAnalyticsRead,
    AuditLogExportRead,
    AuditLogListRead,
    AuditLogRead,
)

__all__ = [
    "ActivityBatchAccepted",
    "ActivityBatchIn",
    "ActivityEventIn",
    "AuditAnalyticsRead",
    "AuditLogExportRead",
    "AuditLogListRead",
    "AuditLogRead",
    "RecentActivityRead",
]
