"""Routes for inspecting and managing audit log entries."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from bakery.application.use_cases import (
    delete_audit_log as delete_audit_log_uc,
    export_audit_logs as export_audit_logs_uc,
    get_audit_log as get_audit_log_uc,
    list_audit_logs as list_audit_logs_uc,
    summarize_audit_logs,
)
from bakery.domain.entities import AuditLog, AuditLogFilters
from bakery.infrastructure.database import get_db
from bakery.interfaces.api.schemas import (
    AuditAnalyticsRead,
    AuditLogExportRead,
    AuditLogListRead,
    AuditLogRead,
)

router = APIRouter(prefix="/api/audit-logs", tags=["audit_logs"])


def _audit_log_to_read_model(entry: AuditLog) -> AuditLogRead:
    return AuditLogRead.model_validate(entry)


@router.get("", response_model=AuditLogListRead)
def list_audit_logs(
    action: str | None = None,
    resource: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int = Query(50, ge=1, le=500),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
) -> AuditLogListRead:
    """Return audit log entries, newest first, filtered by the query string."""

    filters = AuditLogFilters(
        action=action,
        resource=resource,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=(page - 1) * limit,
    )
    entries = list_audit_logs_uc(db, filters)
    return AuditLogListRead(
        audit_logs=[_audit_log_to_read_model(entry) for entry in entries],
        count=len(entries),
        page=page,
        limit=limit,
    )


@router.get("/analytics", response_model=AuditAnalyticsRead)
def read_audit_analytics(db: Session = Depends(get_db)) -> AuditAnalyticsRead:
    """Return activity counts over the latest audit entries."""

    return AuditAnalyticsRead.model_validate(summarize_audit_logs(db))


@router.get("/export", response_model=AuditLogExportRead)
def export_audit_logs(db: Session = Depends(get_db)) -> AuditLogExportRead:
    """Return the latest audit entries as a single downloadable document."""

    return AuditLogExportRead.model_validate(export_audit_logs_uc(db))


@router.get("/{entry_id}", response_model=AuditLogRead)
def read_audit_log(entry_id: int, db: Session = Depends(get_db)) -> AuditLogRead:
    """Return the audit log entry identified by ``entry_id``."""

    try:
        entry = get_audit_log_uc(db, entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _audit_log_to_read_model(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_audit_log(entry_id: int, db: Session = Depends(get_db)) -> Response:
    """Delete the audit log entry identified by ``entry_id``."""

    try:
        delete_audit_log_uc(db, entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
