"""Endpoints collecting client activities and exposing the activity feed."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from bakery.application.use_cases import get_recent_activity, record_client_activities
from bakery.domain.entities import ActivityEvent, AuditLog
from bakery.infrastructure.database import get_db
from bakery.infrastructure.rate_limiter import client_ip
from bakery.interfaces.api.dependencies import require_rate_limit
from bakery.interfaces.api.schemas import (
    ActivityBatchAccepted,
    ActivityBatchIn,
    RecentActivityRead,
)

CLIENT_ACTIVITIES_LIMIT_KEY = "client-activities"

router = APIRouter(prefix="/api", tags=["activity"])


def _event_to_schema(event: AuditLog) -> RecentActivityRead:
    return RecentActivityRead(
        id=event.id,
        action=event.action,
        resource=event.resource,
        resource_id=event.resource_id,
        occurred_at=event.occurred_at,
        details=event.details,
    )


@router.post(
    "/audit/client-activities",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ActivityBatchAccepted,
    dependencies=[Depends(require_rate_limit(CLIENT_ACTIVITIES_LIMIT_KEY))],
)
def collect_client_activities(
    payload: ActivityBatchIn,
    request: Request,
    db: Session = Depends(get_db),
) -> ActivityBatchAccepted:
    """Store a batch of activities sent by a tracker."""

    events = [
        ActivityEvent(
            action=item.action,
            resource=item.resource,
            resource_id=item.resource_id,
            details=item.details,
            timestamp=item.timestamp.isoformat(),
        )
        for item in payload.events
    ]
    created = record_client_activities(
        db,
        events,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ActivityBatchAccepted(accepted=len(created))


@router.get("/activity/recent", response_model=list[RecentActivityRead])
def read_recent_activity(
    limit: int = Query(20, ge=1, le=100, description="Maximum number of events to return"),
    action: str | None = Query(None, description="Only return this activity category"),
    db: Session = Depends(get_db),
) -> list[RecentActivityRead]:
    """Return the most recent activity events."""

    events = get_recent_activity(db, limit=limit, action=action)
    return [_event_to_schema(event) for event in events]


__all__ = ["router"]
