"""Pydantic schemas for activity collection and feed endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bakery.domain.entities import MAX_FIELD_LENGTH

MAX_EVENTS_PER_BATCH = 500


class ActivityEventIn(BaseModel):
    """Single activity as reported by the tracker."""

    model_config = ConfigDict(populate_by_name=True)

    action: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH, description="Activity category, e.g. VIEW or DELETE")
    resource: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH, description="Entity, page or control acted upon")
    resource_id: str | None = Field(
        default=None,
        alias="resourceId",
        max_length=MAX_FIELD_LENGTH,
        description="Identifier of the specific instance, when any",
    )
    details: Any = Field(default=None, description="Free-form context captured with the activity")
    timestamp: datetime = Field(..., description="Moment the activity was captured")


class ActivityBatchIn(BaseModel):
    """Body accepted by the collection endpoint."""

    events: list[ActivityEventIn] = Field(
        ..., min_length=1, max_length=MAX_EVENTS_PER_BATCH
    )


class ActivityBatchAccepted(BaseModel):
    accepted: int = Field(..., description="Number of stored activities")


class RecentActivityRead(BaseModel):
    """Entry of the recent activity feed."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Identifier of the stored activity")
    action: str
    resource: str
    resource_id: str | None = None
    occurred_at: datetime | None = Field(default=None, description="Moment the activity happened")
    details: Any = None


__all__ = [
    "ActivityBatchAccepted",
    "ActivityBatchIn",
    "ActivityEventIn",
    "MAX_EVENTS_PER_BATCH",
    "RecentActivityRead",
]
