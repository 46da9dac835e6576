"""Workflow schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import EntityKindEnum, PaymentStatusEnum


class TransitionPayload(BaseModel):
    """Action-specific payload: schedule on approval, reason on rejection, score on completion."""

    model_config = ConfigDict(frozen=True)

    scheduled_date: date | None = None
    scheduled_time: str | None = Field(default=None, max_length=32)
    duration_minutes: int | None = Field(default=None, ge=1, le=24 * 60)
    meeting_link: str | None = Field(default=None, max_length=512)
    reason: str | None = Field(default=None, max_length=512)
    score: Decimal | None = Field(default=None, ge=0, le=100)


class WorkflowEntityCreate(BaseModel):
    """Create enrollment, mentorship request or guest booking request."""

    owner_ref: str = Field(min_length=1, max_length=255)
    counterpart_ref: str | None = Field(default=None, max_length=255)
    subject_ref: str | None = Field(default=None, max_length=255)
    price: Decimal | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    preferred_date: date | None = None
    preferred_time: str | None = Field(default=None, max_length=32)
    message: str | None = Field(default=None, max_length=4000)
    preferred_topics: list[str] = Field(default_factory=list)


class ScheduleRead(BaseModel):
    """Session schedule response schema."""

    model_config = ConfigDict(from_attributes=True)

    date: date | None
    time_slot: str | None
    duration_minutes: int
    meeting_link: str | None


class WorkflowEntityRead(BaseModel):
    """Workflow entity response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    kind: EntityKindEnum
    lifecycle_status: str
    payment_status: PaymentStatusEnum | None
    requested_at: datetime
    decided_at: datetime | None
    schedule: ScheduleRead | None
    rejection_reason: str | None
    owner_ref: str | None
    counterpart_ref: str | None
    price: Decimal | None
    currency: str
    revenue_accrued_at: datetime | None
    score: Decimal | None = None
    version: int

    @classmethod
    def from_entity(cls, entity: Any) -> "WorkflowEntityRead":
        """Build response from a workflow snapshot."""
        schedule = entity.schedule
        return cls(
            id=entity.id,
            kind=entity.kind,
            lifecycle_status=str(entity.lifecycle_status),
            payment_status=entity.payment_status,
            requested_at=entity.requested_at,
            decided_at=entity.decided_at,
            schedule=ScheduleRead.model_validate(schedule) if schedule is not None else None,
            rejection_reason=entity.rejection_reason,
            owner_ref=entity.owner_ref,
            counterpart_ref=entity.counterpart_ref,
            price=entity.price,
            currency=entity.currency,
            revenue_accrued_at=entity.revenue_accrued_at,
            score=entity.score,
            version=entity.version,
        )


class TransitionRead(BaseModel):
    """Applied transition response with the effects that were enqueued."""

    entity: WorkflowEntityRead
    effects: list[str]
    derived_entity: WorkflowEntityRead | None = None
