"""Immutable workflow entity snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from app.core.enums import EntityKindEnum, PaymentStatusEnum
from app.modules.workflow.status_model import LifecycleStatus


@dataclass(frozen=True, slots=True)
class Schedule:
    """Agreed session slot for mentorship and guest bookings."""

    date: date | None
    time_slot: str | None
    duration_minutes: int
    meeting_link: str | None = None


@dataclass(frozen=True, slots=True)
class WorkflowEntity:
    """Snapshot of an enrollment, mentorship request/booking or guest booking.

    ``kind`` selects the transition table; the entity is never subclassed per
    kind. ``owner_ref`` and ``counterpart_ref`` are opaque back-references
    (user id, or the customer e-mail for guests) used only for routing
    notifications. ``version`` is the persisted row version the snapshot was
    read at.
    """

    id: UUID
    kind: EntityKindEnum
    lifecycle_status: LifecycleStatus
    requested_at: datetime
    payment_status: PaymentStatusEnum | None = None
    decided_at: datetime | None = None
    schedule: Schedule | None = None
    rejection_reason: str | None = None
    owner_ref: str | None = None
    counterpart_ref: str | None = None
    price: Decimal | None = None
    currency: str = "USD"
    revenue_accrued_at: datetime | None = None
    score: Decimal | None = None
    version: int = 1
