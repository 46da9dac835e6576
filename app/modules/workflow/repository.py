"""Workflow repository layer."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, TypeAlias, assert_never
from uuid import UUID

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import EntityKindEnum, PaymentStatusEnum
from app.modules.workflow import status_model
from app.modules.workflow.entities import Schedule, WorkflowEntity
from app.modules.workflow.models import Enrollment, GuestBooking, MentorshipBooking, MentorshipRequest

WorkflowModel: TypeAlias = Enrollment | MentorshipRequest | MentorshipBooking | GuestBooking


@dataclass(frozen=True, slots=True)
class EntityFilters:
    """Optional list filters; None means unfiltered."""

    status: str | None = None
    owner_ref: str | None = None
    counterpart_ref: str | None = None
    payment_status: PaymentStatusEnum | None = None
    course_id: UUID | None = None


def model_for(kind: EntityKindEnum) -> type[WorkflowModel]:
    """Return the ORM model storing an entity kind."""
    match kind:
        case EntityKindEnum.ENROLLMENT:
            return Enrollment
        case EntityKindEnum.MENTORSHIP_REQUEST:
            return MentorshipRequest
        case EntityKindEnum.MENTORSHIP_BOOKING:
            return MentorshipBooking
        case EntityKindEnum.GUEST_BOOKING:
            return GuestBooking
        case _:
            assert_never(kind)


def to_snapshot(kind: EntityKindEnum, row: WorkflowModel) -> WorkflowEntity:
    """Map an ORM row into an immutable workflow snapshot."""
    schedule = None
    if row.scheduled_date is not None or row.scheduled_time is not None or row.meeting_link is not None:
        schedule = Schedule(
            date=row.scheduled_date,
            time_slot=row.scheduled_time,
            duration_minutes=row.duration_minutes or 60,
            meeting_link=row.meeting_link,
        )
    return WorkflowEntity(
        id=row.id,
        kind=kind,
        lifecycle_status=status_model.parse_status(kind, row.status),
        requested_at=row.requested_at,
        payment_status=getattr(row, "payment_status", None),
        decided_at=row.decided_at,
        schedule=schedule,
        rejection_reason=row.rejection_reason,
        owner_ref=row.owner_ref,
        counterpart_ref=row.counterpart_ref,
        price=row.price,
        currency=row.currency,
        revenue_accrued_at=row.revenue_accrued_at,
        score=getattr(row, "score", None),
        version=row.version,
    )


def snapshot_values(snapshot: WorkflowEntity) -> dict[str, Any]:
    """Column values persisted for a snapshot, excluding id and version."""
    schedule = snapshot.schedule
    values: dict[str, Any] = {
        "status": snapshot.lifecycle_status,
        "owner_ref": snapshot.owner_ref,
        "counterpart_ref": snapshot.counterpart_ref,
        "requested_at": snapshot.requested_at,
        "decided_at": snapshot.decided_at,
        "scheduled_date": schedule.date if schedule else None,
        "scheduled_time": schedule.time_slot if schedule else None,
        "duration_minutes": schedule.duration_minutes if schedule else None,
        "meeting_link": schedule.meeting_link if schedule else None,
        "rejection_reason": snapshot.rejection_reason,
        "price": snapshot.price,
        "currency": snapshot.currency,
        "revenue_accrued_at": snapshot.revenue_accrued_at,
    }
    if status_model.has_payment(snapshot.kind):
        values["payment_status"] = snapshot.payment_status or PaymentStatusEnum.PENDING
    if status_model.is_graded(snapshot.kind):
        values["score"] = snapshot.score
    return values


class WorkflowRepository:
    """DB operations for workflow entities with optimistic concurrency."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def load_entity(self, kind: EntityKindEnum, entity_id: UUID) -> WorkflowEntity | None:
        model = model_for(kind)
        row = await self.session.scalar(select(model).where(model.id == entity_id))
        if row is None:
            return None
        return to_snapshot(kind, row)

    async def create_entity(self, snapshot: WorkflowEntity, **extra: Any) -> WorkflowEntity:
        model = model_for(snapshot.kind)
        row = model(id=snapshot.id, version=1, **snapshot_values(snapshot), **extra)
        self.session.add(row)
        await self.session.flush()
        return to_snapshot(snapshot.kind, row)

    async def save_entity(
        self,
        kind: EntityKindEnum,
        entity_id: UUID,
        expected_version: int,
        snapshot: WorkflowEntity,
    ) -> bool:
        """Persist snapshot only if the stored row is still at expected_version."""
        model = model_for(kind)
        stmt = (
            update(model)
            .where(model.id == entity_id, model.version == expected_version)
            .values(**snapshot_values(snapshot), version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_entities(
        self,
        kind: EntityKindEnum,
        filters: EntityFilters,
        limit: int,
        offset: int,
    ) -> tuple[list[WorkflowEntity], int]:
        model = model_for(kind)
        base_stmt: Select = select(model)
        if filters.status is not None:
            base_stmt = base_stmt.where(model.status == status_model.parse_status(kind, filters.status))
        if filters.owner_ref is not None:
            base_stmt = base_stmt.where(model.owner_ref == filters.owner_ref)
        if filters.counterpart_ref is not None:
            base_stmt = base_stmt.where(model.counterpart_ref == filters.counterpart_ref)
        if filters.payment_status is not None:
            base_stmt = base_stmt.where(model.payment_status == filters.payment_status)
        if filters.course_id is not None:
            base_stmt = base_stmt.where(model.course_id == filters.course_id)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(model.requested_at.desc()).limit(limit).offset(offset)
        rows = (await self.session.scalars(stmt)).all()
        return [to_snapshot(kind, row) for row in rows], total

    async def delete_entity(self, kind: EntityKindEnum, entity_id: UUID) -> bool:
        model = model_for(kind)
        result = await self.session.execute(
            delete(model).where(model.id == entity_id).execution_options(synchronize_session=False),
        )
        return result.rowcount == 1

    async def attach_meeting_link(
        self,
        kind: EntityKindEnum,
        entity_id: UUID,
        meeting_link: str,
    ) -> str | None:
        """Store a provisioned meeting link on a row that has none yet.

        The write bumps the row version, so a transition computed from an
        older snapshot fails its compare-and-swap instead of clearing the link.
        A mentorship request passes the link on to its derived booking.
        Returns the link the row holds afterwards, or None if the row is gone.
        """
        model = model_for(kind)
        stored = await self._set_meeting_link_if_missing(model, model.id == entity_id, meeting_link)
        if stored is not None and kind == EntityKindEnum.MENTORSHIP_REQUEST:
            await self._set_meeting_link_if_missing(
                MentorshipBooking,
                MentorshipBooking.request_id == entity_id,
                stored,
            )
        return stored

    async def _set_meeting_link_if_missing(
        self,
        model: type[WorkflowModel],
        criterion: Any,
        meeting_link: str,
    ) -> str | None:
        stmt = (
            update(model)
            .where(criterion, model.meeting_link.is_(None))
            .values(meeting_link=meeting_link, version=model.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount:
            return meeting_link
        return await self.session.scalar(select(model.meeting_link).where(criterion))

    async def count_by_status(self, kind: EntityKindEnum) -> dict[str, int]:
        model = model_for(kind)
        stmt = select(model.status, func.count()).group_by(model.status)
        rows = (await self.session.execute(stmt)).all()
        return {str(status): int(count) for status, count in rows}

    async def list_scores(self, kind: EntityKindEnum) -> list[Decimal]:
        """Recorded scores of graded entities."""
        if not status_model.is_graded(kind):
            return []
        stmt = select(Enrollment.score).where(Enrollment.score.is_not(None))
        return list((await self.session.scalars(stmt)).all())

    async def sum_paid_revenue(self, kind: EntityKindEnum) -> Decimal:
        """Sum prices of entities whose payment has cleared."""
        if not status_model.has_payment(kind):
            return Decimal("0")
        model = model_for(kind)
        stmt = select(func.coalesce(func.sum(model.price), 0)).where(
            model.payment_status == PaymentStatusEnum.PAID,
        )
        return Decimal(str(await self.session.scalar(stmt) or 0))
