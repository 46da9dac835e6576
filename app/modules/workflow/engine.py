"""Pure workflow engine: (snapshot, action, payload) -> (snapshot, side effects)."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from app.core.enums import (
    EntityKindEnum,
    MentorshipBookingStatusEnum,
    PaymentStatusEnum,
    RequestStatusEnum,
    WorkflowActionEnum,
    WorkflowErrorCode,
)
from app.modules.workflow import status_model
from app.modules.workflow.effects import (
    AccrueRevenue,
    ScheduleCalendarEntry,
    SendCredentialsEmail,
    SendDecisionNotification,
    SideEffect,
    TransitionResult,
)
from app.modules.workflow.entities import Schedule, WorkflowEntity
from app.modules.workflow.schemas import TransitionPayload
from app.modules.workflow.status_model import LifecycleStatus
from app.shared.utils import utc_now

DEFAULT_SESSION_MINUTES = 60

_REASON_ACTIONS = frozenset({WorkflowActionEnum.REJECT, WorkflowActionEnum.CANCEL})


def transition(
    entity: WorkflowEntity,
    action: WorkflowActionEnum,
    payload: TransitionPayload | None = None,
    *,
    now: datetime | None = None,
) -> TransitionResult:
    """Validate an administrative action and compute the resulting state.

    The snapshot must reflect the latest persisted state; nothing is fetched
    or written here. Failures come back as typed results, never exceptions.
    """
    payload = payload or TransitionPayload()
    now = now or utc_now()
    kind = entity.kind

    if status_model.is_terminal(kind, entity.lifecycle_status):
        return TransitionResult.failure(
            WorkflowErrorCode.ALREADY_FINALIZED,
            f"{kind} {entity.id} is already {entity.lifecycle_status}",
        )

    if action in status_model.PAYMENT_ACTIONS:
        return _transition_payment(entity, action)

    if (
        action == WorkflowActionEnum.COMPLETE
        and status_model.has_payment(kind)
        and entity.payment_status != PaymentStatusEnum.PAID
    ):
        return TransitionResult.failure(
            WorkflowErrorCode.PAYMENT_REQUIRED,
            f"{kind} {entity.id} cannot be completed while payment is {entity.payment_status}",
        )

    target = status_model.lifecycle_target(kind, entity.lifecycle_status, action)
    if target is None and status_model.is_repeated_decision(kind, entity.lifecycle_status, action):
        return TransitionResult.failure(
            WorkflowErrorCode.ALREADY_FINALIZED,
            f"{kind} {entity.id} was already decided ({entity.lifecycle_status})",
        )
    if target is None:
        return TransitionResult.failure(
            WorkflowErrorCode.INVALID_TRANSITION,
            f"Cannot {action} {kind} in status {entity.lifecycle_status}",
        )

    schedule = entity.schedule
    if action == WorkflowActionEnum.APPROVE and status_model.requires_schedule_on_approve(kind):
        if payload.scheduled_date is None or not payload.scheduled_time:
            return TransitionResult.failure(
                WorkflowErrorCode.MISSING_SCHEDULE,
                "Scheduled date and time are required to approve a mentorship request",
            )
        schedule = Schedule(
            date=payload.scheduled_date,
            time_slot=payload.scheduled_time,
            duration_minutes=payload.duration_minutes or DEFAULT_SESSION_MINUTES,
            meeting_link=payload.meeting_link,
        )
    elif action == WorkflowActionEnum.CONFIRM:
        schedule = _merge_schedule(entity.schedule, payload)

    rejection_reason = entity.rejection_reason
    if action in _REASON_ACTIONS:
        rejection_reason = payload.reason

    score = entity.score
    if action == WorkflowActionEnum.COMPLETE and status_model.is_graded(kind) and payload.score is not None:
        score = payload.score

    accrue = _accrues_revenue(entity, target)
    updated = replace(
        entity,
        lifecycle_status=target,
        decided_at=entity.decided_at or now,
        schedule=schedule,
        rejection_reason=rejection_reason,
        revenue_accrued_at=now if accrue else entity.revenue_accrued_at,
        score=score,
    )
    return TransitionResult(
        snapshot=updated,
        effects=_compute_effects(updated, action, accrue=accrue),
        target_status=str(target),
    )


def _transition_payment(entity: WorkflowEntity, action: WorkflowActionEnum) -> TransitionResult:
    if not status_model.has_payment(entity.kind):
        return TransitionResult.failure(
            WorkflowErrorCode.INVALID_TRANSITION,
            f"{entity.kind} has no payment status",
        )

    current = entity.payment_status or PaymentStatusEnum.PENDING
    if status_model.is_payment_terminal(current):
        return TransitionResult.failure(
            WorkflowErrorCode.ALREADY_FINALIZED,
            f"Payment for {entity.kind} {entity.id} is already {current}",
        )

    target = status_model.payment_target(current, action)
    if target is None:
        return TransitionResult.failure(
            WorkflowErrorCode.INVALID_TRANSITION,
            f"Cannot {action} payment in status {current}",
        )
    return TransitionResult(
        snapshot=replace(entity, payment_status=target),
        target_status=str(target),
    )


def _merge_schedule(current: Schedule | None, payload: TransitionPayload) -> Schedule | None:
    """Overlay confirm-time scheduling details on the requested slot."""
    if (
        current is None
        and payload.scheduled_date is None
        and payload.scheduled_time is None
        and payload.meeting_link is None
    ):
        return None
    base = current or Schedule(date=None, time_slot=None, duration_minutes=DEFAULT_SESSION_MINUTES)
    return Schedule(
        date=payload.scheduled_date or base.date,
        time_slot=payload.scheduled_time or base.time_slot,
        duration_minutes=payload.duration_minutes or base.duration_minutes,
        meeting_link=payload.meeting_link or base.meeting_link,
    )


def _accrues_revenue(entity: WorkflowEntity, target: LifecycleStatus) -> bool:
    return (
        target in status_model.REVENUE_BEARING_STATUSES
        and entity.payment_status == PaymentStatusEnum.PAID
        and entity.revenue_accrued_at is None
        and entity.price is not None
        and entity.price > 0
    )


def _compute_effects(
    entity: WorkflowEntity,
    action: WorkflowActionEnum,
    *,
    accrue: bool,
) -> tuple[SideEffect, ...]:
    effects: list[SideEffect] = []

    if action == WorkflowActionEnum.APPROVE and status_model.issues_credentials_on_approve(entity.kind):
        effects.append(SendCredentialsEmail(user_ref=entity.owner_ref))

    effects.append(
        SendDecisionNotification(
            user_ref=entity.owner_ref,
            decision=str(entity.lifecycle_status).lower(),
            reason=entity.rejection_reason if action in _REASON_ACTIONS else None,
            counterpart_ref=entity.counterpart_ref,
        ),
    )

    schedule = entity.schedule
    if (
        action in (WorkflowActionEnum.APPROVE, WorkflowActionEnum.CONFIRM)
        and schedule is not None
        and schedule.date is not None
    ):
        effects.append(
            ScheduleCalendarEntry(
                date=schedule.date,
                time_slot=schedule.time_slot,
                duration_minutes=schedule.duration_minutes,
                meeting_link=schedule.meeting_link,
                attendee_refs=tuple(
                    ref for ref in (entity.owner_ref, entity.counterpart_ref) if ref is not None
                ),
            ),
        )

    if accrue and entity.price is not None:
        effects.append(AccrueRevenue(amount=Decimal(entity.price), currency=entity.currency))

    return tuple(effects)


def derive_mentorship_booking(
    request: WorkflowEntity,
    *,
    booking_id: UUID,
    price: Decimal | None = None,
) -> WorkflowEntity:
    """Build the mentorship booking that tracks payment for a decided request."""
    match request.lifecycle_status:
        case RequestStatusEnum.APPROVED:
            status = MentorshipBookingStatusEnum.CONFIRMED
        case RequestStatusEnum.COMPLETED:
            status = MentorshipBookingStatusEnum.COMPLETED
        case RequestStatusEnum.REJECTED:
            status = MentorshipBookingStatusEnum.CANCELLED
        case _:
            status = MentorshipBookingStatusEnum.PENDING

    return WorkflowEntity(
        id=booking_id,
        kind=EntityKindEnum.MENTORSHIP_BOOKING,
        lifecycle_status=status,
        requested_at=request.requested_at,
        payment_status=PaymentStatusEnum.PENDING,
        decided_at=request.decided_at,
        schedule=request.schedule,
        rejection_reason=request.rejection_reason,
        owner_ref=request.owner_ref,
        counterpart_ref=request.counterpart_ref,
        price=price if price is not None else request.price,
        currency=request.currency,
    )
