"""Per-kind lifecycle tables and the orthogonal payment table.

Every workflow entity kind owns a closed set of lifecycle statuses and a
table of ``(status, action) -> target`` edges. Statuses without outgoing
edges are terminal. Kinds that involve money additionally carry a payment
status that moves along its own table, independent of the lifecycle.
"""

from __future__ import annotations

from typing import Final, TypeAlias, assert_never

from app.core.enums import (
    EntityKindEnum,
    GuestBookingStatusEnum,
    MentorshipBookingStatusEnum,
    PaymentStatusEnum,
    RequestStatusEnum,
    WorkflowActionEnum,
)

LifecycleStatus: TypeAlias = RequestStatusEnum | MentorshipBookingStatusEnum | GuestBookingStatusEnum
TransitionTable: TypeAlias = dict[tuple[LifecycleStatus, WorkflowActionEnum], LifecycleStatus]

A = WorkflowActionEnum

_REQUEST_TRANSITIONS: Final[TransitionTable] = {
    (RequestStatusEnum.PENDING, A.APPROVE): RequestStatusEnum.APPROVED,
    (RequestStatusEnum.PENDING, A.REJECT): RequestStatusEnum.REJECTED,
    (RequestStatusEnum.APPROVED, A.COMPLETE): RequestStatusEnum.COMPLETED,
}

_MENTORSHIP_BOOKING_TRANSITIONS: Final[TransitionTable] = {
    (MentorshipBookingStatusEnum.PENDING, A.CONFIRM): MentorshipBookingStatusEnum.CONFIRMED,
    (MentorshipBookingStatusEnum.PENDING, A.CANCEL): MentorshipBookingStatusEnum.CANCELLED,
    (MentorshipBookingStatusEnum.CONFIRMED, A.COMPLETE): MentorshipBookingStatusEnum.COMPLETED,
    (MentorshipBookingStatusEnum.CONFIRMED, A.CANCEL): MentorshipBookingStatusEnum.CANCELLED,
}

_GUEST_BOOKING_TRANSITIONS: Final[TransitionTable] = {
    (GuestBookingStatusEnum.PENDING, A.CONFIRM): GuestBookingStatusEnum.CONFIRMED,
    (GuestBookingStatusEnum.PENDING, A.CANCEL): GuestBookingStatusEnum.CANCELLED,
    (GuestBookingStatusEnum.CONFIRMED, A.COMPLETE): GuestBookingStatusEnum.COMPLETED,
    (GuestBookingStatusEnum.CONFIRMED, A.CANCEL): GuestBookingStatusEnum.CANCELLED,
}

PAYMENT_TRANSITIONS: Final[dict[tuple[PaymentStatusEnum, WorkflowActionEnum], PaymentStatusEnum]] = {
    (PaymentStatusEnum.PENDING, A.MARK_PAID): PaymentStatusEnum.PAID,
    (PaymentStatusEnum.PENDING, A.MARK_FAILED): PaymentStatusEnum.FAILED,
    (PaymentStatusEnum.PAID, A.REFUND): PaymentStatusEnum.REFUNDED,
}

PAYMENT_ACTIONS: Final[frozenset[WorkflowActionEnum]] = frozenset(
    {A.MARK_PAID, A.MARK_FAILED, A.REFUND},
)

REVENUE_BEARING_STATUSES: Final[frozenset[LifecycleStatus]] = frozenset(
    {
        RequestStatusEnum.APPROVED,
        RequestStatusEnum.COMPLETED,
        MentorshipBookingStatusEnum.CONFIRMED,
        MentorshipBookingStatusEnum.COMPLETED,
        GuestBookingStatusEnum.CONFIRMED,
        GuestBookingStatusEnum.COMPLETED,
    },
)


def transition_table(kind: EntityKindEnum) -> TransitionTable:
    """Return lifecycle edges for an entity kind."""
    match kind:
        case EntityKindEnum.ENROLLMENT | EntityKindEnum.MENTORSHIP_REQUEST:
            return _REQUEST_TRANSITIONS
        case EntityKindEnum.MENTORSHIP_BOOKING:
            return _MENTORSHIP_BOOKING_TRANSITIONS
        case EntityKindEnum.GUEST_BOOKING:
            return _GUEST_BOOKING_TRANSITIONS
        case _:
            assert_never(kind)


def status_enum(kind: EntityKindEnum) -> type[LifecycleStatus]:
    """Return the closed lifecycle status set for an entity kind."""
    match kind:
        case EntityKindEnum.ENROLLMENT | EntityKindEnum.MENTORSHIP_REQUEST:
            return RequestStatusEnum
        case EntityKindEnum.MENTORSHIP_BOOKING:
            return MentorshipBookingStatusEnum
        case EntityKindEnum.GUEST_BOOKING:
            return GuestBookingStatusEnum
        case _:
            assert_never(kind)


def parse_status(kind: EntityKindEnum, value: str) -> LifecycleStatus:
    """Parse a raw status token into the kind's lifecycle enum."""
    return status_enum(kind)(value)


def initial_status(kind: EntityKindEnum) -> LifecycleStatus:
    """Every kind starts in its pending state."""
    match kind:
        case EntityKindEnum.ENROLLMENT | EntityKindEnum.MENTORSHIP_REQUEST:
            return RequestStatusEnum.PENDING
        case EntityKindEnum.MENTORSHIP_BOOKING:
            return MentorshipBookingStatusEnum.PENDING
        case EntityKindEnum.GUEST_BOOKING:
            return GuestBookingStatusEnum.PENDING
        case _:
            assert_never(kind)


def has_payment(kind: EntityKindEnum) -> bool:
    """Return True for kinds that carry a payment status."""
    match kind:
        case EntityKindEnum.ENROLLMENT | EntityKindEnum.MENTORSHIP_REQUEST:
            return False
        case EntityKindEnum.MENTORSHIP_BOOKING | EntityKindEnum.GUEST_BOOKING:
            return True
        case _:
            assert_never(kind)


def requires_schedule_on_approve(kind: EntityKindEnum) -> bool:
    return kind == EntityKindEnum.MENTORSHIP_REQUEST


def issues_credentials_on_approve(kind: EntityKindEnum) -> bool:
    return kind == EntityKindEnum.ENROLLMENT


def is_graded(kind: EntityKindEnum) -> bool:
    """Return True for kinds that record a score when completed."""
    return kind == EntityKindEnum.ENROLLMENT


def lifecycle_target(
    kind: EntityKindEnum,
    status: LifecycleStatus,
    action: WorkflowActionEnum,
) -> LifecycleStatus | None:
    """Return the target status of a lifecycle edge, or None if illegal."""
    return transition_table(kind).get((status, action))


def payment_target(
    status: PaymentStatusEnum,
    action: WorkflowActionEnum,
) -> PaymentStatusEnum | None:
    """Return the target payment status, or None if illegal."""
    return PAYMENT_TRANSITIONS.get((status, action))


def is_terminal(kind: EntityKindEnum, status: LifecycleStatus) -> bool:
    """Return True when no lifecycle edge leaves the status."""
    return not any(source == status for source, _ in transition_table(kind))


def is_payment_terminal(status: PaymentStatusEnum) -> bool:
    return not any(source == status for source, _ in PAYMENT_TRANSITIONS)


def is_initial(kind: EntityKindEnum, status: LifecycleStatus) -> bool:
    return status == initial_status(kind)


def reachable_statuses(kind: EntityKindEnum) -> frozenset[LifecycleStatus]:
    """Return the closure of lifecycle statuses reachable from pending."""
    table = transition_table(kind)
    seen: set[LifecycleStatus] = {initial_status(kind)}
    frontier = [initial_status(kind)]
    while frontier:
        current = frontier.pop()
        for (source, _), target in table.items():
            if source == current and target not in seen:
                seen.add(target)
                frontier.append(target)
    return frozenset(seen)


def is_repeated_decision(
    kind: EntityKindEnum,
    status: LifecycleStatus,
    action: WorkflowActionEnum,
) -> bool:
    """Return True when ``action`` decides a pending entity that was already decided.

    Approving an approved enrollment or confirming a confirmed booking is a
    double-submit rather than a malformed request.
    """
    if is_initial(kind, status):
        return False
    return lifecycle_target(kind, initial_status(kind), action) is not None
