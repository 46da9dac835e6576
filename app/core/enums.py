"""Core enums used across modules."""

from enum import StrEnum


class EntityKindEnum(StrEnum):
    """Workflow entity kinds."""

    ENROLLMENT = "enrollment"
    MENTORSHIP_REQUEST = "mentorship_request"
    MENTORSHIP_BOOKING = "mentorship_booking"
    GUEST_BOOKING = "guest_booking"


class RequestStatusEnum(StrEnum):
    """Lifecycle status of enrollments and mentorship requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class MentorshipBookingStatusEnum(StrEnum):
    """Lifecycle status of mentorship bookings."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class GuestBookingStatusEnum(StrEnum):
    """Lifecycle status of guest bookings."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentStatusEnum(StrEnum):
    """Payment collection status."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class WorkflowActionEnum(StrEnum):
    """Administrative actions accepted by the workflow engine."""

    APPROVE = "approve"
    REJECT = "reject"
    COMPLETE = "complete"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    MARK_PAID = "mark_paid"
    MARK_FAILED = "mark_failed"
    REFUND = "refund"


class WorkflowErrorCode(StrEnum):
    """Typed workflow failures."""

    INVALID_TRANSITION = "invalid_transition"
    MISSING_SCHEDULE = "missing_schedule"
    PAYMENT_REQUIRED = "payment_required"
    ALREADY_FINALIZED = "already_finalized"


class SideEffectTypeEnum(StrEnum):
    """Side effects computed by workflow transitions."""

    SEND_CREDENTIALS_EMAIL = "send_credentials_email"
    SEND_DECISION_NOTIFICATION = "send_decision_notification"
    SCHEDULE_CALENDAR_ENTRY = "schedule_calendar_entry"
    ACCRUE_REVENUE = "accrue_revenue"


class CourseLevelEnum(StrEnum):
    """Course difficulty level."""

    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class NotificationStatusEnum(StrEnum):
    """Notification delivery status."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class OutboxStatusEnum(StrEnum):
    """Outbox event status for side-effect dispatch."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
