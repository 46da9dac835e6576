"""Workflow ORM models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin, VersionMixin
from app.core.enums import (
    GuestBookingStatusEnum,
    MentorshipBookingStatusEnum,
    PaymentStatusEnum,
    RequestStatusEnum,
)
from app.shared.utils import utc_now


class WorkflowColumnsMixin(VersionMixin):
    """Columns shared by every workflow entity table."""

    owner_ref: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    counterpart_ref: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    scheduled_time: Mapped[str | None] = mapped_column(String(32), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    meeting_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(512), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    revenue_accrued_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Enrollment(WorkflowColumnsMixin, BaseModelMixin, Base):
    """Course enrollment request."""

    __tablename__ = "enrollments"

    course_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("courses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status: Mapped[RequestStatusEnum] = mapped_column(
        SAEnum(RequestStatusEnum, name="request_status_enum", native_enum=False),
        default=RequestStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)


class MentorshipRequest(WorkflowColumnsMixin, BaseModelMixin, Base):
    """Mentorship session request awaiting scheduling."""

    __tablename__ = "mentorship_requests"

    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    preferred_topics: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    status: Mapped[RequestStatusEnum] = mapped_column(
        SAEnum(RequestStatusEnum, name="request_status_enum", native_enum=False),
        default=RequestStatusEnum.PENDING,
        nullable=False,
        index=True,
    )


class MentorshipBooking(WorkflowColumnsMixin, BaseModelMixin, Base):
    """Paid mentorship session derived from an approved request."""

    __tablename__ = "mentorship_bookings"

    request_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("mentorship_requests.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    status: Mapped[MentorshipBookingStatusEnum] = mapped_column(
        SAEnum(MentorshipBookingStatusEnum, name="mentorship_booking_status_enum", native_enum=False),
        default=MentorshipBookingStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    payment_status: Mapped[PaymentStatusEnum] = mapped_column(
        SAEnum(PaymentStatusEnum, name="payment_status_enum", native_enum=False),
        default=PaymentStatusEnum.PENDING,
        nullable=False,
        index=True,
    )


class GuestBooking(WorkflowColumnsMixin, BaseModelMixin, Base):
    """Session booked by a visitor without an account."""

    __tablename__ = "guest_bookings"

    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    preferred_topics: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    status: Mapped[GuestBookingStatusEnum] = mapped_column(
        SAEnum(GuestBookingStatusEnum, name="guest_booking_status_enum", native_enum=False),
        default=GuestBookingStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    payment_status: Mapped[PaymentStatusEnum] = mapped_column(
        SAEnum(PaymentStatusEnum, name="payment_status_enum", native_enum=False),
        default=PaymentStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
