"""Initial schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


course_level_enum = sa.Enum("BEGINNER", "INTERMEDIATE", "ADVANCED", name="course_level_enum", native_enum=False)
request_status_enum = sa.Enum(
    "pending",
    "approved",
    "rejected",
    "completed",
    name="request_status_enum",
    native_enum=False,
)
mentorship_booking_status_enum = sa.Enum(
    "pending",
    "confirmed",
    "completed",
    "cancelled",
    name="mentorship_booking_status_enum",
    native_enum=False,
)
guest_booking_status_enum = sa.Enum(
    "PENDING",
    "CONFIRMED",
    "COMPLETED",
    "CANCELLED",
    name="guest_booking_status_enum",
    native_enum=False,
)
payment_status_enum = sa.Enum(
    "pending",
    "paid",
    "failed",
    "refunded",
    "cancelled",
    name="payment_status_enum",
    native_enum=False,
)
notification_status_enum = sa.Enum("pending", "sent", "failed", name="notification_status_enum", native_enum=False)
outbox_status_enum = sa.Enum("pending", "processed", "failed", name="outbox_status_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def _workflow_cols() -> list[sa.Column]:
    return [
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("owner_ref", sa.String(length=255), nullable=True),
        sa.Column("counterpart_ref", sa.String(length=255), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("scheduled_time", sa.String(length=32), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("meeting_link", sa.String(length=512), nullable=True),
        sa.Column("rejection_reason", sa.String(length=512), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("revenue_accrued_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "courses",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration_hours", sa.Integer(), nullable=False),
        sa.Column("level", course_level_enum, nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("series_name", sa.String(length=255), nullable=True),
        sa.Column("part_number", sa.Integer(), nullable=True),
    )
    op.create_index("ix_courses_series_name", "courses", ["series_name"], unique=False)

    op.create_table(
        "enrollments",
        _id_col(),
        _created_col(),
        _updated_col(),
        *_workflow_cols(),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", request_status_enum, nullable=False),
        sa.Column("score", sa.Numeric(5, 2), nullable=True),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], name="fk_enrollments_course_id_courses", ondelete="SET NULL"),
    )
    op.create_index("ix_enrollments_owner_ref", "enrollments", ["owner_ref"], unique=False)
    op.create_index("ix_enrollments_counterpart_ref", "enrollments", ["counterpart_ref"], unique=False)
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"], unique=False)
    op.create_index("ix_enrollments_status", "enrollments", ["status"], unique=False)

    op.create_table(
        "mentorship_requests",
        _id_col(),
        _created_col(),
        _updated_col(),
        *_workflow_cols(),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("preferred_topics", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", request_status_enum, nullable=False),
    )
    op.create_index("ix_mentorship_requests_owner_ref", "mentorship_requests", ["owner_ref"], unique=False)
    op.create_index("ix_mentorship_requests_counterpart_ref", "mentorship_requests", ["counterpart_ref"], unique=False)
    op.create_index("ix_mentorship_requests_status", "mentorship_requests", ["status"], unique=False)

    op.create_table(
        "mentorship_bookings",
        _id_col(),
        _created_col(),
        _updated_col(),
        *_workflow_cols(),
        sa.Column("request_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", mentorship_booking_status_enum, nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.ForeignKeyConstraint(
            ["request_id"],
            ["mentorship_requests.id"],
            name="fk_mentorship_bookings_request_id_mentorship_requests",
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint("request_id", name="uq_mentorship_bookings_request_id"),
    )
    op.create_index("ix_mentorship_bookings_owner_ref", "mentorship_bookings", ["owner_ref"], unique=False)
    op.create_index("ix_mentorship_bookings_counterpart_ref", "mentorship_bookings", ["counterpart_ref"], unique=False)
    op.create_index("ix_mentorship_bookings_status", "mentorship_bookings", ["status"], unique=False)
    op.create_index("ix_mentorship_bookings_payment_status", "mentorship_bookings", ["payment_status"], unique=False)

    op.create_table(
        "guest_bookings",
        _id_col(),
        _created_col(),
        _updated_col(),
        *_workflow_cols(),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("preferred_topics", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", guest_booking_status_enum, nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
    )
    op.create_index("ix_guest_bookings_owner_ref", "guest_bookings", ["owner_ref"], unique=False)
    op.create_index("ix_guest_bookings_counterpart_ref", "guest_bookings", ["counterpart_ref"], unique=False)
    op.create_index("ix_guest_bookings_status", "guest_bookings", ["status"], unique=False)
    op.create_index("ix_guest_bookings_payment_status", "guest_bookings", ["payment_status"], unique=False)

    op.create_table(
        "notifications",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("recipient_ref", sa.String(length=255), nullable=False),
        sa.Column("channel", sa.String(length=32), nullable=False),
        sa.Column("template", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("status", notification_status_enum, nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notifications_recipient_ref", "notifications", ["recipient_ref"], unique=False)
    op.create_index("ix_notifications_status", "notifications", ["status"], unique=False)

    op.create_table(
        "revenue_entries",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("aggregate_type", sa.String(length=64), nullable=False),
        sa.Column("aggregate_id", sa.String(length=128), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.UniqueConstraint("idempotency_key", name="uq_revenue_entries_idempotency_key"),
    )
    op.create_index("ix_revenue_entries_aggregate_type", "revenue_entries", ["aggregate_type"], unique=False)
    op.create_index("ix_revenue_entries_aggregate_id", "revenue_entries", ["aggregate_id"], unique=False)

    op.create_table(
        "audit_logs",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("actor_ref", sa.String(length=255), nullable=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("entity_type", sa.String(length=128), nullable=False),
        sa.Column("entity_id", sa.String(length=128), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    )
    op.create_index("ix_audit_logs_actor_ref", "audit_logs", ["actor_ref"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)

    op.create_table(
        "outbox_events",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("aggregate_type", sa.String(length=128), nullable=False),
        sa.Column("aggregate_id", sa.String(length=128), nullable=False),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", outbox_status_enum, nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("retries", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.UniqueConstraint("idempotency_key", name="uq_outbox_events_idempotency_key"),
    )
    op.create_index("ix_outbox_events_aggregate_type", "outbox_events", ["aggregate_type"], unique=False)
    op.create_index("ix_outbox_events_aggregate_id", "outbox_events", ["aggregate_id"], unique=False)
    op.create_index("ix_outbox_events_event_type", "outbox_events", ["event_type"], unique=False)
    op.create_index("ix_outbox_events_status", "outbox_events", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_outbox_events_status", table_name="outbox_events")
    op.drop_index("ix_outbox_events_event_type", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_id", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_type", table_name="outbox_events")
    op.drop_table("outbox_events")

    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_ref", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_revenue_entries_aggregate_id", table_name="revenue_entries")
    op.drop_index("ix_revenue_entries_aggregate_type", table_name="revenue_entries")
    op.drop_table("revenue_entries")

    op.drop_index("ix_notifications_status", table_name="notifications")
    op.drop_index("ix_notifications_recipient_ref", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_guest_bookings_payment_status", table_name="guest_bookings")
    op.drop_index("ix_guest_bookings_status", table_name="guest_bookings")
    op.drop_index("ix_guest_bookings_counterpart_ref", table_name="guest_bookings")
    op.drop_index("ix_guest_bookings_owner_ref", table_name="guest_bookings")
    op.drop_table("guest_bookings")

    op.drop_index("ix_mentorship_bookings_payment_status", table_name="mentorship_bookings")
    op.drop_index("ix_mentorship_bookings_status", table_name="mentorship_bookings")
    op.drop_index("ix_mentorship_bookings_counterpart_ref", table_name="mentorship_bookings")
    op.drop_index("ix_mentorship_bookings_owner_ref", table_name="mentorship_bookings")
    op.drop_table("mentorship_bookings")

    op.drop_index("ix_mentorship_requests_status", table_name="mentorship_requests")
    op.drop_index("ix_mentorship_requests_counterpart_ref", table_name="mentorship_requests")
    op.drop_index("ix_mentorship_requests_owner_ref", table_name="mentorship_requests")
    op.drop_table("mentorship_requests")

    op.drop_index("ix_enrollments_status", table_name="enrollments")
    op.drop_index("ix_enrollments_course_id", table_name="enrollments")
    op.drop_index("ix_enrollments_counterpart_ref", table_name="enrollments")
    op.drop_index("ix_enrollments_owner_ref", table_name="enrollments")
    op.drop_table("enrollments")

    op.drop_index("ix_courses_series_name", table_name="courses")
    op.drop_table("courses")
