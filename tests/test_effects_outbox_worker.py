from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from app.core.enums import NotificationStatusEnum, OutboxStatusEnum
from app.modules.effects.calendar import MeetingLinkProvisioner, generate_meeting_code
from app.modules.effects.outbox_worker import EffectsOutboxWorker
from app.modules.workflow.effects import (
    AccrueRevenue,
    ScheduleCalendarEntry,
    SendCredentialsEmail,
    SendDecisionNotification,
)

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)
BOOKING_ID = UUID("6f1c2a34-0000-4000-8000-000000000001")


@dataclass
class FakeOutboxEvent:
    id: UUID
    event_type: str
    payload: dict
    aggregate_type: str = "guest_booking"
    aggregate_id: str = str(BOOKING_ID)
    idempotency_key: str = field(default_factory=lambda: f"key-{uuid4()}")
    status: OutboxStatusEnum = OutboxStatusEnum.PENDING
    retries: int = 0
    occurred_at: datetime = field(default_factory=lambda: NOW)
    updated_at: datetime = field(default_factory=lambda: NOW)
    processed_at: datetime | None = None
    error_message: str | None = None


def make_event(effect, **overrides) -> FakeOutboxEvent:
    return FakeOutboxEvent(id=uuid4(), event_type=str(effect.effect_type), payload=effect.to_payload(), **overrides)


@dataclass
class FakeNotification:
    id: UUID
    recipient_ref: str
    channel: str
    template: str
    title: str
    body: str
    status: NotificationStatusEnum = NotificationStatusEnum.PENDING
    sent_at: datetime | None = None


class FakeAuditRepository:
    def __init__(self, events: list[FakeOutboxEvent]) -> None:
        self.events = events

    async def list_pending_outbox(self, limit: int) -> list[FakeOutboxEvent]:
        return [event for event in self.events if event.status == OutboxStatusEnum.PENDING][:limit]

    async def list_failed_outbox(self, limit: int, max_retries: int) -> list[FakeOutboxEvent]:
        return [
            event
            for event in self.events
            if event.status == OutboxStatusEnum.FAILED and event.retries < max_retries
        ][:limit]

    async def mark_outbox_pending(self, event: FakeOutboxEvent) -> FakeOutboxEvent:
        event.status = OutboxStatusEnum.PENDING
        event.error_message = None
        return event

    async def mark_outbox_processed(self, event: FakeOutboxEvent, processed_at: datetime) -> FakeOutboxEvent:
        event.status = OutboxStatusEnum.PROCESSED
        event.processed_at = processed_at
        event.error_message = None
        return event

    async def mark_outbox_failed(self, event: FakeOutboxEvent, error_message: str) -> FakeOutboxEvent:
        event.status = OutboxStatusEnum.FAILED
        event.retries += 1
        event.error_message = error_message
        return event


class FakeNotificationsRepository:
    def __init__(self) -> None:
        self.notifications: list[FakeNotification] = []

    async def create_notification(self, recipient_ref, channel, template, title, body) -> FakeNotification:
        notification = FakeNotification(uuid4(), recipient_ref, channel, template, title, body)
        self.notifications.append(notification)
        return notification

    async def set_status(self, notification, status, sent_at) -> FakeNotification:
        notification.status = status
        notification.sent_at = sent_at
        return notification


class FakeRevenueRepository:
    def __init__(self) -> None:
        self.entries: dict[str, dict] = {}

    async def append(self, aggregate_type, aggregate_id, amount, currency, idempotency_key) -> dict | None:
        if idempotency_key in self.entries:
            return None
        entry = {
            "aggregate_type": aggregate_type,
            "aggregate_id": aggregate_id,
            "amount": amount,
            "currency": currency,
        }
        self.entries[idempotency_key] = entry
        return entry


class FakeWorkflowRepository:
    def __init__(self, links: dict[UUID, str | None] | None = None) -> None:
        self.links = links or {}
        self.versions: dict[UUID, int] = {entity_id: 1 for entity_id in self.links}

    async def attach_meeting_link(self, kind, entity_id: UUID, meeting_link: str) -> str | None:
        if entity_id not in self.links:
            return None
        if self.links[entity_id] is None:
            self.links[entity_id] = meeting_link
            self.versions[entity_id] += 1
        return self.links[entity_id]


class FixedCalendar:
    async def provision(self, entry: ScheduleCalendarEntry) -> str:
        return entry.meeting_link or "https://meet.example.com/fixed-code"


def make_worker(
    events: list[FakeOutboxEvent],
    *,
    now: datetime = NOW,
    workflow_repo: FakeWorkflowRepository | None = None,
) -> tuple[EffectsOutboxWorker, FakeNotificationsRepository, FakeRevenueRepository]:
    notifications_repo = FakeNotificationsRepository()
    revenue_repo = FakeRevenueRepository()
    worker = EffectsOutboxWorker(
        audit_repository=FakeAuditRepository(events),  # type: ignore[arg-type]
        notifications_repository=notifications_repo,  # type: ignore[arg-type]
        revenue_repository=revenue_repo,  # type: ignore[arg-type]
        workflow_repository=workflow_repo or FakeWorkflowRepository(),  # type: ignore[arg-type]
        calendar=FixedCalendar(),
        now_provider=lambda: now,
        base_backoff_seconds=30,
    )
    return worker, notifications_repo, revenue_repo


@pytest.mark.asyncio
async def test_credentials_email_becomes_sent_notification() -> None:
    event = make_event(SendCredentialsEmail(user_ref="student-1"), aggregate_type="enrollment")
    worker, notifications_repo, _ = make_worker([event])

    stats = await worker.run_once()

    assert stats == {"requeued": 0, "processed": 1, "failed": 0, "dispatched": 1}
    assert event.status == OutboxStatusEnum.PROCESSED
    (notification,) = notifications_repo.notifications
    assert notification.recipient_ref == "student-1"
    assert notification.template == "credentials"
    assert notification.status == NotificationStatusEnum.SENT
    assert notification.sent_at == NOW


@pytest.mark.asyncio
async def test_decision_notification_reaches_owner_and_counterpart() -> None:
    effect = SendDecisionNotification(
        user_ref="student-1",
        decision="rejected",
        reason="Fully booked",
        counterpart_ref="mentor-7",
    )
    worker, notifications_repo, _ = make_worker([make_event(effect, aggregate_type="mentorship_request")])

    stats = await worker.run_once()

    assert stats["dispatched"] == 2
    assert [item.recipient_ref for item in notifications_repo.notifications] == ["student-1", "mentor-7"]
    assert "Reason: Fully booked" in notifications_repo.notifications[0].body
    assert notifications_repo.notifications[0].title == "Mentorship request rejected"


@pytest.mark.asyncio
async def test_calendar_entry_notifies_attendees_with_meeting_link() -> None:
    effect = ScheduleCalendarEntry(
        date=date(2026, 3, 10),
        time_slot="14:00",
        duration_minutes=60,
        attendee_refs=("guest@example.com", "mentor-7"),
    )
    worker, notifications_repo, _ = make_worker([make_event(effect)])

    await worker.run_once()

    assert len(notifications_repo.notifications) == 2
    assert all("https://meet.example.com/fixed-code" in item.body for item in notifications_repo.notifications)


@pytest.mark.asyncio
async def test_generated_meeting_link_is_stored_on_the_booking() -> None:
    effect = ScheduleCalendarEntry(date=date(2026, 3, 10), time_slot="14:00", duration_minutes=60)
    event = make_event(effect, aggregate_id=str(BOOKING_ID))
    workflow_repo = FakeWorkflowRepository({BOOKING_ID: None})
    worker, _, _ = make_worker([event], workflow_repo=workflow_repo)

    await worker.run_once()

    assert workflow_repo.links[BOOKING_ID] == "https://meet.example.com/fixed-code"
    assert workflow_repo.versions[BOOKING_ID] == 2


@pytest.mark.asyncio
async def test_retried_calendar_entry_reuses_stored_link() -> None:
    effect = ScheduleCalendarEntry(
        date=date(2026, 3, 10),
        time_slot="14:00",
        duration_minutes=60,
        attendee_refs=("guest@example.com",),
    )
    workflow_repo = FakeWorkflowRepository({BOOKING_ID: "https://meet.example.com/first-code"})
    worker, notifications_repo, _ = make_worker(
        [make_event(effect, aggregate_id=str(BOOKING_ID))],
        workflow_repo=workflow_repo,
    )

    await worker.run_once()

    assert workflow_repo.versions[BOOKING_ID] == 1
    (notification,) = notifications_repo.notifications
    assert notification.body.endswith("Join at https://meet.example.com/first-code")


@pytest.mark.asyncio
async def test_manual_meeting_link_is_not_written_back() -> None:
    effect = ScheduleCalendarEntry(
        date=date(2026, 3, 10),
        time_slot="14:00",
        duration_minutes=60,
        meeting_link="https://zoom.example.com/j/1",
    )
    workflow_repo = FakeWorkflowRepository({BOOKING_ID: None})
    worker, _, _ = make_worker([make_event(effect, aggregate_id=str(BOOKING_ID))], workflow_repo=workflow_repo)

    await worker.run_once()

    assert workflow_repo.links[BOOKING_ID] is None


@pytest.mark.asyncio
async def test_revenue_is_booked_once_per_idempotency_key() -> None:
    effect = AccrueRevenue(amount=Decimal("75.00"), currency="USD")
    first = make_event(effect, idempotency_key="guest_booking:b-1:COMPLETED:accrue_revenue")
    replay = make_event(effect, idempotency_key="guest_booking:b-1:COMPLETED:accrue_revenue")
    worker, notifications_repo, revenue_repo = make_worker([first, replay])

    stats = await worker.run_once()

    assert stats == {"requeued": 0, "processed": 2, "failed": 0, "dispatched": 1}
    assert revenue_repo.entries["guest_booking:b-1:COMPLETED:accrue_revenue"]["amount"] == Decimal("75.00")
    assert notifications_repo.notifications == []


@pytest.mark.asyncio
async def test_missing_recipient_marks_event_failed() -> None:
    event = make_event(SendCredentialsEmail(user_ref=None))
    worker, notifications_repo, _ = make_worker([event])

    stats = await worker.run_once()

    assert stats["failed"] == 1
    assert event.status == OutboxStatusEnum.FAILED
    assert event.retries == 1
    assert notifications_repo.notifications == []


@pytest.mark.asyncio
async def test_unknown_effect_type_marks_event_failed() -> None:
    event = FakeOutboxEvent(id=uuid4(), event_type="issue_certificate", payload={})
    worker, _, _ = make_worker([event])

    stats = await worker.run_once()

    assert stats["failed"] == 1
    assert event.status == OutboxStatusEnum.FAILED


@pytest.mark.asyncio
async def test_failed_event_is_requeued_after_backoff() -> None:
    event = make_event(
        SendCredentialsEmail(user_ref="student-1"),
        status=OutboxStatusEnum.FAILED,
        retries=1,
        updated_at=NOW - timedelta(minutes=2),
    )
    worker, notifications_repo, _ = make_worker([event])

    stats = await worker.run_once()

    assert stats["requeued"] == 1
    assert stats["processed"] == 1
    assert len(notifications_repo.notifications) == 1


@pytest.mark.asyncio
async def test_failed_event_waits_for_backoff() -> None:
    event = make_event(
        SendCredentialsEmail(user_ref="student-1"),
        status=OutboxStatusEnum.FAILED,
        retries=3,
        updated_at=NOW - timedelta(seconds=60),
    )
    worker, _, _ = make_worker([event])

    stats = await worker.run_once()

    assert stats == {"requeued": 0, "processed": 0, "failed": 0, "dispatched": 0}
    assert event.status == OutboxStatusEnum.FAILED


@pytest.mark.asyncio
async def test_meeting_link_provisioner_prefers_manual_link() -> None:
    provisioner = MeetingLinkProvisioner(base_url="https://meet.example.com/")
    manual = ScheduleCalendarEntry(
        date=date(2026, 3, 10),
        time_slot="14:00",
        duration_minutes=60,
        meeting_link="https://zoom.example.com/j/1",
    )
    generated = ScheduleCalendarEntry(date=date(2026, 3, 10), time_slot="14:00", duration_minutes=60)

    assert await provisioner.provision(manual) == "https://zoom.example.com/j/1"
    link = await provisioner.provision(generated)
    assert link.startswith("https://meet.example.com/")
    assert link.count("/") == 3


def test_generated_meeting_code_shape() -> None:
    code = generate_meeting_code()

    assert [len(part) for part in code.split("-")] == [3, 4, 3]
    assert code.replace("-", "").isalpha()
