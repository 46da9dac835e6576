"""Outbox consumer that executes workflow side effects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from app.core.enums import EntityKindEnum, NotificationStatusEnum
from app.core.metrics import record_effect_dispatch
from app.modules.audit.models import OutboxEvent
from app.modules.audit.repository import AuditRepository
from app.modules.effects.calendar import CalendarProvisioner, MeetingLinkProvisioner
from app.modules.notifications.repository import NotificationsRepository
from app.modules.revenue.repository import RevenueLedgerRepository
from app.modules.workflow.effects import (
    AccrueRevenue,
    ScheduleCalendarEntry,
    SendCredentialsEmail,
    SendDecisionNotification,
    SideEffect,
    effect_from_payload,
)
from app.modules.workflow.repository import WorkflowRepository
from app.shared.utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NotificationMessage:
    recipient_ref: str
    template: str
    title: str
    body: str
    channel: str = "email"


class EffectsOutboxWorker:
    """Process pending outbox events through notification, calendar, revenue and workflow collaborators."""

    def __init__(
        self,
        audit_repository: AuditRepository,
        notifications_repository: NotificationsRepository,
        revenue_repository: RevenueLedgerRepository,
        workflow_repository: WorkflowRepository,
        calendar: CalendarProvisioner | None = None,
        *,
        batch_size: int = 100,
        max_retries: int = 5,
        base_backoff_seconds: int = 30,
        max_backoff_seconds: int = 300,
        now_provider=utc_now,
    ) -> None:
        self.audit_repository = audit_repository
        self.notifications_repository = notifications_repository
        self.revenue_repository = revenue_repository
        self.workflow_repository = workflow_repository
        self.calendar = calendar or MeetingLinkProvisioner()
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.base_backoff_seconds = base_backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds
        self.now_provider = now_provider

    async def run_once(self) -> dict[str, int]:
        """Run one processing cycle."""
        stats = {"requeued": 0, "processed": 0, "failed": 0, "dispatched": 0}
        stats["requeued"] = await self._requeue_retryable_failed_events()

        events = await self.audit_repository.list_pending_outbox(limit=self.batch_size)
        for event in events:
            try:
                effect = effect_from_payload(event.event_type, event.payload or {})
                stats["dispatched"] += await self._dispatch(event, effect)
                await self.audit_repository.mark_outbox_processed(event, self.now_provider())
                record_effect_dispatch(event.event_type, "processed")
                stats["processed"] += 1
            except Exception as exc:
                logger.warning("Outbox event %s (%s) failed: %s", event.id, event.event_type, exc)
                await self.audit_repository.mark_outbox_failed(event, str(exc))
                record_effect_dispatch(event.event_type, "failed")
                stats["failed"] += 1
        return stats

    async def _requeue_retryable_failed_events(self) -> int:
        now = self.now_provider()
        failed_events = await self.audit_repository.list_failed_outbox(
            limit=self.batch_size,
            max_retries=self.max_retries,
        )
        requeued = 0
        for event in failed_events:
            if self._is_backoff_elapsed(event, now):
                await self.audit_repository.mark_outbox_pending(event)
                requeued += 1
        return requeued

    def _is_backoff_elapsed(self, event: OutboxEvent, now: datetime) -> bool:
        retries = max(event.retries, 1)
        backoff_seconds = min(
            self.max_backoff_seconds,
            self.base_backoff_seconds * (2 ** (retries - 1)),
        )
        last_attempt_at = event.updated_at or event.occurred_at
        return now >= last_attempt_at + timedelta(seconds=backoff_seconds)

    async def _dispatch(self, event: OutboxEvent, effect: SideEffect) -> int:
        """Execute one effect and return how many deliveries it produced."""
        match effect:
            case AccrueRevenue():
                entry = await self.revenue_repository.append(
                    aggregate_type=event.aggregate_type,
                    aggregate_id=event.aggregate_id,
                    amount=effect.amount,
                    currency=effect.currency,
                    idempotency_key=event.idempotency_key,
                )
                if entry is None:
                    logger.info("Revenue for %s already booked", event.idempotency_key)
                    return 0
                return 1
            case ScheduleCalendarEntry():
                meeting_link = await self.calendar.provision(effect)
                if effect.meeting_link is None:
                    meeting_link = await self._store_meeting_link(event, meeting_link)
                messages = self._calendar_messages(effect, meeting_link)
            case SendCredentialsEmail() | SendDecisionNotification():
                messages = self._build_messages(event, effect)

        for message in messages:
            notification = await self.notifications_repository.create_notification(
                recipient_ref=message.recipient_ref,
                channel=message.channel,
                template=message.template,
                title=message.title,
                body=message.body,
            )
            await self.notifications_repository.set_status(
                notification,
                NotificationStatusEnum.SENT,
                self.now_provider(),
            )
        return len(messages)

    async def _store_meeting_link(self, event: OutboxEvent, meeting_link: str) -> str:
        """Persist a generated link; a retried event reuses the one stored first."""
        stored = await self.workflow_repository.attach_meeting_link(
            EntityKindEnum(event.aggregate_type),
            UUID(event.aggregate_id),
            meeting_link,
        )
        return stored or meeting_link

    def _build_messages(
        self,
        event: OutboxEvent,
        effect: SendCredentialsEmail | SendDecisionNotification,
    ) -> list[NotificationMessage]:
        subject = event.aggregate_type.replace("_", " ")
        if isinstance(effect, SendCredentialsEmail):
            return [
                NotificationMessage(
                    recipient_ref=self._required_ref(effect.user_ref, "user_ref"),
                    template="credentials",
                    title="Your account is ready",
                    body=f"Your {subject} was approved. Sign-in credentials are enclosed.",
                ),
            ]

        body = f"Your {subject} {event.aggregate_id} is now {effect.decision}."
        if effect.reason:
            body = f"{body} Reason: {effect.reason}"
        owner = self._required_ref(effect.user_ref, "user_ref")
        return [
            NotificationMessage(
                recipient_ref=recipient,
                template=f"decision.{effect.decision}",
                title=f"{subject.capitalize()} {effect.decision}",
                body=body,
            )
            for recipient in self._unique_recipients(owner, effect.counterpart_ref)
        ]

    def _calendar_messages(self, effect: ScheduleCalendarEntry, meeting_link: str) -> list[NotificationMessage]:
        when = effect.date.isoformat()
        if effect.time_slot:
            when = f"{when} {effect.time_slot}"
        return [
            NotificationMessage(
                recipient_ref=recipient,
                template="calendar.entry",
                title="Session scheduled",
                body=f"Session on {when} ({effect.duration_minutes} min). Join at {meeting_link}",
            )
            for recipient in self._unique_recipients(*effect.attendee_refs)
        ]

    @staticmethod
    def _required_ref(value: str | None, key: str) -> str:
        if not value:
            raise ValueError(f"Missing required key: {key}")
        return value

    @staticmethod
    def _unique_recipients(*recipients: str | None) -> list[str]:
        unique: list[str] = []
        seen: set[str] = set()
        for recipient in recipients:
            if recipient and recipient not in seen:
                unique.append(recipient)
                seen.add(recipient)
        return unique
