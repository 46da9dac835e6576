"""Side-effect records and typed results produced by workflow transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, TypeAlias

from app.core.enums import SideEffectTypeEnum, WorkflowErrorCode
from app.modules.workflow.entities import WorkflowEntity


@dataclass(frozen=True, slots=True)
class SendCredentialsEmail:
    effect_type: ClassVar[SideEffectTypeEnum] = SideEffectTypeEnum.SEND_CREDENTIALS_EMAIL

    user_ref: str | None

    def to_payload(self) -> dict[str, Any]:
        return {"user_ref": self.user_ref}


@dataclass(frozen=True, slots=True)
class SendDecisionNotification:
    effect_type: ClassVar[SideEffectTypeEnum] = SideEffectTypeEnum.SEND_DECISION_NOTIFICATION

    user_ref: str | None
    decision: str
    reason: str | None = None
    counterpart_ref: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "user_ref": self.user_ref,
            "decision": self.decision,
            "reason": self.reason,
            "counterpart_ref": self.counterpart_ref,
        }


@dataclass(frozen=True, slots=True)
class ScheduleCalendarEntry:
    effect_type: ClassVar[SideEffectTypeEnum] = SideEffectTypeEnum.SCHEDULE_CALENDAR_ENTRY

    date: date
    time_slot: str | None
    duration_minutes: int
    meeting_link: str | None = None
    attendee_refs: tuple[str, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "time_slot": self.time_slot,
            "duration_minutes": self.duration_minutes,
            "meeting_link": self.meeting_link,
            "attendee_refs": list(self.attendee_refs),
        }


@dataclass(frozen=True, slots=True)
class AccrueRevenue:
    effect_type: ClassVar[SideEffectTypeEnum] = SideEffectTypeEnum.ACCRUE_REVENUE

    amount: Decimal
    currency: str

    def to_payload(self) -> dict[str, Any]:
        return {"amount": str(self.amount), "currency": self.currency}


SideEffect: TypeAlias = SendCredentialsEmail | SendDecisionNotification | ScheduleCalendarEntry | AccrueRevenue


def effect_from_payload(effect_type: str, payload: dict[str, Any]) -> SideEffect:
    """Rebuild a side-effect record from its outbox payload."""
    match SideEffectTypeEnum(effect_type):
        case SideEffectTypeEnum.SEND_CREDENTIALS_EMAIL:
            return SendCredentialsEmail(user_ref=payload.get("user_ref"))
        case SideEffectTypeEnum.SEND_DECISION_NOTIFICATION:
            return SendDecisionNotification(
                user_ref=payload.get("user_ref"),
                decision=str(payload["decision"]),
                reason=payload.get("reason"),
                counterpart_ref=payload.get("counterpart_ref"),
            )
        case SideEffectTypeEnum.SCHEDULE_CALENDAR_ENTRY:
            return ScheduleCalendarEntry(
                date=date.fromisoformat(str(payload["date"])),
                time_slot=payload.get("time_slot"),
                duration_minutes=int(payload["duration_minutes"]),
                meeting_link=payload.get("meeting_link"),
                attendee_refs=tuple(payload.get("attendee_refs") or ()),
            )
        case SideEffectTypeEnum.ACCRUE_REVENUE:
            return AccrueRevenue(
                amount=Decimal(str(payload["amount"])),
                currency=str(payload["currency"]),
            )


@dataclass(frozen=True, slots=True)
class WorkflowError:
    """Typed, operator-recoverable refusal of a transition."""

    code: WorkflowErrorCode
    message: str


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """Outcome of a transition: a new snapshot with effects, or an error."""

    snapshot: WorkflowEntity | None = None
    effects: tuple[SideEffect, ...] = ()
    error: WorkflowError | None = None
    target_status: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, code: WorkflowErrorCode, message: str) -> "TransitionResult":
        return cls(error=WorkflowError(code=code, message=message))
