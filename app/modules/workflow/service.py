"""Workflow business logic layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from uuid import UUID, uuid4

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import (
    EntityKindEnum,
    PaymentStatusEnum,
    WorkflowActionEnum,
    WorkflowErrorCode,
)
from app.core.metrics import record_workflow_transition
from app.modules.audit.repository import AuditRepository
from app.modules.workflow import status_model
from app.modules.workflow.effects import SideEffect
from app.modules.workflow.engine import derive_mentorship_booking, transition
from app.modules.workflow.entities import Schedule, WorkflowEntity
from app.modules.workflow.repository import EntityFilters, WorkflowRepository
from app.modules.workflow.schemas import TransitionPayload, WorkflowEntityCreate
from app.shared.exceptions import BusinessRuleException, NotFoundException, WorkflowRejectedException
from app.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


def effect_idempotency_key(
    kind: EntityKindEnum,
    entity_id: UUID,
    target_status: str,
    effect: SideEffect,
) -> str:
    """Key identifying one side effect of one transition, stable across retries."""
    return f"{kind}:{entity_id}:{target_status}:{effect.effect_type}"


@dataclass(slots=True)
class AppliedTransition:
    entity: WorkflowEntity
    effects: tuple[SideEffect, ...]
    derived_entity: WorkflowEntity | None = None


class WorkflowService:
    """Approval and booking workflow over enrollments, mentorship and guest bookings."""

    def __init__(
        self,
        repository: WorkflowRepository,
        audit_repository: AuditRepository,
    ) -> None:
        self.repository = repository
        self.audit_repository = audit_repository

    async def create_entity(
        self,
        kind: EntityKindEnum,
        payload: WorkflowEntityCreate,
        actor_ref: str | None = None,
    ) -> WorkflowEntity:
        """Register a new pending request."""
        if kind == EntityKindEnum.MENTORSHIP_BOOKING:
            raise BusinessRuleException("Mentorship bookings are created by approving a mentorship request")

        schedule = None
        if payload.preferred_date is not None or payload.preferred_time is not None:
            schedule = Schedule(
                date=payload.preferred_date,
                time_slot=payload.preferred_time,
                duration_minutes=settings.default_session_minutes,
            )

        snapshot = WorkflowEntity(
            id=uuid4(),
            kind=kind,
            lifecycle_status=status_model.initial_status(kind),
            requested_at=utc_now(),
            payment_status=PaymentStatusEnum.PENDING if status_model.has_payment(kind) else None,
            schedule=schedule,
            owner_ref=payload.owner_ref,
            counterpart_ref=payload.counterpart_ref,
            price=payload.price,
            currency=(payload.currency or settings.default_currency).upper(),
        )
        entity = await self.repository.create_entity(snapshot, **self._kind_columns(kind, payload))

        await self.audit_repository.create_audit_log(
            actor_ref=actor_ref,
            action=f"{kind}.create",
            entity_type=str(kind),
            entity_id=str(entity.id),
            payload={"owner_ref": entity.owner_ref, "price": str(entity.price) if entity.price is not None else None},
        )
        logger.info("Created %s %s", kind, entity.id)
        return entity

    @staticmethod
    def _kind_columns(kind: EntityKindEnum, payload: WorkflowEntityCreate) -> dict:
        if kind == EntityKindEnum.ENROLLMENT:
            if payload.subject_ref is None:
                return {}
            try:
                return {"course_id": UUID(payload.subject_ref)}
            except ValueError as exc:
                raise BusinessRuleException("Enrollment course reference must be a UUID") from exc
        return {"message": payload.message, "preferred_topics": list(payload.preferred_topics)}

    async def get_entity(self, kind: EntityKindEnum, entity_id: UUID) -> WorkflowEntity:
        entity = await self.repository.load_entity(kind, entity_id)
        if entity is None:
            raise NotFoundException(f"{kind} {entity_id} not found")
        return entity

    async def list_entities(
        self,
        kind: EntityKindEnum,
        filters: EntityFilters,
        limit: int,
        offset: int,
    ) -> tuple[list[WorkflowEntity], int]:
        if filters.status is not None:
            try:
                status_model.parse_status(kind, filters.status)
            except ValueError as exc:
                raise BusinessRuleException(f"Unknown {kind} status: {filters.status}") from exc
        if filters.payment_status is not None and not status_model.has_payment(kind):
            raise BusinessRuleException(f"{kind} has no payment status")
        if filters.course_id is not None and kind != EntityKindEnum.ENROLLMENT:
            raise BusinessRuleException("Only enrollments can be filtered by course")
        return await self.repository.list_entities(kind, filters, limit, offset)

    async def delete_entity(self, kind: EntityKindEnum, entity_id: UUID, actor_ref: str | None = None) -> None:
        """Remove an entity. Side effects already enqueued for it still run."""
        entity = await self.get_entity(kind, entity_id)
        if not await self.repository.delete_entity(kind, entity_id):
            raise NotFoundException(f"{kind} {entity_id} not found")
        await self.audit_repository.create_audit_log(
            actor_ref=actor_ref,
            action=f"{kind}.delete",
            entity_type=str(kind),
            entity_id=str(entity_id),
            payload={"status": str(entity.lifecycle_status), "owner_ref": entity.owner_ref},
        )
        logger.info("Deleted %s %s", kind, entity_id)

    async def apply_action(
        self,
        kind: EntityKindEnum,
        entity_id: UUID,
        action: WorkflowActionEnum,
        payload: TransitionPayload | None = None,
        actor_ref: str | None = None,
    ) -> AppliedTransition:
        """Run one administrative action as a compare-and-swap transition.

        The engine decides on the snapshot read here; the write only lands if
        the stored version is unchanged, and the resulting side effects are
        enqueued in the same transaction under per-transition idempotency keys.
        """
        entity = await self.get_entity(kind, entity_id)
        payload = payload or TransitionPayload()
        if payload.duration_minutes is None:
            payload = payload.model_copy(update={"duration_minutes": settings.default_session_minutes})

        result = transition(entity, action, payload, now=utc_now())
        if result.error is not None:
            logger.warning(
                "Rejected %s on %s %s: %s",
                action,
                kind,
                entity_id,
                result.error.code,
            )
            record_workflow_transition(kind, action, result.error.code)
            raise WorkflowRejectedException(result.error.code, result.error.message)

        saved = await self.repository.save_entity(kind, entity.id, entity.version, result.snapshot)
        if not saved:
            logger.warning("Concurrent update detected for %s %s at version %s", kind, entity_id, entity.version)
            record_workflow_transition(kind, action, "conflict")
            raise WorkflowRejectedException(
                WorkflowErrorCode.ALREADY_FINALIZED,
                f"{kind} {entity_id} was changed by another action; reload and retry",
            )

        updated = replace(result.snapshot, version=entity.version + 1)
        target_status = result.target_status or str(updated.lifecycle_status)
        for effect in result.effects:
            await self.audit_repository.create_outbox_event(
                aggregate_type=str(kind),
                aggregate_id=str(entity.id),
                event_type=str(effect.effect_type),
                idempotency_key=effect_idempotency_key(kind, entity.id, target_status, effect),
                payload=effect.to_payload(),
            )

        derived = None
        if kind == EntityKindEnum.MENTORSHIP_REQUEST and action == WorkflowActionEnum.APPROVE:
            derived = await self.repository.create_entity(
                derive_mentorship_booking(updated, booking_id=uuid4()),
                request_id=updated.id,
            )

        from_status = (
            entity.payment_status if action in status_model.PAYMENT_ACTIONS else entity.lifecycle_status
        )
        await self.audit_repository.create_audit_log(
            actor_ref=actor_ref,
            action=f"{kind}.{action}",
            entity_type=str(kind),
            entity_id=str(entity.id),
            payload={
                "from_status": str(from_status),
                "to_status": target_status,
                "effects": [str(effect.effect_type) for effect in result.effects],
                "derived_entity_id": str(derived.id) if derived is not None else None,
            },
        )
        record_workflow_transition(kind, action, "applied")
        logger.info("Applied %s on %s %s: %s -> %s", action, kind, entity_id, from_status, target_status)

        return AppliedTransition(entity=updated, effects=result.effects, derived_entity=derived)


async def get_workflow_service(session: AsyncSession = Depends(get_db_session)) -> WorkflowService:
    """Dependency provider for workflow service."""
    return WorkflowService(
        repository=WorkflowRepository(session),
        audit_repository=AuditRepository(session),
    )
