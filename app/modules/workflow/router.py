"""Workflow API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, status

from app.core.enums import EntityKindEnum, PaymentStatusEnum, WorkflowActionEnum
from app.modules.workflow.repository import EntityFilters
from app.modules.workflow.schemas import (
    TransitionPayload,
    TransitionRead,
    WorkflowEntityCreate,
    WorkflowEntityRead,
)
from app.modules.workflow.service import WorkflowService, get_workflow_service
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/workflow", tags=["workflow"])


@router.post("/{kind}", response_model=WorkflowEntityRead, status_code=status.HTTP_201_CREATED)
async def create_entity(
    kind: EntityKindEnum,
    payload: WorkflowEntityCreate,
    service: WorkflowService = Depends(get_workflow_service),
    actor_ref: str | None = Header(default=None, alias="X-Admin-Ref"),
) -> WorkflowEntityRead:
    """Register a pending enrollment, mentorship request or guest booking."""
    entity = await service.create_entity(kind, payload, actor_ref)
    return WorkflowEntityRead.from_entity(entity)


@router.get("/{kind}", response_model=Page[WorkflowEntityRead])
async def list_entities(
    kind: EntityKindEnum,
    status_filter: str | None = Query(default=None, alias="status"),
    owner_ref: str | None = Query(default=None),
    counterpart_ref: str | None = Query(default=None),
    payment_status: PaymentStatusEnum | None = Query(default=None),
    course_id: UUID | None = Query(default=None),
    pagination=Depends(get_pagination_params),
    service: WorkflowService = Depends(get_workflow_service),
) -> Page[WorkflowEntityRead]:
    """List entities of a kind, newest request first."""
    filters = EntityFilters(
        status=status_filter,
        owner_ref=owner_ref,
        counterpart_ref=counterpart_ref,
        payment_status=payment_status,
        course_id=course_id,
    )
    items, total = await service.list_entities(kind, filters, pagination.limit, pagination.offset)
    serialized = [WorkflowEntityRead.from_entity(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/{kind}/{entity_id}", response_model=WorkflowEntityRead)
async def get_entity(
    kind: EntityKindEnum,
    entity_id: UUID,
    service: WorkflowService = Depends(get_workflow_service),
) -> WorkflowEntityRead:
    """Return current persisted snapshot."""
    entity = await service.get_entity(kind, entity_id)
    return WorkflowEntityRead.from_entity(entity)


@router.delete("/{kind}/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entity(
    kind: EntityKindEnum,
    entity_id: UUID,
    service: WorkflowService = Depends(get_workflow_service),
    actor_ref: str | None = Header(default=None, alias="X-Admin-Ref"),
) -> None:
    await service.delete_entity(kind, entity_id, actor_ref)


@router.post("/{kind}/{entity_id}/{action}", response_model=TransitionRead)
async def apply_action(
    kind: EntityKindEnum,
    entity_id: UUID,
    action: WorkflowActionEnum,
    payload: TransitionPayload | None = None,
    service: WorkflowService = Depends(get_workflow_service),
    actor_ref: str | None = Header(default=None, alias="X-Admin-Ref"),
) -> TransitionRead:
    """Approve, reject, confirm, cancel, complete or update payment."""
    applied = await service.apply_action(kind, entity_id, action, payload, actor_ref)
    return TransitionRead(
        entity=WorkflowEntityRead.from_entity(applied.entity),
        effects=[str(effect.effect_type) for effect in applied.effects],
        derived_entity=(
            WorkflowEntityRead.from_entity(applied.derived_entity)
            if applied.derived_entity is not None
            else None
        ),
    )
