"""Admin business logic layer."""

from __future__ import annotations

from decimal import Decimal

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import EntityKindEnum, OutboxStatusEnum
from app.modules.admin.schemas import AdminOverviewRead, KindOverviewRead, OutboxOverviewRead
from app.modules.admin.stats import average_score, status_breakdown
from app.modules.audit.repository import AuditRepository
from app.modules.revenue.repository import RevenueLedgerRepository
from app.modules.workflow import status_model
from app.modules.workflow.repository import WorkflowRepository
from app.shared.utils import quantize_money, utc_now


class AdminService:
    """Admin domain service."""

    def __init__(
        self,
        workflow_repository: WorkflowRepository,
        audit_repository: AuditRepository,
        revenue_repository: RevenueLedgerRepository,
    ) -> None:
        self.workflow_repository = workflow_repository
        self.audit_repository = audit_repository
        self.revenue_repository = revenue_repository

    async def get_overview(self, actor_ref: str | None, *, max_retries: int) -> AdminOverviewRead:
        """Return dashboard snapshot and record that it was viewed."""
        accrued = await self.revenue_repository.sum_by_aggregate_type()

        kinds = []
        for kind in EntityKindEnum:
            counts = await self.workflow_repository.count_by_status(kind)
            by_status = status_breakdown(kind, counts)
            score = None
            if status_model.is_graded(kind):
                score = average_score(await self.workflow_repository.list_scores(kind))
            kinds.append(
                KindOverviewRead(
                    kind=kind,
                    total=sum(by_status.values()),
                    by_status=by_status,
                    paid_revenue=quantize_money(await self.workflow_repository.sum_paid_revenue(kind)),
                    accrued_revenue=accrued.get(str(kind), quantize_money(Decimal("0"))),
                    average_score=score,
                ),
            )

        outbox_counts = await self.audit_repository.count_outbox_by_status()
        dead_letter = await self.audit_repository.count_dead_letter_outbox(max_retries=max_retries)
        outbox = OutboxOverviewRead(
            max_retries=max_retries,
            pending=outbox_counts.get(OutboxStatusEnum.PENDING, 0),
            processed=outbox_counts.get(OutboxStatusEnum.PROCESSED, 0),
            failed_retryable=max(outbox_counts.get(OutboxStatusEnum.FAILED, 0) - dead_letter, 0),
            failed_dead_letter=dead_letter,
        )

        overview = AdminOverviewRead(generated_at=utc_now(), kinds=kinds, outbox=outbox)
        await self.audit_repository.create_audit_log(
            actor_ref=actor_ref,
            action="admin.overview.view",
            entity_type="admin_overview",
            entity_id=None,
            payload={"generated_at": overview.generated_at.isoformat(), "max_retries": max_retries},
        )
        return overview


async def get_admin_service(session: AsyncSession = Depends(get_db_session)) -> AdminService:
    """Dependency provider for admin service."""
    return AdminService(
        workflow_repository=WorkflowRepository(session),
        audit_repository=AuditRepository(session),
        revenue_repository=RevenueLedgerRepository(session),
    )
